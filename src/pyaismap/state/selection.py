"""Search and selection state.

Mediates between user input (search box, map clicks, list clicks) and the
two fetchers. Search is an explicit action, so it polls immediately instead
of waiting for the next scheduled tick.
"""

from __future__ import annotations

from pyaismap.ingestion.list_sync import ListSyncEngine, PollResult, PollStatus
from pyaismap.ingestion.route import RouteFetchController, RouteLoadState, RouteResult
from pyaismap.models.requests import SearchField, SearchQuery
from pyaismap.models.vessel import VesselRecord


class SearchSelection:
    """Active query, its results and the single selected vessel."""

    def __init__(self, sync: ListSyncEngine, routes: RouteFetchController) -> None:
        self._sync = sync
        self._routes = routes

    @property
    def query(self) -> SearchQuery:
        return self._sync.query

    @property
    def results(self) -> tuple[VesselRecord, ...]:
        return self._sync.records

    @property
    def selected(self) -> str | None:
        return self._routes.selected

    @property
    def selected_record(self) -> VesselRecord | None:
        selected = self._routes.selected
        if selected is None:
            return None
        return next((record for record in self._sync.records if record.mmsi == selected), None)

    @property
    def route_state(self) -> RouteLoadState:
        return self._routes.state

    async def set_query(self, field: SearchField | str, value: str | None) -> PollResult:
        """Filter the vessel list on *field*; an empty *value* lists everything.

        When a poll is already in flight the new query is re-run right after
        it, and this call waits for that outcome.
        """
        query = SearchQuery(field=SearchField(field), value=value or "")
        result = await self._sync.poll_once(query)
        if result.status == PollStatus.SKIPPED:
            settled = await self._sync.wait_idle()
            if settled is not None:
                return settled
        return result

    async def clear_query(self) -> PollResult:
        return await self.set_query(self._sync.query.field, "")

    async def select(self, mmsi: str | int | None, hours: int | None = None) -> RouteResult | None:
        """Select a vessel and fetch its route; ``None`` clears the selection."""
        if mmsi is None:
            self._routes.clear_selection()
            return None
        return await self._routes.fetch_route(mmsi, hours)

    def clear_selection(self) -> None:
        self._routes.clear_selection()
