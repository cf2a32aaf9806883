"""On-demand route fetching for the selected vessel.

The path partition always reflects the most recently completed route
request for the *currently selected* vessel. Every request is tagged with
the selection it was issued under (see :mod:`pyaismap.state.policy`);
responses for a superseded selection are dropped without touching the
store or reporting errors.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from pyaismap._api.vessels import fetch_route_records
from pyaismap._transport import Transport
from pyaismap.config import AisMapConfig
from pyaismap.exceptions import AisMapError
from pyaismap.ingestion.features import route_features
from pyaismap.ingestion.normalize import normalize_records
from pyaismap.models.feature import FeaturePartition
from pyaismap.models.requests import MmsiRequest, RouteRequest
from pyaismap.models.route import EndpointMarker, Route
from pyaismap.state.policy import RouteTag, is_current_route
from pyaismap.state.store import FeatureStore

_logger = logging.getLogger(__name__)

ErrorCallback = Callable[[AisMapError], None]


class RouteLoadState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


class RouteStatus(StrEnum):
    APPLIED = "applied"
    DISCARDED = "discarded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RouteResult:
    status: RouteStatus
    mmsi: str
    route: Route | None = None
    error: AisMapError | None = None


class RouteFetchController:
    """Maintains the path partition for the selected vessel."""

    def __init__(
        self,
        config: AisMapConfig,
        transport: Transport,
        store: FeatureStore,
        *,
        marker: EndpointMarker | None = None,
        on_error: ErrorCallback | None = None,
        on_state_change: Callable[[RouteLoadState], None] | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._store = store
        self._marker = marker if marker is not None else config.endpoint_marker
        self._on_error = on_error
        self._on_state_change = on_state_change
        self._selected: str | None = None
        self._epoch = 0
        self._pending = 0
        self._state = RouteLoadState.IDLE
        self._route: Route | None = None
        self.last_error: AisMapError | None = None

    @property
    def selected(self) -> str | None:
        return self._selected

    @property
    def state(self) -> RouteLoadState:
        return self._state

    @property
    def loading(self) -> bool:
        return self._state == RouteLoadState.LOADING

    @property
    def route(self) -> Route | None:
        """The route currently rendered in the path partition."""
        return self._route

    @property
    def marker(self) -> EndpointMarker:
        return self._marker

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, mmsi: str | int | None) -> bool:
        """Make *mmsi* the selection. Returns True when the selection changed.

        Changing the selection invalidates in-flight requests and clears a
        route drawn for the previous vessel.
        """
        if mmsi is None:
            had_selection = self._selected is not None
            self.clear_selection()
            return had_selection

        request = MmsiRequest(mmsi=mmsi)
        if request.mmsi == self._selected:
            return False

        self._selected = request.mmsi
        self._invalidate()
        if self._route is not None and self._route.mmsi != request.mmsi:
            self._route = None
            self._store.clear_partition(FeaturePartition.PATH)
        self._set_state(RouteLoadState.IDLE)
        return True

    def clear_selection(self) -> None:
        """Clear the selection, the path partition and the loading flag."""
        self._selected = None
        self._invalidate()
        self._route = None
        self.last_error = None
        self._store.clear_partition(FeaturePartition.PATH)
        self._set_state(RouteLoadState.IDLE)

    def _invalidate(self) -> None:
        self._epoch += 1
        self._pending = 0

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def fetch_route(self, mmsi: str | int, hours: int | None = None) -> RouteResult:
        """Fetch *mmsi*'s track over the last *hours* and draw it if still current.

        Selects *mmsi* first when it is not already the selection.
        """
        request = RouteRequest(mmsi=mmsi, hours=hours if hours is not None else self._config.route_hours)
        self.select(request.mmsi)
        tag = RouteTag(mmsi=request.mmsi, epoch=self._epoch)
        self._pending += 1
        self._set_state(RouteLoadState.LOADING)

        try:
            raw = await fetch_route_records(self._config, self._transport, request)
        except AisMapError as exc:
            if not self._is_current(tag):
                return self._discarded(tag)
            self._settle(RouteLoadState.ERROR)
            self._report(exc)
            return RouteResult(status=RouteStatus.FAILED, mmsi=tag.mmsi, error=exc)
        except asyncio.CancelledError:
            if self._is_current(tag):
                self._settle(RouteLoadState.IDLE)
            raise

        if not self._is_current(tag):
            return self._discarded(tag)

        route = Route.from_records(tag.mmsi, normalize_records(raw))
        self._store.replace_partition(FeaturePartition.PATH, route_features(route, self._marker))
        self._route = route
        self.last_error = None
        self._settle(RouteLoadState.IDLE)
        _logger.debug("Path partition replaced: %s (%d points)", tag.mmsi, len(route.points))
        return RouteResult(status=RouteStatus.APPLIED, mmsi=tag.mmsi, route=route)

    def _is_current(self, tag: RouteTag) -> bool:
        return is_current_route(tag, selected=self._selected, epoch=self._epoch)

    def _discarded(self, tag: RouteTag) -> RouteResult:
        _logger.debug("Discarding route response for %s; selection is now %s", tag.mmsi, self._selected)
        return RouteResult(status=RouteStatus.DISCARDED, mmsi=tag.mmsi)

    def _settle(self, outcome: RouteLoadState) -> None:
        self._pending = max(0, self._pending - 1)
        self._set_state(RouteLoadState.LOADING if self._pending else outcome)

    def _set_state(self, state: RouteLoadState) -> None:
        if state == self._state:
            return
        self._state = state
        if self._on_state_change is None:
            return
        try:
            self._on_state_change(state)
        except Exception:
            _logger.debug("on_state_change callback failed", exc_info=True)

    def _report(self, error: AisMapError) -> None:
        self.last_error = error
        _logger.warning("Route fetch failed: %s", error)
        if self._on_error is None:
            return
        try:
            self._on_error(error)
        except Exception:
            _logger.debug("on_error callback failed", exc_info=True)
