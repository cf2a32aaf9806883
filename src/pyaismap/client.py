"""High-level async client wiring the feed engines to one feature store."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

import aiohttp

from pyaismap._transport import HttpTransport, Transport
from pyaismap.config import AisMapConfig
from pyaismap.exceptions import AisMapError
from pyaismap.ingestion.boundaries import load_boundary_features
from pyaismap.ingestion.list_sync import ListSyncEngine, PollResult
from pyaismap.ingestion.route import RouteFetchController, RouteLoadState, RouteResult
from pyaismap.models.feature import FeaturePartition, MapFeature
from pyaismap.models.requests import SearchField
from pyaismap.models.vessel import VesselRecord
from pyaismap.state.selection import SearchSelection
from pyaismap.state.store import FeatureStore

_logger = logging.getLogger(__name__)


class AisMapClient:
    """Composition root for the vessel map.

    Owns the :class:`FeatureStore` and hands it to the list sync engine
    and the route controller. The render surface reads ``client.store``.

    Usage::

        async with AisMapClient(config) as client:
            client.load_boundaries("data/boundaries.geojson")
            client.start()
            await client.set_query(SearchField.VESSEL_NAME, "Alpha")
            await client.select("574001230")
    """

    def __init__(
        self,
        config: AisMapConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        on_error: Callable[[AisMapError], None] | None = None,
        on_route_state: Callable[[RouteLoadState], None] | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._on_error = on_error
        self._on_route_state = on_route_state
        self.store = FeatureStore()
        self._sync: ListSyncEngine | None = None
        self._routes: RouteFetchController | None = None
        self._selection: SearchSelection | None = None
        if transport is not None:
            self._wire(transport)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> AisMapClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
            self._wire(self._transport)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._sync is not None:
            await self._sync.shutdown()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    def _wire(self, transport: Transport) -> None:
        self._sync = ListSyncEngine(self._config, transport, self.store, on_error=self._on_error)
        self._routes = RouteFetchController(
            self._config,
            transport,
            self.store,
            on_error=self._on_error,
            on_state_change=self._on_route_state,
        )
        self._selection = SearchSelection(self._sync, self._routes)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_sync(self) -> ListSyncEngine:
        if self._sync is None:
            raise AisMapError("Client not initialized. Use 'async with AisMapClient(...) as client:'")
        return self._sync

    def _require_routes(self) -> RouteFetchController:
        if self._routes is None:
            raise AisMapError("Client not initialized. Use 'async with AisMapClient(...) as client:'")
        return self._routes

    def _require_selection(self) -> SearchSelection:
        if self._selection is None:
            raise AisMapError("Client not initialized. Use 'async with AisMapClient(...) as client:'")
        return self._selection

    @property
    def sync(self) -> ListSyncEngine:
        return self._require_sync()

    @property
    def routes(self) -> RouteFetchController:
        return self._require_routes()

    @property
    def selection(self) -> SearchSelection:
        return self._require_selection()

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def start(self, interval: float | None = None) -> None:
        """Start periodic vessel list polling (first poll fires immediately)."""
        self._require_sync().start(interval)

    def stop(self) -> None:
        self._require_sync().stop()

    async def refresh(self) -> PollResult:
        """Poll the vessel list now with the active query."""
        return await self._require_sync().poll_once()

    @property
    def vessels(self) -> tuple[VesselRecord, ...]:
        return self._require_sync().records

    # ------------------------------------------------------------------
    # Search / selection
    # ------------------------------------------------------------------

    async def set_query(self, field: SearchField | str, value: str | None) -> PollResult:
        return await self._require_selection().set_query(field, value)

    async def select(self, mmsi: str | int | None, hours: int | None = None) -> RouteResult | None:
        return await self._require_selection().select(mmsi, hours)

    def clear_selection(self) -> None:
        self._require_selection().clear_selection()

    # ------------------------------------------------------------------
    # Static layers
    # ------------------------------------------------------------------

    def load_boundaries(
        self,
        *sources: Mapping[str, Any] | str | Path,
        labels: Iterable[MapFeature] = (),
    ) -> int:
        """Replace the boundary partition with the given GeoJSON sources and labels.

        Returns the number of boundary features now in the store.
        """
        features: list[MapFeature] = []
        for source in sources:
            layer = Path(source).stem if isinstance(source, (str, Path)) else None
            features.extend(load_boundary_features(source, layer=layer))
        features.extend(labels)
        self.store.replace_partition(FeaturePartition.BOUNDARY, features)
        _logger.debug("Loaded %d boundary features", len(features))
        return self.store.count(FeaturePartition.BOUNDARY)

    def geojson(self, partition: FeaturePartition | None = None) -> dict[str, Any]:
        return self.store.to_geojson(partition)
