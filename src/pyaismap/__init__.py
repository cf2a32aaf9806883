"""pyaismap - Async vessel feed synchronization for AIS map views."""

from pyaismap._constants import VERSION as __version__
from pyaismap.client import AisMapClient
from pyaismap.config import AisMapConfig
from pyaismap.exceptions import (
    AisConfigError,
    AisMalformedResponseError,
    AisMapError,
    AisNetworkError,
    FailureKind,
)
from pyaismap.ingestion.boundaries import label_feature, load_boundary_features
from pyaismap.ingestion.list_sync import ListSyncEngine, PollResult, PollStatus
from pyaismap.ingestion.normalize import strip_reference_markers
from pyaismap.ingestion.route import RouteFetchController, RouteLoadState, RouteResult, RouteStatus
from pyaismap.models import (
    EndpointMarker,
    FeaturePartition,
    Geometry,
    GeometryType,
    MapFeature,
    Route,
    RouteRequest,
    SearchField,
    SearchQuery,
    TrackPoint,
    VesselRecord,
)
from pyaismap.state.events import PartitionChange
from pyaismap.state.selection import SearchSelection
from pyaismap.state.store import FeatureStore

__all__ = [
    "__version__",
    "AisConfigError",
    "AisMalformedResponseError",
    "AisMapClient",
    "AisMapConfig",
    "AisMapError",
    "AisNetworkError",
    "EndpointMarker",
    "FailureKind",
    "FeaturePartition",
    "FeatureStore",
    "Geometry",
    "GeometryType",
    "ListSyncEngine",
    "MapFeature",
    "PartitionChange",
    "PollResult",
    "PollStatus",
    "Route",
    "RouteFetchController",
    "RouteLoadState",
    "RouteRequest",
    "RouteResult",
    "RouteStatus",
    "SearchField",
    "SearchQuery",
    "SearchSelection",
    "TrackPoint",
    "VesselRecord",
    "label_feature",
    "load_boundary_features",
    "strip_reference_markers",
]
