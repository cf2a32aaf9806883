"""Data models for vessel records, routes and map features."""

from pyaismap.models.feature import FeaturePartition, Geometry, GeometryType, MapFeature
from pyaismap.models.requests import MmsiRequest, RouteRequest, SearchField, SearchQuery
from pyaismap.models.route import EndpointMarker, Route, TrackPoint
from pyaismap.models.vessel import VesselRecord

__all__ = [
    "EndpointMarker",
    "FeaturePartition",
    "Geometry",
    "GeometryType",
    "MapFeature",
    "MmsiRequest",
    "Route",
    "RouteRequest",
    "SearchField",
    "SearchQuery",
    "TrackPoint",
    "VesselRecord",
]
