"""Translate parsed records into renderable map features."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pyaismap.models.feature import FeaturePartition, Geometry, MapFeature
from pyaismap.models.route import EndpointMarker, Route
from pyaismap.models.vessel import VesselRecord

_logger = logging.getLogger(__name__)


def vessel_feature(record: VesselRecord) -> MapFeature | None:
    """Point feature for a vessel, or None when it has no usable position."""
    if record.latitude is None or record.longitude is None:
        return None
    return MapFeature(
        id=record.mmsi,
        partition=FeaturePartition.VESSEL,
        geometry=Geometry.point(record.longitude, record.latitude),
        properties={
            "mmsi": record.mmsi,
            "name": record.display_name,
            "imo": record.imo,
            "call_sign": record.call_sign,
            "course": record.course,
            "ship_type": record.ship_type,
            "length": record.length,
            "width": record.width,
            "destination": record.destination,
            "is_aid_to_navigation": record.is_aid_to_navigation,
        },
    )


def vessel_features(records: Iterable[VesselRecord]) -> list[MapFeature]:
    features: list[MapFeature] = []
    skipped = 0
    for record in records:
        feature = vessel_feature(record)
        if feature is None:
            skipped += 1
            continue
        features.append(feature)
    if skipped:
        _logger.debug("Skipped %d vessels without a position", skipped)
    return features


def route_line_id(mmsi: str) -> str:
    return f"route:{mmsi}"


def route_marker_id(mmsi: str) -> str:
    return f"route:{mmsi}:marker"


def route_features(route: Route, marker: EndpointMarker) -> list[MapFeature]:
    """Line across the whole track plus one endpoint marker.

    A single-point route yields only the marker; an empty route yields
    nothing.
    """
    endpoint = route.endpoint(marker)
    if endpoint is None:
        return []

    features: list[MapFeature] = []
    if len(route.points) >= 2:
        features.append(
            MapFeature(
                id=route_line_id(route.mmsi),
                partition=FeaturePartition.PATH,
                geometry=Geometry.line(route.coordinates),
                properties={"mmsi": route.mmsi, "role": "track", "point_count": len(route.points)},
            )
        )
    features.append(
        MapFeature(
            id=route_marker_id(route.mmsi),
            partition=FeaturePartition.PATH,
            geometry=Geometry.point(endpoint.longitude, endpoint.latitude),
            properties={
                "mmsi": route.mmsi,
                "role": "endpoint",
                "endpoint": marker.value,
                "timestamp": endpoint.timestamp.isoformat() if endpoint.timestamp else None,
            },
        )
    )
    return features
