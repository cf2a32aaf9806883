"""Static boundary layers.

Boundary shapes (territorial polygons, offshore lines) and map labels are
loaded once at startup and handed to the store wholesale.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from pyaismap.models.feature import FeaturePartition, Geometry, GeometryType, MapFeature

_GEOMETRY_TYPES = frozenset(kind.value for kind in GeometryType)


def _read_source(source: Mapping[str, Any] | str | Path) -> Mapping[str, Any]:
    if isinstance(source, Mapping):
        return source
    path = Path(source)
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, Mapping):
        raise ValueError(f"{path} does not contain a GeoJSON object")
    return data


def _boundary_feature(raw: Mapping[str, Any], layer: str | None) -> MapFeature:
    geometry = raw.get("geometry")
    if not isinstance(geometry, Mapping):
        raise ValueError("GeoJSON feature has no geometry")
    properties = dict(raw.get("properties") or {})
    if layer is not None:
        properties.setdefault("layer", layer)
    raw_id = raw.get("id")
    feature_id = str(raw_id) if raw_id not in (None, "") else str(uuid.uuid4())
    try:
        return MapFeature(
            id=feature_id,
            partition=FeaturePartition.BOUNDARY,
            geometry=Geometry.model_validate(dict(geometry)),
            properties=properties,
        )
    except ValidationError as exc:
        raise ValueError(f"invalid GeoJSON geometry: {exc}") from exc


def load_boundary_features(
    source: Mapping[str, Any] | str | Path,
    *,
    layer: str | None = None,
) -> list[MapFeature]:
    """Parse a GeoJSON FeatureCollection, Feature or bare geometry.

    Parameters
    ----------
    source
        A decoded GeoJSON mapping or a path to a ``.json``/``.geojson`` file.
    layer
        Optional layer name stored in each feature's ``layer`` property.

    Raises
    ------
    ValueError
        If the document is not GeoJSON this loader understands.
    """
    document = _read_source(source)
    kind = document.get("type")
    if kind == "FeatureCollection":
        features = document.get("features")
        if not isinstance(features, list):
            raise ValueError("FeatureCollection has no features list")
        return [_boundary_feature(item, layer) for item in features if isinstance(item, Mapping)]
    if kind == "Feature":
        return [_boundary_feature(document, layer)]
    if kind in _GEOMETRY_TYPES:
        return [_boundary_feature({"geometry": document}, layer)]
    raise ValueError(f"unsupported GeoJSON type: {kind!r}")


def label_feature(text: str, longitude: float, latitude: float, *, feature_id: str | None = None) -> MapFeature:
    """Point feature carrying a text label (e.g. an archipelago name)."""
    return MapFeature(
        id=feature_id or f"label:{text}",
        partition=FeaturePartition.BOUNDARY,
        geometry=Geometry.point(longitude, latitude),
        properties={"label": text, "name": text},
    )
