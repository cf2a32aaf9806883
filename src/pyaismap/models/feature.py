"""Renderable map feature model."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FeaturePartition(StrEnum):
    """Rendering role of a feature. Partitions never share entities."""

    VESSEL = "vessel"
    PATH = "path"
    BOUNDARY = "boundary"


class GeometryType(StrEnum):
    POINT = "Point"
    MULTI_POINT = "MultiPoint"
    LINE_STRING = "LineString"
    MULTI_LINE_STRING = "MultiLineString"
    POLYGON = "Polygon"
    MULTI_POLYGON = "MultiPolygon"


class Geometry(BaseModel):
    """GeoJSON geometry; coordinates are in ``[longitude, latitude]`` order."""

    model_config = ConfigDict(frozen=True)

    type: GeometryType
    coordinates: Any

    @classmethod
    def point(cls, longitude: float, latitude: float) -> Geometry:
        return cls(type=GeometryType.POINT, coordinates=[longitude, latitude])

    @classmethod
    def line(cls, coordinates: list[list[float]]) -> Geometry:
        return cls(type=GeometryType.LINE_STRING, coordinates=coordinates)


class MapFeature(BaseModel):
    """A renderable entity living in exactly one partition."""

    model_config = ConfigDict(frozen=True)

    id: str
    partition: FeaturePartition
    geometry: Geometry
    properties: dict[str, Any] = Field(default_factory=dict)

    @field_validator("id")
    @classmethod
    def _id_non_empty(cls, value: str) -> str:
        feature_id = value.strip()
        if not feature_id:
            raise ValueError("feature id must be non-empty")
        return feature_id

    def to_geojson(self) -> dict[str, Any]:
        return {
            "type": "Feature",
            "id": self.id,
            "geometry": self.geometry.model_dump(mode="json"),
            "properties": {**self.properties, "partition": self.partition.value},
        }
