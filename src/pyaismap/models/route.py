"""Historical route models."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from pyaismap.ingestion.normalize import safe_float
from pyaismap.models._base import AisBaseModel

_logger = logging.getLogger(__name__)


class EndpointMarker(StrEnum):
    """Which end of a route carries the highlighted marker."""

    FIRST = "first"
    LAST = "last"


class TrackPoint(AisBaseModel):
    """A single historical position. Ordering carries chronology."""

    latitude: float = Field(validation_alias=AliasChoices("Latitude", "Lat", "latitude"))
    longitude: float = Field(validation_alias=AliasChoices("Longitude", "Lon", "Lng", "longitude"))
    timestamp: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("ThoiGian", "Timestamp", "Time", "timestamp"),
    )

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("timestamp", mode="wrap")
    @classmethod
    def _lenient_timestamp(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> datetime | None:
        try:
            return handler(value)
        except ValidationError:
            return None

    @property
    def coordinate(self) -> list[float]:
        """GeoJSON ``[longitude, latitude]`` pair."""
        return [self.longitude, self.latitude]


class Route(BaseModel):
    """Ordered track of one vessel, oldest point first."""

    model_config = ConfigDict(frozen=True)

    mmsi: str
    points: tuple[TrackPoint, ...] = ()

    @classmethod
    def from_records(cls, mmsi: str, records: Iterable[Any]) -> Route:
        """Build a route keeping input order, dropping unparseable points."""
        points: list[TrackPoint] = []
        dropped = 0
        for record in records:
            try:
                points.append(TrackPoint.model_validate(record))
            except ValidationError:
                dropped += 1
        if dropped:
            _logger.debug("Dropped %d route points without a position for %s", dropped, mmsi)
        return cls(mmsi=mmsi, points=tuple(points))

    @property
    def coordinates(self) -> list[list[float]]:
        return [point.coordinate for point in self.points]

    def endpoint(self, marker: EndpointMarker) -> TrackPoint | None:
        if not self.points:
            return None
        return self.points[0] if marker == EndpointMarker.FIRST else self.points[-1]
