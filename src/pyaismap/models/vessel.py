"""Vessel record model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pyaismap.ingestion.normalize import safe_bool, safe_float, safe_int, safe_str, safe_token
from pyaismap.models._base import AisBaseModel


class VesselRecord(AisBaseModel):
    """One row of the vessel list query.

    Fields are mapped from the PascalCase keys returned by the list
    procedure. Every poll replaces the record wholesale; only ``mmsi``
    is stable across polls.
    """

    mmsi: str = Field(validation_alias=AliasChoices("MMSI", "Mmsi", "mmsi"))
    """Maritime Mobile Service Identity, the vessel identity."""
    name: str = Field(default="", validation_alias=AliasChoices("VesselName", "TenTau", "ShipName", "Name", "name"))
    imo: str | None = Field(default=None, validation_alias=AliasChoices("IMO", "Imo", "imo"))
    call_sign: str | None = Field(default=None, validation_alias=AliasChoices("CallSign", "Callsign", "call_sign"))
    latitude: float | None = Field(default=None, validation_alias=AliasChoices("Latitude", "Lat", "latitude"))
    """Latitude in degrees."""
    longitude: float | None = Field(
        default=None,
        validation_alias=AliasChoices("Longitude", "Lon", "Lng", "longitude"),
    )
    """Longitude in degrees."""
    course: float | None = Field(
        default=None,
        validation_alias=AliasChoices("COG", "Course", "CourseOverGround", "course"),
    )
    """Course over ground in degrees (0-359)."""
    ship_type: int | None = Field(
        default=None,
        validation_alias=AliasChoices("ShipType", "ShipTypeCode", "VesselType", "ship_type"),
    )
    length: float | None = Field(default=None, validation_alias=AliasChoices("Length", "length"))
    width: float | None = Field(default=None, validation_alias=AliasChoices("Width", "Beam", "width"))
    destination: str | None = Field(default=None, validation_alias=AliasChoices("Destination", "destination"))
    is_aid_to_navigation: bool = Field(
        default=False,
        validation_alias=AliasChoices("IsAtoN", "IsAidToNavigation", "AidToNavigation", "is_aid_to_navigation"),
    )
    """True for static navigation markers rather than moving vessels."""

    @field_validator("mmsi", mode="before")
    @classmethod
    def _coerce_mmsi(cls, value: Any) -> str:
        token = safe_token(value)
        if token is None:
            raise ValueError("mmsi must be non-empty")
        return token

    @field_validator("imo", mode="before")
    @classmethod
    def _coerce_imo(cls, value: Any) -> str | None:
        return safe_token(value)

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str:
        return safe_str(value) or ""

    @field_validator("call_sign", "destination", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("latitude", mode="before")
    @classmethod
    def _coerce_latitude(cls, value: Any) -> float | None:
        parsed = safe_float(value)
        if parsed is None or not -90.0 <= parsed <= 90.0:
            return None
        return parsed

    @field_validator("longitude", mode="before")
    @classmethod
    def _coerce_longitude(cls, value: Any) -> float | None:
        parsed = safe_float(value)
        if parsed is None or not -180.0 <= parsed <= 180.0:
            return None
        return parsed

    @field_validator("course", mode="before")
    @classmethod
    def _coerce_course(cls, value: Any) -> float | None:
        # 360 is the AIS "not available" value.
        parsed = safe_float(value)
        if parsed is None or not 0.0 <= parsed < 360.0:
            return None
        return parsed

    @field_validator("ship_type", mode="before")
    @classmethod
    def _coerce_ship_type(cls, value: Any) -> int | None:
        return safe_int(value)

    @field_validator("length", "width", mode="before")
    @classmethod
    def _coerce_dimension(cls, value: Any) -> float | None:
        parsed = safe_float(value)
        if parsed is None or parsed < 0:
            return None
        return parsed

    @field_validator("is_aid_to_navigation", mode="before")
    @classmethod
    def _coerce_aton(cls, value: Any) -> bool:
        return bool(safe_bool(value))

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def display_name(self) -> str:
        return self.name or self.mmsi
