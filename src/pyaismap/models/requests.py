"""Pydantic request models for client entrypoints.

These models provide a consistent "validate -> normalize -> execute" flow.
They are used internally by the sync engines and the selection state.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pyaismap.ingestion.normalize import safe_token


class SearchField(StrEnum):
    """Fields the vessel list procedure can be filtered on."""

    VESSEL_NAME = "VesselName"
    MMSI = "MMSI"
    IMO = "IMO"
    CALL_SIGN = "CallSign"


class SearchQuery(BaseModel):
    """Active list filter. An empty value means "no filter"."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    field: SearchField = SearchField.VESSEL_NAME
    value: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.value

    def as_params(self) -> dict[str, str]:
        """Procedure parameters (``thamSo``) for this query."""
        if self.is_empty:
            return {}
        return {self.field.value: self.value}


class MmsiRequest(BaseModel):
    """Request containing a vessel identity."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    mmsi: str

    @field_validator("mmsi", mode="before")
    @classmethod
    def _coerce_mmsi(cls, value: Any) -> str:
        mmsi = safe_token(value)
        if mmsi is None:
            raise ValueError("mmsi must be non-empty")
        return mmsi


class RouteRequest(MmsiRequest):
    """Route lookup over the last ``hours`` hours."""

    hours: int = Field(default=6, ge=1)
