"""Base model for backend records.

Every record model inherits from :class:`AisBaseModel` which provides:

* ``populate_by_name`` so fields accept either the Python name or one
  of the PascalCase aliases the backend emits.
* A ``model_validator(mode="before")`` that strips sentinel values
  (``None``, ``""``, NaN) so the field default is used.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Sentinel strings the backend uses for "not available".
_SENTINELS = frozenset({"", "NaN", "nan", "null"})


class AisBaseModel(BaseModel):
    """Base for backend record models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original record dict (after reference-marker stripping)."""

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        """Drop sentinel values so field defaults apply."""
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Strip sentinel values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned = AisBaseModel._clean_dict(values)

        # Keep the caller's raw= when constructing from kwargs.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
