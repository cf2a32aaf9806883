"""Normalization helpers.

Centralizes defensive parsing and the stripping of serializer
back-reference markers from backend records.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

from pyaismap._constants import REFERENCE_MARKERS

_logger = logging.getLogger(__name__)


def is_reference_marker(value: Any) -> bool:
    """Return True if *value* is a ``$ref``/``$id`` back-reference wrapper."""
    if not isinstance(value, Mapping):
        return False
    return any(marker in value for marker in REFERENCE_MARKERS)


def strip_reference_markers(record: Any) -> Any:
    """Replace top-level back-reference wrappers in *record* with ``None``.

    Only first-level fields are inspected; nested collections are passed
    through untouched. Never raises: if the record cannot be walked it is
    returned unchanged so the entity is still displayed with raw values.
    """
    if record is None:
        return None
    try:
        cleaned: dict[str, Any] = {}
        for key, value in record.items():
            cleaned[key] = None if is_reference_marker(value) else value
        return cleaned
    except Exception:
        _logger.debug("Reference marker stripping fell back to raw record", exc_info=True)
        return record


def normalize_records(records: Iterable[Any]) -> list[Any]:
    """Apply :func:`strip_reference_markers` to every record."""
    return [strip_reference_markers(record) for record in records]


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def safe_token(value: Any) -> str | None:
    """Coerce an identity-like token (MMSI, IMO) to a string.

    Integral floats lose their ``.0`` so ``574001230.0`` and ``"574001230"``
    produce the same identity.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return safe_str(value)
    return None


def safe_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "y"}:
            return True
        if normalized in {"0", "false", "no", "n"}:
            return False
    return None
