"""Response envelope classification.

The backend returns record lists in several shapes depending on the
serializer settings of the deployment:

* a bare JSON array,
* a reference-preserving wrapper ``{"$id": "1", "$values": [...]}``,
* an object with a named collection field (``data``, ``result``, ...),
  whose value may itself be a ``$values`` wrapper.

:func:`classify_envelope` turns a decoded body into a tagged
:class:`ResponseEnvelope` so call sites never branch on shape.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from pyaismap._constants import COLLECTION_KEYS, REFERENCE_VALUES_KEY
from pyaismap.exceptions import AisMalformedResponseError


class EnvelopeKind(StrEnum):
    BARE_LIST = "bare_list"
    REFERENCE_VALUES = "reference_values"
    FIELD_LIST = "field_list"


class ResponseEnvelope(BaseModel):
    """A response body with its record sequence extracted."""

    model_config = ConfigDict(frozen=True)

    kind: EnvelopeKind
    records: tuple[dict[str, Any], ...]
    field: str | None = None
    """Name of the collection field for ``FIELD_LIST`` envelopes."""


def _reference_values(value: Any) -> list[Any] | None:
    if isinstance(value, Mapping):
        values = value.get(REFERENCE_VALUES_KEY)
        if isinstance(values, list):
            return values
    return None


def _records(items: list[Any]) -> tuple[dict[str, Any], ...]:
    return tuple(dict(item) for item in items if isinstance(item, Mapping))


def classify_envelope(payload: Any, *, endpoint: str = "") -> ResponseEnvelope:
    """Classify *payload* and extract its records.

    Raises
    ------
    AisMalformedResponseError
        If no record sequence can be found.
    """
    if isinstance(payload, list):
        return ResponseEnvelope(kind=EnvelopeKind.BARE_LIST, records=_records(payload))

    values = _reference_values(payload)
    if values is not None:
        return ResponseEnvelope(kind=EnvelopeKind.REFERENCE_VALUES, records=_records(values))

    if isinstance(payload, Mapping):
        for key in COLLECTION_KEYS:
            if key not in payload:
                continue
            candidate = payload[key]
            if isinstance(candidate, list):
                return ResponseEnvelope(kind=EnvelopeKind.FIELD_LIST, records=_records(candidate), field=key)
            nested = _reference_values(candidate)
            if nested is not None:
                return ResponseEnvelope(kind=EnvelopeKind.FIELD_LIST, records=_records(nested), field=key)
            if candidate is None:
                return ResponseEnvelope(kind=EnvelopeKind.FIELD_LIST, records=(), field=key)

    shape = sorted(payload.keys()) if isinstance(payload, Mapping) else type(payload).__name__
    raise AisMalformedResponseError(
        f"No record sequence in response from {endpoint or 'backend'} (shape={shape})",
        endpoint=endpoint,
    )
