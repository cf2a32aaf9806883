"""Feature store change events.

Every mutation of the store emits one of these to subscribed listeners
(typically the render surface).
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from pyaismap.models.feature import FeaturePartition


class ChangeSource(StrEnum):
    REPLACE = "replace"
    UPSERT = "upsert"
    REMOVE = "remove"


class PartitionChange(BaseModel):
    """Ids added, updated and removed by one store mutation."""

    model_config = ConfigDict(frozen=True)

    partition: FeaturePartition
    source: ChangeSource
    added: frozenset[str] = frozenset()
    updated: frozenset[str] = frozenset()
    removed: frozenset[str] = frozenset()
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.updated or self.removed)
