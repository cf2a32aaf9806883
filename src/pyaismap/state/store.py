"""Partitioned in-memory feature store.

This is the only component the render surface reads from. Each partition
maps feature id to feature; the same id may appear in two partitions
without colliding.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from pyaismap.models.feature import FeaturePartition, MapFeature
from pyaismap.state.events import ChangeSource, PartitionChange

_logger = logging.getLogger(__name__)

ChangeListener = Callable[[PartitionChange], None]


def _check_partition(partition: FeaturePartition, feature: MapFeature) -> None:
    if feature.partition != partition:
        raise ValueError(f"feature {feature.id!r} is tagged {feature.partition.value!r}, not {partition.value!r}")


class FeatureStore:
    """Type-partitioned collection of renderable features.

    Replacement builds the new partition completely before a single swap,
    so readers never observe a half-replaced partition.
    """

    def __init__(self) -> None:
        self._partitions: dict[FeaturePartition, dict[str, MapFeature]] = {
            partition: {} for partition in FeaturePartition
        }
        self._listeners: list[ChangeListener] = []

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def replace_partition(self, partition: FeaturePartition, features: Iterable[MapFeature]) -> PartitionChange:
        """Remove every feature of *partition* and insert *features*.

        Duplicate ids collapse to the last feature. Other partitions are
        never touched.

        Raises
        ------
        ValueError
            If a feature is tagged with a different partition. The store is
            left unchanged.
        """
        replacement: dict[str, MapFeature] = {}
        for feature in features:
            _check_partition(partition, feature)
            replacement[feature.id] = feature

        previous = self._partitions[partition]
        self._partitions[partition] = replacement

        previous_ids = previous.keys()
        current_ids = replacement.keys()
        change = PartitionChange(
            partition=partition,
            source=ChangeSource.REPLACE,
            added=frozenset(current_ids - previous_ids),
            updated=frozenset(fid for fid in current_ids & previous_ids if previous[fid] != replacement[fid]),
            removed=frozenset(previous_ids - current_ids),
        )
        self._notify(change)
        return change

    def upsert_single(self, feature: MapFeature) -> PartitionChange:
        """Insert or replace a single feature in its own partition."""
        bucket = self._partitions[feature.partition]
        existed = feature.id in bucket
        bucket[feature.id] = feature
        change = PartitionChange(
            partition=feature.partition,
            source=ChangeSource.UPSERT,
            added=frozenset() if existed else frozenset({feature.id}),
            updated=frozenset({feature.id}) if existed else frozenset(),
        )
        self._notify(change)
        return change

    def remove_single(self, partition: FeaturePartition, feature_id: str) -> bool:
        """Remove one feature; returns False when it was not present."""
        removed = self._partitions[partition].pop(feature_id, None)
        if removed is None:
            return False
        self._notify(
            PartitionChange(
                partition=partition,
                source=ChangeSource.REMOVE,
                removed=frozenset({feature_id}),
            )
        )
        return True

    def clear_partition(self, partition: FeaturePartition) -> PartitionChange:
        return self.replace_partition(partition, ())

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def query(
        self,
        predicate: Callable[[MapFeature], bool] | None = None,
        *,
        partition: FeaturePartition | None = None,
    ) -> list[MapFeature]:
        """Return features matching *predicate*, optionally within one partition."""
        partitions = (partition,) if partition is not None else tuple(FeaturePartition)
        matches: list[MapFeature] = []
        for kind in partitions:
            for feature in self._partitions[kind].values():
                if predicate is None or predicate(feature):
                    matches.append(feature)
        return matches

    def get(self, partition: FeaturePartition, feature_id: str) -> MapFeature | None:
        return self._partitions[partition].get(feature_id)

    def partition(self, partition: FeaturePartition) -> list[MapFeature]:
        return list(self._partitions[partition].values())

    def count(self, partition: FeaturePartition | None = None) -> int:
        if partition is not None:
            return len(self._partitions[partition])
        return sum(len(bucket) for bucket in self._partitions.values())

    def snapshot(self) -> dict[FeaturePartition, list[MapFeature]]:
        return {kind: list(bucket.values()) for kind, bucket in self._partitions.items()}

    def to_geojson(self, partition: FeaturePartition | None = None) -> dict[str, Any]:
        """Render the store (or one partition) as a GeoJSON FeatureCollection."""
        return {
            "type": "FeatureCollection",
            "features": [feature.to_geojson() for feature in self.query(partition=partition)],
        }

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, change: PartitionChange) -> None:
        if change.is_empty:
            return
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                _logger.debug("Feature store listener failed", exc_info=True)
