"""Vessel list parsing."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from pyaismap.models.vessel import VesselRecord

_logger = logging.getLogger(__name__)


def parse_vessel_records(records: Iterable[Any]) -> list[VesselRecord]:
    """Parse normalized rows into records, one per identity.

    Rows without a usable MMSI are dropped. When an identity repeats within
    one response the last row wins.
    """
    by_mmsi: dict[str, VesselRecord] = {}
    dropped = 0
    for row in records:
        try:
            record = VesselRecord.model_validate(row)
        except ValidationError:
            dropped += 1
            continue
        by_mmsi[record.mmsi] = record
    if dropped:
        _logger.debug("Dropped %d vessel rows without an identity", dropped)
    return list(by_mmsi.values())
