"""Vessel list polling.

This module owns the periodic "poll + replace" loop for the vessel
partition. Scheduled ticks and explicit triggers (searches, refresh
buttons) share one entry point, :meth:`ListSyncEngine.poll_once`, whose
in-flight flag is the only overlap guard: at most one list request is
outstanding at any time.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from pyaismap._api.vessels import fetch_vessel_records
from pyaismap._transport import Transport
from pyaismap.config import AisMapConfig
from pyaismap.exceptions import AisMapError
from pyaismap.ingestion.features import vessel_features
from pyaismap.ingestion.normalize import normalize_records
from pyaismap.ingestion.vessels import parse_vessel_records
from pyaismap.models.feature import FeaturePartition
from pyaismap.models.requests import SearchQuery
from pyaismap.models.vessel import VesselRecord
from pyaismap.state.policy import should_apply_poll
from pyaismap.state.store import FeatureStore

_logger = logging.getLogger(__name__)

ErrorCallback = Callable[[AisMapError], None]


class PollStatus(StrEnum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    STALE = "stale"
    STOPPED = "stopped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class PollResult:
    """Outcome of one poll attempt."""

    status: PollStatus
    query: SearchQuery
    count: int = 0
    error: AisMapError | None = None


class ListSyncEngine:
    """Keeps the vessel partition equal to the latest successful poll.

    Usage::

        engine = ListSyncEngine(config, transport, store)
        engine.start()          # first poll fires immediately
        ...
        await engine.shutdown()
    """

    def __init__(
        self,
        config: AisMapConfig,
        transport: Transport,
        store: FeatureStore,
        *,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._store = store
        self._on_error = on_error
        self._query = SearchQuery()
        self._records: tuple[VesselRecord, ...] = ()
        self._in_flight = False
        self._rerun = False
        self._stopped = False
        self._idle = asyncio.Event()
        self._idle.set()
        self._timer: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[PollResult]] = set()
        self._last_result: PollResult | None = None
        self.last_error: AisMapError | None = None
        self.last_success_at: datetime | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def query(self) -> SearchQuery:
        return self._query

    @property
    def records(self) -> tuple[VesselRecord, ...]:
        """Vessel records from the last applied poll."""
        return self._records

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def is_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def last_result(self) -> PollResult | None:
        return self._last_result

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def start(self, interval: float | None = None) -> None:
        """Begin periodic polling. The first poll is scheduled immediately."""
        if self.is_running:
            return
        period = self._config.poll_interval if interval is None else interval
        if period <= 0:
            raise ValueError(f"interval must be positive, got {period}")
        self._stopped = False
        self.trigger_now()
        self._timer = asyncio.get_running_loop().create_task(self._run(period))
        _logger.debug("Vessel list polling started (interval=%ss)", period)

    async def _run(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self.trigger_now()

    def trigger_now(self, query: SearchQuery | None = None) -> asyncio.Task[PollResult] | None:
        """Schedule a poll without awaiting it.

        Returns ``None`` when the engine is stopped or when a plain tick
        would only be skipped because a poll is already in flight.
        """
        if self._stopped:
            return None
        if self._in_flight and query is None:
            _logger.debug("Vessel list poll still in flight; skipping tick")
            return None
        task = asyncio.get_running_loop().create_task(self.poll_once(query))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def stop(self) -> None:
        """Cancel future ticks. In-flight responses are dropped on arrival."""
        self._stopped = True
        self._rerun = False
        timer = self._timer
        self._timer = None
        if timer is not None:
            timer.cancel()

    async def shutdown(self) -> None:
        """Stop and cancel any in-flight poll tasks."""
        timer = self._timer
        self.stop()
        pending = [task for task in self._tasks if not task.done()]
        if timer is not None:
            pending.append(timer)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def wait_idle(self) -> PollResult | None:
        """Wait until no poll is in flight and return the last outcome."""
        await self._idle.wait()
        return self._last_result

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    async def poll_once(self, query: SearchQuery | None = None) -> PollResult:
        """Issue one list request and replace the vessel partition on success.

        Passing *query* makes it the active filter. If a poll is already in
        flight the call is suppressed; a changed query is re-run once the
        in-flight poll completes.
        """
        query_changed = query is not None and query != self._query
        if query is not None:
            self._query = query

        if self._stopped:
            return PollResult(status=PollStatus.STOPPED, query=self._query)

        if self._in_flight:
            if query_changed:
                self._rerun = True
            _logger.debug("Vessel list poll suppressed; request already in flight")
            return PollResult(status=PollStatus.SKIPPED, query=self._query)

        self._in_flight = True
        self._idle.clear()
        try:
            result = await self._poll(self._query)
            while self._rerun and not self._stopped:
                self._rerun = False
                result = await self._poll(self._query)
            self._last_result = result
            return result
        finally:
            self._in_flight = False
            self._idle.set()

    async def _poll(self, issued: SearchQuery) -> PollResult:
        try:
            raw = await fetch_vessel_records(self._config, self._transport, issued)
        except AisMapError as exc:
            if not should_apply_poll(issued=issued, current=self._query, stopped=self._stopped):
                return self._dropped(issued)
            self._report(exc)
            return PollResult(status=PollStatus.FAILED, query=issued, error=exc)

        if not should_apply_poll(issued=issued, current=self._query, stopped=self._stopped):
            return self._dropped(issued)

        records = parse_vessel_records(normalize_records(raw))
        self._store.replace_partition(FeaturePartition.VESSEL, vessel_features(records))
        self._records = tuple(records)
        self.last_error = None
        self.last_success_at = datetime.now(UTC)
        _logger.debug("Vessel partition replaced: %d vessels", len(records))
        return PollResult(status=PollStatus.APPLIED, query=issued, count=len(records))

    def _dropped(self, issued: SearchQuery) -> PollResult:
        status = PollStatus.STOPPED if self._stopped else PollStatus.STALE
        _logger.debug("Dropping vessel list response (%s) for %s", status.value, issued.as_params())
        return PollResult(status=status, query=issued)

    def _report(self, error: AisMapError) -> None:
        self.last_error = error
        _logger.warning("Vessel list poll failed: %s", error)
        if self._on_error is None:
            return
        try:
            self._on_error(error)
        except Exception:
            _logger.debug("on_error callback failed", exc_info=True)
