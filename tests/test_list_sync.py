from __future__ import annotations

import asyncio

import pytest

from pyaismap.config import AisMapConfig
from pyaismap.exceptions import AisMapError, AisNetworkError, FailureKind
from pyaismap.ingestion.list_sync import ListSyncEngine, PollStatus
from pyaismap.models.feature import FeaturePartition
from pyaismap.models.requests import SearchField, SearchQuery
from pyaismap.state.store import FeatureStore

from conftest import FakeVesselBackend, settle


def _engine(
    config: AisMapConfig,
    backend: FakeVesselBackend,
    store: FeatureStore,
    errors: list[AisMapError] | None = None,
) -> ListSyncEngine:
    return ListSyncEngine(config, backend, store, on_error=errors.append if errors is not None else None)


def _vessel_ids(store: FeatureStore) -> set[str]:
    return {feature.id for feature in store.partition(FeaturePartition.VESSEL)}


@pytest.mark.asyncio
async def test_poll_populates_vessel_partition(
    config: AisMapConfig, backend: FakeVesselBackend, store: FeatureStore
) -> None:
    backend.vessels = [{"MMSI": "1", "VesselName": "Alpha", "Longitude": 105.0, "Latitude": 10.0}]
    engine = _engine(config, backend, store)

    result = await engine.poll_once()

    assert result.status == PollStatus.APPLIED
    assert result.count == 1
    feature = store.get(FeaturePartition.VESSEL, "1")
    assert feature is not None
    assert feature.properties["name"] == "Alpha"
    assert feature.geometry.coordinates == [105.0, 10.0]
    assert backend.calls == [{"procedureName": "Proc_Tau_Search", "thamSo": {}}]


@pytest.mark.asyncio
async def test_failed_poll_keeps_previous_partition_and_reports(
    config: AisMapConfig, backend: FakeVesselBackend, store: FeatureStore
) -> None:
    errors: list[AisMapError] = []
    engine = _engine(config, backend, store, errors)
    await engine.poll_once()
    before = store.partition(FeaturePartition.VESSEL)

    backend.fail_with = AisNetworkError("connection refused", endpoint="/api/Ship/Data/DoRequest")
    result = await engine.poll_once()

    assert result.status == PollStatus.FAILED
    assert store.partition(FeaturePartition.VESSEL) == before
    assert len(errors) == 1
    assert errors[0].kind == FailureKind.NETWORK_FAILURE
    assert engine.last_error is errors[0]
    assert engine.in_flight is False


@pytest.mark.asyncio
async def test_os_error_from_transport_is_reported_as_network_failure(
    config: AisMapConfig, backend: FakeVesselBackend, store: FeatureStore
) -> None:
    errors: list[AisMapError] = []
    engine = _engine(config, backend, store, errors)
    backend.fail_with = ConnectionResetError("reset by peer")

    result = await engine.poll_once()

    assert result.status == PollStatus.FAILED
    assert isinstance(result.error, AisNetworkError)
    assert errors[0].kind == FailureKind.NETWORK_FAILURE


@pytest.mark.asyncio
async def test_missing_vessel_is_removed_on_next_poll(
    config: AisMapConfig, backend: FakeVesselBackend, store: FeatureStore
) -> None:
    engine = _engine(config, backend, store)
    await engine.poll_once()
    assert _vessel_ids(store) == {"1", "2"}

    backend.vessels = backend.vessels[1:]
    await engine.poll_once()

    assert _vessel_ids(store) == {"2"}
    assert [record.mmsi for record in engine.records] == ["2"]


@pytest.mark.asyncio
async def test_duplicate_and_positionless_rows(
    config: AisMapConfig, backend: FakeVesselBackend, store: FeatureStore
) -> None:
    backend.vessels = [
        {"MMSI": "7", "VesselName": "Old", "Longitude": 100.0, "Latitude": 5.0},
        {"MMSI": "7", "VesselName": "New", "Longitude": 100.5, "Latitude": 5.5},
        {"MMSI": "8", "VesselName": "Nowhere"},
        {"VesselName": "No identity", "Longitude": 101.0, "Latitude": 6.0},
    ]
    engine = _engine(config, backend, store)

    result = await engine.poll_once()

    assert result.status == PollStatus.APPLIED
    assert _vessel_ids(store) == {"7"}
    assert store.get(FeaturePartition.VESSEL, "7").properties["name"] == "New"
    assert {record.mmsi for record in engine.records} == {"7", "8"}


@pytest.mark.asyncio
async def test_reference_wrapped_response(
    config: AisMapConfig, backend: FakeVesselBackend, store: FeatureStore
) -> None:
    engine = _engine(config, backend, store)
    payload = {
        "$id": "1",
        "$values": [
            {"$id": "2", "MMSI": "9", "VesselName": "Charlie", "Longitude": 107.0, "Latitude": 12.0,
             "Destination": {"$ref": "1"}},
        ],
    }
    backend.hold = True
    task = engine.trigger_now()
    await settle()
    backend.release(payload=payload)
    result = await task

    assert result.status == PollStatus.APPLIED
    feature = store.get(FeaturePartition.VESSEL, "9")
    assert feature is not None
    assert feature.properties["destination"] is None


@pytest.mark.asyncio
async def test_malformed_response_is_reported(
    config: AisMapConfig, backend: FakeVesselBackend, store: FeatureStore
) -> None:
    errors: list[AisMapError] = []
    engine = _engine(config, backend, store, errors)
    await engine.poll_once()
    backend.hold = True

    task = engine.trigger_now()
    await settle()
    backend.release(payload={"message": "An error has occurred."})
    result = await task

    assert result.status == PollStatus.FAILED
    assert errors[0].kind == FailureKind.MALFORMED_RESPONSE
    assert _vessel_ids(store) == {"1", "2"}


@pytest.mark.asyncio
async def test_overlapping_polls_are_suppressed(
    config: AisMapConfig, backend: FakeVesselBackend, store: FeatureStore
) -> None:
    backend.hold = True
    engine = _engine(config, backend, store)

    first = engine.trigger_now()
    await settle()
    assert engine.in_flight is True

    assert engine.trigger_now() is None
    second = await engine.poll_once()

    assert second.status == PollStatus.SKIPPED
    assert len(backend.calls) == 1

    backend.release()
    result = await first
    assert result.status == PollStatus.APPLIED
    assert engine.in_flight is False


@pytest.mark.asyncio
async def test_query_change_mid_flight_drops_stale_and_reruns(
    config: AisMapConfig, backend: FakeVesselBackend, store: FeatureStore
) -> None:
    backend.hold = True
    engine = _engine(config, backend, store)
    first = engine.trigger_now()
    await settle()

    bravo = SearchQuery(field=SearchField.VESSEL_NAME, value="Bravo")
    skipped = await engine.poll_once(bravo)
    assert skipped.status == PollStatus.SKIPPED

    backend.release()
    await settle()
    assert store.count(FeaturePartition.VESSEL) == 0
    assert backend.calls[-1]["thamSo"] == {"VesselName": "Bravo"}

    backend.release()
    result = await first

    assert result.status == PollStatus.APPLIED
    assert result.query == bravo
    assert _vessel_ids(store) == {"2"}
    assert len(backend.calls) == 2


@pytest.mark.asyncio
async def test_stop_drops_in_flight_response(
    config: AisMapConfig, backend: FakeVesselBackend, store: FeatureStore
) -> None:
    errors: list[AisMapError] = []
    backend.hold = True
    engine = _engine(config, backend, store, errors)
    task = engine.trigger_now()
    await settle()

    engine.stop()
    backend.release(error=AisNetworkError("late failure"))
    result = await task

    assert result.status == PollStatus.STOPPED
    assert store.count(FeaturePartition.VESSEL) == 0
    assert errors == []
    assert engine.trigger_now() is None
    assert (await engine.poll_once()).status == PollStatus.STOPPED


@pytest.mark.asyncio
async def test_stop_without_start_is_safe(
    config: AisMapConfig, backend: FakeVesselBackend, store: FeatureStore
) -> None:
    engine = _engine(config, backend, store)

    engine.stop()
    engine.stop()
    await engine.shutdown()

    assert engine.is_running is False
    assert backend.calls == []


@pytest.mark.asyncio
async def test_start_polls_immediately_then_on_interval(
    backend: FakeVesselBackend, store: FeatureStore
) -> None:
    engine = _engine(AisMapConfig(poll_interval=0.01), backend, store)

    engine.start()
    await settle()
    assert len(backend.calls) == 1
    assert _vessel_ids(store) == {"1", "2"}

    await asyncio.sleep(0.05)
    assert len(backend.calls) >= 2
    assert engine.last_success_at is not None

    await engine.shutdown()
    calls = len(backend.calls)
    await asyncio.sleep(0.03)
    assert len(backend.calls) == calls
    assert engine.is_running is False


@pytest.mark.asyncio
async def test_ticks_skip_while_poll_in_flight(
    backend: FakeVesselBackend, store: FeatureStore
) -> None:
    backend.hold = True
    engine = _engine(AisMapConfig(poll_interval=0.01), backend, store)

    engine.start()
    await asyncio.sleep(0.05)

    assert len(backend.calls) == 1
    await engine.shutdown()
    assert engine.in_flight is False


@pytest.mark.asyncio
async def test_start_rejects_non_positive_interval(
    config: AisMapConfig, backend: FakeVesselBackend, store: FeatureStore
) -> None:
    engine = _engine(config, backend, store)

    with pytest.raises(ValueError):
        engine.start(0)


@pytest.mark.asyncio
async def test_raising_error_callback_does_not_escape(
    config: AisMapConfig, backend: FakeVesselBackend, store: FeatureStore
) -> None:
    def _explode(_error: AisMapError) -> None:
        raise RuntimeError("ui is gone")

    engine = ListSyncEngine(config, backend, store, on_error=_explode)
    backend.fail_with = AisNetworkError("down")

    result = await engine.poll_once()

    assert result.status == PollStatus.FAILED
    assert engine.in_flight is False


@pytest.mark.asyncio
async def test_unexpected_transport_error_is_reported_as_network_failure(
    config: AisMapConfig, backend: FakeVesselBackend, store: FeatureStore
) -> None:
    errors: list[AisMapError] = []
    engine = _engine(config, backend, store, errors)
    await engine.poll_once()
    backend.fail_with = RuntimeError("transport plugin crashed")

    result = await engine.poll_once()

    assert result.status == PollStatus.FAILED
    assert isinstance(result.error.__cause__, RuntimeError)
    assert engine.last_error is errors[0]
    assert errors[0].kind == FailureKind.NETWORK_FAILURE
    assert _vessel_ids(store) == {"1", "2"}
    assert engine.in_flight is False
