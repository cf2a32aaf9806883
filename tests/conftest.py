from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest

from pyaismap._constants import LIST_PROCEDURE, ROUTE_PROCEDURE
from pyaismap.config import AisMapConfig
from pyaismap.state.store import FeatureStore


@dataclass
class PendingCall:
    body: dict[str, Any]
    future: asyncio.Future[Any]


@dataclass
class FakeVesselBackend:
    """In-memory stand-in for the stored-procedure endpoint.

    With ``hold=True`` every call parks on a future so tests can decide
    when (and in which order) responses arrive.
    """

    vessels: list[dict[str, Any]] = field(default_factory=list)
    routes: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    fail_with: Exception | None = None
    hold: bool = False
    calls: list[dict[str, Any]] = field(default_factory=list)
    pending: list[PendingCall] = field(default_factory=list)

    def respond(self, body: dict[str, Any]) -> Any:
        procedure = body["procedureName"]
        params = body["thamSo"]
        if procedure == LIST_PROCEDURE:
            if not params:
                return list(self.vessels)
            ((key, value),) = params.items()
            return [row for row in self.vessels if str(value).lower() in str(row.get(key, "")).lower()]
        if procedure == ROUTE_PROCEDURE:
            return list(self.routes.get(params["MMSI"], []))
        raise AssertionError(f"Unexpected procedure in fake backend: {procedure}")

    async def post(self, endpoint: str, body: dict[str, Any]) -> Any:
        assert endpoint == "/api/Ship/Data/DoRequest"
        self.calls.append(body)
        if self.hold:
            future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
            self.pending.append(PendingCall(body=body, future=future))
            return await future
        if self.fail_with is not None:
            raise self.fail_with
        return self.respond(body)

    def release(self, index: int = 0, *, payload: Any = None, error: Exception | None = None) -> None:
        call = self.pending.pop(index)
        if error is not None:
            call.future.set_exception(error)
        else:
            call.future.set_result(self.respond(call.body) if payload is None else payload)

    def procedures(self) -> list[str]:
        return [call["procedureName"] for call in self.calls]


async def settle(rounds: int = 5) -> None:
    """Let scheduled tasks run up to their next suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def config() -> AisMapConfig:
    return AisMapConfig(base_url="http://ais.test", poll_interval=60.0)


@pytest.fixture
def backend() -> FakeVesselBackend:
    return FakeVesselBackend(
        vessels=[
            {"MMSI": "1", "VesselName": "Alpha", "Longitude": 105.0, "Latitude": 10.0},
            {"MMSI": "2", "VesselName": "Bravo", "Longitude": 106.5, "Latitude": 11.25, "COG": 87.0},
        ],
        routes={
            "1": [
                {"Latitude": 10.0, "Longitude": 105.0, "ThoiGian": "2026-10-19T00:00:00Z"},
                {"Latitude": 10.1, "Longitude": 105.2, "ThoiGian": "2026-10-19T01:00:00Z"},
                {"Latitude": 10.2, "Longitude": 105.4, "ThoiGian": "2026-10-19T02:00:00Z"},
            ],
            "2": [
                {"Latitude": 11.0, "Longitude": 106.0},
                {"Latitude": 11.25, "Longitude": 106.5},
            ],
        },
    )


@pytest.fixture
def store() -> FeatureStore:
    return FeatureStore()
