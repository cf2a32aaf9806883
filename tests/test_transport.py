from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import test_utils, web

from pyaismap import __version__
from pyaismap._transport import HttpTransport
from pyaismap.config import AisMapConfig
from pyaismap.exceptions import AisMalformedResponseError, AisMapError, AisNetworkError, FailureKind
from pyaismap.ingestion.list_sync import ListSyncEngine, PollStatus
from pyaismap.ingestion.route import RouteFetchController, RouteLoadState, RouteStatus
from pyaismap.state.store import FeatureStore

_PATH = "/api/Ship/Data/DoRequest"


async def _echo(request: web.Request) -> web.Response:
    body = await request.json()
    return web.json_response([{"MMSI": "1", "echo": body, "agent": request.headers.get("user-agent")}])


async def _server_error(request: web.Request) -> web.Response:
    return web.Response(status=500, text="procedure failed")


async def _not_json(request: web.Request) -> web.Response:
    return web.Response(status=200, text="<html>maintenance</html>")


async def _undecodable(request: web.Request) -> web.Response:
    return web.Response(status=200, body=b'[{"MMSI": "\xff\xfe"}]', content_type="application/json", charset="utf-8")


async def _slow(request: web.Request) -> web.Response:
    await asyncio.sleep(1.0)
    return web.json_response([])


@pytest_asyncio.fixture
async def server() -> AsyncIterator[test_utils.TestServer]:
    app = web.Application()
    app.router.add_post(_PATH, _echo)
    app.router.add_post("/error", _server_error)
    app.router.add_post("/html", _not_json)
    app.router.add_post("/slow", _slow)
    app.router.add_post("/undecodable", _undecodable)
    async with test_utils.TestServer(app) as test_server:
        yield test_server


def _config(server: test_utils.TestServer, **kwargs: object) -> AisMapConfig:
    return AisMapConfig(base_url=str(server.make_url("/")), **kwargs)


@pytest.mark.asyncio
async def test_post_returns_decoded_json(server: test_utils.TestServer) -> None:
    body = {"procedureName": "Proc_Tau_Search", "thamSo": {}}
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(_config(server, api_trace_enabled=True), session)
        result = await transport.post(_PATH, body)

    assert result[0]["echo"] == body
    assert result[0]["agent"] == f"pyaismap/{__version__}"


@pytest.mark.asyncio
async def test_non_200_is_network_failure(server: test_utils.TestServer) -> None:
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(_config(server), session)
        with pytest.raises(AisNetworkError) as exc_info:
            await transport.post("/error", {})

    assert exc_info.value.status_code == 500
    assert exc_info.value.kind == FailureKind.NETWORK_FAILURE


@pytest.mark.asyncio
async def test_invalid_json_is_malformed(server: test_utils.TestServer) -> None:
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(_config(server), session)
        with pytest.raises(AisMalformedResponseError):
            await transport.post("/html", {})


@pytest.mark.asyncio
async def test_timeout_is_network_failure(server: test_utils.TestServer) -> None:
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(_config(server, request_timeout=0.05), session)
        with pytest.raises(AisNetworkError, match="timed out"):
            await transport.post("/slow", {})


@pytest.mark.asyncio
async def test_connection_refused_is_network_failure() -> None:
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(AisMapConfig(base_url="http://127.0.0.1:9", request_timeout=2.0), session)
        with pytest.raises(AisNetworkError):
            await transport.post(_PATH, {})


@pytest.mark.asyncio
async def test_undecodable_body_is_malformed(server: test_utils.TestServer) -> None:
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(_config(server), session)
        with pytest.raises(AisMalformedResponseError) as exc_info:
            await transport.post("/undecodable", {})

    assert exc_info.value.kind == FailureKind.MALFORMED_RESPONSE


@pytest.mark.asyncio
async def test_undecodable_body_is_reported_by_both_engines(server: test_utils.TestServer) -> None:
    errors: list[AisMapError] = []
    config = _config(server, request_path="/undecodable")
    store = FeatureStore()
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(config, session)
        sync = ListSyncEngine(config, transport, store, on_error=errors.append)
        routes = RouteFetchController(config, transport, store, on_error=errors.append)

        poll = await sync.poll_once()
        route = await routes.fetch_route("1")

    assert poll.status == PollStatus.FAILED
    assert sync.last_error is not None
    assert route.status == RouteStatus.FAILED
    assert routes.state == RouteLoadState.ERROR
    assert [error.kind for error in errors] == [FailureKind.MALFORMED_RESPONSE, FailureKind.MALFORMED_RESPONSE]
