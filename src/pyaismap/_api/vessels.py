"""Vessel list and route queries.

Both go through the same stored-procedure endpoint:

  - ``{procedureName: <list procedure>, thamSo: {<field>: <value>}}``
  - ``{procedureName: <route procedure>, thamSo: {MMSI: ..., Hours: ...}}``

Records come back raw; reference-marker stripping and model parsing are
the ingestion layer's job.
"""

from __future__ import annotations

import logging
from typing import Any

from pyaismap._api._envelope import classify_envelope
from pyaismap._constants import PARAMS_KEY, PROCEDURE_KEY, ROUTE_HOURS_PARAM, ROUTE_MMSI_PARAM
from pyaismap._transport import Transport
from pyaismap.config import AisMapConfig
from pyaismap.exceptions import AisMapError, AisNetworkError
from pyaismap.models.requests import RouteRequest, SearchQuery

_logger = logging.getLogger(__name__)


async def _post(transport: Transport, endpoint: str, body: dict[str, Any]) -> Any:
    """Post through *transport*, mapping any non-library error to a network failure."""
    try:
        return await transport.post(endpoint, body)
    except AisMapError:
        raise
    except Exception as exc:
        raise AisNetworkError(f"Request to {endpoint} failed: {exc!r}", endpoint=endpoint) from exc


def build_list_body(config: AisMapConfig, query: SearchQuery) -> dict[str, Any]:
    return {PROCEDURE_KEY: config.list_procedure, PARAMS_KEY: query.as_params()}


def build_route_body(config: AisMapConfig, request: RouteRequest) -> dict[str, Any]:
    return {
        PROCEDURE_KEY: config.route_procedure,
        PARAMS_KEY: {ROUTE_MMSI_PARAM: request.mmsi, ROUTE_HOURS_PARAM: request.hours},
    }


async def fetch_vessel_records(
    config: AisMapConfig,
    transport: Transport,
    query: SearchQuery,
) -> list[dict[str, Any]]:
    """Run the vessel list procedure and return the raw records."""
    endpoint = config.request_path
    payload = await _post(transport, endpoint, build_list_body(config, query))
    envelope = classify_envelope(payload, endpoint=endpoint)
    _logger.debug("Vessel list: envelope=%s records=%d", envelope.kind.value, len(envelope.records))
    return list(envelope.records)


async def fetch_route_records(
    config: AisMapConfig,
    transport: Transport,
    request: RouteRequest,
) -> list[dict[str, Any]]:
    """Run the route procedure and return the raw track points, oldest first."""
    endpoint = config.request_path
    payload = await _post(transport, endpoint, build_route_body(config, request))
    envelope = classify_envelope(payload, endpoint=endpoint)
    _logger.debug(
        "Route %s: envelope=%s points=%d",
        request.mmsi,
        envelope.kind.value,
        len(envelope.records),
    )
    return list(envelope.records)
