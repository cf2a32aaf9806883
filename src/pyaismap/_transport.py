"""HTTP transport for the stored-procedure endpoint."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyaismap._constants import USER_AGENT
from pyaismap._redact import redact_for_log
from pyaismap.config import AisMapConfig
from pyaismap.exceptions import AisMalformedResponseError, AisNetworkError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the sync engines.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def post(self, endpoint: str, body: Mapping[str, Any]) -> Any:
        ...


class HttpTransport:
    """JSON-over-HTTP transport backed by an aiohttp session.

    Any connection error, timeout or non-200 status is raised as
    :class:`AisNetworkError`; an undecodable or unparseable body as
    :class:`AisMalformedResponseError`.
    """

    def __init__(self, config: AisMapConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def post(self, endpoint: str, body: Mapping[str, Any]) -> Any:
        headers: dict[str, str] = {
            "accept": "application/json",
            "content-type": "application/json; charset=UTF-8",
            "user-agent": USER_AGENT,
            **self._config.headers,
        }
        url = f"{self._config.base_url}{endpoint}"

        _logger.debug("POST %s", url)
        if self._config.api_trace_enabled:
            _logger.debug("Request body=%s headers=%s", redact_for_log(body), redact_for_log(headers))

        try:
            async with self._http.post(url, json=dict(body), headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise AisNetworkError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except AisNetworkError:
            raise
        except TimeoutError as exc:
            raise AisNetworkError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except UnicodeDecodeError as exc:
            raise AisMalformedResponseError(
                f"Undecodable body from {endpoint}: {exc.reason}",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise AisNetworkError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            result = json.loads(text)
        except ValueError as exc:
            raise AisMalformedResponseError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc

        if self._config.api_trace_enabled:
            _logger.debug("Response from %s: %s", endpoint, redact_for_log(result))
        return result
