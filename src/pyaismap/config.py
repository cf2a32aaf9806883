"""Client configuration for pyaismap."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from pyaismap._constants import (
    BASE_URL,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_ROUTE_HOURS,
    LIST_PROCEDURE,
    REQUEST_PATH,
    ROUTE_PROCEDURE,
)
from pyaismap.exceptions import AisConfigError
from pyaismap.models.route import EndpointMarker


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env: Mapping[str, str], key: str, cast: type[int] | type[float]) -> int | float | None:
    raw = env.get(key)
    if raw is None:
        return None
    try:
        return cast(raw)
    except ValueError as exc:
        raise AisConfigError(f"{key} must be a number, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class AisMapConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Backend base URL (scheme and host, no trailing slash).
    request_path : str
        Path of the stored-procedure endpoint both queries are posted to.
    list_procedure : str
        Procedure name for the vessel list query.
    route_procedure : str
        Procedure name for the historical route query.
    poll_interval : float
        Seconds between scheduled vessel list polls.
    route_hours : int
        Default historical window, in hours, for route requests.
    endpoint_marker : EndpointMarker
        Which end of a route carries the highlighted marker.
    request_timeout : float
        Total timeout in seconds applied to each HTTP request.
    headers : Mapping[str, str]
        Extra static headers sent with every request.
    api_trace_enabled : bool
        Log request bodies and responses at DEBUG level (redacted).
    """

    base_url: str = BASE_URL
    request_path: str = REQUEST_PATH
    list_procedure: str = LIST_PROCEDURE
    route_procedure: str = ROUTE_PROCEDURE
    poll_interval: float = DEFAULT_POLL_INTERVAL
    route_hours: int = DEFAULT_ROUTE_HOURS
    endpoint_marker: EndpointMarker = EndpointMarker.LAST
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    headers: Mapping[str, str] = dataclasses.field(default_factory=dict)
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise AisConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.route_hours < 1:
            raise AisConfigError(f"route_hours must be at least 1, got {self.route_hours}")
        if self.request_timeout <= 0:
            raise AisConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if not isinstance(self.endpoint_marker, EndpointMarker):
            try:
                marker = EndpointMarker(str(self.endpoint_marker).strip().lower())
            except ValueError as exc:
                raise AisConfigError(
                    f"endpoint_marker must be one of {[m.value for m in EndpointMarker]}, got {self.endpoint_marker!r}"
                ) from exc
            object.__setattr__(self, "endpoint_marker", marker)
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def request_url(self) -> str:
        return f"{self.base_url}{self.request_path}"

    @classmethod
    def from_env(cls, **overrides: Any) -> AisMapConfig:
        """Create configuration from environment variables.

        Reads optional ``AIS_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        AisMapConfig
            Populated configuration.

        Raises
        ------
        AisConfigError
            If a numeric or enum variable cannot be parsed.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "AIS_BASE_URL": "base_url",
            "AIS_REQUEST_PATH": "request_path",
            "AIS_LIST_PROCEDURE": "list_procedure",
            "AIS_ROUTE_PROCEDURE": "route_procedure",
            "AIS_ENDPOINT_MARKER": "endpoint_marker",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMERIC_MAP: dict[str, tuple[str, type[int] | type[float]]] = {
            "AIS_POLL_INTERVAL": ("poll_interval", float),
            "AIS_ROUTE_HOURS": ("route_hours", int),
            "AIS_REQUEST_TIMEOUT": ("request_timeout", float),
        }
        for env_key, (field_name, cast) in _ENV_NUMERIC_MAP.items():
            if field_name in overrides:
                continue
            number = _env_number(env, env_key, cast)
            if number is not None:
                config_kwargs[field_name] = number

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(env.get("AIS_API_TRACE_ENABLED"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
