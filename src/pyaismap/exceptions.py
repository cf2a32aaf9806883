"""Custom exception hierarchy for pyaismap."""

from __future__ import annotations

from enum import StrEnum
from typing import ClassVar


class FailureKind(StrEnum):
    """Failure taxonomy reported to callers of the sync engines."""

    NETWORK_FAILURE = "network_failure"
    MALFORMED_RESPONSE = "malformed_response"
    NORMALIZATION_FALLBACK = "normalization_fallback"


class AisMapError(Exception):
    """Base exception for all pyaismap errors."""

    kind: ClassVar[FailureKind | None] = None


class AisConfigError(AisMapError):
    """Invalid or missing configuration."""


class AisNetworkError(AisMapError):
    """Transport-level failure (connection error, timeout, non-200 status)."""

    kind = FailureKind.NETWORK_FAILURE

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class AisMalformedResponseError(AisMapError):
    """Response body was not JSON or did not carry a record sequence."""

    kind = FailureKind.MALFORMED_RESPONSE

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)
