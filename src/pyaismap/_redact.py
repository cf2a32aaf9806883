"""Trace-log sanitizing.

Callers may pass credentials through ``AisMapConfig.headers`` and a single
list response can hold thousands of vessels, so request/response tracing
goes through :func:`redact_for_log` first.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

# Matched case-insensitively against mapping keys (header names included).
_SECRET_KEYS = frozenset(
    {
        "authorization",
        "proxy-authorization",
        "cookie",
        "set-cookie",
        "x-api-key",
        "apikey",
        "api_key",
        "password",
        "token",
        "access_token",
        "accesstoken",
    }
)

_MAX_DEPTH = 20


def _is_secret(key: Any) -> bool:
    return str(key).lower() in _SECRET_KEYS


def redact_for_log(value: Any, *, max_string: int = 512, max_items: int = 20, _depth: int = 0) -> Any:
    """Return a copy of *value* with secrets masked and bulk truncated.

    Sequences longer than *max_items* keep their head and gain a
    ``"<+N more>"`` tail entry.
    """
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"

    def _child(item: Any) -> Any:
        return redact_for_log(item, max_string=max_string, max_items=max_items, _depth=_depth + 1)

    if isinstance(value, Mapping):
        return {str(key): "<redacted>" if _is_secret(key) else _child(item) for key, item in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        head = [_child(item) for item in value[:max_items]]
        if len(value) > max_items:
            head.append(f"<+{len(value) - max_items} more>")
        return head
    return repr(value)
