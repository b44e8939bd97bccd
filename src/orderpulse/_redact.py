"""Helpers for safe debug logging.

Order and feedback payloads carry guest contact details and the guest
session id.  This module masks those fields before they reach DEBUG logs
while keeping enough of each value to correlate log lines.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_MASKED_KEYS: frozenset[str] = frozenset(
    {
        "customer_email",
        "customeremail",
        "email",
        "customer_phone",
        "customerphone",
        "phone",
        "session_id",
        "sessionid",
        "x-session-id",
    }
)

_DROPPED_KEYS: frozenset[str] = frozenset({"authorization", "cookie", "customer_name", "customername"})


def mask_value(value: str) -> str:
    """Mask *value*, keeping the first character and an e-mail domain."""
    if not value:
        return value
    local, at, domain = value.partition("@")
    if at:
        return f"{local[:1]}***@{domain}"
    if len(value) <= 4:
        return "***"
    return f"{value[:2]}***{value[-2:]}"


def redact_for_log(value: Any, *, max_string: int = 256, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > 10:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            lowered = key.lower()
            if lowered in _DROPPED_KEYS:
                redacted[key] = "<redacted>"
            elif lowered in _MASKED_KEYS and isinstance(v, str):
                redacted[key] = mask_value(v)
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)
