"""Helpers for safe debug logging.

Request headers routinely carry credentials (bearer tokens, API keys,
cookies) and response bodies can be large. This module redacts and
truncates both before they reach DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_REDACTED = "<redacted>"

_SENSITIVE_HEADERS: frozenset[str] = frozenset(
    {
        "authorization",
        "proxy-authorization",
        "cookie",
        "set-cookie",
        "x-api-key",
        "api-key",
    }
)

_SENSITIVE_FIELDS: frozenset[str] = frozenset(
    {
        "password",
        "token",
        "access_token",
        "refresh_token",
        "client_secret",
        "apikey",
    }
)


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy *headers* with credential-bearing values replaced.

    ``Authorization`` keeps its scheme (``Bearer <redacted>``) so logs still
    show which kind of auth was sent.
    """
    redacted: dict[str, str] = {}
    for name, value in headers.items():
        lowered = name.lower()
        if lowered not in _SENSITIVE_HEADERS:
            redacted[name] = value
        elif lowered.endswith("authorization") and " " in value:
            redacted[name] = f"{value.split(' ', 1)[0]} {_REDACTED}"
        else:
            redacted[name] = _REDACTED
    return redacted


def redact_for_log(value: Any, *, max_string: int = 512, max_items: int = 20, _depth: int = 0) -> Any:
    """Return a redacted, size-bounded copy of a decoded JSON body."""
    if _depth > 10:
        return "<max-depth>"

    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"

    if value is None or isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        return {
            str(k): _REDACTED
            if str(k).lower() in _SENSITIVE_FIELDS
            else redact_for_log(v, max_string=max_string, max_items=max_items, _depth=_depth + 1)
            for k, v in value.items()
        }

    if isinstance(value, Sequence):
        items = [redact_for_log(v, max_string=max_string, max_items=max_items, _depth=_depth + 1) for v in value[:max_items]]
        if len(value) > max_items:
            items.append(f"<{len(value) - max_items} more>")
        return items

    return repr(value)
