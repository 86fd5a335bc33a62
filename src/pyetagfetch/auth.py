"""Authentication header providers.

The fetcher merges ``get_auth_headers()`` into every outgoing request. Any
object with that method satisfies :class:`AuthProvider`; the classes below
cover the common cases.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Protocol


class AuthProvider(Protocol):
    """Structural auth interface consumed by :class:`pyetagfetch.EtagFetcher`."""

    def get_auth_headers(self) -> Mapping[str, str]:
        ...


class NoAuth:
    """Default provider: sends no authentication headers."""

    def get_auth_headers(self) -> Mapping[str, str]:
        return {}


class StaticHeadersAuth:
    """Sends a fixed set of headers (API keys, tenant ids, ...)."""

    def __init__(self, headers: Mapping[str, str]) -> None:
        self._headers = dict(headers)

    def get_auth_headers(self) -> Mapping[str, str]:
        return dict(self._headers)


class BearerTokenAuth:
    """Sends ``Authorization: Bearer <token>``.

    *token* may be a string or a zero-argument callable; the callable is
    invoked for every request, so rotated tokens are picked up without
    rebuilding the fetcher. An empty token sends no header.
    """

    def __init__(self, token: str | Callable[[], str | None]) -> None:
        self._token = token

    def get_auth_headers(self) -> Mapping[str, str]:
        token = self._token() if callable(self._token) else self._token
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}
