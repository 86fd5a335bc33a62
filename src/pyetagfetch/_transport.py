"""HTTP transport for conditional GET requests."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

import aiohttp
from multidict import CIMultiDict, CIMultiDictProxy

from pyetagfetch._constants import ACCEPTED_STATUSES
from pyetagfetch._redact import redact_for_log, redact_headers
from pyetagfetch.config import FetcherConfig
from pyetagfetch.exceptions import FetcherError, FetcherTransportError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpResponse:
    """Status, case-insensitive headers and decoded body of one GET.

    ``body`` is ``None`` when the server sent no content (always the case
    for ``304``).
    """

    status: int
    headers: CIMultiDictProxy[str] = field(default_factory=lambda: CIMultiDictProxy(CIMultiDict()))
    body: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.headers, CIMultiDictProxy):
            object.__setattr__(self, "headers", CIMultiDictProxy(CIMultiDict(self.headers)))


class Transport(Protocol):
    """Structural transport interface used by the fetcher.

    Implementations return 200 and 304 responses and raise
    :class:`FetcherTransportError` for anything else, with ``status_code``
    set when a response was received.
    """

    async def get(self, url: str, headers: Mapping[str, str]) -> HttpResponse:
        ...


class AiohttpTransport:
    """Transport backed by :class:`aiohttp.ClientSession`.

    Usage::

        async with AiohttpTransport(config) as transport:
            fetcher = EtagFetcher(transport, NoAuth(), url, convert, is_equal)

    A session passed in by the caller is used as-is and never closed here.
    """

    def __init__(
        self,
        config: FetcherConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config or FetcherConfig()
        self._external_session = session is not None
        self._http = session

    async def __aenter__(self) -> AiohttpTransport:
        if self._http is None:
            self._http = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if not self._external_session and self._http is not None:
            await self._http.close()
        self._http = None

    def _require_session(self) -> aiohttp.ClientSession:
        if self._http is None:
            raise FetcherError("Transport not initialized. Use 'async with AiohttpTransport(...) as transport:'")
        return self._http

    async def get(self, url: str, headers: Mapping[str, str]) -> HttpResponse:
        """Send a GET and decode the JSON body.

        Raises
        ------
        FetcherTransportError
            With ``status_code`` set for statuses other than 200/304, and
            without it for network failures, timeouts and invalid JSON.
        """
        http = self._require_session()
        request_headers: CIMultiDict[str] = CIMultiDict(
            {
                "Accept": self._config.accept,
                "User-Agent": self._config.user_agent,
            }
        )
        for name, value in headers.items():
            request_headers[name] = value
        timeout = aiohttp.ClientTimeout(total=self._config.request_timeout)

        _logger.debug("GET %s headers=%s", url, redact_headers(request_headers))

        try:
            async with http.get(url, headers=request_headers, timeout=timeout) as resp:
                status = resp.status
                response_headers = CIMultiDictProxy(CIMultiDict(resp.headers))
                text = await resp.text()
        except aiohttp.ClientError as exc:
            raise FetcherTransportError(f"Request to {url} failed: {exc}", url=url) from exc
        except TimeoutError as exc:
            raise FetcherTransportError(
                f"Request to {url} timed out after {self._config.request_timeout}s",
                url=url,
            ) from exc

        if status not in ACCEPTED_STATUSES:
            raise FetcherTransportError(
                f"HTTP {status} from {url}: {text[:200]}",
                status_code=status,
                headers=response_headers,
                url=url,
            )

        body: Any = None
        if text.strip():
            try:
                body = json.loads(text)
            except json.JSONDecodeError as exc:
                raise FetcherTransportError(f"Invalid JSON from {url}: {text[:200]}", url=url) from exc

        _logger.debug("GET %s -> %s body=%s", url, status, redact_for_log(body))
        return HttpResponse(status=status, headers=response_headers, body=body)
