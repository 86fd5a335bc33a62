"""HTTP fetcher handling ETag/If-None-Match, Expires and refresh intervals."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Coroutine
from http import HTTPStatus
from typing import Any, Generic, TypeVar

from pyetagfetch._constants import ACCEPTED_STATUSES, HEADER_ETAG, HEADER_EXPIRES, HEADER_IF_NONE_MATCH
from pyetagfetch._transport import HttpResponse, Transport
from pyetagfetch.auth import AuthProvider, NoAuth
from pyetagfetch.config import FetcherConfig
from pyetagfetch.exceptions import (
    FetcherConfigError,
    FetcherConversionError,
    FetcherError,
    FetcherTransportError,
    FetcherUnexpectedResponseError,
)
from pyetagfetch.state.cache import EndpointCacheState
from pyetagfetch.state.policy import compute_refresh_delay, parse_expires
from pyetagfetch.streams.polling import PollingSubject
from pyetagfetch.streams.subject import ValueSubject

_logger = logging.getLogger(__name__)

T = TypeVar("T")
RawT = TypeVar("RawT")


class EtagFetcher(Generic[T, RawT]):
    """Cache-and-poll engine for a single endpoint.

    Use it one-shot with :meth:`fetch`, or subscribe to :attr:`data`: while at
    least one subscriber is attached the server is polled according to the
    ``Expires`` header or ``refresh_interval``, whichever is shorter.
    Network activity is reported on :attr:`loading`.

    Usage::

        fetcher = EtagFetcher(
            transport,
            NoAuth(),
            "https://api.example.com/data",
            Data.model_validate,
            lambda old, new: old.version == new.version,
        )
        subscription = fetcher.data.subscribe(lambda data: print("new data", data))

    The value is only replaced (and emitted) when ``is_equal(old, new)`` is
    false, so servers answering ``200`` with an unchanged body do not produce
    duplicate emissions.

    Concurrent :meth:`fetch` calls are not de-duplicated: both may go to the
    network and the last response to arrive wins.
    """

    def __init__(
        self,
        transport: Transport,
        auth_provider: AuthProvider | None,
        url: str,
        converter: Callable[[RawT], T],
        is_equal: Callable[[T, T], bool],
        *,
        refresh_interval: float | None = None,
        fetch_refreshes_without_interval: bool = False,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._transport = transport
        self._auth_provider: AuthProvider = auth_provider or NoAuth()
        self._url = url
        self._converter = converter
        self._is_equal = is_equal
        self._refresh_interval = refresh_interval
        self._fetch_refreshes_without_interval = fetch_refreshes_without_interval
        self._clock = clock

        self._state = EndpointCacheState()
        self._value: T | None = None
        self._polling_handle: asyncio.TimerHandle | None = None
        self._background_tasks: set[asyncio.Task[None]] = set()

        self._data: PollingSubject[T] = PollingSubject(
            self._setup_polling_timeout,
            self._clear_polling_timeout,
            self.get_value,
        )
        self._loading: ValueSubject[bool] = ValueSubject(False)

    @classmethod
    def from_config(
        cls,
        config: FetcherConfig,
        transport: Transport,
        converter: Callable[[RawT], T],
        is_equal: Callable[[T, T], bool],
        auth_provider: AuthProvider | None = None,
        **kwargs: Any,
    ) -> EtagFetcher[T, RawT]:
        return cls(
            transport,
            auth_provider,
            config.url,
            converter,
            is_equal,
            refresh_interval=config.refresh_interval,
            fetch_refreshes_without_interval=config.fetch_refreshes_without_interval,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Public state
    # ------------------------------------------------------------------

    @property
    def data(self) -> PollingSubject[T]:
        """Change stream; subscribing starts polling."""
        return self._data

    @property
    def loading(self) -> ValueSubject[bool]:
        """``True`` while a request is in flight."""
        return self._loading

    @property
    def url(self) -> str:
        return self._url

    @property
    def etag(self) -> str | None:
        return self._state.etag

    @property
    def expires_at(self) -> float | None:
        return self._state.expires_at

    @property
    def last_fetch_timestamp(self) -> float | None:
        return self._state.last_fetch_timestamp

    @property
    def refresh_interval(self) -> float | None:
        return self._refresh_interval

    @property
    def is_polling(self) -> bool:
        return self._polling_handle is not None

    def get_value(self) -> T | None:
        """Synchronously get the last known value, if any.

        See :meth:`fetch` to get it from HTTP if unknown or expired.
        """
        return self._value

    def get_refresh_delay(self) -> float | None:
        """Seconds before the value needs refreshing.

        ``0.0`` means stale, ``None`` means the value never needs a timed
        refresh.
        """
        return compute_refresh_delay(
            now=self._clock(),
            expires_at=self._state.expires_at,
            last_fetch_timestamp=self._state.last_fetch_timestamp,
            refresh_interval=self._refresh_interval,
            has_value=self._value is not None,
        )

    # ------------------------------------------------------------------
    # Fetch / reset
    # ------------------------------------------------------------------

    async def fetch(self) -> T | None:
        """Fetch the value if needed, otherwise return the known one.

        A known value is fresh while ``Expires`` is in the future or the last
        fetch is within the refresh interval. A held ``ETag`` is sent as
        ``If-None-Match``; a ``304`` reuses the current value, a ``200`` is
        passed through the converter.

        Raises
        ------
        FetcherConfigError
            No URL is set.
        FetcherTransportError
            Network failure or a non-200/304 response from the transport.
        FetcherUnexpectedResponseError
            The transport returned a status other than 200/304.
        FetcherConversionError
            The converter rejected the body. Cached state is unchanged.
        """
        delay = self.get_refresh_delay()
        if delay is None:
            if not self._fetch_refreshes_without_interval:
                _logger.debug("%s: is never to be refreshed", self._url)
                return self._value
            _logger.debug("%s: no refresh interval, fetching anyway", self._url)
        elif delay > 0:
            _logger.debug("%s: still fresh for %.3f seconds", self._url, delay)
            return self._value

        if not self._url:
            raise FetcherConfigError("url is not set")

        url = self._url
        headers = self._build_headers()
        self._loading.next(True)
        try:
            response = await self._transport.get(url, headers)
        finally:
            self._loading.next(False)

        if response.status not in ACCEPTED_STATUSES:
            _logger.error("%s: unexpected response %s", url, response.status)
            raise FetcherUnexpectedResponseError(
                f"unexpected response {response.status} for url {url}",
                status_code=response.status,
                headers=response.headers,
                url=url,
            )

        self._apply_response(url, response)
        return self._value

    async def reset(self, new_url: str | None = None) -> None:
        """Forget validators and expiry, optionally switching to *new_url*.

        Switching to a different URL also drops the cached value. If polling
        is active the timer is re-armed at once; otherwise, if :attr:`data`
        is observed, a fetch is performed.
        """
        self._state = EndpointCacheState()
        if new_url and new_url != self._url:
            self._value = None
            self._url = new_url

        if self._polling_handle is not None:
            self._clear_polling_timeout()
            self._setup_polling_timeout()
        elif self._data.observed:
            await self.fetch()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _build_headers(self) -> dict[str, str]:
        headers = dict(self._auth_provider.get_auth_headers())
        if self._state.has_validator:
            headers[HEADER_IF_NONE_MATCH] = self._state.etag  # type: ignore[assignment]
        return headers

    def _state_from_headers(self, headers: Any) -> EndpointCacheState:
        return EndpointCacheState(
            etag=headers.get(HEADER_ETAG),
            expires_at=parse_expires(headers.get(HEADER_EXPIRES)),
            last_fetch_timestamp=self._clock(),
        )

    def _apply_response(self, url: str, response: HttpResponse) -> None:
        """Commit state (and maybe a new value) from a 200/304 response.

        Conversion runs before anything is committed, so a failing converter
        leaves the previous validator, expiry and value in place.
        """
        new_state = self._state_from_headers(response.headers)

        if response.status == HTTPStatus.NOT_MODIFIED:
            _logger.info("%s: response 304 (Not Modified) - reusing data", url)
            self._state = new_state
            return

        if response.body is None or response.body in ("", b""):
            _logger.warning("%s: response 200 without a body - ignored", url)
            self._state = new_state
            return

        try:
            new_value = self._converter(response.body)
        except Exception as exc:
            raise FetcherConversionError(f"failed to convert response from {url}: {exc}", url=url) from exc

        self._state = new_state
        if self._value is None or not self._is_equal(self._value, new_value):
            self._value = new_value
            self._data.next(new_value)
        else:
            _logger.info("%s: response 200 with equal value - ignored", url)

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    def _cancel_handle(self) -> None:
        if self._polling_handle is not None:
            self._polling_handle.cancel()
            self._polling_handle = None

    def _clear_polling_timeout(self) -> None:
        if self._polling_handle is None:
            return
        _logger.info("%s: stop polling", self._url)
        self._cancel_handle()

    def _setup_polling_timeout(self) -> None:
        self._cancel_handle()
        delay = self.get_refresh_delay()
        if delay is None:
            _logger.info("%s: does not need polling", self._url)
            # Still worth one refresh: this may be the first subscriber.
            self._spawn(self._refresh_data())
            return

        _logger.debug("%s: fetch in %.3f seconds", self._url, delay)
        loop = asyncio.get_running_loop()
        self._polling_handle = loop.call_later(delay, self._on_polling_timeout)

    def _on_polling_timeout(self) -> None:
        self._polling_handle = None
        self._spawn(self._poll())

    async def _poll(self) -> None:
        if not self._data.observed:
            _logger.info("%s: stop polling since not observed", self._url)
            self._cancel_handle()
            return

        await self._refresh_data()

        if not self._data.observed:
            _logger.info("%s: stop polling since not observed", self._url)
            self._cancel_handle()
            return
        self._setup_polling_timeout()

    async def _refresh_data(self) -> None:
        """Fetch on behalf of the polling loop, recovering what can be recovered."""
        try:
            await self.fetch()
        except FetcherTransportError as exc:
            if exc.status_code is None:
                _logger.warning("%s: polling request failed: %s", self._url, exc)
                return
            if exc.status_code != HTTPStatus.NOT_MODIFIED:
                _logger.error("%s: failed to fetch (%s)", self._url, exc)
                self._data.error(exc)
                return
            self._state = self._state_from_headers(exc.headers)
        except FetcherError as exc:
            _logger.warning("%s: polling fetch failed: %s", self._url, exc)
