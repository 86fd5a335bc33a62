"""Custom exception hierarchy for pyetagfetch."""

from __future__ import annotations

from collections.abc import Mapping

from multidict import CIMultiDict, CIMultiDictProxy


class FetcherError(Exception):
    """Base exception for all pyetagfetch errors."""


class FetcherConfigError(FetcherError):
    """Invalid or missing configuration (e.g. no URL set at fetch time)."""


class FetcherTransportError(FetcherError):
    """HTTP-level failure.

    ``status_code`` is ``None`` when the failure could not be classified as
    an HTTP response at all (network error, timeout, undecodable body).
    ``headers`` carries the response headers when a response was received,
    so a ``304`` surfaced as an error can still be used for revalidation.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        headers: Mapping[str, str] | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.headers: CIMultiDictProxy[str] = CIMultiDictProxy(CIMultiDict(headers or {}))
        self.url = url
        super().__init__(message)


class FetcherUnexpectedResponseError(FetcherTransportError):
    """The server answered with a status other than 200 or 304."""


class FetcherConversionError(FetcherError):
    """The converter failed to turn a response body into a value.

    The converter's exception is available as ``__cause__``.
    """

    def __init__(self, message: str, *, url: str = "") -> None:
        self.url = url
        super().__init__(message)
