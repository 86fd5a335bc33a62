"""pyetagfetch - Async HTTP fetcher with ETag revalidation and demand-driven polling."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyetagfetch")
except PackageNotFoundError:
    __version__ = "0+local"

from pyetagfetch._transport import AiohttpTransport, HttpResponse, Transport
from pyetagfetch.auth import AuthProvider, BearerTokenAuth, NoAuth, StaticHeadersAuth
from pyetagfetch.config import FetcherConfig
from pyetagfetch.contracts import equal_by, model_converter, structural_equal
from pyetagfetch.dataloader import (
    IndexedCollection,
    LocalDataLoader,
    LocalDataLoaderEtagService,
    StandardLocalDataLoaderEtagService,
    create_by_id,
    data_loader_batch_from_ids,
)
from pyetagfetch.exceptions import (
    FetcherConfigError,
    FetcherConversionError,
    FetcherError,
    FetcherTransportError,
    FetcherUnexpectedResponseError,
)
from pyetagfetch.fetcher import EtagFetcher
from pyetagfetch.streams import PollingSubject, Subject, Subscription, ValueSubject

__all__ = [
    "__version__",
    "AiohttpTransport",
    "AuthProvider",
    "BearerTokenAuth",
    "EtagFetcher",
    "FetcherConfig",
    "FetcherConfigError",
    "FetcherConversionError",
    "FetcherError",
    "FetcherTransportError",
    "FetcherUnexpectedResponseError",
    "HttpResponse",
    "IndexedCollection",
    "LocalDataLoader",
    "LocalDataLoaderEtagService",
    "NoAuth",
    "PollingSubject",
    "StandardLocalDataLoaderEtagService",
    "StaticHeadersAuth",
    "Subject",
    "Subscription",
    "Transport",
    "ValueSubject",
    "create_by_id",
    "data_loader_batch_from_ids",
    "equal_by",
    "model_converter",
    "structural_equal",
]
