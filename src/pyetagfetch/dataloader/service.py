"""Data loader streams built on top of :class:`~pyetagfetch.EtagFetcher`.

The server sends the items as an array inside an object with a sibling
version field (``etag`` by default). When the version changes a new
:class:`LocalDataLoader` is emitted; lookups on it are synchronous because
the whole collection is already in memory.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from pyetagfetch.dataloader.batch import create_by_id
from pyetagfetch.dataloader.local import LocalDataLoader
from pyetagfetch.fetcher import EtagFetcher
from pyetagfetch.streams.subject import Subject, Subscription, _Observer

_logger = logging.getLogger(__name__)

S = TypeVar("S")
T = TypeVar("T")
LoaderT = TypeVar("LoaderT")


@dataclass(frozen=True)
class IndexedCollection:
    """Converted payload: the raw object plus its items indexed by id."""

    version: Any
    items: tuple[Any, ...]
    by_id: Mapping[Hashable, Any]
    raw: Mapping[str, Any]


class SharedReplaySubject(Subject[T]):
    """Share one upstream subscription among any number of subscribers.

    The upstream is subscribed on the first downstream subscriber and
    released when the last one leaves, which also forgets the replayed
    value. Late subscribers immediately receive the latest projected value.

    Upstream errors, and projections that raise, are logged and replaced by a
    single ``fallback()`` value; they never reach downstream subscribers.
    """

    def __init__(
        self,
        source: Subject[S],
        project: Callable[[S], T],
        fallback: Callable[[], T],
    ) -> None:
        super().__init__()
        self._source = source
        self._project = project
        self._fallback = fallback
        self._latest: T | None = None
        self._upstream: Subscription | None = None
        self._finished = False

    @property
    def latest(self) -> T | None:
        return self._latest

    def subscribe(
        self,
        on_next: Callable[[T], None],
        on_error: Callable[[BaseException], None] | None = None,
    ) -> Subscription:
        observer = _Observer(on_next, on_error)
        subscription = self._attach(observer)
        if self._latest is not None:
            self._deliver(observer, self._latest)
        if self._upstream is None and not self._finished:
            upstream = self._source.subscribe(self._on_source_value, self._on_source_error)
            if self._finished:
                # The replay during subscribe already failed over to the fallback.
                upstream.unsubscribe()
            else:
                self._upstream = upstream
        return subscription

    def next(self, value: T) -> None:
        self._latest = value
        super().next(value)

    def _on_source_value(self, value: S) -> None:
        try:
            projected = self._project(value)
        except Exception as exc:
            self._on_source_error(exc)
            return
        self.next(projected)

    def _on_source_error(self, exc: BaseException) -> None:
        _logger.error("Error in shared data loader stream: %s", exc, exc_info=exc)
        upstream, self._upstream = self._upstream, None
        self._finished = True
        if upstream is not None:
            upstream.unsubscribe()
        self.next(self._fallback())

    def _on_unobserved(self) -> None:
        upstream, self._upstream = self._upstream, None
        self._latest = None
        self._finished = False
        if upstream is not None:
            upstream.unsubscribe()


class LocalDataLoaderEtagService(Generic[LoaderT]):
    """Expose a fetched collection as a stream of synchronous data loaders.

    Parameters
    ----------
    create_fetcher : callable
        Receives this service's converter and equality check and returns the
        :class:`EtagFetcher` monitoring the endpoint (polling follows its
        ``refresh_interval`` / ``Expires`` handling).
    id_key : str
        Field holding each item's identifier.
    items_key : str
        Field holding the item array.
    version_key : str
        Field holding the collection's change token.
    create_data_loader : callable
        Builds the loader from the id -> item mapping. Defaults to
        :class:`LocalDataLoader`.

    ``data_loader`` is shared: any number of subscribers are served by a
    single subscription to the fetcher.
    """

    def __init__(
        self,
        create_fetcher: Callable[
            [Callable[[Mapping[str, Any]], IndexedCollection], Callable[[IndexedCollection, IndexedCollection], bool]],
            EtagFetcher[IndexedCollection, Mapping[str, Any]],
        ],
        *,
        id_key: str,
        items_key: str,
        version_key: str = "etag",
        create_data_loader: Callable[[Mapping[Hashable, Any]], LoaderT] = LocalDataLoader,  # type: ignore[assignment]
    ) -> None:
        self.id_key = id_key
        self.items_key = items_key
        self.version_key = version_key
        self.fetcher = create_fetcher(self.converter, self.is_equal)
        self.data_loader: SharedReplaySubject[LoaderT] = SharedReplaySubject(
            self.fetcher.data,
            lambda collection: create_data_loader(collection.by_id),
            lambda: create_data_loader({}),
        )

    def converter(self, raw: Mapping[str, Any]) -> IndexedCollection:
        items = tuple(raw[self.items_key])
        return IndexedCollection(
            version=raw.get(self.version_key),
            items=items,
            by_id=MappingProxyType(create_by_id(items, self.id_key)),
            raw=MappingProxyType(dict(raw)),
        )

    def is_equal(self, current: IndexedCollection, new: IndexedCollection) -> bool:
        # Without a version on both sides, fall back to the items themselves.
        if current.version is None or new.version is None:
            return current.items == new.items
        return bool(current.version == new.version)


class StandardLocalDataLoaderEtagService(LocalDataLoaderEtagService[LoaderT]):
    """Service for the common payload shape ``{"etag": ..., "items": [{"id": ...}]}``."""

    def __init__(
        self,
        create_fetcher: Callable[
            [Callable[[Mapping[str, Any]], IndexedCollection], Callable[[IndexedCollection, IndexedCollection], bool]],
            EtagFetcher[IndexedCollection, Mapping[str, Any]],
        ],
        create_data_loader: Callable[[Mapping[Hashable, Any]], LoaderT] = LocalDataLoader,  # type: ignore[assignment]
    ) -> None:
        super().__init__(
            create_fetcher,
            id_key="id",
            items_key="items",
            create_data_loader=create_data_loader,
        )
