"""Synchronous lookup over an already fetched collection."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping
from types import MappingProxyType
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class LocalDataLoader(Generic[K, V]):
    """Read-only id -> item lookup.

    The mapping is copied on construction, so later changes to the source
    dict are not visible and readers never observe a partial update.
    """

    def __init__(self, by_id: Mapping[K, V]) -> None:
        self._by_id: Mapping[K, V] = MappingProxyType(dict(by_id))

    def load(self, key: K) -> V | None:
        return self._by_id.get(key)

    def load_many(self, keys: Iterable[K]) -> list[V | None]:
        return [self._by_id.get(key) for key in keys]

    def __contains__(self, key: object) -> bool:
        return key in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={len(self._by_id)})"
