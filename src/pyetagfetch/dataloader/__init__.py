"""Synchronous data loaders over fetched collections."""

from pyetagfetch.dataloader.batch import create_by_id, data_loader_batch_from_ids
from pyetagfetch.dataloader.local import LocalDataLoader
from pyetagfetch.dataloader.service import (
    IndexedCollection,
    LocalDataLoaderEtagService,
    SharedReplaySubject,
    StandardLocalDataLoaderEtagService,
)

__all__ = [
    "IndexedCollection",
    "LocalDataLoader",
    "LocalDataLoaderEtagService",
    "SharedReplaySubject",
    "StandardLocalDataLoaderEtagService",
    "create_by_id",
    "data_loader_batch_from_ids",
]
