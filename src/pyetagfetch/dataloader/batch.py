"""Index helpers for collections of entities."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping, Sequence
from typing import Any, TypeVar

ItemT = TypeVar("ItemT")


def item_id(entity: Any, id_key: str) -> Hashable:
    """Identifier of *entity*: ``entity[id_key]`` for mappings, else the attribute."""
    if isinstance(entity, Mapping):
        return entity[id_key]
    return getattr(entity, id_key)


def create_by_id(entities: Iterable[ItemT], id_key: str) -> dict[Hashable, ItemT]:
    """Map each entity by its identifier.

    When several entities share an identifier the last one wins.
    """
    return {item_id(entity, id_key): entity for entity in entities}


def data_loader_batch_from_ids(
    ids: Sequence[Hashable],
    entities: Iterable[ItemT],
    id_key: str,
) -> list[ItemT | None]:
    """Entities matching *ids*, in the same order; ``None`` for unknown ids."""
    lookup = create_by_id(entities, id_key)
    return [lookup.get(entity_id) for entity_id in ids]
