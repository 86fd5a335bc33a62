"""Conversion and equality contracts.

A fetcher is parameterized by two caller-supplied functions:

* a *converter* turning the decoded wire payload into the application value;
* an *equality check* deciding whether a freshly converted value is a real
  change. It only suppresses redundant emissions, it never decides whether
  the network is contacted.

Some servers (or intermediaries) answer ``200`` with an unchanged body even
when ``If-None-Match`` matched, so the equality check is what keeps
subscribers from seeing duplicates.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeAlias, TypeVar

from pydantic import BaseModel

T = TypeVar("T")
RawT = TypeVar("RawT")
ModelT = TypeVar("ModelT", bound=BaseModel)

Converter: TypeAlias = Callable[[RawT], T]
EqualityCheck: TypeAlias = Callable[[T, T], bool]


def identity(raw: Any) -> Any:
    return raw


def model_converter(model: type[ModelT]) -> Callable[[Any], ModelT]:
    """Converter validating the payload into a pydantic *model*."""
    return model.model_validate


def structural_equal(current: Any, new: Any) -> bool:
    """Deep equality; pydantic models compare by field values."""
    return bool(current == new)


def _field(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(name)
    return getattr(value, name, None)


def equal_by(*fields: str) -> Callable[[Any, Any], bool]:
    """Equality check comparing only the given fields (keys or attributes).

    Typical use is a version token: ``equal_by("etag")``.
    """
    if not fields:
        raise ValueError("equal_by() needs at least one field name")

    def _is_equal(current: Any, new: Any) -> bool:
        return all(_field(current, name) == _field(new, name) for name in fields)

    return _is_equal
