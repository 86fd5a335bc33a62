"""Minimal multicast primitives.

A :class:`Subject` pushes every value passed to :meth:`Subject.next` to all
current subscribers, synchronously and in order. Subscribers are plain
callbacks; a subject can also be consumed with ``async for``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(eq=False, slots=True)
class _Observer(Generic[T]):
    on_next: Callable[[T], None]
    on_error: Callable[[BaseException], None] | None = None


class Subscription:
    """Handle returned by ``subscribe``; call :meth:`unsubscribe` to detach.

    Unsubscribing twice is a no-op. Usable as a context manager.
    """

    def __init__(self, teardown: Callable[[], None] | None = None) -> None:
        self._teardown = teardown
        self.closed = teardown is None

    def unsubscribe(self) -> None:
        if self.closed:
            return
        self.closed = True
        teardown, self._teardown = self._teardown, None
        if teardown is not None:
            teardown()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.unsubscribe()


class Subject(Generic[T]):
    """Push stream with any number of subscribers."""

    def __init__(self) -> None:
        self._observers: list[_Observer[T]] = []

    @property
    def observed(self) -> bool:
        """Whether at least one subscriber is attached."""
        return bool(self._observers)

    @property
    def subscriber_count(self) -> int:
        return len(self._observers)

    def subscribe(
        self,
        on_next: Callable[[T], None],
        on_error: Callable[[BaseException], None] | None = None,
    ) -> Subscription:
        return self._attach(_Observer(on_next, on_error))

    def _attach(self, observer: _Observer[T]) -> Subscription:
        self._observers.append(observer)
        return Subscription(lambda: self._detach(observer))

    def _detach(self, observer: _Observer[T]) -> None:
        try:
            self._observers.remove(observer)
        except ValueError:
            return
        if not self._observers:
            self._on_unobserved()

    def _on_unobserved(self) -> None:
        """Hook called when the last subscriber leaves."""

    def _deliver(self, observer: _Observer[T], value: T) -> None:
        try:
            observer.on_next(value)
        except Exception:
            _logger.warning("Subscriber callback failed", exc_info=True)

    def next(self, value: T) -> None:
        for observer in list(self._observers):
            if observer in self._observers:
                self._deliver(observer, value)

    def error(self, exc: BaseException) -> None:
        """Deliver a terminal error and drop every subscriber."""
        observers, self._observers = self._observers, []
        for observer in observers:
            if observer.on_error is None:
                _logger.debug("Unhandled stream error for subscriber: %s", exc)
                continue
            try:
                observer.on_error(exc)
            except Exception:
                _logger.warning("Subscriber error callback failed", exc_info=True)
        if observers:
            self._on_unobserved()

    async def _iterate(self) -> AsyncIterator[T]:
        queue: asyncio.Queue[tuple[bool, Any]] = asyncio.Queue()
        subscription = self.subscribe(
            lambda value: queue.put_nowait((True, value)),
            lambda exc: queue.put_nowait((False, exc)),
        )
        try:
            while True:
                ok, item = await queue.get()
                if not ok:
                    raise item
                yield item
        finally:
            subscription.unsubscribe()

    def __aiter__(self) -> AsyncIterator[T]:
        return self._iterate()


class ValueSubject(Subject[T]):
    """Subject holding a current value that is replayed to new subscribers."""

    def __init__(self, initial: T) -> None:
        super().__init__()
        self._value = initial

    @property
    def value(self) -> T:
        return self._value

    def subscribe(
        self,
        on_next: Callable[[T], None],
        on_error: Callable[[BaseException], None] | None = None,
    ) -> Subscription:
        observer = _Observer(on_next, on_error)
        subscription = self._attach(observer)
        self._deliver(observer, self._value)
        return subscription

    def next(self, value: T) -> None:
        self._value = value
        super().next(value)
