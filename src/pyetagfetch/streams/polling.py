"""Demand-driven multicast stream.

Like a :class:`~pyetagfetch.streams.subject.ValueSubject`, but the current
value is only replayed when one is actually known; nothing is delivered for
"no value yet". The first subscriber starts polling and the last one to
leave stops it.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from pyetagfetch.streams.subject import Subject, Subscription, _Observer

T = TypeVar("T")


class PollingSubject(Subject[T]):
    """Subject whose subscriber count drives a polling loop.

    Parameters
    ----------
    start_polling : callable
        Called on the zero-to-one subscriber transition, before the
        subscriber is admitted.
    end_polling : callable
        Called on the one-to-zero transition, including when a terminal
        error drops every subscriber.
    get_value : callable
        Returns the last known value or ``None``.
    """

    def __init__(
        self,
        start_polling: Callable[[], None],
        end_polling: Callable[[], None],
        get_value: Callable[[], T | None],
    ) -> None:
        super().__init__()
        self._start_polling = start_polling
        self._end_polling = end_polling
        self._get_value = get_value

    def subscribe(
        self,
        on_next: Callable[[T], None],
        on_error: Callable[[BaseException], None] | None = None,
    ) -> Subscription:
        if not self.observed:
            self._start_polling()
        observer = _Observer(on_next, on_error)
        subscription = self._attach(observer)
        if not subscription.closed:
            value = self._get_value()
            if value is not None:
                self._deliver(observer, value)
        return subscription

    def _on_unobserved(self) -> None:
        self._end_polling()
