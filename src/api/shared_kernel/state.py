"""Observable state cell.

Loaders own their state explicitly and publish every transition to
subscribers (the HTTP layer, the CLI progress bar, tests). There is a single
source of truth per cell; subscribers never write back.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

import structlog

T = TypeVar("T")

Subscriber = Callable[[T], None]


class Observable(Generic[T]):
    """Holds one value and notifies subscribers whenever it is replaced.

    Values are expected to be immutable; ``update`` derives a new value from
    the current one instead of mutating in place.
    """

    def __init__(self, initial: T):
        self._value = initial
        self._subscribers: list[Subscriber[T]] = []
        self._logger = structlog.get_logger()

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        self._notify()

    def update(self, fn: Callable[[T], T]) -> None:
        """Replace the value with ``fn(current)`` and notify."""
        self.set(fn(self._value))

    def subscribe(self, subscriber: Subscriber[T]) -> Callable[[], None]:
        """Register ``subscriber`` and call it immediately with the current value.

        Returns:
            A callable that removes the subscription.
        """
        self._subscribers.append(subscriber)
        subscriber(self._value)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def _notify(self) -> None:
        # A failing subscriber must not stop the state transition for others.
        for subscriber in list(self._subscribers):
            try:
                subscriber(self._value)
            except Exception as e:
                self._logger.warning(
                    "state_subscriber_failed",
                    subscriber=getattr(subscriber, "__qualname__", repr(subscriber)),
                    error=str(e),
                )
