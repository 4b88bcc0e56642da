"""Minimal subscriber list used to publish state changes."""

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Observable(Generic[T]):
    """Holds subscribers and hands each published value to all of them."""

    def __init__(self) -> None:
        self._subscribers: list[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[T], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _publish(self, value: T) -> None:
        # Copy so a subscriber may unsubscribe itself while being notified
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception:
                logger.exception(f"Subscriber {callback!r} failed")
