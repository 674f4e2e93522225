"""Typed synchronous event channels.

Each event kind gets its own ``EventChannel[T]``. Handlers run in
subscription order on the caller's stack; a failing handler is logged and
does not prevent the remaining handlers from running.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventChannel(Generic[T]):
    def __init__(self, name: str):
        self.name = name
        self._handlers: list[Callable[[T], None]] = []

    def subscribe(self, handler: Callable[[T], None]) -> Callable[[], None]:
        """Register a handler and return a function that unregisters it."""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def emit(self, payload: T) -> None:
        for handler in list(self._handlers):
            try:
                handler(payload)
            except Exception:
                logger.exception("Handler for '%s' failed", self.name)

    def clear(self) -> None:
        self._handlers.clear()

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)
