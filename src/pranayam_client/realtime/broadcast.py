"""Fire-and-forget fan-out of real-time events to in-process subscribers."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

logger = logging.getLogger(__name__)

Subscriber = Callable[[dict], Any]


class Broadcaster:
    """A hot event stream: subscribers only see events published after they join.

    Nothing is buffered or replayed, and a failing subscriber does not stop
    delivery to the others.
    """

    def __init__(self, name: str):
        self.name = name
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: dict) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception(f"Subscriber to {self.name} raised")

    def __len__(self) -> int:
        return len(self._subscribers)
