"""
Publish/subscribe channel for "profile was updated" notifications.

Contract:
- Delivery is at-most-once, to the observers subscribed at publish time.
- Nothing is buffered except the most recent value, which a new subscriber
  receives immediately on subscribing.
- An observer that raises is logged and does not stop delivery to others.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Observer = Callable[[T], None]


class LastValueChannel(Generic[T]):
    def __init__(self, name: str):
        self.name = name
        self._observers: Dict[int, Observer[T]] = {}
        # Holds at most one element, the latest published value
        self._latest: List[T] = []
        self._next_id = 0
        self._lock = threading.Lock()

    def subscribe(self, observer: Observer[T]) -> Callable[[], None]:
        """
        Register an observer and replay the latest value to it, if any.

        Returns:
            A callable that removes the observer.
        """
        with self._lock:
            token = self._next_id
            self._next_id += 1
            self._observers[token] = observer
            replay = list(self._latest)

        for value in replay:
            self._deliver(observer, value)

        def unsubscribe() -> None:
            with self._lock:
                self._observers.pop(token, None)

        return unsubscribe

    def publish(self, value: T) -> int:
        """
        Send a value to every current observer.

        Returns:
            Number of observers the value was delivered to.
        """
        with self._lock:
            self._latest = [value]
            observers = list(self._observers.values())

        for observer in observers:
            self._deliver(observer, value)

        logger.debug("channel_published", channel=self.name, observers=len(observers))
        return len(observers)

    @property
    def last_value(self) -> Optional[T]:
        with self._lock:
            return self._latest[0] if self._latest else None

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._observers)

    def _deliver(self, observer: Observer[T], value: T) -> None:
        try:
            observer(value)
        except Exception:
            logger.exception("channel_observer_failed", channel=self.name)


class ProfileChannel(LastValueChannel[Dict[str, Any]]):
    """Carries the updated profile payload returned by the backend."""

    def __init__(self) -> None:
        super().__init__("profile")
