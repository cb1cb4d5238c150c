"""
Typed synchronous event channels.

Listeners run synchronously in subscription order. An ``emit`` issued from
inside a listener is queued and delivered once the current dispatch finishes,
so no listener is ever re-entered.
"""

import logging
from collections import deque
from typing import Callable, Deque, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventChannel(Generic[T]):
    """Single-event subscription point."""

    def __init__(self, name: str):
        self.name = name
        self._listeners: List[Callable[[T], None]] = []
        self._pending: Deque[T] = deque()
        self._dispatching = False

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            A function that removes the listener again.
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(callback)
            except ValueError:
                pass

        return unsubscribe

    def emit(self, payload: T) -> None:
        """Deliver payload to every listener."""
        self._pending.append(payload)
        if self._dispatching:
            return

        self._dispatching = True
        try:
            while self._pending:
                item = self._pending.popleft()
                for callback in list(self._listeners):
                    try:
                        callback(item)
                    except Exception as e:
                        logger.warning(f"Listener on '{self.name}' failed: {e}")
        finally:
            self._dispatching = False

    def clear(self) -> None:
        """Drop all listeners."""
        self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)
