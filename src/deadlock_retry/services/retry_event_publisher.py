"""In-process channel for structured retry events."""

import logging
import threading
from typing import Any, Callable, Dict, List

from ..schemas.retry import RetryAttempt

logger = logging.getLogger(__name__)

RetryListener = Callable[[Dict[str, Any]], None]


class RetryEventPublisher:
    """
    Fan out one event per detected lock-contention failure.

    Listeners receive the payload {"attempt", "type", "retries_exhausted"}.
    A failing listener is logged and skipped; it never changes the retry
    decision.
    """

    def __init__(self):
        self._listeners: List[RetryListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: RetryListener) -> RetryListener:
        with self._lock:
            self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: RetryListener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                logger.debug(f"Listener {listener!r} was not subscribed")

    def clear(self) -> None:
        with self._lock:
            self._listeners.clear()

    def publish(self, attempt: RetryAttempt) -> None:
        payload = attempt.to_payload()
        logger.debug("Retry event", extra={"retry_event": payload})

        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(dict(payload))
            except Exception:
                logger.exception(f"Retry event listener {listener!r} failed")
