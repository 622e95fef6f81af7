"""Process-wide retry limit and error catalogue."""

import logging
import threading
from typing import Mapping, Optional, Sequence

from ..constants.retry_policy import DEADLOCK_ERROR_MESSAGES, DEFAULT_MAX_RETRIES
from .error_classifier import LockErrorClassifier, normalize_catalogue

logger = logging.getLogger(__name__)


class RetryPolicy:
    """
    Retry limit and lock-contention message catalogue shared by every transaction in the process.

    Both are read once per retry decision, so changing them at runtime
    affects transactions already in their retry loop.
    """

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        messages: Optional[Mapping[str, Sequence[str]]] = None,
    ):
        self._validate(max_retries)
        self._default_max_retries = max_retries
        self._max_retries = max_retries
        self._default_messages = normalize_catalogue(messages if messages is not None else DEADLOCK_ERROR_MESSAGES)
        self._classifier = LockErrorClassifier(self._default_messages)
        self._lock = threading.Lock()

    @staticmethod
    def _validate(value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"max_retries must be an integer, got {value!r}")
        if value < 0:
            raise ValueError(f"max_retries must be zero or greater, got {value}")

    @property
    def max_retries(self) -> int:
        with self._lock:
            return self._max_retries

    @max_retries.setter
    def max_retries(self, value: int) -> None:
        self._validate(value)
        with self._lock:
            self._max_retries = value
        logger.debug(f"Maximum retries on deadlock set to {value}")

    @property
    def messages(self) -> dict[str, tuple[str, ...]]:
        """Current {category: message substrings} catalogue (a copy)."""
        with self._lock:
            return dict(self._classifier.messages)

    @messages.setter
    def messages(self, value: Mapping[str, Sequence[str]]) -> None:
        classifier = LockErrorClassifier(value)
        with self._lock:
            self._classifier = classifier
        logger.debug(f"Lock-contention categories set to {sorted(classifier.messages)}")

    def add_messages(self, category: str, *messages: str) -> None:
        """Recognize more message substrings, in a new or an existing category."""
        with self._lock:
            catalogue = dict(self._classifier.messages)
            catalogue[category] = catalogue.get(category, ()) + tuple(messages)
            self._classifier = LockErrorClassifier(catalogue)

    @property
    def classifier(self) -> LockErrorClassifier:
        with self._lock:
            return self._classifier

    def classify(self, error: BaseException) -> Optional[str]:
        """Category of `error` under the current catalogue, or None when it is not transient."""
        return self.classifier.classify(error)

    def reset(self) -> None:
        """Restore the limit and catalogue this policy was configured with."""
        self.max_retries = self._default_max_retries
        self.messages = self._default_messages
