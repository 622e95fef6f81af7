"""Recognize lock-contention failures among database errors."""

from __future__ import annotations

import logging
import re
from typing import Mapping, Optional, Sequence

from ..constants.retry_policy import (
    DEADLOCK_ERROR_MESSAGES,
    MYSQL_ERROR_CODES,
    POSTGRES_SQLSTATES,
)

logger = logging.getLogger(__name__)


def normalize_catalogue(messages: Mapping[str, Sequence[str]]) -> dict[str, tuple[str, ...]]:
    """Validate a {category: message substrings} mapping and freeze it."""
    catalogue: dict[str, tuple[str, ...]] = {}
    for category, category_messages in messages.items():
        if not isinstance(category, str) or not category:
            raise ValueError(f"Error category must be a non-empty string, got {category!r}")
        if isinstance(category_messages, str):
            raise ValueError(f"Messages for {category!r} must be a sequence of strings, not a string")
        frozen = tuple(category_messages)
        if not all(isinstance(message, str) and message for message in frozen):
            raise ValueError(f"Messages for {category!r} must be non-empty strings, got {frozen!r}")
        catalogue[category] = frozen
    return catalogue


class LockErrorClassifier:
    """
    Map a database error to its lock-contention category, or None when it is not transient.

    Driver error codes are checked first (MySQL error numbers, PostgreSQL
    SQLSTATE). When the driver exposes neither, the error text is matched
    against the message catalogue. The text match is best-effort: it depends
    on the server's message language.
    """

    def __init__(self, messages: Optional[Mapping[str, Sequence[str]]] = None):
        self.messages = normalize_catalogue(messages if messages is not None else DEADLOCK_ERROR_MESSAGES)
        self._patterns: list[tuple[re.Pattern[str], str]] = [
            (re.compile(re.escape(message)), category)
            for category, category_messages in self.messages.items()
            for message in category_messages
        ]

    def classify(self, error: BaseException) -> Optional[str]:
        category = self._classify_by_code(error)
        if category is not None:
            return category
        return self._classify_by_message(str(error))

    @staticmethod
    def _classify_by_code(error: BaseException) -> Optional[str]:
        # SQLAlchemy keeps the driver exception on .orig
        orig = getattr(error, "orig", None) or error

        sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
        if isinstance(sqlstate, str) and sqlstate in POSTGRES_SQLSTATES:
            return POSTGRES_SQLSTATES[sqlstate]

        args = getattr(orig, "args", ())
        if args and isinstance(args[0], int) and not isinstance(args[0], bool):
            return MYSQL_ERROR_CODES.get(args[0])
        return None

    def _classify_by_message(self, message: str) -> Optional[str]:
        for pattern, category in self._patterns:
            if pattern.search(message):
                return category
        return None
