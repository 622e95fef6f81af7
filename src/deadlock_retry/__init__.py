"""Retry database transactions that fail on deadlocks and lock-wait timeouts."""

from .schemas.retry import LockErrorKind, RetryAttempt
from .services.transaction_retry_service import TransactionRetryService
from .utils.decorators import retry_on_deadlock

__all__ = [
    "LockErrorKind",
    "RetryAttempt",
    "TransactionRetryService",
    "retry_on_deadlock",
]
