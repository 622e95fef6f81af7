from .backoff import BackoffScheduler
from .error_classifier import LockErrorClassifier
from .innodb_status_service import DISABLED, UNRESOLVED, DiagnosticCommandCache, InnodbStatusService
from .retry_event_publisher import RetryEventPublisher
from .retry_policy import RetryPolicy
from .transaction_retry_service import TransactionRetryService

__all__ = [
    "BackoffScheduler",
    "DISABLED",
    "DiagnosticCommandCache",
    "InnodbStatusService",
    "LockErrorClassifier",
    "RetryEventPublisher",
    "RetryPolicy",
    "TransactionRetryService",
    "UNRESOLVED",
]
