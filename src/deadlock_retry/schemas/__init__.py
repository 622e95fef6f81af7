from .retry import LockErrorKind, RetryAttempt

__all__ = ["LockErrorKind", "RetryAttempt"]
