"""Decorators for running repository/use-case code in retried transactions."""

import logging
from functools import wraps
from typing import Any, Callable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..services.transaction_retry_service import TransactionRetryService

logger = logging.getLogger(__name__)


def retry_on_deadlock(service: Optional["TransactionRetryService"] = None, **options: Any):
    """
    Decorator running the wrapped coroutine in a transaction retried on deadlocks.

    The first positional argument must be the AsyncSession to use.

    Usage:
        @retry_on_deadlock()
        async def transfer(session, source_id, target_id, amount):
            # Replayed as a whole if the engine picks it as deadlock victim
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(session, *args, **kwargs) -> Any:
            retry_service = service
            if retry_service is None:
                from ..container import get_container

                retry_service = get_container().transaction_retry_service()

            logger.debug(f"Running {func.__name__} in a retried transaction")
            return await retry_service.run_transaction(
                session,
                lambda: func(session, *args, **kwargs),
                **options,
            )

        return wrapper

    return decorator
