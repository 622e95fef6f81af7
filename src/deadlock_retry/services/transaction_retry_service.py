"""Retry transactions that fail on deadlocks or lock-wait timeouts."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import DBAPIError

from ..schemas.retry import RetryAttempt
from .backoff import BackoffScheduler
from .innodb_status_service import DiagnosticCommandCache, InnodbStatusService
from .retry_event_publisher import RetryEventPublisher
from .retry_policy import RetryPolicy

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from ..interfaces.transactions import ITransactionExecutor

T = TypeVar("T")
logger = logging.getLogger(__name__)


class TransactionRetryService:
    """
    Re-run a transaction body when the engine aborts it for lock contention.

    Only the outermost transaction on a session retries. A transaction opened
    while another one is already open lets every error propagate, so the
    whole unit of work is replayed by the outermost call.

    The body may run several times; it should not perform external side
    effects that cannot be repeated.
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        backoff: Optional[BackoffScheduler] = None,
        innodb_status: Optional[InnodbStatusService] = None,
        events: Optional[RetryEventPublisher] = None,
    ):
        self.policy = policy or RetryPolicy()
        self.backoff = backoff or BackoffScheduler()
        self.innodb_status = innodb_status or InnodbStatusService(DiagnosticCommandCache())
        self.events = events or RetryEventPublisher()

    async def run_transaction(
        self,
        session: "AsyncSession",
        work: Callable[[], Awaitable[T]],
        **options: Any,
    ) -> T:
        """Run `work` inside a transaction on `session`, retrying on deadlocks."""
        from ..infrastructure.sqlalchemy_transactions import SessionTransactionExecutor

        return await self.run(SessionTransactionExecutor(session), work, **options)

    async def run(
        self,
        executor: "ITransactionExecutor",
        work: Callable[[], Awaitable[T]],
        **options: Any,
    ) -> T:
        nested = executor.in_transaction()
        retry_count = 0

        await self.innodb_status.resolve_command(executor.diagnostics)

        while True:
            try:
                return await executor.transaction(work, **options)
            except DBAPIError as error:
                if nested:
                    raise

                kind = self.policy.classify(error)
                if kind is None:
                    raise

                max_retries = self.policy.max_retries
                retries_exhausted = retry_count >= max_retries
                self.events.publish(
                    RetryAttempt(
                        attempt=retry_count + 1,
                        kind=kind,
                        retries_exhausted=retries_exhausted,
                        error=str(error),
                    )
                )
                logger.info(
                    f"Deadlock detected on attempt {retry_count + 1}. Max retries: {max_retries}, "
                    f"so {'not ' if retries_exhausted else ''}restarting transaction. Exception: {error}"
                )
                if self.innodb_status.cache.command is not None:
                    await self.innodb_status.log_status(executor.diagnostics)

                if retries_exhausted:
                    raise

                retry_count += 1
                await self.backoff.wait_for(retry_count)
