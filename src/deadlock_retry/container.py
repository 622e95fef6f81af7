"""
Dependency Injection Container.

Holds the process-wide retry state: one retry policy, one diagnostic command
cache and one event channel shared by every transaction.
"""

from dependency_injector import containers, providers

from .config import settings
from .models.db_helper import DatabaseHelper
from .services.backoff import BackoffScheduler
from .services.innodb_status_service import DiagnosticCommandCache, InnodbStatusService
from .services.retry_event_publisher import RetryEventPublisher
from .services.retry_policy import RetryPolicy
from .services.transaction_retry_service import TransactionRetryService


class Container(containers.DeclarativeContainer):
    """
    Retry DI container.

    Shared state is provided as singletons; reset_container() drops them.
    """

    retry_policy = providers.Singleton(
        RetryPolicy,
        max_retries=settings.retry.max_retries,
    )

    backoff_scheduler = providers.Singleton(BackoffScheduler)

    diagnostic_command_cache = providers.Singleton(DiagnosticCommandCache)

    innodb_status_service = providers.Singleton(
        InnodbStatusService,
        cache=diagnostic_command_cache,
        enabled=settings.retry.log_innodb_status,
    )

    retry_event_publisher = providers.Singleton(RetryEventPublisher)

    transaction_retry_service = providers.Singleton(
        TransactionRetryService,
        policy=retry_policy,
        backoff=backoff_scheduler,
        innodb_status=innodb_status_service,
        events=retry_event_publisher,
    )

    # Database infrastructure (built on first use; requires DATABASE_URL)
    database_helper = providers.Singleton(
        DatabaseHelper,
        url=settings.db.url,
        echo=settings.db.echo,
        retry_service=transaction_retry_service,
    )
    db_engine = providers.Callable(lambda helper: helper.engine, database_helper)
    db_session_factory = providers.Callable(lambda helper: helper.session_factory, database_helper)


# Global container instance
container = Container()


def get_container() -> Container:
    """Get the global container instance."""
    return container


def reset_container():
    """
    Reset container for testing.

    Clears all singletons, including the memoized diagnostic command and the
    current retry limit.
    """
    container.reset_singletons()
