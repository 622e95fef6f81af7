"""
Pytest configuration and shared fixtures for all tests.

This file provides:
- Fake transaction executor with an open-transaction counter
- Fake MySQL diagnostics connection
- Retry service wired with a mocked sleep
- In-memory SQLite engine for integration tests
- Error factories for deadlocks and lock-wait timeouts
"""

import os
import sys
from typing import Any, Awaitable, Callable, Optional
from unittest.mock import AsyncMock

import pytest

# Prepopulate required env vars for settings before imports
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from deadlock_retry.container import reset_container
from deadlock_retry.services.backoff import BackoffScheduler
from deadlock_retry.services.innodb_status_service import DiagnosticCommandCache, InnodbStatusService
from deadlock_retry.services.retry_event_publisher import RetryEventPublisher
from deadlock_retry.services.retry_policy import RetryPolicy
from deadlock_retry.services.transaction_retry_service import TransactionRetryService

DEADLOCK_ERROR = "MySQL::Error: Deadlock found when trying to get lock"
TIMEOUT_ERROR = "MySQL::Error: Lock wait timeout exceeded"


def make_db_error(message: str, statement: str = "UPDATE accounts SET balance = balance - 1") -> OperationalError:
    """Build the error SQLAlchemy raises when the driver reports `message`."""
    return OperationalError(statement, {}, Exception(message))


# ============================================================================
# FAKE COLLABORATORS
# ============================================================================


class FakeDiagnosticsConnection:
    """MySQL connection stand-in answering the InnoDB probing queries."""

    def __init__(
        self,
        adapter_name: str = "mysql",
        version: str = "5.5",
        status: str = "INNODB STATUS INFO",
        probe_error: Optional[Exception] = None,
        status_error: Optional[Exception] = None,
    ):
        self._adapter_name = adapter_name
        self.version = version
        self.status = status
        self.probe_error = probe_error
        self.status_error = status_error
        self.queries: list[str] = []

    @property
    def adapter_name(self) -> str:
        return self._adapter_name

    async def select_one(self, sql: str):
        self.queries.append(sql)
        if self.status_error:
            raise self.status_error
        return {"Type": "InnoDB", "Name": "", "Status": self.status}

    async def select_rows(self, sql: str):
        self.queries.append(sql)
        return [("version", self.version)]

    async def select_value(self, sql: str):
        self.queries.append(sql)
        if self.probe_error:
            raise self.probe_error
        return True


class FakeTransactionExecutor:
    """Transaction primitive that only counts open transactions."""

    def __init__(self, diagnostics: Optional[FakeDiagnosticsConnection] = None):
        self.open_transactions = 0
        self.diagnostics = diagnostics

    def in_transaction(self) -> bool:
        return self.open_transactions != 0

    async def transaction(self, work: Callable[[], Awaitable[Any]], **options: Any) -> Any:
        self.open_transactions += 1
        try:
            return await work()
        finally:
            self.open_transactions -= 1


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_container():
    """Drop process-wide singletons between tests."""
    reset_container()
    yield
    reset_container()


@pytest.fixture
def diagnostics():
    return FakeDiagnosticsConnection()


@pytest.fixture
def executor(diagnostics):
    return FakeTransactionExecutor(diagnostics=diagnostics)


@pytest.fixture
def sleep():
    return AsyncMock()


@pytest.fixture
def retry_policy():
    return RetryPolicy(max_retries=3)


@pytest.fixture
def command_cache():
    return DiagnosticCommandCache()


@pytest.fixture
def innodb_status(command_cache):
    return InnodbStatusService(command_cache)


@pytest.fixture
def events():
    return RetryEventPublisher()


@pytest.fixture
def recorded_events(events):
    received: list[dict] = []
    events.subscribe(received.append)
    return received


@pytest.fixture
def retry_service(retry_policy, sleep, innodb_status, events):
    return TransactionRetryService(
        policy=retry_policy,
        backoff=BackoffScheduler(sleep=sleep),
        innodb_status=innodb_status,
        events=events,
    )


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest.fixture
async def test_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.execute(text("CREATE TABLE accounts (id INTEGER PRIMARY KEY, balance INTEGER NOT NULL)"))

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(test_engine):
    """Create a database session for testing."""
    session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_error():
    """Factory for SQLAlchemy errors carrying a driver message."""
    return make_db_error


@pytest.fixture
def executor_factory():
    return FakeTransactionExecutor


@pytest.fixture
def diagnostics_factory():
    return FakeDiagnosticsConnection
