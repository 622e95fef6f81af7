from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from ..services.transaction_retry_service import TransactionRetryService

T = TypeVar("T")


class DatabaseHelper:
    def __init__(self, url: str, echo: bool = False, retry_service: Optional[TransactionRetryService] = None):
        if not url:
            raise ValueError("DATABASE_URL environment variable must be set.")
        self.engine = create_async_engine(
            url=url,
            echo=echo,
        )
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )
        self.retry_service = retry_service or TransactionRetryService()

    async def transaction(self, work: Callable[[AsyncSession], Awaitable[T]], **options) -> T:
        """Open a session and run `work(session)` in a transaction retried on deadlocks."""
        async with self.session_factory() as session:
            return await self.retry_service.run_transaction(session, lambda: work(session), **options)

    async def dispose(self) -> None:
        await self.engine.dispose()
