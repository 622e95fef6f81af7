"""SQLAlchemy asyncio implementation of the transaction and diagnostics protocols."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence, TypeVar

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

T = TypeVar("T")
logger = logging.getLogger(__name__)


class EngineDiagnosticsConnection:
    """
    Run diagnostic queries on a pooled connection of their own.

    Going through the engine keeps the queries out of the caller's session,
    which would otherwise autobegin a transaction and look nested.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    @property
    def adapter_name(self) -> str:
        return self.engine.dialect.name

    async def select_one(self, sql: str) -> Optional[Mapping[str, Any]]:
        async with self.engine.connect() as conn:
            result = await conn.execute(text(sql))
            row = result.mappings().first()
            return dict(row) if row is not None else None

    async def select_rows(self, sql: str) -> Sequence[Sequence[Any]]:
        async with self.engine.connect() as conn:
            result = await conn.execute(text(sql))
            return [tuple(row) for row in result.all()]

    async def select_value(self, sql: str) -> Any:
        async with self.engine.connect() as conn:
            result = await conn.execute(text(sql))
            row = result.first()
            return row[0] if row is not None else None


class SessionTransactionExecutor:
    """Open (or join) a transaction on an AsyncSession."""

    def __init__(self, session: AsyncSession):
        self.session = session
        bind = session.bind
        self._diagnostics = EngineDiagnosticsConnection(bind) if isinstance(bind, AsyncEngine) else None

    @property
    def diagnostics(self) -> Optional[EngineDiagnosticsConnection]:
        return self._diagnostics

    def in_transaction(self) -> bool:
        return self.session.in_transaction()

    async def transaction(self, work: Callable[[], Awaitable[T]], *, requires_new: bool = False) -> T:
        """
        Run `work` in a transaction.

        Outermost call: BEGIN ... COMMIT, rolled back when `work` raises.
        Inside an open transaction: join it, or with requires_new=True
        wrap `work` in a SAVEPOINT.
        """
        if not self.session.in_transaction():
            async with self.session.begin():
                return await work()

        if requires_new:
            async with self.session.begin_nested():
                return await work()

        return await work()
