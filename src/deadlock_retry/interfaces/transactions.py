"""
Transaction protocol definitions to decouple the retry wrapper from SQLAlchemy concrete implementations.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol, Sequence, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class IDiagnosticsConnection(Protocol):
    @property
    def adapter_name(self) -> str:
        ...

    async def select_one(self, sql: str) -> Optional[Mapping[str, Any]]:
        ...

    async def select_rows(self, sql: str) -> Sequence[Sequence[Any]]:
        ...

    async def select_value(self, sql: str) -> Any:
        ...


@runtime_checkable
class ITransactionExecutor(Protocol):
    @property
    def diagnostics(self) -> Optional[IDiagnosticsConnection]:
        ...

    def in_transaction(self) -> bool:
        ...

    async def transaction(self, work: Callable[[], Awaitable[T]], **options: Any) -> T:
        ...
