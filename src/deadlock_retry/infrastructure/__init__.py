"""Infrastructure adapters (SQLAlchemy session binding)."""

from .sqlalchemy_transactions import EngineDiagnosticsConnection, SessionTransactionExecutor

__all__ = ["EngineDiagnosticsConnection", "SessionTransactionExecutor"]
