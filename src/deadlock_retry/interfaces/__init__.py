"""Protocol definitions for the collaborators the retry wrapper calls into."""

from .transactions import IDiagnosticsConnection, ITransactionExecutor

__all__ = ["IDiagnosticsConnection", "ITransactionExecutor"]
