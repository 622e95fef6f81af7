"""InnoDB status probing and logging for deadlock diagnostics."""

from __future__ import annotations

import logging
import re
import secrets
import threading
from typing import TYPE_CHECKING, Optional, Union

from ..constants.innodb import (
    LEGACY_STATUS_COMMAND,
    LOG_PREFIX,
    STATUS_COMMAND,
    STATUS_COMMAND_VERSION_BOUNDARY,
    STATUS_FIELD,
    SUPPORTED_ADAPTERS,
    VERSION_QUERY,
)

if TYPE_CHECKING:
    from ..interfaces.transactions import IDiagnosticsConnection

logger = logging.getLogger(__name__)


class _Unresolved:
    def __repr__(self) -> str:
        return "UNRESOLVED"


UNRESOLVED = _Unresolved()
DISABLED = False

CommandState = Union[str, bool, _Unresolved]


class DiagnosticCommandCache:
    """
    Memoized diagnostic command: UNRESOLVED, a command string, or DISABLED.

    Shared by every transaction in the process; reset() forces a new probe,
    e.g. after pointing the application at another server.
    """

    def __init__(self):
        self._value: CommandState = UNRESOLVED
        self._lock = threading.Lock()

    @property
    def value(self) -> CommandState:
        with self._lock:
            return self._value

    def set(self, value: Union[str, bool]) -> None:
        if value is not DISABLED and not (isinstance(value, str) and value):
            raise ValueError(f"Diagnostic command must be a non-empty string or DISABLED, got {value!r}")
        with self._lock:
            self._value = value

    def disable(self) -> None:
        self.set(DISABLED)

    def reset(self) -> None:
        with self._lock:
            self._value = UNRESOLVED

    @property
    def is_resolved(self) -> bool:
        return self.value is not UNRESOLVED

    @property
    def command(self) -> Optional[str]:
        """The cached command, or None when unresolved or disabled."""
        value = self.value
        return value if isinstance(value, str) else None


def parse_version(raw: str) -> tuple[int, ...]:
    """Leading numeric components of a server version ("5.1.45-log" -> (5, 1, 45))."""
    match = re.match(r"\s*(\d+(?:\.\d+)*)", str(raw))
    if not match:
        raise ValueError(f"Unrecognized server version: {raw!r}")
    return tuple(int(part) for part in match.group(1).split("."))


def status_command_for_version(raw_version: str) -> str:
    if parse_version(raw_version) < STATUS_COMMAND_VERSION_BOUNDARY:
        return LEGACY_STATUS_COMMAND
    return STATUS_COMMAND


class InnodbStatusService:
    """
    Showing the InnoDB status is the only way to see why a transaction deadlocked.

    Whether the current user may run the status command is probed once per
    process; without the PROCESS privilege the command fails, and that
    failure must never reach the transaction being retried.
    """

    def __init__(self, cache: DiagnosticCommandCache, enabled: bool = True):
        self.cache = cache
        self.enabled = enabled

    async def resolve_command(self, connection: Optional["IDiagnosticsConnection"]) -> CommandState:
        current = self.cache.value
        if current is not UNRESOLVED:
            return current

        if not self.enabled:
            self.cache.disable()
            return DISABLED

        if connection is None:
            return UNRESOLVED

        adapter_name = connection.adapter_name.lower()
        if not any(adapter in adapter_name for adapter in SUPPORTED_ADAPTERS):
            logger.debug(f"InnoDB status unavailable for adapter {connection.adapter_name}")
            self.cache.disable()
            return DISABLED

        try:
            rows = await connection.select_rows(VERSION_QUERY)
            command = status_command_for_version(rows[0][1])
            await connection.select_value(command)
        except Exception as exc:
            logger.info(f"Cannot log innodb status: {exc}")
            self.cache.disable()
            return DISABLED

        self.cache.set(command)
        logger.debug(f"InnoDB status available via {command!r}")
        return command

    async def show_status(self, connection: "IDiagnosticsConnection") -> str:
        command = self.cache.command
        if command is None:
            raise RuntimeError("InnoDB status command is not available")
        row = await connection.select_one(command)
        if row is None:
            raise RuntimeError(f"{command!r} returned no rows")
        return row[STATUS_FIELD]

    async def log_status(self, connection: Optional["IDiagnosticsConnection"]) -> None:
        """Log the status dump, each line prefixed with a shared id for extraction from the log."""
        if connection is None:
            return
        try:
            status = await self.show_status(connection)
            dump_id = secrets.token_hex(4)
            logger.info(f"({LOG_PREFIX} {dump_id}) Status follows:")
            for line in str(status).splitlines():
                logger.info(f"({LOG_PREFIX} {dump_id}) {line}")
        except Exception as exc:
            # Access denied, ignore
            logger.info(f"Cannot log innodb status: {exc}")
