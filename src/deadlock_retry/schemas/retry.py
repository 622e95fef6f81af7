"""Schemas describing detected lock-contention failures."""

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants.retry_policy import DEADLOCK, LOCK_WAIT_TIMEOUT


class LockErrorKind(str, Enum):
    """Built-in lock-contention categories; catalogues may add their own."""

    DEADLOCK = DEADLOCK
    LOCK_WAIT_TIMEOUT = LOCK_WAIT_TIMEOUT


class RetryAttempt(BaseModel):
    """One detected lock-contention failure inside the outermost transaction."""

    model_config = ConfigDict(frozen=True)

    attempt: int = Field(..., ge=1, description="1-based attempt that just failed")
    kind: str = Field(..., min_length=1, serialization_alias="type")
    retries_exhausted: bool
    error: str = Field(default="", exclude=True)

    @field_validator("kind", mode="before")
    @classmethod
    def _enum_to_value(cls, value: Any) -> Any:
        return value.value if isinstance(value, Enum) else value

    def to_payload(self) -> Dict[str, Any]:
        """Event payload published to listeners."""
        return self.model_dump(by_alias=True)
