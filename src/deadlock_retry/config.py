import os
from typing import Self

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

from .constants.retry_policy import DEFAULT_MAX_RETRIES

load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in _TRUTHY


class DbSettings(BaseModel):
    url: str = Field(default_factory=lambda: os.getenv("DATABASE_URL", "").strip())
    echo: bool = Field(default_factory=lambda: _env_flag("DATABASE_ECHO", False))


class RetrySettings(BaseModel):
    max_retries: int = Field(default_factory=lambda: int(os.getenv("DEADLOCK_MAX_RETRIES", str(DEFAULT_MAX_RETRIES))))
    # Probe and dump InnoDB status on every detected deadlock (MySQL / MariaDB only)
    log_innodb_status: bool = Field(default_factory=lambda: _env_flag("DEADLOCK_LOG_INNODB_STATUS", True))

    @model_validator(mode="after")
    def _validate(self) -> Self:
        if self.max_retries < 0:
            raise ValueError("DEADLOCK_MAX_RETRIES must be zero or greater.")
        return self


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")
    db: DbSettings = Field(default_factory=DbSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)

    @classmethod
    def from_env(cls) -> Self:
        """Build settings from the current environment (used after env changes in tests)."""
        return cls(db=DbSettings(), retry=RetrySettings())


settings = Settings()
