import os
import logging
import contextvars
from logging.config import dictConfig


class ChannelAliasFilter(logging.Filter):
    """Adds a friendly channel name to log records.

    Example mappings:
    - deadlock_retry.services.innodb_status_service -> innodb
    - sqlalchemy.engine.Engine -> sqlalchemy
    Other names pass through unchanged.
    """

    NAME_MAP = {
        "deadlock_retry.services.transaction_retry_service": "deadlock_retry",
        "deadlock_retry.services.innodb_status_service": "innodb",
        "deadlock_retry.services.retry_event_publisher": "retry_events",
        "deadlock_retry.services.backoff": "backoff",
        "sqlalchemy.engine.Engine": "sqlalchemy",
    }

    def filter(self, record: logging.LogRecord) -> bool:
        record.channel = self.NAME_MAP.get(record.name, record.name)
        return True


# Trace context
trace_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar("trace_id", default=None)


class TraceIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = trace_id_ctx.get() or "-"
        return True


def _resolve_log_level(default: str = "INFO") -> str:
    # Single source of truth: LOGS_LEVEL
    env_level = os.getenv("LOGS_LEVEL", "").strip().upper()
    if env_level in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        return env_level
    return default


def configure_logging() -> None:
    """Configure logging for applications embedding the retry wrapper.

    - Single plain-text console handler
    - Deadlock reports and InnoDB dumps at INFO
    - Keep existing loggers (disable_existing_loggers=False)
    """
    level = _resolve_log_level()

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "channel": {"()": "deadlock_retry.logging_config.ChannelAliasFilter"},
            "trace": {"()": "deadlock_retry.logging_config.TraceIdFilter"},
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s | %(levelname)-8s | %(channel)-20s | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "with_trace": {
                "format": "%(asctime)s | %(levelname)-8s | %(channel)-20s | [%(trace_id)s] | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "with_trace" if level == "DEBUG" else "default",
                "level": level,
                "stream": "ext://sys.stdout",
                "filters": ["channel", "trace"],
            },
        },
        "loggers": {
            "": {  # root
                "handlers": ["console"],
                "level": level,
            },
            "deadlock_retry": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
            # SQLAlchemy warnings/errors (statement failures, pool problems)
            "sqlalchemy": {
                "handlers": ["console"],
                "level": "WARNING",
                "propagate": False,
            },
            "aiosqlite": {
                "handlers": ["console"],
                "level": "WARNING",
                "propagate": False,
            },
        },
    }

    dictConfig(config)
    logging.getLogger(__name__).debug("Logging configured with level %s", level)
