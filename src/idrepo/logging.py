"""Structured logging for the ID repository error layer.

structlog over stdlib logging, rendered as JSON on stdout. Every event is
tagged with the application name and carries the request_id and user bound
by RequestContextMiddleware. format_stack_trace and log_quietly run on error
paths and never raise.
"""

import logging
import logging.config
import sys
import traceback
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from structlog.stdlib import BoundLogger

from idrepo.constants import APP_NAME


def _add_timestamp(
    _logger: object,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add ISO 8601 UTC timestamp with timezone offset."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def _add_app_name(
    _logger: object,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    event_dict.setdefault("app", APP_NAME)
    return event_dict


class LoggingSettings(BaseSettings):
    """Logging settings from environment variables."""

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


def configure_logging(settings: LoggingSettings) -> None:
    """Configure structlog with JSON output to stdout.

    Call once at application startup. After this, all loggers created via
    get_logger() will output JSON with automatic context binding.
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_timestamp,
        _add_app_name,
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processor": structlog.processors.JSONRenderer(),
                    "foreign_pre_chain": processors,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                    "stream": sys.stdout,
                },
            },
            "loggers": {
                "": {
                    "handlers": ["default"],
                    "level": settings.log_level,
                    "propagate": True,
                },
            },
        }
    )


# Configure once at module import
_settings = LoggingSettings()
configure_logging(_settings)


def get_logger(name: str) -> BoundLogger:
    """Return the structlog logger for module ``name``."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def format_stack_trace(exc: BaseException) -> str:
    """Render ``exc`` with its traceback and chained causes.

    Formatting must never stop an error response from being written, so any
    failure here falls back to ``repr(exc)``.
    """
    try:
        return "".join(traceback.format_exception(exc))
    except Exception:
        return repr(exc)


def log_quietly(method: Callable[..., Any], event: str, **fields: Any) -> None:
    """Call a logger method on an error path, ignoring a failing log sink.

    Error responses are still written when logging is down; nothing is left
    to report the sink's own failure to.
    """
    try:
        method(event, **fields)
    except Exception:
        return
