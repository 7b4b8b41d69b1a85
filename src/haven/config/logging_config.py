"""
Haven Logging Configuration

Structured JSON logging for production environments with:
- Correlation ID tracking for request tracing
- Credential and PHI redaction
- Configurable log levels per environment
- Human-readable format for development

SECURITY: Clinical free text (journal content, notes, goal
descriptions) must never reach log aggregation.
"""

import logging
import sys
from typing import Any

import structlog

from haven.config.settings import Settings


# Credential patterns to redact from logs
SENSITIVE_PATTERNS: frozenset[str] = frozenset({
    "password",
    "token",
    "secret",
    "authorization",
    "bearer",
    "credential",
    "assertion",
})

# Clinical free-text fields
PHI_PATTERNS: frozenset[str] = frozenset({
    "content",
    "description",
    "note",
    "summary",
    "measurable_criteria",
})


def _redact_sensitive_data(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """
    Redact credentials and PHI from log entries.

    Scans all keys in the event dictionary and redacts values
    for any key containing a sensitive or PHI pattern.
    """
    def redact_value(key: str, value: Any) -> Any:
        key_lower = key.lower()
        for pattern in SENSITIVE_PATTERNS | PHI_PATTERNS:
            if pattern in key_lower:
                return "[REDACTED]"

        if isinstance(value, dict):
            return {k: redact_value(k, v) for k, v in value.items()}
        elif isinstance(value, list):
            return [redact_value(key, item) for item in value]

        return value

    return {
        key: value if key == "event" else redact_value(key, value)
        for key, value in event_dict.items()
    }


def _add_service_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add service-level context to all log entries."""
    event_dict["service"] = "haven-backend"
    event_dict["version"] = "0.1.0"
    return event_dict


def get_processors(is_development: bool) -> list[Any]:
    """
    Get structlog processors based on environment.

    Args:
        is_development: Whether running in development mode

    Returns:
        List of log processors
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _redact_sensitive_data,
        _add_service_context,
    ]

    if is_development:
        shared_processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        # JSON output for log aggregation
        shared_processors.extend([
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ])

    return shared_processors


def configure_logging(settings: Settings) -> None:
    """
    Configure application logging.

    Should be called once during application startup.
    """
    is_development = settings.env == "development"
    log_level = getattr(logging, settings.log_level.upper())

    structlog.configure(
        processors=get_processors(is_development),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    # Set levels for noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__)
    """
    return structlog.get_logger(name)


def bind_correlation_id(correlation_id: str) -> None:
    """
    Bind correlation ID to current context.

    All subsequent log entries in this context will include
    the correlation ID for request tracing.
    """
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def get_correlation_id() -> str | None:
    """Return the correlation ID bound to the current context, if any."""
    return structlog.contextvars.get_contextvars().get("correlation_id")


def clear_context() -> None:
    """Clear all context variables (call at end of request)."""
    structlog.contextvars.clear_contextvars()
