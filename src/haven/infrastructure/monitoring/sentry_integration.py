"""
Sentry Error Tracking Integration

Production error tracking with credential and PHI scrubbing.
Correlates errors with request correlation IDs for debugging.

SECURITY: Credentials and clinical free text are stripped before
anything is sent to Sentry.
"""

import re
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from haven.config.logging_config import get_logger

logger = get_logger(__name__)

# Patterns for sensitive data scrubbing
SENSITIVE_PATTERNS = [
    r"password[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+",
    r"token[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+",
    r"assertion[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+",
    r"secret[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+",
    r"bearer\s+[a-zA-Z0-9\-._~+/]+=*",
    r"authorization[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+",
]

SENSITIVE_KEYS = frozenset({
    "password",
    "token",
    "assertion",
    "secret",
    "authorization",
    "bearer",
    "cookie",
    "credential",
    "jwt",
})

# Clinical free-text fields. Values are dropped wholesale.
PHI_KEYS = frozenset({
    "content",
    "description",
    "note",
    "summary",
    "measurable_criteria",
    "message",
    "purpose",
})


def _scrub_string(value: str) -> str:
    """Scrub sensitive patterns from string."""
    result = value
    for pattern in SENSITIVE_PATTERNS:
        result = re.sub(pattern, "[REDACTED]", result, flags=re.IGNORECASE)
    return result


def _scrub_dict(data: dict) -> dict:
    """Recursively scrub credentials and PHI from a dictionary."""
    result = {}
    for key, value in data.items():
        key_lower = str(key).lower().replace("-", "_")

        if any(sensitive in key_lower for sensitive in SENSITIVE_KEYS):
            result[key] = "[REDACTED]"
        elif key_lower in PHI_KEYS:
            result[key] = "[PHI]"
        elif isinstance(value, dict):
            result[key] = _scrub_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _scrub_dict(item) if isinstance(item, dict)
                else _scrub_string(item) if isinstance(item, str)
                else item
                for item in value
            ]
        elif isinstance(value, str):
            result[key] = _scrub_string(value)
        else:
            result[key] = value

    return result


def before_send(event: dict, hint: dict) -> Optional[dict]:
    """
    Process event before sending to Sentry.

    Request bodies may hold journal text or treatment notes, so
    they are scrubbed along with headers, breadcrumbs and extras.
    """
    if "request" in event:
        if isinstance(event["request"].get("data"), dict):
            event["request"]["data"] = _scrub_dict(event["request"]["data"])
        elif "data" in event["request"]:
            event["request"]["data"] = "[PHI]"
        if "headers" in event["request"]:
            event["request"]["headers"] = _scrub_dict(event["request"]["headers"])
        event["request"].pop("cookies", None)

    if "breadcrumbs" in event:
        for breadcrumb in event.get("breadcrumbs", {}).get("values", []):
            if "data" in breadcrumb and isinstance(breadcrumb["data"], dict):
                breadcrumb["data"] = _scrub_dict(breadcrumb["data"])

    if "extra" in event:
        event["extra"] = _scrub_dict(event["extra"])

    return event


def before_breadcrumb(breadcrumb: dict, hint: dict) -> Optional[dict]:
    """Sanitize SQL breadcrumbs, which may carry bound parameters."""
    if breadcrumb.get("category") == "sql":
        if "message" in breadcrumb:
            breadcrumb["message"] = _scrub_string(breadcrumb["message"])
        breadcrumb.pop("data", None)

    return breadcrumb


def init_sentry(
    dsn: Optional[str],
    environment: str = "development",
    release: str = "haven@0.1.0",
    sample_rate: float = 1.0,
    traces_sample_rate: float = 0.1,
) -> bool:
    """
    Initialize Sentry error tracking.

    Args:
        dsn: Sentry DSN, tracking disabled when empty
        environment: Environment name
        release: Release version
        sample_rate: Error sample rate (1.0 = all errors)
        traces_sample_rate: Performance tracing rate

    Returns:
        True if Sentry was initialized
    """
    if not dsn:
        logger.info("Sentry DSN not configured, error tracking disabled")
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        sample_rate=sample_rate,
        traces_sample_rate=traces_sample_rate,
        before_send=before_send,
        before_breadcrumb=before_breadcrumb,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            AsyncioIntegration(),
            LoggingIntegration(
                level=None,  # Don't capture logs as breadcrumbs
                event_level=None,  # Don't capture logs as events
            ),
        ],
        # Don't send PII
        send_default_pii=False,
        attach_stacktrace=True,
        max_breadcrumbs=50,
    )

    logger.info(
        "Sentry initialized",
        environment=environment,
        release=release,
    )
    return True


def capture_exception_with_context(
    exception: Exception,
    correlation_id: Optional[str] = None,
    extra: Optional[dict] = None,
) -> Optional[str]:
    """
    Capture exception with additional context.

    Returns: Sentry event ID (None when Sentry is not initialized)
    """
    with sentry_sdk.new_scope() as scope:
        if correlation_id:
            scope.set_tag("correlation_id", correlation_id)
        if extra:
            for key, value in _scrub_dict(extra).items():
                scope.set_extra(key, value)

        return sentry_sdk.capture_exception(exception)
