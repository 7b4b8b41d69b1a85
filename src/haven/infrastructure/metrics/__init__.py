"""Metrics infrastructure package."""

from haven.infrastructure.metrics.prometheus_metrics import (
    # Policy / audit metrics
    ACCESS_DECISIONS_TOTAL,
    AUDIT_ENTRIES_TOTAL,
    AUDIT_WRITE_FAILURES_TOTAL,
    # Session / auth metrics
    SESSION_TIMEOUTS_TOTAL,
    LOGIN_ATTEMPTS_TOTAL,
    # API metrics
    HTTP_REQUESTS_TOTAL,
    HTTP_REQUEST_DURATION,
    # Helpers
    track_access_decision,
    track_audit_entry,
    track_audit_failure,
    track_login_attempt,
    track_http_request,
    update_system_info,
    # Router
    metrics_router,
)

__all__ = [
    "ACCESS_DECISIONS_TOTAL",
    "AUDIT_ENTRIES_TOTAL",
    "AUDIT_WRITE_FAILURES_TOTAL",
    "SESSION_TIMEOUTS_TOTAL",
    "LOGIN_ATTEMPTS_TOTAL",
    "HTTP_REQUESTS_TOTAL",
    "HTTP_REQUEST_DURATION",
    "track_access_decision",
    "track_audit_entry",
    "track_audit_failure",
    "track_login_attempt",
    "track_http_request",
    "update_system_info",
    "metrics_router",
]
