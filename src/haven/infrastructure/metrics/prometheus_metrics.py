"""
Prometheus Metrics

Operational metrics for the Haven portal.
Exposes metrics at /metrics endpoint for Prometheus scraping.

ARCHITECTURE: Metrics are decoupled from business logic.
Only increment/observe; never block on metrics operations.

PRIVACY: Labels carry resource kinds and outcomes only, never
user or record identifiers.
"""

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    generate_latest,
    CONTENT_TYPE_LATEST,
    REGISTRY,
)
from fastapi import APIRouter, Response

from haven.config.logging_config import get_logger

logger = get_logger(__name__)

# =============================================================================
# ACCESS POLICY METRICS
# =============================================================================

ACCESS_DECISIONS_TOTAL = Counter(
    "haven_access_decisions_total",
    "Access policy decisions",
    ["resource", "outcome"],  # allowed, denied
)

# =============================================================================
# AUDIT METRICS
# =============================================================================

AUDIT_ENTRIES_TOTAL = Counter(
    "haven_audit_entries_total",
    "Audit entries written by action",
    ["action"],
)

AUDIT_WRITE_FAILURES_TOTAL = Counter(
    "haven_audit_write_failures_total",
    "Audit entries that could not be persisted",
    ["action"],
)

# =============================================================================
# SESSION / AUTH METRICS
# =============================================================================

SESSION_TIMEOUTS_TOTAL = Counter(
    "haven_session_timeouts_total",
    "Sessions expired for inactivity",
)

LOGIN_ATTEMPTS_TOTAL = Counter(
    "haven_login_attempts_total",
    "Login attempts by outcome",
    ["outcome"],  # success, failure
)

# =============================================================================
# API METRICS
# =============================================================================

HTTP_REQUESTS_TOTAL = Counter(
    "haven_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION = Histogram(
    "haven_http_request_duration_seconds",
    "HTTP request duration",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

# =============================================================================
# SYSTEM INFO
# =============================================================================

SYSTEM_INFO = Info(
    "haven_system",
    "Haven portal information",
)

SYSTEM_INFO.info({
    "version": "0.1.0",
    "environment": "development",  # Updated at runtime
})


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def track_access_decision(resource: str, allowed: bool) -> None:
    """Record a policy decision."""
    ACCESS_DECISIONS_TOTAL.labels(
        resource=resource,
        outcome="allowed" if allowed else "denied",
    ).inc()


def track_audit_entry(action: str) -> None:
    """Record a persisted audit entry."""
    AUDIT_ENTRIES_TOTAL.labels(action=action).inc()


def track_audit_failure(action: str) -> None:
    """Record an audit entry lost to a sink failure."""
    AUDIT_WRITE_FAILURES_TOTAL.labels(action=action).inc()


def track_login_attempt(success: bool) -> None:
    """Record a login attempt outcome."""
    LOGIN_ATTEMPTS_TOTAL.labels(outcome="success" if success else "failure").inc()


def track_http_request(method: str, endpoint: str, status_code: int, duration: float) -> None:
    """Record a completed HTTP request."""
    HTTP_REQUESTS_TOTAL.labels(
        method=method,
        endpoint=endpoint,
        status_code=str(status_code),
    ).inc()
    HTTP_REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration)


# =============================================================================
# METRICS ENDPOINT
# =============================================================================

metrics_router = APIRouter(tags=["metrics"])


@metrics_router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format for scraping.
    """
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST,
    )


def update_system_info(environment: str, version: str = "0.1.0") -> None:
    """Update system info metric with current environment."""
    SYSTEM_INFO.info({
        "version": version,
        "environment": environment,
    })
