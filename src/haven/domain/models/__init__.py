"""Domain models package."""

from haven.domain.models.principal import Principal, RequestContext, Caller
from haven.domain.models.access import AccessDecision
from haven.domain.models.audit import AuditEntry, AccessHistoryEntry
from haven.domain.models.session_activity import (
    SessionActivityState,
    SessionCheck,
    ensure_utc,
    elapsed_minutes,
    transition,
)

__all__ = [
    # Identity
    "Principal",
    "RequestContext",
    "Caller",
    # Access
    "AccessDecision",
    # Audit
    "AuditEntry",
    "AccessHistoryEntry",
    # Session activity
    "SessionActivityState",
    "SessionCheck",
    "ensure_utc",
    "elapsed_minutes",
    "transition",
]
