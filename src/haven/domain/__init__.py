"""
Haven Domain Layer

Roles, audit vocabulary, access decisions and the session
idle-timeout automaton. Independent of infrastructure.
"""

from haven.domain.enums import Role, AuditAction, ResourceType
from haven.domain.models import (
    Principal,
    RequestContext,
    Caller,
    AccessDecision,
    AuditEntry,
    AccessHistoryEntry,
    SessionActivityState,
    SessionCheck,
)

__all__ = [
    # Enums
    "Role",
    "AuditAction",
    "ResourceType",
    # Models
    "Principal",
    "RequestContext",
    "Caller",
    "AccessDecision",
    "AuditEntry",
    "AccessHistoryEntry",
    "SessionActivityState",
    "SessionCheck",
]
