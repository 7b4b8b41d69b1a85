"""
Audit Domain Models

Audit entries are immutable records of access and mutation events.
The access-history entry is the client-facing projection of an
audit entry: it never carries the raw actor ID.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from haven.domain.clock import utc_now
from haven.domain.enums.audit_action import AuditAction

SELF_LABEL = "You"
PROVIDER_LABEL = "Healthcare Provider"


@dataclass(frozen=True)
class AuditEntry:
    """
    A single audit event to be persisted.

    Attributes:
        actor_id: User who performed the action (None when unattributable)
        action: What was done
        resource_type: Kind of resource touched
        resource_id: Identifier of the resource, if any
        target_user_id: Whose data was touched, if anyone's
        ip_address: Caller network origin
        user_agent: Caller agent string
        details: Extra non-PHI context
        occurred_at: Event time
    """

    actor_id: Optional[str]
    action: AuditAction
    resource_type: str
    resource_id: Optional[str] = None
    target_user_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    details: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class AccessHistoryEntry:
    """
    One row of a client's "who accessed my data" view.

    Attributes:
        id: Audit entry ID
        action: What was done
        resource_type: Kind of record touched
        accessed_by: "You" or "Healthcare Provider"
        accessed_at: When it happened
    """

    id: int
    action: str
    resource_type: str
    accessed_by: str
    accessed_at: datetime

    @classmethod
    def project(
        cls,
        *,
        entry_id: int,
        action: str,
        resource_type: str,
        actor_id: Optional[str],
        viewer_id: str,
        created_at: datetime,
    ) -> "AccessHistoryEntry":
        """Project an audit row for the viewing client, hiding the actor."""
        return cls(
            id=entry_id,
            action=action,
            resource_type=resource_type,
            accessed_by=SELF_LABEL if actor_id == viewer_id else PROVIDER_LABEL,
            accessed_at=created_at,
        )
