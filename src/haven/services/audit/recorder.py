"""
Audit Recorder

Append-only audit trail for PHI access, mutations and auth events.

Recording is fire-and-forget with respect to the request that
triggered it: each entry is written in its own unit of work, and a
failed write is logged and counted but never raised to the caller.
The primary action always takes precedence over audit completeness.

Entries go through an AuditSink so the database sink can be replaced
by a durable queue without touching callers.
"""

from contextlib import AbstractAsyncContextManager
from typing import Any, Callable, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from haven.config.logging_config import get_logger
from haven.domain.enums import AuditAction, ResourceType
from haven.domain.exceptions import AuditWriteFailure
from haven.domain.models.audit import AuditEntry
from haven.domain.models.principal import Caller, RequestContext
from haven.infrastructure.database.models import AuditLogModel
from haven.infrastructure.database.repositories import AuditLogRepository
from haven.infrastructure.metrics import track_audit_entry, track_audit_failure

logger = get_logger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class AuditSink(Protocol):
    """Destination for audit entries."""

    async def write(self, entry: AuditEntry) -> None:
        """
        Persist one entry.

        Raises:
            AuditWriteFailure: If the entry could not be stored
        """
        ...


class DatabaseAuditSink:
    """Writes each entry to the audit_logs table in its own transaction."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    async def write(self, entry: AuditEntry) -> None:
        try:
            async with self._session_factory() as session:
                await AuditLogRepository(session).create(
                    AuditLogModel(
                        user_id=entry.actor_id,
                        action=entry.action.value,
                        resource_type=entry.resource_type,
                        resource_id=entry.resource_id,
                        target_user_id=entry.target_user_id,
                        ip_address=entry.ip_address,
                        user_agent=entry.user_agent,
                        details=entry.details or None,
                        created_at=entry.occurred_at,
                    )
                )
        except SQLAlchemyError as e:
            raise AuditWriteFailure(str(e)) from e


class AuditRecorder:
    """
    Records audit entries through a sink.

    Usage:
        recorder = AuditRecorder(DatabaseAuditSink(db.session))
        await recorder.record_phi_read(caller, ResourceType.TREATMENT_PLAN, plan.id, plan.client_id)
    """

    def __init__(self, sink: AuditSink, enabled: bool = True) -> None:
        self._sink = sink
        self._enabled = enabled

    async def record(
        self,
        actor_id: Optional[str],
        action: AuditAction,
        resource_type: ResourceType | str,
        resource_id: Any = None,
        target_user_id: Optional[str] = None,
        context: Optional[RequestContext] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> bool:
        """
        Record one audit entry.

        Never raises. Failures are logged and counted.

        Args:
            actor_id: User performing the action (None if unattributable)
            action: What happened
            resource_type: Kind of resource
            resource_id: Resource identifier, stored as text
            target_user_id: Data subject, if any
            context: Caller network context
            details: Extra non-PHI context

        Returns:
            True if the entry was written
        """
        if not self._enabled:
            return False

        context = context or RequestContext()
        entry = AuditEntry(
            actor_id=actor_id,
            action=action,
            resource_type=str(resource_type),
            resource_id=str(resource_id) if resource_id is not None else None,
            target_user_id=target_user_id,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
            details=details or {},
        )

        try:
            await self._sink.write(entry)
        except Exception as e:
            # Audit loss is accepted; the primary action must not fail
            logger.error(
                "audit_write_failed",
                action=entry.action.value,
                resource_type=entry.resource_type,
                error_type=type(e).__name__,
            )
            track_audit_failure(entry.action.value)
            return False

        track_audit_entry(entry.action.value)
        return True

    async def record_phi_read(
        self,
        caller: Caller,
        resource_type: ResourceType,
        resource_id: Any,
        subject_id: Optional[str],
        action: AuditAction = AuditAction.VIEW,
    ) -> bool:
        """
        Record a read of someone's clinical data.

        Reads of one's own data are not recorded.

        Returns:
            True if an entry was written
        """
        if subject_id is None or subject_id == caller.user_id:
            return False
        return await self.record(
            caller.user_id,
            action,
            resource_type,
            resource_id=resource_id,
            target_user_id=subject_id,
            context=caller.context,
        )

    async def record_change(
        self,
        caller: Caller,
        action: AuditAction,
        resource_type: ResourceType,
        resource_id: Any,
        subject_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> bool:
        """Record a create, update or delete performed by the caller."""
        return await self.record(
            caller.user_id,
            action,
            resource_type,
            resource_id=resource_id,
            target_user_id=subject_id,
            context=caller.context,
            details=details,
        )
