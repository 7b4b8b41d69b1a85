"""
Access History

Client-facing "who accessed my data" view. A read-only projection
of audit entries whose subject is the client, with the actor shown
only as "You" or "Healthcare Provider".
"""

from sqlalchemy.ext.asyncio import AsyncSession

from haven.domain.models.audit import AccessHistoryEntry
from haven.domain.models.session_activity import ensure_utc
from haven.infrastructure.database.repositories import AuditLogRepository


class AccessHistoryService:
    """Builds a client's access history."""

    def __init__(self, session: AsyncSession, limit: int = 100) -> None:
        self._audit_logs = AuditLogRepository(session)
        self._limit = limit

    async def for_client(self, client_id: str) -> list[AccessHistoryEntry]:
        """
        Access history of a client, newest first.

        Args:
            client_id: Viewing client (also the data subject)

        Returns:
            Projected entries without raw actor ids
        """
        rows = await self._audit_logs.list_for_target(client_id, limit=self._limit)
        return [
            AccessHistoryEntry.project(
                entry_id=row.id,
                action=row.action,
                resource_type=row.resource_type,
                actor_id=row.user_id,
                viewer_id=client_id,
                created_at=ensure_utc(row.created_at),
            )
            for row in rows
        ]
