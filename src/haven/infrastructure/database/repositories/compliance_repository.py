"""
Compliance Repositories

Audit logs, login attempts and data disclosures are write-once:
their repositories derive from BaseRepository and expose no update
or delete. Session activity rows are mutable but only move forward.
"""

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from haven.domain.models.session_activity import ensure_utc
from haven.infrastructure.database.models.compliance_model import (
    AuditLogModel,
    DataDisclosureModel,
    LoginAttemptModel,
    SessionActivityModel,
)
from haven.infrastructure.database.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLogModel]):
    """Append-only audit trail."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(AuditLogModel, session)

    async def list_recent(self, limit: int = 100) -> Sequence[AuditLogModel]:
        """
        Newest entries first.

        Args:
            limit: Maximum entries

        Returns:
            Audit entries
        """
        result = await self._session.execute(
            select(AuditLogModel)
            .order_by(AuditLogModel.created_at.desc(), AuditLogModel.id.desc())
            .limit(limit)
        )
        return result.scalars().all()

    async def list_for_target(self, target_user_id: str, limit: int = 100) -> Sequence[AuditLogModel]:
        """
        Entries whose subject is the given user, newest first.

        Args:
            target_user_id: Data subject
            limit: Maximum entries

        Returns:
            Audit entries
        """
        result = await self._session.execute(
            select(AuditLogModel)
            .where(AuditLogModel.target_user_id == target_user_id)
            .order_by(AuditLogModel.created_at.desc(), AuditLogModel.id.desc())
            .limit(limit)
        )
        return result.scalars().all()


class LoginAttemptRepository(BaseRepository[LoginAttemptModel]):
    """Append-only login attempt log."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(LoginAttemptModel, session)

    async def list_recent(self, limit: int = 100) -> Sequence[LoginAttemptModel]:
        """Newest attempts first."""
        result = await self._session.execute(
            select(LoginAttemptModel)
            .order_by(LoginAttemptModel.created_at.desc(), LoginAttemptModel.id.desc())
            .limit(limit)
        )
        return result.scalars().all()


class DataDisclosureRepository(BaseRepository[DataDisclosureModel]):
    """Append-only disclosure register."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(DataDisclosureModel, session)

    async def list_for_client(self, client_id: str) -> Sequence[DataDisclosureModel]:
        """Disclosures of a client's data, newest first."""
        result = await self._session.execute(
            select(DataDisclosureModel)
            .where(DataDisclosureModel.client_id == client_id)
            .order_by(DataDisclosureModel.created_at.desc(), DataDisclosureModel.id.desc())
        )
        return result.scalars().all()


class SessionActivityRepository(BaseRepository[SessionActivityModel]):
    """Per-session last activity tracker."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(SessionActivityModel, session)

    async def get_by_session_id(self, session_id: str) -> Optional[SessionActivityModel]:
        result = await self._session.execute(
            select(SessionActivityModel).where(SessionActivityModel.session_id == session_id)
        )
        return result.scalar_one_or_none()

    async def start(self, session_id: str, user_id: str, now: datetime) -> SessionActivityModel:
        """Record the first activity of a session."""
        return await self.create(
            SessionActivityModel(session_id=session_id, user_id=user_id, last_activity=now)
        )

    async def touch(self, activity: SessionActivityModel, now: datetime) -> SessionActivityModel:
        """
        Advance last activity. Never moves backwards.

        Args:
            activity: Tracked session row
            now: Observed request time

        Returns:
            The updated row
        """
        activity.last_activity = max(ensure_utc(activity.last_activity), ensure_utc(now))
        await self._session.flush()
        return activity

    async def terminate(self, activity: SessionActivityModel, now: datetime) -> SessionActivityModel:
        """Mark a session as ended. Idempotent."""
        if activity.terminated_at is None:
            activity.terminated_at = now
            await self._session.flush()
        return activity

    async def claim_termination(self, session_id: str, now: datetime) -> bool:
        """
        End a session only if nobody else already has.

        Concurrent expiries race on the row itself, so exactly one
        caller wins.

        Returns:
            True if this call set terminated_at
        """
        result = await self._session.execute(
            update(SessionActivityModel)
            .where(
                SessionActivityModel.session_id == session_id,
                SessionActivityModel.terminated_at.is_(None),
            )
            .values(terminated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
