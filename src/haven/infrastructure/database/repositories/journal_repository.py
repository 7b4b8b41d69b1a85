"""
Journal Repository
"""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from haven.infrastructure.database.models.journal_model import JournalModel
from haven.infrastructure.database.repositories.base import BaseRepository


class JournalRepository(BaseRepository[JournalModel]):
    """Journal entries, newest first."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(JournalModel, session)

    async def list_for_user(self, user_id: str) -> Sequence[JournalModel]:
        """All entries written by a user."""
        result = await self._session.execute(
            select(JournalModel)
            .where(JournalModel.user_id == user_id)
            .order_by(JournalModel.date.desc(), JournalModel.id.desc())
        )
        return result.scalars().all()

    async def list_shared_for_user(self, user_id: str) -> Sequence[JournalModel]:
        """Entries a user has shared with their therapist."""
        result = await self._session.execute(
            select(JournalModel)
            .where(
                JournalModel.user_id == user_id,
                JournalModel.is_shared.is_(True),
            )
            .order_by(JournalModel.date.desc(), JournalModel.id.desc())
        )
        return result.scalars().all()
