"""
Assignment Repositories

Homework and reminders belong to exactly one user.
"""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from haven.infrastructure.database.models.assignment_model import HomeworkModel, ReminderModel
from haven.infrastructure.database.repositories.base import CrudRepository


class HomeworkRepository(CrudRepository[HomeworkModel]):
    """Homework assignments."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(HomeworkModel, session)

    async def list_for_user(self, user_id: str) -> Sequence[HomeworkModel]:
        """Homework assigned to a user, ordered by id."""
        result = await self._session.execute(
            select(HomeworkModel)
            .where(HomeworkModel.user_id == user_id)
            .order_by(HomeworkModel.id)
        )
        return result.scalars().all()


class ReminderRepository(CrudRepository[ReminderModel]):
    """Scheduled reminders."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(ReminderModel, session)

    async def list_for_user(self, user_id: str) -> Sequence[ReminderModel]:
        """Reminders for a user, soonest first."""
        result = await self._session.execute(
            select(ReminderModel)
            .where(ReminderModel.user_id == user_id)
            .order_by(ReminderModel.scheduled_time, ReminderModel.id)
        )
        return result.scalars().all()

    async def list_all(self) -> Sequence[ReminderModel]:
        """Every reminder, soonest first."""
        result = await self._session.execute(
            select(ReminderModel).order_by(ReminderModel.scheduled_time, ReminderModel.id)
        )
        return result.scalars().all()
