"""
Therapeutic Content Repositories

Prompts and resources. Listings are ordered by id so repeated reads
without intervening writes return identical results.
"""

from typing import Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from haven.infrastructure.database.models.content_model import PromptModel, ResourceModel
from haven.infrastructure.database.repositories.base import CrudRepository


class PromptRepository(CrudRepository[PromptModel]):
    """Journaling prompts."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(PromptModel, session)

    async def list_visible_to(self, client_id: str) -> Sequence[PromptModel]:
        """
        Active prompts a client may see: global ones plus those scoped to them.

        Args:
            client_id: Viewing client

        Returns:
            Prompts ordered by id
        """
        result = await self._session.execute(
            select(PromptModel)
            .where(
                PromptModel.is_active.is_(True),
                or_(
                    PromptModel.client_id.is_(None),
                    PromptModel.client_id == client_id,
                ),
            )
            .order_by(PromptModel.id)
        )
        return result.scalars().all()


class ResourceRepository(CrudRepository[ResourceModel]):
    """Self-help resources."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(ResourceModel, session)

    async def list_visible_to(self, client_id: str) -> Sequence[ResourceModel]:
        """
        Global resources plus those scoped to the client.

        Args:
            client_id: Viewing client

        Returns:
            Resources ordered by id
        """
        result = await self._session.execute(
            select(ResourceModel)
            .where(
                or_(
                    ResourceModel.client_id.is_(None),
                    ResourceModel.client_id == client_id,
                )
            )
            .order_by(ResourceModel.id)
        )
        return result.scalars().all()
