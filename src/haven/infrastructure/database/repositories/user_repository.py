"""
User Repository

Data access layer for portal accounts.
"""

from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from haven.domain.enums import DEFAULT_ROLE, Role
from haven.infrastructure.database.models.user_model import UserModel
from haven.infrastructure.database.repositories.base import BaseRepository


class UserRepository(BaseRepository[UserModel]):
    """
    Repository for user data access.

    Roles are only changed through set_role; identity upserts never
    touch the role column of an existing account.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize with user model."""
        super().__init__(UserModel, session)

    async def get_by_email(self, email: str) -> Optional[UserModel]:
        """
        Get user by email address.

        Args:
            email: User email

        Returns:
            User if found, None otherwise
        """
        result = await self._session.execute(
            select(UserModel).where(UserModel.email == email)
        )
        return result.scalar_one_or_none()

    async def upsert_from_identity(
        self,
        user_id: str,
        *,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        profile_image_url: Optional[str] = None,
    ) -> UserModel:
        """
        Create or refresh a user from identity provider claims.

        New accounts get the default role.

        Args:
            user_id: Identity provider subject
            email: Email claim
            first_name: Given name claim
            last_name: Family name claim
            profile_image_url: Picture claim

        Returns:
            The stored user
        """
        user = await self.get_by_id(user_id)
        if user is None:
            return await self.create(
                UserModel(
                    id=user_id,
                    email=email,
                    first_name=first_name,
                    last_name=last_name,
                    profile_image_url=profile_image_url,
                    role=DEFAULT_ROLE.value,
                )
            )

        user.email = email or user.email
        user.first_name = first_name or user.first_name
        user.last_name = last_name or user.last_name
        user.profile_image_url = profile_image_url or user.profile_image_url
        await self._session.flush()
        await self._session.refresh(user)
        return user

    async def list_by_role(self, role: Role) -> Sequence[UserModel]:
        """
        Get all users holding a role, ordered by id.

        Args:
            role: Role to filter on

        Returns:
            Matching users
        """
        result = await self._session.execute(
            select(UserModel)
            .where(UserModel.role == role.value)
            .order_by(UserModel.id)
        )
        return result.scalars().all()

    async def set_role(self, user_id: str, role: Role) -> Optional[UserModel]:
        """
        Assign a role.

        Args:
            user_id: Target user
            role: New role

        Returns:
            Updated user, None if not found
        """
        user = await self.get_by_id(user_id)
        if user is None:
            return None
        user.role = role.value
        await self._session.flush()
        await self._session.refresh(user)
        return user
