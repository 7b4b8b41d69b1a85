"""
Role Resolver

Maps an authenticated principal to its portal role. Roles are read
from the user row on every request so a role change takes effect
immediately, without reissuing session tokens.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from haven.domain.enums import DEFAULT_ROLE, Role, parse_role
from haven.domain.exceptions import Unauthenticated
from haven.domain.models.principal import Principal
from haven.infrastructure.database.repositories import UserRepository


class RoleResolver:
    """Resolves roles; never raises for a missing principal."""

    def __init__(self, session: AsyncSession) -> None:
        self._users = UserRepository(session)

    async def resolve(self, principal: Optional[Principal]) -> Role:
        """
        Role of the principal's user.

        Args:
            principal: Authenticated principal, None when anonymous

        Returns:
            The stored role, or the default role when there is no
            principal or no user row
        """
        if principal is None:
            return DEFAULT_ROLE

        user = await self._users.get_by_id(principal.user_id)
        if user is None:
            return DEFAULT_ROLE
        return parse_role(user.role)

    @staticmethod
    def require_principal(principal: Optional[Principal]) -> Principal:
        """
        Reject anonymous callers.

        Raises:
            Unauthenticated: If there is no principal
        """
        if principal is None:
            raise Unauthenticated()
        return principal
