"""
Unit Tests for Role Resolution

Roles come from the user row, with the default role as the fallback.
"""

import pytest

from haven.domain.enums import DEFAULT_ROLE, Role
from haven.domain.exceptions import Unauthenticated
from haven.domain.models.principal import Principal
from haven.infrastructure.database.models import UserModel
from haven.services.identity import RoleResolver


class TestRoleResolver:
    """Tests for RoleResolver."""

    async def test_anonymous_gets_default_role(self, db):
        async with db.session() as session:
            assert await RoleResolver(session).resolve(None) == DEFAULT_ROLE

    async def test_unknown_user_gets_default_role(self, db):
        async with db.session() as session:
            principal = Principal(user_id="ghost", session_id="s-1")
            assert await RoleResolver(session).resolve(principal) == DEFAULT_ROLE

    async def test_stored_role_is_used(self, db):
        async with db.session() as session:
            session.add(UserModel(id="therapist-9", role=Role.THERAPIST.value))
            await session.flush()

            principal = Principal(user_id="therapist-9", session_id="s-2")
            assert await RoleResolver(session).resolve(principal) == Role.THERAPIST

    def test_require_principal_rejects_anonymous(self):
        with pytest.raises(Unauthenticated):
            RoleResolver.require_principal(None)
