"""
Unit Tests for Portal Roles

Tests role ranking, parsing and the hierarchy predicates.
"""

import pytest

from haven.domain.enums import DEFAULT_ROLE, Role, parse_role, role_rank
from haven.services.access.policy import (
    has_role_permission,
    is_office_admin_role,
    is_therapist_role,
)


class TestRoleRank:
    """Tests for role ranking."""

    def test_hierarchy_is_strict(self):
        assert role_rank(Role.THERAPIST) > role_rank(Role.OFFICE_ADMIN) > role_rank(Role.CLIENT) > 0

    @pytest.mark.parametrize("value", [None, "", "superuser", "THERAPIST"])
    def test_unknown_roles_rank_zero(self, value):
        assert role_rank(value) == 0

    def test_default_role_is_client(self):
        assert DEFAULT_ROLE == Role.CLIENT


class TestParseRole:
    """Tests for coercing stored role strings."""

    def test_known_value(self):
        assert parse_role("office_admin") == Role.OFFICE_ADMIN

    @pytest.mark.parametrize("value", [None, "", "root"])
    def test_falls_back_to_default(self, value):
        assert parse_role(value) == DEFAULT_ROLE


class TestRolePredicates:
    """Tests for the hierarchy predicates."""

    @pytest.mark.parametrize(
        "actual,required,expected",
        [
            (Role.THERAPIST, Role.CLIENT, True),
            (Role.THERAPIST, Role.THERAPIST, True),
            (Role.OFFICE_ADMIN, Role.THERAPIST, False),
            (Role.OFFICE_ADMIN, Role.OFFICE_ADMIN, True),
            (Role.CLIENT, Role.OFFICE_ADMIN, False),
            ("visitor", Role.CLIENT, False),
        ],
    )
    def test_has_role_permission(self, actual, required, expected):
        assert has_role_permission(actual, required) is expected

    def test_therapist_only(self):
        assert is_therapist_role(Role.THERAPIST)
        assert not is_therapist_role(Role.OFFICE_ADMIN)
        assert not is_therapist_role(Role.CLIENT)

    def test_office_admin_includes_therapist(self):
        assert is_office_admin_role(Role.THERAPIST)
        assert is_office_admin_role(Role.OFFICE_ADMIN)
        assert not is_office_admin_role(Role.CLIENT)
        assert not is_office_admin_role(None)
