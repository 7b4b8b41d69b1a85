"""
Portal Roles

The three roles of the portal form a strict total order:
therapist > office_admin > client. Permission checks compare
ranks rather than names.
"""

from enum import StrEnum
from typing import Optional


class Role(StrEnum):
    """
    User roles.

    Stored as plain strings on the user row.
    """

    THERAPIST = "therapist"
    """Clinician with full read/write access to clinical records."""

    OFFICE_ADMIN = "office_admin"
    """
    Front-office staff.

    Manages homework and reminders for all clients but has
    no access to clinical records.
    """

    CLIENT = "client"
    """Person receiving care. Default role for new accounts."""


DEFAULT_ROLE = Role.CLIENT

ROLE_RANK: dict[str, int] = {
    Role.THERAPIST: 3,
    Role.OFFICE_ADMIN: 2,
    Role.CLIENT: 1,
}


def role_rank(role: Optional[str]) -> int:
    """Rank of a role; unknown or missing roles rank 0."""
    if role is None:
        return 0
    return ROLE_RANK.get(role, 0)


def parse_role(value: Optional[str]) -> Role:
    """Coerce a stored role string to a Role, falling back to the default."""
    try:
        return Role(value) if value else DEFAULT_ROLE
    except ValueError:
        return DEFAULT_ROLE
