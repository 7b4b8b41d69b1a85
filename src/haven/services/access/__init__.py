"""Access policy services package."""

from haven.services.access import policy
from haven.services.access.ownership import OwnershipResolver
from haven.services.access.policy import (
    enforce,
    has_role_permission,
    is_office_admin_role,
    is_therapist_role,
)

__all__ = [
    "policy",
    "OwnershipResolver",
    "enforce",
    "has_role_permission",
    "is_office_admin_role",
    "is_therapist_role",
]
