"""Domain enums package."""

from haven.domain.enums.role import Role, DEFAULT_ROLE, ROLE_RANK, role_rank, parse_role
from haven.domain.enums.audit_action import AuditAction, ResourceType, PHI_RESOURCE_TYPES
from haven.domain.enums.statuses import GoalStatus, ObjectiveStatus, HomeworkStatus

__all__ = [
    "Role",
    "DEFAULT_ROLE",
    "ROLE_RANK",
    "role_rank",
    "parse_role",
    "AuditAction",
    "ResourceType",
    "PHI_RESOURCE_TYPES",
    "GoalStatus",
    "ObjectiveStatus",
    "HomeworkStatus",
]
