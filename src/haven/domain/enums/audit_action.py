"""
Audit Enumerations

Actions and resource types recorded in the audit trail.
"""

from enum import StrEnum


class AuditAction(StrEnum):
    """Actions recorded in the audit log."""

    VIEW = "view"
    VIEW_ALL = "view_all"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    LOGIN = "login"
    LOGOUT = "logout"
    FAILED_LOGIN = "failed_login"
    SESSION_TIMEOUT = "session_timeout"


class ResourceType(StrEnum):
    """Resource kinds referenced by audit entries and access decisions."""

    USER = "user"
    SESSION = "session"
    JOURNAL = "journal"
    PROMPT = "prompt"
    RESOURCE = "resource"
    HOMEWORK = "homework"
    REMINDER = "reminder"
    TREATMENT_PLAN = "treatment_plan"
    TREATMENT_GOAL = "treatment_goal"
    TREATMENT_OBJECTIVE = "treatment_objective"
    TREATMENT_PROGRESS = "treatment_progress"
    AUDIT_LOG = "audit_log"
    ACCESS_HISTORY = "access_history"
    LOGIN_ATTEMPT = "login_attempt"
    DATA_DISCLOSURE = "data_disclosure"


# Resource types whose reads by a third party must be audited
PHI_RESOURCE_TYPES: frozenset[ResourceType] = frozenset({
    ResourceType.JOURNAL,
    ResourceType.TREATMENT_PLAN,
    ResourceType.TREATMENT_GOAL,
    ResourceType.TREATMENT_OBJECTIVE,
    ResourceType.TREATMENT_PROGRESS,
    ResourceType.DATA_DISCLOSURE,
})
