"""
Repository pattern implementations package.
"""

from haven.infrastructure.database.repositories.base import BaseRepository, CrudRepository
from haven.infrastructure.database.repositories.user_repository import UserRepository
from haven.infrastructure.database.repositories.journal_repository import JournalRepository
from haven.infrastructure.database.repositories.content_repository import (
    PromptRepository,
    ResourceRepository,
)
from haven.infrastructure.database.repositories.assignment_repository import (
    HomeworkRepository,
    ReminderRepository,
)
from haven.infrastructure.database.repositories.treatment_repository import (
    TreatmentPlanRepository,
    TreatmentGoalRepository,
    TreatmentObjectiveRepository,
    TreatmentProgressRepository,
)
from haven.infrastructure.database.repositories.compliance_repository import (
    AuditLogRepository,
    LoginAttemptRepository,
    DataDisclosureRepository,
    SessionActivityRepository,
)

__all__ = [
    "BaseRepository",
    "CrudRepository",
    "UserRepository",
    "JournalRepository",
    "PromptRepository",
    "ResourceRepository",
    "HomeworkRepository",
    "ReminderRepository",
    "TreatmentPlanRepository",
    "TreatmentGoalRepository",
    "TreatmentObjectiveRepository",
    "TreatmentProgressRepository",
    "AuditLogRepository",
    "LoginAttemptRepository",
    "DataDisclosureRepository",
    "SessionActivityRepository",
]
