"""
Database ORM models package.
"""

from haven.infrastructure.database.models.user_model import UserModel
from haven.infrastructure.database.models.journal_model import JournalModel
from haven.infrastructure.database.models.content_model import PromptModel, ResourceModel
from haven.infrastructure.database.models.assignment_model import HomeworkModel, ReminderModel
from haven.infrastructure.database.models.treatment_model import (
    TreatmentPlanModel,
    TreatmentGoalModel,
    TreatmentObjectiveModel,
    TreatmentProgressModel,
)
from haven.infrastructure.database.models.compliance_model import (
    AuditLogModel,
    LoginAttemptModel,
    SessionActivityModel,
    DataDisclosureModel,
)

__all__ = [
    "UserModel",
    "JournalModel",
    "PromptModel",
    "ResourceModel",
    "HomeworkModel",
    "ReminderModel",
    "TreatmentPlanModel",
    "TreatmentGoalModel",
    "TreatmentObjectiveModel",
    "TreatmentProgressModel",
    "AuditLogModel",
    "LoginAttemptModel",
    "SessionActivityModel",
    "DataDisclosureModel",
]
