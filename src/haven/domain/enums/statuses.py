"""Status enumerations for treatment and assignment records."""

from enum import StrEnum


class GoalStatus(StrEnum):
    """Treatment goal status."""

    IN_PROGRESS = "in_progress"
    ACHIEVED = "achieved"
    DISCONTINUED = "discontinued"


class ObjectiveStatus(StrEnum):
    """Treatment objective status."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class HomeworkStatus(StrEnum):
    """Homework assignment status."""

    PENDING = "pending"
    COMPLETED = "completed"
