"""
Treatment Plan Database Models

Plan -> goals -> objectives -> progress notes. Goals and objectives
carry no direct client column; ownership is resolved through the
chain up to the plan.

PRIVACY: Every table here is PHI.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from haven.domain.clock import utc_now
from haven.infrastructure.database.connection import Base


class TreatmentPlanModel(Base):
    """
    Treatment plan ORM model. One plan per client.

    Table: treatment_plans
    """

    __tablename__ = "treatment_plans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        doc="Owning client"
    )
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<TreatmentPlanModel(id={self.id}, client_id={self.client_id})>"


class TreatmentGoalModel(Base):
    """
    Treatment goal ORM model.

    Table: treatment_goals
    """

    __tablename__ = "treatment_goals"
    __table_args__ = (
        CheckConstraint(
            "status in ('in_progress', 'achieved', 'discontinued')",
            name="ck_treatment_goals_status",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    plan_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("treatment_plans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="in_progress", nullable=False)
    target_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    order: Mapped[int] = mapped_column("sort_order", Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<TreatmentGoalModel(id={self.id}, plan_id={self.plan_id}, status='{self.status}')>"


class TreatmentObjectiveModel(Base):
    """
    Measurable objective under a goal.

    Table: treatment_objectives
    """

    __tablename__ = "treatment_objectives"
    __table_args__ = (
        CheckConstraint(
            "status in ('not_started', 'in_progress', 'completed')",
            name="ck_treatment_objectives_status",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    goal_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("treatment_goals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    measurable_criteria: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="not_started", nullable=False)
    order: Mapped[int] = mapped_column("sort_order", Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<TreatmentObjectiveModel(id={self.id}, goal_id={self.goal_id}, status='{self.status}')>"


class TreatmentProgressModel(Base):
    """
    Progress note against an objective.

    Table: treatment_progress
    """

    __tablename__ = "treatment_progress"
    __table_args__ = (
        CheckConstraint(
            "progress_level >= 0 AND progress_level <= 100",
            name="ck_treatment_progress_level",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    objective_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("treatment_objectives.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    progress_level: Mapped[int] = mapped_column(Integer, nullable=False, doc="0-100")
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    recorded_by: Mapped[Optional[str]] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<TreatmentProgressModel(id={self.id}, objective_id={self.objective_id}, level={self.progress_level})>"
