"""
Treatment Plan Repositories

Data access for the plan -> goal -> objective -> progress hierarchy.
Deletes cascade explicitly so behaviour does not depend on the
backend enforcing foreign keys.

PRIVACY: Everything returned here is PHI. Callers must have passed
the access policy before invoking these methods.
"""

from typing import Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from haven.infrastructure.database.models.treatment_model import (
    TreatmentGoalModel,
    TreatmentObjectiveModel,
    TreatmentPlanModel,
    TreatmentProgressModel,
)
from haven.infrastructure.database.repositories.base import BaseRepository, CrudRepository, EntityId


class TreatmentPlanRepository(CrudRepository[TreatmentPlanModel]):
    """Treatment plans, at most one per client."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(TreatmentPlanModel, session)

    async def get_for_client(self, client_id: str) -> Optional[TreatmentPlanModel]:
        """
        Get the plan owned by a client.

        Args:
            client_id: Owning client

        Returns:
            The plan, None if the client has none
        """
        result = await self._session.execute(
            select(TreatmentPlanModel).where(TreatmentPlanModel.client_id == client_id)
        )
        return result.scalar_one_or_none()


class TreatmentGoalRepository(CrudRepository[TreatmentGoalModel]):
    """Goals under a plan."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(TreatmentGoalModel, session)

    async def list_for_plan(self, plan_id: int) -> Sequence[TreatmentGoalModel]:
        """Goals of a plan in display order."""
        result = await self._session.execute(
            select(TreatmentGoalModel)
            .where(TreatmentGoalModel.plan_id == plan_id)
            .order_by(TreatmentGoalModel.order, TreatmentGoalModel.id)
        )
        return result.scalars().all()

    async def delete(self, id: EntityId) -> bool:
        """Delete a goal with its objectives and their progress notes."""
        objective_ids = select(TreatmentObjectiveModel.id).where(
            TreatmentObjectiveModel.goal_id == id
        )
        await self._session.execute(
            delete(TreatmentProgressModel).where(
                TreatmentProgressModel.objective_id.in_(objective_ids)
            )
        )
        await self._session.execute(
            delete(TreatmentObjectiveModel).where(TreatmentObjectiveModel.goal_id == id)
        )
        return await super().delete(id)


class TreatmentObjectiveRepository(CrudRepository[TreatmentObjectiveModel]):
    """Objectives under a goal."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(TreatmentObjectiveModel, session)

    async def list_for_goal(self, goal_id: int) -> Sequence[TreatmentObjectiveModel]:
        """Objectives of a goal in display order."""
        result = await self._session.execute(
            select(TreatmentObjectiveModel)
            .where(TreatmentObjectiveModel.goal_id == goal_id)
            .order_by(TreatmentObjectiveModel.order, TreatmentObjectiveModel.id)
        )
        return result.scalars().all()

    async def delete(self, id: EntityId) -> bool:
        """Delete an objective with its progress notes."""
        await self._session.execute(
            delete(TreatmentProgressModel).where(TreatmentProgressModel.objective_id == id)
        )
        return await super().delete(id)


class TreatmentProgressRepository(BaseRepository[TreatmentProgressModel]):
    """Progress notes. Recorded once, never edited."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(TreatmentProgressModel, session)

    async def list_for_objective(self, objective_id: int) -> Sequence[TreatmentProgressModel]:
        """Progress notes for an objective, newest first."""
        result = await self._session.execute(
            select(TreatmentProgressModel)
            .where(TreatmentProgressModel.objective_id == objective_id)
            .order_by(TreatmentProgressModel.recorded_at.desc(), TreatmentProgressModel.id.desc())
        )
        return result.scalars().all()
