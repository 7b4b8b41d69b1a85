"""
Ownership Chain Resolution

Goals and objectives carry no client column. A client's claim on
one is verified by walking down from the client's single plan:

    plan (client_id) -> goals -> objectives

This is a linear scan bounded by the size of one plan. Missing
records resolve to "not owned", never to an error, so callers
cannot tell a foreign record from a nonexistent one.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from haven.infrastructure.database.repositories import (
    TreatmentGoalRepository,
    TreatmentObjectiveRepository,
    TreatmentPlanRepository,
)


class OwnershipResolver:
    """
    Resolves treatment-record ownership for a client.

    Usage:
        resolver = OwnershipResolver(session)
        if await resolver.client_owns_objective(client_id, objective_id):
            ...
    """

    def __init__(self, session: AsyncSession) -> None:
        self._plans = TreatmentPlanRepository(session)
        self._goals = TreatmentGoalRepository(session)
        self._objectives = TreatmentObjectiveRepository(session)

    async def client_owns_plan(self, client_id: str, plan_id: int) -> bool:
        plan = await self._plans.get_for_client(client_id)
        return plan is not None and plan.id == plan_id

    async def client_owns_goal(self, client_id: str, goal_id: int) -> bool:
        """Whether goal_id is one of the goals on the client's plan."""
        plan = await self._plans.get_for_client(client_id)
        if plan is None:
            return False

        goals = await self._goals.list_for_plan(plan.id)
        return any(goal.id == goal_id for goal in goals)

    async def client_owns_objective(self, client_id: str, objective_id: int) -> bool:
        """Whether objective_id sits under any goal on the client's plan."""
        plan = await self._plans.get_for_client(client_id)
        if plan is None:
            return False

        for goal in await self._goals.list_for_plan(plan.id):
            objectives = await self._objectives.list_for_goal(goal.id)
            if any(objective.id == objective_id for objective in objectives):
                return True
        return False

    async def client_of_plan(self, plan_id: int) -> Optional[str]:
        """Owning client of a plan, None if the plan does not exist."""
        plan = await self._plans.get_by_id(plan_id)
        return plan.client_id if plan else None

    async def client_of_goal(self, goal_id: int) -> Optional[str]:
        """Owning client of a goal, walking up to its plan."""
        goal = await self._goals.get_by_id(goal_id)
        if goal is None:
            return None
        return await self.client_of_plan(goal.plan_id)

    async def client_of_objective(self, objective_id: int) -> Optional[str]:
        """Owning client of an objective, walking up through its goal."""
        objective = await self._objectives.get_by_id(objective_id)
        if objective is None:
            return None
        return await self.client_of_goal(objective.goal_id)
