"""
Treatment Plan Endpoints

Plans, goals, objectives and progress notes.

Authorization:
- Therapists read and write everything; every read of a client's
  records is audited with the client as subject.
- A client reads their own plan, its goals and their objectives.
  Goal and objective claims are verified through the ownership
  chain up to the client's plan.
- Progress notes are therapist-only.

Missing clinical records are reported exactly like foreign ones
(403 "Access denied") so ids cannot be enumerated.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from haven.api.deps import get_audit_recorder, get_caller, get_session
from haven.api.v1.schemas import APIModel
from haven.domain.enums import AuditAction, GoalStatus, ObjectiveStatus, ResourceType
from haven.domain.exceptions import Conflict, Forbidden, NotFound
from haven.domain.models.principal import Caller
from haven.infrastructure.database.models import (
    TreatmentGoalModel,
    TreatmentObjectiveModel,
    TreatmentPlanModel,
    TreatmentProgressModel,
)
from haven.infrastructure.database.repositories import (
    TreatmentGoalRepository,
    TreatmentObjectiveRepository,
    TreatmentPlanRepository,
    TreatmentProgressRepository,
    UserRepository,
)
from haven.services.access import OwnershipResolver, policy
from haven.services.audit import AuditRecorder

router = APIRouter()


# =============================================================================
# SCHEMAS
# =============================================================================

class PlanCreate(APIModel):
    client_id: str
    summary: Optional[str] = None


class PlanUpdate(APIModel):
    summary: Optional[str] = None


class PlanResponse(APIModel):
    id: int
    client_id: str
    summary: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class GoalCreate(APIModel):
    plan_id: int
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    status: GoalStatus = GoalStatus.IN_PROGRESS
    target_date: Optional[datetime] = None
    order: int = 0


class GoalUpdate(APIModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[GoalStatus] = None
    target_date: Optional[datetime] = None
    order: Optional[int] = None


class GoalResponse(APIModel):
    id: int
    plan_id: int
    title: str
    description: Optional[str] = None
    status: str
    target_date: Optional[datetime] = None
    order: int


class ObjectiveCreate(APIModel):
    goal_id: int
    title: str = Field(..., min_length=1, max_length=255)
    measurable_criteria: Optional[str] = None
    status: ObjectiveStatus = ObjectiveStatus.NOT_STARTED
    order: int = 0


class ObjectiveUpdate(APIModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    measurable_criteria: Optional[str] = None
    status: Optional[ObjectiveStatus] = None
    order: Optional[int] = None


class ObjectiveResponse(APIModel):
    id: int
    goal_id: int
    title: str
    measurable_criteria: Optional[str] = None
    status: str
    order: int


class ProgressCreate(APIModel):
    objective_id: int
    progress_level: int = Field(..., ge=0, le=100)
    note: Optional[str] = None


class ProgressResponse(APIModel):
    id: int
    objective_id: int
    progress_level: int
    note: Optional[str] = None
    recorded_by: Optional[str] = None
    recorded_at: datetime


# =============================================================================
# PLANS
# =============================================================================

@router.get("/treatment-plans", response_model=list[PlanResponse], summary="Treatment plans visible to the caller")
async def list_plans(
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> list[TreatmentPlanModel]:
    """Therapists get every plan (audited as view_all); anyone else their own."""
    plans = TreatmentPlanRepository(session)
    if policy.can_view_all_treatment_plans(caller.role):
        result = list(await plans.get_all())
        await recorder.record(
            caller.user_id,
            AuditAction.VIEW_ALL,
            ResourceType.TREATMENT_PLAN,
            context=caller.context,
            details={"count": len(result)},
        )
        return result

    own = await plans.get_for_client(caller.user_id)
    return [own] if own else []


@router.get(
    "/treatment-plans/client/{client_id}",
    response_model=Optional[PlanResponse],
    summary="A client's treatment plan",
)
async def get_client_plan(
    client_id: str,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> Optional[TreatmentPlanModel]:
    policy.enforce(policy.can_read_treatment_plan(caller.role, caller.user_id, client_id))

    plan = await TreatmentPlanRepository(session).get_for_client(client_id)
    if plan is not None:
        await recorder.record_phi_read(caller, ResourceType.TREATMENT_PLAN, plan.id, plan.client_id)
    return plan


@router.post(
    "/treatment-plans",
    response_model=PlanResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a client's treatment plan",
)
async def create_plan(
    body: PlanCreate,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> TreatmentPlanModel:
    policy.enforce(policy.can_write_treatment(caller.role, ResourceType.TREATMENT_PLAN))

    if await UserRepository(session).get_by_id(body.client_id) is None:
        raise NotFound("Client not found")

    plans = TreatmentPlanRepository(session)
    if await plans.get_for_client(body.client_id) is not None:
        raise Conflict("Client already has a treatment plan")

    plan = await plans.create(
        TreatmentPlanModel(client_id=body.client_id, summary=body.summary, created_by=caller.user_id)
    )
    await recorder.record_change(caller, AuditAction.CREATE, ResourceType.TREATMENT_PLAN, plan.id, plan.client_id)
    return plan


@router.patch("/treatment-plans/{plan_id}", response_model=PlanResponse, summary="Update a treatment plan")
async def update_plan(
    plan_id: int,
    body: PlanUpdate,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> TreatmentPlanModel:
    policy.enforce(policy.can_write_treatment(caller.role, ResourceType.TREATMENT_PLAN))

    plan = await TreatmentPlanRepository(session).update(plan_id, body.model_dump(exclude_unset=True))
    if plan is None:
        raise Forbidden()
    await recorder.record_change(caller, AuditAction.UPDATE, ResourceType.TREATMENT_PLAN, plan.id, plan.client_id)
    return plan


# =============================================================================
# GOALS
# =============================================================================

@router.get("/treatment-goals/{plan_id}", response_model=list[GoalResponse], summary="Goals of a plan")
async def list_goals(
    plan_id: int,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> list[TreatmentGoalModel]:
    owns = await OwnershipResolver(session).client_owns_plan(caller.user_id, plan_id)
    policy.enforce(policy.can_read_treatment_goal(caller.role, owns))

    plan = await TreatmentPlanRepository(session).get_by_id(plan_id)
    if plan is None:
        raise Forbidden()

    goals = list(await TreatmentGoalRepository(session).list_for_plan(plan.id))
    await recorder.record_phi_read(caller, ResourceType.TREATMENT_GOAL, plan.id, plan.client_id)
    return goals


@router.post(
    "/treatment-goals",
    response_model=GoalResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a goal to a plan",
)
async def create_goal(
    body: GoalCreate,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> TreatmentGoalModel:
    policy.enforce(policy.can_write_treatment(caller.role, ResourceType.TREATMENT_GOAL))

    plan = await TreatmentPlanRepository(session).get_by_id(body.plan_id)
    if plan is None:
        raise Forbidden()

    goal = await TreatmentGoalRepository(session).create(TreatmentGoalModel(**body.model_dump()))
    await recorder.record_change(caller, AuditAction.CREATE, ResourceType.TREATMENT_GOAL, goal.id, plan.client_id)
    return goal


@router.patch("/treatment-goals/{goal_id}", response_model=GoalResponse, summary="Update a goal")
async def update_goal(
    goal_id: int,
    body: GoalUpdate,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> TreatmentGoalModel:
    policy.enforce(policy.can_write_treatment(caller.role, ResourceType.TREATMENT_GOAL))

    goal = await TreatmentGoalRepository(session).update(goal_id, body.model_dump(exclude_unset=True))
    if goal is None:
        raise Forbidden()

    client_id = await OwnershipResolver(session).client_of_plan(goal.plan_id)
    await recorder.record_change(caller, AuditAction.UPDATE, ResourceType.TREATMENT_GOAL, goal.id, client_id)
    return goal


@router.delete("/treatment-goals/{goal_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a goal")
async def delete_goal(
    goal_id: int,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> None:
    policy.enforce(policy.can_write_treatment(caller.role, ResourceType.TREATMENT_GOAL))

    client_id = await OwnershipResolver(session).client_of_goal(goal_id)
    if client_id is None or not await TreatmentGoalRepository(session).delete(goal_id):
        raise Forbidden()
    await recorder.record_change(caller, AuditAction.DELETE, ResourceType.TREATMENT_GOAL, goal_id, client_id)


# =============================================================================
# OBJECTIVES
# =============================================================================

@router.get(
    "/treatment-objectives/{goal_id}",
    response_model=list[ObjectiveResponse],
    summary="Objectives of a goal",
)
async def list_objectives(
    goal_id: int,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> list[TreatmentObjectiveModel]:
    resolver = OwnershipResolver(session)
    owns = await resolver.client_owns_goal(caller.user_id, goal_id)
    policy.enforce(policy.can_read_treatment_objective(caller.role, owns))

    client_id = await resolver.client_of_goal(goal_id)
    if client_id is None:
        raise Forbidden()

    objectives = list(await TreatmentObjectiveRepository(session).list_for_goal(goal_id))
    await recorder.record_phi_read(caller, ResourceType.TREATMENT_OBJECTIVE, goal_id, client_id)
    return objectives


@router.get(
    "/treatment-objectives/item/{objective_id}",
    response_model=ObjectiveResponse,
    summary="A single objective",
)
async def get_objective(
    objective_id: int,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> TreatmentObjectiveModel:
    resolver = OwnershipResolver(session)
    owns = await resolver.client_owns_objective(caller.user_id, objective_id)
    policy.enforce(policy.can_read_treatment_objective(caller.role, owns))

    objective = await TreatmentObjectiveRepository(session).get_by_id(objective_id)
    if objective is None:
        raise Forbidden()

    client_id = await resolver.client_of_goal(objective.goal_id)
    await recorder.record_phi_read(caller, ResourceType.TREATMENT_OBJECTIVE, objective.id, client_id)
    return objective


@router.post(
    "/treatment-objectives",
    response_model=ObjectiveResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an objective to a goal",
)
async def create_objective(
    body: ObjectiveCreate,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> TreatmentObjectiveModel:
    policy.enforce(policy.can_write_treatment(caller.role, ResourceType.TREATMENT_OBJECTIVE))

    client_id = await OwnershipResolver(session).client_of_goal(body.goal_id)
    if client_id is None:
        raise Forbidden()

    objective = await TreatmentObjectiveRepository(session).create(
        TreatmentObjectiveModel(**body.model_dump())
    )
    await recorder.record_change(caller, AuditAction.CREATE, ResourceType.TREATMENT_OBJECTIVE, objective.id, client_id)
    return objective


@router.patch("/treatment-objectives/{objective_id}", response_model=ObjectiveResponse, summary="Update an objective")
async def update_objective(
    objective_id: int,
    body: ObjectiveUpdate,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> TreatmentObjectiveModel:
    policy.enforce(policy.can_write_treatment(caller.role, ResourceType.TREATMENT_OBJECTIVE))

    objective = await TreatmentObjectiveRepository(session).update(
        objective_id, body.model_dump(exclude_unset=True)
    )
    if objective is None:
        raise Forbidden()

    client_id = await OwnershipResolver(session).client_of_goal(objective.goal_id)
    await recorder.record_change(caller, AuditAction.UPDATE, ResourceType.TREATMENT_OBJECTIVE, objective.id, client_id)
    return objective


@router.delete(
    "/treatment-objectives/{objective_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an objective",
)
async def delete_objective(
    objective_id: int,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> None:
    policy.enforce(policy.can_write_treatment(caller.role, ResourceType.TREATMENT_OBJECTIVE))

    client_id = await OwnershipResolver(session).client_of_objective(objective_id)
    if client_id is None or not await TreatmentObjectiveRepository(session).delete(objective_id):
        raise Forbidden()
    await recorder.record_change(caller, AuditAction.DELETE, ResourceType.TREATMENT_OBJECTIVE, objective_id, client_id)


# =============================================================================
# PROGRESS
# =============================================================================

@router.get(
    "/treatment-progress/{objective_id}",
    response_model=list[ProgressResponse],
    summary="Progress notes for an objective",
)
async def list_progress(
    objective_id: int,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> list[TreatmentProgressModel]:
    policy.enforce(policy.can_access_treatment_progress(caller.role))

    client_id = await OwnershipResolver(session).client_of_objective(objective_id)
    if client_id is None:
        raise Forbidden()

    notes = list(await TreatmentProgressRepository(session).list_for_objective(objective_id))
    await recorder.record_phi_read(caller, ResourceType.TREATMENT_PROGRESS, objective_id, client_id)
    return notes


@router.post(
    "/treatment-progress",
    response_model=ProgressResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record progress against an objective",
)
async def create_progress(
    body: ProgressCreate,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> TreatmentProgressModel:
    policy.enforce(policy.can_access_treatment_progress(caller.role))

    client_id = await OwnershipResolver(session).client_of_objective(body.objective_id)
    if client_id is None:
        raise Forbidden()

    note = await TreatmentProgressRepository(session).create(
        TreatmentProgressModel(**body.model_dump(), recorded_by=caller.user_id)
    )
    await recorder.record_change(caller, AuditAction.CREATE, ResourceType.TREATMENT_PROGRESS, note.id, client_id)
    return note
