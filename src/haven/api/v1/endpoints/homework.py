"""
Homework Endpoints

Office staff assign and remove homework. A client sees and completes
their own; office_admin and above see everyone's.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from haven.api.deps import get_audit_recorder, get_caller, get_session
from haven.api.v1.schemas import APIModel
from haven.domain.enums import AuditAction, HomeworkStatus, ResourceType
from haven.domain.exceptions import NotFound
from haven.domain.models.principal import Caller
from haven.infrastructure.database.models import HomeworkModel
from haven.infrastructure.database.repositories import HomeworkRepository
from haven.services.access import policy
from haven.services.audit import AuditRecorder

router = APIRouter()


class HomeworkCreate(APIModel):
    user_id: str
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    status: HomeworkStatus = HomeworkStatus.PENDING
    due_date: Optional[datetime] = None


class HomeworkUpdate(APIModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    status: Optional[HomeworkStatus] = None
    due_date: Optional[datetime] = None


class HomeworkResponse(APIModel):
    id: int
    user_id: str
    title: str
    description: str
    status: str
    due_date: Optional[datetime] = None


@router.get("/homework", response_model=list[HomeworkResponse], summary="Homework visible to the caller")
async def list_homework(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
) -> list[HomeworkModel]:
    """
    Clients get their own homework. Office staff get everyone's,
    or one client's when ``userId`` is given.
    """
    homework = HomeworkRepository(session)
    if user_id is None and policy.can_view_all_assignments(caller.role):
        return list(await homework.get_all())

    owner_id = user_id or caller.user_id
    policy.enforce(policy.can_read_homework(caller.role, caller.user_id, owner_id))
    return list(await homework.list_for_user(owner_id))


@router.post(
    "/homework",
    response_model=HomeworkResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign homework",
)
async def create_homework(
    body: HomeworkCreate,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> HomeworkModel:
    policy.enforce(policy.can_manage_homework(caller.role))

    item = await HomeworkRepository(session).create(HomeworkModel(**body.model_dump()))
    await recorder.record_change(caller, AuditAction.CREATE, ResourceType.HOMEWORK, item.id, item.user_id)
    return item


@router.patch("/homework/{homework_id}", response_model=HomeworkResponse, summary="Update homework")
async def update_homework(
    homework_id: int,
    body: HomeworkUpdate,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> HomeworkModel:
    """
    The assigned client may change the status only. Any other field
    needs office_admin or above.
    """
    homework = HomeworkRepository(session)
    item = await homework.get_by_id(homework_id)
    if item is None:
        # Clients get the same denial as for someone else's homework
        policy.enforce(policy.can_update_homework_status(caller.role, caller.user_id, None))
        raise NotFound("Homework not found")

    changes = body.model_dump(exclude_unset=True)
    if set(changes) - {"status"}:
        policy.enforce(policy.can_manage_homework(caller.role))
    else:
        policy.enforce(policy.can_update_homework_status(caller.role, caller.user_id, item.user_id))

    item = await homework.update(homework_id, changes)
    await recorder.record_change(
        caller,
        AuditAction.UPDATE,
        ResourceType.HOMEWORK,
        item.id,
        item.user_id,
        details={"fields": sorted(changes)},
    )
    return item


@router.delete("/homework/{homework_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Remove homework")
async def delete_homework(
    homework_id: int,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> None:
    policy.enforce(policy.can_manage_homework(caller.role))

    homework = HomeworkRepository(session)
    item = await homework.get_by_id(homework_id)
    if item is None:
        raise NotFound("Homework not found")

    await homework.delete(homework_id)
    await recorder.record_change(caller, AuditAction.DELETE, ResourceType.HOMEWORK, homework_id, item.user_id)
