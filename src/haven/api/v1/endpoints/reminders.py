"""
Reminder Endpoints

Office staff schedule reminders; clients read their own.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from haven.api.deps import get_audit_recorder, get_caller, get_session
from haven.api.v1.schemas import APIModel
from haven.domain.enums import AuditAction, ResourceType
from haven.domain.exceptions import NotFound
from haven.domain.models.principal import Caller
from haven.infrastructure.database.models import ReminderModel
from haven.infrastructure.database.repositories import ReminderRepository
from haven.services.access import policy
from haven.services.audit import AuditRecorder

router = APIRouter()


class ReminderCreate(APIModel):
    user_id: str
    message: str = Field(..., min_length=1, max_length=1000)
    scheduled_time: datetime
    sent: bool = False


class ReminderResponse(APIModel):
    id: int
    user_id: str
    message: str
    scheduled_time: datetime
    sent: bool


@router.get("/reminders", response_model=list[ReminderResponse], summary="Reminders visible to the caller")
async def list_reminders(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
) -> list[ReminderModel]:
    reminders = ReminderRepository(session)
    if user_id is None and policy.can_view_all_assignments(caller.role):
        return list(await reminders.list_all())

    owner_id = user_id or caller.user_id
    policy.enforce(policy.can_read_reminder(caller.role, caller.user_id, owner_id))
    return list(await reminders.list_for_user(owner_id))


@router.post(
    "/reminders",
    response_model=ReminderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Schedule a reminder",
)
async def create_reminder(
    body: ReminderCreate,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> ReminderModel:
    policy.enforce(policy.can_manage_reminder(caller.role))

    reminder = await ReminderRepository(session).create(ReminderModel(**body.model_dump()))
    await recorder.record_change(caller, AuditAction.CREATE, ResourceType.REMINDER, reminder.id, reminder.user_id)
    return reminder


@router.delete("/reminders/{reminder_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Cancel a reminder")
async def delete_reminder(
    reminder_id: int,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> None:
    policy.enforce(policy.can_manage_reminder(caller.role))

    reminders = ReminderRepository(session)
    reminder = await reminders.get_by_id(reminder_id)
    if reminder is None:
        raise NotFound("Reminder not found")

    await reminders.delete(reminder_id)
    await recorder.record_change(caller, AuditAction.DELETE, ResourceType.REMINDER, reminder_id, reminder.user_id)
