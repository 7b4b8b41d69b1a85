"""
Journal Endpoints

A client's own journal is private to them. Therapists may read a
client's shared entries; every such read is audited.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from haven.api.deps import get_audit_recorder, get_caller, get_session
from haven.api.v1.schemas import APIModel
from haven.domain.enums import AuditAction, ResourceType
from haven.domain.models.principal import Caller
from haven.infrastructure.database.models import JournalModel
from haven.infrastructure.database.repositories import JournalRepository
from haven.services.access import policy
from haven.services.audit import AuditRecorder

router = APIRouter()


class JournalCreate(APIModel):
    content: str = Field(..., min_length=1, max_length=20000)
    is_shared: bool = True
    date: Optional[datetime] = None


class JournalResponse(APIModel):
    id: int
    user_id: str
    content: str
    date: datetime
    is_shared: bool


@router.get("/journals", response_model=list[JournalResponse], summary="Own journal entries")
async def list_own_journals(
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
) -> list[JournalModel]:
    return list(await JournalRepository(session).list_for_user(caller.user_id))


@router.post(
    "/journals",
    response_model=JournalResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Write a journal entry",
)
async def create_journal(
    body: JournalCreate,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
) -> JournalModel:
    policy.enforce(policy.can_access_own_journal(caller.user_id, caller.user_id))

    values = body.model_dump(exclude_none=True)
    return await JournalRepository(session).create(
        JournalModel(user_id=caller.user_id, **values)
    )


@router.get(
    "/journals/client/{client_id}",
    response_model=list[JournalResponse],
    summary="A client's shared journal entries",
)
async def list_client_shared_journals(
    client_id: str,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> list[JournalModel]:
    policy.enforce(policy.can_read_shared_journals(caller.role))

    journals = list(await JournalRepository(session).list_shared_for_user(client_id))
    await recorder.record_phi_read(caller, ResourceType.JOURNAL, None, client_id, AuditAction.VIEW)
    return journals
