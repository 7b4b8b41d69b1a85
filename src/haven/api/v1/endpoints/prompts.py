"""
Prompt Endpoints

Journaling prompts. Global prompts are visible to everyone;
client-scoped prompts only to that client and therapists. Only
therapists write.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from haven.api.deps import get_audit_recorder, get_caller, get_session
from haven.api.v1.schemas import APIModel
from haven.domain.enums import AuditAction, ResourceType
from haven.domain.exceptions import NotFound
from haven.domain.models.principal import Caller
from haven.infrastructure.database.models import PromptModel
from haven.infrastructure.database.repositories import PromptRepository
from haven.services.access import policy
from haven.services.audit import AuditRecorder

router = APIRouter()


class PromptCreate(APIModel):
    content: str = Field(..., min_length=1, max_length=2000)
    is_active: bool = True
    client_id: Optional[str] = None


class PromptUpdate(APIModel):
    content: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    is_active: Optional[bool] = None
    client_id: Optional[str] = None


class PromptResponse(APIModel):
    id: int
    content: str
    is_active: bool
    client_id: Optional[str] = None


@router.get("/prompts", response_model=list[PromptResponse], summary="Prompts visible to the caller")
async def list_prompts(
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
) -> list[PromptModel]:
    prompts = PromptRepository(session)
    if policy.can_view_all_content(caller.role):
        return list(await prompts.get_all())
    visible = await prompts.list_visible_to(caller.user_id)
    return [p for p in visible if policy.can_read_prompt(caller.role, caller.user_id, p.client_id)]


@router.post(
    "/prompts",
    response_model=PromptResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a prompt",
)
async def create_prompt(
    body: PromptCreate,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> PromptModel:
    policy.enforce(policy.can_write_prompt(caller.role))

    prompt = await PromptRepository(session).create(PromptModel(**body.model_dump()))
    await recorder.record_change(caller, AuditAction.CREATE, ResourceType.PROMPT, prompt.id, prompt.client_id)
    return prompt


@router.patch("/prompts/{prompt_id}", response_model=PromptResponse, summary="Update a prompt")
async def update_prompt(
    prompt_id: int,
    body: PromptUpdate,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> PromptModel:
    policy.enforce(policy.can_write_prompt(caller.role))

    prompt = await PromptRepository(session).update(prompt_id, body.model_dump(exclude_unset=True))
    if prompt is None:
        raise NotFound("Prompt not found")
    await recorder.record_change(caller, AuditAction.UPDATE, ResourceType.PROMPT, prompt.id, prompt.client_id)
    return prompt


@router.delete("/prompts/{prompt_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a prompt")
async def delete_prompt(
    prompt_id: int,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> None:
    policy.enforce(policy.can_write_prompt(caller.role))

    if not await PromptRepository(session).delete(prompt_id):
        raise NotFound("Prompt not found")
    await recorder.record_change(caller, AuditAction.DELETE, ResourceType.PROMPT, prompt_id)
