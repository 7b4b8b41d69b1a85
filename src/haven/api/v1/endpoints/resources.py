"""
Resource Endpoints

Self-help resources. Clients see global resources plus those scoped
to them; therapists see everything and are the only writers.
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
from haven.infrastructure.database.models import ResourceModel
from haven.infrastructure.database.repositories import ResourceRepository
from haven.services.access import policy
from haven.services.audit import AuditRecorder

router = APIRouter()


class ResourceCreate(APIModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    category: str = Field(default="general", max_length=50)
    client_id: Optional[str] = None


class ResourceUpdate(APIModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, max_length=50)
    client_id: Optional[str] = None


class ResourceResponse(APIModel):
    id: int
    title: str
    content: str
    category: str
    client_id: Optional[str] = None


@router.get("/resources", response_model=list[ResourceResponse], summary="Resources visible to the caller")
async def list_resources(
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
) -> list[ResourceModel]:
    resources = ResourceRepository(session)
    if policy.can_view_all_content(caller.role):
        return list(await resources.get_all())
    visible = await resources.list_visible_to(caller.user_id)
    return [r for r in visible if policy.can_read_resource(caller.role, caller.user_id, r.client_id)]


@router.post(
    "/resources",
    response_model=ResourceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a resource",
)
async def create_resource(
    body: ResourceCreate,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> ResourceModel:
    policy.enforce(policy.can_write_resource(caller.role))

    resource = await ResourceRepository(session).create(ResourceModel(**body.model_dump()))
    await recorder.record_change(caller, AuditAction.CREATE, ResourceType.RESOURCE, resource.id, resource.client_id)
    return resource


@router.patch("/resources/{resource_id}", response_model=ResourceResponse, summary="Update a resource")
async def update_resource(
    resource_id: int,
    body: ResourceUpdate,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> ResourceModel:
    policy.enforce(policy.can_write_resource(caller.role))

    resource = await ResourceRepository(session).update(resource_id, body.model_dump(exclude_unset=True))
    if resource is None:
        raise NotFound("Resource not found")
    await recorder.record_change(caller, AuditAction.UPDATE, ResourceType.RESOURCE, resource.id, resource.client_id)
    return resource


@router.delete("/resources/{resource_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a resource")
async def delete_resource(
    resource_id: int,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> None:
    policy.enforce(policy.can_write_resource(caller.role))

    if not await ResourceRepository(session).delete(resource_id):
        raise NotFound("Resource not found")
    await recorder.record_change(caller, AuditAction.DELETE, ResourceType.RESOURCE, resource_id)
