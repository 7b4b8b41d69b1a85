"""
User Administration Endpoints

Office staff list clients; therapists assign roles.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from haven.api.deps import get_audit_recorder, get_caller, get_session
from haven.api.v1.schemas import APIModel
from haven.domain.enums import AuditAction, ResourceType, Role
from haven.domain.exceptions import NotFound
from haven.domain.models.principal import Caller
from haven.infrastructure.database.models import UserModel
from haven.infrastructure.database.repositories import UserRepository
from haven.services.access import policy
from haven.services.audit import AuditRecorder

router = APIRouter()


class UserSummary(APIModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    created_at: datetime


class RoleUpdate(APIModel):
    role: Role


@router.get("/clients", response_model=list[UserSummary], summary="All clients")
async def list_clients(
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
) -> list[UserModel]:
    policy.enforce(policy.can_list_clients(caller.role))
    return list(await UserRepository(session).list_by_role(Role.CLIENT))


@router.patch("/users/{user_id}/role", response_model=UserSummary, summary="Assign a role")
async def assign_role(
    user_id: str,
    body: RoleUpdate,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> UserModel:
    policy.enforce(policy.can_assign_roles(caller.role))

    user = await UserRepository(session).set_role(user_id, body.role)
    if user is None:
        raise NotFound("User not found")

    await recorder.record_change(
        caller,
        AuditAction.UPDATE,
        ResourceType.USER,
        user.id,
        user.id,
        details={"role": body.role.value},
    )
    return user
