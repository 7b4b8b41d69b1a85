"""
Compliance Endpoints

Audit trail, login attempts, the client's own access history and
the disclosure register.
"""

from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from haven.api.deps import get_audit_recorder, get_caller, get_session
from haven.api.v1.schemas import APIModel
from haven.config import Settings, get_settings
from haven.domain.enums import AuditAction, ResourceType
from haven.domain.exceptions import NotFound
from haven.domain.models.principal import Caller
from haven.infrastructure.database.models import (
    AuditLogModel,
    DataDisclosureModel,
    LoginAttemptModel,
)
from haven.infrastructure.database.repositories import (
    AuditLogRepository,
    DataDisclosureRepository,
    LoginAttemptRepository,
    UserRepository,
)
from haven.services.access import policy
from haven.services.audit import AccessHistoryService, AuditRecorder

router = APIRouter()


class AuditLogResponse(APIModel):
    id: int
    user_id: Optional[str] = None
    action: str
    resource_type: str
    resource_id: Optional[str] = None
    target_user_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    details: Optional[dict[str, Any]] = None
    created_at: datetime


class LoginAttemptResponse(APIModel):
    id: int
    email: Optional[str] = None
    user_id: Optional[str] = None
    success: bool
    failure_reason: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime


class AccessHistoryResponse(APIModel):
    id: int
    action: str
    resource_type: str
    accessed_by: str
    accessed_at: datetime


class DisclosureCreate(APIModel):
    client_id: str
    recipient: str = Field(..., min_length=1, max_length=255)
    purpose: str = Field(..., min_length=1)
    data_types: list[str] = Field(default_factory=list)


class DisclosureResponse(APIModel):
    id: int
    client_id: str
    disclosed_by: str
    recipient: str
    purpose: str
    data_types: list[str]
    created_at: datetime


@router.get("/audit-logs", response_model=list[AuditLogResponse], summary="Recent audit entries")
async def list_audit_logs(
    limit: int = Query(default=100, ge=1, le=1000),
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
) -> list[AuditLogModel]:
    policy.enforce(policy.can_read_audit_logs(caller.role))
    return list(await AuditLogRepository(session).list_recent(limit))


@router.get("/login-attempts", response_model=list[LoginAttemptResponse], summary="Recent login attempts")
async def list_login_attempts(
    limit: int = Query(default=100, ge=1, le=1000),
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
) -> list[LoginAttemptModel]:
    policy.enforce(policy.can_read_login_attempts(caller.role))
    return list(await LoginAttemptRepository(session).list_recent(limit))


@router.get(
    "/my-access-history",
    response_model=list[AccessHistoryResponse],
    summary="Who accessed my records",
)
async def my_access_history(
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> list[AccessHistoryResponse]:
    policy.enforce(policy.can_read_access_history(caller.user_id, caller.user_id))

    service = AccessHistoryService(session, limit=settings.compliance.access_history_limit)
    entries = await service.for_client(caller.user_id)
    return [AccessHistoryResponse.model_validate(entry) for entry in entries]


@router.get(
    "/disclosures/{client_id}",
    response_model=list[DisclosureResponse],
    summary="Disclosures of a client's records",
)
async def list_disclosures(
    client_id: str,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> list[DataDisclosureModel]:
    policy.enforce(policy.can_read_disclosures(caller.role, caller.user_id, client_id))

    disclosures = list(await DataDisclosureRepository(session).list_for_client(client_id))
    await recorder.record_phi_read(caller, ResourceType.DATA_DISCLOSURE, None, client_id)
    return disclosures


@router.post(
    "/disclosures",
    response_model=DisclosureResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a disclosure",
)
async def create_disclosure(
    body: DisclosureCreate,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> DataDisclosureModel:
    policy.enforce(policy.can_record_disclosure(caller.role))

    if await UserRepository(session).get_by_id(body.client_id) is None:
        raise NotFound("Client not found")

    disclosure = await DataDisclosureRepository(session).create(
        DataDisclosureModel(**body.model_dump(), disclosed_by=caller.user_id)
    )
    await recorder.record_change(
        caller,
        AuditAction.CREATE,
        ResourceType.DATA_DISCLOSURE,
        disclosure.id,
        disclosure.client_id,
        details={"data_types": disclosure.data_types},
    )
    return disclosure
