"""
Authentication Endpoints

Sign-in with an identity provider assertion, sign-out, and the
current user. The OpenID Connect flow itself lives with the
identity provider.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from haven.api.deps import (
    get_audit_recorder,
    get_caller,
    get_request_context,
    get_session,
    get_session_monitor,
    get_token_service,
    require_principal,
)
from haven.api.v1.schemas import APIModel
from haven.domain.exceptions import NotFound
from haven.domain.models.principal import Caller, Principal, RequestContext
from haven.infrastructure.database import DatabaseManager, get_db_manager
from haven.infrastructure.database.repositories import UserRepository
from haven.services.audit import AuditRecorder
from haven.services.identity import TokenService
from haven.services.identity.login import LoginService
from haven.services.session import SessionActivityMonitor

router = APIRouter()


class LoginRequest(APIModel):
    """Identity assertion issued by the identity provider."""

    assertion: str = Field(..., min_length=1)


class UserResponse(APIModel):
    """Portal account."""

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: str
    created_at: datetime


class LoginResponse(APIModel):
    """Issued session token."""

    token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserResponse


def get_login_service(
    db: DatabaseManager = Depends(get_db_manager),
    tokens: TokenService = Depends(get_token_service),
    recorder: AuditRecorder = Depends(get_audit_recorder),
    monitor: SessionActivityMonitor = Depends(get_session_monitor),
) -> LoginService:
    return LoginService(db.session, tokens, recorder, monitor)


@router.post("/login", response_model=LoginResponse, summary="Exchange an identity assertion for a session")
async def login(
    body: LoginRequest,
    context: RequestContext = Depends(get_request_context),
    service: LoginService = Depends(get_login_service),
) -> LoginResponse:
    result = await service.login(body.assertion, context)
    return LoginResponse(
        token=result.session.token,
        expires_at=result.session.expires_at,
        user=UserResponse.model_validate(result.user),
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="End the current session")
async def logout(
    principal: Principal = Depends(require_principal),
    context: RequestContext = Depends(get_request_context),
    service: LoginService = Depends(get_login_service),
) -> None:
    await service.logout(principal, context)


@router.get("/user", response_model=UserResponse, summary="Current user")
async def current_user(
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    user = await UserRepository(session).get_by_id(caller.user_id)
    if user is None:
        raise NotFound("User not found")
    return UserResponse.model_validate(user)
