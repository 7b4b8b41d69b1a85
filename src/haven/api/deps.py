"""
API Dependencies

FastAPI dependency providers shared by the v1 endpoints. Every
protected endpoint depends on get_caller, which runs the request
pipeline in order:

    bearer token -> principal -> session idle check -> role

Tests swap collaborators through app.dependency_overrides
(get_db_manager, get_settings, get_audit_recorder,
get_session_monitor).
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from haven.config import Settings, get_settings
from haven.domain.models.principal import Caller, Principal, RequestContext
from haven.infrastructure.database import DatabaseManager, get_db_manager
from haven.services.audit import AuditRecorder, DatabaseAuditSink
from haven.services.identity import RoleResolver, TokenService
from haven.services.session import SessionActivityMonitor

USER_AGENT_MAX_LENGTH = 512

bearer_scheme = HTTPBearer(auto_error=False)


async def get_session(
    db: DatabaseManager = Depends(get_db_manager),
) -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped unit of work: commit on success, rollback on error."""
    async with db.session() as session:
        yield session


def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return TokenService(settings)


def get_request_context(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> RequestContext:
    """
    Capture caller network origin for audit entries.

    X-Forwarded-For is only honoured behind a trusted proxy.
    """
    ip_address = request.client.host if request.client else None
    if settings.compliance.trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            ip_address = forwarded.split(",")[0].strip()

    user_agent = request.headers.get("user-agent")
    if user_agent:
        user_agent = user_agent[:USER_AGENT_MAX_LENGTH]

    return RequestContext(ip_address=ip_address, user_agent=user_agent)


def get_audit_recorder(
    db: DatabaseManager = Depends(get_db_manager),
    settings: Settings = Depends(get_settings),
) -> AuditRecorder:
    return AuditRecorder(
        DatabaseAuditSink(db.session),
        enabled=settings.compliance.audit_log_enabled,
    )


def get_session_monitor(
    db: DatabaseManager = Depends(get_db_manager),
    recorder: AuditRecorder = Depends(get_audit_recorder),
    settings: Settings = Depends(get_settings),
) -> SessionActivityMonitor:
    return SessionActivityMonitor(
        db.session,
        recorder,
        timeout_minutes=settings.compliance.session_timeout_minutes,
    )


def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[Principal]:
    """
    Principal from the bearer session token.

    Returns None when no token is presented.

    Raises:
        Unauthenticated: If a token is presented but invalid
    """
    if credentials is None:
        return None
    return tokens.decode_session_token(credentials.credentials)


def require_principal(principal: Optional[Principal] = Depends(get_principal)) -> Principal:
    return RoleResolver.require_principal(principal)


async def get_caller(
    principal: Principal = Depends(require_principal),
    context: RequestContext = Depends(get_request_context),
    monitor: SessionActivityMonitor = Depends(get_session_monitor),
    session: AsyncSession = Depends(get_session),
) -> Caller:
    """
    Fully resolved caller of a protected endpoint.

    Raises:
        Unauthenticated: No valid session token
        SessionExpired: Session idle past the timeout
    """
    await monitor.enforce(principal, context)
    role = await RoleResolver(session).resolve(principal)
    return Caller(
        user_id=principal.user_id,
        session_id=principal.session_id,
        role=role,
        context=context,
    )


__all__ = [
    "get_session",
    "get_token_service",
    "get_request_context",
    "get_audit_recorder",
    "get_session_monitor",
    "get_principal",
    "require_principal",
    "get_caller",
]
