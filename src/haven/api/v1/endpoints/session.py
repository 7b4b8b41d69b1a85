"""
Session Status Endpoint

Lets the client warn the user before an idle logout. Querying the
status counts as activity and extends the session.
"""

from fastapi import APIRouter, Depends

from haven.api.deps import get_request_context, get_session_monitor, require_principal
from haven.api.v1.schemas import APIModel
from haven.domain.models.principal import Principal, RequestContext
from haven.services.session import SessionActivityMonitor

router = APIRouter()


class SessionStatusResponse(APIModel):
    """Idle-timeout status of the caller's session."""

    valid: bool
    remaining_minutes: int
    timeout_minutes: int


@router.get("/session-status", response_model=SessionStatusResponse, summary="Session idle status")
async def session_status(
    principal: Principal = Depends(require_principal),
    context: RequestContext = Depends(get_request_context),
    monitor: SessionActivityMonitor = Depends(get_session_monitor),
) -> SessionStatusResponse:
    """
    Report remaining idle minutes.

    An expired session is reported as invalid rather than rejected,
    so the client can show its own sign-in prompt.
    """
    check = await monitor.check(principal, context)
    return SessionStatusResponse.model_validate(check.to_status())
