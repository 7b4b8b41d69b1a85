"""
Login Service

Exchanges identity provider assertions for portal sessions and ends
them on logout. Every attempt, good or bad, leaves a login-attempt
row and an audit entry.
"""

from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from haven.config.logging_config import get_logger
from haven.domain.enums import AuditAction, ResourceType
from haven.domain.models.principal import Principal, RequestContext
from haven.infrastructure.database.models import LoginAttemptModel, UserModel
from haven.infrastructure.database.models.compliance_model import EMAIL_MAX_LENGTH
from haven.infrastructure.database.repositories import LoginAttemptRepository, UserRepository
from haven.infrastructure.metrics import track_login_attempt
from haven.services.audit.recorder import AuditRecorder, SessionFactory
from haven.services.identity.token_service import AssertionRejected, SessionToken, TokenService
from haven.services.session.activity_monitor import SessionActivityMonitor

logger = get_logger(__name__)


@dataclass(frozen=True)
class LoginResult:
    """Issued session and the signed-in user."""

    session: SessionToken
    user: UserModel


class LoginService:
    """
    Portal sign-in and sign-out.

    Writes go through their own units of work so a failed attempt is
    recorded even though the request itself is rejected.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        tokens: TokenService,
        recorder: AuditRecorder,
        monitor: SessionActivityMonitor,
    ) -> None:
        self._session_factory = session_factory
        self._tokens = tokens
        self._recorder = recorder
        self._monitor = monitor

    async def login(self, assertion: str, context: RequestContext) -> LoginResult:
        """
        Sign in with an identity assertion.

        New users are created with the default role.

        Raises:
            AssertionRejected: If the assertion does not verify
        """
        try:
            claims = self._tokens.verify_identity_assertion(assertion)
        except AssertionRejected as e:
            try:
                await self._record_attempt(
                    email=self._tokens.unverified_email(assertion),
                    user_id=None,
                    success=False,
                    failure_reason=e.reason,
                    context=context,
                )
            except SQLAlchemyError as write_error:
                # The caller still gets the 401
                logger.error(
                    "login_attempt_write_failed",
                    reason=e.reason,
                    error=str(write_error),
                )
            await self._recorder.record(
                None,
                AuditAction.FAILED_LOGIN,
                ResourceType.SESSION,
                context=context,
                details={"reason": e.reason},
            )
            logger.info("login_failed", reason=e.reason)
            raise

        async with self._session_factory() as session:
            user = await UserRepository(session).upsert_from_identity(
                claims.subject,
                email=claims.email,
                first_name=claims.first_name,
                last_name=claims.last_name,
                profile_image_url=claims.profile_image_url,
            )
        await self._record_attempt(
            email=claims.email,
            user_id=user.id,
            success=True,
            failure_reason=None,
            context=context,
        )

        issued = self._tokens.issue_session_token(user.id)
        principal = Principal(user_id=user.id, session_id=issued.session_id)
        await self._monitor.check(principal, context)
        await self._recorder.record(
            user.id,
            AuditAction.LOGIN,
            ResourceType.SESSION,
            resource_id=issued.session_id,
            context=context,
        )

        logger.info("login_succeeded", user_id=user.id)
        return LoginResult(session=issued, user=user)

    async def logout(self, principal: Principal, context: RequestContext) -> None:
        """End the caller's session."""
        await self._monitor.terminate(principal)
        await self._recorder.record(
            principal.user_id,
            AuditAction.LOGOUT,
            ResourceType.SESSION,
            resource_id=principal.session_id,
            context=context,
        )
        logger.info("logout", user_id=principal.user_id)

    async def _record_attempt(
        self,
        *,
        email: str | None,
        user_id: str | None,
        success: bool,
        failure_reason: str | None,
        context: RequestContext,
    ) -> None:
        # Failed attempts carry an unverified, caller-chosen email
        if email is not None:
            email = email[:EMAIL_MAX_LENGTH]
        async with self._session_factory() as session:
            await LoginAttemptRepository(session).create(
                LoginAttemptModel(
                    email=email,
                    user_id=user_id,
                    success=success,
                    failure_reason=failure_reason,
                    ip_address=context.ip_address,
                    user_agent=context.user_agent,
                )
            )
        track_login_attempt(success)
