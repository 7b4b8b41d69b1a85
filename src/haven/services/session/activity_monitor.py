"""
Session Activity Monitor

Tracks last activity per portal session and enforces the idle
timeout (see haven.domain.models.session_activity for the automaton).

Activity rows are updated in their own unit of work so an expiry
(termination plus its session_timeout audit entry) persists even
though the triggering request is rejected.
"""

from datetime import datetime
from typing import Callable

from haven.config.logging_config import get_logger
from haven.domain.clock import utc_now
from haven.domain.enums import AuditAction, ResourceType
from haven.domain.exceptions import SessionExpired
from haven.domain.models.principal import Principal, RequestContext
from haven.domain.models.session_activity import (
    SessionActivityState,
    SessionCheck,
    elapsed_minutes,
    transition,
)
from haven.infrastructure.database.repositories import SessionActivityRepository
from haven.infrastructure.metrics import SESSION_TIMEOUTS_TOTAL
from haven.services.audit.recorder import AuditRecorder, SessionFactory

logger = get_logger(__name__)


class SessionActivityMonitor:
    """
    Idle-timeout enforcement for portal sessions.

    Usage:
        monitor = SessionActivityMonitor(db.session, recorder, timeout_minutes=30)
        await monitor.enforce(principal, context)
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        recorder: AuditRecorder,
        timeout_minutes: int = 30,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._recorder = recorder
        self._timeout_minutes = timeout_minutes
        self._clock = clock

    @property
    def timeout_minutes(self) -> int:
        return self._timeout_minutes

    async def check(self, principal: Principal, context: RequestContext | None = None) -> SessionCheck:
        """
        Evaluate and record activity for a request.

        Fresh sessions are started, active ones have their last
        activity moved forward, and sessions idle past the timeout
        are terminated with one session_timeout audit entry.

        Args:
            principal: Authenticated principal
            context: Caller network context for the audit entry

        Returns:
            Outcome of the check
        """
        now = self._clock()
        newly_expired = False
        remaining = 0

        async with self._session_factory() as session:
            activities = SessionActivityRepository(session)
            activity = await activities.get_by_session_id(principal.session_id)

            state = transition(
                activity.last_activity if activity else None,
                now,
                self._timeout_minutes,
                terminated=activity is not None and activity.is_terminated,
            )

            if state == SessionActivityState.FRESH:
                await activities.start(principal.session_id, principal.user_id, now)
                remaining = self._timeout_minutes
            elif state == SessionActivityState.ACTIVE:
                activity = await activities.touch(activity, now)
                idle = elapsed_minutes(activity.last_activity, now)
                remaining = max(int(self._timeout_minutes - idle), 0)
            elif not activity.is_terminated:
                newly_expired = await activities.claim_termination(principal.session_id, now)

        if newly_expired:
            SESSION_TIMEOUTS_TOTAL.inc()
            logger.info("session_timeout", session_id=principal.session_id)
            await self._recorder.record(
                principal.user_id,
                AuditAction.SESSION_TIMEOUT,
                ResourceType.SESSION,
                resource_id=principal.session_id,
                context=context,
            )

        return SessionCheck(
            state=state,
            remaining_minutes=remaining,
            timeout_minutes=self._timeout_minutes,
        )

    async def enforce(self, principal: Principal, context: RequestContext | None = None) -> SessionCheck:
        """
        Check activity and reject expired sessions.

        Raises:
            SessionExpired: If the session is idle past the timeout or ended
        """
        result = await self.check(principal, context)
        if not result.valid:
            raise SessionExpired()
        return result

    async def terminate(self, principal: Principal) -> None:
        """End a session server side (logout)."""
        now = self._clock()
        async with self._session_factory() as session:
            activities = SessionActivityRepository(session)
            activity = await activities.get_by_session_id(principal.session_id)
            if activity is None:
                activity = await activities.start(principal.session_id, principal.user_id, now)
            await activities.terminate(activity, now)
