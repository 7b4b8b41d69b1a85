"""
Session Activity Domain Model

Idle-timeout automaton for portal sessions:

    fresh -> active -> expired

A session with no recorded activity is fresh. Each request within
the timeout keeps it active and moves its last-activity mark
forward. Once idle longer than the timeout it is expired for good.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional


class SessionActivityState(StrEnum):
    """Session idle-timeout states."""

    FRESH = "fresh"
    """No prior activity recorded for this session."""

    ACTIVE = "active"
    """Within the idle timeout."""

    EXPIRED = "expired"
    """
    Idle past the timeout, or terminated.

    Terminal: the user must re-authenticate.
    """


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes from the store as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def elapsed_minutes(last_activity: datetime, now: datetime) -> float:
    """Minutes between last activity and now (never negative)."""
    seconds = (ensure_utc(now) - ensure_utc(last_activity)).total_seconds()
    return max(seconds, 0.0) / 60.0


def transition(
    last_activity: Optional[datetime],
    now: datetime,
    timeout_minutes: int,
    terminated: bool = False,
) -> SessionActivityState:
    """
    Compute the session state for a request arriving at ``now``.

    Args:
        last_activity: Last recorded activity, None if never seen
        now: Current time
        timeout_minutes: Idle threshold
        terminated: Whether the session was already ended server side

    Returns:
        State the session is in for this request
    """
    if terminated:
        return SessionActivityState.EXPIRED
    if last_activity is None:
        return SessionActivityState.FRESH
    if elapsed_minutes(last_activity, now) > timeout_minutes:
        return SessionActivityState.EXPIRED
    return SessionActivityState.ACTIVE


@dataclass(frozen=True)
class SessionCheck:
    """
    Result of a session freshness check.

    Attributes:
        state: State after this request
        remaining_minutes: Whole minutes left before expiry
        timeout_minutes: Configured idle threshold
    """

    state: SessionActivityState
    remaining_minutes: int
    timeout_minutes: int

    @property
    def valid(self) -> bool:
        """Whether the request may proceed."""
        return self.state != SessionActivityState.EXPIRED

    def to_status(self) -> dict:
        """Serialize as the client-facing session status payload."""
        return {
            "valid": self.valid,
            "remainingMinutes": self.remaining_minutes,
            "timeoutMinutes": self.timeout_minutes,
        }
