"""
Domain Exceptions

Failure taxonomy for the policy and audit layer. The API layer maps
each class to an HTTP status; nothing here knows about HTTP.
"""


class HavenError(Exception):
    """Base class for expected, client-visible failures."""

    code = "error"
    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(HavenError):
    """No valid session principal. Never audited (nothing to attribute)."""

    code = "unauthenticated"
    default_message = "Authentication required"


class SessionExpired(Unauthenticated):
    """Session idle past the timeout; the client should prompt re-login."""

    code = "session_expired"
    default_message = "Session expired due to inactivity. Please sign in again."


class Forbidden(HavenError):
    """
    Authenticated but not allowed.

    Also used for missing records inside ownership chains so callers
    cannot tell which ids exist.
    """

    code = "forbidden"
    default_message = "Access denied"


class NotFound(HavenError):
    """Non-clinical record does not exist."""

    code = "not_found"
    default_message = "Not found"


class Conflict(HavenError):
    """Write would violate a uniqueness rule."""

    code = "conflict"
    default_message = "Conflicting record exists"


class AuditWriteFailure(HavenError):
    """
    An audit entry could not be persisted.

    Raised by audit sinks and swallowed by the recorder; never reaches
    a caller.
    """

    code = "audit_write_failure"
    default_message = "Audit entry could not be written"
