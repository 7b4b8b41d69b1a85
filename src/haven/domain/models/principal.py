"""
Principal and Caller Domain Models

A principal is what the identity layer proves about a request:
which user is calling and under which portal session. A caller
adds the resolved role and the network context captured for
the audit trail.
"""

from dataclasses import dataclass, field
from typing import Optional

from haven.domain.enums.role import Role, role_rank


@dataclass(frozen=True)
class Principal:
    """
    Authenticated identity of a request.

    Attributes:
        user_id: Stable user identifier issued by the identity provider
        session_id: Portal session identifier
    """

    user_id: str
    session_id: str


@dataclass(frozen=True)
class RequestContext:
    """
    Network origin of a request, stored alongside audit entries.

    Attributes:
        ip_address: Caller IP (first X-Forwarded-For hop when trusted)
        user_agent: Client agent string, truncated
    """

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class Caller:
    """
    Fully resolved caller of a protected endpoint.

    Attributes:
        user_id: Calling user's ID
        session_id: Portal session ID
        role: Role resolved from the user record
        context: Network context for audit entries
    """

    user_id: str
    session_id: str
    role: Role
    context: RequestContext = field(default_factory=RequestContext)

    @property
    def rank(self) -> int:
        """Rank of the caller's role in the hierarchy."""
        return role_rank(self.role)
