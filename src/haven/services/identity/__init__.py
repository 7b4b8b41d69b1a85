"""Identity services package."""

from haven.services.identity.role_resolver import RoleResolver
from haven.services.identity.token_service import (
    AssertionRejected,
    IdentityClaims,
    SessionToken,
    TokenService,
)

__all__ = [
    "RoleResolver",
    "AssertionRejected",
    "IdentityClaims",
    "SessionToken",
    "TokenService",
]
