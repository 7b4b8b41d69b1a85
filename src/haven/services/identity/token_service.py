"""
Token Service

Two kinds of signed tokens cross the boundary:

- Identity assertions, issued by the external identity provider and
  only verified here (issuer, audience, expiry, signature).
- Portal session tokens, issued here after a successful login and
  carrying the user id (``sub``) and portal session id (``sid``).

SECURITY: Token values must never be logged.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError

from haven.config.logging_config import get_logger
from haven.config.settings import Settings
from haven.domain.clock import utc_now
from haven.domain.exceptions import Unauthenticated
from haven.domain.models.principal import Principal

logger = get_logger(__name__)

SESSION_TOKEN_TYPE = "session"


class AssertionRejected(Unauthenticated):
    """
    Identity assertion failed verification.

    Carries a short reason recorded on the login attempt.
    """

    def __init__(self, reason: str) -> None:
        super().__init__("Invalid identity assertion")
        self.reason = reason


@dataclass(frozen=True)
class IdentityClaims:
    """Verified claims from an identity assertion."""

    subject: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None


@dataclass(frozen=True)
class SessionToken:
    """A freshly issued portal session token."""

    token: str
    session_id: str
    expires_at: datetime


class TokenService:
    """Verifies identity assertions and issues/decodes session tokens."""

    def __init__(self, settings: Settings) -> None:
        self._identity = settings.identity
        self._token = settings.token

    def verify_identity_assertion(self, assertion: str) -> IdentityClaims:
        """
        Verify an identity provider assertion.

        Args:
            assertion: Signed JWT from the identity provider

        Returns:
            Verified identity claims

        Raises:
            AssertionRejected: On any verification failure
        """
        try:
            claims = jwt.decode(
                assertion,
                self._identity.shared_secret.get_secret_value(),
                algorithms=[self._identity.algorithm],
                audience=self._identity.audience,
                issuer=self._identity.issuer,
            )
        except ExpiredSignatureError:
            raise AssertionRejected("assertion_expired")
        except JWTClaimsError:
            raise AssertionRejected("invalid_claims")
        except JWTError:
            raise AssertionRejected("invalid_signature")

        subject = claims.get("sub")
        if not subject:
            raise AssertionRejected("missing_subject")

        return IdentityClaims(
            subject=str(subject),
            email=claims.get("email"),
            first_name=claims.get("given_name"),
            last_name=claims.get("family_name"),
            profile_image_url=claims.get("picture"),
        )

    def issue_session_token(self, user_id: str, now: Optional[datetime] = None) -> SessionToken:
        """
        Issue a session token for a new portal session.

        Args:
            user_id: Authenticated user
            now: Issue time (defaults to the current time)

        Returns:
            Token with its session id and expiry
        """
        issued_at = now or utc_now()
        expires_at = issued_at + timedelta(minutes=self._token.expire_minutes)
        session_id = uuid.uuid4().hex

        token = jwt.encode(
            {
                "sub": user_id,
                "sid": session_id,
                "typ": SESSION_TOKEN_TYPE,
                "iat": issued_at,
                "exp": expires_at,
            },
            self._token.secret_key.get_secret_value(),
            algorithm=self._token.algorithm,
        )
        return SessionToken(token=token, session_id=session_id, expires_at=expires_at)

    def decode_session_token(self, token: str) -> Principal:
        """
        Decode and validate a session token.

        Raises:
            Unauthenticated: If the token is invalid or expired
        """
        try:
            claims = jwt.decode(
                token,
                self._token.secret_key.get_secret_value(),
                algorithms=[self._token.algorithm],
            )
        except JWTError:
            raise Unauthenticated("Invalid or expired session token")

        user_id = claims.get("sub")
        session_id = claims.get("sid")
        if claims.get("typ") != SESSION_TOKEN_TYPE or not user_id or not session_id:
            raise Unauthenticated("Invalid or expired session token")

        return Principal(user_id=str(user_id), session_id=str(session_id))

    @staticmethod
    def unverified_email(assertion: str) -> Optional[str]:
        """
        Email claim of an assertion without verifying it.

        Only for labelling failed login attempts; never trust it.
        """
        try:
            claims = jwt.get_unverified_claims(assertion)
        except JWTError:
            return None
        email = claims.get("email")
        return email if isinstance(email, str) else None
