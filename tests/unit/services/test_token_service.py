"""
Unit Tests for the Token Service

Tests identity assertion verification and session token handling.
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from haven.domain.exceptions import Unauthenticated
from haven.services.identity import AssertionRejected, TokenService


def make_assertion(settings, **overrides) -> str:
    """Sign an assertion the way the identity provider does."""
    now = datetime.now(timezone.utc)
    claims = {
        "sub": "idp|12345",
        "email": "alex@example.com",
        "given_name": "Alex",
        "family_name": "Rivera",
        "iss": settings.identity.issuer,
        "aud": settings.identity.audience,
        "iat": now,
        "exp": now + timedelta(minutes=5),
    }
    secret = overrides.pop("secret", settings.identity.shared_secret.get_secret_value())
    claims.update(overrides)
    claims = {key: value for key, value in claims.items() if value is not None}
    return jwt.encode(claims, secret, algorithm=settings.identity.algorithm)


class TestIdentityAssertions:
    """Tests for verifying provider assertions."""

    def test_valid_assertion(self, test_settings, token_service):
        claims = token_service.verify_identity_assertion(make_assertion(test_settings))

        assert claims.subject == "idp|12345"
        assert claims.email == "alex@example.com"
        assert claims.first_name == "Alex"
        assert claims.last_name == "Rivera"

    def test_wrong_signature(self, test_settings, token_service):
        assertion = make_assertion(test_settings, secret="not-the-shared-secret")

        with pytest.raises(AssertionRejected) as exc_info:
            token_service.verify_identity_assertion(assertion)
        assert exc_info.value.reason == "invalid_signature"

    def test_expired_assertion(self, test_settings, token_service):
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        assertion = make_assertion(test_settings, iat=past, exp=past + timedelta(minutes=5))

        with pytest.raises(AssertionRejected) as exc_info:
            token_service.verify_identity_assertion(assertion)
        assert exc_info.value.reason == "assertion_expired"

    def test_wrong_audience(self, test_settings, token_service):
        assertion = make_assertion(test_settings, aud="some-other-app")

        with pytest.raises(AssertionRejected) as exc_info:
            token_service.verify_identity_assertion(assertion)
        assert exc_info.value.reason == "invalid_claims"

    def test_wrong_issuer(self, test_settings, token_service):
        assertion = make_assertion(test_settings, iss="https://evil.example")

        with pytest.raises(AssertionRejected):
            token_service.verify_identity_assertion(assertion)

    def test_rejection_is_unauthenticated(self):
        assert issubclass(AssertionRejected, Unauthenticated)

    def test_unverified_email_for_labelling(self, test_settings):
        assertion = make_assertion(test_settings, secret="not-the-shared-secret")

        assert TokenService.unverified_email(assertion) == "alex@example.com"
        assert TokenService.unverified_email("garbage") is None


class TestSessionTokens:
    """Tests for portal session tokens."""

    def test_round_trip(self, token_service):
        issued = token_service.issue_session_token("client-a")

        principal = token_service.decode_session_token(issued.token)

        assert principal.user_id == "client-a"
        assert principal.session_id == issued.session_id

    def test_each_login_gets_a_new_session_id(self, token_service):
        first = token_service.issue_session_token("client-a")
        second = token_service.issue_session_token("client-a")

        assert first.session_id != second.session_id

    def test_expired_token_is_rejected(self, test_settings, token_service):
        issued_at = datetime.now(timezone.utc) - timedelta(minutes=test_settings.token.expire_minutes + 5)
        issued = token_service.issue_session_token("client-a", now=issued_at)

        with pytest.raises(Unauthenticated):
            token_service.decode_session_token(issued.token)

    def test_identity_assertion_is_not_a_session_token(self, test_settings, token_service):
        # Signed with the session key but missing sid/typ
        forged = jwt.encode(
            {"sub": "client-a"},
            test_settings.token.secret_key.get_secret_value(),
            algorithm=test_settings.token.algorithm,
        )

        with pytest.raises(Unauthenticated):
            token_service.decode_session_token(forged)

    def test_garbage_is_rejected(self, token_service):
        with pytest.raises(Unauthenticated):
            token_service.decode_session_token("not-a-token")
