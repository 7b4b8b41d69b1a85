"""
Integration Tests - Authentication and Session Timeout

Tests sign-in, sign-out, the session status endpoint and idle
expiry of protected requests.
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from haven.api.deps import get_session_monitor
from haven.infrastructure.database.repositories import AuditLogRepository, LoginAttemptRepository
from haven.main import app
from haven.services.audit import AuditRecorder, DatabaseAuditSink
from haven.services.session import SessionActivityMonitor

API = "/api/v1"

THERAPIST_ID = "therapist-1"
CLIENT_A_ID = "client-a"

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(T0)


@pytest.fixture
def frozen_monitor(client, db, clock) -> SessionActivityMonitor:
    """Swap the app's session monitor for one driven by a fake clock."""
    monitor = SessionActivityMonitor(
        db.session,
        AuditRecorder(DatabaseAuditSink(db.session)),
        timeout_minutes=30,
        clock=clock,
    )
    app.dependency_overrides[get_session_monitor] = lambda: monitor
    return monitor


def identity_assertion(settings, subject="idp|new-user", secret=None) -> str:
    now = datetime.now(timezone.utc)
    return jwt.encode(
        {
            "sub": subject,
            "email": "new.user@example.com",
            "given_name": "Sam",
            "iss": settings.identity.issuer,
            "aud": settings.identity.audience,
            "iat": now,
            "exp": now + timedelta(minutes=5),
        },
        secret or settings.identity.shared_secret.get_secret_value(),
        algorithm=settings.identity.algorithm,
    )


class TestAuthentication:
    """Bearer token handling."""

    async def test_missing_token_is_401(self, client, users):
        response = await client.get(f"{API}/journals")

        assert response.status_code == 401
        assert response.json()["error"] == "unauthenticated"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_garbage_token_is_401(self, client, users):
        response = await client.get(f"{API}/journals", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    async def test_current_user(self, client, users, auth_headers):
        response = await client.get(f"{API}/auth/user", headers=auth_headers(THERAPIST_ID))

        assert response.status_code == 200
        assert response.json()["id"] == THERAPIST_ID
        assert response.json()["role"] == "therapist"
        assert response.json()["firstName"] == "Dana"

    async def test_unknown_user_defaults_to_client_role(self, client, users, auth_headers):
        response = await client.get(f"{API}/treatment-plans", headers=auth_headers("ghost"))

        assert response.status_code == 200
        assert response.json() == []


class TestLoginFlow:
    """Identity assertion exchange."""

    async def test_login_then_use_session(self, client, db, test_settings):
        response = await client.post(
            f"{API}/auth/login",
            json={"assertion": identity_assertion(test_settings)},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["tokenType"] == "bearer"
        assert body["user"]["role"] == "client"

        me = await client.get(
            f"{API}/auth/user",
            headers={"Authorization": f"Bearer {body['token']}"},
        )
        assert me.json()["email"] == "new.user@example.com"

    async def test_failed_login_is_recorded(self, client, db, test_settings):
        response = await client.post(
            f"{API}/auth/login",
            json={"assertion": identity_assertion(test_settings, secret="forged")},
        )

        assert response.status_code == 401
        async with db.session() as session:
            attempts = await LoginAttemptRepository(session).list_recent()
            audit = await AuditLogRepository(session).list_recent()
        assert attempts[0].success is False
        assert attempts[0].email == "new.user@example.com"
        assert audit[0].action == "failed_login"

    async def test_logout_invalidates_token(self, client, users, auth_headers):
        headers = auth_headers(CLIENT_A_ID)
        assert (await client.get(f"{API}/journals", headers=headers)).status_code == 200

        logout = await client.post(f"{API}/auth/logout", headers=headers)
        after = await client.get(f"{API}/journals", headers=headers)

        assert logout.status_code == 204
        assert after.status_code == 401
        assert after.json()["error"] == "session_expired"


class TestSessionStatus:
    """Idle-timeout reporting and enforcement."""

    async def test_fresh_session_status(self, client, users, auth_headers):
        response = await client.get(f"{API}/session-status", headers=auth_headers(CLIENT_A_ID))

        assert response.status_code == 200
        assert response.json() == {"valid": True, "remainingMinutes": 30, "timeoutMinutes": 30}

    async def test_status_requires_a_token(self, client, users):
        response = await client.get(f"{API}/session-status")

        assert response.status_code == 401

    async def test_idle_session_is_rejected(self, client, db, users, auth_headers, frozen_monitor, clock):
        headers = auth_headers(CLIENT_A_ID)
        assert (await client.get(f"{API}/journals", headers=headers)).status_code == 200

        clock.now = T0 + timedelta(minutes=29)
        assert (await client.get(f"{API}/journals", headers=headers)).status_code == 200

        clock.now = T0 + timedelta(minutes=61)
        response = await client.get(f"{API}/journals", headers=headers)

        assert response.status_code == 401
        assert response.json()["error"] == "session_expired"
        assert response.headers["WWW-Authenticate"] == "Bearer"

        async with db.session() as session:
            rows = await AuditLogRepository(session).list_recent()
        timeouts = [row for row in rows if row.action == "session_timeout"]
        assert len(timeouts) == 1
        assert timeouts[0].user_id == CLIENT_A_ID

    async def test_expired_status_is_reported_not_rejected(self, client, users, auth_headers, frozen_monitor, clock):
        headers = auth_headers(CLIENT_A_ID)
        await client.get(f"{API}/session-status", headers=headers)

        clock.now = T0 + timedelta(minutes=31)
        response = await client.get(f"{API}/session-status", headers=headers)

        assert response.status_code == 200
        assert response.json()["valid"] is False
        assert response.json()["remainingMinutes"] == 0

    async def test_status_check_extends_session(self, client, users, auth_headers, frozen_monitor, clock):
        headers = auth_headers(CLIENT_A_ID)
        await client.get(f"{API}/session-status", headers=headers)

        clock.now = T0 + timedelta(minutes=20)
        await client.get(f"{API}/session-status", headers=headers)

        clock.now = T0 + timedelta(minutes=45)
        response = await client.get(f"{API}/journals", headers=headers)

        assert response.status_code == 200
