"""
Integration Tests - Portal Records

Tests journals, therapeutic content, assignments, the compliance
registers and user administration through the HTTP API.
"""

import pytest

from haven.infrastructure.database.repositories import AuditLogRepository
from haven.services.bootstrap import STARTER_PROMPTS, STARTER_RESOURCES, seed_database

API = "/api/v1"

THERAPIST_ID = "therapist-1"
ADMIN_ID = "admin-1"
CLIENT_A_ID = "client-a"
CLIENT_B_ID = "client-b"


class TestJournals:
    """Private and shared journal entries."""

    async def test_client_sees_only_own_entries(self, client, users, auth_headers):
        await client.post(f"{API}/journals", json={"content": "Slept badly"}, headers=auth_headers(CLIENT_A_ID))
        await client.post(f"{API}/journals", json={"content": "Good day"}, headers=auth_headers(CLIENT_B_ID))

        response = await client.get(f"{API}/journals", headers=auth_headers(CLIENT_A_ID))

        assert [entry["content"] for entry in response.json()] == ["Slept badly"]
        assert response.json()[0]["userId"] == CLIENT_A_ID

    async def test_therapist_sees_shared_entries_only(self, client, db, users, auth_headers):
        client_a = auth_headers(CLIENT_A_ID)
        await client.post(f"{API}/journals", json={"content": "Shared note"}, headers=client_a)
        await client.post(f"{API}/journals", json={"content": "Private note", "isShared": False}, headers=client_a)

        response = await client.get(
            f"{API}/journals/client/{CLIENT_A_ID}",
            headers=auth_headers(THERAPIST_ID),
        )

        assert response.status_code == 200
        assert [entry["content"] for entry in response.json()] == ["Shared note"]

        async with db.session() as session:
            rows = await AuditLogRepository(session).list_for_target(CLIENT_A_ID)
        assert [(row.action, row.resource_type) for row in rows] == [("view", "journal")]

    @pytest.mark.parametrize("user_id", [ADMIN_ID, CLIENT_B_ID])
    async def test_shared_entries_are_therapist_only(self, client, users, auth_headers, user_id):
        response = await client.get(
            f"{API}/journals/client/{CLIENT_A_ID}",
            headers=auth_headers(user_id),
        )

        assert response.status_code == 403


class TestContent:
    """Prompts and resources."""

    async def test_seeding_is_idempotent(self, client, db, users, auth_headers):
        async with db.session() as session:
            first = await seed_database(session)
        async with db.session() as session:
            second = await seed_database(session)

        response = await client.get(f"{API}/prompts", headers=auth_headers(CLIENT_A_ID))

        assert first == {"prompts": len(STARTER_PROMPTS), "resources": len(STARTER_RESOURCES)}
        assert second == {"prompts": 0, "resources": 0}
        assert len(response.json()) == len(STARTER_PROMPTS)

    @pytest.mark.parametrize("path", ["/prompts", "/resources"])
    async def test_repeated_listing_is_stable(self, client, db, users, auth_headers, path):
        async with db.session() as session:
            await seed_database(session)

        for user_id in (CLIENT_A_ID, THERAPIST_ID):
            first = await client.get(f"{API}{path}", headers=auth_headers(user_id))
            second = await client.get(f"{API}{path}", headers=auth_headers(user_id))

            assert first.status_code == second.status_code == 200
            assert first.json()
            assert first.json() == second.json()

    async def test_scoped_prompt_visibility(self, client, users, auth_headers):
        therapist = auth_headers(THERAPIST_ID)
        await client.post(f"{API}/prompts", json={"content": "For everyone"}, headers=therapist)
        await client.post(
            f"{API}/prompts",
            json={"content": "Just for Alex", "clientId": CLIENT_A_ID},
            headers=therapist,
        )

        alex = await client.get(f"{API}/prompts", headers=auth_headers(CLIENT_A_ID))
        blair = await client.get(f"{API}/prompts", headers=auth_headers(CLIENT_B_ID))
        everything = await client.get(f"{API}/prompts", headers=therapist)

        assert {p["content"] for p in alex.json()} == {"For everyone", "Just for Alex"}
        assert [p["content"] for p in blair.json()] == ["For everyone"]
        assert len(everything.json()) == 2

    async def test_inactive_prompts_are_hidden_from_clients(self, client, users, auth_headers):
        therapist = auth_headers(THERAPIST_ID)
        await client.post(f"{API}/prompts", json={"content": "Retired", "isActive": False}, headers=therapist)

        response = await client.get(f"{API}/prompts", headers=auth_headers(CLIENT_A_ID))

        assert response.json() == []

    async def test_clients_cannot_write_content(self, client, users, auth_headers):
        prompt = await client.post(f"{API}/prompts", json={"content": "x"}, headers=auth_headers(CLIENT_A_ID))
        resource = await client.post(
            f"{API}/resources",
            json={"title": "x", "content": "y"},
            headers=auth_headers(ADMIN_ID),
        )

        assert prompt.status_code == 403
        assert resource.status_code == 403

    async def test_scoped_resource_visibility(self, client, users, auth_headers):
        await client.post(
            f"{API}/resources",
            json={"title": "Exposure ladder", "content": "Steps", "category": "anxiety", "clientId": CLIENT_B_ID},
            headers=auth_headers(THERAPIST_ID),
        )

        alex = await client.get(f"{API}/resources", headers=auth_headers(CLIENT_A_ID))
        blair = await client.get(f"{API}/resources", headers=auth_headers(CLIENT_B_ID))

        assert alex.json() == []
        assert blair.json()[0]["category"] == "anxiety"

    async def test_missing_prompt_is_404(self, client, users, auth_headers):
        response = await client.patch(
            f"{API}/prompts/9999",
            json={"content": "x"},
            headers=auth_headers(THERAPIST_ID),
        )

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestHomework:
    """Homework assignment and completion."""

    @pytest.fixture
    async def homework(self, client, users, auth_headers):
        response = await client.post(
            f"{API}/homework",
            json={"userId": CLIENT_A_ID, "title": "Breathing log", "description": "Daily, 5 minutes"},
            headers=auth_headers(ADMIN_ID),
        )
        assert response.status_code == 201
        return response.json()

    async def test_client_cannot_assign(self, client, users, auth_headers):
        response = await client.post(
            f"{API}/homework",
            json={"userId": CLIENT_A_ID, "title": "t", "description": "d"},
            headers=auth_headers(CLIENT_A_ID),
        )

        assert response.status_code == 403

    async def test_listing_by_role(self, client, homework, auth_headers):
        own = await client.get(f"{API}/homework", headers=auth_headers(CLIENT_A_ID))
        other = await client.get(f"{API}/homework", headers=auth_headers(CLIENT_B_ID))
        staff = await client.get(f"{API}/homework", params={"userId": CLIENT_A_ID}, headers=auth_headers(ADMIN_ID))
        snooping = await client.get(f"{API}/homework", params={"userId": CLIENT_A_ID}, headers=auth_headers(CLIENT_B_ID))

        assert [h["id"] for h in own.json()] == [homework["id"]]
        assert other.json() == []
        assert [h["id"] for h in staff.json()] == [homework["id"]]
        assert snooping.status_code == 403

    async def test_owner_completes_homework(self, client, homework, auth_headers):
        response = await client.patch(
            f"{API}/homework/{homework['id']}",
            json={"status": "completed"},
            headers=auth_headers(CLIENT_A_ID),
        )

        assert response.status_code == 200
        assert response.json()["status"] == "completed"

    async def test_owner_cannot_edit_other_fields(self, client, homework, auth_headers):
        response = await client.patch(
            f"{API}/homework/{homework['id']}",
            json={"title": "Nothing", "status": "completed"},
            headers=auth_headers(CLIENT_A_ID),
        )

        assert response.status_code == 403

    async def test_other_client_cannot_complete(self, client, homework, auth_headers):
        response = await client.patch(
            f"{API}/homework/{homework['id']}",
            json={"status": "completed"},
            headers=auth_headers(CLIENT_B_ID),
        )

        assert response.status_code == 403

    async def test_missing_homework_looks_like_foreign_to_clients(self, client, homework, auth_headers):
        foreign = await client.patch(
            f"{API}/homework/{homework['id']}",
            json={"status": "completed"},
            headers=auth_headers(CLIENT_B_ID),
        )
        missing = await client.patch(
            f"{API}/homework/99999",
            json={"status": "completed"},
            headers=auth_headers(CLIENT_B_ID),
        )
        staff = await client.patch(
            f"{API}/homework/99999",
            json={"status": "completed"},
            headers=auth_headers(ADMIN_ID),
        )

        assert missing.status_code == foreign.status_code == 403
        assert missing.json()["message"] == foreign.json()["message"]
        assert staff.status_code == 404

    async def test_client_cannot_remove_missing_homework(self, client, users, auth_headers):
        response = await client.delete(f"{API}/homework/99999", headers=auth_headers(CLIENT_A_ID))

        assert response.status_code == 403


class TestReminders:
    """Scheduled reminders."""

    async def test_staff_schedule_and_client_reads(self, client, users, auth_headers):
        created = await client.post(
            f"{API}/reminders",
            json={"userId": CLIENT_A_ID, "message": "Session tomorrow at 10", "scheduledTime": "2024-03-02T09:00:00Z"},
            headers=auth_headers(ADMIN_ID),
        )
        listed = await client.get(f"{API}/reminders", headers=auth_headers(CLIENT_A_ID))

        assert created.status_code == 201
        assert created.json()["sent"] is False
        assert [r["message"] for r in listed.json()] == ["Session tomorrow at 10"]

    async def test_client_cannot_schedule(self, client, users, auth_headers):
        response = await client.post(
            f"{API}/reminders",
            json={"userId": CLIENT_A_ID, "message": "m", "scheduledTime": "2024-03-02T09:00:00Z"},
            headers=auth_headers(CLIENT_A_ID),
        )

        assert response.status_code == 403

    async def test_missing_reminder_is_denied_before_lookup(self, client, users, auth_headers):
        client_view = await client.delete(f"{API}/reminders/99999", headers=auth_headers(CLIENT_A_ID))
        staff_view = await client.delete(f"{API}/reminders/99999", headers=auth_headers(ADMIN_ID))

        assert client_view.status_code == 403
        assert staff_view.status_code == 404


class TestComplianceRegisters:
    """Audit log, login attempts and disclosures."""

    @pytest.mark.parametrize("path", ["/audit-logs", "/login-attempts"])
    async def test_registers_are_therapist_only(self, client, users, auth_headers, path):
        admin = await client.get(f"{API}{path}", headers=auth_headers(ADMIN_ID))
        therapist = await client.get(f"{API}{path}", headers=auth_headers(THERAPIST_ID))

        assert admin.status_code == 403
        assert therapist.status_code == 200

    async def test_disclosure_register(self, client, users, auth_headers):
        created = await client.post(
            f"{API}/disclosures",
            json={
                "clientId": CLIENT_A_ID,
                "recipient": "Dr. Lee, primary care",
                "purpose": "Coordination of care",
                "dataTypes": ["diagnosis", "medications"],
            },
            headers=auth_headers(THERAPIST_ID),
        )
        own = await client.get(f"{API}/disclosures/{CLIENT_A_ID}", headers=auth_headers(CLIENT_A_ID))
        other = await client.get(f"{API}/disclosures/{CLIENT_A_ID}", headers=auth_headers(CLIENT_B_ID))

        assert created.status_code == 201
        assert created.json()["disclosedBy"] == THERAPIST_ID
        assert own.json()[0]["dataTypes"] == ["diagnosis", "medications"]
        assert other.status_code == 403

    async def test_disclosure_for_unknown_client_is_404(self, client, users, auth_headers):
        response = await client.post(
            f"{API}/disclosures",
            json={"clientId": "nobody", "recipient": "r", "purpose": "p"},
            headers=auth_headers(THERAPIST_ID),
        )

        assert response.status_code == 404


class TestUserAdministration:
    """Client roster and role assignment."""

    async def test_client_roster(self, client, users, auth_headers):
        roster = await client.get(f"{API}/clients", headers=auth_headers(ADMIN_ID))
        denied = await client.get(f"{API}/clients", headers=auth_headers(CLIENT_A_ID))

        assert [u["id"] for u in roster.json()] == [CLIENT_A_ID, CLIENT_B_ID]
        assert denied.status_code == 403

    async def test_role_change_takes_effect_immediately(self, client, users, auth_headers):
        promoted = await client.patch(
            f"{API}/users/{CLIENT_B_ID}/role",
            json={"role": "office_admin"},
            headers=auth_headers(THERAPIST_ID),
        )
        roster = await client.get(f"{API}/clients", headers=auth_headers(CLIENT_B_ID))

        assert promoted.json()["role"] == "office_admin"
        assert roster.status_code == 200
        assert [u["id"] for u in roster.json()] == [CLIENT_A_ID]

    async def test_office_admin_cannot_assign_roles(self, client, users, auth_headers):
        response = await client.patch(
            f"{API}/users/{CLIENT_B_ID}/role",
            json={"role": "therapist"},
            headers=auth_headers(ADMIN_ID),
        )

        assert response.status_code == 403


class TestHealth:
    """Unauthenticated requests."""

    async def test_liveness_and_readiness(self, client):
        live = await client.get(f"{API}/health/live")
        ready = await client.get(f"{API}/health/ready")

        assert live.json()["status"] == "alive"
        assert ready.json() == {"ready": True, "components": {"database": True}}
