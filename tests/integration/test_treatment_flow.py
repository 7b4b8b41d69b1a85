"""
Integration Tests - Treatment Records

Tests the protected request pipeline end to end against the
treatment plan endpoints: role gating, ownership chains, audit
entries and the client's access history.
"""

import pytest
from prometheus_client import REGISTRY

from haven.infrastructure.database.repositories import AuditLogRepository

API = "/api/v1"

THERAPIST_ID = "therapist-1"
ADMIN_ID = "admin-1"
CLIENT_A_ID = "client-a"
CLIENT_B_ID = "client-b"


async def audit_rows(db, target_user_id=None):
    async with db.session() as session:
        repo = AuditLogRepository(session)
        if target_user_id:
            return list(await repo.list_for_target(target_user_id))
        return list(await repo.list_recent())


@pytest.fixture
async def plan(client, users, auth_headers):
    """Client A's plan with one goal and one objective, written by the therapist."""
    therapist = auth_headers(THERAPIST_ID)

    response = await client.post(
        f"{API}/treatment-plans",
        json={"clientId": CLIENT_A_ID, "summary": "Panic disorder, CBT track"},
        headers=therapist,
    )
    assert response.status_code == 201
    plan = response.json()

    response = await client.post(
        f"{API}/treatment-goals",
        json={"planId": plan["id"], "title": "Reduce avoidance", "order": 1},
        headers=therapist,
    )
    assert response.status_code == 201
    goal = response.json()

    response = await client.post(
        f"{API}/treatment-objectives",
        json={"goalId": goal["id"], "title": "Ride the bus twice a week", "measurableCriteria": "8 rides"},
        headers=therapist,
    )
    assert response.status_code == 201
    objective = response.json()

    return {"plan": plan, "goal": goal, "objective": objective}


class TestPlanAccess:
    """Who can read a treatment plan."""

    async def test_owner_reads_own_plan_without_audit(self, client, db, plan, auth_headers):
        before = len(await audit_rows(db, CLIENT_A_ID))

        response = await client.get(
            f"{API}/treatment-plans/client/{CLIENT_A_ID}",
            headers=auth_headers(CLIENT_A_ID),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["clientId"] == CLIENT_A_ID
        assert body["createdBy"] == THERAPIST_ID
        assert len(await audit_rows(db, CLIENT_A_ID)) == before

    async def test_other_client_is_forbidden(self, client, plan, auth_headers):
        response = await client.get(
            f"{API}/treatment-plans/client/{CLIENT_A_ID}",
            headers=auth_headers(CLIENT_B_ID),
        )

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"
        assert response.json()["message"] == "Access denied"

    async def test_office_admin_is_forbidden(self, client, plan, auth_headers):
        response = await client.get(
            f"{API}/treatment-plans/client/{CLIENT_A_ID}",
            headers=auth_headers(ADMIN_ID),
        )

        assert response.status_code == 403

    async def test_therapist_read_is_audited_once(self, client, db, plan, auth_headers):
        before = len(await audit_rows(db, CLIENT_A_ID))

        response = await client.get(
            f"{API}/treatment-plans/client/{CLIENT_A_ID}",
            headers=auth_headers(THERAPIST_ID),
        )

        assert response.status_code == 200
        rows = await audit_rows(db, CLIENT_A_ID)
        assert len(rows) == before + 1
        assert rows[0].action == "view"
        assert rows[0].resource_type == "treatment_plan"
        assert rows[0].user_id == THERAPIST_ID
        assert rows[0].resource_id == str(plan["plan"]["id"])

    async def test_client_without_plan_gets_null(self, client, users, auth_headers):
        response = await client.get(
            f"{API}/treatment-plans/client/{CLIENT_B_ID}",
            headers=auth_headers(CLIENT_B_ID),
        )

        assert response.status_code == 200
        assert response.json() is None

    async def test_list_is_scoped_by_role(self, client, db, plan, auth_headers):
        own = await client.get(f"{API}/treatment-plans", headers=auth_headers(CLIENT_A_ID))
        none = await client.get(f"{API}/treatment-plans", headers=auth_headers(CLIENT_B_ID))
        everything = await client.get(f"{API}/treatment-plans", headers=auth_headers(THERAPIST_ID))

        assert [p["clientId"] for p in own.json()] == [CLIENT_A_ID]
        assert none.json() == []
        assert len(everything.json()) == 1

        view_all = [row for row in await audit_rows(db) if row.action == "view_all"]
        assert len(view_all) == 1
        assert view_all[0].details == {"count": 1}

    async def test_second_plan_for_client_conflicts(self, client, plan, auth_headers):
        response = await client.post(
            f"{API}/treatment-plans",
            json={"clientId": CLIENT_A_ID},
            headers=auth_headers(THERAPIST_ID),
        )

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    async def test_only_therapists_write(self, client, users, auth_headers):
        response = await client.post(
            f"{API}/treatment-plans",
            json={"clientId": CLIENT_B_ID},
            headers=auth_headers(ADMIN_ID),
        )

        assert response.status_code == 403


class TestGoalsAndObjectives:
    """Ownership chains below the plan."""

    async def test_goal_round_trip_for_owner(self, client, plan, auth_headers):
        response = await client.get(
            f"{API}/treatment-goals/{plan['plan']['id']}",
            headers=auth_headers(CLIENT_A_ID),
        )

        assert response.status_code == 200
        goals = response.json()
        assert len(goals) == 1
        assert goals[0]["title"] == "Reduce avoidance"
        assert goals[0]["status"] == "in_progress"
        assert goals[0]["order"] == 1
        assert goals[0]["planId"] == plan["plan"]["id"]

    async def test_goals_of_foreign_plan_are_forbidden(self, client, plan, auth_headers):
        response = await client.get(
            f"{API}/treatment-goals/{plan['plan']['id']}",
            headers=auth_headers(CLIENT_B_ID),
        )

        assert response.status_code == 403

    async def test_missing_plan_looks_like_foreign_plan(self, client, plan, auth_headers):
        missing = await client.get(f"{API}/treatment-goals/9999", headers=auth_headers(THERAPIST_ID))
        foreign = await client.get(
            f"{API}/treatment-goals/{plan['plan']['id']}",
            headers=auth_headers(CLIENT_B_ID),
        )

        assert missing.status_code == foreign.status_code == 403
        assert missing.json()["message"] == foreign.json()["message"]

    async def test_objectives_follow_goal_ownership(self, client, plan, auth_headers):
        goal_id = plan["goal"]["id"]
        objective_id = plan["objective"]["id"]

        mine = await client.get(f"{API}/treatment-objectives/{goal_id}", headers=auth_headers(CLIENT_A_ID))
        theirs = await client.get(f"{API}/treatment-objectives/{goal_id}", headers=auth_headers(CLIENT_B_ID))
        item = await client.get(
            f"{API}/treatment-objectives/item/{objective_id}",
            headers=auth_headers(CLIENT_A_ID),
        )

        assert mine.status_code == 200
        assert mine.json()[0]["measurableCriteria"] == "8 rides"
        assert theirs.status_code == 403
        assert item.status_code == 200
        assert item.json()["status"] == "not_started"

    async def test_single_objective_of_other_client_is_forbidden(self, client, db, plan, auth_headers):
        before = len(await audit_rows(db, CLIENT_A_ID))

        response = await client.get(
            f"{API}/treatment-objectives/item/{plan['objective']['id']}",
            headers=auth_headers(CLIENT_B_ID),
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Access denied"
        assert len(await audit_rows(db, CLIENT_A_ID)) == before

    async def test_objective_listing_denials_are_counted_as_objectives(self, client, plan, auth_headers):
        def denied(resource):
            value = REGISTRY.get_sample_value(
                "haven_access_decisions_total",
                {"resource": resource, "outcome": "denied"},
            )
            return value or 0.0

        objectives_before = denied("treatment_objective")
        goals_before = denied("treatment_goal")

        response = await client.get(
            f"{API}/treatment-objectives/{plan['goal']['id']}",
            headers=auth_headers(CLIENT_B_ID),
        )

        assert response.status_code == 403
        assert denied("treatment_objective") == objectives_before + 1
        assert denied("treatment_goal") == goals_before

    async def test_goal_update_and_delete(self, client, plan, auth_headers):
        therapist = auth_headers(THERAPIST_ID)
        goal_id = plan["goal"]["id"]

        updated = await client.patch(
            f"{API}/treatment-goals/{goal_id}",
            json={"status": "achieved"},
            headers=therapist,
        )
        assert updated.status_code == 200
        assert updated.json()["status"] == "achieved"
        assert updated.json()["title"] == "Reduce avoidance"

        deleted = await client.delete(f"{API}/treatment-goals/{goal_id}", headers=therapist)
        assert deleted.status_code == 204

        remaining = await client.get(f"{API}/treatment-goals/{plan['plan']['id']}", headers=therapist)
        assert remaining.json() == []

        orphan = await client.get(
            f"{API}/treatment-objectives/item/{plan['objective']['id']}",
            headers=therapist,
        )
        assert orphan.status_code == 403

    async def test_invalid_goal_status_is_rejected(self, client, plan, auth_headers):
        response = await client.patch(
            f"{API}/treatment-goals/{plan['goal']['id']}",
            json={"status": "finished"},
            headers=auth_headers(THERAPIST_ID),
        )

        assert response.status_code == 422


class TestProgress:
    """Progress notes are therapist-only."""

    async def test_therapist_records_progress(self, client, plan, auth_headers):
        therapist = auth_headers(THERAPIST_ID)
        objective_id = plan["objective"]["id"]

        created = await client.post(
            f"{API}/treatment-progress",
            json={"objectiveId": objective_id, "progressLevel": 40, "note": "Two rides this week"},
            headers=therapist,
        )
        listed = await client.get(f"{API}/treatment-progress/{objective_id}", headers=therapist)

        assert created.status_code == 201
        assert created.json()["recordedBy"] == THERAPIST_ID
        assert [n["progressLevel"] for n in listed.json()] == [40]

    async def test_owner_cannot_see_progress(self, client, plan, auth_headers):
        response = await client.get(
            f"{API}/treatment-progress/{plan['objective']['id']}",
            headers=auth_headers(CLIENT_A_ID),
        )

        assert response.status_code == 403

    @pytest.mark.parametrize("level", [-1, 101])
    async def test_progress_level_bounds(self, client, plan, auth_headers, level):
        response = await client.post(
            f"{API}/treatment-progress",
            json={"objectiveId": plan["objective"]["id"], "progressLevel": level},
            headers=auth_headers(THERAPIST_ID),
        )

        assert response.status_code == 422


class TestClinicalReadAudit:
    """Each therapist read of a client's treatment record is audited once."""

    @pytest.mark.parametrize(
        "route, resource_type",
        [
            ("goals", "treatment_goal"),
            ("objectives", "treatment_objective"),
            ("objective_item", "treatment_objective"),
            ("progress", "treatment_progress"),
        ],
    )
    async def test_therapist_read_adds_one_entry(self, client, db, plan, auth_headers, route, resource_type):
        paths = {
            "goals": f"{API}/treatment-goals/{plan['plan']['id']}",
            "objectives": f"{API}/treatment-objectives/{plan['goal']['id']}",
            "objective_item": f"{API}/treatment-objectives/item/{plan['objective']['id']}",
            "progress": f"{API}/treatment-progress/{plan['objective']['id']}",
        }
        before = len(await audit_rows(db, CLIENT_A_ID))

        response = await client.get(paths[route], headers=auth_headers(THERAPIST_ID))

        assert response.status_code == 200
        rows = await audit_rows(db, CLIENT_A_ID)
        assert len(rows) == before + 1
        assert rows[0].action == "view"
        assert rows[0].resource_type == resource_type
        assert rows[0].user_id == THERAPIST_ID
        assert rows[0].target_user_id == CLIENT_A_ID

    async def test_owner_reads_below_plan_are_not_audited(self, client, db, plan, auth_headers):
        before = len(await audit_rows(db, CLIENT_A_ID))

        await client.get(f"{API}/treatment-goals/{plan['plan']['id']}", headers=auth_headers(CLIENT_A_ID))
        await client.get(f"{API}/treatment-objectives/{plan['goal']['id']}", headers=auth_headers(CLIENT_A_ID))

        assert len(await audit_rows(db, CLIENT_A_ID)) == before


class TestAccessHistory:
    """The client's view of who read their records."""

    async def test_provider_reads_are_shown_without_actor(self, client, plan, auth_headers):
        await client.get(
            f"{API}/treatment-plans/client/{CLIENT_A_ID}",
            headers=auth_headers(THERAPIST_ID),
        )

        response = await client.get(f"{API}/my-access-history", headers=auth_headers(CLIENT_A_ID))

        assert response.status_code == 200
        history = response.json()
        assert history
        assert {entry["accessedBy"] for entry in history} == {"Healthcare Provider"}
        assert "view" in {entry["action"] for entry in history}
        assert all("userId" not in entry for entry in history)

    async def test_other_clients_history_is_separate(self, client, plan, auth_headers):
        response = await client.get(f"{API}/my-access-history", headers=auth_headers(CLIENT_B_ID))

        assert response.status_code == 200
        assert response.json() == []
