"""
Unit Tests for the Audit Recorder

Tests self-read suppression, fire-and-forget failure handling and
the database sink.
"""

import pytest

from haven.domain.enums import AuditAction, ResourceType, Role
from haven.domain.exceptions import AuditWriteFailure
from haven.domain.models.principal import Caller, RequestContext
from haven.infrastructure.database.repositories import AuditLogRepository
from haven.services.audit import AuditRecorder, DatabaseAuditSink


class MemorySink:
    """Collects entries in memory."""

    def __init__(self):
        self.entries = []

    async def write(self, entry):
        self.entries.append(entry)


class FailingSink:
    """Rejects every entry."""

    async def write(self, entry):
        raise AuditWriteFailure("store unavailable")


@pytest.fixture
def therapist() -> Caller:
    return Caller(
        user_id="therapist-1",
        session_id="s-1",
        role=Role.THERAPIST,
        context=RequestContext(ip_address="10.0.0.5", user_agent="pytest"),
    )


class TestRecord:
    """Tests for writing entries."""

    async def test_entry_fields(self, therapist):
        sink = MemorySink()
        recorder = AuditRecorder(sink)

        written = await recorder.record_change(
            therapist, AuditAction.UPDATE, ResourceType.TREATMENT_GOAL, 7, "client-a"
        )

        assert written is True
        entry = sink.entries[0]
        assert entry.actor_id == "therapist-1"
        assert entry.action == AuditAction.UPDATE
        assert entry.resource_type == "treatment_goal"
        assert entry.resource_id == "7"
        assert entry.target_user_id == "client-a"
        assert entry.ip_address == "10.0.0.5"
        assert entry.occurred_at.tzinfo is not None

    async def test_failure_is_swallowed(self, therapist):
        recorder = AuditRecorder(FailingSink())

        written = await recorder.record_phi_read(
            therapist, ResourceType.TREATMENT_PLAN, 1, "client-a"
        )

        assert written is False

    async def test_disabled_recorder_writes_nothing(self, therapist):
        sink = MemorySink()
        recorder = AuditRecorder(sink, enabled=False)

        assert await recorder.record_change(therapist, AuditAction.CREATE, ResourceType.PROMPT, 1) is False
        assert sink.entries == []

    async def test_unattributed_failed_login(self):
        sink = MemorySink()
        recorder = AuditRecorder(sink)

        await recorder.record(
            None,
            AuditAction.FAILED_LOGIN,
            ResourceType.SESSION,
            details={"reason": "invalid_signature"},
        )

        assert sink.entries[0].actor_id is None
        assert sink.entries[0].details == {"reason": "invalid_signature"}


class TestPhiReads:
    """Tests for third-party read auditing."""

    async def test_self_read_is_not_recorded(self):
        sink = MemorySink()
        recorder = AuditRecorder(sink)
        client = Caller(user_id="client-a", session_id="s-2", role=Role.CLIENT)

        written = await recorder.record_phi_read(client, ResourceType.TREATMENT_PLAN, 1, "client-a")

        assert written is False
        assert sink.entries == []

    async def test_third_party_read_is_recorded_as_view(self, therapist):
        sink = MemorySink()
        recorder = AuditRecorder(sink)

        await recorder.record_phi_read(therapist, ResourceType.JOURNAL, None, "client-a")

        assert len(sink.entries) == 1
        assert sink.entries[0].action == AuditAction.VIEW
        assert sink.entries[0].resource_id is None


class TestDatabaseAuditSink:
    """Tests for the database-backed sink."""

    async def test_entry_is_persisted_in_own_transaction(self, db, therapist):
        recorder = AuditRecorder(DatabaseAuditSink(db.session))

        await recorder.record_change(
            therapist,
            AuditAction.CREATE,
            ResourceType.DATA_DISCLOSURE,
            3,
            "client-a",
            details={"data_types": ["diagnosis"]},
        )

        async with db.session() as session:
            rows = await AuditLogRepository(session).list_for_target("client-a")

        assert len(rows) == 1
        assert rows[0].user_id == "therapist-1"
        assert rows[0].action == "create"
        assert rows[0].details == {"data_types": ["diagnosis"]}
        assert rows[0].user_agent == "pytest"
