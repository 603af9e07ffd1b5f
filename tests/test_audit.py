"""Tests for the audit logger."""

from congregation_accounts.audit import AuditLogger
from congregation_accounts.audit.logger import MAX_RECENT_EVENTS
from congregation_accounts.models.audit import AuditEventType, AuditSeverity


class TestAuditLogger:
    """Tests for the in-memory event history."""

    def test_events_oldest_first(self):
        audit = AuditLogger()
        audit.log_note_created("n1")
        audit.log_note_deleted("n1")

        assert [e.event_type for e in audit.events] == [
            AuditEventType.NOTE_CREATED,
            AuditEventType.NOTE_DELETED,
        ]

    def test_history_is_capped(self):
        audit = AuditLogger(max_events=10)
        for index in range(25):
            audit.log_transaction_deleted("default", f"t{index}")

        events = audit.events
        assert len(events) == 10
        assert events[0].entity_id == "t15"
        assert events[-1].entity_id == "t24"

    def test_default_cap(self):
        audit = AuditLogger()
        for index in range(MAX_RECENT_EVENTS + 5):
            audit.log_opening_balance_deleted("khoc", "2024-01")

        assert len(audit.events) == MAX_RECENT_EVENTS

    def test_storage_error_is_error_severity(self):
        audit = AuditLogger()
        audit.log_storage_error("add note", "permission denied")

        event = audit.events[-1]
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "permission denied"
