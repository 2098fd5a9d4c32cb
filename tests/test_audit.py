"""
Tests for the audit logger.
"""

from structlog.testing import capture_logs

from bizbook.audit import AuditLogger
from bizbook.models import AuditEventBuilder, AuditEventType


class TestAuditLogger:
    """Tests for AuditLogger history and log emission."""

    def test_recent_events_newest_first(self):
        """Test history order and limit."""
        logger = AuditLogger()
        for entity_id in ("e1", "e2", "e3"):
            logger.log(AuditEventBuilder.record_added("finance-storage", "expense", entity_id))

        assert [e.entity_id for e in logger.recent_events()] == ["e3", "e2", "e1"]
        assert [e.entity_id for e in logger.recent_events(limit=2)] == ["e3", "e2"]
        assert logger.recent_events(limit=0) == []

    def test_history_is_bounded(self):
        """Test only the most recent events are kept."""
        logger = AuditLogger(history_size=2)
        for entity_id in ("e1", "e2", "e3"):
            logger.log(AuditEventBuilder.record_added("finance-storage", "expense", entity_id))
        assert [e.entity_id for e in logger.recent_events()] == ["e3", "e2"]

    def test_events_for_entity(self):
        """Test filtering the history by entity."""
        logger = AuditLogger()
        logger.log(AuditEventBuilder.record_added("finance-storage", "vendor", "v1"))
        logger.log(AuditEventBuilder.record_added("finance-storage", "expense", "e1"))
        logger.log(AuditEventBuilder.vendor_renamed("finance-storage", "v1", "ACME", 0))

        events = logger.events_for_entity("vendor", "v1")
        assert [e.event_type for e in events] == [
            AuditEventType.RECORD_ADDED,
            AuditEventType.VENDOR_RENAMED,
        ]
        assert len(logger.events_for_entity("expense")) == 1

    def test_clear(self):
        """Test the history can be reset."""
        logger = AuditLogger()
        logger.log(AuditEventBuilder.record_deleted("task-storage", "task", "t1"))
        logger.clear()
        assert logger.recent_events() == []

    def test_log_level_follows_severity(self):
        """Test events are emitted through structlog at their severity."""
        with capture_logs() as logs:
            logger = AuditLogger()
            logger.log(AuditEventBuilder.record_added("finance-storage", "expense", "e1"))
            logger.log(AuditEventBuilder.persist_failed("finance-storage", "disk full"))
            logger.log(AuditEventBuilder.mutation_ignored("task-storage", "delete_task", "unknown id"))

        assert [entry["log_level"] for entry in logs] == ["info", "error", "debug"]
        assert all(entry["event"] == "audit_event" for entry in logs)
        assert logs[1]["error_message"] == "disk full"
        assert logs[0]["entity_id"] == "e1"

    def test_store_mutations_are_audited(self, finance_store, audit_logger):
        """Test store commits land in the shared audit history."""
        finance_store.add_vendor({"name": "ACME"})
        finance_store.update_vendor("id-1", {"name": "ACME Corp"})
        finance_store.delete_vendor("id-1")

        events = audit_logger.events_for_entity("vendor", "id-1")
        assert [e.event_type for e in events] == [
            AuditEventType.RECORD_ADDED,
            AuditEventType.VENDOR_RENAMED,
            AuditEventType.RECORD_DELETED,
        ]
