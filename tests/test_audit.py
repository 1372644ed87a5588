"""Tests for the audit logger."""

import asyncio
from uuid import uuid4

from property_intake.audit import AuditLogger
from property_intake.models.audit import AuditEventBuilder, AuditEventType
from property_intake.services.storage import AuditStorageInterface, InMemoryAuditStorage


class BrokenAuditStorage(AuditStorageInterface):
    """Audit storage whose writes always fail."""

    async def append_event(self, event):
        raise RuntimeError("disk full")

    async def get_events_by_correlation_id(self, correlation_id):
        return []

    async def get_recent_events(self, limit=100):
        return []


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_log_without_storage(self):
        """Test logging succeeds with no storage configured."""
        logger = AuditLogger()
        event = AuditEventBuilder.wizard_started(uuid4(), "property", 6)
        assert asyncio.run(logger.log(event)) is True

    def test_helpers_persist_events(self):
        """Test helper methods append the matching events."""
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        conversation_id = uuid4()

        asyncio.run(logger.log_wizard_started(conversation_id, "property", 6))
        asyncio.run(logger.log_answer_accepted(conversation_id, "name", 0))
        asyncio.run(logger.log_field_skipped(conversation_id, "address", 1))
        asyncio.run(logger.log_answer_rejected(conversation_id, "acquisition_date", 2, "Date?"))
        asyncio.run(logger.log_wizard_completed(conversation_id, ["name"]))
        asyncio.run(logger.log_record_saved("property", "1", conversation_id))

        events = asyncio.run(storage.get_events_by_correlation_id(conversation_id))
        assert [e.event_type for e in events] == [
            AuditEventType.WIZARD_STARTED,
            AuditEventType.ANSWER_ACCEPTED,
            AuditEventType.FIELD_SKIPPED,
            AuditEventType.ANSWER_REJECTED,
            AuditEventType.WIZARD_COMPLETED,
            AuditEventType.RECORD_SAVED,
        ]
        assert events[-1].entity_id == "1"

    def test_storage_failure_is_swallowed(self):
        """Test a failing audit store never breaks the caller."""
        logger = AuditLogger(BrokenAuditStorage())
        event = AuditEventBuilder.external_service_error("property_api", "timeout")
        assert asyncio.run(logger.log(event)) is False
