"""Tests for the audit logger and in-memory storage."""

import pytest
from uuid import uuid4

from split_engine.audit import AuditLogger, configure_logging, create_correlation_id
from split_engine.models.audit import AuditEventBuilder, AuditEventType
from split_engine.models.summary import SplitSummary
from split_engine.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    InMemoryAuditStorage,
    InMemorySplitStorage,
    NotFoundError,
    StorageError,
)


class FailingAuditStorage(InMemoryAuditStorage):
    """Audit storage whose writes always fail."""

    def append_event(self, event):
        raise StorageError("disk full")


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_log_without_storage(self):
        """Test that local-only logging succeeds."""
        event = AuditEventBuilder.extraction_accepted(3)
        assert AuditLogger().log(event) is True

    def test_log_persists_to_storage(self):
        """Test that events are appended to storage."""
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        correlation_id = create_correlation_id()

        logger.log_split_computed("equal", 3, "10.00", "0.00", "USD", correlation_id)

        events = storage.get_events_by_correlation_id(correlation_id)
        assert len(events) == 1
        assert events[0].event_type == AuditEventType.SPLIT_COMPUTED
        assert events[0].details["participant_count"] == 3

    def test_storage_failure_is_swallowed(self):
        """Test that a broken audit store never breaks the caller."""
        logger = AuditLogger(FailingAuditStorage())
        assert logger.log(AuditEventBuilder.extraction_rejected("blurry")) is False

    def test_recent_events_newest_first(self):
        """Test event ordering of get_recent_events."""
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        logger.log_template_saved("first")
        logger.log_template_saved("second")

        recent = storage.get_recent_events(limit=1)
        assert recent[0].details["name"] == "second"

    def test_events_by_entity(self):
        """Test looking events up by entity."""
        storage = InMemoryAuditStorage()
        split_id = uuid4()
        AuditLogger(storage).log_split_saved(split_id, "10.00", "USD")
        assert len(storage.get_events_by_entity("split", split_id)) == 1

    def test_configure_logging_from_settings(self):
        """Test that the log level is taken from settings when not given."""
        configure_logging()
        configure_logging("debug")

    def test_storage_implements_interface(self):
        """Test that the in-memory store satisfies the interface."""
        assert isinstance(InMemoryAuditStorage(), AuditStorageInterface)


class TestInMemorySplitStorage:
    """Tests for the split history store."""

    def test_duplicate_split_rejected(self):
        """Test that a split id can only be saved once."""
        storage = InMemorySplitStorage()
        split_id = uuid4()
        summary = SplitSummary(
            type="equal", participants=[], subtotal="0", currency="USD", rounding="none"
        )
        storage.save_summary(split_id, summary)
        with pytest.raises(DuplicateError):
            storage.save_summary(split_id, summary)

    def test_delete_missing_raises(self):
        """Test that deleting an unknown split raises NotFoundError."""
        with pytest.raises(NotFoundError):
            InMemorySplitStorage().delete_summary(uuid4())


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
