"""Tests for AuditLogger and the in-memory audit store."""

from uuid import uuid4

from expensetracker.audit import AuditLogger, create_correlation_id
from expensetracker.models.audit import AuditEventBuilder, AuditEventType
from expensetracker.services.storage import AuditStorageInterface, InMemoryAuditStorage


class FailingAuditStorage(AuditStorageInterface):
    """Audit sink that always fails."""

    def append_event(self, event):
        raise RuntimeError("sink unavailable")

    def get_events_by_correlation_id(self, correlation_id):
        return []

    def get_events_by_user(self, username):
        return []

    def get_recent_events(self, limit=100):
        return []


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_logs_to_storage(self):
        """Test that events reach the configured storage."""
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage=storage)
        logger.log_user_signed_up("alice")
        events = storage.get_events_by_user("alice")
        assert [e.event_type for e in events] == [AuditEventType.USER_SIGNED_UP]

    def test_correlation_id_is_attached(self):
        """Test that the session's correlation ID is stamped on events."""
        storage = InMemoryAuditStorage()
        correlation_id = create_correlation_id()
        logger = AuditLogger(storage=storage, correlation_id=correlation_id)
        logger.log_user_logged_in("alice")
        logger.log_ledgers_loaded(loaded=1, skipped=0)
        assert len(storage.get_events_by_correlation_id(correlation_id)) == 2

    def test_explicit_correlation_id_is_kept(self):
        """Test that an event's own correlation ID is not overwritten."""
        storage = InMemoryAuditStorage()
        own = uuid4()
        logger = AuditLogger(storage=storage, correlation_id=uuid4())
        logger.log(AuditEventBuilder.user_deleted("alice", correlation_id=own))
        assert storage.get_recent_events()[0].correlation_id == own

    def test_failing_storage_does_not_raise(self):
        """Test that a broken sink is reported, not raised."""
        logger = AuditLogger(storage=FailingAuditStorage())
        assert logger.log(AuditEventBuilder.user_signed_up("alice")) is False

    def test_local_only_logging(self):
        """Test that logging without storage succeeds."""
        assert AuditLogger().log(AuditEventBuilder.ledger_saved("alice")) is True


class TestInMemoryAuditStorage:
    """Tests for the in-memory audit store."""

    def test_recent_events_newest_first(self):
        """Test ordering of get_recent_events."""
        storage = InMemoryAuditStorage()
        storage.append_event(AuditEventBuilder.user_signed_up("alice"))
        storage.append_event(AuditEventBuilder.user_signed_up("bob"))
        assert [e.username for e in storage.get_recent_events()] == ["bob", "alice"]

    def test_bounded_storage(self):
        """Test that the oldest events are dropped past max_events."""
        storage = InMemoryAuditStorage(max_events=2)
        for name in ["a", "b", "c"]:
            storage.append_event(AuditEventBuilder.user_signed_up(name))
        assert [e.username for e in storage.get_recent_events()] == ["c", "b"]
