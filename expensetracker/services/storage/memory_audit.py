"""
In-memory audit storage.

Keeps audit events for the lifetime of the process. Used when audit
events should be inspectable (tests, the current session's history)
without writing ledger activity to disk in clear text.
"""

from typing import Optional
from uuid import UUID

from expensetracker.models.audit import AuditEvent
from expensetracker.services.storage.interface import AuditStorageInterface


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events, optionally bounded."""

    def __init__(self, max_events: Optional[int] = None):
        self._events: list[AuditEvent] = []
        self._max_events = max_events

    @property
    def max_events(self) -> Optional[int]:
        return self._max_events

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        if self._max_events is not None and len(self._events) > self._max_events:
            del self._events[: len(self._events) - self._max_events]
        return True

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    def get_events_by_user(self, username: str) -> list[AuditEvent]:
        return [e for e in self._events if e.username == username]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
