"""
Audit Models for Expense Tracker

Every significant action on a ledger is logged for audit purposes.
This provides:
1. Traceability of every accepted and rejected command
2. Debugging information when things go wrong
3. A record of accounts skipped at load time

DESIGN DECISION: Audit events never carry secrets, derived keys or
ciphertext, and carry as little ledger content as possible. The ledger
is encrypted at rest; the audit log must not undo that.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Accounts
    USER_SIGNED_UP = "user_signed_up"
    USER_LOGGED_IN = "user_logged_in"
    USER_LOGGED_OUT = "user_logged_out"
    USER_DELETED = "user_deleted"
    USER_RENAMED = "user_renamed"

    # Ledger mutations
    EXPENSE_RECORDED = "expense_recorded"
    EXPENSE_EDITED = "expense_edited"
    EXPENSE_DELETED = "expense_deleted"
    BUDGET_CHANGED = "budget_changed"
    COMMAND_REJECTED = "command_rejected"

    # Persistence
    LEDGERS_LOADED = "ledgers_loaded"
    LEDGER_SKIPPED = "ledger_skipped"
    LEDGER_SAVED = "ledger_saved"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    One thing that happened to an account or a ledger.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - whose ledger is this about?
    username: Optional[str] = Field(
        default=None,
        description="Owner of the affected ledger"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one session)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Plain JSON-safe dict for structlog (UUIDs, enums and timestamps as strings)."""
        return self.model_dump(mode="json")


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.user_signed_up("alice", correlation_id)
        event = AuditEventBuilder.command_rejected("alice", "record_expense", error, correlation_id)
    """

    @staticmethod
    def user_signed_up(
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_UP,
            username=username,
            correlation_id=correlation_id,
            description=f"User created: {username}",
            is_user_action=True,
        )

    @staticmethod
    def user_logged_in(
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_IN,
            username=username,
            correlation_id=correlation_id,
            description=f"User logged in: {username}",
            is_user_action=True,
        )

    @staticmethod
    def user_logged_out(
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_OUT,
            username=username,
            correlation_id=correlation_id,
            description=f"User logged out: {username}",
            is_user_action=True,
        )

    @staticmethod
    def user_deleted(
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_DELETED,
            severity=AuditSeverity.WARNING,
            username=username,
            correlation_id=correlation_id,
            description=f"User deleted: {username}",
            is_user_action=True,
        )

    @staticmethod
    def user_renamed(
        old_username: str,
        new_username: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_RENAMED,
            username=new_username,
            correlation_id=correlation_id,
            description=f"User renamed: {old_username} -> {new_username}",
            details={"old_username": old_username},
            is_user_action=True,
        )

    @staticmethod
    def ledger_mutated(
        event_type: AuditEventType,
        username: str,
        expense_count: int,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            username=username,
            correlation_id=correlation_id,
            description=f"Ledger updated: {event_type.value}",
            details={"expense_count": expense_count, **(details or {})},
            is_user_action=True,
        )

    @staticmethod
    def command_rejected(
        username: Optional[str],
        command: str,
        error_code: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMAND_REJECTED,
            severity=AuditSeverity.WARNING,
            username=username,
            correlation_id=correlation_id,
            description=f"Command rejected: {command}",
            details={"command": command},
            error_code=error_code,
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def ledgers_loaded(
        loaded: int,
        skipped: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGERS_LOADED,
            correlation_id=correlation_id,
            description=f"Loaded {loaded} ledgers ({skipped} skipped)",
            details={"loaded": loaded, "skipped": skipped},
        )

    @staticmethod
    def ledger_skipped(
        filename: str,
        error_code: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SKIPPED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Ledger file skipped: {filename}",
            details={"filename": filename},
            error_code=error_code,
            error_message=error_message,
        )

    @staticmethod
    def ledger_saved(
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SAVED,
            severity=AuditSeverity.DEBUG,
            username=username,
            correlation_id=correlation_id,
            description=f"Ledger saved: {username}",
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
