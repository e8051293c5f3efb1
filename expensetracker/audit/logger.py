"""
Audit Logger

DESIGN DECISION: Every accepted or rejected ledger command is logged.
This provides:
1. Complete traceability
2. Debugging capability
3. A record of ledgers skipped at startup

The audit logger:
- Never raises: a failing audit sink does not fail the command
- Supports correlation IDs to trace the events of one session
- Never receives secrets or ciphertext
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from expensetracker.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from expensetracker.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

# Every module logs under this prefix via structlog.get_logger(__name__)
LOGGER_PREFIX = "expensetracker"


def configure_logging(debug: bool = False) -> None:
    """Set the level of the package logger tree (DEBUG or INFO)."""
    logging.getLogger(LOGGER_PREFIX).setLevel(logging.DEBUG if debug else logging.INFO)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage backend, if one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
        correlation_id: Optional[UUID] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
            correlation_id: Attached to every event that does not carry one.
        """
        self._storage = storage
        self._correlation_id = correlation_id
        self._logger = structlog.get_logger("expensetracker.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    @property
    def correlation_id(self) -> Optional[UUID]:
        return self._correlation_id

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        if event.correlation_id is None and self._correlation_id is not None:
            event = event.model_copy(update={"correlation_id": self._correlation_id})

        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_user_signed_up(self, username: str) -> None:
        self.log(AuditEventBuilder.user_signed_up(username))

    def log_user_logged_in(self, username: str) -> None:
        self.log(AuditEventBuilder.user_logged_in(username))

    def log_user_logged_out(self, username: str) -> None:
        self.log(AuditEventBuilder.user_logged_out(username))

    def log_user_deleted(self, username: str) -> None:
        self.log(AuditEventBuilder.user_deleted(username))

    def log_user_renamed(self, old_username: str, new_username: str) -> None:
        self.log(AuditEventBuilder.user_renamed(old_username, new_username))

    def log_ledger_mutated(
        self,
        event_type: AuditEventType,
        username: str,
        expense_count: int,
        details: Optional[dict] = None,
    ) -> None:
        """Log an accepted expense or budget command."""
        self.log(AuditEventBuilder.ledger_mutated(
            event_type=event_type,
            username=username,
            expense_count=expense_count,
            details=details,
        ))

    def log_command_rejected(
        self,
        username: Optional[str],
        command: str,
        error_code: str,
        error_message: str,
    ) -> None:
        """Log a command that was rejected with a LedgerError."""
        self.log(AuditEventBuilder.command_rejected(
            username=username,
            command=command,
            error_code=error_code,
            error_message=error_message,
        ))

    def log_ledgers_loaded(self, loaded: int, skipped: int) -> None:
        self.log(AuditEventBuilder.ledgers_loaded(loaded, skipped))

    def log_ledger_skipped(self, filename: str, error_code: str, error_message: str) -> None:
        self.log(AuditEventBuilder.ledger_skipped(filename, error_code, error_message))

    def log_ledger_saved(self, username: str) -> None:
        self.log(AuditEventBuilder.ledger_saved(username))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a session and pass it to the AuditLogger.
    """
    return uuid4()
