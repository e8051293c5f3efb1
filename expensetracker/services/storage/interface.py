"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the encrypted file store for another backend later
2. Keep the session logic decoupled from files and encryption
3. Use a different audit sink without touching business logic

The interface is intentionally small - just the operations a
single-user session needs.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional
from uuid import UUID

from expensetracker.models.audit import AuditEvent
from expensetracker.models.errors import LedgerError
from expensetracker.models.ledger import UserLedger


# Called with (source, error) for each ledger skipped during load_all
SkipCallback = Callable[[Path, LedgerError], None]


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger storage.

    Maps username -> one persisted, encrypted ledger.
    """

    @abstractmethod
    def load_all(
        self,
        on_skip: Optional[SkipCallback] = None,
    ) -> dict[str, UserLedger]:
        """
        Load every stored ledger.

        A ledger that cannot be read or decrypted is skipped (and reported
        to `on_skip`), never fatal.

        Returns:
            Mapping of username to ledger
        """
        pass

    @abstractmethod
    def exists(self, username: str) -> bool:
        """True if a ledger is stored for `username`."""
        pass

    @abstractmethod
    def create_if_absent(self, username: str) -> UserLedger:
        """
        Create and persist an empty ledger.

        Returns:
            The new ledger

        Raises:
            UserAlreadyExistsError: If the user already has a ledger
        """
        pass

    @abstractmethod
    def save(self, ledger: UserLedger) -> None:
        """
        Persist a ledger, replacing any previous version.

        All-or-nothing: a failed save leaves the previous version intact.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, username: str) -> None:
        """
        Delete a user's ledger.

        Raises:
            UserNotFoundError: If no ledger is stored for the user
        """
        pass

    @abstractmethod
    def rename(self, ledger: UserLedger, new_username: str) -> UserLedger:
        """
        Move a ledger to a new username.

        Returns:
            The ledger under its new username

        Raises:
            UserNotFoundError: If no ledger is stored for the old username
            UserAlreadyExistsError: If the new username is taken
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one session).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    def get_events_by_user(
        self,
        username: str,
    ) -> list[AuditEvent]:
        """
        Get all events about one user's ledger.

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(LedgerError):
    """Base exception for storage operations."""

    error_code = "storage_error"


class UserNotFoundError(StorageError):
    """No ledger is stored for that user."""

    error_code = "user_not_found"


class UserAlreadyExistsError(StorageError):
    """That user already has a ledger."""

    error_code = "user_already_exists"
