"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Ledgers are stored as encrypted files; audit events are kept in memory.
"""

from expensetracker.services.storage.interface import (
    AuditStorageInterface,
    LedgerStorageInterface,
    SkipCallback,
    StorageError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from expensetracker.services.storage.file_store import (
    LEDGER_SUFFIX,
    FileLedgerStore,
    ledger_filename,
)
from expensetracker.services.storage.memory_audit import InMemoryAuditStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerStorageInterface",
    "SkipCallback",
    # Exceptions
    "StorageError",
    "UserAlreadyExistsError",
    "UserNotFoundError",
    # Implementations
    "FileLedgerStore",
    "InMemoryAuditStorage",
    "LEDGER_SUFFIX",
    "ledger_filename",
]
