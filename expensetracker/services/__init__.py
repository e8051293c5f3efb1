"""Services package."""

from expensetracker.services.crypto import (
    DecryptResult,
    EncryptedBlob,
    InvalidKeyError,
    LedgerCodec,
    MalformedLedgerError,
)
from expensetracker.services.storage import (
    AuditStorageInterface,
    FileLedgerStore,
    InMemoryAuditStorage,
    LedgerStorageInterface,
    StorageError,
    UserAlreadyExistsError,
    UserNotFoundError,
)

__all__ = [
    # Encryption
    "DecryptResult",
    "EncryptedBlob",
    "InvalidKeyError",
    "LedgerCodec",
    "MalformedLedgerError",
    # Storage services
    "AuditStorageInterface",
    "FileLedgerStore",
    "InMemoryAuditStorage",
    "LedgerStorageInterface",
    "StorageError",
    "UserAlreadyExistsError",
    "UserNotFoundError",
]
