"""Ledger encryption package."""

from expensetracker.services.crypto.codec import (
    BLOB_FORMAT_VERSION,
    DecryptResult,
    EncryptedBlob,
    InvalidKeyError,
    LedgerCodec,
    MalformedLedgerError,
    canonical_bytes,
)

__all__ = [
    "BLOB_FORMAT_VERSION",
    "DecryptResult",
    "EncryptedBlob",
    "InvalidKeyError",
    "LedgerCodec",
    "MalformedLedgerError",
    "canonical_bytes",
]
