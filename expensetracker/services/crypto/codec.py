"""
Ledger Encryption Codec

Turns a UserLedger into an EncryptedBlob and back.

Format:
1. The ledger is serialised to canonical JSON (sorted keys, no
   whitespace, UTF-8). The byte length is whatever the JSON is;
   nothing is padded or truncated.
2. A 256-bit key is derived from the installation secret with
   PBKDF2-HMAC-SHA256 and a fresh random 16-byte salt.
3. The JSON is encrypted with AES-GCM under a random 96-bit nonce.
   The username (stored in clear as the blob's lookup key) is bound
   to the ciphertext as associated data.
4. Salt, nonce, iteration count, ciphertext and the 16-byte GCM tag
   are stored in the blob.

DESIGN DECISION: Decryption reports failure as a value, not as a
generic exception to be caught. `try_decrypt` returns a DecryptResult
holding either a ledger or one of:
- InvalidKeyError: the GCM tag did not verify (wrong secret, or the
  blob was tampered with / corrupted)
- MalformedLedgerError: the tag verified but the plaintext is not a
  valid ledger
`decrypt` is the raising convenience wrapper.

Derived keys live only inside a single encrypt/decrypt call and are
never logged or stored.
"""

import base64
import json
import os
from typing import Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
    field_serializer,
    field_validator,
)

from expensetracker.models.errors import LedgerError
from expensetracker.models.ledger import LedgerDocument, UserLedger
from expensetracker.models.user import Username


BLOB_FORMAT_VERSION = 1
DEFAULT_KDF_ITERATIONS = 390_000
MAX_KDF_ITERATIONS = 10_000_000

KEY_LENGTH = 32
SALT_LENGTH = 16
NONCE_LENGTH = 12
TAG_LENGTH = 16

Secret = Union[SecretStr, str, bytes]


class InvalidKeyError(LedgerError):
    """The ledger could not be authenticated: wrong key or corrupted data."""

    error_code = "invalid_key"


class MalformedLedgerError(LedgerError):
    """The data is not a valid ledger."""

    error_code = "malformed_ledger"


class EncryptedBlob(BaseModel):
    """
    One user's encrypted ledger, as stored.

    Binary fields are raw bytes in Python and base64 strings in JSON.
    """
    model_config = ConfigDict(frozen=True)

    format_version: int = Field(
        default=BLOB_FORMAT_VERSION,
        ge=1,
        le=BLOB_FORMAT_VERSION,
        description="Blob layout version"
    )
    username: Username = Field(
        ...,
        description="Owner of the ledger (clear text, lookup key)"
    )
    kdf_iterations: int = Field(
        ...,
        ge=1,
        le=MAX_KDF_ITERATIONS,
        description="PBKDF2 iterations used to derive the key"
    )
    salt: bytes = Field(..., min_length=SALT_LENGTH, max_length=SALT_LENGTH)
    nonce: bytes = Field(..., min_length=NONCE_LENGTH, max_length=NONCE_LENGTH)
    ciphertext: bytes
    tag: bytes = Field(..., min_length=TAG_LENGTH, max_length=TAG_LENGTH)

    @field_validator('salt', 'nonce', 'ciphertext', 'tag', mode='before')
    @classmethod
    def decode_base64(cls, v):
        if isinstance(v, str):
            return base64.b64decode(v, validate=True)
        return v

    @field_serializer('salt', 'nonce', 'ciphertext', 'tag', when_used='json')
    def encode_base64(self, v: bytes) -> str:
        return base64.b64encode(v).decode("ascii")


class DecryptResult(BaseModel):
    """Outcome of a decryption: a ledger, or the reason there is none."""
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    ledger: Optional[UserLedger] = None
    error: Optional[LedgerError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> UserLedger:
        """Return the ledger or raise the error."""
        if self.error is not None:
            raise self.error
        return self.ledger


def canonical_bytes(document: LedgerDocument) -> bytes:
    """Deterministic byte form of a ledger document."""
    return json.dumps(
        document.model_dump(mode="json"),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def _secret_bytes(secret: Secret) -> bytes:
    if isinstance(secret, SecretStr):
        secret = secret.get_secret_value()
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    if not secret:
        raise ValueError("Encryption secret must not be empty")
    return secret


def _associated_data(blob_version: int, username: str) -> bytes:
    return f"expensetracker:{blob_version}:{username}".encode("utf-8")


class LedgerCodec:
    """
    Symmetric encryption of user ledgers.

    The codec itself holds no key material; the installation secret is
    passed to every call.
    """

    def __init__(self, kdf_iterations: int = DEFAULT_KDF_ITERATIONS):
        if not 1 <= kdf_iterations <= MAX_KDF_ITERATIONS:
            raise ValueError(f"kdf_iterations out of range: {kdf_iterations}")
        self._kdf_iterations = kdf_iterations

    @property
    def kdf_iterations(self) -> int:
        return self._kdf_iterations

    @staticmethod
    def derive_key(secret: Secret, salt: bytes, iterations: int) -> bytes:
        """Derive a 256-bit key from the secret and salt."""
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH,
            salt=salt,
            iterations=iterations,
        )
        return kdf.derive(_secret_bytes(secret))

    def encrypt(self, ledger: UserLedger, secret: Secret) -> EncryptedBlob:
        """Encrypt a ledger under the installation secret."""
        plaintext = canonical_bytes(ledger.to_document())
        salt = os.urandom(SALT_LENGTH)
        nonce = os.urandom(NONCE_LENGTH)
        key = self.derive_key(secret, salt, self._kdf_iterations)

        sealed = AESGCM(key).encrypt(
            nonce,
            plaintext,
            _associated_data(BLOB_FORMAT_VERSION, ledger.username),
        )

        return EncryptedBlob(
            format_version=BLOB_FORMAT_VERSION,
            username=ledger.username,
            kdf_iterations=self._kdf_iterations,
            salt=salt,
            nonce=nonce,
            ciphertext=sealed[:-TAG_LENGTH],
            tag=sealed[-TAG_LENGTH:],
        )

    def try_decrypt(self, blob: EncryptedBlob, secret: Secret) -> DecryptResult:
        """
        Decrypt a blob.

        Returns a DecryptResult; never raises for a wrong key or bad data.
        """
        key = self.derive_key(secret, blob.salt, blob.kdf_iterations)
        try:
            plaintext = AESGCM(key).decrypt(
                blob.nonce,
                blob.ciphertext + blob.tag,
                _associated_data(blob.format_version, blob.username),
            )
        except InvalidTag:
            return DecryptResult(error=InvalidKeyError(
                f"Could not authenticate ledger for {blob.username}"
            ))

        try:
            document = LedgerDocument.model_validate_json(plaintext)
            ledger = UserLedger.from_document(document)
        except ValidationError as e:
            return DecryptResult(error=MalformedLedgerError(
                f"Ledger for {blob.username} has an invalid shape: {e.error_count()} errors"
            ))
        except LedgerError as e:
            return DecryptResult(error=MalformedLedgerError(
                f"Ledger for {blob.username} breaks an invariant: {e}"
            ))

        if ledger.username != blob.username:
            return DecryptResult(error=MalformedLedgerError(
                f"Ledger stored for {blob.username} belongs to {ledger.username}"
            ))

        return DecryptResult(ledger=ledger)

    def decrypt(self, blob: EncryptedBlob, secret: Secret) -> UserLedger:
        """
        Decrypt a blob.

        Raises:
            InvalidKeyError: Wrong secret, or corrupted/tampered blob
            MalformedLedgerError: Decrypted data is not a valid ledger
        """
        return self.try_decrypt(blob, secret).unwrap()

    @staticmethod
    def dumps(blob: EncryptedBlob) -> bytes:
        """Encode a blob for writing to disk."""
        return blob.model_dump_json().encode("utf-8")

    @staticmethod
    def loads(data: bytes) -> EncryptedBlob:
        """
        Decode a blob read from disk.

        Raises:
            MalformedLedgerError: If the data is not a blob
        """
        try:
            return EncryptedBlob.model_validate_json(data)
        except ValidationError as e:
            raise MalformedLedgerError(
                f"Not a ledger blob: {e.error_count()} errors"
            )
