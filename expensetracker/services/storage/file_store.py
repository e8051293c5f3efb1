"""
Encrypted File Ledger Store

One file per user in a single directory. Each file holds one
EncryptedBlob as JSON.

File names are derived from the username (first 32 hex characters of
its SHA-256), so they are stable, collision-free, and safe on
case-insensitive filesystems. The username itself is the blob's
clear-text header field.

DESIGN DECISION: Writes go to a temporary file in the same directory,
are fsynced, and are then moved over the real file with os.replace.
A crash or failed write never leaves a half-written blob at the
canonical path; the previous version stays authoritative.

TRADEOFFS:
- Every load decrypts every ledger (fine for a handful of local users)
- Key derivation is deliberately slow, so load_all decrypts in a
  thread pool
"""

import hashlib
import os
import tempfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import SecretStr
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from expensetracker.models.errors import LedgerError
from expensetracker.models.ledger import UserLedger
from expensetracker.models.user import validate_username
from expensetracker.services.crypto import (
    DecryptResult,
    LedgerCodec,
    MalformedLedgerError,
)
from expensetracker.services.storage.interface import (
    LedgerStorageInterface,
    SkipCallback,
    StorageError,
    UserAlreadyExistsError,
    UserNotFoundError,
)


LEDGER_SUFFIX = ".ledger"

logger = structlog.get_logger(__name__)


def ledger_filename(username: str) -> str:
    """File name holding `username`'s ledger."""
    digest = hashlib.sha256(username.encode("utf-8")).hexdigest()
    return digest[:32] + LEDGER_SUFFIX


class FileLedgerStore(LedgerStorageInterface):
    """
    Directory-backed implementation of ledger storage.

    Every ledger is encrypted with the installation secret.
    """

    def __init__(
        self,
        directory: Union[str, Path],
        secret: Union[SecretStr, str],
        codec: Optional[LedgerCodec] = None,
        load_workers: int = 4,
    ):
        self._directory = Path(directory)
        self._secret = secret if isinstance(secret, SecretStr) else SecretStr(secret)
        self._codec = codec or LedgerCodec()
        self._load_workers = max(1, load_workers)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, username: str) -> Path:
        return self._directory / ledger_filename(validate_username(username))

    def exists(self, username: str) -> bool:
        return self.path_for(username).is_file()

    def load_all(
        self,
        on_skip: Optional[SkipCallback] = None,
    ) -> dict[str, UserLedger]:
        """Load and decrypt every ledger in the directory."""
        if not self._directory.is_dir():
            logger.info("ledger_directory_missing", directory=str(self._directory))
            return {}

        paths = sorted(self._directory.glob(f"*{LEDGER_SUFFIX}"))
        with ThreadPoolExecutor(max_workers=self._load_workers) as pool:
            results = list(pool.map(self._load_one, paths))

        ledgers: dict[str, UserLedger] = {}
        for path, result in zip(paths, results):
            error = result.error
            if error is None and path.name != ledger_filename(result.ledger.username):
                error = MalformedLedgerError(
                    f"Ledger for {result.ledger.username} is stored under the wrong name"
                )
            if error is not None:
                self._skip(path, error, on_skip)
                continue
            ledgers[result.ledger.username] = result.ledger

        logger.info(
            "ledgers_loaded",
            loaded=len(ledgers),
            skipped=len(paths) - len(ledgers),
        )
        return ledgers

    def create_if_absent(self, username: str) -> UserLedger:
        """Create and persist an empty ledger for a new user."""
        if self.exists(username):
            raise UserAlreadyExistsError(f"User already exists: {username}")
        ledger = UserLedger(username)
        self.save(ledger)
        return ledger

    def save(self, ledger: UserLedger) -> None:
        """Encrypt and atomically write a ledger."""
        data = self._codec.dumps(self._codec.encrypt(ledger, self._secret))
        path = self.path_for(ledger.username)
        try:
            self._write_atomic(path, data)
        except OSError as e:
            raise StorageError(f"Failed to save ledger for {ledger.username}: {e}")
        logger.debug("ledger_saved", username=ledger.username, bytes=len(data))

    def delete(self, username: str) -> None:
        path = self.path_for(username)
        if not path.is_file():
            raise UserNotFoundError(f"User not found: {username}")
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete ledger for {username}: {e}")
        logger.info("ledger_deleted", username=username)

    def rename(self, ledger: UserLedger, new_username: str) -> UserLedger:
        """Save the ledger under the new username, then remove the old blob."""
        if not self.exists(ledger.username):
            raise UserNotFoundError(f"User not found: {ledger.username}")
        if self.exists(new_username):
            raise UserAlreadyExistsError(f"User already exists: {new_username}")

        renamed = ledger.renamed(new_username)
        self.save(renamed)
        self.delete(ledger.username)
        return renamed

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _load_one(self, path: Path) -> DecryptResult:
        try:
            data = path.read_bytes()
        except OSError as e:
            return DecryptResult(error=StorageError(f"Failed to read {path.name}: {e}"))
        try:
            blob = self._codec.loads(data)
        except MalformedLedgerError as e:
            return DecryptResult(error=e)
        return self._codec.try_decrypt(blob, self._secret)

    @staticmethod
    def _skip(path: Path, error: LedgerError, on_skip: Optional[SkipCallback]) -> None:
        logger.warning(
            "ledger_skipped",
            filename=path.name,
            error_code=error.error_code,
            error=str(error),
        )
        if on_skip is not None:
            on_skip(path, error)

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write_atomic(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
