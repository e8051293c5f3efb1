"""
Session Orchestrator for Expense Tracker

This module ties the components together and defines the flows a
command layer (CLI or UI) drives:
1. Startup: load every encrypted ledger
2. Accounts: sign up, log in, log out, rename, delete
3. Commands: record / edit / delete expenses, apply budget commands

DESIGN DECISION: The session is an explicit handle owned by the command
layer. There is no module-level "current user" or "current ledger".

DESIGN DECISION: Every command runs on a working copy of the active
ledger. The copy is persisted first and only then becomes the session's
ledger. If the command is rejected or the save fails, both the in-memory
and the persisted state are exactly what they were before.
"""

from datetime import date
from typing import Callable, Optional

import structlog
from pydantic import SecretStr

from expensetracker.audit import AuditLogger, configure_logging, create_correlation_id
from expensetracker.config import Settings, get_settings
from expensetracker.models.audit import AuditEventType
from expensetracker.models.budget import BudgetCommand
from expensetracker.models.errors import InvalidUsernameError, LedgerError, NoUserSelectedError
from expensetracker.models.expense import Expense
from expensetracker.models.ledger import CategoryPolicy, UserLedger
from expensetracker.models.sample import SAMPLE_USERNAME, sample_ledger
from expensetracker.models.user import validate_username
from expensetracker.models.validation import ValidationResult
from expensetracker.queries import LedgerQueryExecutor
from expensetracker.services.crypto import LedgerCodec
from expensetracker.services.storage import (
    FileLedgerStore,
    InMemoryAuditStorage,
    LedgerStorageInterface,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from expensetracker.validation import ExpenseValidator

logger = structlog.get_logger(__name__)


class LedgerSession:
    """
    One process's view of all ledgers, with at most one active user.

    Not designed for concurrent callers.
    """

    def __init__(
        self,
        store: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[ExpenseValidator] = None,
        seed_sample_user: bool = False,
        today: Optional[Callable[[], date]] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger or AuditLogger(correlation_id=create_correlation_id())
        self._validator = validator or ExpenseValidator()
        self._seed_sample_user = seed_sample_user
        self._today = today or date.today
        self._ledgers: dict[str, UserLedger] = {}
        self._active: Optional[str] = None

    @property
    def category_policy(self) -> CategoryPolicy:
        return self._validator.category_policy

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    # -------------------------------------------------------------------------
    # Startup
    # -------------------------------------------------------------------------

    def start(self) -> int:
        """
        Load every stored ledger. Unreadable ledgers are skipped.

        If the sample user cannot be written, the failure is audited as a
        system error and startup continues without it.

        Returns:
            Number of ledgers available
        """
        skipped = []

        def on_skip(path, error: LedgerError) -> None:
            skipped.append(path)
            self._audit_logger.log_ledger_skipped(path.name, error.error_code, str(error))

        self._ledgers = self._store.load_all(on_skip=on_skip)
        self._active = None

        if self._seed_sample_user and SAMPLE_USERNAME not in self._ledgers:
            self._seed_sample()

        self._audit_logger.log_ledgers_loaded(len(self._ledgers), len(skipped))
        return len(self._ledgers)

    def _seed_sample(self) -> None:
        ledger = sample_ledger(self._today())
        try:
            self._store.save(ledger)
        except LedgerError as e:
            self._audit_logger.log_error(
                error_type="sample_seed_failed",
                error_message=str(e),
                details={"error_code": e.error_code},
            )
            return
        self._ledgers[SAMPLE_USERNAME] = ledger

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def usernames(self) -> list[str]:
        return sorted(self._ledgers)

    def has_user(self, username: str) -> bool:
        return username in self._ledgers

    @property
    def active_username(self) -> Optional[str]:
        return self._active

    @property
    def ledger(self) -> UserLedger:
        """
        The active user's ledger.

        Raises:
            NoUserSelectedError: If nobody is logged in
        """
        if self._active is None:
            raise NoUserSelectedError()
        return self._ledgers[self._active]

    def sign_up(self, username: str) -> UserLedger:
        """
        Create a new user with an empty ledger.

        Raises:
            InvalidUsernameError: If the username is not allowed
            UserAlreadyExistsError: If the username is taken
        """
        self._check_username("sign_up", None, username)
        if username in self._ledgers:
            self._reject(username, "sign_up", UserAlreadyExistsError(
                f"User already exists: {username}"
            ))
        try:
            ledger = self._store.create_if_absent(username)
        except LedgerError as e:
            self._reject(username, "sign_up", e)
        self._ledgers[username] = ledger
        self._audit_logger.log_user_signed_up(username)
        return ledger

    def login(self, username: str) -> UserLedger:
        """
        Make `username` the active user.

        Raises:
            UserNotFoundError: If there is no such user
        """
        if username not in self._ledgers:
            self._reject(username, "login", UserNotFoundError(f"User not found: {username}"))
        self._active = username
        self._audit_logger.log_user_logged_in(username)
        return self._ledgers[username]

    def logout(self) -> None:
        if self._active is not None:
            self._audit_logger.log_user_logged_out(self._active)
        self._active = None

    def delete_user(self, username: str) -> None:
        """
        Delete a user and their stored ledger.

        Raises:
            UserNotFoundError: If there is no such user
        """
        if username not in self._ledgers:
            self._reject(username, "delete_user", UserNotFoundError(f"User not found: {username}"))
        try:
            self._store.delete(username)
        except LedgerError as e:
            self._reject(username, "delete_user", e)
        del self._ledgers[username]
        if self._active == username:
            self._active = None
        self._audit_logger.log_user_deleted(username)

    def rename_user(self, old_username: str, new_username: str) -> UserLedger:
        """
        Move a user's ledger to a new username.

        Raises:
            UserNotFoundError: If `old_username` does not exist
            InvalidUsernameError: If `new_username` is not allowed
            UserAlreadyExistsError: If `new_username` is taken
        """
        if old_username not in self._ledgers:
            self._reject(old_username, "rename_user", UserNotFoundError(
                f"User not found: {old_username}"
            ))
        self._check_username("rename_user", old_username, new_username)
        if new_username in self._ledgers:
            self._reject(old_username, "rename_user", UserAlreadyExistsError(
                f"User already exists: {new_username}"
            ))
        try:
            renamed = self._store.rename(self._ledgers[old_username], new_username)
        except LedgerError as e:
            self._reject(old_username, "rename_user", e)

        del self._ledgers[old_username]
        self._ledgers[new_username] = renamed
        if self._active == old_username:
            self._active = new_username
        self._audit_logger.log_user_renamed(old_username, new_username)
        return renamed

    # -------------------------------------------------------------------------
    # Ledger commands
    # -------------------------------------------------------------------------

    def record_expense(self, expense: Expense) -> ValidationResult:
        """
        Record an expense for the active user.

        Returns the validation result (warnings, info) of the recorded expense.
        """
        result = self._validator.validate(expense, self.ledger)
        self._commit(
            "record_expense",
            AuditEventType.EXPENSE_RECORDED,
            lambda ledger: ledger.record_expense(expense, self.category_policy),
            {"category": expense.category},
        )
        return result

    def edit_expense(self, target: Expense, edited: Expense) -> ValidationResult:
        """Replace `target` with `edited` in the active user's ledger."""
        result = self._validator.validate(edited, self.ledger)
        self._commit(
            "edit_expense",
            AuditEventType.EXPENSE_EDITED,
            lambda ledger: ledger.edit_expense(target, edited, self.category_policy),
            {"category": edited.category},
        )
        return result

    def delete_expense(self, expense: Expense) -> None:
        self._commit(
            "delete_expense",
            AuditEventType.EXPENSE_DELETED,
            lambda ledger: ledger.delete_expense(expense),
        )

    def apply_budget_command(self, command: BudgetCommand) -> None:
        self._commit(
            command.command_name,
            AuditEventType.BUDGET_CHANGED,
            lambda ledger: ledger.apply_budget_command(command),
            {"command": command.command_name},
        )

    def query(self) -> LedgerQueryExecutor:
        """Read-only query executor over the active user's ledger."""
        return LedgerQueryExecutor(self.ledger)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _commit(
        self,
        command: str,
        event_type: AuditEventType,
        mutate: Callable[[UserLedger], None],
        details: Optional[dict] = None,
    ) -> UserLedger:
        username = self._active
        working = self.ledger.copy()
        try:
            mutate(working)
            self._store.save(working)
        except LedgerError as e:
            self._reject(username, command, e)

        self._ledgers[username] = working
        self._audit_logger.log_ledger_saved(username)
        self._audit_logger.log_ledger_mutated(
            event_type=event_type,
            username=username,
            expense_count=len(working.expenses),
            details=details,
        )
        return working

    def _check_username(self, command: str, actor: Optional[str], username: str) -> None:
        try:
            validate_username(username)
        except ValueError:
            self._reject(actor, command, InvalidUsernameError(f"Invalid username: {username!r}"))

    def _reject(self, username: Optional[str], command: str, error: LedgerError) -> None:
        """Audit a rejected command, then raise its error."""
        self._audit_logger.log_command_rejected(
            username=username,
            command=command,
            error_code=error.error_code,
            error_message=str(error),
        )
        raise error


def create_session(
    settings: Optional[Settings] = None,
    keep_audit_events: bool = True,
) -> LedgerSession:
    """
    Factory function to create a session from settings.

    Args:
        settings: Settings to use (defaults to get_settings())
        keep_audit_events: Keep this session's audit events in memory

    Returns:
        A session; call start() to load ledgers
    """
    settings = settings or get_settings()
    storage_settings = settings.storage
    encryption_settings = settings.encryption
    app_settings = settings.app

    store = FileLedgerStore(
        directory=storage_settings.data_dir,
        secret=SecretStr(encryption_settings.secret.get_secret_value()),
        codec=LedgerCodec(kdf_iterations=encryption_settings.kdf_iterations),
        load_workers=storage_settings.load_workers,
    )

    configure_logging(debug=app_settings.debug_mode)
    logger.info(
        "session_created",
        environment=app_settings.app_environment,
        data_dir=str(storage_settings.data_dir),
    )

    audit_logger = AuditLogger(
        storage=(
            InMemoryAuditStorage(max_events=app_settings.audit_buffer_size)
            if keep_audit_events else None
        ),
        correlation_id=create_correlation_id(),
    )
    return LedgerSession(
        store=store,
        audit_logger=audit_logger,
        validator=ExpenseValidator.from_settings(app_settings),
        seed_sample_user=app_settings.seed_sample_user,
    )
