"""
User Ledger

The unit of business state: one user's expenses and budgets.

The ledger is what gets encrypted and stored as one blob.
`LedgerDocument` is its serialised shape.

Unknown categories: an expense may name a category that has no budget.
Whether that is accepted is a CategoryPolicy chosen by the caller
(configured through AppSettings.unknown_category_policy).
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from expensetracker.models.budget import BudgetCommand, BudgetLedger, CategoryBudget
from expensetracker.models.errors import CategoryNotFoundError
from expensetracker.models.expense import ZERO, Expense, Money
from expensetracker.models.expense_list import ExpenseListView, UniqueExpenseList
from expensetracker.models.user import Username, validate_username


LEDGER_FORMAT_VERSION = 1


class CategoryPolicy(str, Enum):
    """What to do with an expense whose category has no budget."""
    PERMIT = "permit"   # Accept it
    REJECT = "reject"   # Raise CategoryNotFoundError


class LedgerDocument(BaseModel):
    """
    Serialised form of a UserLedger.

    Older payloads without a version or budget fields are read with a
    zero total budget and no category budgets. Writes always produce
    the current version.
    """

    version: int = Field(
        default=LEDGER_FORMAT_VERSION,
        ge=1,
        description="Payload format version"
    )
    username: Username
    total_budget: Money = ZERO
    category_budgets: list[CategoryBudget] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)

    @field_validator('version')
    @classmethod
    def known_version(cls, v: int) -> int:
        if v > LEDGER_FORMAT_VERSION:
            raise ValueError(f"Unsupported ledger version: {v}")
        return v


class UserLedger:
    """
    One user's expenses and budgets, tagged with their username.

    Expense and budget mutations pass straight through to the
    UniqueExpenseList and BudgetLedger, which enforce their own
    invariants.
    """

    def __init__(
        self,
        username: str,
        expenses: Optional[UniqueExpenseList] = None,
        budget: Optional[BudgetLedger] = None,
    ):
        self._username = validate_username(username)
        self._expenses = expenses if expenses is not None else UniqueExpenseList()
        self._budget = budget if budget is not None else BudgetLedger()

    @property
    def username(self) -> str:
        return self._username

    @property
    def expenses(self) -> UniqueExpenseList:
        return self._expenses

    @property
    def budget(self) -> BudgetLedger:
        return self._budget

    def expense_view(self) -> ExpenseListView:
        return self._expenses.view()

    @property
    def total_spent(self) -> Decimal:
        return sum((expense.amount for expense in self._expenses), ZERO)

    # -------------------------------------------------------------------------
    # Expense operations
    # -------------------------------------------------------------------------

    def record_expense(
        self,
        expense: Expense,
        policy: CategoryPolicy = CategoryPolicy.PERMIT,
    ) -> None:
        """
        Add an expense.

        Raises:
            CategoryNotFoundError: Unknown category under CategoryPolicy.REJECT
            DuplicateRecordError: Same expense already recorded
        """
        self._check_category(expense, policy)
        self._expenses.add(expense)

    def edit_expense(
        self,
        target: Expense,
        edited: Expense,
        policy: CategoryPolicy = CategoryPolicy.PERMIT,
    ) -> None:
        """
        Replace `target` with `edited`.

        Raises:
            CategoryNotFoundError: Unknown category under CategoryPolicy.REJECT
            RecordNotFoundError: `target` is not in the ledger
            DuplicateRecordError: `edited` collides with another expense
        """
        self._check_category(edited, policy)
        self._expenses.replace(target, edited)

    def delete_expense(self, expense: Expense) -> None:
        """Raises RecordNotFoundError if the expense is not in the ledger."""
        self._expenses.remove(expense)

    def apply_budget_command(self, command: BudgetCommand) -> None:
        """Apply a budget command. A rejected command changes nothing."""
        command.apply(self._budget)

    def _check_category(self, expense: Expense, policy: CategoryPolicy) -> None:
        if policy is CategoryPolicy.REJECT and not self._budget.has_category(expense.category):
            raise CategoryNotFoundError(
                f"No budget for category: {expense.category}"
            )

    # -------------------------------------------------------------------------
    # Copying and serialisation
    # -------------------------------------------------------------------------

    def copy(self) -> "UserLedger":
        """Independent working copy."""
        return UserLedger(self._username, self._expenses.copy(), self._budget.copy())

    def renamed(self, new_username: str) -> "UserLedger":
        """Copy of this ledger under a different username."""
        return UserLedger(new_username, self._expenses.copy(), self._budget.copy())

    def to_document(self) -> LedgerDocument:
        return LedgerDocument(
            version=LEDGER_FORMAT_VERSION,
            username=self._username,
            total_budget=self._budget.total_budget,
            category_budgets=self._budget.category_budgets(),
            expenses=list(self._expenses),
        )

    @classmethod
    def from_document(cls, document: LedgerDocument) -> "UserLedger":
        """
        Rebuild a ledger from its document.

        Raises a LedgerError if the document breaks a ledger invariant
        (duplicate expenses, category budgets above the total).
        """
        return cls(
            document.username,
            UniqueExpenseList(document.expenses),
            BudgetLedger(document.total_budget, document.category_budgets),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UserLedger):
            return NotImplemented
        return (
            self._username == other._username
            and self._expenses == other._expenses
            and self._budget == other._budget
        )

    def __repr__(self) -> str:
        return f"UserLedger({self._username!r}, {self._expenses!r})"
