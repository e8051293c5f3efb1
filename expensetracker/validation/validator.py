"""
Expense Validation

Checks an expense against the ledger it is about to enter.

Issue severities:
- error: the expense must not be recorded (unknown category under
  CategoryPolicy.REJECT)
- warning: suspicious but allowed (future date, unusually large amount)
- info: worth knowing (category has no budget under CategoryPolicy.PERMIT)

IMPORTANT: Validation NEVER silently fixes issues.
It reports them; the ledger enforces the hard rules itself.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Optional

from expensetracker.config import AppSettings
from expensetracker.models.expense import Expense
from expensetracker.models.ledger import CategoryPolicy, UserLedger
from expensetracker.models.validation import ValidationIssue, ValidationResult


class ExpenseValidator:
    """Validates expenses before they are recorded or edited."""

    def __init__(
        self,
        category_policy: CategoryPolicy = CategoryPolicy.PERMIT,
        max_expense_amount: Decimal = Decimal("100000.00"),
        future_date_tolerance_days: int = 0,
        today: Optional[Callable[[], date]] = None,
    ):
        self._category_policy = category_policy
        self._max_amount = max_expense_amount
        self._future_tolerance = timedelta(days=future_date_tolerance_days)
        self._today = today or date.today

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "ExpenseValidator":
        return cls(
            category_policy=settings.unknown_category_policy,
            max_expense_amount=settings.max_expense_amount,
            future_date_tolerance_days=settings.future_date_tolerance_days,
        )

    @property
    def category_policy(self) -> CategoryPolicy:
        return self._category_policy

    def validate(self, expense: Expense, ledger: UserLedger) -> ValidationResult:
        issues = []

        if not ledger.budget.has_category(expense.category):
            if self._category_policy is CategoryPolicy.REJECT:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="unknown_category",
                    message=f"Category '{expense.category}' has no budget",
                    severity="error",
                ))
            else:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="unbudgeted_category",
                    message=f"Category '{expense.category}' has no budget",
                    severity="info",
                ))

        if expense.amount > self._max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({expense.amount:,.2f}) seems unusually high",
                severity="warning",
            ))

        if expense.spent_on > self._today() + self._future_tolerance:
            issues.append(ValidationIssue(
                field="spent_on",
                issue_type="future_date",
                message=f"Expense date ({expense.spent_on}) is in the future",
                severity="warning",
            ))

        return ValidationResult(
            is_valid=not any(issue.severity == "error" for issue in issues),
            issues=issues,
        )
