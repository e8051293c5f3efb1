"""
Data Models Package

This package contains the ledger domain: expenses, the unique expense
list, budgets, the user ledger, and the audit/notification models.
"""

from expensetracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from expensetracker.models.budget import (
    AddCategoryBudget,
    BudgetCommand,
    BudgetLedger,
    CategoryBudget,
    RemoveCategoryBudget,
    SetTotalBudget,
    UpdateCategoryBudget,
)
from expensetracker.models.errors import (
    CapBelowCategorySumError,
    CategoryBudgetExceedsTotalError,
    CategoryNotFoundError,
    DuplicateCategoryError,
    DuplicateRecordError,
    InvalidUsernameError,
    LedgerError,
    NoUserSelectedError,
    RecordNotFoundError,
)
from expensetracker.models.expense import (
    Category,
    Expense,
    ExpenseIdentity,
    Money,
    expense_identity,
    is_same_expense,
    to_category,
    to_money,
)
from expensetracker.models.expense_list import ExpenseListView, UniqueExpenseList
from expensetracker.models.ledger import (
    LEDGER_FORMAT_VERSION,
    CategoryPolicy,
    LedgerDocument,
    UserLedger,
)
from expensetracker.models.notification import Notification, NotificationType
from expensetracker.models.user import Username, validate_username
from expensetracker.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Expense models
    "Expense",
    "ExpenseIdentity",
    "ExpenseListView",
    "Category",
    "Money",
    "UniqueExpenseList",
    "expense_identity",
    "is_same_expense",
    "to_money",
    "to_category",
    # Budget models
    "AddCategoryBudget",
    "BudgetCommand",
    "BudgetLedger",
    "CategoryBudget",
    "RemoveCategoryBudget",
    "SetTotalBudget",
    "UpdateCategoryBudget",
    # Ledger models
    "LEDGER_FORMAT_VERSION",
    "CategoryPolicy",
    "LedgerDocument",
    "UserLedger",
    "Username",
    "validate_username",
    # Errors
    "CapBelowCategorySumError",
    "CategoryBudgetExceedsTotalError",
    "CategoryNotFoundError",
    "DuplicateCategoryError",
    "DuplicateRecordError",
    "InvalidUsernameError",
    "LedgerError",
    "NoUserSelectedError",
    "RecordNotFoundError",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Notification models
    "Notification",
    "NotificationType",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
