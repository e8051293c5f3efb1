"""
Ledger Errors

Every rejected operation raises a subclass of LedgerError.
Callers (the command layer) catch these, report the error_code,
and carry on: none of them is fatal and none of them leaves
a ledger half-modified.

Storage and encryption errors live next to the services that raise
them, but share this base class.
"""

from typing import Optional


class LedgerError(Exception):
    """Base exception for all rejected ledger operations."""

    error_code = "ledger_error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.__class__.__doc__)


# =============================================================================
# EXPENSE LIST
# =============================================================================

class DuplicateRecordError(LedgerError):
    """An expense with the same identity already exists."""

    error_code = "duplicate_record"


class RecordNotFoundError(LedgerError):
    """No expense with that identity exists."""

    error_code = "record_not_found"


# =============================================================================
# BUDGETS
# =============================================================================

class DuplicateCategoryError(LedgerError):
    """That category already has a budget."""

    error_code = "duplicate_category"


class CategoryNotFoundError(LedgerError):
    """That category has no budget."""

    error_code = "category_not_found"


class CapBelowCategorySumError(LedgerError):
    """The total budget cannot be lower than the sum of the category budgets."""

    error_code = "cap_below_category_sum"


class CategoryBudgetExceedsTotalError(LedgerError):
    """The sum of the category budgets cannot exceed the total budget."""

    error_code = "category_budget_exceeds_total"


# =============================================================================
# SESSION
# =============================================================================

class NoUserSelectedError(LedgerError):
    """No user is logged in."""

    error_code = "no_user_selected"


class InvalidUsernameError(LedgerError):
    """That is not a valid username."""

    error_code = "invalid_username"
