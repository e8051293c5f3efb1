"""Validation package."""

from expensetracker.validation.validator import ExpenseValidator

__all__ = ["ExpenseValidator"]
