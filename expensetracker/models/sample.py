"""Sample ledger offered to new installations (AppSettings.seed_sample_user)."""

from datetime import date
from decimal import Decimal

from expensetracker.models.budget import BudgetLedger, CategoryBudget
from expensetracker.models.expense import Expense
from expensetracker.models.expense_list import UniqueExpenseList
from expensetracker.models.ledger import UserLedger

SAMPLE_USERNAME = "sample"


def sample_ledger(today: date) -> UserLedger:
    """A small ledger with a few expenses in the month of `today`."""
    month_start = today.replace(day=1)
    expenses = [
        Expense(
            name="Groceries",
            amount=Decimal("54.20"),
            category="Food",
            spent_on=month_start,
            tags=("weekly",),
        ),
        Expense(
            name="Lunch",
            amount=Decimal("12.50"),
            category="Food",
            spent_on=month_start,
            remark="With colleagues",
        ),
        Expense(
            name="Bus pass",
            amount=Decimal("45.00"),
            category="Transport",
            spent_on=month_start,
        ),
        Expense(
            name="Cinema",
            amount=Decimal("11.00"),
            category="Fun",
            spent_on=today,
        ),
    ]
    budget = BudgetLedger(
        Decimal("500.00"),
        [
            CategoryBudget(category="Food", cap=Decimal("250.00")),
            CategoryBudget(category="Transport", cap=Decimal("80.00")),
            CategoryBudget(category="Fun", cap=Decimal("60.00")),
        ],
    )
    return UserLedger(SAMPLE_USERNAME, UniqueExpenseList(expenses), budget)
