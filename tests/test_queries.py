"""Tests for statistics and budget status queries."""

import pytest
from datetime import date
from decimal import Decimal

from expensetracker.models.budget import AddCategoryBudget, SetTotalBudget
from expensetracker.models.expense import Expense
from expensetracker.models.ledger import UserLedger
from expensetracker.models.notification import NotificationType
from expensetracker.queries import (
    LedgerQueryExecutor,
    StatsMode,
    StatsPeriod,
    StatsQuery,
)


def _expense(name, amount, category, spent_on):
    return Expense(name=name, amount=Decimal(amount), category=category, spent_on=spent_on)


@pytest.fixture
def ledger():
    ledger = UserLedger("alice")
    ledger.apply_budget_command(SetTotalBudget(cap=Decimal("100")))
    ledger.apply_budget_command(AddCategoryBudget(category="Food", cap=Decimal("50")))
    ledger.apply_budget_command(AddCategoryBudget(category="Transport", cap=Decimal("30")))
    for expense in [
        _expense("Groceries", "40.00", "Food", date(2024, 3, 1)),
        _expense("Lunch", "15.00", "Food", date(2024, 3, 10)),
        _expense("Bus", "5.00", "Transport", date(2024, 3, 10)),
        _expense("Cinema", "12.00", "Fun", date(2024, 3, 9)),
        _expense("Gift", "30.00", "Fun", date(2024, 2, 20)),
        _expense("Boots", "80.00", "Clothes", date(2023, 11, 5)),
    ]:
        ledger.record_expense(expense)
    return ledger


@pytest.fixture
def executor(ledger):
    return LedgerQueryExecutor(ledger)


class TestStatsByCategory:
    """Tests for per-category statistics."""

    def test_last_seven_days(self, executor):
        """Test the default 7-day window grouped by category."""
        result = executor.execute(StatsQuery(as_of=date(2024, 3, 10)))
        assert result.window_start == date(2024, 3, 4)
        assert result.window_end == date(2024, 3, 10)
        assert result.data_found is True
        assert result.total == Decimal("32.00")
        assert [(b.label, b.total) for b in result.buckets] == [
            ("Food", Decimal("15.00")),
            ("Fun", Decimal("12.00")),
            ("Transport", Decimal("5.00")),
        ]

    def test_empty_window(self, executor):
        """Test that a window without expenses reports no data."""
        result = executor.execute(StatsQuery(as_of=date(2030, 1, 1)))
        assert result.data_found is False
        assert result.total == Decimal("0.00")
        assert result.buckets == []

    def test_month_window(self, executor):
        """Test a two-month window covers both calendar months completely."""
        result = executor.execute(StatsQuery(
            period=StatsPeriod.MONTH,
            period_amount=2,
            as_of=date(2024, 3, 10),
        ))
        assert result.window_start == date(2024, 2, 1)
        assert result.window_end == date(2024, 3, 31)
        assert result.total == Decimal("102.00")

    def test_month_window_crosses_year(self, executor):
        """Test that month windows roll back over a year boundary."""
        result = executor.execute(StatsQuery(
            period=StatsPeriod.MONTH,
            period_amount=5,
            as_of=date(2024, 3, 10),
        ))
        assert result.window_start == date(2023, 11, 1)
        assert result.buckets[0].label == "Clothes"

    def test_week_window(self, executor):
        """Test that a week window spans seven days per period."""
        result = executor.execute(StatsQuery(
            period=StatsPeriod.WEEK,
            period_amount=2,
            as_of=date(2024, 3, 10),
        ))
        assert result.window_start == date(2024, 2, 26)
        assert result.total == Decimal("72.00")

    def test_period_amount_bounds(self):
        """Test that at least one period is required."""
        with pytest.raises(ValueError):
            StatsQuery(period_amount=0)


class TestStatsByTime:
    """Tests for per-period statistics."""

    def test_days_include_empty_buckets(self, executor):
        """Test that every day in the window gets a bucket."""
        result = executor.execute(StatsQuery(
            period=StatsPeriod.DAY,
            period_amount=3,
            mode=StatsMode.TIME,
            as_of=date(2024, 3, 10),
        ))
        assert [(b.label, b.total, b.expense_count) for b in result.buckets] == [
            ("2024-03-08", Decimal("0.00"), 0),
            ("2024-03-09", Decimal("12.00"), 1),
            ("2024-03-10", Decimal("20.00"), 2),
        ]

    def test_months(self, executor):
        """Test monthly buckets are labelled YYYY-MM."""
        result = executor.execute(StatsQuery(
            period=StatsPeriod.MONTH,
            period_amount=3,
            mode=StatsMode.TIME,
            as_of=date(2024, 3, 10),
        ))
        assert [b.label for b in result.buckets] == ["2024-01", "2024-02", "2024-03"]
        assert result.buckets[1].total == Decimal("30.00")

    def test_years(self, executor):
        """Test yearly buckets."""
        result = executor.execute(StatsQuery(
            period=StatsPeriod.YEAR,
            period_amount=2,
            mode=StatsMode.TIME,
            as_of=date(2024, 3, 10),
        ))
        assert [(b.label, b.total) for b in result.buckets] == [
            ("2023", Decimal("80.00")),
            ("2024", Decimal("102.00")),
        ]

    def test_weeks_start_at_window_start(self, executor):
        """Test that week buckets are labelled with their first day."""
        result = executor.execute(StatsQuery(
            period=StatsPeriod.WEEK,
            period_amount=2,
            mode=StatsMode.TIME,
            as_of=date(2024, 3, 10),
        ))
        assert [b.label for b in result.buckets] == ["2024-02-26", "2024-03-04"]
        assert result.buckets[0].total == Decimal("40.00")


class TestBudgetStatus:
    """Tests for budget status and warnings."""

    def test_budget_status(self, executor):
        """Test spending against caps for the current month."""
        status = executor.budget_status(date(2024, 3, 15))
        assert status.month_start == date(2024, 3, 1)
        assert status.month_end == date(2024, 3, 31)
        assert status.total.spent == Decimal("72.00")
        assert status.total.remaining == Decimal("28.00")

        food, transport = status.categories
        assert food.category == "Food"
        assert food.spent == Decimal("55.00")
        assert food.over_budget is True
        assert transport.over_budget is False

    def test_budget_warnings(self, executor):
        """Test that only exceeded caps produce warnings."""
        warnings = executor.budget_warnings(date(2024, 3, 15))
        assert len(warnings) == 1
        assert warnings[0].header == "Food budget exceeded"
        assert warnings[0].type == NotificationType.WARNING

    def test_total_warning_comes_first(self, ledger):
        """Test that an exceeded total is reported before categories."""
        ledger.record_expense(_expense("Laptop", "900.00", "Food", date(2024, 3, 2)))
        warnings = LedgerQueryExecutor(ledger).budget_warnings(date(2024, 3, 15))
        assert [w.header for w in warnings] == [
            "Total budget exceeded",
            "Food budget exceeded",
        ]

    def test_unset_total_does_not_warn(self, lunch):
        """Test that a new user without a total budget gets no total warning."""
        ledger = UserLedger("bob")
        ledger.record_expense(lunch)
        executor = LedgerQueryExecutor(ledger)
        assert executor.budget_status(date(2024, 3, 15)).total.over_budget is True
        assert executor.budget_warnings(date(2024, 3, 15)) == []

    def test_queries_do_not_modify_ledger(self, ledger, executor):
        """Test that running queries leaves the ledger untouched."""
        before = ledger.copy()
        executor.execute(StatsQuery(as_of=date(2024, 3, 10)))
        executor.budget_warnings(date(2024, 3, 15))
        assert ledger == before
