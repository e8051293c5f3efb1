"""
Ledger Query Engine

Read-only reports over one user's ledger:
- spending statistics over a window of days, weeks, months or years,
  grouped by category or by period
- budget status: spending against each cap for a calendar month
- budget warnings: notifications for every cap that has been exceeded

GUARANTEES:
- Only reads the ledger, never modifies it
- Never estimates: every figure is a sum of recorded expenses
- Empty windows report data_found=False rather than failing
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, model_validator

from expensetracker.models.expense import ZERO, Expense
from expensetracker.models.ledger import UserLedger
from expensetracker.models.notification import Notification, NotificationType


class StatsPeriod(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class StatsMode(str, Enum):
    CATEGORY = "category"   # Totals per category
    TIME = "time"           # Totals per period


class StatsQuery(BaseModel):
    """Spending statistics over the last `period_amount` periods up to `as_of`."""

    query_id: UUID = Field(default_factory=uuid4)
    period: StatsPeriod = StatsPeriod.DAY
    period_amount: int = Field(
        default=7,
        ge=1,
        le=366,
        description="Number of periods in the window, ending with the one containing as_of"
    )
    mode: StatsMode = StatsMode.CATEGORY
    as_of: date = Field(default_factory=date.today)


class StatsBucket(BaseModel):
    label: str
    total: Decimal
    expense_count: int = Field(ge=0)


class StatsResult(BaseModel):
    """Result of executing a StatsQuery."""

    query_id: UUID
    executed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    window_start: date
    window_end: date
    mode: StatsMode
    data_found: bool
    total: Decimal
    buckets: list[StatsBucket] = Field(default_factory=list)


class BudgetLine(BaseModel):
    """Spending against one cap. `remaining` is negative when over budget."""

    category: Optional[str] = Field(
        default=None,
        description="None for the total budget"
    )
    cap: Decimal
    spent: Decimal
    remaining: Decimal
    over_budget: bool


class BudgetStatus(BaseModel):
    month_start: date
    month_end: date
    total: BudgetLine
    categories: list[BudgetLine] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_window(self) -> 'BudgetStatus':
        if self.month_end < self.month_start:
            raise ValueError("Budget window end cannot be before start")
        return self


def _month_index(day: date) -> int:
    return day.year * 12 + day.month - 1


def _month_start(index: int) -> date:
    return date(index // 12, index % 12 + 1, 1)


def _month_end(index: int) -> date:
    return _month_start(index + 1) - timedelta(days=1)


class LedgerQueryExecutor:
    """Executes read-only queries against a single ledger."""

    def __init__(self, ledger: UserLedger):
        self._ledger = ledger

    def execute(self, query: StatsQuery) -> StatsResult:
        start, end = self._window(query)
        expenses = [
            expense for expense in self._ledger.expense_view()
            if start <= expense.spent_on <= end
        ]

        if query.mode is StatsMode.CATEGORY:
            buckets = self._by_category(expenses)
        else:
            buckets = self._by_period(expenses, query.period, start, end)

        return StatsResult(
            query_id=query.query_id,
            window_start=start,
            window_end=end,
            mode=query.mode,
            data_found=len(expenses) > 0,
            total=sum((expense.amount for expense in expenses), ZERO),
            buckets=buckets,
        )

    def budget_status(self, as_of: Optional[date] = None) -> BudgetStatus:
        """
        Spending against every cap for the calendar month containing `as_of`.

        Categories without a budget count towards the total only.
        """
        as_of = as_of or date.today()
        index = _month_index(as_of)
        start, end = _month_start(index), _month_end(index)

        spent_by_category: dict[str, Decimal] = {}
        total_spent = ZERO
        for expense in self._ledger.expense_view():
            if start <= expense.spent_on <= end:
                spent_by_category[expense.category] = (
                    spent_by_category.get(expense.category, ZERO) + expense.amount
                )
                total_spent += expense.amount

        budget = self._ledger.budget
        categories = [
            self._line(cb.category, cb.cap, spent_by_category.get(cb.category, ZERO))
            for cb in budget.category_budgets()
        ]
        return BudgetStatus(
            month_start=start,
            month_end=end,
            total=self._line(None, budget.total_budget, total_spent),
            categories=categories,
        )

    def budget_warnings(self, as_of: Optional[date] = None) -> list[Notification]:
        """
        One WARNING notification per exceeded cap, total first.

        A total of zero means no total budget has been set, so it never warns.
        """
        status = self.budget_status(as_of)
        warnings = []
        for line in [status.total, *status.categories]:
            if not line.over_budget:
                continue
            if line.category is None and line.cap == ZERO:
                continue
            name = line.category or "Total"
            warnings.append(Notification(
                header=f"{name} budget exceeded",
                body=f"Spent {line.spent} of {line.cap} ({-line.remaining} over)",
                type=NotificationType.WARNING,
            ))
        return warnings

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _line(category: Optional[str], cap: Decimal, spent: Decimal) -> BudgetLine:
        return BudgetLine(
            category=category,
            cap=cap,
            spent=spent,
            remaining=cap - spent,
            over_budget=spent > cap,
        )

    @staticmethod
    def _window(query: StatsQuery) -> tuple[date, date]:
        n = query.period_amount
        as_of = query.as_of
        if query.period is StatsPeriod.DAY:
            return as_of - timedelta(days=n - 1), as_of
        if query.period is StatsPeriod.WEEK:
            return as_of - timedelta(days=7 * n - 1), as_of
        if query.period is StatsPeriod.MONTH:
            index = _month_index(as_of)
            return _month_start(index - (n - 1)), _month_end(index)
        return date(as_of.year - (n - 1), 1, 1), date(as_of.year, 12, 31)

    @staticmethod
    def _by_category(expenses: list[Expense]) -> list[StatsBucket]:
        totals: dict[str, Decimal] = {}
        counts: dict[str, int] = {}
        for expense in expenses:
            totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount
            counts[expense.category] = counts.get(expense.category, 0) + 1
        ordered = sorted(totals, key=lambda category: (-totals[category], category))
        return [
            StatsBucket(label=category, total=totals[category], expense_count=counts[category])
            for category in ordered
        ]

    @staticmethod
    def _by_period(
        expenses: list[Expense],
        period: StatsPeriod,
        start: date,
        end: date,
    ) -> list[StatsBucket]:
        def label_for(day: date) -> str:
            if period is StatsPeriod.DAY:
                return day.isoformat()
            if period is StatsPeriod.WEEK:
                return (start + timedelta(days=7 * ((day - start).days // 7))).isoformat()
            if period is StatsPeriod.MONTH:
                return f"{day.year:04d}-{day.month:02d}"
            return f"{day.year:04d}"

        # Every period in the window gets a bucket, empty ones included
        labels: list[str] = []
        day = start
        while day <= end:
            label = label_for(day)
            if not labels or labels[-1] != label:
                labels.append(label)
            day += timedelta(days=1)

        totals = {label: ZERO for label in labels}
        counts = {label: 0 for label in labels}
        for expense in expenses:
            label = label_for(expense.spent_on)
            totals[label] += expense.amount
            counts[label] += 1

        return [
            StatsBucket(label=label, total=totals[label], expense_count=counts[label])
            for label in labels
        ]
