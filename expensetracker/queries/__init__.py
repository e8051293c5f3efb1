"""Query execution package."""

from expensetracker.queries.executor import (
    BudgetLine,
    BudgetStatus,
    LedgerQueryExecutor,
    StatsBucket,
    StatsMode,
    StatsPeriod,
    StatsQuery,
    StatsResult,
)

__all__ = [
    "BudgetLine",
    "BudgetStatus",
    "LedgerQueryExecutor",
    "StatsBucket",
    "StatsMode",
    "StatsPeriod",
    "StatsQuery",
    "StatsResult",
]
