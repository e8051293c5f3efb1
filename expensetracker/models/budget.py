"""
Budget Ledger

One total budget and any number of category budgets.

INVARIANT: sum(category caps) <= total budget, after every successful
operation. An operation that would break it is rejected and the ledger
is left exactly as it was.

DESIGN DECISION: Each mutator computes the prospective sum, checks it,
and only then writes, all while holding the instance lock.

All arithmetic is Decimal. Two-decimal-place values are the canonical unit.
"""

import threading
from abc import abstractmethod
from collections.abc import Iterable
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from expensetracker.models.errors import (
    CapBelowCategorySumError,
    CategoryBudgetExceedsTotalError,
    CategoryNotFoundError,
    DuplicateCategoryError,
)
from expensetracker.models.expense import ZERO, Category, Money, to_category, to_money


class CategoryBudget(BaseModel):
    """Spending cap for one category."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    category: Category = Field(
        ...,
        description="Category this cap applies to"
    )
    cap: Money = Field(
        ...,
        description="Maximum spending for the category"
    )


class BudgetLedger:
    """Total budget plus per-category sub-budgets."""

    def __init__(
        self,
        total_budget: Any = ZERO,
        category_budgets: Iterable[CategoryBudget] = (),
    ):
        self._lock = threading.Lock()
        self._total = to_money(total_budget)
        self._caps: dict[str, Decimal] = {}
        for budget in category_budgets:
            self.add_category_budget(budget.category, budget.cap)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def total_budget(self) -> Decimal:
        return self._total

    def category_budgets(self) -> list[CategoryBudget]:
        """Category budgets in the order they were added."""
        return [
            CategoryBudget(category=category, cap=cap)
            for category, cap in self._caps.items()
        ]

    def has_category(self, category: str) -> bool:
        return category.strip() in self._caps

    def cap_for(self, category: str) -> Optional[Decimal]:
        return self._caps.get(category.strip())

    def allocated(self) -> Decimal:
        """Sum of all category caps."""
        return sum(self._caps.values(), ZERO)

    def unallocated(self) -> Decimal:
        """Part of the total budget not assigned to any category."""
        return self._total - self.allocated()

    # -------------------------------------------------------------------------
    # Mutators
    # -------------------------------------------------------------------------

    def set_total_budget(self, cap: Any) -> None:
        """
        Set the total budget.

        Raises:
            CapBelowCategorySumError: If `cap` is below the sum of category caps
        """
        cap = to_money(cap)
        with self._lock:
            allocated = self.allocated()
            if cap < allocated:
                raise CapBelowCategorySumError(
                    f"Total budget {cap} is below the category budget sum {allocated}"
                )
            self._total = cap

    def add_category_budget(self, category: str, cap: Any) -> None:
        """
        Add a budget for a category that has none yet.

        Raises:
            DuplicateCategoryError: If the category already has a budget
            CategoryBudgetExceedsTotalError: If the new sum exceeds the total
        """
        cap = to_money(cap)
        category = to_category(category)
        with self._lock:
            if category in self._caps:
                raise DuplicateCategoryError(
                    f"Category already has a budget: {category}"
                )
            prospective = self.allocated() + cap
            if prospective > self._total:
                raise CategoryBudgetExceedsTotalError(
                    f"Category budgets would total {prospective}, "
                    f"above the total budget {self._total}"
                )
            self._caps[category] = cap

    def update_category_budget(self, category: str, new_cap: Any) -> None:
        """
        Change the cap of an existing category budget.

        Raises:
            CategoryNotFoundError: If the category has no budget
            CategoryBudgetExceedsTotalError: If the new sum exceeds the total
        """
        new_cap = to_money(new_cap)
        category = to_category(category)
        with self._lock:
            if category not in self._caps:
                raise CategoryNotFoundError(f"No budget for category: {category}")
            prospective = self.allocated() - self._caps[category] + new_cap
            if prospective > self._total:
                raise CategoryBudgetExceedsTotalError(
                    f"Category budgets would total {prospective}, "
                    f"above the total budget {self._total}"
                )
            self._caps[category] = new_cap

    def remove_category_budget(self, category: str) -> None:
        """
        Remove a category budget. Removal only ever shrinks the sum.

        Raises:
            CategoryNotFoundError: If the category has no budget
        """
        category = to_category(category)
        with self._lock:
            if category not in self._caps:
                raise CategoryNotFoundError(f"No budget for category: {category}")
            del self._caps[category]

    def copy(self) -> "BudgetLedger":
        return BudgetLedger(self._total, self.category_budgets())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BudgetLedger):
            return NotImplemented
        return self._total == other._total and self._caps == other._caps

    def __repr__(self) -> str:
        return f"BudgetLedger(total={self._total}, categories={self._caps!r})"


# =============================================================================
# BUDGET COMMANDS
# =============================================================================

class BudgetCommand(BaseModel):
    """
    A single budget mutation, applied to a BudgetLedger.

    Commands are plain data so they can be audited and replayed.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    @abstractmethod
    def apply(self, budget: BudgetLedger) -> None:
        """Apply this command. Raises a LedgerError if rejected."""

    @property
    def command_name(self) -> str:
        return self.__class__.__name__


class SetTotalBudget(BudgetCommand):
    cap: Money

    def apply(self, budget: BudgetLedger) -> None:
        budget.set_total_budget(self.cap)


class AddCategoryBudget(BudgetCommand):
    category: Category
    cap: Money

    def apply(self, budget: BudgetLedger) -> None:
        budget.add_category_budget(self.category, self.cap)


class UpdateCategoryBudget(BudgetCommand):
    category: Category
    cap: Money

    def apply(self, budget: BudgetLedger) -> None:
        budget.update_category_budget(self.category, self.cap)


class RemoveCategoryBudget(BudgetCommand):
    category: Category

    def apply(self, budget: BudgetLedger) -> None:
        budget.remove_category_budget(self.category)
