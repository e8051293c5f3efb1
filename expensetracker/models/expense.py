"""
Expense Models

An Expense is one spending record in a user's ledger.

DESIGN DECISION: "Is this the same expense?" is NOT answered by `==`.
Two expenses can differ in their category, remark or tags and still be
the same expense (a re-categorised lunch is still the same lunch).
The identity is an explicit projection, `expense_identity`, so code that
needs identity equality has to ask for it by name. Plain `==` remains
full field equality.

All money is Decimal with exactly two decimal places. No floats anywhere.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Any, NamedTuple, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    TypeAdapter,
    field_validator,
)


# =============================================================================
# MONEY
# =============================================================================

TWO_PLACES = Decimal("0.01")


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES)


Money = Annotated[
    Decimal,
    Field(ge=0, decimal_places=2),
    AfterValidator(_quantize),
]

_money_adapter = TypeAdapter(Money)

ZERO = Decimal("0.00")


def to_money(value: Any) -> Decimal:
    """
    Validate and normalise a currency value.

    Accepts Decimal, int or str. Raises ValueError for negative values,
    more than two decimal places, NaN or infinity.
    """
    return _money_adapter.validate_python(value)


# =============================================================================
# CATEGORY
# =============================================================================

# Expenses and category budgets are matched on this exact normalised text
Category = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=50),
]

_category_adapter = TypeAdapter(Category)


def to_category(value: str) -> str:
    """Strip a category name; raise ValueError if it is empty or too long."""
    return _category_adapter.validate_python(value)


# =============================================================================
# EXPENSE
# =============================================================================

class Expense(BaseModel):
    """
    A single spending record.

    Immutable: edits produce a new Expense (see `edited`) which then
    replaces the old one in the ledger.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="What the money was spent on"
    )
    amount: Money = Field(
        ...,
        description="Amount spent"
    )
    category: Category = Field(
        ...,
        description="Category tag (matched against category budgets)"
    )
    spent_on: date = Field(
        ...,
        description="Date of the expense"
    )
    remark: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Free-text note"
    )
    tags: tuple[str, ...] = Field(
        default=(),
        description="Free-form tags"
    )

    @field_validator('tags')
    @classmethod
    def normalise_tags(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Tags are a set: strip, drop empties, sort, de-duplicate."""
        return tuple(sorted({tag.strip() for tag in v if tag.strip()}))

    def edited(self, **changes: Any) -> "Expense":
        """
        Return a copy with `changes` applied.

        Unlike `model_copy(update=...)`, the result is validated.
        """
        return Expense.model_validate({**self.model_dump(), **changes})


class ExpenseIdentity(NamedTuple):
    """The fields that decide whether two expenses are the same expense."""
    name: str
    amount: Decimal
    spent_on: date


def expense_identity(expense: Expense) -> ExpenseIdentity:
    """Project an expense onto its identity fields."""
    return ExpenseIdentity(expense.name, expense.amount, expense.spent_on)


def is_same_expense(first: Expense, second: Expense) -> bool:
    """True if both expenses have the same identity."""
    return expense_identity(first) == expense_identity(second)
