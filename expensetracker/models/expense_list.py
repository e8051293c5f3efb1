"""
Unique Expense List

The ordered collection backing one user's ledger.

INVARIANT: no two expenses in the list share an identity
(see `expense_identity`), at any point in time.

Every mutating method checks first and mutates second, so a rejected
call leaves the list untouched.

DESIGN DECISION: `view()` returns a LIVE read-only view. It always
reflects the current contents of the list, including after
`replace_all`. Readers (UI, reports) only ever go through the view.
"""

from collections.abc import Iterable, Iterator, Sequence

from expensetracker.models.errors import DuplicateRecordError, RecordNotFoundError
from expensetracker.models.expense import Expense, expense_identity, is_same_expense


class ExpenseListView(Sequence):
    """Live, read-only sequence over a UniqueExpenseList."""

    __slots__ = ("_source",)

    def __init__(self, source: "UniqueExpenseList"):
        self._source = source

    def __getitem__(self, index):
        return self._source._expenses[index]

    def __len__(self) -> int:
        return len(self._source._expenses)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Sequence):
            return list(self) == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"ExpenseListView({list(self)!r})"


class UniqueExpenseList:
    """
    A list of expenses that never contains two expenses with the same identity.

    Insertion order is preserved; `replace` keeps the replaced
    expense's position.
    """

    def __init__(self, expenses: Iterable[Expense] = ()):
        self._expenses: list[Expense] = []
        self.replace_all(expenses)

    def contains(self, expense: Expense) -> bool:
        """True if an expense with the same identity is in the list."""
        return self._index_of(expense) >= 0

    def add(self, expense: Expense) -> None:
        """
        Append an expense.

        Raises:
            DuplicateRecordError: If an expense with the same identity exists
        """
        if self.contains(expense):
            raise DuplicateRecordError(
                f"Expense already exists: {expense.name} on {expense.spent_on}"
            )
        self._expenses.append(expense)

    def replace(self, target: Expense, replacement: Expense) -> None:
        """
        Swap `target` for `replacement`, keeping its position.

        `replacement` may share `target`'s identity (an in-place edit),
        but not the identity of any other expense.

        Raises:
            RecordNotFoundError: If `target` is not in the list
            DuplicateRecordError: If `replacement` collides with another expense
        """
        index = self._index_of(target)
        if index < 0:
            raise RecordNotFoundError(
                f"Expense not found: {target.name} on {target.spent_on}"
            )
        if not is_same_expense(target, replacement) and self.contains(replacement):
            raise DuplicateRecordError(
                f"Expense already exists: {replacement.name} on {replacement.spent_on}"
            )
        self._expenses[index] = replacement

    def remove(self, expense: Expense) -> None:
        """
        Remove the expense with the same identity as `expense`.

        Raises:
            RecordNotFoundError: If no such expense exists
        """
        index = self._index_of(expense)
        if index < 0:
            raise RecordNotFoundError(
                f"Expense not found: {expense.name} on {expense.spent_on}"
            )
        del self._expenses[index]

    def replace_all(self, expenses: Iterable[Expense]) -> None:
        """
        Replace the whole contents of the list.

        Raises:
            DuplicateRecordError: If `expenses` itself contains duplicates.
                                  The list is left unchanged.
        """
        incoming = list(expenses)
        seen = set()
        for expense in incoming:
            key = expense_identity(expense)
            if key in seen:
                raise DuplicateRecordError(
                    f"Duplicate expense in input: {expense.name} on {expense.spent_on}"
                )
            seen.add(key)
        self._expenses = incoming

    def view(self) -> ExpenseListView:
        """Live read-only view of the list."""
        return ExpenseListView(self)

    def copy(self) -> "UniqueExpenseList":
        # Expenses are frozen, a shallow copy is independent
        return UniqueExpenseList(self._expenses)

    def _index_of(self, expense: Expense) -> int:
        key = expense_identity(expense)
        for index, existing in enumerate(self._expenses):
            if expense_identity(existing) == key:
                return index
        return -1

    def __contains__(self, expense: object) -> bool:
        return isinstance(expense, Expense) and self.contains(expense)

    def __iter__(self) -> Iterator[Expense]:
        return iter(list(self._expenses))

    def __len__(self) -> int:
        return len(self._expenses)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UniqueExpenseList):
            return NotImplemented
        return self._expenses == other._expenses

    def __repr__(self) -> str:
        return f"{len(self._expenses)} expenses"
