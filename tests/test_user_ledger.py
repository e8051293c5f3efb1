"""Tests for UserLedger and LedgerDocument."""

import pytest
from decimal import Decimal

from expensetracker.models.budget import AddCategoryBudget, BudgetLedger, SetTotalBudget
from expensetracker.models.errors import (
    CategoryBudgetExceedsTotalError,
    CategoryNotFoundError,
    DuplicateRecordError,
    RecordNotFoundError,
)
from expensetracker.models.ledger import (
    LEDGER_FORMAT_VERSION,
    CategoryPolicy,
    LedgerDocument,
    UserLedger,
)


@pytest.fixture
def ledger():
    ledger = UserLedger("alice")
    ledger.apply_budget_command(SetTotalBudget(cap=Decimal("100")))
    ledger.apply_budget_command(AddCategoryBudget(category="Food", cap=Decimal("60")))
    return ledger


class TestExpenseOperations:
    """Tests for expense operations on a ledger."""

    def test_record_expense(self, ledger, lunch):
        """Test that a recorded expense shows up in the view."""
        ledger.record_expense(lunch)
        assert list(ledger.expense_view()) == [lunch]
        assert ledger.total_spent == Decimal("12.50")

    def test_record_duplicate(self, ledger, lunch):
        """Test that the same expense cannot be recorded twice."""
        ledger.record_expense(lunch)
        with pytest.raises(DuplicateRecordError):
            ledger.record_expense(lunch)

    def test_unknown_category_permitted_by_default(self, ledger, taxi):
        """Test that categories without a budget are accepted under PERMIT."""
        ledger.record_expense(taxi)
        assert taxi in ledger.expenses

    def test_unknown_category_rejected(self, ledger, taxi):
        """Test that categories without a budget are refused under REJECT."""
        with pytest.raises(CategoryNotFoundError):
            ledger.record_expense(taxi, CategoryPolicy.REJECT)
        assert len(ledger.expenses) == 0

    def test_padded_budget_category_matches_expense(self, lunch):
        """Test that a budget added as ' Food ' covers a 'Food' expense under REJECT."""
        ledger = UserLedger("alice")
        ledger.budget.set_total_budget(Decimal("100"))
        ledger.budget.add_category_budget(" Food ", Decimal("60"))
        ledger.record_expense(lunch, CategoryPolicy.REJECT)
        assert lunch in ledger.expenses

    def test_edit_expense(self, ledger, lunch):
        """Test that editing replaces the expense."""
        ledger.record_expense(lunch)
        edited = lunch.edited(amount=Decimal("13.00"))
        ledger.edit_expense(lunch, edited)
        assert list(ledger.expense_view()) == [edited]

    def test_edit_missing_expense(self, ledger, lunch):
        """Test that editing an absent expense fails."""
        with pytest.raises(RecordNotFoundError):
            ledger.edit_expense(lunch, lunch.edited(name="Brunch"))

    def test_delete_expense(self, ledger, lunch):
        """Test that deleting removes the expense."""
        ledger.record_expense(lunch)
        ledger.delete_expense(lunch)
        assert len(ledger.expense_view()) == 0


class TestBudgetCommands:
    """Tests for budget commands routed through the ledger."""

    def test_rejected_budget_command(self, ledger):
        """Test that a rejected command leaves the budget as it was."""
        before = ledger.copy()
        with pytest.raises(CategoryBudgetExceedsTotalError):
            ledger.apply_budget_command(AddCategoryBudget(category="Rent", cap=Decimal("50")))
        assert ledger == before


class TestCopy:
    """Tests for ledger copies."""

    def test_copy_is_independent(self, ledger, lunch):
        """Test that a working copy does not leak into the original."""
        working = ledger.copy()
        working.record_expense(lunch)
        working.apply_budget_command(SetTotalBudget(cap=Decimal("500")))
        assert len(ledger.expenses) == 0
        assert ledger.budget.total_budget == Decimal("100.00")

    def test_renamed(self, ledger, lunch):
        """Test that renaming keeps the data under a new username."""
        ledger.record_expense(lunch)
        renamed = ledger.renamed("alicia")
        assert renamed.username == "alicia"
        assert list(renamed.expenses) == [lunch]
        assert renamed.budget == ledger.budget

    def test_invalid_username(self):
        """Test that ledgers require a valid username."""
        with pytest.raises(ValueError):
            UserLedger("not valid")


class TestDocument:
    """Tests for the serialised ledger document."""

    def test_document_round_trip(self, ledger, lunch, taxi):
        """Test that a ledger survives conversion to a document and back."""
        ledger.record_expense(lunch)
        ledger.record_expense(taxi)
        document = ledger.to_document()
        assert document.version == LEDGER_FORMAT_VERSION
        assert UserLedger.from_document(document) == ledger

    def test_old_document_shape(self):
        """Test that documents without version or budgets get defaults."""
        document = LedgerDocument.model_validate({
            "username": "bob",
            "expenses": [{
                "name": "Tea",
                "amount": "2.5",
                "category": "Food",
                "spent_on": "2024-01-02",
            }],
        })
        ledger = UserLedger.from_document(document)
        assert ledger.budget == BudgetLedger()
        assert ledger.expenses.view()[0].amount == Decimal("2.50")

    def test_future_version_rejected(self):
        """Test that unknown future versions are refused."""
        with pytest.raises(ValueError, match="Unsupported ledger version"):
            LedgerDocument(version=LEDGER_FORMAT_VERSION + 1, username="bob")

    def test_document_breaking_invariant(self, lunch):
        """Test that from_document refuses duplicate expenses."""
        document = LedgerDocument(username="bob", expenses=[lunch, lunch])
        with pytest.raises(DuplicateRecordError):
            UserLedger.from_document(document)
