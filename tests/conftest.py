"""Shared fixtures for Expense Tracker tests."""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import SecretStr

from expensetracker.models.expense import Expense
from expensetracker.services.crypto import LedgerCodec
from expensetracker.services.storage import FileLedgerStore


# Key derivation is slow by design; tests only need it to be correct
TEST_KDF_ITERATIONS = 1_000


@pytest.fixture
def secret():
    return SecretStr("correct horse battery staple")


@pytest.fixture
def codec():
    return LedgerCodec(kdf_iterations=TEST_KDF_ITERATIONS)


@pytest.fixture
def store(tmp_path, secret, codec):
    return FileLedgerStore(tmp_path / "ledgers", secret, codec=codec, load_workers=2)


@pytest.fixture
def lunch():
    return Expense(
        name="Lunch",
        amount=Decimal("12.50"),
        category="Food",
        spent_on=date(2024, 3, 4),
    )


@pytest.fixture
def taxi():
    return Expense(
        name="Taxi",
        amount=Decimal("23.00"),
        category="Transport",
        spent_on=date(2024, 3, 5),
        remark="Airport",
    )
