"""Tests for the encrypted file ledger store."""

import os

import pytest
from decimal import Decimal

from expensetracker.models.budget import SetTotalBudget
from expensetracker.models.ledger import UserLedger
from expensetracker.services.crypto import InvalidKeyError, MalformedLedgerError
from expensetracker.services.storage import (
    LEDGER_SUFFIX,
    FileLedgerStore,
    StorageError,
    UserAlreadyExistsError,
    UserNotFoundError,
    ledger_filename,
)


def _ledger(username, *expenses):
    ledger = UserLedger(username)
    for expense in expenses:
        ledger.record_expense(expense)
    return ledger


class TestFileNames:
    """Tests for ledger file naming."""

    def test_filename_is_stable_and_opaque(self):
        """Test that the file name is derived from, but does not reveal, the username."""
        name = ledger_filename("alice")
        assert name == ledger_filename("alice")
        assert name.endswith(LEDGER_SUFFIX)
        assert "alice" not in name

    def test_filename_is_case_sensitive(self):
        """Test that usernames differing only in case get different files."""
        assert ledger_filename("Alice") != ledger_filename("alice")


class TestSaveAndLoad:
    """Tests for saving and loading ledgers."""

    def test_load_missing_directory(self, store):
        """Test that a missing directory means no ledgers."""
        assert store.load_all() == {}

    def test_save_then_load(self, store, lunch, taxi):
        """Test that saved ledgers are loaded back."""
        alice = _ledger("alice", lunch)
        bob = _ledger("bob", taxi)
        store.save(alice)
        store.save(bob)

        loaded = store.load_all()
        assert loaded == {"alice": alice, "bob": bob}

    def test_save_replaces_previous_version(self, store, lunch, taxi):
        """Test that saving again overwrites the ledger."""
        ledger = _ledger("alice", lunch)
        store.save(ledger)
        ledger.record_expense(taxi)
        store.save(ledger)
        assert len(store.load_all()["alice"].expenses) == 2

    def test_save_leaves_no_temporary_files(self, store, lunch):
        """Test that an atomic save cleans up after itself."""
        store.save(_ledger("alice", lunch))
        names = os.listdir(store.directory)
        assert names == [ledger_filename("alice")]

    def test_files_contain_no_plaintext(self, store, lunch):
        """Test that nothing readable about the expenses is written."""
        store.save(_ledger("alice", lunch))
        data = store.path_for("alice").read_bytes()
        assert b"Lunch" not in data
        assert b"12.50" not in data

    def test_failed_write_keeps_previous_version(self, store, lunch, taxi, monkeypatch):
        """Test that a failing write raises StorageError and keeps the old blob."""
        store.save(_ledger("alice", lunch))
        before = store.path_for("alice").read_bytes()

        def fail(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", fail)
        with pytest.raises(StorageError):
            store.save(_ledger("alice", lunch, taxi))
        monkeypatch.undo()

        assert store.path_for("alice").read_bytes() == before
        assert os.listdir(store.directory) == [ledger_filename("alice")]


class TestDegradedLoad:
    """Tests for skipping unreadable ledgers."""

    def test_corrupted_ledger_is_skipped(self, store, lunch, taxi):
        """Test that one corrupted blob out of three does not block the others."""
        store.save(_ledger("alice", lunch))
        store.save(_ledger("bob", taxi))
        store.save(_ledger("carol"))

        path = store.path_for("carol")
        data = bytearray(path.read_bytes())
        # Flip a byte inside the base64 ciphertext
        index = data.index(b'"ciphertext":"') + len(b'"ciphertext":"') + 2
        data[index] = ord("A") if data[index] != ord("A") else ord("B")
        path.write_bytes(bytes(data))

        skipped = []
        loaded = store.load_all(on_skip=lambda p, e: skipped.append((p, e)))

        assert sorted(loaded) == ["alice", "bob"]
        assert len(skipped) == 1
        assert skipped[0][0] == path
        assert isinstance(skipped[0][1], InvalidKeyError)

    def test_garbage_file_is_skipped(self, store, lunch):
        """Test that a non-blob file is reported as malformed."""
        store.save(_ledger("alice", lunch))
        (store.directory / ("0" * 32 + LEDGER_SUFFIX)).write_bytes(b"garbage")

        skipped = []
        loaded = store.load_all(on_skip=lambda p, e: skipped.append(e))
        assert list(loaded) == ["alice"]
        assert isinstance(skipped[0], MalformedLedgerError)

    def test_wrong_secret_skips_everything(self, store, codec, lunch):
        """Test that another installation secret reads nothing."""
        store.save(_ledger("alice", lunch))
        other = FileLedgerStore(store.directory, "a different secret", codec=codec)

        skipped = []
        assert other.load_all(on_skip=lambda p, e: skipped.append(e)) == {}
        assert isinstance(skipped[0], InvalidKeyError)

    def test_misplaced_blob_is_skipped(self, store, lunch):
        """Test that a blob copied under another user's file name is refused."""
        store.save(_ledger("alice", lunch))
        os.replace(store.path_for("alice"), store.directory / ledger_filename("mallory"))

        skipped = []
        assert store.load_all(on_skip=lambda p, e: skipped.append(e)) == {}
        assert isinstance(skipped[0], MalformedLedgerError)

    def test_other_files_are_ignored(self, store, lunch):
        """Test that only *.ledger files are considered."""
        store.save(_ledger("alice", lunch))
        (store.directory / "notes.txt").write_text("hello")
        assert list(store.load_all()) == ["alice"]


class TestUserLifecycle:
    """Tests for create, delete and rename."""

    def test_create_if_absent(self, store):
        """Test that a new user gets an empty persisted ledger."""
        ledger = store.create_if_absent("alice")
        assert ledger == UserLedger("alice")
        assert store.exists("alice")

    def test_create_existing_user(self, store):
        """Test that an existing user cannot be created again."""
        store.create_if_absent("alice")
        with pytest.raises(UserAlreadyExistsError):
            store.create_if_absent("alice")

    def test_delete(self, store):
        """Test that deleting removes the blob."""
        store.create_if_absent("alice")
        store.delete("alice")
        assert not store.exists("alice")
        assert store.load_all() == {}

    def test_delete_missing_user(self, store):
        """Test that deleting an unknown user fails."""
        with pytest.raises(UserNotFoundError):
            store.delete("nobody")

    def test_rename(self, store, lunch):
        """Test that rename moves the ledger to the new username."""
        ledger = _ledger("alice", lunch)
        ledger.apply_budget_command(SetTotalBudget(cap=Decimal("50")))
        store.save(ledger)

        renamed = store.rename(ledger, "alicia")
        assert renamed.username == "alicia"
        assert not store.exists("alice")
        assert store.load_all() == {"alicia": renamed}
        assert renamed.budget.total_budget == Decimal("50.00")

    def test_rename_to_existing_user(self, store):
        """Test that rename refuses to overwrite another user."""
        alice = store.create_if_absent("alice")
        store.create_if_absent("bob")
        with pytest.raises(UserAlreadyExistsError):
            store.rename(alice, "bob")
        assert store.exists("alice")

    def test_rename_missing_user(self, store):
        """Test that renaming an unsaved ledger fails."""
        with pytest.raises(UserNotFoundError):
            store.rename(UserLedger("ghost"), "phantom")
