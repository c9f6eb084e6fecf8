import sys
import os
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from account_store import AccountStore
from journal import TransactionJournal
from models import TransactionType


class TestTransactionJournal:
    def test_record_and_get(self):
        journal = TransactionJournal()
        journal.record(1, 5, TransactionType.DEPOSIT, Decimal("10"))

        entry = journal.get(1)
        assert entry.client_id == 5
        assert entry.transaction_type == TransactionType.DEPOSIT
        assert entry.amount == Decimal("10")
        assert entry.disputed is False
        assert 1 in journal
        assert len(journal) == 1

    def test_get_missing(self):
        journal = TransactionJournal()
        assert journal.get(42) is None
        assert 42 not in journal

    def test_record_overwrites(self):
        journal = TransactionJournal()
        journal.record(1, 1, TransactionType.DEPOSIT, Decimal("10"))
        journal.mark_disputed(1, True)
        journal.record(1, 2, TransactionType.WITHDRAWAL, Decimal("3"))

        entry = journal.get(1)
        assert entry.client_id == 2
        assert entry.transaction_type == TransactionType.WITHDRAWAL
        assert entry.amount == Decimal("3")
        assert entry.disputed is False
        assert len(journal) == 1

    def test_mark_disputed(self):
        journal = TransactionJournal()
        journal.record(1, 1, TransactionType.DEPOSIT, Decimal("10"))

        journal.mark_disputed(1, True)
        assert journal.get(1).disputed is True

        journal.mark_disputed(1, False)
        assert journal.get(1).disputed is False

    def test_mark_disputed_unknown(self):
        journal = TransactionJournal()
        with pytest.raises(KeyError):
            journal.mark_disputed(1, True)

    @pytest.mark.parametrize("transaction_type", [TransactionType.DISPUTE, TransactionType.RESOLVE, TransactionType.CHARGEBACK])
    def test_meta_transactions_rejected(self, transaction_type):
        journal = TransactionJournal()
        with pytest.raises(ValueError):
            journal.record(1, 1, transaction_type, Decimal("10"))
        assert len(journal) == 0


class TestAccountStore:
    def test_get_or_create_initializes_empty_account(self):
        store = AccountStore()
        account = store.get_or_create(3)

        assert account.client_id == 3
        assert account.available == Decimal("0")
        assert account.held == Decimal("0")
        assert account.total == Decimal("0")
        assert account.locked is False

    def test_get_or_create_returns_same_account(self):
        store = AccountStore()
        first = store.get_or_create(1)
        first.credit(Decimal("5"))

        assert store.get_or_create(1) is first
        assert len(store) == 1

    def test_get_does_not_create(self):
        store = AccountStore()
        assert store.get(1) is None
        assert 1 not in store
        assert len(store) == 0

    def test_snapshot_sorted_by_client(self):
        store = AccountStore()
        for client_id in (9, 2, 5):
            store.get_or_create(client_id)

        assert [account.client_id for account in store.snapshot()] == [2, 5, 9]

    def test_as_dict_is_a_copy(self):
        store = AccountStore()
        store.get_or_create(1)

        accounts = store.as_dict()
        accounts.pop(1)
        assert 1 in store
