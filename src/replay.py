import logging
from typing import Dict, Iterable, TextIO

from account_store import AccountStore
from csv_codec import read_transactions
from journal import TransactionJournal
from ledger import LedgerEngine
from models import Transaction, ClientAccount, LedgerPolicy, ReplayStats

logger = logging.getLogger(__name__)


class ReplayEngine:
    """
    Replays a transaction stream over empty stores, one transaction at a time.
    The first LedgerError aborts the run.
    """

    def __init__(self, policy: LedgerPolicy = LedgerPolicy()):
        self._accounts = AccountStore()
        self._journal = TransactionJournal()
        self._ledger = LedgerEngine(self._accounts, self._journal, policy)
        self._stats = ReplayStats()

    @property
    def accounts(self) -> AccountStore:
        return self._accounts

    @property
    def journal(self) -> TransactionJournal:
        return self._journal

    @property
    def stats(self) -> ReplayStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Replaying transactions from {filepath}")
        with open(filepath, "r", newline="") as f:
            return self.process_stream(f)

    def process_stream(self, stream: TextIO) -> Dict[int, ClientAccount]:
        return self.process_transactions(read_transactions(stream))

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        for transaction in transactions:
            result = self._ledger.apply(transaction)
            self._stats.record(result)

        logger.info(
            f"Applied: {self._stats.applied}, "
            f"Ignored: {self._stats.ignored_total}, "
            f"Accounts: {len(self._accounts)}, "
            f"Journaled: {len(self._journal)}"
        )
        for result, count in self._stats.ignored.items():
            logger.info(f"  {result.value}: {count}")

        return self._accounts.as_dict()
