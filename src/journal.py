from decimal import Decimal
from typing import Dict, Optional

from models import JournalEntry, TransactionType


class TransactionJournal:
    """
    Deposits and withdrawals keyed by transaction id, kept for later
    dispute lookups. Entries are never removed.
    """

    def __init__(self):
        self._entries: Dict[int, JournalEntry] = {}

    def record(self, transaction_id: int, client_id: int, transaction_type: TransactionType, amount: Decimal) -> JournalEntry:
        """Insert or overwrite the entry for transaction_id. New entries start undisputed."""
        if not transaction_type.is_standard:
            raise ValueError(f"Only deposits and withdrawals are journaled, got {transaction_type.value}")

        entry = JournalEntry(client_id=client_id, transaction_type=transaction_type, amount=amount)
        self._entries[transaction_id] = entry
        return entry

    def get(self, transaction_id: int) -> Optional[JournalEntry]:
        return self._entries.get(transaction_id)

    def mark_disputed(self, transaction_id: int, disputed: bool) -> None:
        self._entries[transaction_id].disputed = disputed

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
