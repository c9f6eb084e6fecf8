from dataclasses import dataclass, field
from decimal import Context, Decimal, DivisionByZero, Inexact, InvalidOperation, Overflow
from enum import Enum
from typing import Dict, Optional

# Balances are summed exactly: any addition that would need more than
# AMOUNT_PRECISION significant digits raises Inexact instead of rounding.
AMOUNT_PRECISION = 1000
AMOUNT_CONTEXT = Context(prec=AMOUNT_PRECISION, traps=[InvalidOperation, Inexact, Overflow, DivisionByZero])

# Output rounds to four fractional digits, so only lost integer digits are fatal.
OUTPUT_CONTEXT = Context(prec=AMOUNT_PRECISION, traps=[InvalidOperation, Overflow])


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def is_standard(self) -> bool:
        """Deposits and withdrawals move funds directly and are journaled."""
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ApplyResult(Enum):
    APPLIED = "applied"
    IGNORED_UNKNOWN_REFERENCE = "ignored_unknown_reference"
    IGNORED_NOT_DISPUTED = "ignored_not_disputed"
    IGNORED_DUPLICATE = "ignored_duplicate"
    IGNORED_LOCKED = "ignored_locked"


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class ClientAccount:
    """
    Balances for one client.
    total is stored rather than derived; every mutator touches exactly the
    two fields it needs so that total == available + held after each call.
    """

    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    locked: bool = False

    def credit(self, amount: Decimal) -> None:
        self.available += amount
        self.total += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount
        self.total -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount
        self.total -= amount

    def lock(self) -> None:
        self.locked = True


@dataclass
class JournalEntry:
    client_id: int
    transaction_type: TransactionType
    amount: Decimal
    disputed: bool = False


@dataclass(frozen=True)
class LedgerPolicy:
    """
    Switches for behaviour the ledger leaves open.

    The defaults replay transactions exactly as they arrive:
      - a resolved transaction keeps its disputed flag
      - a repeated deposit/withdrawal id overwrites the journal entry
      - locked accounts keep accepting transactions
    """

    reset_dispute_on_resolve: bool = False
    reject_duplicate_ids: bool = False
    freeze_locked_accounts: bool = False


@dataclass
class ReplayStats:
    applied: int = 0
    ignored: Dict[ApplyResult, int] = field(default_factory=dict)

    def record(self, result: ApplyResult) -> None:
        if result == ApplyResult.APPLIED:
            self.applied += 1
        else:
            self.ignored[result] = self.ignored.get(result, 0) + 1

    @property
    def ignored_total(self) -> int:
        return sum(self.ignored.values())
