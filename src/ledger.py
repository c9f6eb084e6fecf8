import logging
from decimal import DecimalException, localcontext
from typing import assert_never

from account_store import AccountStore
from errors import AmountOverflowError, MissingAmountError
from journal import TransactionJournal
from models import AMOUNT_CONTEXT, Transaction, TransactionType, ClientAccount, JournalEntry, ApplyResult, LedgerPolicy

logger = logging.getLogger(__name__)


class LedgerEngine:
    """
    Applies transactions to an account store and journal owned by the caller.
    Transactions must be applied one at a time, in input order.
    """

    def __init__(self, accounts: AccountStore, journal: TransactionJournal, policy: LedgerPolicy = LedgerPolicy()):
        self._accounts = accounts
        self._journal = journal
        self._policy = policy

    @property
    def policy(self) -> LedgerPolicy:
        return self._policy

    def apply(self, transaction: Transaction) -> ApplyResult:
        """
        Apply a single transaction.

        Returns:
            APPLIED: Balances and/or journal were updated
            IGNORED_UNKNOWN_REFERENCE: Meta transaction names a tx that was never journaled
            IGNORED_NOT_DISPUTED: Resolve or chargeback on a tx that is not disputed
            IGNORED_DUPLICATE: Reused deposit/withdrawal id (reject_duplicate_ids only)
            IGNORED_LOCKED: Account is locked (freeze_locked_accounts only)

        Raises:
            MissingAmountError: Deposit or withdrawal without an amount
            AmountOverflowError: A balance would need more than AMOUNT_PRECISION digits
        """
        if transaction.transaction_type.is_standard and transaction.amount is None:
            raise MissingAmountError(transaction)

        if self._policy.freeze_locked_accounts:
            existing = self._accounts.get(transaction.client_id)
            if existing is not None and existing.locked:
                logger.warning(f"{transaction!r}: account {transaction.client_id} is locked, skipping")
                return ApplyResult.IGNORED_LOCKED

        try:
            with localcontext(AMOUNT_CONTEXT):
                if transaction.transaction_type.is_standard:
                    return self._apply_standard(transaction)
                return self._apply_meta(transaction)
        except DecimalException as e:
            raise AmountOverflowError(f"{transaction!r} ({type(e).__name__})") from e

    def _apply_standard(self, transaction: Transaction) -> ApplyResult:
        account = self._accounts.get_or_create(transaction.client_id)

        if self._policy.reject_duplicate_ids and transaction.transaction_id in self._journal:
            logger.warning(f"{transaction!r}: tx id already used, skipping")
            return ApplyResult.IGNORED_DUPLICATE

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                account.credit(transaction.amount)
            case TransactionType.WITHDRAWAL:
                account.debit(transaction.amount)
            case TransactionType.DISPUTE | TransactionType.RESOLVE | TransactionType.CHARGEBACK:
                raise ValueError(f"{transaction!r} is not a deposit or withdrawal")
            case _:
                assert_never(transaction.transaction_type)

        self._journal.record(
            transaction.transaction_id,
            transaction.client_id,
            transaction.transaction_type,
            transaction.amount,
        )
        return ApplyResult.APPLIED

    def _apply_meta(self, transaction: Transaction) -> ApplyResult:
        # Any reference to a client opens its account, even when the tx is unknown.
        account = self._accounts.get_or_create(transaction.client_id)
        entry = self._journal.get(transaction.transaction_id)

        if entry is None:
            logger.info(f"{transaction!r}: referenced tx not found, ignoring")
            return ApplyResult.IGNORED_UNKNOWN_REFERENCE

        if entry.client_id != transaction.client_id:
            logger.info(f"{transaction!r}: referenced tx belongs to client {entry.client_id}, applying to stated client")

        match transaction.transaction_type:
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, entry, transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(account, entry, transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(account, entry, transaction)
            case TransactionType.DEPOSIT | TransactionType.WITHDRAWAL:
                raise ValueError(f"{transaction!r} is not a meta transaction")
            case _:
                assert_never(transaction.transaction_type)

    def _handle_dispute(self, account: ClientAccount, entry: JournalEntry, transaction: Transaction) -> ApplyResult:
        # Not guarded against repeats: disputing twice holds the amount twice.
        if entry.disputed:
            logger.info(f"{transaction!r}: tx already disputed, holding again")

        account.hold(entry.amount)
        self._journal.mark_disputed(transaction.transaction_id, True)
        return ApplyResult.APPLIED

    def _handle_resolve(self, account: ClientAccount, entry: JournalEntry, transaction: Transaction) -> ApplyResult:
        if not entry.disputed:
            logger.info(f"{transaction!r}: tx is not disputed, ignoring")
            return ApplyResult.IGNORED_NOT_DISPUTED

        account.release_hold(entry.amount)
        if self._policy.reset_dispute_on_resolve:
            self._journal.mark_disputed(transaction.transaction_id, False)
        return ApplyResult.APPLIED

    def _handle_chargeback(self, account: ClientAccount, entry: JournalEntry, transaction: Transaction) -> ApplyResult:
        if not entry.disputed:
            logger.info(f"{transaction!r}: tx is not disputed, ignoring")
            return ApplyResult.IGNORED_NOT_DISPUTED

        account.remove_held(entry.amount)
        account.lock()
        return ApplyResult.APPLIED
