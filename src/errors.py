from typing import Optional

from models import Transaction


class LedgerError(Exception):
    """Base class for errors that abort a replay run."""


class MissingAmountError(LedgerError):
    def __init__(self, transaction: Transaction):
        self.transaction = transaction
        super().__init__(f"{transaction.transaction_type.value} tx {transaction.transaction_id} for client {transaction.client_id} has no amount")


class MalformedRowError(LedgerError):
    def __init__(self, reason: str, line_number: Optional[int] = None):
        self.reason = reason
        self.line_number = line_number
        if line_number is None:
            super().__init__(f"malformed row: {reason}")
        else:
            super().__init__(f"malformed row on line {line_number}: {reason}")


class AmountOverflowError(LedgerError):
    def __init__(self, message: str):
        super().__init__(f"amount cannot be represented exactly: {message}")
