import csv
from decimal import Decimal, DecimalException, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional, TextIO

from errors import AmountOverflowError, MalformedRowError
from models import OUTPUT_CONTEXT, Transaction, TransactionType, ClientAccount

INPUT_COLUMNS = ("type", "client", "tx", "amount")
OUTPUT_COLUMNS = ("client", "available", "held", "total", "locked")

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

OUTPUT_PRECISION = Decimal("0.0001")


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """
    Decode a header-bearing CSV stream into transactions, lazily and in order.
    The first row that cannot be decoded raises MalformedRowError.
    """
    reader = csv.DictReader(stream)
    if reader.fieldnames is None:
        return

    headers = [name.strip().lower() for name in reader.fieldnames]
    missing = [column for column in INPUT_COLUMNS[:3] if column not in headers]
    if missing:
        raise MalformedRowError(f"header is missing column(s) {', '.join(missing)}", line_number=1)
    reader.fieldnames = headers

    try:
        for row in reader:
            yield parse_row(row, line_number=reader.line_num)
    except csv.Error as e:
        raise MalformedRowError(str(e), line_number=reader.line_num) from e


def parse_row(row: Dict[Optional[str], Optional[str]], line_number: Optional[int] = None) -> Transaction:
    """Parse CSV row into Transaction."""
    if None in row:
        raise MalformedRowError(f"too many fields: {row[None]}", line_number)

    normalized = {k: (v.strip() if v is not None else None) for k, v in row.items()}

    for column in INPUT_COLUMNS[:3]:
        if not normalized.get(column):
            raise MalformedRowError(f"missing value for '{column}'", line_number)

    transaction_type_str = normalized["type"].lower()
    try:
        transaction_type = TransactionType(transaction_type_str)
    except ValueError:
        raise MalformedRowError(f"unknown transaction type '{transaction_type_str}'", line_number) from None

    client_id = _parse_id(normalized["client"], "client", MAX_CLIENT_ID, line_number)
    transaction_id = _parse_id(normalized["tx"], "tx", MAX_TRANSACTION_ID, line_number)

    amount = None
    amount_str = normalized.get("amount") or ""
    if amount_str:
        try:
            amount = Decimal(amount_str)
        except InvalidOperation:
            raise MalformedRowError(f"invalid amount '{amount_str}'", line_number) from None
        if not amount.is_finite():
            raise MalformedRowError(f"invalid amount '{amount_str}'", line_number)

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_id(value: str, column: str, upper_bound: int, line_number: Optional[int]) -> int:
    if not (value.isascii() and value.isdigit()):
        raise MalformedRowError(f"'{column}' is not an integer: '{value}'", line_number)
    parsed = int(value)
    if parsed > upper_bound:
        raise MalformedRowError(f"'{column}' out of range: {parsed}", line_number)
    return parsed


def format_amount(value: Decimal) -> str:
    """Format decimal with exactly four fractional digits."""
    try:
        return f"{value.quantize(OUTPUT_PRECISION, context=OUTPUT_CONTEXT):f}"
    except DecimalException as e:
        raise AmountOverflowError(f"{value} ({type(e).__name__})") from e


def write_accounts(accounts: Iterable[ClientAccount], stream: TextIO) -> None:
    """Format every account first so a failure leaves the stream untouched."""
    rows = [
        [
            account.client_id,
            format_amount(account.available),
            format_amount(account.held),
            format_amount(account.total),
            str(account.locked).lower(),
        ]
        for account in accounts
    ]

    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_COLUMNS)
    writer.writerows(rows)
