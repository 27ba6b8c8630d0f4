"""
Statement Parser - Record classifier and extractor for card-management extracts.

An extract is a flattened hierarchical export: every line is a pipe-delimited
record whose field 3 names the record type.

    1  account header and balances
    2  customer name and address
    3  (skipped)
    4  transaction, or a "NEWL" line-wrap continuation
    5  (skipped)
    6  end of customer data; anything after it is trailer noise

Unknown record types are ignored so newer extracts still parse.
"""

import logging
import re
from pathlib import Path
from typing import Callable, Optional, TypeVar, Union

from .errors import StatementParseError
from .models import StatementRecord, Transaction
from .normalizers import normalize_date, normalize_scaled_amount, normalize_signed_decimal

logger = logging.getLogger(__name__)

T = TypeVar("T")

DELIMITER = "|"
CARD_PREFIX_LENGTH = 3
CONTINUATION_MARKER = "NEWL"

_LINE_BREAK = re.compile(r"\r?\n")


class RecordType:
    """Discriminator values found in field 3."""

    ACCOUNT = "1"
    CUSTOMER = "2"
    TRANSACTION = "4"
    END_OF_CUSTOMER = "6"
    SKIPPED = ("3", "5")


class Row:
    """One extract line split into trimmed fields."""

    def __init__(self, line_number: int, line: str):
        self.line_number = line_number
        self.fields = [value.strip() for value in line.split(DELIMITER)]

    def get(self, index: int) -> str:
        if index >= len(self.fields):
            raise StatementParseError(
                f"Record has {len(self.fields)} fields, field {index} missing",
                line_number=self.line_number,
                field_index=index,
            )
        return self.fields[index]

    def read(self, index: int, normalizer: Callable[[str], T]) -> T:
        raw = self.get(index)
        try:
            return normalizer(raw)
        except ValueError as e:
            raise StatementParseError(
                str(e), line_number=self.line_number, field_index=index
            ) from e


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` / ``\\r\\n``, dropping trailing empty lines."""
    lines = _LINE_BREAK.split(text)
    while lines and lines[-1] == "":
        lines.pop()
    return lines


def _apply_account(row: Row, record: StatementRecord) -> None:
    record.org_id = row.get(0)
    record.statement_date = row.read(14, normalize_date)

    card_field = row.get(2)
    if len(card_field) < CARD_PREFIX_LENGTH:
        raise StatementParseError(
            f"Card number {card_field!r} shorter than its prefix",
            line_number=row.line_number,
            field_index=2,
        )
    record.card_number = card_field[CARD_PREFIX_LENGTH:]

    record.current_balance = row.read(12, normalize_signed_decimal)
    record.opening_balance = row.read(45, normalize_signed_decimal)
    record.total_credits = row.read(41, normalize_signed_decimal)
    record.total_debits = row.read(43, normalize_signed_decimal)
    record.available_balance = row.read(27, normalize_scaled_amount)


def _apply_customer(row: Row, record: StatementRecord) -> None:
    record.name = row.get(5)
    # empty parts still contribute their separating space
    record.address = " ".join(row.get(i) for i in (6, 7, 8, 82))


def _build_transaction(row: Row) -> Optional[Transaction]:
    description = row.get(22)
    if description == CONTINUATION_MARKER:
        return None

    return Transaction(
        date=row.read(4, normalize_date),
        post_date=row.read(10, normalize_date),
        description=description,
        amount=row.read(57, normalize_scaled_amount),
        settlement_amount=row.read(7, normalize_scaled_amount),
        currency=row.get(56),
        is_credit=Transaction.is_credit_description(description),
    )


def parse_statement(text: str) -> StatementRecord:
    """Parse the full text of one extract into a StatementRecord.

    Raises:
        StatementParseError: a record is missing a field or holds a value
            the normalizers reject.
    """
    record = StatementRecord()

    for line_number, line in enumerate(split_lines(text), start=1):
        row = Row(line_number, line)
        record_type = row.get(3)

        if record_type == RecordType.ACCOUNT:
            _apply_account(row, record)
        elif record_type == RecordType.CUSTOMER:
            _apply_customer(row, record)
        elif record_type == RecordType.TRANSACTION:
            transaction = _build_transaction(row)
            if transaction is not None:
                record.add_transaction(transaction)
        elif record_type == RecordType.END_OF_CUSTOMER:
            logger.debug("End of customer data at line %d", line_number)
            break
        elif record_type in RecordType.SKIPPED:
            continue
        else:
            logger.debug("Ignoring record type %r at line %d", record_type, line_number)

    return record


def parse_statement_bytes(data: bytes, encoding: str = "utf-8") -> StatementRecord:
    """Decode raw extract bytes and parse them."""
    try:
        text = data.decode(encoding)
    except UnicodeDecodeError as e:
        raise StatementParseError(f"Extract is not valid {encoding}: {e}") from e
    return parse_statement(text)


def parse_statement_file(path: Union[str, Path]) -> StatementRecord:
    """Parse an extract stored on disk."""
    return parse_statement_bytes(Path(path).read_bytes())
