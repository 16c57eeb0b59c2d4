"""
Transaction Input Module

Reads the CSV transaction stream (``type, client, tx, amount``) and validates
each row with pydantic before it reaches the processor. Any malformed row
aborts the replay.
"""

import csv
import re
from decimal import Decimal
from pathlib import Path
from typing import Iterator, List, Optional, TextIO, Union

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .currency import decimal_from_string
from .transactions import (
    TransactionRecord, TransactionType, MAX_CLIENT_ID, MAX_TRANSACTION_ID
)

COLUMNS = ("type", "client", "tx", "amount")

UNSIGNED_INTEGER = re.compile(r"[0-9]+")


class MalformedRecordError(ValueError):
    """Input row that cannot be turned into a transaction"""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class InputSourceError(OSError):
    """Input file missing or unreadable"""


class TransactionRow(BaseModel):
    """One validated row of the transaction CSV"""
    type: TransactionType = Field(..., description="deposit, withdrawal, dispute, resolve or chargeback")
    client: int = Field(..., ge=0, le=MAX_CLIENT_ID)
    tx: int = Field(..., ge=0, le=MAX_TRANSACTION_ID)
    amount: Optional[Decimal] = Field(None, description="Required for deposits and withdrawals")

    @field_validator("client", "tx", mode="before")
    @classmethod
    def parse_unsigned(cls, value):
        if isinstance(value, str) and not UNSIGNED_INTEGER.fullmatch(value.strip()):
            raise ValueError(f"'{value}' is not an unsigned integer")
        return value

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        if isinstance(value, str):
            return decimal_from_string(value)
        return value

    @model_validator(mode="after")
    def check_amount(self) -> 'TransactionRow':
        if self.type.carries_amount:
            if self.amount is None:
                raise ValueError(f"{self.type.value} requires an amount")
        else:
            # The dispute family refers to an earlier transaction's amount
            self.amount = None
        return self

    def to_transaction(self) -> TransactionRecord:
        return TransactionRecord(
            transaction_id=self.tx,
            transaction_type=self.type,
            client_id=self.client,
            amount=self.amount
        )


def _describe_validation_error(error: ValidationError) -> str:
    problems = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail.get("loc", ())) or "row"
        problems.append(f"{location}: {detail.get('msg')}")
    return "; ".join(problems)


def parse_row(fields: List[str], line_number: Optional[int] = None) -> TransactionRecord:
    """
    Validate one CSV row and convert it to a transaction

    Args:
        fields: Raw column values in ``type, client, tx, amount`` order; the
            amount column may be omitted for dispute-family rows
        line_number: Line in the source, used in error messages

    Raises:
        MalformedRecordError: If the row is malformed
    """
    fields = [field.strip() for field in fields]
    if len(fields) not in (3, 4):
        raise MalformedRecordError(
            f"expected {len(COLUMNS)} columns, got {len(fields)}", line_number
        )

    try:
        row = TransactionRow(**dict(zip(COLUMNS, fields)))
    except ValidationError as e:
        raise MalformedRecordError(_describe_validation_error(e), line_number) from e

    return row.to_transaction()


def read_transactions(stream: TextIO) -> Iterator[TransactionRecord]:
    """
    Lazily parse transactions from a CSV stream with a header row

    Blank lines are skipped. Columns are read by position.

    Raises:
        MalformedRecordError: On the first malformed row
    """
    reader = csv.reader(stream)
    header_seen = False

    for fields in reader:
        if not fields or all(not field.strip() for field in fields):
            continue

        if not header_seen:
            header_seen = True
            continue

        yield parse_row(fields, reader.line_num)


def open_input(path: Union[str, Path]) -> TextIO:
    """
    Open the transaction file for reading

    Raises:
        InputSourceError: If the file does not exist or cannot be read
    """
    path = Path(path)
    if not path.is_file():
        raise InputSourceError(f"could not find the file in path {path}")

    try:
        return open(path, "r", newline="")
    except OSError as e:
        raise InputSourceError(f"could not read {path}: {e}") from e
