"""
Account Summary Module

Projects the account book into per-client summaries and writes them as CSV.
Rounding to the output precision happens here and nowhere else.
"""

import csv
from decimal import Decimal
from dataclasses import dataclass
from typing import Dict, Iterable, List, TextIO

from .accounts import AccountBook
from .currency import OUTPUT_PRECISION, format_amount, round_half_even

HEADERS = ["client", "available", "held", "total", "locked"]


@dataclass(frozen=True)
class AccountSummary:
    """Final state of one client account, rounded for output"""
    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool

    def to_row(self, precision: int = OUTPUT_PRECISION) -> Dict[str, str]:
        """Convert to a CSV row with fixed fractional digits and true/false literals"""
        return {
            "client": str(self.client_id),
            "available": format_amount(self.available, precision),
            "held": format_amount(self.held, precision),
            "total": format_amount(self.total, precision),
            "locked": "true" if self.locked else "false"
        }


def summarize(account_book: AccountBook, precision: int = OUTPUT_PRECISION) -> List[AccountSummary]:
    """
    Summarize every account ever opened, ordered by client id

    Balances are rounded half-to-even to ``precision`` fractional digits.
    """
    return [
        AccountSummary(
            client_id=account.client_id,
            available=round_half_even(account.available, precision),
            held=round_half_even(account.held, precision),
            total=round_half_even(account.total, precision),
            locked=account.locked
        )
        for account in account_book.accounts()
    ]


def write_summary_csv(
    summaries: Iterable[AccountSummary],
    output: TextIO,
    precision: int = OUTPUT_PRECISION
) -> int:
    """
    Write summaries as CSV with a header row

    Returns:
        Number of account rows written
    """
    writer = csv.DictWriter(output, fieldnames=HEADERS, lineterminator="\n")
    writer.writeheader()

    count = 0
    for summary in summaries:
        writer.writerow(summary.to_row(precision))
        count += 1
    return count
