"""
Test suite for account summaries

Tests rounding at output time and the CSV layout.
"""

import io
import pytest
from decimal import Decimal

from ledger_replay.accounts import AccountBook
from ledger_replay.reporting import AccountSummary, summarize, write_summary_csv


class TestSummarize:

    def setup_method(self):
        self.book = AccountBook()

    def test_empty_book(self):
        assert summarize(self.book) == []

    def test_rounds_half_to_even(self):
        account, _ = self.book.get_or_create(1)
        account.credit(Decimal("1.00005"))
        account.hold(Decimal("0.00015"))

        summary, = summarize(self.book)
        assert summary.available == Decimal("0.9999")
        assert summary.held == Decimal("0.0002")
        assert summary.total == Decimal("1.0000")
        # Account itself keeps full precision
        assert account.total == Decimal("1.00005")

    def test_sorted_by_client(self):
        for client_id in (3, 1, 2):
            self.book.get_or_create(client_id)

        assert [s.client_id for s in summarize(self.book)] == [1, 2, 3]

    def test_custom_precision(self):
        account, _ = self.book.get_or_create(1)
        account.credit(Decimal("2.125"))

        summary, = summarize(self.book, precision=2)
        assert summary.available == Decimal("2.12")


class TestWriteSummaryCsv:

    def test_layout(self):
        summaries = [
            AccountSummary(1, Decimal("1.5"), Decimal("0"), Decimal("1.5"), False),
            AccountSummary(2, Decimal("2"), Decimal("0"), Decimal("2"), True),
        ]
        output = io.StringIO()

        count = write_summary_csv(summaries, output)

        assert count == 2
        assert output.getvalue() == (
            "client,available,held,total,locked\n"
            "1,1.5000,0.0000,1.5000,false\n"
            "2,2.0000,0.0000,2.0000,true\n"
        )

    def test_header_only_when_empty(self):
        output = io.StringIO()
        assert write_summary_csv([], output) == 0
        assert output.getvalue() == "client,available,held,total,locked\n"

    def test_negative_available(self):
        row = AccountSummary(1, Decimal("-3"), Decimal("5"), Decimal("2"), False).to_row()
        assert row["available"] == "-3.0000"
