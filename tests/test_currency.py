"""
Test suite for currency module

Tests amount parsing and banker's rounding for the account summary.
All monetary calculations must use Decimal precision.
"""

import pytest
from decimal import Decimal

from ledger_replay.currency import (
    decimal_from_string, round_half_even, format_amount, OUTPUT_PRECISION
)


class TestDecimalFromString:
    """Test parsing of amount strings"""

    def test_plain_amounts(self):
        """Test parsing valid decimal strings"""
        assert decimal_from_string("1.5") == Decimal("1.5")
        assert decimal_from_string("  2.0001 ") == Decimal("2.0001")
        assert decimal_from_string("10") == Decimal("10")
        assert decimal_from_string("-0.25") == Decimal("-0.25")

    def test_no_float_drift(self):
        """Test that many small amounts add up exactly"""
        total = sum((decimal_from_string("0.1") for _ in range(10)), Decimal("0"))
        assert total == Decimal("1.0")

    @pytest.mark.parametrize("value", ["", "   ", "abc", "1.2.3", "1,5"])
    def test_invalid_amounts(self, value):
        """Test that malformed strings are rejected"""
        with pytest.raises(ValueError):
            decimal_from_string(value)

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "-inf"])
    def test_non_finite_amounts(self, value):
        """Test that NaN and infinities are rejected"""
        with pytest.raises(ValueError, match="Cannot convert"):
            decimal_from_string(value)

    @pytest.mark.parametrize("value", ["1e3", "1E-2", "1_000", "0x10", "1.5e0"])
    def test_only_plain_notation(self, value):
        """Test that exponents, separators and other notations are rejected"""
        with pytest.raises(ValueError, match="Cannot convert"):
            decimal_from_string(value)

    def test_partial_fractions(self):
        assert decimal_from_string(".5") == Decimal("0.5")
        assert decimal_from_string("+2.") == Decimal("2")

    def test_non_string_rejected(self):
        with pytest.raises(ValueError):
            decimal_from_string(None)


class TestRounding:
    """Test banker's rounding at output precision"""

    def test_default_precision(self):
        assert OUTPUT_PRECISION == 4
        assert round_half_even(Decimal("1.5")) == Decimal("1.5000")

    def test_half_to_even(self):
        """Test ties round to the even digit"""
        assert round_half_even(Decimal("0.00005")) == Decimal("0.0000")
        assert round_half_even(Decimal("0.00015")) == Decimal("0.0002")
        assert round_half_even(Decimal("0.00025")) == Decimal("0.0002")
        assert round_half_even(Decimal("2.5"), 0) == Decimal("2")
        assert round_half_even(Decimal("3.5"), 0) == Decimal("4")

    def test_non_ties_round_normally(self):
        assert round_half_even(Decimal("1.23456")) == Decimal("1.2346")
        assert round_half_even(Decimal("1.23454")) == Decimal("1.2345")

    def test_negative_places_rejected(self):
        with pytest.raises(ValueError):
            round_half_even(Decimal("1"), -1)

    def test_format_amount(self):
        """Test formatting with fixed fractional digits"""
        assert format_amount(Decimal("5")) == "5.0000"
        assert format_amount(Decimal("1.23456")) == "1.2346"
        assert format_amount(Decimal("1E+2")) == "100.0000"
        assert format_amount(Decimal("-0.00001")) == "0.0000"
        assert format_amount(Decimal("2.5"), 2) == "2.50"

    def test_large_balances(self):
        """Test values with more integer digits than the global precision still round"""
        assert round_half_even(Decimal("1000000000000000000000000")) == Decimal("1000000000000000000000000.0000")
        assert format_amount(Decimal("79228162514264337593543950335.00005")) == "79228162514264337593543950335.0000"
        assert format_amount(Decimal("-12345678901234567890123456789.12345")) == "-12345678901234567890123456789.1234"
