"""
Money Handling Module

Parses and rounds monetary amounts with proper Decimal precision.
NEVER uses float for monetary values.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN, getcontext, localcontext
import re

# Set global decimal context for financial precision
getcontext().prec = 28

ZERO = Decimal('0')

# Fractional digits in the account summary
OUTPUT_PRECISION = 4

# Optional sign, digits, optional fraction. No exponents, separators or NaN/Infinity.
PLAIN_DECIMAL = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)")


def decimal_from_string(value: str) -> Decimal:
    """
    Convert a plain decimal string to Decimal

    Args:
        value: String representation of number, e.g. "1.5" or "-0.0001"

    Returns:
        Decimal value

    Raises:
        ValueError: If string is empty or not a plain decimal number
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Value must be a non-empty string")

    if not PLAIN_DECIMAL.fullmatch(value.strip()):
        raise ValueError(f"Cannot convert '{value}' to Decimal")

    try:
        return Decimal(value.strip())
    except InvalidOperation:
        raise ValueError(f"Cannot convert '{value}' to Decimal")


def round_half_even(value: Decimal, places: int = OUTPUT_PRECISION) -> Decimal:
    """
    Round to a fixed number of fractional digits using banker's rounding

    Args:
        value: Decimal to round
        places: Number of fractional digits to keep

    Returns:
        Decimal with exactly ``places`` fractional digits
    """
    if places < 0:
        raise ValueError("places must be non-negative")
    # Room for every integer digit plus the fraction, beyond the global precision
    digits = max(value.adjusted() + 1, 1) + places
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, digits + 1)
        return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_EVEN)


def format_amount(value: Decimal, places: int = OUTPUT_PRECISION) -> str:
    """Format for output, e.g. Decimal('1.5') -> '1.5000'"""
    rounded = round_half_even(value, places)
    if rounded.is_zero():
        rounded = rounded.copy_abs()  # no "-0.0000"
    return f"{rounded:f}"
