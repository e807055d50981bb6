"""Decimal helpers for monetary amounts.

Amounts are computed as ``Decimal`` with two fractional digits and stored on
aggregates as floats of the already-rounded value.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """Convert a stored amount (float, int, str or Decimal) to a 2-place Decimal."""
    if value is None:
        raise ValueError("Amount is missing")
    if isinstance(value, float):
        # repr of a float is the shortest string that round-trips
        value = repr(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def line_subtotal(price, quantity: int) -> Decimal:
    return (to_decimal(price) * quantity).quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(value) -> str:
    """Render an amount the way the API returns it, e.g. ``"110.00"``."""
    return str(to_decimal(value))
