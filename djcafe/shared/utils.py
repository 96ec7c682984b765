"""Shared utility functions."""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def round_price(value: Decimal | float | int) -> Decimal:
    """Round a price to a whole number of dinars (prices carry no decimals)."""
    return Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def to_cents(value: Decimal | float | int) -> Decimal:
    """Quantize a price to two decimal places."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def round_positive_price(value: Decimal | float | int) -> Decimal:
    """``round_price`` for form input; a price that rounds to zero is rejected."""
    rounded = round_price(value)
    if rounded <= 0:
        raise ValueError("Price must be at least 1 dinar")
    return rounded
