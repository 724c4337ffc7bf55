"""
Money helpers for cart totals.

Prices arrive from the API as JSON numbers and are kept as Decimal inside the
client; floats only appear again when a cart is written to storage.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

Number = Union[str, int, float, Decimal, None]

# Totals are shown in rupees with paise
PAISE = Decimal("0.01")


def to_decimal(value: Number) -> Decimal:
    """
    Coerce a price-like value to Decimal.

    None and unparseable input become zero so a bad price never breaks
    totals for the rest of the cart.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value

    try:
        # str() first: Decimal(0.1) would carry the binary float error
        return Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def round_money(value: Number) -> Decimal:
    return to_decimal(value).quantize(PAISE, rounding=ROUND_HALF_UP)


def to_float(value: Number) -> float:
    """Float for JSON output only."""
    return float(to_decimal(value))


def subtract(a: Number, b: Number) -> Decimal:
    return to_decimal(a) - to_decimal(b)


def multiply(value: Number, factor: Number) -> Decimal:
    return to_decimal(value) * to_decimal(factor)
