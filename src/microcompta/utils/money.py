"""Decimal helpers for currency amounts and percentage rates."""

from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Optional, Union

Number = Union[Decimal, int, str, float]

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")
HALF = Decimal("0.5")


def to_decimal(value: Optional[Number]) -> Decimal:
    """Convert a stored or user-supplied value to Decimal.

    Floats go through ``str`` so that 0.1 becomes Decimal("0.1") rather than
    its binary expansion. ``None`` is treated as zero.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def apply_rate(amount: Number, rate: Number) -> Decimal:
    """Return ``amount * rate / 100``."""
    return to_decimal(amount) * to_decimal(rate) / HUNDRED


def round_cents(amount: Number) -> Decimal:
    """Round to 2 decimals, half away from zero."""
    rounded = to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    if rounded == ZERO:
        return ZERO.quantize(CENT)
    return rounded


def format_amount(amount: Number) -> str:
    """Format an amount as a fixed 2-decimal string (e.g. "1234.50")."""
    return str(round_cents(amount))


def round_whole(amount: Number) -> int:
    """Round to the nearest whole unit, halves rounding up (-2.5 -> -2)."""
    return int((to_decimal(amount) + HALF).to_integral_value(rounding=ROUND_FLOOR))


def amount_ttc(amount_ht: Number, tax_rate: Number) -> Decimal:
    """Amount including tax, rounded to cents."""
    ht = to_decimal(amount_ht)
    return round_cents(ht * (1 + to_decimal(tax_rate) / HUNDRED))
