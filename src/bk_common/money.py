"""Decimal money helpers.

Amounts are carried as exact ``Decimal`` values end to end (no float).
Rounding to cents happens only here, at presentation time.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Coerce a numeric input to Decimal; floats go through str to avoid binary noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_cents(value: Decimal) -> Decimal:
    """Round half-up to two decimals: Decimal('14.975') -> Decimal('14.98')."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def money_to_display(value: Decimal) -> str:
    """Format for humans: Decimal('1234.5') -> '$1,234.50', negatives as '-$12.00'."""
    rounded = round_cents(value)
    if rounded < 0:
        return f"-${-rounded:,.2f}"
    return f"${rounded:,.2f}"
