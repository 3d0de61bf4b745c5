"""
Money helpers.

Every amount in the ledger is a Decimal rounded to cents with
ROUND_HALF_UP. Comparisons that the bookkeeping rules describe
as "equal" allow one cent of slack (TOLERANCE).
"""

from decimal import Decimal, ROUND_HALF_UP

ZERO = Decimal("0.00")
CENT = Decimal("0.01")
TOLERANCE = Decimal("0.01")


def to_money(value) -> Decimal:
    """Coerce int/float/str/Decimal to a cent-rounded Decimal."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def amounts_match(a, b) -> bool:
    """True when two amounts differ by less than one cent."""
    return abs(Decimal(a) - Decimal(b)) < TOLERANCE


def fmt(value) -> str:
    """Two-decimal string used in user-facing messages."""
    return f"{to_money(value):.2f}"
