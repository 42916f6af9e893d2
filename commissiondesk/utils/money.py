"""
Money parsing and rounding helpers.

Form values arrive as strings, floats, None or garbage; everything that
feeds the commission rules goes through to_amount first.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
CENT = Decimal("0.01")

# Largest value a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal("9999999999.99")


def to_amount(value: Any) -> Decimal:
    """
    Coerce a form value to a non-negative Decimal.

    Missing, empty, unparseable, NaN, infinite, negative and out-of-range
    (above MAX_AMOUNT) values all become 0. Never raises.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            # str() first so floats keep their shortest repr (0.1, not 0.1000000000000000055...)
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            return ZERO

    if not amount.is_finite() or amount < 0 or amount > MAX_AMOUNT:
        return ZERO
    return amount


def round_currency(amount: Decimal) -> Decimal:
    """Round to cents, halves away from zero."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)
