from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value) -> Decimal:
    """
    Convert a stored or computed amount to Decimal.

    Floats go through str() so SQLite REAL aggregates don't leak binary noise.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value) -> Decimal:
    """Two-place rounding, ROUND_HALF_UP. Presentation only."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value) -> Optional[str]:
    """Render an amount for JSON as a fixed two-place string."""
    if value is None:
        return None
    return str(round_money(value))
