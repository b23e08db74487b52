"""Half-up rounding for displayed nutrient values."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round half away from zero (2.5 -> 3), unlike the built-in round().

    Example:
        >>> round_half_up(2.45, 1)
        2.5
        >>> round_half_up(2.5)
        3.0
    """
    exponent = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(exponent, rounding=ROUND_HALF_UP))
