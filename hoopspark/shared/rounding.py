"""Decimal rounding helpers shared by validation messages and scoring."""

import math
from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Rounds the exact binary value of a float half away from zero.

    round() would round exact ties to even (round(0.25, 1) == 0.2);
    stored scores and messages use half-up (0.3).
    """
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def format_fixed(value: float, digits: int = 0) -> str:
    """Formats value with a fixed number of decimals, rounding half-up."""
    return f"{round_half_up(value, digits):.{digits}f}"


def format_limit(value: float) -> str:
    """Formats a configured limit without a trailing .0 (100.0 -> '100')."""
    return f"{value:g}"
