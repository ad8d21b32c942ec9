"""
Percentage precision helpers.

Percentages are kept to 2 decimal places (hundredths of a percent) so that
sums and comparisons never depend on binary float rounding.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Union

PERCENT_QUANTUM = Decimal("0.01")
HUNDRED = Decimal(100)
# 100.00% expressed in hundredths of a percent
_FULL_SHARE = 10000


def quantize_percentage(value: Union[Decimal, int, str]) -> Decimal:
    """
    Round a percentage to 2 decimal places, halves away from zero.

    Args:
        value: Percentage as Decimal, int or decimal text (floats are refused)

    Returns:
        Decimal with exactly two fractional digits
    """
    if isinstance(value, float):
        raise TypeError("Use Decimal or str for percentages, not float")
    return Decimal(value).quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)


def distribute_percentages(parts: int) -> List[Decimal]:
    """
    Default per-target percentages that sum to exactly 100.00.

    Uses the same rule as the equal money split: hundredths of a percent left
    over after integer division go one at a time to the first targets, e.g.
    7 targets give four 14.29 and three 14.28.
    """
    if parts <= 0:
        return []
    base, remainder = divmod(_FULL_SHARE, parts)
    return [
        (Decimal(base + (1 if index < remainder else 0)) / 100).quantize(PERCENT_QUANTUM)
        for index in range(parts)
    ]


def within_tolerance(value: Decimal, expected: Decimal, tolerance: Decimal) -> bool:
    """Inclusive tolerance comparison: ``|value - expected| <= tolerance``."""
    return abs(Decimal(value) - Decimal(expected)) <= Decimal(tolerance)
