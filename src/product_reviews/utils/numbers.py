"""Rounding helpers shared by vote scores and rating rollups.

Ratings and scores round half away from zero (4.45 -> 4.5, 62.5 -> 63),
never to the nearest even digit.
"""

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value, places: int = 0) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def mean(total: int, count: int, places: int = 1) -> float:
    """Exact mean of ``count`` integers summing to ``total``, rounded half-up."""
    if count == 0:
        return 0.0
    quantum = Decimal(1).scaleb(-places)
    return float((Decimal(total) / Decimal(count)).quantize(quantum, rounding=ROUND_HALF_UP))


def percentage(part: int, whole: int) -> int:
    if whole == 0:
        return 0
    return int((Decimal(part) * 100 / Decimal(whole)).quantize(Decimal(1), rounding=ROUND_HALF_UP))
