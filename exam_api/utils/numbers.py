"""Numeric helpers shared by grading and aggregation."""
from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, places: int = 2) -> float:
    """Round like a calculator (0.125 -> 0.13), not banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percent(earned: float, possible: float) -> int:
    """Whole percentage of earned over possible, 0 when nothing was possible."""
    if possible <= 0:
        return 0
    return int(Decimal(str(100 * earned / possible)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def clamp01(value: float) -> float:
    """Clamp to the closed interval [0, 1]."""
    return max(0.0, min(1.0, float(value)))
