"""
Numeric Utilities
quote_scoring/scoring/utils.py

Precision-safe decimal helpers for scores, plus the float statistics used by
feature extraction and experiment comparison.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence


def to_decimal(value: float, places: int = 2) -> Decimal:
    """Convert float to Decimal with explicit precision."""
    return Decimal(str(value)).quantize(
        Decimal(10) ** -places, rounding=ROUND_HALF_UP
    )


def clamp(
    value: Decimal,
    min_val: Decimal = Decimal("0"),
    max_val: Decimal = Decimal("1000"),
) -> Decimal:
    """Clamp value to range [min_val, max_val]."""
    return max(min_val, min(max_val, value))


def clamp_ratio(value: float) -> float:
    """Clamp a float ratio to [0, 1]."""
    return max(0.0, min(1.0, value))


def safe_ratio(numerator: float, denominator: float) -> float:
    """
    numerator / denominator clamped to [0, 1].

    Returns 0.0 when the denominator is zero.
    """
    if denominator == 0:
        return 0.0
    return clamp_ratio(numerator / denominator)


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean. Raises ValueError on an empty sequence."""
    if not values:
        raise ValueError("mean of empty sequence")
    return sum(values) / len(values)


def population_variance(values: Sequence[float]) -> float:
    """
    Population variance.

    Formula: Σ(value_i − mean)² / n
    """
    m = mean(values)
    return sum((v - m) ** 2 for v in values) / len(values)
