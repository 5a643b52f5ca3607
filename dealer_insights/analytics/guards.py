"""
Numeric guards shared by the analytics formulas.

Every ratio in the engine resolves a zero or non-finite denominator to an
explicit fallback instead of raising or emitting NaN.
"""

import math
from typing import Optional


def safe_divide(numerator: float, denominator: float, fallback: float = 0.0) -> float:
    """numerator / denominator, or fallback when the result would not be finite"""
    if denominator is None or numerator is None:
        return fallback
    if denominator == 0 or not math.isfinite(denominator) or not math.isfinite(numerator):
        return fallback
    result = numerator / denominator
    return result if math.isfinite(result) else fallback


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    """Clamp value into [lower, upper]; NaN clamps to lower"""
    if value is None or math.isnan(value):
        return lower
    return max(lower, min(upper, value))


def percent_change(current: float, base: float) -> float:
    """((current - base) / base) * 100, 0 when base is zero or undefined"""
    return safe_divide(current - base, base) * 100.0


def roi_months(annual_lift: float, display_cost: float) -> Optional[int]:
    """Months for the monthly share of an annual lift to repay a display"""
    monthly = annual_lift / 12.0 if annual_lift else 0.0
    if monthly <= 0:
        return None
    return math.ceil(display_cost / monthly)
