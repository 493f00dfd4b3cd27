# inventory_planning/core/trend.py
from dataclasses import dataclass
from typing import Sequence, Tuple

from inventory_planning.models import TrendDirection
from inventory_planning.utils.math_utils import linear_regression

MIN_TREND_POINTS = 3
TREND_THRESHOLD = 0.05
MAX_TREND_ADJUSTMENT = 0.15

@dataclass(frozen=True)
class TrendAdjustment:
    direction: TrendDirection
    coefficient: float
    multiplier: float

def linear_trend_coefficient(points: Sequence[Tuple[int, float]]) -> float:
    """Relative monthly trend of a consumption series.

    The OLS slope of value against calendar month index (gaps count),
    divided by the mean value.

    Args:
        points: (month_index, value) tuples

    Returns:
        Dimensionless trend per month; 0 for fewer than 3 points, identical
        month indices or a non-positive mean
    """
    if len(points) < MIN_TREND_POINTS:
        return 0.0

    x = [month for month, _ in points]
    y = [value for _, value in points]

    slope, _ = linear_regression(x, y)

    average = sum(y) / len(y)
    if average <= 0:
        return 0.0

    return slope / average

def classify_trend(coefficient: float) -> TrendAdjustment:
    """Map a trend coefficient to a direction and a capped demand multiplier.

    Rising trends add at most 15 %, falling trends remove at most 15 %.
    """
    if coefficient > TREND_THRESHOLD:
        return TrendAdjustment(TrendDirection.UP, coefficient, 1 + min(MAX_TREND_ADJUSTMENT, coefficient))

    if coefficient < -TREND_THRESHOLD:
        return TrendAdjustment(TrendDirection.DOWN, coefficient, 1 + max(-MAX_TREND_ADJUSTMENT, coefficient))

    return TrendAdjustment(TrendDirection.STABLE, coefficient, 1.0)
