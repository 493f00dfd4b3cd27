# inventory_planning/utils/math_utils.py
import math
from typing import List, Sequence, Tuple

import numpy as np

from inventory_planning.exceptions import CalculationError

def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up instead of Python's round-half-to-even.

    Args:
        value: Value to round
        digits: Number of decimal places

    Returns:
        Rounded value (infinities and NaN are returned unchanged)
    """
    if not math.isfinite(value):
        return value

    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor

def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp a value into [lower, upper]."""
    return min(upper, max(lower, value))

def weighted_average(values: Sequence[float], weights: Sequence[float]) -> float:
    """Calculate weighted average.

    Args:
        values: List of values
        weights: List of weights

    Returns:
        Weighted average
    """
    if len(values) != len(weights):
        raise CalculationError("Length of values and weights must be the same")

    if not values:
        raise CalculationError("Weighted average of an empty sequence is undefined")

    weight_total = sum(weights)
    if weight_total <= 0:
        raise CalculationError("Sum of weights must be positive")

    weighted_sum = sum(v * w for v, w in zip(values, weights))
    return weighted_sum / weight_total

def interpolated_percentiles(values: Sequence[float], quantiles: Sequence[float]) -> List[float]:
    """Percentiles with linear interpolation between closest ranks.

    The rank of quantile ``p`` is ``(n - 1) * p``; values between the floor
    and ceiling ranks are interpolated linearly.

    Args:
        values: Non-empty list of values
        quantiles: Quantiles in [0, 1]

    Returns:
        One value per requested quantile
    """
    if len(values) == 0:
        raise CalculationError("Percentiles of an empty sequence are undefined")

    result = np.percentile(np.asarray(values, dtype=float), [q * 100.0 for q in quantiles])
    return [float(v) for v in result]

def nearest_rank_quartiles(values: Sequence[float]) -> Tuple[float, float]:
    """First and third quartile by nearest rank without interpolation.

    Q1 is the sorted value at index ``floor(n * 0.25)``, Q3 the one at
    ``floor(n * 0.75)``.
    """
    if len(values) == 0:
        raise CalculationError("Quartiles of an empty sequence are undefined")

    ordered = sorted(values)
    n = len(ordered)
    return ordered[math.floor(n * 0.25)], ordered[math.floor(n * 0.75)]

def linear_regression(
    x: Sequence[float],
    y: Sequence[float]
) -> Tuple[float, float]:
    """Calculate ordinary least squares regression coefficients.

    Args:
        x: List of x values (typically month indices)
        y: List of y values (typically consumption)

    Returns:
        Tuple with slope and intercept; the slope is 0 when all x are equal
    """
    if len(x) != len(y) or len(x) < 2:
        raise CalculationError("Invalid input for linear regression")

    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    n = len(xs)

    denominator = n * np.sum(xs * xs) - np.sum(xs) ** 2
    if denominator == 0:
        slope = 0.0
    else:
        slope = float((n * np.sum(xs * ys) - np.sum(xs) * np.sum(ys)) / denominator)

    intercept = float(np.mean(ys) - slope * np.mean(xs))

    return (slope, intercept)
