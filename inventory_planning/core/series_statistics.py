# inventory_planning/core/series_statistics.py
"""Cleaning and recency-weighted averaging of monthly history.

Both planning pipelines reduce a year of monthly figures to one scalar the
same way: drop invalid months, clamp outliers, weight recent months double.
They differ only in the clamp policy and in what "recent" means, so both are
pluggable strategies of ``SeriesStatistics``.
"""
import math
from dataclasses import dataclass
from numbers import Real
from typing import List, Optional, Sequence, Tuple

from inventory_planning.core.records import MonthlySeries
from inventory_planning.exceptions import CalculationError
from inventory_planning.utils.date_utils import recent_month_indices
from inventory_planning.utils.math_utils import (
    clamp, weighted_average, interpolated_percentiles, nearest_rank_quartiles
)

RECENT_WEIGHT = 2.0
BASE_WEIGHT = 1.0

def extract_valid_months(series: MonthlySeries) -> List[Tuple[int, float]]:
    """Months with a usable observation, in calendar order.

    A month is usable when its value is present, numeric, finite and
    strictly positive. Zero and negative figures are treated as invalid
    rather than as real zero demand.

    Args:
        series: Monthly series of one SKU

    Returns:
        List of (month_index, value) tuples
    """
    points = []
    for month_index, value in enumerate(series.values):
        if value is None or isinstance(value, bool) or not isinstance(value, Real):
            continue
        value = float(value)
        if math.isfinite(value) and value > 0:
            points.append((month_index, value))
    return points

class PercentileClamp:
    """Clamp into the [P10, P90] band using interpolated percentiles."""

    name = 'percentile'

    def __init__(self, lower: float = 0.10, upper: float = 0.90):
        self.lower = lower
        self.upper = upper

    def bounds(self, values: Sequence[float]) -> Tuple[float, float]:
        low, high = interpolated_percentiles(values, [self.lower, self.upper])
        return low, high

    def clamp(self, values: Sequence[float]) -> List[float]:
        if len(values) < 1:
            return list(values)
        low, high = self.bounds(values)
        return [clamp(v, low, high) for v in values]

    def __repr__(self):
        return f"PercentileClamp(lower={self.lower}, upper={self.upper})"

class IQRClamp:
    """Clamp into [Q1 - 1.5 IQR, Q3 + 1.5 IQR] with nearest-rank quartiles.

    Below ``min_points`` values the input is returned unchanged. The lower
    bound is not floored at zero.
    """

    name = 'iqr'

    def __init__(self, min_points: int = 4, factor: float = 1.5):
        self.min_points = min_points
        self.factor = factor

    def bounds(self, values: Sequence[float]) -> Tuple[float, float]:
        q1, q3 = nearest_rank_quartiles(values)
        iqr = q3 - q1
        return q1 - self.factor * iqr, q3 + self.factor * iqr

    def clamp(self, values: Sequence[float]) -> List[float]:
        if len(values) < self.min_points:
            return list(values)
        low, high = self.bounds(values)
        return [clamp(v, low, high) for v in values]

    def __repr__(self):
        return f"IQRClamp(min_points={self.min_points}, factor={self.factor})"

class TrailingEntriesWindow:
    """The last ``count`` entries of the chronological sequence are recent."""

    def __init__(self, count: int = 3):
        self.count = count

    def weights(self, month_indices: Sequence[int]) -> List[float]:
        n = len(month_indices)
        first_recent = max(0, n - self.count)
        return [RECENT_WEIGHT if i >= first_recent else BASE_WEIGHT for i in range(n)]

    def __repr__(self):
        return f"TrailingEntriesWindow(count={self.count})"

class RollingMonthWindow:
    """The ``count`` calendar months up to and including the current one are recent.

    The window wraps across the year boundary.
    """

    def __init__(self, current_month_index: int, count: int = 3):
        self.current_month_index = current_month_index
        self.count = count
        self.recent_months = frozenset(recent_month_indices(current_month_index, count))

    def weights(self, month_indices: Sequence[int]) -> List[float]:
        return [RECENT_WEIGHT if m in self.recent_months else BASE_WEIGHT for m in month_indices]

    def __repr__(self):
        return f"RollingMonthWindow(current_month_index={self.current_month_index}, count={self.count})"

def weighted_recency_average(values: Sequence[float], month_indices: Sequence[int], window) -> float:
    """Recency-weighted mean of cleaned values.

    Args:
        values: Cleaned values in chronological order
        month_indices: Calendar month index of each value
        window: Recency window strategy

    Returns:
        Weighted average

    Raises:
        CalculationError: if called without values; callers take the
            no-history branch instead.
    """
    if len(values) == 0:
        raise CalculationError("Weighted recency average requires at least one valid month")
    return weighted_average(values, window.weights(month_indices))

@dataclass(frozen=True)
class SeriesSummary:
    points: Tuple[Tuple[int, float], ...]
    cleaned: Tuple[float, ...]
    average: Optional[float]

    @property
    def has_history(self) -> bool:
        return len(self.points) > 0

class SeriesStatistics:
    """Clamp strategy plus recency window applied to a monthly series."""

    def __init__(self, clamp_strategy, window):
        self.clamp_strategy = clamp_strategy
        self.window = window

    def summarize(self, series: MonthlySeries) -> SeriesSummary:
        points = extract_valid_months(series)
        if not points:
            return SeriesSummary((), (), None)

        months = [m for m, _ in points]
        cleaned = self.clamp_strategy.clamp([v for _, v in points])
        average = weighted_recency_average(cleaned, months, self.window)
        return SeriesSummary(tuple(points), tuple(cleaned), average)

    def __repr__(self):
        return f"SeriesStatistics({self.clamp_strategy!r}, {self.window!r})"

def production_statistics(recent_count: int = 3) -> SeriesStatistics:
    return SeriesStatistics(PercentileClamp(), TrailingEntriesWindow(recent_count))

def raw_material_statistics(current_month_index: int, recent_count: int = 3) -> SeriesStatistics:
    return SeriesStatistics(IQRClamp(), RollingMonthWindow(current_month_index, recent_count))
