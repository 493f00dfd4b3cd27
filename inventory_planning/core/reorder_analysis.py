# inventory_planning/core/reorder_analysis.py
"""Raw material stock coverage analysis.

Coverage is expressed in months of trend-adjusted average consumption and
classified into traffic-light tiers; a known supplier lead time can only
escalate a tier to red.
"""
import math
from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Mapping, Optional

from inventory_planning.core.records import (
    SkuSnapshot, RawMaterialRecord, AnalysisConfig, ReorderDecision, ReorderAnalysis
)
from inventory_planning.core.series_statistics import SeriesStatistics, raw_material_statistics
from inventory_planning.core.trend import linear_trend_coefficient, classify_trend
from inventory_planning.logging_setup import get_logger
from inventory_planning.models import CoverageStatus, TrendDirection
from inventory_planning.utils.date_utils import month_index

logger = get_logger('reorder_analysis')

STATUS_CRITICAL = 'Kritisch'
STATUS_WARNING = 'Warnung'
STATUS_ATTENTION = 'Aufmerksamkeit'
STATUS_SUFFICIENT = 'Ausreichend'
STATUS_UNLIMITED = 'Ausreichend(∞)'
STATUS_NO_CONSUMPTION = 'Kein Verbrauch / Unendlich'

def coverage_months(stock: float, average: float) -> float:
    """Months until the stock is used up; infinite without consumption."""
    if average > 0:
        return stock / average
    return math.inf if stock > 0 else 0.0

def classify_coverage(coverage: float):
    """Status tier and text for a coverage, most severe tier first.

    Returns:
        Tuple of (CoverageStatus, status text)
    """
    if math.isinf(coverage):
        return CoverageStatus.GREEN, STATUS_UNLIMITED
    if coverage < 1:
        return CoverageStatus.RED, STATUS_CRITICAL
    if coverage < 2:
        return CoverageStatus.ORANGE, STATUS_WARNING
    if coverage < 3:
        return CoverageStatus.YELLOW, STATUS_ATTENTION
    return CoverageStatus.GREEN, STATUS_SUFFICIENT

def lead_time_exceeds_coverage(coverage: float, lead_time_months: Optional[float]) -> bool:
    if lead_time_months is None or not math.isfinite(lead_time_months) or lead_time_months <= 0:
        return False
    return math.isfinite(coverage) and coverage < lead_time_months

def lead_time_status_text(lead_time_months: float) -> str:
    return f"Reichweite unter Lieferzeit ({lead_time_months:g} Monate)"

def analyze_item(
    snapshot: SkuSnapshot,
    record: Optional[RawMaterialRecord],
    current_month_index: int,
    statistics: Optional[SeriesStatistics] = None
) -> ReorderDecision:
    """Coverage assessment for one raw material.

    Args:
        snapshot: On-hand quantity of the raw material
        record: Consumption of the target year and supplier data, None when
            nothing is stored for the SKU
        current_month_index: Month index (0-11) the recency window ends at
        statistics: Averaging strategy, IQR clamp with a rolling three month
            window by default

    Returns:
        ReorderDecision
    """
    statistics = statistics or raw_material_statistics(current_month_index)
    stock = snapshot.current_stock
    summary = statistics.summarize(record.series) if record is not None else None

    trend_direction = TrendDirection.STABLE
    trend_coefficient = 0.0

    if summary is None or not summary.has_history:
        used_fallback = True
        average = 0.0
        coverage = coverage_months(stock, average)
        status, status_text = CoverageStatus.GREEN, STATUS_NO_CONSUMPTION
    else:
        used_fallback = False
        trend = classify_trend(linear_trend_coefficient(summary.points))
        trend_direction = trend.direction
        trend_coefficient = trend.coefficient
        average = summary.average * trend.multiplier
        coverage = coverage_months(stock, average)
        status, status_text = classify_coverage(coverage)

    lead_time = record.lead_time_months if record is not None else None
    lead_time_warning = lead_time_exceeds_coverage(coverage, lead_time)
    if lead_time_warning:
        status, status_text = CoverageStatus.RED, lead_time_status_text(lead_time)

    return ReorderDecision(
        sku=snapshot.sku,
        name=snapshot.name or (record.name if record is not None and record.name else ''),
        stock=stock,
        average_monthly_usage=average,
        coverage_months=coverage,
        status=status,
        status_text=status_text,
        trend_direction=trend_direction,
        trend_coefficient=trend_coefficient,
        used_fallback=used_fallback,
        lead_time_months=lead_time,
        lead_time_warning=lead_time_warning,
        origin=record.origin if record is not None else None,
        supplier=record.supplier if record is not None else None,
        intermediary=record.intermediary if record is not None else None,
    )

def reorder_sort_key(decision: ReorderDecision):
    """History first, then status severity, then ascending coverage with infinity last."""
    return (decision.used_fallback, decision.status.severity, decision.coverage_months)

def sort_reorder_decisions(decisions: Iterable[ReorderDecision]) -> List[ReorderDecision]:
    # sorted() is stable, equal keys keep input order
    return sorted(decisions, key=reorder_sort_key)

def analyze_reorder(
    snapshots: Iterable[SkuSnapshot],
    records_by_sku: Mapping[str, RawMaterialRecord],
    config: AnalysisConfig,
    recent_count: int = 3
) -> ReorderAnalysis:
    """Coverage assessment for every raw material of an inventory snapshot.

    Consumption records are matched on the trimmed, lower-cased SKU.
    Snapshots without a SKU are skipped.

    Args:
        snapshots: On-hand quantities
        records_by_sku: Consumption records keyed by lower-cased SKU
        config: Target year and analysis date
        recent_count: Calendar months weighted double, counting back from
            the current one

    Returns:
        ReorderAnalysis with decisions in presentation order
    """
    current_month = month_index(config.current_date)
    statistics = raw_material_statistics(current_month, recent_count)

    decisions = []
    for snapshot in snapshots:
        sku = snapshot.sku.strip()
        if not sku:
            continue
        decision = analyze_item(replace(snapshot, sku=sku), records_by_sku.get(sku.lower()), current_month, statistics)
        logger.debug(f"{sku}: avg={decision.average_monthly_usage:.3f} "
                     f"coverage={decision.coverage_months} status={decision.status.value}")
        decisions.append(decision)

    analyzed_at = config.current_date
    if not isinstance(analyzed_at, datetime):
        analyzed_at = datetime.combine(analyzed_at, datetime.min.time())

    return ReorderAnalysis(
        year=config.year,
        analyzed_at=analyzed_at,
        decisions=tuple(sort_reorder_decisions(decisions)),
    )
