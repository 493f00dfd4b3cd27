# inventory_planning/core/production_planning.py
"""Finished goods production planning.

Turns last year's monthly sales of every article into a daily usage
estimate and decides whether, how much and how urgently to produce.
"""
import math
from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, Mapping, Optional

from inventory_planning.core.records import (
    MonthlySeries, SkuSnapshot, ProductSettings, PlanningConfig,
    ProductionDecision, ProductionRunSummary, ProductionPlan
)
from inventory_planning.core.series_statistics import SeriesStatistics, production_statistics
from inventory_planning.core.seasonality import holiday_factor as seasonal_factor, HOLIDAY_FACTOR
from inventory_planning.logging_setup import get_logger
from inventory_planning.models import Priority
from inventory_planning.utils.date_utils import days_in_month, month_index, MONTHS_PER_YEAR, DAYS_PER_YEAR
from inventory_planning.utils.validation import parse_number

FALLBACK_DAILY_USAGE = 0.1
MONTHLY_WEIGHT = 0.7
ANNUAL_WEIGHT = 0.3

logger = get_logger('production_planning')

def reference_month_value(series: Optional[MonthlySeries], ref_month: int) -> float:
    """Raw figure of the reference month, 0 when absent or non-numeric."""
    if series is None:
        return 0.0
    value = parse_number(series.value_for(ref_month))
    if value is None or not math.isfinite(value):
        return 0.0
    return value

def determine_priority(days_until_stockout: float, safety_buffer: float) -> Priority:
    """Priority tier; thresholds are strict and checked most severe first."""
    if days_until_stockout < safety_buffer:
        return Priority.HIGH
    if days_until_stockout < 2 * safety_buffer:
        return Priority.MEDIUM
    return Priority.LOW

def plan_item(
    snapshot: SkuSnapshot,
    series: Optional[MonthlySeries],
    settings: Optional[ProductSettings],
    config: PlanningConfig,
    current_date: date,
    holiday_factor: float,
    statistics: Optional[SeriesStatistics] = None,
    fallback_daily_usage: float = FALLBACK_DAILY_USAGE
) -> ProductionDecision:
    """Production decision for one article.

    Args:
        snapshot: Current stock of the article
        series: Last year's monthly sales, None when the article has none
        settings: Minimum stock and bag size, None when not maintained
        config: Coverage days, safety buffer and holiday lead time
        current_date: Planning date
        holiday_factor: Seasonal uplift of the desired stock
        statistics: Averaging strategy, percentile clamp with the last three
            entries weighted double by default
        fallback_daily_usage: Daily usage assumed without usable history

    Returns:
        ProductionDecision
    """
    statistics = statistics or production_statistics()
    ref_month = month_index(current_date)
    sales_year = current_date.year - 1

    # Same calendar month a year ago, normalized by that month's length
    monthly_daily_usage = reference_month_value(series, ref_month) / days_in_month(sales_year, ref_month)

    summary = statistics.summarize(series) if series is not None else None

    if summary is None or not summary.has_history:
        used_fallback = True
        annual_daily_usage = None
        final_daily_usage = fallback_daily_usage
    else:
        used_fallback = False
        annual_daily_usage = summary.average * MONTHS_PER_YEAR / DAYS_PER_YEAR
        final_daily_usage = MONTHLY_WEIGHT * monthly_daily_usage + ANNUAL_WEIGHT * annual_daily_usage
        if final_daily_usage <= 0:
            final_daily_usage = fallback_daily_usage

    current_stock = snapshot.current_stock
    min_stock = settings.min_stock if settings else 0.0

    days_until_stockout = current_stock / final_daily_usage
    must_produce = current_stock < min_stock or days_until_stockout < config.safety_buffer
    desired_stock = max(final_daily_usage * config.coverage_days, min_stock) * holiday_factor

    amount_to_produce = 0
    if must_produce and desired_stock > current_stock:
        amount_to_produce = math.ceil(desired_stock - current_stock)

    current_month_days = days_in_month(current_date.year, ref_month)

    return ProductionDecision(
        sku=snapshot.sku,
        name=snapshot.name,
        current_stock=current_stock,
        monthly_daily_usage=monthly_daily_usage,
        annual_daily_usage=annual_daily_usage,
        final_daily_usage=final_daily_usage,
        final_monthly_usage=final_daily_usage * current_month_days,
        current_month_days=current_month_days,
        days_until_stockout=days_until_stockout,
        min_stock=min_stock,
        desired_stock=desired_stock,
        must_produce=must_produce,
        amount_to_produce=amount_to_produce,
        priority=determine_priority(days_until_stockout, config.safety_buffer),
        used_fallback=used_fallback,
        bag_size=settings.bag_size if settings else None,
        attributes=dict(snapshot.attributes),
    )

def _priority_sort_key(indexed):
    position, decision = indexed
    return (decision.priority.rank, decision.days_until_stockout, position)

def plan_production(
    snapshots: Iterable[SkuSnapshot],
    series_by_sku: Mapping[str, MonthlySeries],
    settings_by_sku: Mapping[str, ProductSettings],
    config: PlanningConfig,
    current_date,
    uplift: float = HOLIDAY_FACTOR,
    fallback_daily_usage: float = FALLBACK_DAILY_USAGE
) -> ProductionPlan:
    """Production decisions for all articles of an inventory snapshot.

    Lookups are case-sensitive on the trimmed article number. Snapshots
    without an article number are skipped.

    Returns:
        ProductionPlan with decisions ordered Hoch, Mittel, Tief and, within
        a tier, by ascending days until stockout
    """
    computed_at = current_date if isinstance(current_date, datetime) else datetime.combine(current_date, datetime.min.time())
    planning_date = computed_at.date()

    factor = seasonal_factor(planning_date, config.holiday_lead_time_days, uplift)
    statistics = production_statistics()

    decisions = []
    for snapshot in snapshots:
        sku = snapshot.sku.strip()
        if not sku:
            continue
        decision = plan_item(
            replace(snapshot, sku=sku),
            series_by_sku.get(sku),
            settings_by_sku.get(sku),
            config,
            planning_date,
            factor,
            statistics=statistics,
            fallback_daily_usage=fallback_daily_usage,
        )
        logger.debug(f"{sku}: daily={decision.final_daily_usage:.4f} "
                     f"days={decision.days_until_stockout:.1f} priority={decision.priority.value}")
        decisions.append(decision)

    ordered = tuple(d for _, d in sorted(enumerate(decisions), key=_priority_sort_key))

    summary = ProductionRunSummary(
        coverage_days=config.coverage_days,
        safety_buffer=config.safety_buffer,
        holiday_lead_time_days=config.holiday_lead_time_days,
        holiday_factor=factor,
        sales_year=planning_date.year - 1,
        computed_at=computed_at,
        item_count=len(ordered),
        must_produce_count=sum(1 for d in ordered if d.must_produce),
    )

    return ProductionPlan(summary=summary, decisions=ordered)
