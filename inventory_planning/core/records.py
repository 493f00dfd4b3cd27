# inventory_planning/core/records.py
"""Immutable value types passed between the storage layer and the planners."""
import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

from inventory_planning.models import Priority, CoverageStatus, TrendDirection
from inventory_planning.utils.math_utils import round_half_up

MONTHS = 12

@dataclass(frozen=True)
class MonthlySeries:
    """Twelve monthly observations (index 0=January) of one SKU and year.

    ``None`` means no observation for that month; it is not the same as 0.
    """
    sku: str
    year: int
    values: Tuple[Optional[float], ...]

    def __post_init__(self):
        values = tuple(self.values)
        if len(values) != MONTHS:
            raise ValueError(f"MonthlySeries for '{self.sku}' needs {MONTHS} values, got {len(values)}")
        object.__setattr__(self, 'values', values)

    @classmethod
    def empty(cls, sku: str, year: int) -> 'MonthlySeries':
        return cls(sku, year, (None,) * MONTHS)

    def value_for(self, month_index: int) -> Optional[float]:
        return self.values[month_index]

@dataclass(frozen=True)
class SkuSnapshot:
    """Current on-hand quantity of one SKU.

    ``attributes`` holds upstream fields that are echoed into the output
    unchanged (lot, mhd, mhd_lieferant, abweichung).
    """
    sku: str
    name: str = ''
    current_stock: float = 0.0
    attributes: Dict[str, Any] = field(default_factory=dict)

@dataclass(frozen=True)
class ProductSettings:
    """Production master data of one article."""
    sku: str
    min_stock: float = 0.0
    bag_size: Optional[str] = None

@dataclass(frozen=True)
class RawMaterialRecord:
    """Consumption history and supplier data of one raw material."""
    series: MonthlySeries
    name: Optional[str] = None
    origin: Optional[str] = None
    supplier: Optional[str] = None
    intermediary: Optional[str] = None
    lead_time_months: Optional[float] = None

@dataclass(frozen=True)
class PlanningConfig:
    coverage_days: int
    safety_buffer: int
    holiday_lead_time_days: int

@dataclass(frozen=True)
class AnalysisConfig:
    year: int
    current_date: date

@dataclass(frozen=True)
class ProductionDecision:
    """Production decision for one SKU."""
    sku: str
    name: str
    current_stock: float
    monthly_daily_usage: float
    annual_daily_usage: Optional[float]
    final_daily_usage: float
    final_monthly_usage: float
    current_month_days: int
    days_until_stockout: float
    min_stock: float
    desired_stock: float
    must_produce: bool
    amount_to_produce: int
    priority: Priority
    used_fallback: bool
    bag_size: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    def to_item_row(self, run_id: Optional[int]) -> Dict[str, Any]:
        """Row of the ``production_plan_items`` table."""
        deviation = self.attributes.get('abweichung')
        return {
            'run_id': run_id,
            'artikelnummer': self.sku,
            'name': self.name,
            'bag_size': self.bag_size,
            'current_stock': self.current_stock,
            'final_daily_usage': self.final_daily_usage,
            'final_monthly_usage': self.final_monthly_usage,
            'days_until_stockout': self.days_until_stockout,
            'desired_stock': self.desired_stock,
            'amount_to_produce': self.amount_to_produce,
            'priority': self.priority.value,
            'to_produce': self.must_produce,
            'mhd_lieferant': self.attributes.get('mhd_lieferant'),
            'abweichung': (int(round_half_up(deviation))
                           if deviation is not None and math.isfinite(deviation) else None),
            'lot': self.attributes.get('lot'),
            'mhd': self.attributes.get('mhd'),
        }

@dataclass(frozen=True)
class ProductionRunSummary:
    """Configuration echo and aggregates of one production planning run."""
    coverage_days: int
    safety_buffer: int
    holiday_lead_time_days: int
    holiday_factor: float
    sales_year: int
    computed_at: datetime
    item_count: int
    must_produce_count: int
    production_time: int = 0
    run_id: Optional[int] = None

    def to_run_row(self) -> Dict[str, Any]:
        """Row of the ``production_plan_runs`` table."""
        return {
            'coverage_days': self.coverage_days,
            'safety_buffer': self.safety_buffer,
            'production_time': self.production_time,
            'holiday_lead_time_days': self.holiday_lead_time_days,
            'holiday_factor': self.holiday_factor,
            'sales_year': self.sales_year,
        }

    def with_run_id(self, run_id: int) -> 'ProductionRunSummary':
        return replace(self, run_id=run_id)

@dataclass(frozen=True)
class ProductionPlan:
    summary: ProductionRunSummary
    decisions: Tuple[ProductionDecision, ...]

@dataclass(frozen=True)
class ReorderDecision:
    """Stock coverage assessment for one raw material."""
    sku: str
    name: str
    stock: float
    average_monthly_usage: float
    coverage_months: float
    status: CoverageStatus
    status_text: str
    trend_direction: TrendDirection
    trend_coefficient: float
    used_fallback: bool
    lead_time_months: Optional[float] = None
    lead_time_warning: bool = False
    origin: Optional[str] = None
    supplier: Optional[str] = None
    intermediary: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Presentation shape: rounded figures, infinite coverage as None."""
        coverage = None if math.isinf(self.coverage_months) else round_half_up(self.coverage_months, 1)
        return {
            'sku': self.sku,
            'name': self.name,
            'herkunft': self.origin,
            'lieferant': self.supplier,
            'zwischenhaendler': self.intermediary,
            'lagerbestand': self.stock,
            'avgVerbrauchMonat': round_half_up(self.average_monthly_usage, 2),
            'reichweiteMonat': coverage,
            'lieferzeit': self.lead_time_months,
            'status': self.status.value,
            'statusText': self.status_text,
            'lieferzeitWarning': self.lead_time_warning,
            'trendDirection': self.trend_direction.value,
            'usedFallback': self.used_fallback,
        }

@dataclass(frozen=True)
class ReorderAnalysis:
    year: int
    analyzed_at: datetime
    decisions: Tuple[ReorderDecision, ...]
