from .records import (
    MonthlySeries, SkuSnapshot, ProductSettings, RawMaterialRecord,
    PlanningConfig, AnalysisConfig, ProductionDecision, ProductionRunSummary,
    ProductionPlan, ReorderDecision, ReorderAnalysis
)
from .series_statistics import (
    extract_valid_months, PercentileClamp, IQRClamp,
    TrailingEntriesWindow, RollingMonthWindow, weighted_recency_average,
    SeriesStatistics, production_statistics, raw_material_statistics
)
from .trend import linear_trend_coefficient, classify_trend, TrendAdjustment
from .seasonality import easter_sunday, holiday_windows, is_holiday_season, holiday_factor
from .production_planning import plan_item, plan_production, determine_priority
from .reorder_analysis import analyze_item, analyze_reorder, classify_coverage, sort_reorder_decisions

__all__ = [
    'MonthlySeries',
    'SkuSnapshot',
    'ProductSettings',
    'RawMaterialRecord',
    'PlanningConfig',
    'AnalysisConfig',
    'ProductionDecision',
    'ProductionRunSummary',
    'ProductionPlan',
    'ReorderDecision',
    'ReorderAnalysis',
    'extract_valid_months',
    'PercentileClamp',
    'IQRClamp',
    'TrailingEntriesWindow',
    'RollingMonthWindow',
    'weighted_recency_average',
    'SeriesStatistics',
    'production_statistics',
    'raw_material_statistics',
    'linear_trend_coefficient',
    'classify_trend',
    'TrendAdjustment',
    'easter_sunday',
    'holiday_windows',
    'is_holiday_season',
    'holiday_factor',
    'plan_item',
    'plan_production',
    'determine_priority',
    'analyze_item',
    'analyze_reorder',
    'classify_coverage',
    'sort_reorder_decisions'
]
