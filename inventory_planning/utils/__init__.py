from .date_utils import days_in_month, month_index, recent_month_indices, convert_to_date
from .math_utils import (
    round_half_up, clamp, weighted_average, interpolated_percentiles,
    nearest_rank_quartiles, linear_regression
)
from .validation import (
    parse_number, parse_quantity, parse_lead_time,
    is_missing, validate_planning_params, validate_inventory_rows,
    validate_production_rows, ensure_valid
)

__all__ = [
    'days_in_month',
    'month_index',
    'recent_month_indices',
    'convert_to_date',
    'round_half_up',
    'clamp',
    'weighted_average',
    'interpolated_percentiles',
    'nearest_rank_quartiles',
    'linear_regression',
    'parse_number',
    'parse_quantity',
    'parse_lead_time',
    'validate_planning_params',
    'validate_inventory_rows',
    'validate_production_rows',
    'is_missing',
    'ensure_valid'
]
