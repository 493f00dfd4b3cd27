# inventory_planning/utils/date_utils.py
from datetime import date, datetime
from typing import List, Optional, Union
import calendar

MONTHS_PER_YEAR = 12
DAYS_PER_YEAR = 365

def days_in_month(year: int, month_index: int) -> int:
    """Number of days of a calendar month.

    Args:
        year: Calendar year
        month_index: Month index (0=January .. 11=December)

    Returns:
        Number of days in that month
    """
    if not 0 <= month_index < MONTHS_PER_YEAR:
        raise ValueError(f"Invalid month index: {month_index}")
    return calendar.monthrange(year, month_index + 1)[1]

def month_index(target_date: Union[date, datetime]) -> int:
    """0-based month index of a date."""
    return target_date.month - 1

def recent_month_indices(current_index: int, count: int = 3) -> List[int]:
    """Month indices of the last ``count`` calendar months including the current one.

    The window wraps across the year boundary, e.g. for January (0) and
    count 3 the result is [0, 11, 10].
    """
    return [(current_index - i + MONTHS_PER_YEAR) % MONTHS_PER_YEAR for i in range(count)]

def convert_to_date(value: Optional[Union[date, datetime, str]]) -> Optional[date]:
    """Convert an ISO string, datetime or date to a date.

    Args:
        value: Value to convert

    Returns:
        Date value, or None for None
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip()).date()
        except ValueError:
            raise ValueError(f"Invalid date string: {value}")

    raise ValueError(f"Cannot convert {type(value)} to date")
