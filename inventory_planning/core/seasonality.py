# inventory_planning/core/seasonality.py
from datetime import date, datetime, timedelta
from typing import List, Tuple, Union

HOLIDAY_FACTOR = 1.15
NEUTRAL_FACTOR = 1.0
DAYS_AFTER_EASTER = 7

def easter_sunday(year: int) -> date:
    """Date of Easter Sunday in the Gregorian calendar.

    Anonymous Gregorian algorithm (Meeus/Jones/Butcher), closed form.

    Args:
        year: Calendar year

    Returns:
        Easter Sunday of that year
    """
    g = year % 19
    c = year // 100
    h = (c - c // 4 - (8 * c + 13) // 25 + 19 * g + 15) % 30
    i = h - (h // 28) * (1 - (29 // (h + 1)) * ((21 - g) // 11))
    j = (year + year // 4 + i + 2 - c + c // 4) % 7
    l = i - j
    month = 3 + (l + 40) // 44
    day = l + 28 - 31 * (month // 4)
    return date(year, month, day)

def holiday_windows(current_date: Union[date, datetime], lead_days: int) -> List[Tuple[date, date]]:
    """Easter and Christmas demand windows of the current date's year.

    Easter: [Easter - lead_days, Easter + 7 days].
    Christmas: [Dec 24 - lead_days, Dec 26].
    """
    if isinstance(current_date, datetime):
        current_date = current_date.date()

    year = current_date.year
    easter = easter_sunday(year)
    christmas_eve = date(year, 12, 24)

    return [
        (easter - timedelta(days=lead_days), easter + timedelta(days=DAYS_AFTER_EASTER)),
        (christmas_eve - timedelta(days=lead_days), date(year, 12, 26)),
    ]

def is_holiday_season(current_date: Union[date, datetime], lead_days: int) -> bool:
    if isinstance(current_date, datetime):
        current_date = current_date.date()

    return any(start <= current_date <= end for start, end in holiday_windows(current_date, lead_days))

def holiday_factor(
    current_date: Union[date, datetime],
    lead_days: int,
    factor: float = HOLIDAY_FACTOR
) -> float:
    """Multiplicative demand factor for the production target.

    Args:
        current_date: Planning date
        lead_days: Days before Easter/Christmas the uplift starts
        factor: Uplift applied inside a holiday window

    Returns:
        ``factor`` inside a holiday window, otherwise 1.0
    """
    return factor if is_holiday_season(current_date, lead_days) else NEUTRAL_FACTOR
