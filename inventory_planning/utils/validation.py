import math
import re
from typing import Any, Dict, Optional, Sequence

from inventory_planning.exceptions import ValidationError

# Request limits of the production planning run
COVERAGE_DAYS_RANGE = (1, 365)
SAFETY_BUFFER_RANGE = (1, 60)
HOLIDAY_LEAD_TIME_RANGE = (0, 60)
MAX_INVENTORY_ROWS = 5000
MAX_SKU_LENGTH = 128
MAX_NAME_LENGTH = 512

_LEADING_NUMBER = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?')

def parse_number(value: Any) -> Optional[float]:
    """Parse a numeric cell.

    Accepts ints, floats and numeric strings with a decimal comma
    ("12,5") or embedded whitespace. Booleans, empty strings, NaN and
    anything unparseable yield None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = re.sub(r'\s', '', str(value)).replace(',', '.')
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None

    if math.isnan(number):
        return None
    return number

def parse_quantity(value: Any, default: float = 0.0) -> float:
    """Parse an on-hand quantity, falling back to ``default`` when missing or unparseable."""
    number = parse_number(value)
    if number is None or not math.isfinite(number):
        return default
    return number

def parse_lead_time(value: Any) -> Optional[float]:
    """Parse a stored lead time in months.

    The stored field is free text such as "2", "2.5", "2,5" or "3 Monate";
    the leading number is used. Returns None when no number can be read.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
        return None if math.isnan(number) else number

    text = str(value).strip().replace(',', '.')
    match = _LEADING_NUMBER.match(text)
    if not match:
        return None
    return float(match.group(0))

def _check_int_range(errors: Dict[str, str], params: Dict[str, Any], key: str, bounds) -> None:
    value = params.get(key)
    lower, upper = bounds

    if value is None:
        errors[key] = f'{key} is required'
    elif isinstance(value, bool) or not isinstance(value, (int, float)) or not float(value).is_integer():
        errors[key] = f'{key} must be an integer'
    elif not lower <= value <= upper:
        errors[key] = f'{key} must be between {lower} and {upper}'

def validate_planning_params(params: Dict[str, Any]) -> Dict[str, str]:
    """Validate production planning run parameters.

    Args:
        params: Dictionary with coverage_days, safety_buffer and
            holiday_lead_time_days

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    _check_int_range(errors, params, 'coverage_days', COVERAGE_DAYS_RANGE)
    _check_int_range(errors, params, 'safety_buffer', SAFETY_BUFFER_RANGE)
    _check_int_range(errors, params, 'holiday_lead_time_days', HOLIDAY_LEAD_TIME_RANGE)

    return errors

def validate_inventory_rows(rows: Sequence[Any], max_rows: int = MAX_INVENTORY_ROWS) -> Dict[str, str]:
    """Validate the size of an inventory upload.

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    if rows is None or len(rows) == 0:
        errors['inventory'] = 'No inventory data provided'
    elif len(rows) > max_rows:
        errors['inventory'] = f'At most {max_rows} inventory rows are allowed'

    return errors

def is_missing(value: Any) -> bool:
    """True for empty cells: None, NaN and blank strings."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()

def _check_quantity(errors: Dict[str, str], prefix: str, row: Dict[str, Any], key: str) -> None:
    value = row.get(key)
    if is_missing(value):
        return

    number = parse_number(value)
    if number is None or not math.isfinite(number):
        errors[f'{prefix}.{key}'] = f'{key} must be a finite number'
    elif number < 0:
        errors[f'{prefix}.{key}'] = f'{key} must not be negative'

def validate_production_rows(rows: Sequence[Dict[str, Any]]) -> Dict[str, str]:
    """Validate the fields of each finished-goods inventory row.

    Artikelnummer is required with at most 128 characters, Artikelname at
    most 512. Verfuegbar and Lagerbestand, when given, must be finite and
    non-negative. Abweichung, when given, must be an integer.

    Returns:
        Dictionary with validation errors keyed by ``inventory[<row>].<field>``
    """
    errors = {}

    for position, row in enumerate(rows or []):
        prefix = f'inventory[{position}]'
        if not isinstance(row, dict):
            errors[prefix] = 'Inventory row must be an object'
            continue

        sku = row.get('Artikelnummer')
        sku = '' if is_missing(sku) else str(sku).strip()
        if not sku:
            errors[f'{prefix}.Artikelnummer'] = 'Artikelnummer is required'
        elif len(sku) > MAX_SKU_LENGTH:
            errors[f'{prefix}.Artikelnummer'] = f'Artikelnummer must be at most {MAX_SKU_LENGTH} characters'

        name = row.get('Artikelname')
        if not is_missing(name) and len(str(name).strip()) > MAX_NAME_LENGTH:
            errors[f'{prefix}.Artikelname'] = f'Artikelname must be at most {MAX_NAME_LENGTH} characters'

        _check_quantity(errors, prefix, row, 'Verfuegbar')
        _check_quantity(errors, prefix, row, 'Lagerbestand')

        deviation = row.get('Abweichung')
        if not is_missing(deviation):
            number = parse_number(deviation)
            if number is None or not math.isfinite(number) or not number.is_integer():
                errors[f'{prefix}.Abweichung'] = 'Abweichung must be an integer'

    return errors

def ensure_valid(errors: Dict[str, str], message: str) -> None:
    """Raise a ValidationError carrying ``errors`` if there are any."""
    if errors:
        raise ValidationError(message, code='INVALID_INPUT', details=errors)
