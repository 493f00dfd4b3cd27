# inventory_planning/services/history_service.py
"""Normalization of stored and uploaded rows into planning records.

Month columns are recognized by German and English spellings, so the same
code reads the ``sales_history`` table (``mär``), the consumption table
(``mrz``) and spreadsheet uploads (``März``, ``Januar``, ``Oct`` ...).
"""
import math
from typing import Any, Dict, Iterable, List, Optional

from inventory_planning.core.records import (
    MonthlySeries, SkuSnapshot, ProductSettings, RawMaterialRecord
)
from inventory_planning.models import CONSUMPTION_MONTH_COLUMNS
from inventory_planning.utils.validation import parse_number, parse_quantity, parse_lead_time, is_missing

MONTH_ALIASES = {
    'jan': 0, 'januar': 0,
    'feb': 1, 'februar': 1,
    'mrz': 2, 'mär': 2, 'maerz': 2, 'märz': 2, 'mar': 2,
    'apr': 3, 'april': 3,
    'mai': 4, 'may': 4,
    'jun': 5, 'juni': 5,
    'jul': 6, 'juli': 6,
    'aug': 7, 'august': 7,
    'sep': 8, 'sept': 8, 'september': 8,
    'okt': 9, 'oktober': 9, 'oct': 9,
    'nov': 10, 'november': 10,
    'dez': 11, 'dezember': 11, 'dec': 11,
}

SKU_ALIASES = ('sku', 'artikelnummer', 'artikelnr', 'id')
NAME_ALIASES = ('name', 'artikelname', 'produktname', 'bezeichnung')
ORIGIN_ALIASES = ('herkunft', 'origin', 'ursprung')
SUPPLIER_ALIASES = ('lieferant', 'supplier', 'vendor')
INTERMEDIARY_ALIASES = ('zwischenhaendler', 'zwischenhändler', 'intermediary')
LEAD_TIME_ALIASES = ('lieferzeit', 'leadtime', 'lead_time', 'lead time')

DEFAULT_IMPORT_YEAR = 2025

def month_index_for(column: str) -> Optional[int]:
    """Month index (0-11) of a column header, None if it is no month."""
    return MONTH_ALIASES.get(str(column).strip().lower())

def clean_value(value: Any) -> Any:
    """None for missing cells: None, NaN and blank strings."""
    return None if is_missing(value) else value

def clean_text(value: Any) -> Optional[str]:
    value = clean_value(value)
    if value is None:
        return None
    return str(value).strip() or None

def row_sku(row: Dict[str, Any], key: str) -> str:
    value = clean_value(row.get(key))
    return '' if value is None else str(value).strip()

def series_from_row(row: Dict[str, Any], sku: str, year: int) -> MonthlySeries:
    """Build a MonthlySeries from the month columns of a row.

    Unparseable cells become None; the first column mapping to a month wins.
    """
    values: List[Optional[float]] = [None] * 12
    seen = set()
    for column, raw in row.items():
        index = month_index_for(column)
        if index is None or index in seen:
            continue
        seen.add(index)
        values[index] = parse_number(clean_value(raw))
    return MonthlySeries(sku, year, tuple(values))

def sales_series_by_sku(rows: Iterable[Dict[str, Any]], year: int) -> Dict[str, MonthlySeries]:
    """Sales history rows keyed by trimmed article number (case-sensitive)."""
    result = {}
    for row in rows or []:
        sku = row_sku(row, 'artikelnummer')
        if sku:
            result[sku] = series_from_row(row, sku, row.get('year') or year)
    return result

def product_settings_by_sku(rows: Iterable[Dict[str, Any]]) -> Dict[str, ProductSettings]:
    """Product master data keyed by trimmed article number.

    A missing or unparseable minimum stock counts as 0, an empty bag size
    as not maintained.
    """
    result = {}
    for row in rows or []:
        sku = row_sku(row, 'artikelnummer')
        if not sku:
            continue
        result[sku] = ProductSettings(
            sku=sku,
            min_stock=parse_quantity(clean_value(row.get('mindestbestand'))),
            bag_size=clean_text(row.get('beutelgroesse')),
        )
    return result

def raw_material_records_by_sku(rows: Iterable[Dict[str, Any]], year: int) -> Dict[str, RawMaterialRecord]:
    """Consumption rows keyed by trimmed, lower-cased SKU."""
    result = {}
    for row in rows or []:
        sku = row_sku(row, 'sku')
        if not sku:
            continue
        result[sku.lower()] = RawMaterialRecord(
            series=series_from_row(row, sku, row.get('year') or year),
            name=clean_text(row.get('name')),
            origin=clean_text(row.get('herkunft')),
            supplier=clean_text(row.get('lieferant')),
            intermediary=clean_text(row.get('zwischenhaendler')),
            lead_time_months=parse_lead_time(clean_value(row.get('lieferzeit'))),
        )
    return result

def snapshot_from_production_row(row: Dict[str, Any]) -> SkuSnapshot:
    """Inventory upload row of finished goods.

    Stock is ``Verfuegbar``, else ``Lagerbestand``, else 0. Best-before
    dates, lot and deviation are carried through to the plan items.
    """
    stock = clean_value(row.get('Verfuegbar'))
    if stock is None:
        stock = clean_value(row.get('Lagerbestand'))

    deviation = parse_number(clean_value(row.get('Abweichung')))
    if deviation is not None and not math.isfinite(deviation):
        deviation = None

    return SkuSnapshot(
        sku=row_sku(row, 'Artikelnummer'),
        name=clean_text(row.get('Artikelname')) or '',
        current_stock=parse_quantity(stock),
        attributes={
            'mhd_lieferant': clean_text(row.get('MHD_Lieferant')),
            'abweichung': deviation,
            'lot': clean_text(row.get('Lot')),
            'mhd': clean_text(row.get('MHD')),
        },
    )

def snapshot_from_raw_material_row(row: Dict[str, Any]) -> SkuSnapshot:
    """Inventory upload row of raw materials (sku, name, lagerbestand)."""
    return SkuSnapshot(
        sku=row_sku(row, 'sku'),
        name=clean_text(row.get('name')) or '',
        current_stock=parse_quantity(clean_value(row.get('lagerbestand'))),
    )

def _lookup(row: Dict[str, Any], keys: Dict[str, str], aliases) -> Any:
    for alias in aliases:
        key = keys.get(alias)
        if key is not None:
            value = clean_value(row[key])
            if value is not None:
                return value
    return None

def normalize_consumption_row(row: Dict[str, Any], year: int = DEFAULT_IMPORT_YEAR) -> Optional[Dict[str, Any]]:
    """Map a spreadsheet row onto a ``raw_material_consumption`` row.

    Column headers are matched case-insensitively against known aliases.
    Every month column is present; blank and unparseable cells are NULL.

    Args:
        row: Uploaded row
        year: Consumption year

    Returns:
        Row dictionary, or None when the row carries no SKU
    """
    keys = {str(k).strip().lower(): k for k in (row or {})}

    sku_value = _lookup(row, keys, SKU_ALIASES)
    sku = str(sku_value).strip() if sku_value is not None else ''
    if not sku:
        return None

    def text(aliases):
        value = _lookup(row, keys, aliases)
        return None if value is None else (str(value).strip() or None)

    record = {
        'sku': sku,
        'name': text(NAME_ALIASES),
        'year': year,
        'herkunft': text(ORIGIN_ALIASES),
        'lieferant': text(SUPPLIER_ALIASES),
        'zwischenhaendler': text(INTERMEDIARY_ALIASES),
        'lieferzeit': text(LEAD_TIME_ALIASES),
    }
    record.update(dict.fromkeys(CONSUMPTION_MONTH_COLUMNS))

    for normalized, key in keys.items():
        index = MONTH_ALIASES.get(normalized)
        if index is None:
            continue
        value = clean_value(row[key])
        if value is not None:
            record[CONSUMPTION_MONTH_COLUMNS[index]] = parse_number(value)

    return record
