# inventory_planning/services/raw_material_service.py
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from inventory_planning.config import config
from inventory_planning.core.records import AnalysisConfig, ReorderAnalysis
from inventory_planning.core.reorder_analysis import analyze_reorder
from inventory_planning.exceptions import ValidationError, NotFoundError
from inventory_planning.logging_setup import logger as log_manager, get_logger
from inventory_planning.models import CoverageStatus
from inventory_planning.services.history_service import (
    raw_material_records_by_sku, snapshot_from_raw_material_row, normalize_consumption_row
)
from inventory_planning.utils.validation import validate_inventory_rows, ensure_valid

logger = get_logger('raw_material_service')

CONSUMPTION_TABLE = 'raw_material_consumption'

EDITABLE_FIELDS = ('herkunft', 'lieferant', 'lieferzeit', 'name')

class RawMaterialService:
    """Service for raw material consumption data and coverage analysis."""

    def __init__(self, adapter):
        """Initialize the raw material service.

        Args:
            adapter: DatabaseAdapter of the configured backend
        """
        self.adapter = adapter

    @property
    def default_year(self) -> int:
        return config.raw_material_defaults['default_year']

    def load_consumption(self, year: int):
        rows = self.adapter.query_rows(CONSUMPTION_TABLE, {'year': year})
        return raw_material_records_by_sku(rows, year)

    def analyze(
        self,
        inventory_rows: Sequence[Dict[str, Any]],
        year: Optional[int] = None,
        current_date: Optional[datetime] = None
    ) -> ReorderAnalysis:
        """Stock coverage of each raw material in an inventory upload.

        Args:
            inventory_rows: Rows with sku, name and lagerbestand
            year: Consumption year, defaults to the configured year
            current_date: Analysis date, defaults to now

        Returns:
            ReorderAnalysis sorted for presentation
        """
        ensure_valid(validate_inventory_rows(inventory_rows), "Invalid raw material analysis request")

        year = year or self.default_year
        current_date = current_date or datetime.now()

        log_info = log_manager.run_start_log('raw_material_analysis', {
            'year': year,
            'inventory_rows': len(inventory_rows),
        })

        try:
            analysis = analyze_reorder(
                [snapshot_from_raw_material_row(row) for row in inventory_rows],
                self.load_consumption(year),
                AnalysisConfig(year=year, current_date=current_date),
                recent_count=config.raw_material_defaults['recency_months'],
            )
        except Exception as e:
            log_manager.run_end_log(log_info, success=False, result_info={'error': str(e)})
            raise

        log_manager.run_end_log(log_info, success=True, result_info={
            'items': len(analysis.decisions),
            'red': sum(1 for d in analysis.decisions if d.status is CoverageStatus.RED),
        })
        return analysis

    def import_consumption(self, rows: Sequence[Dict[str, Any]], year: Optional[int] = None) -> Dict[str, Any]:
        """Import a consumption spreadsheet for one year.

        Existing rows of the imported SKUs and year are replaced.

        Args:
            rows: Spreadsheet rows with SKU, name, month and supplier columns
            year: Consumption year, defaults to the configured year

        Returns:
            Dictionary with the number of imported rows and a message

        Raises:
            ValidationError: if no row carries a SKU
        """
        if not rows:
            raise ValidationError("No data provided", code='NO_DATA')

        year = year or self.default_year
        records = [r for r in (normalize_consumption_row(row, year) for row in rows) if r is not None]

        if not records:
            raise ValidationError("No valid rows found", code='NO_VALID_ROWS')

        skus = list(dict.fromkeys(r['sku'] for r in records))

        with self.adapter.transaction() as tx:
            removed = tx.delete(CONSUMPTION_TABLE, {'sku': skus, 'year': year})
            tx.insert_many(CONSUMPTION_TABLE, records)

        logger.info(f"Imported {len(records)} raw materials for {year}, replaced {removed}")

        return {
            'imported': len(records),
            'year': year,
            'message': f"{len(records)} Rohstoffe für Jahr {year} importiert",
        }

    def update_field(self, record_id: int, field: str, value: Any) -> None:
        """Update one editable attribute of a consumption row.

        An empty string clears the field.

        Raises:
            ValidationError: if the id is missing or the field is not editable
            NotFoundError: if no row was updated
        """
        if not record_id or not field:
            raise ValidationError("Missing id or field", code='INVALID_INPUT')

        if field not in EDITABLE_FIELDS:
            raise ValidationError(f"Invalid field: {field}", code='INVALID_FIELD',
                                  details={'allowed': list(EDITABLE_FIELDS)})

        data = {
            field: None if value == '' else value,
            'updated_at': datetime.now().isoformat(),
        }

        updated = self.adapter.update_rows(CONSUMPTION_TABLE, data, {'id': record_id})
        if not updated:
            raise NotFoundError(f"Raw material record {record_id} not found", details={'id': record_id})

        logger.info(f"Updated {field} of raw material record {record_id}")

    def list_consumption(self, year: Optional[int] = None) -> List[Dict[str, Any]]:
        return self.adapter.query_rows(CONSUMPTION_TABLE, {'year': year or self.default_year}, order_by='sku')
