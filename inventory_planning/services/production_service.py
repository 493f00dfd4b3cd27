# inventory_planning/services/production_service.py
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from inventory_planning.config import config
from inventory_planning.core.production_planning import plan_production
from inventory_planning.core.records import PlanningConfig, ProductionPlan
from inventory_planning.exceptions import DatabaseError, PersistenceError, NotFoundError
from inventory_planning.logging_setup import logger as log_manager, get_logger
from inventory_planning.services.history_service import (
    sales_series_by_sku, product_settings_by_sku, snapshot_from_production_row
)
from inventory_planning.utils.validation import (
    validate_planning_params, validate_inventory_rows, validate_production_rows, ensure_valid
)

logger = get_logger('production_service')

SALES_TABLE = 'sales_history'
PRODUCT_INFO_TABLE = 'product_infos'
RUNS_TABLE = 'production_plan_runs'
ITEMS_TABLE = 'production_plan_items'

OPTIONAL_ITEM_COLUMN = 'final_monthly_usage'

class ProductionPlanningService:
    """Service for production planning runs."""

    def __init__(self, adapter):
        """Initialize the production planning service.

        Args:
            adapter: DatabaseAdapter of the configured backend
        """
        self.adapter = adapter

    def load_sales_history(self, year: int):
        rows = self.adapter.query_rows(SALES_TABLE, {'year': year})
        return sales_series_by_sku(rows, year)

    def load_product_settings(self):
        return product_settings_by_sku(self.adapter.query_rows(PRODUCT_INFO_TABLE))

    def compute_plan(
        self,
        inventory_rows: Sequence[Dict[str, Any]],
        params: Dict[str, Any],
        current_date: Optional[datetime] = None,
        persist: bool = True
    ) -> ProductionPlan:
        """Compute and optionally store a production plan.

        Args:
            inventory_rows: Inventory upload rows (Artikelnummer, Verfuegbar, ...)
            params: coverage_days, safety_buffer and holiday_lead_time_days
            current_date: Planning date, defaults to now
            persist: Store the run header and items

        Returns:
            ProductionPlan; its summary carries the run id when persisted

        Raises:
            ValidationError: if parameters or inventory rows are invalid
            PersistenceError: if the run cannot be stored
        """
        errors = validate_planning_params(params)
        errors.update(validate_inventory_rows(inventory_rows) or validate_production_rows(inventory_rows))
        ensure_valid(errors, "Invalid production planning request")

        current_date = current_date or datetime.now()
        planning_config = PlanningConfig(
            coverage_days=int(params['coverage_days']),
            safety_buffer=int(params['safety_buffer']),
            holiday_lead_time_days=int(params['holiday_lead_time_days']),
        )

        log_info = log_manager.run_start_log('production_plan', {
            'coverage_days': planning_config.coverage_days,
            'safety_buffer': planning_config.safety_buffer,
            'holiday_lead_time_days': planning_config.holiday_lead_time_days,
            'inventory_rows': len(inventory_rows),
        })

        try:
            defaults = config.planning_defaults
            sales_year = current_date.year - 1

            plan = plan_production(
                [snapshot_from_production_row(row) for row in inventory_rows],
                self.load_sales_history(sales_year),
                self.load_product_settings(),
                planning_config,
                current_date,
                uplift=defaults['holiday_factor'],
                fallback_daily_usage=defaults['fallback_daily_usage'],
            )

            if persist:
                plan = self.persist_plan(plan)

            log_manager.run_end_log(log_info, success=True, result_info={
                'run_id': plan.summary.run_id,
                'items': plan.summary.item_count,
                'must_produce': plan.summary.must_produce_count,
            })
            return plan

        except Exception as e:
            log_manager.run_end_log(log_info, success=False, result_info={'error': str(e)})
            raise

    def persist_plan(self, plan: ProductionPlan) -> ProductionPlan:
        """Store the run header and its items as one unit.

        Item rows are built before anything is written. PostgreSQL writes
        header and items in a single transaction. Supabase has no
        client-side transactions, so a failed item insert deletes the
        header again.

        Returns:
            ProductionPlan whose summary carries the stored run id
        """
        item_rows = [decision.to_item_row(None) for decision in plan.decisions]

        try:
            with self.adapter.transaction() as tx:
                run = tx.insert(RUNS_TABLE, plan.summary.to_run_row())
                run_id = run.get('id')
                if run_id is None:
                    raise DatabaseError("Run header was stored without an id")

                try:
                    self._insert_items(tx, [dict(row, run_id=run_id) for row in item_rows])
                except Exception as e:
                    if not self.adapter.supports_transactions:
                        self._discard_run(run_id)
                    if isinstance(e, DatabaseError):
                        raise
                    raise DatabaseError(f"Storing items of run {run_id} failed: {e}") from e

        except DatabaseError as e:
            raise PersistenceError(f"Failed to store production plan: {e.message}") from e

        logger.info(f"Stored production plan run {run_id} with {len(item_rows)} items")
        return ProductionPlan(summary=plan.summary.with_run_id(run_id), decisions=plan.decisions)

    def _insert_items(self, tx, rows: List[Dict[str, Any]]) -> None:
        if not rows:
            return

        try:
            tx.insert_many(ITEMS_TABLE, rows)
        except DatabaseError as e:
            # Older schemas lack the monthly usage column
            if self.adapter.supports_transactions or OPTIONAL_ITEM_COLUMN not in str(e).lower():
                raise
            logger.warning(f"Column {OPTIONAL_ITEM_COLUMN} missing, storing items without it")
            tx.insert_many(ITEMS_TABLE, [
                {k: v for k, v in row.items() if k != OPTIONAL_ITEM_COLUMN} for row in rows
            ])

    def _discard_run(self, run_id: int) -> None:
        try:
            self.adapter.delete_rows(RUNS_TABLE, {'id': run_id})
        except DatabaseError as e:
            logger.error(f"Could not remove incomplete production plan run {run_id}: {e.message}")

    def list_runs(self, limit: int = 20) -> List[Dict[str, Any]]:
        """Most recent planning runs, newest first."""
        return self.adapter.query_rows(RUNS_TABLE, limit=limit, order_by='created_at', descending=True)

    def get_run(self, run_id: int) -> Dict[str, Any]:
        rows = self.adapter.query_rows(RUNS_TABLE, {'id': run_id}, limit=1)
        if not rows:
            raise NotFoundError(f"Production plan run {run_id} not found", details={'run_id': run_id})
        return rows[0]

    def get_run_items(self, run_id: int) -> List[Dict[str, Any]]:
        """Stored items of a run.

        Raises:
            NotFoundError: if the run does not exist
        """
        self.get_run(run_id)
        return self.adapter.query_rows(ITEMS_TABLE, {'run_id': run_id}, order_by='id')
