import argparse
import json
import math
import sys
from datetime import datetime
from pathlib import Path

import pandas as pd
from tabulate import tabulate

from inventory_planning.config import config
from inventory_planning.exceptions import PlanningError, ValidationError
from inventory_planning.logging_setup import logger, get_logger, log_exception
from inventory_planning.utils.date_utils import convert_to_date

def init_application():
    """Initialize the database connection and return the storage adapter."""
    from inventory_planning.db import db, database_adapter

    db.initialize()

    log = logger.app_logger
    log.info("Inventory Planning System initialized")
    log.info(f"Using database: {db.db_type}")

    return database_adapter

def load_rows(path):
    """Load an inventory or consumption file into a list of row dictionaries.

    CSV files are read as text so that decimal commas survive; the
    separator is detected from the file. JSON files must hold a list of
    objects.
    """
    path = Path(path)
    if not path.exists():
        raise ValidationError(f"File not found: {path}", code='FILE_NOT_FOUND')

    if path.suffix.lower() == '.json':
        frame = pd.read_json(path, orient='records', dtype=False, convert_dates=False)
    elif path.suffix.lower() in ('.csv', '.txt'):
        frame = pd.read_csv(path, dtype=str, sep=None, engine='python', encoding='utf-8-sig')
    else:
        raise ValidationError(f"Unsupported file type: {path.suffix}", code='UNSUPPORTED_FILE')

    frame.columns = [str(c).strip() for c in frame.columns]
    return frame.to_dict(orient='records')

def parse_date(value):
    try:
        return convert_to_date(value)
    except ValueError:
        raise ValidationError(f"Invalid date: {value}. Expected YYYY-MM-DD", code='INVALID_DATE')

def _fmt(value, digits=2):
    if value is None:
        return ''
    if isinstance(value, float):
        if math.isinf(value):
            return '∞'
        return f"{value:.{digits}f}"
    return value

def _json_default(value):
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)

def _json_float(value):
    return None if value is None or math.isinf(value) else value

def production_item(decision):
    return {
        'artikelnummer': decision.sku,
        'name': decision.name,
        'bag_size': decision.bag_size,
        'current_stock': decision.current_stock,
        'final_daily_usage': decision.final_daily_usage,
        'final_monthly_usage': decision.final_monthly_usage,
        'current_month_days': decision.current_month_days,
        'days_until_stockout': _json_float(decision.days_until_stockout),
        'desired_stock': decision.desired_stock,
        'amount_to_produce': decision.amount_to_produce,
        'priority': decision.priority.value,
        'used_fallback': decision.used_fallback,
        'to_produce': decision.must_produce,
        **decision.attributes,
    }

def print_production_plan(plan, output_format):
    summary = plan.summary

    if output_format == 'json':
        run = dict(summary.to_run_row(), id=summary.run_id, created_at=summary.computed_at)
        print(json.dumps({'run': run, 'items': [production_item(d) for d in plan.decisions]},
                         default=_json_default, ensure_ascii=False, indent=2))
        return

    table_data = [[
        d.sku,
        d.name,
        d.bag_size or '',
        _fmt(d.current_stock, 0),
        _fmt(d.final_daily_usage, 3),
        _fmt(d.days_until_stockout, 1),
        _fmt(d.desired_stock, 1),
        d.amount_to_produce,
        d.priority.value,
        'x' if d.used_fallback else '',
    ] for d in plan.decisions]

    print(f"\nProduction plan (sales year {summary.sales_year}, holiday factor {summary.holiday_factor}):")
    print(tabulate(table_data, headers=['Artikelnummer', 'Name', 'Beutel', 'Bestand', 'Tagesbedarf',
                                        'Tage', 'Soll', 'Produzieren', 'Priorität', 'Fallback']))
    print(f"\nTotal items: {summary.item_count}, to produce: {summary.must_produce_count}")
    if summary.run_id is not None:
        print(f"Stored as run {summary.run_id}")

def print_reorder_analysis(analysis, output_format):
    if output_format == 'json':
        print(json.dumps({
            'results': [d.to_dict() for d in analysis.decisions],
            'analyzedAt': analysis.analyzed_at,
            'year': analysis.year,
        }, default=_json_default, ensure_ascii=False, indent=2))
        return

    table_data = []
    for d in analysis.decisions:
        row = d.to_dict()
        table_data.append([
            row['sku'],
            row['name'],
            row['lieferant'] or '',
            _fmt(row['lagerbestand'], 1),
            row['avgVerbrauchMonat'],
            '∞' if row['reichweiteMonat'] is None else row['reichweiteMonat'],
            '' if row['lieferzeit'] is None else row['lieferzeit'],
            row['status'],
            row['statusText'],
            row['trendDirection'],
        ])

    print(f"\nRaw material coverage ({analysis.year}):")
    print(tabulate(table_data, headers=['SKU', 'Name', 'Lieferant', 'Lagerbestand', 'Ø Verbrauch/Monat',
                                        'Reichweite', 'Lieferzeit', 'Status', 'Text', 'Trend']))
    print(f"\nTotal raw materials: {len(analysis.decisions)}")

def plan_production_command(args):
    """Compute a production plan from an inventory file."""
    from inventory_planning.services.production_service import ProductionPlanningService

    defaults = config.planning_defaults
    params = {
        'coverage_days': args.coverage_days if args.coverage_days is not None else defaults['coverage_days'],
        'safety_buffer': args.safety_buffer if args.safety_buffer is not None else defaults['safety_buffer'],
        'holiday_lead_time_days': (args.holiday_lead_time if args.holiday_lead_time is not None
                                   else defaults['holiday_lead_time_days']),
    }

    rows = load_rows(args.inventory)
    service = ProductionPlanningService(init_application())
    plan = service.compute_plan(rows, params, current_date=parse_date(args.date), persist=not args.no_persist)
    print_production_plan(plan, args.format)

def analyze_raw_materials_command(args):
    """Analyze raw material coverage from an inventory file."""
    from inventory_planning.services.raw_material_service import RawMaterialService

    rows = load_rows(args.inventory)
    service = RawMaterialService(init_application())
    analysis = service.analyze(rows, year=args.year, current_date=parse_date(args.date))
    print_reorder_analysis(analysis, args.format)

def import_consumption_command(args):
    from inventory_planning.services.raw_material_service import RawMaterialService

    rows = load_rows(args.file)
    result = RawMaterialService(init_application()).import_consumption(rows, year=args.year)
    print(result['message'])

def update_raw_material_command(args):
    from inventory_planning.services.raw_material_service import RawMaterialService

    RawMaterialService(init_application()).update_field(args.id, args.field, args.value)
    print(f"Updated {args.field} of record {args.id}")

def list_raw_materials_command(args):
    from inventory_planning.services.raw_material_service import RawMaterialService

    rows = RawMaterialService(init_application()).list_consumption(year=args.year)
    if args.format == 'json':
        print(json.dumps(rows, default=_json_default, ensure_ascii=False, indent=2))
        return

    table_data = [[
        r.get('id'),
        r.get('sku'),
        r.get('name'),
        r.get('herkunft'),
        r.get('lieferant'),
        r.get('zwischenhaendler'),
        r.get('lieferzeit'),
    ] for r in rows]

    print(tabulate(table_data, headers=['ID', 'SKU', 'Name', 'Herkunft', 'Lieferant', 'Zwischenhändler', 'Lieferzeit']))

def list_runs_command(args):
    from inventory_planning.services.production_service import ProductionPlanningService

    runs = ProductionPlanningService(init_application()).list_runs(limit=args.limit)
    if not runs:
        print("No production plan runs found")
        return

    table_data = [[
        r.get('id'),
        r.get('created_at'),
        r.get('sales_year'),
        r.get('coverage_days'),
        r.get('safety_buffer'),
        r.get('holiday_lead_time_days'),
        r.get('holiday_factor'),
    ] for r in runs]

    print(tabulate(table_data, headers=['Run', 'Erstellt', 'Verkaufsjahr', 'Reichweite (Tage)',
                                        'Sicherheitspuffer', 'Feiertagsvorlauf', 'Feiertagsfaktor']))

def show_run_command(args):
    from inventory_planning.services.production_service import ProductionPlanningService

    items = ProductionPlanningService(init_application()).get_run_items(args.run_id)
    if args.format == 'json':
        print(json.dumps(items, default=_json_default, ensure_ascii=False, indent=2))
        return

    table_data = [[
        i.get('artikelnummer'),
        i.get('name'),
        _fmt(i.get('current_stock'), 0),
        _fmt(i.get('days_until_stockout'), 1),
        i.get('amount_to_produce'),
        i.get('priority'),
    ] for i in items]

    print(f"\nItems of run {args.run_id}:")
    print(tabulate(table_data, headers=['Artikelnummer', 'Name', 'Bestand', 'Tage', 'Produzieren', 'Priorität']))

def setup_db_command(args):
    from inventory_planning.scripts.setup_db import setup_database

    if not setup_database(args.drop):
        raise PlanningError("Database setup failed", code='SETUP_FAILED')

def build_parser():
    parser = argparse.ArgumentParser(description='Inventory Planning System')
    subparsers = parser.add_subparsers(dest='command', help='Commands')

    plan_parser = subparsers.add_parser('plan-production', help='Compute a production plan')
    plan_parser.add_argument('inventory', help='Inventory file (CSV or JSON)')
    plan_parser.add_argument('--coverage-days', type=int, help='Target days of stock to hold')
    plan_parser.add_argument('--safety-buffer', type=int, help='Days threshold for urgency')
    plan_parser.add_argument('--holiday-lead-time', type=int,
                             help='Days before Easter/Christmas the holiday factor applies')
    plan_parser.add_argument('--date', help='Planning date (YYYY-MM-DD), defaults to today')
    plan_parser.add_argument('--no-persist', action='store_true', help='Do not store the run')
    plan_parser.add_argument('--format', choices=['table', 'json'], default='table')
    plan_parser.set_defaults(func=plan_production_command)

    analyze_parser = subparsers.add_parser('analyze-raw-materials', help='Analyze raw material coverage')
    analyze_parser.add_argument('inventory', help='Inventory file (CSV or JSON) with sku, name, lagerbestand')
    analyze_parser.add_argument('--year', type=int, help='Consumption year')
    analyze_parser.add_argument('--date', help='Analysis date (YYYY-MM-DD), defaults to today')
    analyze_parser.add_argument('--format', choices=['table', 'json'], default='table')
    analyze_parser.set_defaults(func=analyze_raw_materials_command)

    import_parser = subparsers.add_parser('import-consumption', help='Import raw material consumption')
    import_parser.add_argument('file', help='Consumption file (CSV or JSON)')
    import_parser.add_argument('--year', type=int, help='Consumption year')
    import_parser.set_defaults(func=import_consumption_command)

    update_parser = subparsers.add_parser('update-raw-material', help='Edit a raw material attribute')
    update_parser.add_argument('id', type=int, help='Consumption record id')
    update_parser.add_argument('field', help='herkunft, lieferant, lieferzeit or name')
    update_parser.add_argument('value', help='New value, empty string clears it')
    update_parser.set_defaults(func=update_raw_material_command)

    materials_parser = subparsers.add_parser('list-raw-materials', help='List stored raw material records')
    materials_parser.add_argument('--year', type=int, help='Consumption year')
    materials_parser.add_argument('--format', choices=['table', 'json'], default='table')
    materials_parser.set_defaults(func=list_raw_materials_command)

    runs_parser = subparsers.add_parser('list-runs', help='List production plan runs')
    runs_parser.add_argument('--limit', type=int, default=20)
    runs_parser.set_defaults(func=list_runs_command)

    show_parser = subparsers.add_parser('show-run', help='Show items of a production plan run')
    show_parser.add_argument('run_id', type=int)
    show_parser.add_argument('--format', choices=['table', 'json'], default='table')
    show_parser.set_defaults(func=show_run_command)

    setup_parser = subparsers.add_parser('setup-db', help='Set up the database schema')
    setup_parser.add_argument('--drop', action='store_true', help='Drop existing tables before setup')
    setup_parser.set_defaults(func=setup_db_command)

    return parser

def main(argv=None):
    """Main application entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, 'func', None):
        parser.print_help()
        return 1

    log = get_logger('cli')
    log.info(f"Running command: {args.command}")

    try:
        args.func(args)
    except PlanningError as e:
        log_exception('cli', e, f"Command {args.command} failed")
        print(f"Error: {e}", file=sys.stderr)
        if e.details:
            print(json.dumps(e.details, default=_json_default, ensure_ascii=False), file=sys.stderr)
        return 1
    except Exception as e:
        log_exception('cli', e, f"Command {args.command} failed")
        print(f"Error: {str(e)}", file=sys.stderr)
        return 1

    return 0

if __name__ == "__main__":
    sys.exit(main())
