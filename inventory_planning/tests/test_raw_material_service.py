import unittest
from contextlib import contextmanager
from datetime import datetime
from unittest.mock import MagicMock

from inventory_planning.exceptions import ValidationError, NotFoundError
from inventory_planning.models import CoverageStatus
from inventory_planning.services.raw_material_service import RawMaterialService


class TestRawMaterialService(unittest.TestCase):
    """Test suite for RawMaterialService with a mocked storage adapter."""

    def setUp(self):
        self.tx = MagicMock()
        self.tx.delete.return_value = 1

        self.adapter = MagicMock()

        @contextmanager
        def transaction():
            yield self.tx

        self.adapter.transaction.side_effect = transaction
        self.adapter.query_rows.return_value = [{
            'id': 1, 'sku': 'RM-1', 'name': 'Zucker', 'year': 2025,
            'jan': 10, 'feb': 10, 'mrz': 10, 'lieferzeit': '3 Monate',
        }]

        self.service = RawMaterialService(self.adapter)
        self.now = datetime(2025, 6, 15)

    def test_analyze_escalates_below_lead_time(self):
        analysis = self.service.analyze([{'sku': 'rm-1', 'lagerbestand': '25'}], year=2025, current_date=self.now)

        self.adapter.query_rows.assert_called_once_with('raw_material_consumption', {'year': 2025})
        decision = analysis.decisions[0]
        self.assertEqual(decision.name, 'Zucker')
        self.assertAlmostEqual(decision.coverage_months, 2.5)
        self.assertEqual(decision.status, CoverageStatus.RED)
        self.assertTrue(decision.lead_time_warning)

    def test_analyze_unknown_material(self):
        analysis = self.service.analyze([{'sku': 'RM-9', 'lagerbestand': 4}], year=2025, current_date=self.now)

        decision = analysis.decisions[0]
        self.assertTrue(decision.used_fallback)
        self.assertEqual(decision.status, CoverageStatus.GREEN)

    def test_analyze_empty_inventory(self):
        with self.assertRaises(ValidationError):
            self.service.analyze([], year=2025)

    def test_import_replaces_existing_rows(self):
        rows = [
            {'SKU': 'R1', 'Name': 'Zucker', 'Jan': '5'},
            {'SKU': 'R2', 'Name': 'Mehl', 'Feb': 7},
            {'SKU': 'R1', 'Name': 'Zucker', 'Mar': 2},
            {'Name': 'ohne Nummer'},
        ]

        result = self.service.import_consumption(rows, year=2024)

        self.assertEqual(result['imported'], 3)
        self.assertEqual(result['year'], 2024)
        self.assertEqual(result['message'], '3 Rohstoffe für Jahr 2024 importiert')
        self.tx.delete.assert_called_once_with('raw_material_consumption', {'sku': ['R1', 'R2'], 'year': 2024})

        table, records = self.tx.insert_many.call_args[0]
        self.assertEqual(table, 'raw_material_consumption')
        self.assertEqual([r['sku'] for r in records], ['R1', 'R2', 'R1'])
        self.assertEqual(set(records[0]), set(records[1]))

    def test_import_without_rows(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.import_consumption([])
        self.assertEqual(ctx.exception.code, 'NO_DATA')

    def test_import_without_valid_rows(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.import_consumption([{'Name': 'Zucker'}])

        self.assertEqual(ctx.exception.code, 'NO_VALID_ROWS')
        self.adapter.transaction.assert_not_called()

    def test_update_field_clears_empty_value(self):
        self.adapter.update_rows.return_value = 1

        self.service.update_field(1, 'lieferant', '')

        table, data, filters = self.adapter.update_rows.call_args[0]
        self.assertEqual(table, 'raw_material_consumption')
        self.assertIsNone(data['lieferant'])
        self.assertIn('updated_at', data)
        self.assertEqual(filters, {'id': 1})

    def test_update_field_rejects_unknown_field(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.update_field(1, 'jan', 5)

        self.assertEqual(ctx.exception.code, 'INVALID_FIELD')
        self.adapter.update_rows.assert_not_called()

    def test_update_field_missing_id(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.update_field(None, 'lieferant', 'Müller')
        self.assertEqual(ctx.exception.code, 'INVALID_INPUT')

    def test_update_field_unknown_record(self):
        self.adapter.update_rows.return_value = 0

        with self.assertRaises(NotFoundError):
            self.service.update_field(99, 'herkunft', 'DE')


if __name__ == '__main__':
    unittest.main()
