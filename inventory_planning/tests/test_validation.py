import unittest

from inventory_planning.exceptions import ValidationError
from inventory_planning.utils.validation import (
    parse_number, parse_quantity, parse_lead_time,
    validate_planning_params, validate_inventory_rows, validate_production_rows, ensure_valid
)


class TestParsing(unittest.TestCase):

    def test_parse_number(self):
        self.assertEqual(parse_number('12,5'), 12.5)
        self.assertEqual(parse_number(' 1 000 '), 1000.0)
        self.assertEqual(parse_number(3), 3.0)
        self.assertIsNone(parse_number(''))
        self.assertIsNone(parse_number('abc'))
        self.assertIsNone(parse_number(None))
        self.assertIsNone(parse_number(True))
        self.assertIsNone(parse_number(float('nan')))

    def test_parse_quantity_default(self):
        self.assertEqual(parse_quantity('7'), 7.0)
        self.assertEqual(parse_quantity(None), 0.0)
        self.assertEqual(parse_quantity('n/a', default=1.0), 1.0)

    def test_parse_lead_time(self):
        self.assertEqual(parse_lead_time('3 Monate'), 3.0)
        self.assertEqual(parse_lead_time('2,5'), 2.5)
        self.assertEqual(parse_lead_time(4), 4.0)
        self.assertIsNone(parse_lead_time('ca. 2'))
        self.assertIsNone(parse_lead_time(''))
        self.assertIsNone(parse_lead_time(None))
        self.assertIsNone(parse_lead_time(float('nan')))


class TestValidatePlanningParams(unittest.TestCase):

    def setUp(self):
        self.params = {'coverage_days': 30, 'safety_buffer': 7, 'holiday_lead_time_days': 0}

    def test_valid(self):
        self.assertEqual(validate_planning_params(self.params), {})

    def test_out_of_range(self):
        self.params.update(coverage_days=0, safety_buffer=61)
        errors = validate_planning_params(self.params)
        self.assertIn('coverage_days', errors)
        self.assertIn('safety_buffer', errors)
        self.assertNotIn('holiday_lead_time_days', errors)

    def test_missing_and_non_integer(self):
        del self.params['holiday_lead_time_days']
        self.params['coverage_days'] = 30.5
        self.params['safety_buffer'] = '7'
        errors = validate_planning_params(self.params)
        self.assertEqual(errors['holiday_lead_time_days'], 'holiday_lead_time_days is required')
        self.assertEqual(errors['coverage_days'], 'coverage_days must be an integer')
        self.assertEqual(errors['safety_buffer'], 'safety_buffer must be an integer')

    def test_upper_bounds_inclusive(self):
        self.params.update(coverage_days=365, safety_buffer=60, holiday_lead_time_days=60)
        self.assertEqual(validate_planning_params(self.params), {})


class TestValidateInventoryRows(unittest.TestCase):

    def test_empty(self):
        self.assertIn('inventory', validate_inventory_rows([]))

    def test_too_many_rows(self):
        self.assertIn('inventory', validate_inventory_rows([{}] * 5001))
        self.assertEqual(validate_inventory_rows([{}] * 5000), {})

    def test_ensure_valid_raises(self):
        with self.assertRaises(ValidationError) as ctx:
            ensure_valid({'inventory': 'No inventory data provided'}, "Invalid request")

        self.assertEqual(ctx.exception.code, 'INVALID_INPUT')
        self.assertEqual(ctx.exception.details, {'inventory': 'No inventory data provided'})

        ensure_valid({}, "Invalid request")


class TestValidateProductionRows(unittest.TestCase):

    def test_valid_rows(self):
        rows = [
            {'Artikelnummer': 'A1', 'Verfuegbar': '12,5', 'Abweichung': '-2'},
            {'Artikelnummer': 42, 'Lagerbestand': 0, 'Abweichung': None, 'Verfuegbar': float('nan')},
            {'Artikelnummer': 'B', 'Verfuegbar': '', 'Abweichung': 3.0},
        ]
        self.assertEqual(validate_production_rows(rows), {})

    def test_negative_stock(self):
        errors = validate_production_rows([
            {'Artikelnummer': 'A', 'Verfuegbar': -50},
            {'Artikelnummer': 'B', 'Lagerbestand': '-1'},
        ])

        self.assertEqual(errors['inventory[0].Verfuegbar'], 'Verfuegbar must not be negative')
        self.assertEqual(errors['inventory[1].Lagerbestand'], 'Lagerbestand must not be negative')

    def test_non_finite_or_unreadable_stock(self):
        errors = validate_production_rows([
            {'Artikelnummer': 'A', 'Verfuegbar': 'inf'},
            {'Artikelnummer': 'B', 'Lagerbestand': 'viel'},
        ])

        self.assertIn('inventory[0].Verfuegbar', errors)
        self.assertIn('inventory[1].Lagerbestand', errors)

    def test_non_integer_deviation(self):
        errors = validate_production_rows([
            {'Artikelnummer': 'A', 'Abweichung': 2.7},
            {'Artikelnummer': 'B', 'Abweichung': '1e999'},
            {'Artikelnummer': 'C', 'Abweichung': 'x'},
        ])

        self.assertEqual(sorted(errors), ['inventory[0].Abweichung', 'inventory[1].Abweichung',
                                          'inventory[2].Abweichung'])

    def test_sku_length(self):
        errors = validate_production_rows([
            {'Artikelnummer': 'A' * 129},
            {'Artikelnummer': 'A' * 128},
            {'Artikelnummer': '  '},
            {'Artikelname': 'ohne Nummer'},
        ])

        self.assertIn('inventory[0].Artikelnummer', errors)
        self.assertNotIn('inventory[1].Artikelnummer', errors)
        self.assertEqual(errors['inventory[2].Artikelnummer'], 'Artikelnummer is required')
        self.assertIn('inventory[3].Artikelnummer', errors)

    def test_overlong_name(self):
        errors = validate_production_rows([{'Artikelnummer': 'A', 'Artikelname': 'x' * 513}])
        self.assertIn('inventory[0].Artikelname', errors)


if __name__ == '__main__':
    unittest.main()
