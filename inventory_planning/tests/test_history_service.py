import unittest

from inventory_planning.services.history_service import (
    month_index_for, series_from_row, sales_series_by_sku, product_settings_by_sku,
    raw_material_records_by_sku, snapshot_from_production_row,
    snapshot_from_raw_material_row, normalize_consumption_row
)


class TestMonthColumns(unittest.TestCase):

    def test_aliases(self):
        self.assertEqual(month_index_for('jan'), 0)
        self.assertEqual(month_index_for('März'), 2)
        self.assertEqual(month_index_for('mrz'), 2)
        self.assertEqual(month_index_for(' Oct '), 9)
        self.assertEqual(month_index_for('Dezember'), 11)
        self.assertIsNone(month_index_for('artikelnummer'))

    def test_series_from_row(self):
        row = {'artikelnummer': 'A', 'year': 2024, 'jan': '5', 'mär': '3,5', 'feb': 'x', 'dez': None}
        s = series_from_row(row, 'A', 2024)

        self.assertEqual(s.values[0], 5.0)
        self.assertIsNone(s.values[1])
        self.assertEqual(s.values[2], 3.5)
        self.assertIsNone(s.values[11])
        self.assertEqual(len(s.values), 12)


class TestStoredRows(unittest.TestCase):

    def test_sales_keys_are_trimmed_not_lowered(self):
        rows = [
            {'artikelnummer': ' Ab-1 ', 'year': 2024, 'jan': 4},
            {'artikelnummer': '', 'year': 2024, 'jan': 1},
        ]
        result = sales_series_by_sku(rows, 2024)

        self.assertEqual(list(result), ['Ab-1'])
        self.assertEqual(result['Ab-1'].values[0], 4.0)

    def test_product_settings(self):
        rows = [
            {'artikelnummer': 'A', 'mindestbestand': None, 'beutelgroesse': '  '},
            {'artikelnummer': 'B', 'mindestbestand': '25', 'beutelgroesse': ' 500g '},
        ]
        result = product_settings_by_sku(rows)

        self.assertEqual(result['A'].min_stock, 0.0)
        self.assertIsNone(result['A'].bag_size)
        self.assertEqual(result['B'].min_stock, 25.0)
        self.assertEqual(result['B'].bag_size, '500g')

    def test_raw_material_records(self):
        rows = [{
            'id': 3, 'sku': 'RM-1', 'name': 'Zucker', 'year': 2025,
            'jan': 10, 'mrz': 12, 'herkunft': 'DE', 'lieferant': '', 'lieferzeit': '2,5 Monate',
        }]
        result = raw_material_records_by_sku(rows, 2025)

        rec = result['rm-1']
        self.assertEqual(rec.name, 'Zucker')
        self.assertEqual(rec.origin, 'DE')
        self.assertIsNone(rec.supplier)
        self.assertEqual(rec.lead_time_months, 2.5)
        self.assertEqual(rec.series.values[2], 12.0)


class TestInventoryRows(unittest.TestCase):

    def test_available_stock_preferred(self):
        snapshot = snapshot_from_production_row({'Artikelnummer': 'A', 'Verfuegbar': 0, 'Lagerbestand': 50})
        self.assertEqual(snapshot.current_stock, 0.0)

    def test_stock_fallbacks(self):
        self.assertEqual(
            snapshot_from_production_row({'Artikelnummer': 'A', 'Lagerbestand': '12,5'}).current_stock, 12.5)
        self.assertEqual(
            snapshot_from_production_row({'Artikelnummer': 'A', 'Verfuegbar': float('nan'),
                                          'Lagerbestand': 3}).current_stock, 3.0)
        self.assertEqual(snapshot_from_production_row({'Artikelnummer': 'A'}).current_stock, 0.0)

    def test_pass_through_attributes(self):
        snapshot = snapshot_from_production_row({
            'Artikelnummer': ' A1 ', 'Artikelname': 'Granola', 'Verfuegbar': 4,
            'MHD_Lieferant': '2026-01-31', 'Abweichung': '-2', 'Lot': 'L-7', 'MHD': '',
        })

        self.assertEqual(snapshot.sku, 'A1')
        self.assertEqual(snapshot.name, 'Granola')
        self.assertEqual(snapshot.attributes['mhd_lieferant'], '2026-01-31')
        self.assertEqual(snapshot.attributes['abweichung'], -2.0)
        self.assertEqual(snapshot.attributes['lot'], 'L-7')
        self.assertIsNone(snapshot.attributes['mhd'])

    def test_non_finite_deviation_dropped(self):
        snapshot = snapshot_from_production_row({'Artikelnummer': 'A', 'Abweichung': '1e999'})
        self.assertIsNone(snapshot.attributes['abweichung'])

    def test_raw_material_row(self):
        snapshot = snapshot_from_raw_material_row({'sku': 'RM-1', 'lagerbestand': 'abc'})
        self.assertEqual(snapshot.current_stock, 0.0)
        self.assertEqual(snapshot.name, '')


class TestNormalizeConsumptionRow(unittest.TestCase):

    def test_aliases_and_months(self):
        row = {
            'SKU ': ' R1 ', 'Name': 'Zucker', 'Januar': '1,5', 'Mrz': '', 'Dec': 'n/a',
            'Lieferzeit': '2 Monate', 'Vendor': 'Müller', 'Zwischenhändler': 'Handel AG',
        }
        result = normalize_consumption_row(row, 2024)

        self.assertEqual(result['sku'], 'R1')
        self.assertEqual(result['name'], 'Zucker')
        self.assertEqual(result['year'], 2024)
        self.assertEqual(result['jan'], 1.5)
        self.assertIsNone(result['mrz'])
        self.assertIsNone(result['dez'])
        self.assertIsNone(result['feb'])
        self.assertEqual(result['lieferzeit'], '2 Monate')
        self.assertEqual(result['lieferant'], 'Müller')
        self.assertEqual(result['zwischenhaendler'], 'Handel AG')
        self.assertIsNone(result['herkunft'])

    def test_row_without_sku(self):
        self.assertIsNone(normalize_consumption_row({'Name': 'Zucker', 'Jan': 3}))

    def test_artikelnummer_alias(self):
        result = normalize_consumption_row({'Artikelnummer': 42, 'Jan': 3})
        self.assertEqual(result['sku'], '42')
        self.assertEqual(result['year'], 2025)


if __name__ == '__main__':
    unittest.main()
