import math
import unittest
from datetime import date

from inventory_planning.core.records import (
    MonthlySeries, SkuSnapshot, RawMaterialRecord, AnalysisConfig
)
from inventory_planning.core.reorder_analysis import (
    analyze_item, analyze_reorder, classify_coverage, coverage_months
)
from inventory_planning.models import CoverageStatus, TrendDirection

JUNE = 5


def record(values, sku='R1', lead_time=None, name=None):
    values = list(values) + [None] * (12 - len(values))
    return RawMaterialRecord(
        series=MonthlySeries(sku, 2025, tuple(values)),
        name=name,
        lead_time_months=lead_time,
    )


class TestClassifyCoverage(unittest.TestCase):

    def test_tiers(self):
        self.assertEqual(classify_coverage(0.0), (CoverageStatus.RED, 'Kritisch'))
        self.assertEqual(classify_coverage(0.99), (CoverageStatus.RED, 'Kritisch'))
        self.assertEqual(classify_coverage(1.0), (CoverageStatus.ORANGE, 'Warnung'))
        self.assertEqual(classify_coverage(2.0), (CoverageStatus.YELLOW, 'Aufmerksamkeit'))
        self.assertEqual(classify_coverage(2.99), (CoverageStatus.YELLOW, 'Aufmerksamkeit'))
        self.assertEqual(classify_coverage(3.0), (CoverageStatus.GREEN, 'Ausreichend'))
        self.assertEqual(classify_coverage(math.inf), (CoverageStatus.GREEN, 'Ausreichend(∞)'))

    def test_coverage_without_usage(self):
        self.assertEqual(coverage_months(5.0, 0.0), math.inf)
        self.assertEqual(coverage_months(0.0, 0.0), 0.0)


class TestAnalyzeItem(unittest.TestCase):

    def test_three_months_at_green_boundary(self):
        decision = analyze_item(SkuSnapshot('R1', current_stock=6.0), record([2, 2, 2]), JUNE)

        self.assertFalse(decision.used_fallback)
        self.assertAlmostEqual(decision.average_monthly_usage, 2.0)
        self.assertAlmostEqual(decision.coverage_months, 3.0)
        self.assertEqual(decision.status, CoverageStatus.GREEN)
        self.assertEqual(decision.status_text, 'Ausreichend')
        self.assertEqual(decision.trend_direction, TrendDirection.STABLE)
        self.assertFalse(decision.lead_time_warning)

    def test_no_consumption_record(self):
        decision = analyze_item(SkuSnapshot('R1', current_stock=5.0), None, JUNE)

        self.assertTrue(decision.used_fallback)
        self.assertEqual(decision.average_monthly_usage, 0.0)
        self.assertEqual(decision.coverage_months, math.inf)
        self.assertEqual(decision.status, CoverageStatus.GREEN)
        self.assertEqual(decision.status_text, 'Kein Verbrauch / Unendlich')

    def test_no_valid_months_and_no_stock(self):
        decision = analyze_item(SkuSnapshot('R1', current_stock=0.0), record([0, -3, None]), JUNE)

        self.assertTrue(decision.used_fallback)
        self.assertEqual(decision.coverage_months, 0.0)
        self.assertEqual(decision.status, CoverageStatus.GREEN)

    def test_fallback_below_lead_time_escalates(self):
        decision = analyze_item(SkuSnapshot('R1', current_stock=0.0), record([], lead_time=2.0), JUNE)

        self.assertTrue(decision.used_fallback)
        self.assertEqual(decision.status, CoverageStatus.RED)
        self.assertEqual(decision.status_text, 'Reichweite unter Lieferzeit (2 Monate)')
        self.assertTrue(decision.lead_time_warning)

    def test_lead_time_override(self):
        decision = analyze_item(SkuSnapshot('R1', current_stock=25.0),
                                record([10, 10, 10], lead_time=3.0), JUNE)

        self.assertAlmostEqual(decision.coverage_months, 2.5)
        self.assertEqual(decision.status, CoverageStatus.RED)
        self.assertEqual(decision.status_text, 'Reichweite unter Lieferzeit (3 Monate)')
        self.assertTrue(decision.lead_time_warning)

    def test_lead_time_with_decimals(self):
        decision = analyze_item(SkuSnapshot('R1', current_stock=25.0),
                                record([10, 10, 10], lead_time=4.5), JUNE)
        self.assertEqual(decision.status_text, 'Reichweite unter Lieferzeit (4.5 Monate)')

    def test_lead_time_below_coverage_keeps_status(self):
        decision = analyze_item(SkuSnapshot('R1', current_stock=25.0),
                                record([10, 10, 10], lead_time=2.0), JUNE)

        self.assertEqual(decision.status, CoverageStatus.YELLOW)
        self.assertFalse(decision.lead_time_warning)

    def test_invalid_lead_time_ignored(self):
        for lead_time in (0.0, -1.0, float('nan'), math.inf):
            decision = analyze_item(SkuSnapshot('R1', current_stock=25.0),
                                    record([10, 10, 10], lead_time=lead_time), JUNE)
            self.assertEqual(decision.status, CoverageStatus.YELLOW)
            self.assertFalse(decision.lead_time_warning)

    def test_infinite_coverage_never_escalates(self):
        decision = analyze_item(SkuSnapshot('R1', current_stock=5.0), record([], lead_time=2.0), JUNE)

        self.assertEqual(decision.status, CoverageStatus.GREEN)
        self.assertFalse(decision.lead_time_warning)

    def test_rising_trend_raises_average(self):
        # December: no recorded month falls into the recency window
        decision = analyze_item(SkuSnapshot('R1', current_stock=46.0), record([10, 20, 30]), 11)

        self.assertEqual(decision.trend_direction, TrendDirection.UP)
        self.assertAlmostEqual(decision.trend_coefficient, 0.5)
        self.assertAlmostEqual(decision.average_monthly_usage, 23.0)
        self.assertAlmostEqual(decision.coverage_months, 2.0)
        self.assertEqual(decision.status, CoverageStatus.YELLOW)

    def test_falling_trend_lowers_average(self):
        decision = analyze_item(SkuSnapshot('R1', current_stock=17.0), record([30, 20, 10]), 11)

        self.assertEqual(decision.trend_direction, TrendDirection.DOWN)
        self.assertAlmostEqual(decision.average_monthly_usage, 17.0)
        self.assertAlmostEqual(decision.coverage_months, 1.0)
        self.assertEqual(decision.status, CoverageStatus.ORANGE)

    def test_recency_window_wraps_year(self):
        values = [None] * 12
        values[2] = 10.0
        values[11] = 40.0
        decision = analyze_item(SkuSnapshot('R1', current_stock=60.0), record(values), 0)

        # December counts as recent in January
        self.assertAlmostEqual(decision.average_monthly_usage, 30.0)
        self.assertEqual(decision.status, CoverageStatus.YELLOW)

    def test_to_dict(self):
        decision = analyze_item(SkuSnapshot('R1', current_stock=10.0), record([3, 3, 3]), JUNE)
        row = decision.to_dict()

        self.assertEqual(row['avgVerbrauchMonat'], 3.0)
        self.assertEqual(row['reichweiteMonat'], 3.3)
        self.assertEqual(row['status'], 'green')
        self.assertEqual(row['trendDirection'], 'stable')
        self.assertFalse(row['usedFallback'])

        row = analyze_item(SkuSnapshot('R1', current_stock=1.0), None, JUNE).to_dict()
        self.assertIsNone(row['reichweiteMonat'])


class TestAnalyzeReorder(unittest.TestCase):

    def setUp(self):
        self.config = AnalysisConfig(year=2025, current_date=date(2025, 6, 15))
        self.records = {
            sku: record([10, 10, 10], sku=sku, name=f"Rohstoff {sku}")
            for sku in ('b', 'c', 'd', 'e')
        }

    def test_sort_contract(self):
        snapshots = [
            SkuSnapshot('a', current_stock=5.0),
            SkuSnapshot('b', current_stock=5.0),
            SkuSnapshot('c', current_stock=50.0),
            SkuSnapshot('d', current_stock=15.0),
            SkuSnapshot('e', current_stock=2.0),
            SkuSnapshot('f', current_stock=0.0),
        ]

        analysis = analyze_reorder(snapshots, self.records, self.config)

        self.assertEqual([d.sku for d in analysis.decisions], ['e', 'b', 'd', 'c', 'f', 'a'])
        self.assertEqual(analysis.year, 2025)

    def test_lookup_is_case_insensitive(self):
        analysis = analyze_reorder([SkuSnapshot(' B ', current_stock=5.0)], self.records, self.config)

        decision = analysis.decisions[0]
        self.assertEqual(decision.sku, 'B')
        self.assertFalse(decision.used_fallback)
        self.assertEqual(decision.name, 'Rohstoff b')

    def test_inventory_name_wins(self):
        analysis = analyze_reorder([SkuSnapshot('b', 'Zucker', 5.0)], self.records, self.config)
        self.assertEqual(analysis.decisions[0].name, 'Zucker')

    def test_skips_empty_sku(self):
        analysis = analyze_reorder([SkuSnapshot(''), SkuSnapshot('   ')], self.records, self.config)
        self.assertEqual(analysis.decisions, ())


if __name__ == '__main__':
    unittest.main()
