import unittest
import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src')))
from tax.FederalDetails import FederalDetails, marginal_bracket_tax, bracket_rate_at
from tax.TaxReference import TaxReference, TaxBracket, TaxConfigError, FilingStatus


class TestFederalDetails(unittest.TestCase):
    def setUp(self):
        # Values from reference/tax-data.json (2024 table)
        self.fed = FederalDetails(TaxReference.load())

    def test_standard_deduction(self):
        self.assertAlmostEqual(self.fed.standardDeduction('single'), 14600.00, places=2)
        self.assertAlmostEqual(self.fed.standardDeduction(FilingStatus.MARRIED_FILING_JOINTLY), 29200.00, places=2)

    def test_ordinary_tax_first_bracket(self):
        # Bracket 1: up to 11600 @ 10%
        self.assertAlmostEqual(self.fed.ordinaryTax(10000, 'single'), 1000.0, places=2)

    def test_ordinary_tax_spans_brackets(self):
        # 11600 @ 10%, 35550 @ 12%, remainder @ 22%
        expected = 1160 + (47150 - 11600) * 0.12 + (50000 - 47150) * 0.22
        self.assertAlmostEqual(self.fed.ordinaryTax(50000, 'single'), expected, places=2)
        self.assertAlmostEqual(expected, 6053.0, places=2)

    def test_ordinary_tax_top_bracket(self):
        expected = (1160 + 4266 + 11742.5 + 21942 + 16568 + 127968.75
                    + (1000000 - 609350) * 0.37)
        self.assertAlmostEqual(self.fed.ordinaryTax(1000000, 'single'), expected, places=2)

    def test_zero_and_negative_income(self):
        self.assertEqual(self.fed.ordinaryTax(0, 'single'), 0.0)
        self.assertEqual(self.fed.ordinaryTax(-500, 'single'), 0.0)

    def test_ordinary_tax_is_monotonic(self):
        previous = 0.0
        for income in range(0, 700001, 5000):
            tax = self.fed.ordinaryTax(income, 'headOfHousehold')
            self.assertGreaterEqual(tax, previous)
            previous = tax

    def test_marginal_rate(self):
        self.assertAlmostEqual(self.fed.marginalRate(0, 'single'), 0.10)
        # Brackets are half-open, so the boundary belongs to the next one
        self.assertAlmostEqual(self.fed.marginalRate(11600, 'single'), 0.12)
        self.assertAlmostEqual(self.fed.marginalRate(5000000, 'single'), 0.37)

    def test_ltcg_stacking_from_zero(self):
        # 47025 in the 0% bracket, 12975 at 15%
        self.assertAlmostEqual(self.fed.longTermCapitalGainsTax(0, 60000, 'single'), 1946.25, places=2)

    def test_ltcg_stacks_on_ordinary_income(self):
        # Ordinary income leaves 7025 of room in the 0% bracket
        self.assertAlmostEqual(self.fed.longTermCapitalGainsTax(40000, 20000, 'single'), 1946.25, places=2)
        # Ordinary income already past the 0% bracket
        self.assertAlmostEqual(self.fed.longTermCapitalGainsTax(100000, 10000, 'single'), 1500.0, places=2)

    def test_ltcg_crosses_into_twenty_percent(self):
        expected = (518900 - 510000) * 0.15 + (530000 - 518900) * 0.20
        self.assertAlmostEqual(self.fed.longTermCapitalGainsTax(510000, 20000, 'single'), expected, places=2)

    def test_ltcg_nothing_owed_without_gains(self):
        self.assertEqual(self.fed.longTermCapitalGainsTax(50000, 0, 'single'), 0.0)
        self.assertEqual(self.fed.longTermCapitalGainsTax(50000, -100, 'single'), 0.0)

    def test_ltcg_married_filing_jointly_zero_bracket(self):
        self.assertEqual(self.fed.longTermCapitalGainsTax(0, 94000, 'marriedFilingJointly'), 0.0)

    def test_tax_burden(self):
        # 74600 ordinary less 14600 deduction = 60000 taxable
        result = self.fed.taxBurden(74600, 60000, 'single')
        self.assertAlmostEqual(result.taxableOrdinaryIncome, 60000.0, places=2)
        self.assertAlmostEqual(result.ordinaryTax, 1160 + 4266 + (60000 - 47150) * 0.22, places=2)
        self.assertAlmostEqual(result.longTermCapitalGainsTax, 60000 * 0.15, places=2)
        self.assertAlmostEqual(result.totalFederalTax, 17253.0, places=2)
        self.assertAlmostEqual(result.marginalBracket, 0.22)

    def test_tax_burden_below_deduction(self):
        result = self.fed.taxBurden(10000, 0, 'single')
        self.assertEqual(result.taxableOrdinaryIncome, 0.0)
        self.assertEqual(result.totalFederalTax, 0.0)

    def test_tax_burden_deduction_not_applied_to_gains(self):
        # No ordinary income: all gains stack from zero
        result = self.fed.taxBurden(0, 60000, 'single')
        self.assertAlmostEqual(result.totalFederalTax, 1946.25, places=2)

    def test_unknown_filing_status(self):
        with self.assertRaises(TaxConfigError):
            self.fed.taxBurden(50000, 0, 'widowed')


class TestBracketHelpers(unittest.TestCase):
    def setUp(self):
        self.brackets = (
            TaxBracket(0, 100, 0.10),
            TaxBracket(100, 200, 0.20),
            TaxBracket(200, float('inf'), 0.50),
        )

    def test_marginal_bracket_tax(self):
        self.assertAlmostEqual(marginal_bracket_tax(50, self.brackets), 5.0)
        self.assertAlmostEqual(marginal_bracket_tax(100, self.brackets), 10.0)
        self.assertAlmostEqual(marginal_bracket_tax(250, self.brackets), 10 + 20 + 25)

    def test_bracket_rate_at(self):
        self.assertEqual(bracket_rate_at(99.99, self.brackets), 0.10)
        self.assertEqual(bracket_rate_at(100, self.brackets), 0.20)
        self.assertEqual(bracket_rate_at(1e9, self.brackets), 0.50)


if __name__ == '__main__':
    unittest.main()
