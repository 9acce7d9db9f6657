"""
Tests for CAS statement parsing (text stage; no PDF needed).
Run from the project root: python -m pytest tests/test_cas_parser.py -v
"""
import unittest
from datetime import date

from models.enums import MutualFundCategory
from pdf_ingestion.cas_parser import extract_text, infer_category, parse_holdings_from_text

SAMPLE_STATEMENT = """
Consolidated Account Statement
01-Sep-2024 To 15-Oct-2024

HDFC Mutual Fund
Folio No: 12345678 / 90   PAN: ABCDE1234F
HDFCTOP-HDFC Top 100 Fund - Direct Plan - Growth (ISIN: INF179K01YV8)
Opening Unit Balance: 1,000.000
02-Sep-2024 Purchase 25,000.00 250.456 99.8200
Closing Unit Balance: 1,250.456  NAV on 15-Oct-2024: INR 985.3200  Market Value on 15-Oct-2024: INR 12,32,099.31

HDFC Liquid Fund - Regular Plan - Growth - ISIN: INF179KB1HK0
Closing Unit Balance: 0.000  NAV on 15-Oct-2024: INR 4,812.1100  Market Value on 15-Oct-2024: INR 0.00

ICICI Prudential Mutual Fund
Folio No: 98765432
ICICI Prudential Corporate Bond Fund - Direct Plan - Growth (ISIN: INF109K01ZB4)
Closing Unit Balance: 8,000.000  NAV on 15-Oct-2024: 27.41
"""


class TestParseHoldings(unittest.TestCase):
    def setUp(self):
        self.holdings = parse_holdings_from_text(SAMPLE_STATEMENT)

    def test_zero_balance_schemes_are_skipped(self):
        self.assertEqual(len(self.holdings), 2)
        self.assertNotIn("INF179KB1HK0", [h["isin"] for h in self.holdings])

    def test_equity_holding(self):
        h = self.holdings[0]
        self.assertEqual(h["scheme_name"], "HDFC Top 100 Fund - Direct Plan - Growth")
        self.assertEqual(h["isin"], "INF179K01YV8")
        self.assertEqual(h["folio_number"], "12345678/90")
        self.assertEqual(h["amc_name"], "HDFC Mutual Fund")
        self.assertEqual(h["category"], "EQUITY")
        self.assertEqual(h["units"], 1250.456)
        self.assertEqual(h["nav"], 985.32)
        self.assertEqual(h["current_value"], 1232099.31)
        self.assertEqual(h["valuation_date"], date(2024, 10, 15))

    def test_value_computed_when_market_value_missing(self):
        h = self.holdings[1]
        self.assertEqual(h["amc_name"], "ICICI Prudential Mutual Fund")
        self.assertEqual(h["folio_number"], "98765432")
        self.assertEqual(h["category"], "DEBT")
        self.assertEqual(h["current_value"], 219280.0)

    def test_empty_text(self):
        self.assertEqual(parse_holdings_from_text(""), [])


class TestInferCategory(unittest.TestCase):
    def test_keywords(self):
        self.assertIs(infer_category("Axis Liquid Fund - Growth"), MutualFundCategory.LIQUID)
        self.assertIs(infer_category("ICICI Prudential Balanced Advantage Fund"), MutualFundCategory.HYBRID)
        self.assertIs(infer_category("SBI Magnum Gilt Fund"), MutualFundCategory.DEBT)
        self.assertIs(infer_category("Parag Parikh Flexi Cap Fund"), MutualFundCategory.EQUITY)


class TestExtractText(unittest.TestCase):
    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            extract_text("/nonexistent/statement.pdf")


if __name__ == "__main__":
    unittest.main()
