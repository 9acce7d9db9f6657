"""
Tests for EMI, interest, LTV, fees and the repayment schedule.
Run from the project root: python -m pytest tests/test_calculations.py -v
"""
import unittest
from datetime import date

from services.calculations import (
    calculate_emi,
    calculate_ltv,
    calculate_processing_fee,
    calculate_total_interest,
    generate_emi_schedule,
    round_money,
)


class TestEmi(unittest.TestCase):
    def test_reference_value(self):
        """500,000 at 12% over 24 months."""
        self.assertEqual(calculate_emi(500_000, 12, 24), 23536.74)

    def test_zero_rate_is_straight_division(self):
        self.assertEqual(calculate_emi(100_000, 0, 10), 10000.0)

    def test_single_month_repays_principal_plus_one_month_interest(self):
        self.assertEqual(calculate_emi(100_000, 12, 1), 101000.0)

    def test_increases_with_principal_and_rate(self):
        self.assertLess(calculate_emi(100_000, 12, 24), calculate_emi(200_000, 12, 24))
        self.assertLess(calculate_emi(100_000, 10, 24), calculate_emi(100_000, 14, 24))

    def test_decreases_with_tenure(self):
        self.assertGreater(calculate_emi(100_000, 12, 12), calculate_emi(100_000, 12, 36))

    def test_rejects_invalid_inputs(self):
        for args in [
            (0, 12, 12),
            (-5, 12, 12),
            (100_000, -1, 12),
            (100_000, 12, 0),
            (100_000, 12, 1.5),
            (100_000, 12, True),
            (100_000, 12, 100_000),
        ]:
            with self.subTest(args=args):
                with self.assertRaises(ValueError):
                    calculate_emi(*args)


class TestTotalsAndRatios(unittest.TestCase):
    def test_total_interest(self):
        self.assertEqual(calculate_total_interest(500_000, 12, 24), 64881.76)

    def test_total_interest_zero_rate(self):
        self.assertEqual(calculate_total_interest(100_000, 0, 10), 0.0)

    def test_ltv(self):
        self.assertEqual(calculate_ltv(60_000, 100_000), 60.0)
        self.assertEqual(calculate_ltv(50_000, 150_000), 33.33)

    def test_ltv_without_collateral_is_zero(self):
        self.assertEqual(calculate_ltv(60_000, 0), 0.0)

    def test_processing_fee(self):
        self.assertEqual(calculate_processing_fee(500_000, 1.5), 7500.0)
        self.assertEqual(calculate_processing_fee(500_000, None), 0.0)

    def test_round_money_half_up(self):
        self.assertEqual(round_money(2.675), 2.68)
        self.assertEqual(round_money(2.665), 2.67)
        self.assertEqual(round_money(10), 10.0)


class TestEmiSchedule(unittest.TestCase):
    def setUp(self):
        self.schedule = generate_emi_schedule(500_000, 12, 24, date(2024, 1, 15))

    def test_one_row_per_month(self):
        self.assertEqual(len(self.schedule), 24)
        self.assertEqual([row["installmentNumber"] for row in self.schedule], list(range(1, 25)))

    def test_first_installment(self):
        first = self.schedule[0]
        self.assertEqual(first["dueDate"], "2024-02-15")
        self.assertEqual(first["emi"], 23536.74)
        self.assertEqual(first["interest"], 5000.0)
        self.assertEqual(first["principal"], 18536.74)
        self.assertEqual(first["balance"], 481463.26)

    def test_closes_at_zero(self):
        self.assertEqual(self.schedule[-1]["balance"], 0.0)
        self.assertAlmostEqual(sum(row["principal"] for row in self.schedule), 500_000, places=2)

    def test_due_dates_clamp_to_month_end(self):
        schedule = generate_emi_schedule(120_000, 0, 3, date(2024, 1, 31))
        self.assertEqual([row["dueDate"] for row in schedule], ["2024-02-29", "2024-03-31", "2024-04-30"])
        self.assertEqual([row["emi"] for row in schedule], [40000.0, 40000.0, 40000.0])


if __name__ == "__main__":
    unittest.main()
