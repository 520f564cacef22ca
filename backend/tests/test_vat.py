import unittest
from decimal import Decimal

from puantaj.services.vat import apply_vat, total_with_vat, vat_amount
from puantaj.validation import ValidationError, to_decimal


class VatCalculatorTests(unittest.TestCase):
    def test_vat_amount_rounds_to_cents(self):
        self.assertEqual(vat_amount("1000", "20"), Decimal("200.00"))
        self.assertEqual(vat_amount("83.33", "18"), Decimal("15.00"))
        # 10.05 * 0.2 = 2.01; 0.125 rounds half-up
        self.assertEqual(vat_amount("10.05", "20"), Decimal("2.01"))
        self.assertEqual(vat_amount("0.625", "20"), Decimal("0.13"))

    def test_total_is_base_plus_vat(self):
        for base, rate in [("1000", "20"), ("99.99", "8"), ("0", "20"), ("1234.56", "0"), ("500", "100")]:
            with self.subTest(base=base, rate=rate):
                self.assertEqual(
                    total_with_vat(base, rate),
                    Decimal(base) + vat_amount(base, rate),
                )

    def test_vat_inclusive_task_scenario(self):
        vat, total = apply_vat(Decimal("1000"), True, Decimal("20"))
        self.assertEqual(vat, Decimal("200.00"))
        self.assertEqual(total, Decimal("1200.00"))

    def test_no_vat_returns_amount_exactly(self):
        vat, total = apply_vat(Decimal("1234.567"), False, Decimal("20"))
        self.assertEqual(vat, Decimal("0.00"))
        self.assertEqual(total, Decimal("1234.567"))

    def test_default_rate_when_missing(self):
        vat, total = apply_vat("100", True, None)
        self.assertEqual(vat, Decimal("20.00"))
        self.assertEqual(total, Decimal("120.00"))

    def test_string_float_and_int_inputs_agree(self):
        self.assertEqual(vat_amount("0.1", 20), vat_amount(0.1, "20"))
        self.assertEqual(vat_amount(100, 18), Decimal("18.00"))


class DecimalParserTests(unittest.TestCase):
    def test_accepts_comma_decimal_separator(self):
        self.assertEqual(to_decimal(" 1,5 "), Decimal("1.5"))

    def test_float_goes_through_repr(self):
        self.assertEqual(to_decimal(0.1), Decimal("0.1"))

    def test_rejects_junk(self):
        for bad in [None, "", "abc", True, "NaN", "Infinity", [1]]:
            with self.subTest(value=bad):
                with self.assertRaises(ValidationError):
                    to_decimal(bad)
