#!/usr/bin/env python3
"""
Tests for the locale number & date normalizer.
"""

import unittest
from datetime import date
from decimal import Decimal

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from notas_parser.normalizer import (
    find_date_in_text,
    is_date_like,
    is_number_like,
    parse_ambiguous_date,
    parse_ambiguous_number,
    quantize_money,
)


class TestParseAmbiguousNumber(unittest.TestCase):
    """Brazilian vs. plain numeric notation."""

    def test_known_values(self):
        test_cases = [
            ("1.234,56", Decimal("1234.56")),
            ("1234.56", Decimal("1234.56")),
            ("12,5", Decimal("12.5")),
            ("1.234.567", Decimal("1234.567")),
            ("R$ 1.234,56", Decimal("1234.56")),
            (" 250,00 ", Decimal("250")),
            ("100-", Decimal("100")),
            ("-5", Decimal("-5")),
            ("42", Decimal("42")),
        ]
        for raw, expected in test_cases:
            with self.subTest(raw=raw):
                self.assertEqual(parse_ambiguous_number(raw), expected)

    def test_garbage_is_zero(self):
        for raw in ["", "abc", None, "-", "1-2-3", "1,2,3,4.5.6"]:
            with self.subTest(raw=raw):
                self.assertEqual(parse_ambiguous_number(raw), Decimal("0"))

    def test_accepts_numbers(self):
        self.assertEqual(parse_ambiguous_number(Decimal("3.5")), Decimal("3.5"))
        self.assertEqual(parse_ambiguous_number(7), Decimal("7"))


class TestParseAmbiguousDate(unittest.TestCase):
    """dd/mm/yyyy first, then ISO and free-form dates."""

    def test_day_first(self):
        self.assertEqual(parse_ambiguous_date("25/12/2024"), date(2024, 12, 25))
        self.assertEqual(parse_ambiguous_date("05/01/2025"), date(2025, 1, 5))

    def test_two_digit_year(self):
        self.assertEqual(parse_ambiguous_date("25/12/24"), date(2024, 12, 25))

    def test_iso(self):
        self.assertEqual(parse_ambiguous_date("2024-12-25"), date(2024, 12, 25))
        self.assertEqual(parse_ambiguous_date("2024-12-25T10:30:00"), date(2024, 12, 25))

    def test_invalid_calendar_date_does_not_raise(self):
        result = parse_ambiguous_date("31/02/2024")
        self.assertIsInstance(result, date)

    def test_unreadable_defaults_to_a_date(self):
        for raw in ["", None, "   ", "not a date"]:
            with self.subTest(raw=raw):
                self.assertIsInstance(parse_ambiguous_date(raw), date)


class TestHelpers(unittest.TestCase):
    """Shape checks used by the positional heuristics."""

    def test_find_date_in_text(self):
        self.assertEqual(find_date_in_text("12.345.678/0001-90 05/01/2025"), date(2025, 1, 5))
        self.assertEqual(find_date_in_text("vence em 2025-02-10"), date(2025, 2, 10))
        self.assertIsNone(find_date_in_text("ACME LTDA"))
        self.assertIsNone(find_date_in_text(""))

    def test_is_date_like(self):
        self.assertTrue(is_date_like("05/01/2025"))
        self.assertFalse(is_date_like("25,00"))

    def test_is_number_like(self):
        self.assertTrue(is_number_like("25,00"))
        self.assertTrue(is_number_like("1.234,56"))
        self.assertTrue(is_number_like("10"))
        self.assertFalse(is_number_like("05/01/2025"))
        self.assertFalse(is_number_like("UN"))
        self.assertFalse(is_number_like(""))

    def test_quantize_money(self):
        self.assertEqual(quantize_money(Decimal("100") / Decimal("3")), Decimal("33.33"))
        self.assertEqual(quantize_money(Decimal("0.125")), Decimal("0.13"))


if __name__ == "__main__":
    unittest.main()
