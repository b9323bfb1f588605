#!/usr/bin/env python3
"""
Tests for environment-driven settings.
"""

import os
import unittest
from unittest.mock import patch

from pydantic import ValidationError

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from notas_parser.config import ExtractorSettings, get_settings


class TestExtractorSettings(unittest.TestCase):
    """Defaults and NOTAS_ overrides."""

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        settings = ExtractorSettings(_env_file=None)
        self.assertEqual(settings.uploads_dir, ".")
        self.assertEqual(settings.record_store_path, "data/db.json")
        self.assertEqual(settings.installment_slots, 3)
        self.assertEqual(settings.installment_tolerance, 0.01)
        self.assertEqual(settings.pdf_candidate_lines, 5)
        self.assertEqual(settings.unknown_supplier, "Fornecedor desconhecido")
        self.assertEqual(settings.default_product_name, "Item CSV")
        self.assertEqual(settings.log_level, "INFO")

    @patch.dict(os.environ, {"NOTAS_UPLOADS_DIR": "public", "NOTAS_INSTALLMENT_SLOTS": "2", "NOTAS_LOG_LEVEL": "DEBUG"})
    def test_environment_overrides(self):
        settings = get_settings()
        self.assertEqual(settings.uploads_dir, "public")
        self.assertEqual(settings.installment_slots, 2)
        self.assertEqual(settings.log_level, "DEBUG")

    def test_invalid_values(self):
        with self.assertRaises(ValidationError):
            ExtractorSettings(installment_slots=0)
        with self.assertRaises(ValidationError):
            ExtractorSettings(log_level="LOUD")


if __name__ == "__main__":
    unittest.main()
