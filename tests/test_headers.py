#!/usr/bin/env python3
"""
Tests for header normalization and synonym resolution.
"""

import unittest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from notas_parser.headers import (
    SYNONYMS,
    CanonicalField,
    installment_synonyms,
    looks_like_header,
    normalize_header_key,
    normalize_row,
    resolve,
    resolve_field,
)


class TestNormalizeHeaderKey(unittest.TestCase):
    """Accents, case and punctuation collapse into one token."""

    def test_known_headers(self):
        test_cases = [
            ("Vlr. Unitário", "vlr_unitario"),
            ("  Razão Social (Emitente) ", "razao_social_emitente"),
            ("Descrição do Produto", "descricao_do_produto"),
            ("CNPJ/CPF", "cnpj_cpf"),
            ("NF-e", "nf_e"),
            ("Vencimento 1", "vencimento_1"),
            ("Emissão", "emissao"),
            ("", ""),
            ("---", ""),
        ]
        for raw, expected in test_cases:
            with self.subTest(raw=raw):
                self.assertEqual(normalize_header_key(raw), expected)


class TestResolution(unittest.TestCase):
    """Synonym lookup over normalized rows."""

    def test_normalize_row_pads_missing_cells(self):
        row = normalize_row(["Fornecedor", "CNPJ", "Vencimento"], ["ACME", " 12.345.678/0001-90 "])
        self.assertEqual(row, {"fornecedor": "ACME", "cnpj": "12.345.678/0001-90", "vencimento": ""})

    def test_normalize_row_keeps_first_non_empty_duplicate(self):
        row = normalize_row(["Total", "TOTAL", "Total "], ["", "10", "20"])
        self.assertEqual(row["total"], "10")

    def test_resolve_field_first_non_empty(self):
        row = {"emitente": "", "fornecedor": " ACME ", "empresa": "Other"}
        self.assertEqual(resolve_field(row, ["emitente", "fornecedor", "empresa"]), "ACME")
        self.assertEqual(resolve_field(row, ["xnome"]), "")

    def test_resolve_by_canonical_field(self):
        row = normalize_row(["Razão Social", "Vlr. Unitário", "Vlr. Total Produto"], ["ACME", "2,50", "25,00"])
        self.assertEqual(resolve(row, CanonicalField.SUPPLIER), "ACME")
        self.assertEqual(resolve(row, CanonicalField.UNIT_PRICE), "2,50")
        self.assertEqual(resolve(row, CanonicalField.LINE_TOTAL), "25,00")
        self.assertEqual(resolve(row, CanonicalField.DESCRIPTION), "")

    def test_installment_synonyms(self):
        dates, values = installment_synonyms(2)
        self.assertIn("vencimento2", dates)
        self.assertIn("valor_2", values)
        self.assertEqual(SYNONYMS[CanonicalField.INSTALLMENT_2_VALUE], values)
        self.assertEqual(SYNONYMS[CanonicalField.INSTALLMENT_3_DATE], installment_synonyms(3)[0])

    def test_every_field_has_synonyms(self):
        for canonical in CanonicalField:
            with self.subTest(field=canonical):
                self.assertTrue(SYNONYMS[canonical])

    def test_looks_like_header(self):
        self.assertTrue(looks_like_header(["Fornecedor", "CNPJ", "Qualquer coisa"]))
        self.assertFalse(looks_like_header(["ACME LTDA", "12.345.678/0001-90", "Widget"]))


if __name__ == "__main__":
    unittest.main()
