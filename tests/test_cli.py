#!/usr/bin/env python3
"""
Tests for the command line interface.
"""

import json
import tempfile
import unittest

from click.testing import CliRunner

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from notas_parser.cli import cli

ACME_CSV = (
    "Fornecedor;CNPJ;Vencimento;Descricao;Valor Total Item\n"
    "ACME LTDA;12.345.678/0001-90;10/01/2025;Parafuso;100,00\n"
)


class TestCli(unittest.TestCase):
    """extract and sniff commands."""

    def setUp(self):
        self.runner = CliRunner()
        self.tmp = tempfile.TemporaryDirectory()
        self.base = Path(self.tmp.name)
        (self.base / "acme.csv").write_text(ACME_CSV, encoding="utf-8")

    def tearDown(self):
        self.tmp.cleanup()

    def test_extract_to_file_and_store(self):
        output = self.base / "out.json"
        db = self.base / "data" / "db.json"
        result = self.runner.invoke(cli, [
            "extract", "/acme.csv",
            "--base-dir", str(self.base),
            "--output", str(output),
            "--store", str(db),
        ])
        self.assertEqual(result.exit_code, 0, result.output)

        payload = json.loads(output.read_text(encoding="utf-8"))
        self.assertEqual(payload["mode"], "local")
        self.assertEqual(payload["invoices"][0]["supplier_name"], "ACME LTDA")
        self.assertEqual(payload["invoices"][0]["total"], "100.00")

        stored = json.loads(db.read_text(encoding="utf-8"))
        self.assertEqual(len(stored["suppliers"]), 1)

    def test_save_uses_configured_record_store(self):
        db = self.base / "configured.json"
        result = self.runner.invoke(
            cli,
            ["extract", "/acme.csv", "--base-dir", str(self.base), "-o", str(self.base / "x.json"), "--save"],
            env={"NOTAS_RECORD_STORE_PATH": str(db)},
        )
        self.assertEqual(result.exit_code, 0, result.output)
        stored = json.loads(db.read_text(encoding="utf-8"))
        self.assertEqual(stored["invoices"][0]["tax_id"], "12.345.678/0001-90")

    def test_extract_all_documents(self):
        output = self.base / "all.json"
        result = self.runner.invoke(cli, ["extract", "--all", "--base-dir", str(self.base), "-o", str(output)])
        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(output.read_text(encoding="utf-8"))
        self.assertEqual(payload["invoices"][0]["source_document"], "/acme.csv")

    def test_extract_falls_back_to_demo(self):
        output = self.base / "demo.json"
        result = self.runner.invoke(cli, ["extract", "/nada.csv", "--base-dir", str(self.base), "-o", str(output)])
        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(output.read_text(encoding="utf-8"))
        self.assertEqual(payload["mode"], "demo")
        self.assertEqual(len(payload["invoices"]), 3)

    def test_sniff(self):
        result = self.runner.invoke(cli, ["sniff", str(self.base / "acme.csv")])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"delimiter": ";"', result.output)
        self.assertIn('"Fornecedor"', result.output)

    def test_sniff_missing_file(self):
        result = self.runner.invoke(cli, ["sniff", str(self.base / "nada.csv")])
        self.assertNotEqual(result.exit_code, 0)


if __name__ == "__main__":
    unittest.main()
