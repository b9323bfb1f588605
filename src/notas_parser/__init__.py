"""
Notas Parser

Reconstructs invoices and purchased products from loosely structured CSV
exports and PDF invoices.
"""

__version__ = "1.0.0"

from .assembler import assemble_delimited_text, assemble_rows
from .engine import ExtractionEngine, extract
from .models import ExtractionResult, Invoice, Product, Supplier, build_suppliers
from .normalizer import parse_ambiguous_date, parse_ambiguous_number
from .tokenizer import TWO_SPACE, detect_delimiter

__all__ = [
    "ExtractionEngine",
    "extract",
    "assemble_rows",
    "assemble_delimited_text",
    "ExtractionResult",
    "Invoice",
    "Product",
    "Supplier",
    "build_suppliers",
    "parse_ambiguous_number",
    "parse_ambiguous_date",
    "detect_delimiter",
    "TWO_SPACE",
]
