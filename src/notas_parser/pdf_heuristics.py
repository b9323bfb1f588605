#!/usr/bin/env python3
"""
PDF Heuristic Extractor
Degraded single-pass reading of unstructured PDF text: one invoice per document
built from the first tax id, date and "Total" label found, plus a handful of
product candidates.
"""

import logging
import re
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from .assembler import InvoiceAssembler
from .config import ExtractorSettings, get_settings
from .entities import find_name_near_tax_id, has_letters
from .models import Invoice, Product
from .normalizer import ZERO, parse_ambiguous_date, parse_ambiguous_number
from .pdf_text import PDFTextExtractor

logger = logging.getLogger(__name__)

FORMATTED_TAX_ID_PATTERN = re.compile(r"\b\d{2}\.\d{3}\.\d{3}/\d{4}-\d{2}\b")
RAW_TAX_ID_PATTERN = re.compile(r"\b\d{14}\b")
DMY_DATE_PATTERN = re.compile(r"\b\d{2}/\d{2}/\d{4}\b")
ISO_DATE_PATTERN = re.compile(r"\b\d{4}-\d{2}-\d{2}\b")
TOTAL_PATTERN = re.compile(r"Total\s*[:\-]?\s*(?:R\$\s*)?(\d[\d.,]*)", re.IGNORECASE)
QUANTITY_TOKEN_PATTERN = re.compile(r"\b\d+(?:[.,]\d+)*\s*(?:kg|un|g|l)?\b", re.IGNORECASE)
NUMBER_PATTERN = re.compile(r"\d+(?:[.,]\d+)*")
PLACEHOLDER_ITEMS = ("Item 1", "Item 2")


def _first_match(text: str, *patterns: re.Pattern) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(0)
    return None


def candidate_name(line: str, max_length: int = 60) -> str:
    """Strip quantity/unit tokens from a line and truncate it."""
    name = QUANTITY_TOKEN_PATTERN.sub("", line)
    name = re.sub(r"\s+", " ", name).strip()
    return name[:max_length].strip() or "Item"


def last_number(line: str) -> Decimal:
    numbers = NUMBER_PATTERN.findall(line)
    return parse_ambiguous_number(numbers[-1]) if numbers else ZERO


def extract_from_lines(lines: List[str], source_document: str,
                       settings: Optional[ExtractorSettings] = None,
                       assembler: Optional[InvoiceAssembler] = None) -> Tuple[List[Invoice], List[Product]]:
    """
    Build one invoice and its product candidates from PDF text lines.

    Args:
        lines: Text lines of the document
        source_document: Location recorded on the invoice
        settings: Extraction settings
        assembler: Run-wide assembler to feed; a fresh one is used when omitted

    Returns:
        Tuple of (invoices, products) held by the assembler
    """
    settings = settings or get_settings()
    if assembler is None:
        assembler = InvoiceAssembler.from_settings(source_document, settings)
    else:
        assembler.begin_document(source_document)
    text = "\n".join(lines)

    tax_id = _first_match(text, FORMATTED_TAX_ID_PATTERN, RAW_TAX_ID_PATTERN) or ""
    found_date = _first_match(text, DMY_DATE_PATTERN, ISO_DATE_PATTERN)
    due_date = parse_ambiguous_date(found_date) if found_date else date.today()
    total_match = TOTAL_PATTERN.search(text)
    total = parse_ambiguous_number(total_match.group(1)) if total_match else ZERO

    supplier = find_name_near_tax_id(lines, tax_id) or settings.unknown_supplier
    invoice = assembler.add_line_amount(tax_id, supplier, due_date, ZERO, declared_total=total)

    candidates = [line for line in lines if has_letters(line) and re.search(r"\d", line)]
    candidates = candidates[:settings.pdf_candidate_lines]

    if not candidates:
        logger.info(f"No product lines in {source_document}, adding placeholders")
        for name in PLACEHOLDER_ITEMS:
            assembler.add_product(invoice, name, due_date, ZERO)
    for line in candidates:
        assembler.add_product(
            invoice,
            candidate_name(line, settings.pdf_name_max_length),
            due_date,
            last_number(line),
        )

    logger.debug(f"PDF {source_document}: tax_id={tax_id!r}, due={due_date}, total={invoice.total}, items={len(candidates)}")
    return assembler.invoices, assembler.products


class PDFHeuristicExtractor:
    """Reads a PDF from disk and applies the single-pass heuristics."""

    def __init__(self, settings: Optional[ExtractorSettings] = None,
                 text_extractor: Optional[PDFTextExtractor] = None):
        self.settings = settings or get_settings()
        self.text_extractor = text_extractor or PDFTextExtractor()

    def extract(self, pdf_path: str, source_document: str,
                assembler: Optional[InvoiceAssembler] = None) -> Tuple[List[Invoice], List[Product]]:
        lines = self.text_extractor.extract_lines(pdf_path)
        return extract_from_lines(lines, source_document, self.settings, assembler)
