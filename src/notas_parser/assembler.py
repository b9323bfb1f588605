#!/usr/bin/env python3
"""
Invoice/Product Assembler
Turns tokenized rows into invoices and products. Rows are read either through
their header (HeaderModeExtractor) or, when no usable header exists, by position
relative to the tax id (PositionalModeExtractor).
"""

import logging
import re
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from .config import ExtractorSettings, get_settings
from .entities import TAX_ID_PATTERN, EntityResolver, find_tax_id, has_letters
from .headers import (
    CanonicalField,
    installment_synonyms,
    looks_like_header,
    normalize_row,
    resolve,
    resolve_field,
)
from .models import Invoice, Product
from .normalizer import (
    ZERO,
    find_date_in_text,
    is_date_like,
    is_number_like,
    parse_ambiguous_date,
    parse_ambiguous_number,
    quantize_money,
)
from .tokenizer import tokenize

logger = logging.getLogger(__name__)

# Description offsets probed after the tax id: code, description, quantity, unit...
DESCRIPTION_OFFSETS = (5, 4, 6, 3)
MIN_POSITIONAL_COLUMNS = 3

# Affixes stripped from amount tokens: "R$25,00", "10UN"
CURRENCY_PREFIX_PATTERN = re.compile(r"^(?:R\$|US\$|\$)")
UNIT_SUFFIX_PATTERN = re.compile(r"(?<=\d)[A-Za-z]+$")


class InvoiceAssembler:
    """
    Accumulates invoices and products for one extraction run.

    Invoices are keyed by (tax_id, supplier_name, due_date, installment_index);
    a key maps to at most one invoice across every document of the run. It is
    created on first sight, tagged with the document being read at that moment,
    and updated in place afterwards.
    """

    def __init__(self, source_document: str = "", tolerance: Decimal = Decimal("0.01")):
        self.source_document = source_document
        self.tolerance = tolerance
        self.invoices: List[Invoice] = []
        self.products: List[Product] = []
        self._by_key: Dict[tuple, Invoice] = {}
        self._sums: Dict[str, Decimal] = {}

    @classmethod
    def from_settings(cls, source_document: str = "",
                      settings: Optional[ExtractorSettings] = None) -> "InvoiceAssembler":
        settings = settings or get_settings()
        return cls(source_document, Decimal(str(settings.installment_tolerance)))

    def begin_document(self, source_document: str) -> None:
        """Invoices created from now on record this document as their source."""
        self.source_document = source_document

    def _get_or_create(self, tax_id: str, supplier: str, due_date: date,
                       installment_index: Optional[int] = None,
                       document_number: str = "") -> Tuple[Invoice, bool]:
        key = (tax_id, supplier, due_date, installment_index)
        invoice = self._by_key.get(key)
        created = invoice is None
        if created:
            invoice = Invoice(
                supplier_name=supplier,
                tax_id=tax_id,
                due_date=due_date,
                total=ZERO,
                source_document=self.source_document,
                installment_index=installment_index,
            )
            self._by_key[key] = invoice
            self._sums[invoice.id] = ZERO
            self.invoices.append(invoice)
        if document_number and not invoice.document_number:
            invoice.document_number = document_number
        return invoice, created

    def add_installment(self, tax_id: str, supplier: str, due_date: date, index: int,
                        value: Decimal, document_number: str = "") -> Invoice:
        """
        Register one installment; its value is the invoice total.

        Repeated rows for the same installment never add up: an equal value is a
        no-op and a different one keeps the larger of the two.
        """
        value = value if value > 0 else ZERO
        invoice, created = self._get_or_create(tax_id, supplier, due_date, index, document_number)
        if created:
            invoice.total = value
        elif value > 0 and abs(invoice.total - value) >= self.tolerance:
            logger.debug(f"Installment {index} of {supplier} seen with {invoice.total} and {value}, keeping the larger")
            invoice.total = max(invoice.total, value)
        return invoice

    def add_line_amount(self, tax_id: str, supplier: str, due_date: date, amount: Decimal,
                        declared_total: Decimal = ZERO, document_number: str = "") -> Invoice:
        """
        Add a line amount to a non-installment invoice.

        The displayed total is the declared document total when positive, else
        the running sum of line amounts.
        """
        invoice, _ = self._get_or_create(tax_id, supplier, due_date, None, document_number)
        running = self._sums[invoice.id] + (amount if amount > 0 else ZERO)
        self._sums[invoice.id] = running
        invoice.total = declared_total if declared_total > 0 else running
        return invoice

    def add_product(self, invoice: Invoice, name: str, purchase_date: date, unit_price: Decimal) -> Product:
        product = Product(
            invoice_id=invoice.id,
            name=name,
            purchase_date=purchase_date,
            unit_price=unit_price if unit_price > 0 else ZERO,
        )
        self.products.append(product)
        return product


class RowExtractor(ABC):
    """Interprets the rows of one document and feeds an InvoiceAssembler."""

    mode = "abstract"

    def __init__(self, raw_text: str, settings: Optional[ExtractorSettings] = None):
        self.raw_text = raw_text
        self.settings = settings or get_settings()

    def extract(self, rows: List[List[str]], assembler: InvoiceAssembler) -> None:
        records = self.prepare([row for row in rows if any(cell.strip() for cell in row)])
        logger.info(f"{self.mode} extraction of {assembler.source_document}: {len(records)} rows")
        for record in records:
            self.process_row(record, assembler)

    @abstractmethod
    def prepare(self, rows: List[List[str]]) -> list:
        """Turn raw non-blank rows into the records process_row expects."""

    @abstractmethod
    def process_row(self, record, assembler: InvoiceAssembler) -> None:
        """Emit the invoice update and product for one record."""


class HeaderModeExtractor(RowExtractor):
    """Rows are resolved column by column through the header synonyms."""

    mode = "header"

    def __init__(self, raw_text: str, settings: Optional[ExtractorSettings] = None):
        super().__init__(raw_text, settings)
        self.resolver: Optional[EntityResolver] = None

    def prepare(self, rows: List[List[str]]) -> List[Dict[str, str]]:
        if not rows:
            return []
        headers, body = rows[0], rows[1:]
        records = [normalize_row(headers, row) for row in body]
        self.resolver = EntityResolver.from_rows(records, self.raw_text, self.settings.unknown_supplier)
        return records

    def _installments(self, row: Dict[str, str]) -> List[Tuple[int, str, str]]:
        pairs = []
        for index in range(1, self.settings.installment_slots + 1):
            date_keys, value_keys = installment_synonyms(index)
            when = resolve_field(row, date_keys)
            value = resolve_field(row, value_keys)
            if when or value:
                pairs.append((index, when, value))
        return pairs

    def process_row(self, row: Dict[str, str], assembler: InvoiceAssembler) -> None:
        tax_id = self.resolver.resolve_tax_id(resolve(row, CanonicalField.TAX_ID))
        supplier = self.resolver.resolve_supplier(resolve(row, CanonicalField.SUPPLIER), tax_id)

        due_date = parse_ambiguous_date(resolve(row, CanonicalField.DUE_DATE))
        emission = resolve(row, CanonicalField.EMISSION_DATE)
        purchase_date = parse_ambiguous_date(emission) if emission else due_date

        number = resolve(row, CanonicalField.INVOICE_NUMBER)
        series = resolve(row, CanonicalField.SERIES)
        document_number = f"{number}/{series}" if number and series else number

        unit = parse_ambiguous_number(resolve(row, CanonicalField.UNIT_PRICE))
        line = parse_ambiguous_number(resolve(row, CanonicalField.LINE_TOTAL))
        quantity = parse_ambiguous_number(resolve(row, CanonicalField.QUANTITY))
        declared_total = parse_ambiguous_number(resolve(row, CanonicalField.INVOICE_TOTAL))

        installments = self._installments(row)
        if installments:
            invoice = None
            for index, when, value in installments:
                installment_date = parse_ambiguous_date(when) if when else due_date
                current = assembler.add_installment(
                    tax_id, supplier, installment_date, index,
                    parse_ambiguous_number(value), document_number,
                )
                invoice = invoice or current
        else:
            invoice = assembler.add_line_amount(
                tax_id, supplier, due_date, line if line > 0 else unit,
                declared_total, document_number,
            )

        if unit > 0:
            unit_price = unit
        elif line > 0 and quantity > 0:
            unit_price = quantize_money(line / quantity)
        else:
            unit_price = ZERO

        name = (
            resolve(row, CanonicalField.DESCRIPTION)
            or resolve(row, CanonicalField.ITEM_CODE)
            or self.settings.default_product_name
        )
        assembler.add_product(invoice, name, purchase_date, unit_price)


def longest_alpha_field(fields: Sequence[str]) -> str:
    candidates = [f.strip() for f in fields if has_letters(f)]
    return max(candidates, key=len) if candidates else ""


def amount_token(token: str) -> str:
    """Drop a currency prefix and a unit suffix around a number ("R$25,00", "10UN")."""
    token = CURRENCY_PREFIX_PATTERN.sub("", token.strip())
    return UNIT_SUFFIX_PATTERN.sub("", token)


def numeric_values(fields: Sequence[str]) -> List[Decimal]:
    """Positive numbers found in the fields, skipping dates and tax ids."""
    values = []
    for field in fields:
        for token in field.split():
            if is_date_like(token) or TAX_ID_PATTERN.search(token):
                continue
            token = amount_token(token)
            if not is_number_like(token):
                continue
            value = parse_ambiguous_number(token)
            if value > 0:
                values.append(value)
    return values


class PositionalModeExtractor(RowExtractor):
    """Header-less rows interpreted by position relative to the tax id."""

    mode = "positional"

    def prepare(self, rows: List[List[str]]) -> List[List[str]]:
        widest = max((len(row) for row in rows), default=0)
        if widest < MIN_POSITIONAL_COLUMNS:
            logger.warning(f"Only {widest} column(s) without a header; nothing to extract")
            return []
        return rows

    def process_row(self, fields: List[str], assembler: InvoiceAssembler) -> None:
        tax_index = next((i for i, f in enumerate(fields) if TAX_ID_PATTERN.search(f)), -1)
        tax_id = find_tax_id(fields[tax_index]) if tax_index >= 0 else ""

        if tax_index > 0 and fields[tax_index - 1].strip():
            supplier = fields[tax_index - 1].strip()
        else:
            supplier = longest_alpha_field(fields) or self.settings.unknown_supplier

        due_date = None
        if 0 <= tax_index < len(fields) - 1 and is_date_like(fields[tax_index + 1]):
            due_date = find_date_in_text(fields[tax_index + 1])
        if due_date is None:
            due_date = next((d for d in map(find_date_in_text, fields) if d), None) or date.today()

        name = ""
        if tax_index >= 0:
            for offset in DESCRIPTION_OFFSETS:
                position = tax_index + offset
                if position < len(fields) and has_letters(fields[position]):
                    name = fields[position].strip()
                    break
        name = name or longest_alpha_field(fields) or self.settings.default_product_name

        values = numeric_values(fields)
        if len(values) >= 2:
            unit, line = values[-2], values[-1]
        elif values:
            unit = line = values[0]
        else:
            unit = line = ZERO

        invoice = assembler.add_line_amount(tax_id, supplier, due_date, line if line > 0 else unit)
        assembler.add_product(invoice, name, due_date, unit)


def is_header_row(cells: Sequence[str]) -> bool:
    """Known column names and no data-shaped cells (a CNPJ or a date)."""
    if any(TAX_ID_PATTERN.search(cell) or is_date_like(cell) for cell in cells):
        return False
    return looks_like_header(cells)


def select_extractor(rows: List[List[str]], raw_text: str,
                     settings: Optional[ExtractorSettings] = None) -> RowExtractor:
    """Header mode whenever the first row names known columns, even with no body."""
    if rows and is_header_row(rows[0]):
        return HeaderModeExtractor(raw_text, settings)
    return PositionalModeExtractor(raw_text, settings)


def assemble_rows(rows: List[List[str]], raw_text: str, source_document: str,
                  settings: Optional[ExtractorSettings] = None,
                  assembler: Optional[InvoiceAssembler] = None) -> Tuple[List[Invoice], List[Product]]:
    """
    Build invoices and products from tokenized rows.

    Args:
        rows: Tokenized rows, header first when there is one
        raw_text: Original text, used for proximity searches
        source_document: Location recorded on every invoice
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
    extractor = select_extractor(rows, raw_text, settings)
    extractor.extract(rows, assembler)
    return assembler.invoices, assembler.products


def assemble_delimited_text(text: str, source_document: str,
                            settings: Optional[ExtractorSettings] = None,
                            assembler: Optional[InvoiceAssembler] = None) -> Tuple[List[Invoice], List[Product]]:
    """Tokenize a delimited text export and assemble it."""
    return assemble_rows(tokenize(text), text, source_document, settings, assembler)
