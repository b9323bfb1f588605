#!/usr/bin/env python3
"""
Entity Resolver
Recovers a supplier name and tax id (CNPJ) for rows that omit them, by majority
vote across the rows of one document and by looking at the text around a tax id.
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .headers import CanonicalField, resolve

logger = logging.getLogger(__name__)

TAX_ID_PATTERN = re.compile(r"\b\d{2}\.\d{3}\.\d{3}/\d{4}-\d{2}\b|\b\d{14}\b")
LETTER_PATTERN = re.compile(r"[A-Za-zÀ-ÿ]")

# Lines looked at around a tax id, in order of preference
NEIGHBOUR_OFFSETS = (-2, -1, 1, 2)


def find_tax_id(text: str) -> str:
    """Return the first CNPJ-shaped token in text, or ""."""
    match = TAX_ID_PATTERN.search(str(text or ""))
    return match.group(0) if match else ""


def has_letters(text: str) -> bool:
    return bool(LETTER_PATTERN.search(text or ""))


def name_near_line(lines: List[str], index: int) -> str:
    """First neighbouring line with letters and more than 5 characters."""
    for offset in NEIGHBOUR_OFFSETS:
        position = index + offset
        if position < 0 or position >= len(lines):
            continue
        candidate = lines[position]
        if candidate and has_letters(candidate) and len(candidate) > 5:
            return candidate.strip()
    return ""


def find_name_near_tax_id(lines: List[str], target: str) -> str:
    """
    Look for a supplier name next to the first line mentioning a tax id.

    Args:
        lines: Raw document lines
        target: Tax id to look for

    Returns:
        The candidate name, or "" when the tax id is absent or has no usable neighbour
    """
    if not target:
        return ""
    for index, line in enumerate(lines):
        if target in line:
            return name_near_line(lines, index)
    return ""


@dataclass
class SupplierVote:
    """Per-document tally of supplier names and tax ids."""
    suppliers: Counter = field(default_factory=Counter)
    tax_ids: Counter = field(default_factory=Counter)
    suppliers_by_tax_id: Dict[str, Counter] = field(default_factory=dict)

    def add(self, supplier: str, tax_id_field: str) -> None:
        supplier = (supplier or "").strip()
        if supplier:
            self.suppliers[supplier] += 1
        tax_id = find_tax_id(tax_id_field)
        if not tax_id:
            return
        self.tax_ids[tax_id] += 1
        if supplier:
            self.suppliers_by_tax_id.setdefault(tax_id, Counter())[supplier] += 1

    @staticmethod
    def _winner(counts: Counter) -> str:
        top = counts.most_common(1)
        return top[0][0] if top else ""

    def top_supplier(self) -> str:
        return self._winner(self.suppliers)

    def top_tax_id(self) -> str:
        return self._winner(self.tax_ids)

    def supplier_map(self) -> Dict[str, str]:
        return {tax_id: self._winner(counts) for tax_id, counts in self.suppliers_by_tax_id.items()}


class EntityResolver:
    """
    Best-guess supplier identity for one document.

    The vote is local to the document being assembled; nothing is shared
    between documents or runs.
    """

    def __init__(self, vote: SupplierVote, raw_text: str, unknown_supplier: str = "Fornecedor desconhecido"):
        self.lines = raw_text.splitlines()
        self.unknown_supplier = unknown_supplier
        self.global_supplier = vote.top_supplier()
        self.global_tax_id = vote.top_tax_id()
        self.supplier_by_tax_id = vote.supplier_map()

        if not self.global_supplier or not self.global_tax_id:
            self._scan_raw_text()

        logger.debug(f"Document defaults: supplier={self.global_supplier!r}, tax_id={self.global_tax_id!r}")

    @classmethod
    def from_rows(cls, rows: List[Dict[str, str]], raw_text: str,
                  unknown_supplier: str = "Fornecedor desconhecido") -> "EntityResolver":
        """Tally normalized rows and build a resolver from the result."""
        vote = SupplierVote()
        for row in rows:
            vote.add(resolve(row, CanonicalField.SUPPLIER), resolve(row, CanonicalField.TAX_ID))
        return cls(vote, raw_text, unknown_supplier)

    def _scan_raw_text(self) -> None:
        for index, line in enumerate(self.lines):
            tax_id = find_tax_id(line)
            if not tax_id:
                continue
            self.global_tax_id = self.global_tax_id or tax_id
            self.global_supplier = self.global_supplier or name_near_line(self.lines, index)
            if self.global_supplier and self.global_tax_id:
                break

    def find_name_near_tax_id(self, target: str) -> str:
        return find_name_near_tax_id(self.lines, target)

    def resolve_tax_id(self, field_value: str) -> str:
        return find_tax_id(field_value) or self.global_tax_id

    def resolve_supplier(self, row_supplier: Optional[str], tax_id: str) -> str:
        """Row value, else the tax id's usual supplier, else proximity search, else the document default."""
        return (
            (row_supplier or "").strip()
            or self.supplier_by_tax_id.get(tax_id, "")
            or self.find_name_near_tax_id(tax_id)
            or self.global_supplier
            or self.unknown_supplier
        )
