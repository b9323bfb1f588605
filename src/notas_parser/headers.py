#!/usr/bin/env python3
"""
Header Resolver
Maps free-form column headers ("Razão Social", "Vlr. Unitário", "CNPJ Emitente")
to a canonical field vocabulary through normalization and synonym lookup.
"""

import re
from enum import Enum
from typing import Dict, List, Sequence, Tuple

from unidecode import unidecode


class CanonicalField(Enum):
    SUPPLIER = "supplier"
    TAX_ID = "tax_id"
    DUE_DATE = "due_date"
    EMISSION_DATE = "emission_date"
    INVOICE_TOTAL = "invoice_total"
    INVOICE_NUMBER = "invoice_number"
    SERIES = "series"
    ITEM_CODE = "item_code"
    DESCRIPTION = "description"
    QUANTITY = "quantity"
    UNIT = "unit"
    UNIT_PRICE = "unit_price"
    LINE_TOTAL = "line_total"
    INSTALLMENT_1_DATE = "installment_1_date"
    INSTALLMENT_1_VALUE = "installment_1_value"
    INSTALLMENT_2_DATE = "installment_2_date"
    INSTALLMENT_2_VALUE = "installment_2_value"
    INSTALLMENT_3_DATE = "installment_3_date"
    INSTALLMENT_3_VALUE = "installment_3_value"


def installment_synonyms(index: int) -> Tuple[List[str], List[str]]:
    """Synonyms for the (date, value) columns of installment number `index`."""
    dates = [f"vencimento{index}", f"vencimento_{index}", f"data_parcela_{index}"]
    values = [f"valor{index}", f"valor_{index}", f"valor_parcela_{index}"]
    return dates, values


# Ordered by preference: the first non-empty column wins.
SYNONYMS: Dict[CanonicalField, List[str]] = {
    CanonicalField.SUPPLIER: [
        "emitente",
        "fornecedor",
        "empresa",
        "nome_emitente",
        "xnome",
        "razao_social",
        "razao_social_emitente",
        "nome_empresa",
        "nome_fantasia",
        "fantasia",
        "supplier",
    ],
    CanonicalField.TAX_ID: [
        "cnpj_emitente",
        "cnpj",
        "cnpj_fornecedor",
        "cnpj_destinatario",
        "cnpj_emit",
        "tax_id",
    ],
    CanonicalField.DUE_DATE: ["vencimento_duplicata", "vencimento", "data_vencimento", "due_date"],
    CanonicalField.EMISSION_DATE: ["emissao", "data_emissao", "emissao_nota", "data_de_emissao"],
    CanonicalField.INVOICE_TOTAL: ["valor_total_da_nota", "valor_total_nota", "valor_total", "total"],
    CanonicalField.INVOICE_NUMBER: ["nf_e", "nfe", "numero_nfe", "numero_nota", "nota_fiscal"],
    CanonicalField.SERIES: ["serie"],
    CanonicalField.ITEM_CODE: ["codigo_produto", "codigo", "sku"],
    CanonicalField.DESCRIPTION: ["descricao_do_produto", "descricao", "produto", "item"],
    CanonicalField.QUANTITY: ["quantidade", "qtd", "qtde"],
    CanonicalField.UNIT: ["unidade", "un"],
    CanonicalField.UNIT_PRICE: ["valor_unitario", "preco", "preco_unitario", "vlr_unitario"],
    CanonicalField.LINE_TOTAL: ["valor_total_item", "total_item", "valor_item", "vlr_total_produto"],
}

for _index in (1, 2, 3):
    _dates, _values = installment_synonyms(_index)
    SYNONYMS[CanonicalField(f"installment_{_index}_date")] = _dates
    SYNONYMS[CanonicalField(f"installment_{_index}_value")] = _values

KNOWN_KEYS = frozenset(key for keys in SYNONYMS.values() for key in keys)


def normalize_header_key(raw: str) -> str:
    """
    Normalize a header cell into a lookup token.

    Lowercases, strips accents, collapses every run of non-alphanumeric
    characters into "_" and trims leading/trailing "_".

    Args:
        raw: Header text, e.g. "Vlr. Unitário"

    Returns:
        Canonical token, e.g. "vlr_unitario"
    """
    token = unidecode(str(raw or "")).lower()
    token = re.sub(r"[^a-z0-9]+", "_", token)
    return token.strip("_")


def normalize_row(headers: Sequence[str], cells: Sequence[str]) -> Dict[str, str]:
    """Key a row's cells by normalized header; the first non-empty duplicate wins."""
    row: Dict[str, str] = {}
    for position, header in enumerate(headers):
        key = normalize_header_key(header)
        if not key:
            continue
        value = cells[position].strip() if position < len(cells) and cells[position] else ""
        if not row.get(key):
            row[key] = value
    return row


def resolve_field(row: Dict[str, str], candidates: Sequence[str]) -> str:
    """Return the first non-empty value among the candidate keys, else ""."""
    for key in candidates:
        value = row.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def resolve(row: Dict[str, str], canonical: CanonicalField) -> str:
    return resolve_field(row, SYNONYMS[canonical])


def looks_like_header(cells: Sequence[str]) -> bool:
    """A row is a usable header when at least one cell is a known synonym."""
    return any(normalize_header_key(cell) in KNOWN_KEYS for cell in cells)
