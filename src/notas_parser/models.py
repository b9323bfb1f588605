"""
Data models for the Notas Parser.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Invoice:
    """One payable document: a supplier, a due date and, optionally, an installment."""
    supplier_name: str
    tax_id: str
    due_date: date
    total: Decimal
    source_document: str
    installment_index: Optional[int] = None
    document_number: str = ""
    id: str = field(default_factory=new_id)

    @property
    def key(self) -> tuple:
        return (self.tax_id, self.supplier_name, self.due_date, self.installment_index)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "supplier_name": self.supplier_name,
            "tax_id": self.tax_id,
            "due_date": self.due_date.isoformat(),
            "total": str(self.total),
            "source_document": self.source_document,
            "installment_index": self.installment_index,
            "document_number": self.document_number,
        }


@dataclass
class Product:
    """A single purchased line item, attached to an invoice of the same run."""
    invoice_id: str
    name: str
    purchase_date: date
    unit_price: Decimal
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "invoice_id": self.invoice_id,
            "name": self.name,
            "purchase_date": self.purchase_date.isoformat(),
            "unit_price": str(self.unit_price),
        }


@dataclass
class Supplier:
    """Supplier registry entry derived from invoices."""
    name: str
    tax_id: str
    address: str = ""
    phone: str = ""
    email: str = ""
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "tax_id": self.tax_id,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
        }


@dataclass
class ExtractionResult:
    """Output of one extraction run."""
    invoices: List[Invoice] = field(default_factory=list)
    products: List[Product] = field(default_factory=list)
    mode: str = "local"

    @property
    def is_empty(self) -> bool:
        return not self.invoices and not self.products

    def to_dict(self) -> Dict[str, Any]:
        return {
            "invoices": [inv.to_dict() for inv in self.invoices],
            "products": [prod.to_dict() for prod in self.products],
            "mode": self.mode,
        }


def build_suppliers(invoices: List[Invoice]) -> List[Supplier]:
    """
    Derive the supplier list from invoices.

    Suppliers are keyed by tax id; the first name seen for a tax id wins and is
    never updated afterwards.
    """
    suppliers: Dict[str, Supplier] = {}
    for invoice in invoices:
        if invoice.tax_id not in suppliers:
            suppliers[invoice.tax_id] = Supplier(name=invoice.supplier_name, tax_id=invoice.tax_id)
    return list(suppliers.values())
