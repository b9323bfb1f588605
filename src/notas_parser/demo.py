"""
Fixed demonstration dataset, returned when nothing could be extracted.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from .models import ExtractionResult, Invoice, Product

DEMO_MODE = "demo"


def build_demo_result(today: Optional[date] = None) -> ExtractionResult:
    """Three invoices due in 7, 15 and 30 days with four products, tagged "demo"."""
    today = today or date.today()

    def due_in(days: int) -> date:
        return today + timedelta(days=days)

    first = Invoice(
        supplier_name="Demo Fornecedor LTDA",
        tax_id="12.345.678/0001-90",
        due_date=due_in(7),
        total=Decimal("1299.90"),
        source_document="/uploads/demo-invoice-1.pdf",
    )
    second = Invoice(
        supplier_name="Tech Supplies SA",
        tax_id="98.765.432/0001-10",
        due_date=due_in(15),
        total=Decimal("249.50"),
        source_document="/uploads/demo-invoice-2.pdf",
    )
    third = Invoice(
        supplier_name="Alimentos & Cia",
        tax_id="11.222.333/0001-44",
        due_date=due_in(30),
        total=Decimal("980.00"),
        source_document="/uploads/demo-invoice-3.pdf",
    )

    products = [
        Product(invoice_id=first.id, name="Notebook 14", purchase_date=first.due_date, unit_price=Decimal("1299.90")),
        Product(invoice_id=second.id, name="Teclado Mecânico", purchase_date=second.due_date, unit_price=Decimal("249.50")),
        Product(invoice_id=third.id, name="Cesta de Alimentos", purchase_date=third.due_date, unit_price=Decimal("480.00")),
        Product(invoice_id=third.id, name="Bebidas", purchase_date=third.due_date, unit_price=Decimal("500.00")),
    ]
    return ExtractionResult(invoices=[first, second, third], products=products, mode=DEMO_MODE)
