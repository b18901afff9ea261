from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

import pytest

from printdesk.core.settings import InvoiceSettings
from printdesk.data.models import Document, DocumentKind

HOME = "Bosnia and Herzegovina"

# Dialog tests run without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


def make_items(count: int, description: str = "Bracket", quantity: int = 2, weight: str = "0.5") -> List[Dict[str, Any]]:
    return [
        {
            "id": str(n),
            "description": f"{description} {n}" if description else "",
            "quantity": quantity,
            "unit_price": "10.00",
            "catalog": {"part_number": f"PN-{n}", "unit": "", "weight": weight},
        }
        for n in range(1, count + 1)
    ]


def make_document(
    kind: DocumentKind = DocumentKind.INVOICE,
    items: Optional[List[Dict[str, Any]]] = None,
    country: str = "Germany",
    currency: str = "EUR",
    notes: str = "",
    vat_rate: Optional[str] = None,
    **extra: Any,
) -> Document:
    data: Dict[str, Any] = {
        "id": "42",
        "number": "INV-42",
        "issue_date": "2024-03-01",
        "currency": currency,
        "notes": notes,
        "counterparty": {"name": "Acme GmbH", "address": "Hauptstr. 1", "city": "Berlin", "country": country, "vat_rate": vat_rate},
        "company": {"legal_name": "Metal Works d.o.o.", "address": "Industrijska 5", "postal_code": "71000", "city": "Sarajevo"},
        "items": make_items(3) if items is None else items,
    }
    data.update(extra)
    return Document.build(kind, data)


@pytest.fixture
def invoice_settings() -> InvoiceSettings:
    return InvoiceSettings(
        primary_color="#1F4E79",
        signatory="Amra Hodžić",
        foreign_note="Goods for invoice {invoice_number} leave the customs territory.",
        domestic_footer=["Metal Works d.o.o.", "Bank: 1234", "ID: 4200"],
        foreign_footer=["Metal Works d.o.o.", "IBAN BA39 1234", "VAT ID 4200"],
    )


@pytest.fixture
def foreign_invoice() -> Document:
    return make_document()


@pytest.fixture
def domestic_invoice() -> Document:
    return make_document(country=HOME, currency="BAM")
