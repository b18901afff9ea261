from __future__ import annotations

import json
import sys
from pathlib import Path

# Allow running from the repo root without installing
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from printdesk.core.settings import ExportSettings, InvoiceSettings
from printdesk.data.sources import load_document_file
from printdesk.pdf.labels import build_document_labels
from printdesk.pdf.layout import build_layouts
from printdesk.pdf.pdf_draw import build_vector_pdf
from printdesk.pdf.raster_export import export_pdf_sync

# Generates sample documents (JSON) and their PDFs for README/demo purposes.


def _items(count: int) -> list:
    return [
        {
            "id": str(n),
            "description": f"Steel bracket type {n}, galvanised, with mounting kit",
            "quantity": 2 + n % 5,
            "unit_price": f"{12.5 + n:.2f}",
            "catalog": {"part_number": f"SB-{100 + n}", "unit": "pcs", "weight": "0.75"},
        }
        for n in range(1, count + 1)
    ]


def main() -> None:
    out_dir = Path(__file__).resolve().parents[1] / "samples"
    out_dir.mkdir(parents=True, exist_ok=True)

    invoice = {
        "kind": "invoice",
        "number": "INV-2024-017",
        "issue_date": "2024-03-01",
        "due_date": "2024-03-31",
        "currency": "EUR",
        "incoterms": "FCA Sarajevo",
        "counterparty": {"name": "(Customer Name)", "address": "(Street)", "city": "(City)", "country": "Germany"},
        "company": {"legal_name": "(Company)", "address": "(Street)", "postal_code": "71000", "city": "Sarajevo"},
        "items": _items(26),
        "notes": "Pallets are returnable.",
    }
    order = {**invoice, "kind": "order_confirmation", "number": "OC-2024-009", "items": _items(12), "notes": "Deliver to gate 3.\nCall ahead."}

    settings = InvoiceSettings(
        primary_color="#1F4E79",
        signatory="(Signatory)",
        foreign_note="Goods for invoice {invoice_number} leave the customs territory.",
        foreign_footer=["(Company)", "IBAN (redacted)", "VAT ID (redacted)"],
    )

    for name, data in (("sample-invoice", invoice), ("sample-order", order)):
        src = out_dir / f"{name}.json"
        src.write_text(json.dumps(data, indent=2), encoding="utf-8")
        doc = load_document_file(src)
        layouts = build_layouts(doc, settings)
        build_vector_pdf(out_dir / f"{name}-vector.pdf", layouts, title=doc.number)
        export_pdf_sync(layouts, out_dir / f"{name}.pdf", ExportSettings(scale=2.0, quality=0.9, dpi=150))
        print(f"Wrote {name}: {len(layouts)} page(s)")

    labels = build_document_labels(load_document_file(out_dir / "sample-invoice.json"))
    build_vector_pdf(out_dir / "sample-labels.pdf", labels, title="Labels")
    print(f"Wrote samples to: {out_dir}")


if __name__ == "__main__":
    main()
