from __future__ import annotations

from pathlib import Path
from typing import List

import pytest
from PIL import Image

from conftest import HOME, make_document, make_items
from printdesk.core.settings import InvoiceSettings
from printdesk.pdf.overlays import OverlayContext, find_block, terminal_overlays
from printdesk.core.translations import EXPORTER_SIGNATURE
from printdesk.data.models import Company, DocumentKind
from printdesk.pdf.layout import (
    A4_HEIGHT,
    MARGIN,
    BODY_SIZE,
    Box,
    PageLayout,
    Picture,
    Rule,
    Text,
    build_layouts,
    fit_picture,
    incoterms_place,
    render_layout,
    safe_color,
    wrap_paragraphs,
)


def _row_numbers(layout: PageLayout) -> List[str]:
    # The "#" column is centred 4 mm right of the margin
    return [e.text for e in layout.elements if isinstance(e, Text) and e.x == MARGIN + 4.0 and e.size == BODY_SIZE]


def _text_y(layout: PageLayout, text: str) -> float:
    return next(e.y for e in layout.elements if isinstance(e, Text) and e.text == text)


def test_multi_page_invoice_titles_and_row_numbers(invoice_settings) -> None:
    doc = make_document(items=make_items(40))
    layouts = build_layouts(doc, invoice_settings)
    assert len(layouts) == 3
    assert "INVOICE (Page 1 of 3)" in layouts[0].texts()
    assert "INVOICE (Page 3 of 3)" in layouts[2].texts()
    assert _row_numbers(layouts[0])[:2] == ["1", "2"]
    assert _row_numbers(layouts[1])[0] == "31"
    assert _row_numbers(layouts[2]) == ["39", "40"]


def test_summary_and_footer_only_on_terminal_page(invoice_settings) -> None:
    layouts = build_layouts(make_document(items=make_items(40)), invoice_settings)
    for layout in layouts[:-1]:
        assert not layout.is_terminal
        assert "Summary" not in layout.texts()
        assert "Total:" not in layout.texts()
        assert "IBAN BA39 1234" not in layout.texts()
    last = layouts[-1].texts()
    assert "Summary" in last
    assert "Total:" in last
    assert "IBAN BA39 1234" in last
    assert "Goods for invoice INV-42 leave the customs territory." in last


def test_single_page_title_has_no_page_suffix(invoice_settings, foreign_invoice) -> None:
    (layout,) = build_layouts(foreign_invoice, invoice_settings)
    assert "INVOICE" in layout.texts()
    assert layout.width == 210.0 and layout.height == 297.0


def test_domestic_invoice_uses_local_language(invoice_settings, domestic_invoice) -> None:
    texts = build_layouts(domestic_invoice, invoice_settings)[0].texts()
    assert "FAKTURA" in texts
    assert "Sažetak" in texts
    assert "60,00 KM" in texts
    assert "70,20 KM" in texts
    assert not any(t.startswith("Exempt from VAT") for t in texts)


def test_missing_vat_rate_falls_back_to_seventeen_percent(invoice_settings) -> None:
    texts = build_layouts(make_document(country=HOME, currency="BAM"), invoice_settings)[0].texts()
    assert "PDV (17%)" in texts


def test_counterparty_vat_rate_is_used(invoice_settings) -> None:
    texts = build_layouts(make_document(vat_rate="0"), invoice_settings)[0].texts()
    # Zero counts as missing and also falls back
    assert "VAT (17%)" in texts
    texts = build_layouts(make_document(vat_rate="10"), invoice_settings)[0].texts()
    assert "VAT (10%)" in texts


def test_origin_declaration_for_small_foreign_eur_invoice(invoice_settings, foreign_invoice) -> None:
    texts = build_layouts(foreign_invoice, invoice_settings)[0].texts()
    assert any(t.startswith("Izjava:") for t in texts)
    assert f"{EXPORTER_SIGNATURE} Amra Hodžić" in texts


def test_origin_declaration_signed_by_company_without_signatory(foreign_invoice) -> None:
    texts = build_layouts(foreign_invoice, InvoiceSettings())[0].texts()
    assert f"{EXPORTER_SIGNATURE} Metal Works d.o.o." in texts


@pytest.mark.parametrize(
    "doc",
    [
        make_document(items=make_items(3, quantity=1000)),
        make_document(currency="USD"),
        make_document(country=HOME),
        make_document(kind=DocumentKind.ORDER_CONFIRMATION),
    ],
)
def test_no_origin_declaration_otherwise(doc, invoice_settings) -> None:
    texts = build_layouts(doc, invoice_settings)[-1].texts()
    assert not any(t.startswith("Izjava:") for t in texts)


def test_order_confirmation_notes_precede_summary(invoice_settings) -> None:
    doc = make_document(kind=DocumentKind.ORDER_CONFIRMATION, notes="Deliver to gate 3")
    layout = build_layouts(doc, invoice_settings)[-1]
    assert "ORDER CONFIRMATION" in layout.texts()
    assert _text_y(layout, "Notes") < _text_y(layout, "Summary")
    assert "Amra Hodžić" not in layout.texts()


def test_invoice_notes_follow_summary(invoice_settings) -> None:
    layout = build_layouts(make_document(notes="Pallets are returnable"), invoice_settings)[-1]
    assert _text_y(layout, "Summary") < _text_y(layout, "Notes")
    assert "Pallets are returnable" in layout.texts()


def test_empty_document_renders_header_and_summary(invoice_settings) -> None:
    (layout,) = build_layouts(make_document(items=[]), invoice_settings)
    assert layout.is_terminal
    assert "Summary" in layout.texts()
    assert _row_numbers(layout) == []


def test_settings_company_used_when_document_has_none(invoice_settings) -> None:
    doc = make_document(company={})
    fallback = Company(legal_name="Fallback Ltd", city="Mostar")
    texts = build_layouts(doc, invoice_settings, fallback)[0].texts()
    assert "Fallback Ltd - Mostar" in texts
    texts = build_layouts(make_document(), invoice_settings, fallback)[0].texts()
    assert not any(t.startswith("Fallback Ltd") for t in texts)


def test_invalid_primary_color_falls_back_to_black() -> None:
    assert safe_color("#12ab9F") == "#12ab9F"
    assert safe_color("red") == "#000000"
    assert safe_color(None) == "#000000"


def test_wrap_paragraphs_keeps_blank_lines() -> None:
    assert wrap_paragraphs("one\n\ntwo", 10) == ["one", "", "two"]


def test_fit_picture_preserves_aspect(tmp_path: Path) -> None:
    path = tmp_path / "wide.png"
    Image.new("RGB", (200, 100), "red").save(path)
    pic = fit_picture(str(path), 10.0, 20.0, 40.0, 40.0)
    assert pic == Picture(10.0, 30.0, 40.0, 20.0, str(path))


def test_fit_picture_skips_missing_and_unreadable(tmp_path: Path) -> None:
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"not an image")
    assert fit_picture(None, 0, 0, 10, 10) is None
    assert fit_picture(str(tmp_path / "missing.png"), 0, 0, 10, 10) is None
    assert fit_picture(str(bad), 0, 0, 10, 10) is None


class _Recorder:
    def __init__(self) -> None:
        self.calls: List[str] = []

    def begin_page(self, layout) -> None:
        self.calls.append("begin")

    def text(self, el) -> None:
        self.calls.append("text")

    def rule(self, el) -> None:
        self.calls.append("rule")

    def box(self, el) -> None:
        self.calls.append("box")

    def picture(self, el) -> None:
        self.calls.append("picture")

    def end_page(self, layout) -> None:
        self.calls.append("end")


def test_render_layout_replays_elements_in_order() -> None:
    layout = PageLayout(100.0, 100.0)
    layout.add(Box(0, 0, 10, 10, fill="#000000"))
    layout.add(None)
    layout.add(Text(1, 5, "x"))
    layout.add(Rule(0, 1, 10, 1))
    layout.add(Picture(0, 0, 5, 5, "p.png"))
    rec = _Recorder()
    render_layout(layout, rec)
    assert rec.calls == ["begin", "box", "text", "rule", "picture", "end"]


def test_render_layout_rejects_unknown_elements() -> None:
    layout = PageLayout(100.0, 100.0, elements=["oops"])
    with pytest.raises(TypeError):
        render_layout(layout, _Recorder())


SELLER = {"legal_name": "Metal Works d.o.o.", "postal_code": "71000", "city": "Sarajevo", "country": HOME}
BUYER = {
    "name": "Acme GmbH",
    "country": "Germany",
    "dap_address": "Lagerstr. 9, Munich",
    "fco_address": "Graz Terminal",
}


@pytest.mark.parametrize(
    "term, expected",
    [
        ("EXW", "EXW, 71000 Sarajevo BA"),
        ("DAP", "DAP, Lagerstr. 9, Munich"),
        ("FCO", "FCO, Graz Terminal"),
        ("CPT", "CPT"),
    ],
)
def test_incoterms_carry_their_named_place(term, expected, invoice_settings) -> None:
    doc = make_document(incoterms=term, company=SELLER, counterparty=BUYER)
    assert incoterms_place(doc, doc.company) == expected
    assert expected in build_layouts(doc, invoice_settings)[0].texts()


def test_incoterms_without_a_place_print_bare() -> None:
    doc = make_document(incoterms="DAP", counterparty={"name": "Acme GmbH", "country": "Germany"})
    assert incoterms_place(doc, doc.company) == "DAP"
    exw = make_document(incoterms="EXW", company={"legal_name": "Metal Works d.o.o."})
    assert incoterms_place(exw, exw.company) == "EXW"
    assert incoterms_place(make_document(), Company()) == ""


def test_exw_place_uses_the_letterhead_company(invoice_settings) -> None:
    doc = make_document(incoterms="EXW", company={})
    fallback = Company(legal_name="Fallback Ltd", postal_code="88000", city="Mostar", country=HOME)
    assert "EXW, 88000 Mostar BA" in build_layouts(doc, invoice_settings, fallback)[0].texts()


def test_bottom_bands_are_placed_from_terminal_overlays(foreign_invoice, invoice_settings) -> None:
    (layout,) = build_layouts(foreign_invoice, invoice_settings)
    blocks = terminal_overlays(OverlayContext(foreign_invoice, invoice_settings))
    note = find_block(blocks, "foreign_note")
    footer = find_block(blocks, "footer")
    assert _text_y(layout, "Goods for invoice INV-42 leave the customs territory.") == A4_HEIGHT - note.offset
    footer_top = A4_HEIGHT - footer.offset - footer.height
    assert any(isinstance(e, Rule) and e.y1 == footer_top and e.x1 == MARGIN for e in layout.elements)


def test_absent_bands_draw_nothing(domestic_invoice) -> None:
    settings = InvoiceSettings(foreign_note="Goods for invoice {invoice_number} leave.")
    (layout,) = build_layouts(domestic_invoice, settings)
    blocks = terminal_overlays(OverlayContext(domestic_invoice, settings))
    assert not find_block(blocks, "foreign_note").present
    assert not find_block(blocks, "footer").present
    assert not any("Goods for invoice" in text for text in layout.texts())
