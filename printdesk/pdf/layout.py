"""Shared page composition for invoices and order confirmations.

Every page is described as a PageLayout: a physical size in millimetres and an
ordered display list of Text, Rule, Box and Picture elements positioned from
the top-left corner. The reportlab canvas adapter (pdf_draw) and the Qt preview
adapter (widgets.page_view) only translate these elements, so geometry lives in
this module alone.
"""
from __future__ import annotations

import logging
import re
import textwrap
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Protocol, Sequence, Union

from PIL import Image, UnidentifiedImageError

from printdesk.core.currency import fmt_weight, format_currency
from printdesk.core.dates import fmt_date
from printdesk.core.paths import resolve_image
from printdesk.core.settings import InvoiceSettings
from printdesk.core.translations import (
    EXPORTER_SIGNATURE,
    ORIGIN_DECLARATION,
    VAT_EXEMPTION_LINES,
    Translations,
    country_code,
    translations_for,
)
from printdesk.data.models import Company, Document, DocumentKind, LineItem
from printdesk.pdf.estimate import (
    INVOICE_CHARS_PER_LINE,
    NOTES_CHARS_PER_LINE,
    NOTES_LINE_HEIGHT_PX,
    NOTES_TITLE_HEIGHT_PX,
)
from printdesk.pdf.overlays import (
    OVERLAY_RIGHT_INSET,
    OVERLAY_WIDTH,
    TITLE_BADGE_HEIGHT,
    TOTAL_BADGE_HEIGHT,
    OverlayBlock,
    OverlayContext,
    find_block,
    footer_columns,
    foreign_note_text,
    terminal_overlays,
)
from printdesk.pdf.paginate import ORDER_ITEM_HEIGHT_PX, Page, paginate_document

logger = logging.getLogger(__name__)


# ===== Layout constants (mm unless noted) =====
A4_WIDTH, A4_HEIGHT = 210.0, 297.0
MARGIN = 15.0
CONTENT_WIDTH = A4_WIDTH - 2 * MARGIN

# CSS pixels are 1/96 in
PX_TO_MM = 25.4 / 96

# Font sizes in points
TITLE_SIZE = 11.0
HEADING_SIZE = 9.0
BODY_SIZE = 8.0
SMALL_SIZE = 7.0
TINY_SIZE = 6.0

LINE = 4.2
SMALL_LINE = 3.2

OVERLAY_RIGHT = A4_WIDTH - MARGIN - OVERLAY_RIGHT_INSET
OVERLAY_LEFT = OVERLAY_RIGHT - OVERLAY_WIDTH

LOGO_BOX = (MARGIN, 10.0, 45.0, 18.0)
TITLE_BADGE_TOP = 14.0
HEADER_RULE_Y = 36.0
PARTIES_TOP = 44.0

TABLE_TOP = 84.0
TABLE_HEADER_HEIGHT = 7.0
ROW_LINE = 4.2
ROW_PAD = 1.6
ORDER_ROW_HEIGHT = ORDER_ITEM_HEIGHT_PX * PX_TO_MM
ORDER_DESCRIPTION_CHARS = 40

# Origin declaration applies to foreign EUR invoices below this total
ORIGIN_DECLARATION_LIMIT = Decimal("6000")

BLACK = "#000000"
WHITE = "#FFFFFF"
GRID = "#BBBBBB"

_HEX_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


# ===== Display list =====
@dataclass(frozen=True)
class Text:
    x: float
    # Baseline, measured from the top edge
    y: float
    text: str
    size: float = BODY_SIZE
    bold: bool = False
    align: str = "left"
    color: str = BLACK


@dataclass(frozen=True)
class Rule:
    x1: float
    y1: float
    x2: float
    y2: float
    width: float = 0.2
    color: str = BLACK


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    w: float
    h: float
    fill: Optional[str] = None
    stroke: Optional[str] = None
    width: float = 0.2


@dataclass(frozen=True)
class Picture:
    x: float
    y: float
    w: float
    h: float
    path: str


Element = Union[Text, Rule, Box, Picture]


@dataclass
class PageLayout:
    width: float
    height: float
    index: int = 0
    count: int = 1
    is_terminal: bool = True
    elements: List[Element] = field(default_factory=list)

    def add(self, element: Optional[Element]) -> None:
        if element is not None:
            self.elements.append(element)

    def texts(self) -> List[str]:
        return [e.text for e in self.elements if isinstance(e, Text)]


class LayoutAdapter(Protocol):
    def begin_page(self, layout: PageLayout) -> None: ...
    def text(self, el: Text) -> None: ...
    def rule(self, el: Rule) -> None: ...
    def box(self, el: Box) -> None: ...
    def picture(self, el: Picture) -> None: ...
    def end_page(self, layout: PageLayout) -> None: ...


def render_layout(layout: PageLayout, adapter: LayoutAdapter) -> None:
    """Replay one page's display list onto an output adapter, in order."""
    adapter.begin_page(layout)
    for el in layout.elements:
        if isinstance(el, Text):
            adapter.text(el)
        elif isinstance(el, Rule):
            adapter.rule(el)
        elif isinstance(el, Box):
            adapter.box(el)
        elif isinstance(el, Picture):
            adapter.picture(el)
        else:
            raise TypeError(f"Unknown layout element: {el!r}")
    adapter.end_page(layout)


# ===== Helpers =====
def safe_color(value: Optional[str], default: str = BLACK) -> str:
    return value if value and _HEX_RE.match(value) else default


def fit_picture(path: Optional[str], x: float, y: float, w: float, h: float) -> Optional[Picture]:
    """Largest aspect-preserving rectangle inside the box, centred; None when the image is unusable."""
    p = resolve_image(path)
    if p is None:
        return None
    try:
        with Image.open(p) as im:
            iw, ih = im.size
    except (OSError, UnidentifiedImageError):
        logger.warning("Skipping unreadable image %s", p)
        return None
    if iw <= 0 or ih <= 0:
        return None
    scale = min(w / iw, h / ih)
    pw, ph = iw * scale, ih * scale
    return Picture(x + (w - pw) / 2, y + (h - ph) / 2, pw, ph, str(p))


def wrap(text: str, width: int) -> List[str]:
    return textwrap.wrap(text or "", width=width, break_long_words=True) or [""]


def wrap_paragraphs(text: str, width: int) -> List[str]:
    """Wrap each paragraph separately; blank paragraphs keep a blank line."""
    lines: List[str] = []
    for paragraph in (text or "").split("\n"):
        lines.extend(wrap(paragraph, width) if paragraph.strip() else [""])
    return lines


def _fmt_rate(rate: Decimal) -> str:
    return f"{rate.normalize():f}"


def _title(doc: Document, t: Translations) -> str:
    return t.order_confirmation if doc.kind is DocumentKind.ORDER_CONFIRMATION else t.invoice


# ===== Page sections =====
def _draw_header(pl: PageLayout, doc: Document, company: Company, t: Translations, primary: str) -> None:
    x, y, w, h = LOGO_BOX
    pl.add(fit_picture(company.logo_path, x, y, w, h))
    pl.add(Text(MARGIN, 33.0, company.letterhead_line(), SMALL_SIZE))

    title = _title(doc, t)
    if pl.count > 1:
        title = f"{title} ({t.page_of.format(page=pl.index + 1, pages=pl.count)})"
    pl.add(Box(OVERLAY_LEFT, TITLE_BADGE_TOP, OVERLAY_WIDTH, TITLE_BADGE_HEIGHT, fill=primary))
    pl.add(Text(OVERLAY_LEFT + OVERLAY_WIDTH / 2, TITLE_BADGE_TOP + 5.8, title, TITLE_SIZE, bold=True, align="center", color=WHITE))

    pl.add(Rule(MARGIN, HEADER_RULE_Y, A4_WIDTH - MARGIN, HEADER_RULE_Y, width=0.4, color=primary))


def incoterms_place(doc: Document, company: Company) -> str:
    """Incoterm with its named place: seller's town for EXW, the customer's addresses for DAP/FCO."""
    term = doc.incoterms
    if not term:
        return ""
    if term == "EXW":
        place = " ".join(p for p in (company.postal_code, company.city, country_code(company.country)) if p)
    elif term == "DAP":
        place = doc.counterparty.dap_address
    elif term == "FCO":
        place = doc.counterparty.fco_address
    else:
        place = ""
    return f"{term}, {place}" if place else term


def _draw_parties(pl: PageLayout, doc: Document, company: Company, t: Translations) -> None:
    cp = doc.counterparty
    y = PARTIES_TOP
    pl.add(Text(MARGIN, y, t.bill_to, HEADING_SIZE, bold=True))
    y += LINE + 0.6
    pl.add(Text(MARGIN, y, cp.name, BODY_SIZE, bold=True))
    for line in (cp.address, cp.city, cp.country, cp.phone):
        if line:
            y += LINE
            pl.add(Text(MARGIN, y, line, BODY_SIZE))

    number_label = t.order_confirmation_number if doc.kind is DocumentKind.ORDER_CONFIRMATION else t.invoice_number
    rows = [
        (number_label, doc.number),
        (t.issue_date, fmt_date(doc.issue_date)),
        (t.due_date, fmt_date(doc.due_date)),
        (t.shipping_date, fmt_date(doc.shipping_date)),
        (t.order_number, doc.order_number),
        (t.incoterms, incoterms_place(doc, company)),
        (t.declaration_number, doc.declaration_number),
        (t.reference, doc.reference),
        (t.shipping_address, textwrap.shorten(doc.shipping_address, width=40, placeholder="...") if doc.shipping_address else ""),
    ]
    y = PARTIES_TOP
    for label, value in rows:
        if not value:
            continue
        pl.add(Text(OVERLAY_LEFT, y, label, BODY_SIZE, bold=True))
        pl.add(Text(OVERLAY_RIGHT, y, value, BODY_SIZE, align="right"))
        y += LINE


def _columns(doc: Document, t: Translations) -> List[tuple]:
    if doc.kind is DocumentKind.ORDER_CONFIRMATION:
        return [
            ("#", 8.0, "center"),
            ("", 20.0, "center"),
            (t.part_name, 62.0, "left"),
            (t.part_number, 30.0, "left"),
            (t.quantity, 18.0, "right"),
            (t.price, 20.0, "right"),
            (t.amount, 22.0, "right"),
        ]
    return [
        ("#", 8.0, "center"),
        (t.part_name, 52.0, "left"),
        (t.part_number, 26.0, "left"),
        (t.unit, 14.0, "center"),
        (t.quantity, 14.0, "right"),
        (t.subtotal_weight, 20.0, "right"),
        (t.price, 22.0, "right"),
        (t.amount, 24.0, "right"),
    ]


def _cell_x(x: float, width: float, align: str) -> float:
    if align == "right":
        return x + width - 1.2
    if align == "center":
        return x + width / 2
    return x + 1.2


def _draw_table_header(pl: PageLayout, columns: Sequence[tuple], primary: str) -> float:
    pl.add(Box(MARGIN, TABLE_TOP, CONTENT_WIDTH, TABLE_HEADER_HEIGHT, fill=primary))
    x = MARGIN
    for label, width, align in columns:
        if label:
            pl.add(Text(_cell_x(x, width, align), TABLE_TOP + 4.7, label, SMALL_SIZE, bold=True, align=align, color=WHITE))
        x += width
    return TABLE_TOP + TABLE_HEADER_HEIGHT


def _invoice_row(pl: PageLayout, doc: Document, t: Translations, item: LineItem, number: int, y: float) -> float:
    description = wrap(item.description, INVOICE_CHARS_PER_LINE)
    height = len(description) * ROW_LINE + ROW_PAD
    catalog = item.catalog
    values = [
        str(number),
        None,
        catalog.part_number if catalog and catalog.part_number else t.not_available,
        catalog.unit if catalog and catalog.unit else t.unit_default,
        str(item.quantity),
        fmt_weight(item.weight),
        format_currency(item.unit_price, doc.currency),
        format_currency(item.line_total, doc.currency),
    ]
    baseline = y + ROW_PAD / 2 + 3.0
    x = MARGIN
    for (_, width, align), value in zip(_columns(doc, t), values):
        if value is None:
            for k, line in enumerate(description):
                pl.add(Text(_cell_x(x, width, align), baseline + k * ROW_LINE, line, BODY_SIZE, align=align))
        else:
            pl.add(Text(_cell_x(x, width, align), baseline, value, BODY_SIZE, align=align))
        x += width
    pl.add(Rule(MARGIN, y + height, A4_WIDTH - MARGIN, y + height, color=GRID))
    return y + height


def _order_row(pl: PageLayout, doc: Document, t: Translations, item: LineItem, number: int, y: float) -> float:
    height = ORDER_ROW_HEIGHT
    catalog = item.catalog
    description = wrap(item.description, ORDER_DESCRIPTION_CHARS)[:3]
    baseline = y + 5.0
    columns = _columns(doc, t)
    values = [
        str(number),
        None,
        None,
        catalog.part_number if catalog and catalog.part_number else t.not_available,
        str(item.quantity),
        format_currency(item.unit_price, doc.currency),
        format_currency(item.line_total, doc.currency),
    ]
    x = MARGIN
    for n, ((_, width, align), value) in enumerate(zip(columns, values)):
        if n == 1:
            pl.add(fit_picture(catalog.photo_path if catalog else None, x + 1.0, y + 1.0, width - 2.0, height - 2.0))
        elif n == 2:
            for k, line in enumerate(description):
                pl.add(Text(_cell_x(x, width, align), baseline + k * ROW_LINE, line, BODY_SIZE, align=align))
        else:
            pl.add(Text(_cell_x(x, width, align), baseline, value, BODY_SIZE, align=align))
        x += width
    pl.add(Rule(MARGIN, y + height, A4_WIDTH - MARGIN, y + height, color=GRID))
    return y + height


def _draw_summary(pl: PageLayout, doc: Document, t: Translations, y: float) -> float:
    """Left column of the terminal page; returns the y below it."""
    totals = doc.totals
    pl.add(Text(MARGIN, y, t.summary, HEADING_SIZE, bold=True))
    package_word = t.package if totals.packing == 1 else t.packages
    rows = [
        (t.total_quantity, str(totals.total_quantity)),
        (t.net_weight, fmt_weight(totals.net_weight)),
        (t.total_weight, fmt_weight(totals.total_weight)),
        (t.packing, f"{totals.packing} {package_word}"),
    ]
    for label, value in rows:
        y += LINE
        pl.add(Text(MARGIN, y, label, BODY_SIZE))
        pl.add(Text(MARGIN + 60.0, y, value, BODY_SIZE, align="right"))
    return y + LINE


def _needs_origin_declaration(doc: Document) -> bool:
    return (
        doc.kind is DocumentKind.INVOICE
        and not doc.is_domestic
        and doc.currency.upper() == "EUR"
        and doc.totals.total < ORIGIN_DECLARATION_LIMIT
    )


def _draw_origin_declaration(pl: PageLayout, doc: Document, settings: InvoiceSettings, company: Company, y: float) -> float:
    y += 1.0
    for line in wrap(ORIGIN_DECLARATION, 80):
        pl.add(Text(MARGIN, y, line, TINY_SIZE))
        y += SMALL_LINE
    signer = settings.signatory or company.legal_name
    pl.add(Text(MARGIN, y + 1.0, f"{EXPORTER_SIGNATURE} {signer}".strip(), TINY_SIZE, bold=True))
    return y + SMALL_LINE + 1.0


def _draw_totals_and_overlays(
    pl: PageLayout,
    doc: Document,
    t: Translations,
    settings: InvoiceSettings,
    blocks: Sequence[OverlayBlock],
    primary: str,
    y: float,
) -> float:
    """Right column of the terminal page; returns the y below the lowest stacked block."""
    totals = doc.totals
    pl.add(Text(OVERLAY_LEFT, y, t.subtotal, BODY_SIZE))
    pl.add(Text(OVERLAY_RIGHT, y, format_currency(totals.subtotal, doc.currency), BODY_SIZE, align="right"))
    y += LINE
    pl.add(Text(OVERLAY_LEFT, y, f"{t.vat} ({_fmt_rate(doc.vat_rate)}%)", BODY_SIZE))
    pl.add(Text(OVERLAY_RIGHT, y, format_currency(totals.vat, doc.currency), BODY_SIZE, align="right"))
    top = y + 3.0

    bottom = top
    for block in blocks:
        if block.anchor != "stack" or not block.present:
            continue
        by = top + block.offset
        if block.name == "total_badge":
            pl.add(Box(OVERLAY_LEFT, by, OVERLAY_WIDTH, TOTAL_BADGE_HEIGHT, fill=primary))
            pl.add(Text(OVERLAY_LEFT + 3.0, by + 6.0, t.total, HEADING_SIZE, bold=True, color=WHITE))
            pl.add(
                Text(OVERLAY_RIGHT - 3.0, by + 6.0, format_currency(totals.total, doc.currency), HEADING_SIZE, bold=True, align="right", color=WHITE)
            )
        elif block.name == "vat_note":
            ly = by + 3.0
            for paragraph in VAT_EXEMPTION_LINES:
                for line in wrap(paragraph, 62):
                    pl.add(Text(OVERLAY_LEFT, ly, line, TINY_SIZE))
                    ly += 2.6
        elif block.name == "signatory":
            pl.add(Rule(OVERLAY_LEFT + 20.0, by + 7.0, OVERLAY_RIGHT, by + 7.0, width=0.3))
            pl.add(Text((OVERLAY_LEFT + 20.0 + OVERLAY_RIGHT) / 2, by + 10.0, settings.signatory, SMALL_SIZE, align="center"))
        bottom = by + block.height
    return bottom


def _draw_notes(pl: PageLayout, doc: Document, t: Translations, y: float) -> float:
    if not doc.notes.strip():
        return y
    title_h = NOTES_TITLE_HEIGHT_PX * PX_TO_MM
    line_h = NOTES_LINE_HEIGHT_PX * PX_TO_MM
    pl.add(Text(MARGIN, y + title_h - 2.0, t.notes, HEADING_SIZE, bold=True))
    y += title_h
    for line in wrap_paragraphs(doc.notes, NOTES_CHARS_PER_LINE):
        pl.add(Text(MARGIN, y + line_h - 1.5, line, BODY_SIZE))
        y += line_h
    return y


def _draw_bottom_bands(pl: PageLayout, ctx: OverlayContext, blocks: Sequence[OverlayBlock]) -> None:
    note_band = find_block(blocks, "foreign_note")
    if note_band is not None and note_band.present:
        note = foreign_note_text(ctx)
        lines = wrap(note, 120)
        base = A4_HEIGHT - note_band.offset
        for k, line in enumerate(lines):
            pl.add(Text(A4_WIDTH / 2, base - (len(lines) - 1 - k) * SMALL_LINE, line, SMALL_SIZE, align="center"))

    footer = find_block(blocks, "footer")
    if footer is None or not footer.present:
        return
    top = A4_HEIGHT - footer.offset - footer.height
    pl.add(Rule(MARGIN, top, A4_WIDTH - MARGIN, top, width=0.3, color=GRID))
    col_w = CONTENT_WIDTH / 3
    for n, column in enumerate(footer_columns(ctx)):
        x = MARGIN + n * col_w
        for k, line in enumerate(column.split("\n")[:4]):
            pl.add(Text(x, top + 3.5 + k * SMALL_LINE, line, TINY_SIZE))


# ===== Public API =====
def build_page(
    doc: Document,
    page: Page[LineItem],
    page_count: int,
    first_row_number: int,
    settings: InvoiceSettings,
    company: Optional[Company] = None,
) -> PageLayout:
    """Compose one page: running header and rows always, summary blocks on the terminal page only."""
    company = company or doc.company
    t = translations_for(doc.counterparty.country)
    primary = safe_color(settings.primary_color)
    pl = PageLayout(A4_WIDTH, A4_HEIGHT, index=page.index, count=page_count, is_terminal=page.is_terminal)

    _draw_header(pl, doc, company, t, primary)
    _draw_parties(pl, doc, company, t)
    y = _draw_table_header(pl, _columns(doc, t), primary)
    row = _order_row if doc.kind is DocumentKind.ORDER_CONFIRMATION else _invoice_row
    for n, item in enumerate(page.items):
        y = row(pl, doc, t, item, first_row_number + n, y)

    if not page.is_terminal:
        return pl

    y += 5.0
    if doc.kind is DocumentKind.ORDER_CONFIRMATION:
        y = _draw_notes(pl, doc, t, y) + 3.0
    left = _draw_summary(pl, doc, t, y)
    if _needs_origin_declaration(doc):
        left = _draw_origin_declaration(pl, doc, settings, company, left)
    ctx = OverlayContext(doc, settings)
    blocks = terminal_overlays(ctx)
    right = _draw_totals_and_overlays(pl, doc, t, settings, blocks, primary, y)
    if doc.kind is DocumentKind.INVOICE:
        _draw_notes(pl, doc, t, max(left, right) + 2.0)
    _draw_bottom_bands(pl, ctx, blocks)
    return pl


def build_layouts(doc: Document, settings: InvoiceSettings, company: Optional[Company] = None) -> List[PageLayout]:
    """Paginate a document and compose every page."""
    if company is None or doc.company.legal_name:
        company = doc.company
    pages = paginate_document(doc)
    layouts: List[PageLayout] = []
    row_number = 1
    for page in pages:
        layouts.append(build_page(doc, page, len(pages), row_number, settings, company))
        row_number += len(page.items)
    logger.debug("Composed %d page(s) for %s %s", len(layouts), doc.kind.value, doc.number)
    return layouts
