from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Iterable, Optional, Tuple

from reportlab.lib.colors import HexColor
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen.canvas import Canvas

from printdesk.core.errors import FontError
from printdesk.core.paths import font_path
from printdesk.core.settings import InvoiceSettings
from printdesk.data.models import Company, Document
from printdesk.pdf.layout import Box, PageLayout, Picture, Rule, Text, build_layouts, render_layout

logger = logging.getLogger(__name__)

PDF_FONT_REGULAR = "DejaVuSans"
PDF_FONT_BOLD = "DejaVuSans-Bold"
_FONTS: Optional[Tuple[str, str]] = None


# ===== Helpers =====
def _register_fonts() -> Tuple[str, str]:
    """Return (regular_font_name, bold_font_name), registering the bundled TTFs once.

    The Qt preview loads the same files, so both renderers measure text alike.
    """
    global _FONTS
    if _FONTS is not None:
        return _FONTS
    names = (PDF_FONT_REGULAR, PDF_FONT_BOLD)
    for name, style in zip(names, ("regular", "bold")):
        path = font_path(style)
        try:
            pdfmetrics.registerFont(TTFont(name, str(path)))
        except (TTFError, OSError) as e:
            raise FontError(f"Could not load font {path}: {e}") from e
    pdfmetrics.registerFontFamily(PDF_FONT_REGULAR, normal=PDF_FONT_REGULAR, bold=PDF_FONT_BOLD)
    _FONTS = names
    logger.debug("Registered PDF fonts %s", ", ".join(names))
    return _FONTS


class CanvasAdapter:
    """Draws PageLayout display lists onto a reportlab canvas (one canvas page per layout)."""

    def __init__(self, canvas: Canvas) -> None:
        self.c = canvas
        self.font, self.bold_font = _register_fonts()
        self._height = 0.0

    def _y(self, y_mm: float) -> float:
        # Layout measures from the top edge, reportlab from the bottom
        return (self._height - y_mm) * mm

    def begin_page(self, layout: PageLayout) -> None:
        self._height = layout.height
        self.c.setPageSize((layout.width * mm, layout.height * mm))

    def text(self, el: Text) -> None:
        self.c.setFont(self.bold_font if el.bold else self.font, el.size)
        self.c.setFillColor(HexColor(el.color))
        x, y = el.x * mm, self._y(el.y)
        if el.align == "right":
            self.c.drawRightString(x, y, el.text)
        elif el.align == "center":
            self.c.drawCentredString(x, y, el.text)
        else:
            self.c.drawString(x, y, el.text)

    def rule(self, el: Rule) -> None:
        self.c.setStrokeColor(HexColor(el.color))
        self.c.setLineWidth(el.width * mm)
        self.c.line(el.x1 * mm, self._y(el.y1), el.x2 * mm, self._y(el.y2))

    def box(self, el: Box) -> None:
        if el.fill:
            self.c.setFillColor(HexColor(el.fill))
        if el.stroke:
            self.c.setStrokeColor(HexColor(el.stroke))
            self.c.setLineWidth(el.width * mm)
        self.c.rect(
            el.x * mm,
            self._y(el.y + el.h),
            el.w * mm,
            el.h * mm,
            stroke=1 if el.stroke else 0,
            fill=1 if el.fill else 0,
        )

    def picture(self, el: Picture) -> None:
        self.c.drawImage(el.path, el.x * mm, self._y(el.y + el.h), width=el.w * mm, height=el.h * mm, mask="auto")

    def end_page(self, layout: PageLayout) -> None:
        self.c.showPage()


def draw_pages(c: Canvas, layouts: Iterable[PageLayout]) -> int:
    adapter = CanvasAdapter(c)
    count = 0
    for layout in layouts:
        render_layout(layout, adapter)
        count += 1
    return count


# ===== Public API =====
def render_page_pdf(layout: PageLayout) -> bytes:
    """Single-page in-memory PDF of one layout, sized to its physical page."""
    buf = io.BytesIO()
    c = Canvas(buf, pagesize=(layout.width * mm, layout.height * mm))
    draw_pages(c, [layout])
    c.save()
    return buf.getvalue()


def build_vector_pdf(out_path: Path | str, layouts: Iterable[PageLayout], title: str = "", author: str = "PrintDesk") -> Path:
    """Write layouts as a vector PDF (archive copy); returns the output path."""
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    c = Canvas(str(out))
    c.setAuthor(author)
    if title:
        c.setTitle(title)
    pages = draw_pages(c, layouts)
    c.save()
    logger.info("Wrote %d vector page(s) to %s", pages, out)
    return out


def build_document_pdf(
    out_path: Path | str,
    doc: Document,
    settings: InvoiceSettings,
    company: Optional[Company] = None,
) -> Path:
    layouts = build_layouts(doc, settings, company)
    author = (company or doc.company).legal_name or "PrintDesk"
    return build_vector_pdf(out_path, layouts, title=f"{doc.kind.value} {doc.number}", author=author)
