"""Bitmap export of composed pages.

Each page is drawn into its own in-memory PDF, rasterized with PyMuPDF at
96 DPI times the configured scale, JPEG-encoded with Pillow and appended to the
output document at the page's physical size. Pages are processed one at a time
in order; nothing is written to disk until every page has been produced.
"""
from __future__ import annotations

import asyncio
import io
import logging
import re
from datetime import date
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple

import fitz  # pymupdf
from PIL import Image
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import Canvas

from printdesk.core.dates import file_stamp
from printdesk.core.errors import ExportError
from printdesk.core.settings import ExportSettings
from printdesk.data.models import DocumentKind
from printdesk.pdf.layout import PageLayout
from printdesk.pdf.pdf_draw import render_page_pdf

logger = logging.getLogger(__name__)

CSS_DPI = 96
MM_PER_INCH = 25.4

ProgressCallback = Callable[[int, int], None]
PrintSink = Callable[[PageLayout, bytes], None]

_UNSAFE_FILENAME = re.compile(r'[\\/:*?"<>|\s]+')


def target_size(width_mm: float, height_mm: float, scale: float) -> Tuple[int, int]:
    """Bitmap size in pixels for a physical page at 96 DPI times scale."""
    factor = CSS_DPI / MM_PER_INCH * scale
    return round(width_mm * factor), round(height_mm * factor)


def placed_size(layout: PageLayout, pixel_width: int, pixel_height: int) -> Tuple[float, float]:
    """Size in mm of a page bitmap placed full-width; height keeps aspect, capped at the page."""
    width = layout.width
    height = min(width * pixel_height / pixel_width, layout.height)
    return width, height


def rasterize_layout(layout: PageLayout, export: ExportSettings) -> bytes:
    """Render one page to JPEG bytes; the intermediate PDF and pixmap are dropped on return."""
    try:
        pdf_bytes = render_page_pdf(layout)
        size = target_size(layout.width, layout.height, export.scale)
        with fitz.open(stream=pdf_bytes, filetype="pdf") as pdf_doc:
            page = pdf_doc[0]
            matrix = fitz.Matrix(size[0] / page.rect.width, size[1] / page.rect.height)
            pix = page.get_pixmap(matrix=matrix, alpha=False)
            image = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
        # PyMuPDF rounds the pixmap bounds outward; pin the bitmap to the computed size
        if image.size != size:
            image = image.resize(size, Image.LANCZOS)
        buf = io.BytesIO()
        image.save(buf, format="JPEG", quality=int(round(export.quality * 100)), dpi=(export.dpi, export.dpi))
        return buf.getvalue()
    except Exception as e:
        raise ExportError(f"Failed to render page {layout.index + 1}: {e}", page_index=layout.index) from e


def _append_page(c: Canvas, layout: PageLayout, jpeg: bytes) -> None:
    reader = ImageReader(io.BytesIO(jpeg))
    pw, ph = reader.getSize()
    width, height = placed_size(layout, pw, ph)
    c.setPageSize((layout.width * mm, layout.height * mm))
    c.drawImage(reader, 0, (layout.height - height) * mm, width=width * mm, height=height * mm)
    c.showPage()


async def export_pdf(
    layouts: Sequence[PageLayout],
    out_path: Path | str,
    export: ExportSettings,
    progress: Optional[ProgressCallback] = None,
) -> Path:
    """Rasterize pages in order and write them as one PDF.

    Raises ExportError on the first failing page; no output file is left behind.
    """
    if not layouts:
        raise ExportError("There are no pages to export.")
    out = Path(out_path)
    buf = io.BytesIO()
    c = Canvas(buf)
    total = len(layouts)
    for n, layout in enumerate(layouts):
        jpeg = await asyncio.to_thread(rasterize_layout, layout, export)
        try:
            _append_page(c, layout, jpeg)
        except Exception as e:
            raise ExportError(f"Failed to add page {n + 1} to the document: {e}", page_index=n) from e
        logger.debug("Rasterized page %d/%d", n + 1, total)
        if progress is not None:
            progress(n + 1, total)

    c.save()
    tmp = out.with_suffix(out.suffix + ".tmp")
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_bytes(buf.getvalue())
        tmp.replace(out)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise ExportError(f"Could not write {out}: {e}") from e
    logger.info("Exported %d page(s) to %s", total, out)
    return out


def export_pdf_sync(
    layouts: Sequence[PageLayout],
    out_path: Path | str,
    export: ExportSettings,
    progress: Optional[ProgressCallback] = None,
) -> Path:
    return asyncio.run(export_pdf(layouts, out_path, export, progress))


async def print_pages(
    layouts: Sequence[PageLayout],
    export: ExportSettings,
    sink: PrintSink,
    progress: Optional[ProgressCallback] = None,
) -> int:
    """Rasterize pages in order and hand each bitmap to a print sink instead of a file."""
    total = len(layouts)
    for n, layout in enumerate(layouts):
        jpeg = await asyncio.to_thread(rasterize_layout, layout, export)
        sink(layout, jpeg)
        if progress is not None:
            progress(n + 1, total)
    return total


def output_filename(kind: DocumentKind, number: str, today: Optional[date] = None, labels: bool = False) -> str:
    """File name offered for an export, e.g. Invoice_INV-7_2024-03-01.pdf."""
    safe = _UNSAFE_FILENAME.sub("-", str(number or "").strip()).strip("-") or "draft"
    stamp = file_stamp(today)
    if labels:
        return f"Labels-Invoice_{safe}_{stamp}.pdf"
    if kind is DocumentKind.ORDER_CONFIRMATION:
        return f"OrderConfirmation_{safe}_{stamp}.pdf"
    return f"Invoice_{safe}_{stamp}.pdf"
