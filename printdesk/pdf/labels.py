from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence

from printdesk.core.currency import fmt_weight
from printdesk.core.dates import fmt_date
from printdesk.core.translations import ENGLISH
from printdesk.data.models import Document
from printdesk.pdf.layout import (
    BLACK,
    GRID,
    Box,
    PageLayout,
    Rule,
    Text,
    fit_picture,
    wrap,
)
from printdesk.pdf.packages import PackageAllocation, ShippingLabel, expand_labels

logger = logging.getLogger(__name__)

# Landscape A4 sheet, 4 x 3 cells
SHEET_WIDTH, SHEET_HEIGHT = 297.0, 210.0
COLUMNS, ROWS = 4, 3
LABELS_PER_PAGE = COLUMNS * ROWS
INCH = 25.4
GAP = 0.08 * INCH
PADDING = 0.08 * INCH

CELL_WIDTH = (SHEET_WIDTH - 2 * PADDING - (COLUMNS - 1) * GAP) / COLUMNS
CELL_HEIGHT = (SHEET_HEIGHT - 2 * PADDING - (ROWS - 1) * GAP) / ROWS

DESCRIPTION_CHARS = 30
PHOTO_SIZE = 26.0


def cell_origin(slot: int) -> tuple[float, float]:
    """Top-left corner of a cell; slots fill row by row."""
    row, col = divmod(slot, COLUMNS)
    return PADDING + col * (CELL_WIDTH + GAP), PADDING + row * (CELL_HEIGHT + GAP)


def quantity_text(pieces: int) -> str:
    word = ENGLISH.piece if pieces == 1 else ENGLISH.pieces
    return f"{pieces} {word}"


def _draw_label(pl: PageLayout, label: ShippingLabel, slot: int) -> None:
    x, y = cell_origin(slot)
    item = label.item
    catalog = item.catalog
    pl.add(Box(x, y, CELL_WIDTH, CELL_HEIGHT, stroke=BLACK, width=0.3))

    ty = y + 6.0
    for line in wrap(item.description, DESCRIPTION_CHARS)[:2]:
        pl.add(Text(x + 3.0, ty, line, 9.0, bold=True))
        ty += 4.2
    part_number = catalog.part_number if catalog and catalog.part_number else ENGLISH.not_available
    pl.add(Text(x + 3.0, ty + 1.0, part_number, 8.0))
    pl.add(Text(x + 3.0, ty + 7.0, quantity_text(label.pieces), 12.0, bold=True))
    if label.total_packages > 1:
        pl.add(Text(x + 3.0, ty + 12.5, f"pkg {label.package_number}/{label.total_packages}", 8.0))

    pl.add(
        fit_picture(
            catalog.photo_path if catalog else None,
            x + CELL_WIDTH - PHOTO_SIZE - 3.0,
            y + CELL_HEIGHT - PHOTO_SIZE - 12.0,
            PHOTO_SIZE,
            PHOTO_SIZE,
        )
    )

    fy = y + CELL_HEIGHT - 8.0
    pl.add(Rule(x + 2.0, fy, x + CELL_WIDTH - 2.0, fy, color=GRID))
    doc = label.document
    pl.add(Text(x + 3.0, fy + 3.4, f"Date: {fmt_date(doc.issue_date)}", 6.0))
    pl.add(
        Text(
            x + 3.0,
            fy + 6.4,
            f"Weight: {fmt_weight(label.weight_per_piece)}/pc  Total: {fmt_weight(label.package_weight)}",
            6.0,
        )
    )


def build_label_layouts(labels: Sequence[ShippingLabel]) -> List[PageLayout]:
    """Lay labels out 12 per landscape sheet; unused cells on the last sheet stay blank."""
    chunks = [labels[i : i + LABELS_PER_PAGE] for i in range(0, len(labels), LABELS_PER_PAGE)] or [[]]
    pages: List[PageLayout] = []
    for n, chunk in enumerate(chunks):
        pl = PageLayout(SHEET_WIDTH, SHEET_HEIGHT, index=n, count=len(chunks), is_terminal=(n == len(chunks) - 1))
        for slot, label in enumerate(chunk):
            _draw_label(pl, label, slot)
        pages.append(pl)
    return pages


def build_document_labels(
    doc: Document,
    allocations: Optional[Mapping[str, PackageAllocation]] = None,
) -> List[PageLayout]:
    labels = expand_labels(doc, allocations)
    logger.debug("Expanded %d label(s) for %s", len(labels), doc.number)
    return build_label_layouts(labels)
