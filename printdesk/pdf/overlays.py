"""Vertical placement of the optional blocks stacked under the total badge.

Each rule declares a pre-measured height, a lead (gap to the previous block's
bottom, negative when the block tucks up into the previous one) and a presence
predicate. Offsets come from a running sum over the present blocks, so toggling
a block only shifts the blocks after it. With the current rules this yields
total badge 0 mm, VAT note 10.5 mm, signatory 26.5 mm (12 mm without the VAT
note).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from printdesk.core.settings import InvoiceSettings
from printdesk.data.models import Document, DocumentKind

# Physical geometry of the right-hand overlay column (mm)
OVERLAY_WIDTH = 76.0
OVERLAY_RIGHT_INSET = 2.0
TITLE_BADGE_HEIGHT = 8.5
TOTAL_BADGE_HEIGHT = 9.0

# Bottom-anchored bands, measured up from the page's bottom edge
FOREIGN_NOTE_BOTTOM = 30.0
FOOTER_BOTTOM = 10.0
FOOTER_HEIGHT = 14.0


@dataclass(frozen=True)
class OverlayContext:
    document: Document
    settings: InvoiceSettings

    @property
    def is_foreign(self) -> bool:
        return not self.document.is_domestic

    @property
    def foreign_invoice(self) -> bool:
        return self.is_foreign and self.document.kind is DocumentKind.INVOICE


@dataclass(frozen=True)
class StackRule:
    name: str
    height: float
    lead: float
    present: Callable[[OverlayContext], bool]


@dataclass(frozen=True)
class OverlayBlock:
    name: str
    present: bool
    height: float
    # mm below the top of the total badge for stacked blocks; mm above the page bottom for bands
    offset: float
    anchor: str = "stack"


STACK_RULES: Sequence[StackRule] = (
    StackRule("total_badge", height=12.0, lead=0.0, present=lambda ctx: True),
    StackRule("vat_note", height=16.0, lead=-1.5, present=lambda ctx: ctx.foreign_invoice),
    StackRule("signatory", height=12.0, lead=0.0, present=lambda ctx: ctx.document.kind is DocumentKind.INVOICE),
)


def foreign_note_text(ctx: OverlayContext) -> str:
    if not ctx.foreign_invoice:
        return ""
    note = ctx.settings.foreign_note or ""
    if not note.strip():
        return ""
    return note.replace("{invoice_number}", ctx.document.number or "")


def footer_columns(ctx: OverlayContext) -> List[str]:
    cols = ctx.settings.foreign_footer if ctx.is_foreign else ctx.settings.domestic_footer
    return list(cols)


def has_footer(settings: InvoiceSettings) -> bool:
    return any(c.strip() for c in settings.domestic_footer) or any(c.strip() for c in settings.foreign_footer)


def stack_overlays(ctx: OverlayContext, rules: Sequence[StackRule] = STACK_RULES) -> List[OverlayBlock]:
    """Offsets for every stacked rule (absent blocks are reported with present=False)."""
    blocks: List[OverlayBlock] = []
    cursor = 0.0
    for rule in rules:
        if not rule.present(ctx):
            blocks.append(OverlayBlock(rule.name, False, rule.height, cursor))
            continue
        offset = max(0.0, cursor + rule.lead)
        blocks.append(OverlayBlock(rule.name, True, rule.height, offset))
        cursor = offset + rule.height
    return blocks


def terminal_overlays(ctx: OverlayContext) -> List[OverlayBlock]:
    """Stacked blocks plus the bottom bands of the terminal page."""
    blocks = stack_overlays(ctx)
    blocks.append(
        OverlayBlock("foreign_note", bool(foreign_note_text(ctx)), 10.0, FOREIGN_NOTE_BOTTOM, anchor="bottom")
    )
    blocks.append(OverlayBlock("footer", has_footer(ctx.settings), FOOTER_HEIGHT, FOOTER_BOTTOM, anchor="bottom"))
    return blocks


def find_block(blocks: Sequence[OverlayBlock], name: str) -> Optional[OverlayBlock]:
    for b in blocks:
        if b.name == name:
            return b
    return None
