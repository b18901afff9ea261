from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, List, Sequence, Tuple, TypeVar

from printdesk.data.models import Document, DocumentKind, LineItem
from printdesk.pdf.estimate import (
    INVOICE_CHARS_PER_LINE,
    estimate_lines,
    estimate_notes_height,
)

T = TypeVar("T")

# Invoice capacities in estimated table lines; the terminal page keeps room for the summary
INVOICE_FULL_PAGE_LINES = 30
INVOICE_TERMINAL_PAGE_LINES = 8

# Order confirmations use fixed-height rows, so capacities are item counts
ORDER_ITEM_HEIGHT_PX = 70
ORDER_ITEMS_PER_PAGE = 10
ORDER_AVAILABLE_SPACE_PX = 710


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Tuple[T, ...]
    index: int
    is_terminal: bool
    # Capacity active when the page was closed (terminal or full)
    capacity: int
    lines: int


def paginate(
    items: Sequence[T],
    weights: Sequence[int],
    full_capacity: int,
    terminal_capacity: int,
) -> List[Page[T]]:
    """Split items into pages, reserving a smaller terminal page for the summary block.

    Before each item the remaining suffix is checked against the terminal
    capacity; when it fits, the page being built is the terminal page and uses
    the reduced capacity. An item that alone exceeds the capacity is placed on
    a page by itself and overflows instead of being split. Zero items yield
    one empty page so the header and footer still render.
    """
    if len(items) != len(weights):
        raise ValueError("items and weights must have the same length")
    if full_capacity < 1 or terminal_capacity < 1:
        raise ValueError("page capacities must be positive")

    # suffix[i] = lines needed by items[i:]
    suffix = [0] * (len(weights) + 1)
    for i in range(len(weights) - 1, -1, -1):
        suffix[i] = suffix[i + 1] + weights[i]

    chunks: List[Tuple[List[T], int, int]] = []
    current: List[T] = []
    current_lines = 0
    page_capacity = terminal_capacity

    i = 0
    while i < len(items):
        lines = weights[i]
        capacity = terminal_capacity if suffix[i] <= terminal_capacity else full_capacity
        if current_lines + lines <= capacity:
            current.append(items[i])
            current_lines += lines
            page_capacity = capacity
            i += 1
        elif current:
            chunks.append((current, page_capacity, current_lines))
            current, current_lines = [], 0
        else:
            # Oversized single item: place it anyway on its own page
            current.append(items[i])
            current_lines += lines
            page_capacity = capacity
            i += 1

    if current or not chunks:
        chunks.append((current, page_capacity, current_lines))

    last = len(chunks) - 1
    return [
        Page(items=tuple(chunk), index=n, is_terminal=(n == last), capacity=cap, lines=used)
        for n, (chunk, cap, used) in enumerate(chunks)
    ]


def paginate_invoice(items: Sequence[LineItem]) -> List[Page[LineItem]]:
    weights = [estimate_lines(i.description, INVOICE_CHARS_PER_LINE) for i in items]
    return paginate(items, weights, INVOICE_FULL_PAGE_LINES, INVOICE_TERMINAL_PAGE_LINES)


def order_terminal_capacity(notes: str | None) -> int:
    """Items that fit on the last order-confirmation page next to the notes block.

    Best effort: relies on the notes estimate and is not re-checked after layout.
    """
    notes_height = estimate_notes_height(notes)
    if notes_height <= 0:
        return ORDER_ITEMS_PER_PAGE
    return max(1, math.floor((ORDER_AVAILABLE_SPACE_PX - notes_height) / ORDER_ITEM_HEIGHT_PX))


def paginate_order_confirmation(items: Sequence[LineItem], notes: str | None) -> List[Page[LineItem]]:
    return paginate(items, [1] * len(items), ORDER_ITEMS_PER_PAGE, order_terminal_capacity(notes))


def paginate_document(doc: Document) -> List[Page[LineItem]]:
    if doc.kind is DocumentKind.ORDER_CONFIRMATION:
        return paginate_order_confirmation(doc.items, doc.notes)
    return paginate_invoice(doc.items)
