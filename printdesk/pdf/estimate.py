"""Line-count heuristics for fixed-width printed columns.

These deliberately avoid real text shaping: a count of characters against a
per-column budget is stable across the batch and preview renderers, and
slightly overestimates, which only ever moves an item to the next page.
"""
from __future__ import annotations

import math

# Invoice "Part name" column at the table font size
INVOICE_CHARS_PER_LINE = 25
# Full-width notes paragraph on order confirmations
NOTES_CHARS_PER_LINE = 80

# Notes block geometry in CSS pixels (96 DPI), matching the 70 px item rows
NOTES_TITLE_HEIGHT_PX = 28
NOTES_LINE_HEIGHT_PX = 20


def estimate_lines(text: str | None, chars_per_line: int = INVOICE_CHARS_PER_LINE) -> int:
    """Number of wrapped lines a description occupies; never less than 1."""
    if chars_per_line < 1:
        raise ValueError("chars_per_line must be positive")
    return max(1, math.ceil(len(text or "") / chars_per_line))


def estimate_note_lines(notes: str | None, chars_per_line: int = NOTES_CHARS_PER_LINE) -> int:
    """Total wrapped lines of a free-text notes block (0 when there is nothing to print).

    Blank paragraphs still take one line each.
    """
    if not notes or not notes.strip():
        return 0
    total = 0
    for paragraph in notes.split("\n"):
        if paragraph.strip():
            total += estimate_lines(paragraph, chars_per_line)
        else:
            total += 1
    return total


def estimate_notes_height(
    notes: str | None,
    chars_per_line: int = NOTES_CHARS_PER_LINE,
    title_height: float = NOTES_TITLE_HEIGHT_PX,
    line_height: float = NOTES_LINE_HEIGHT_PX,
) -> float:
    lines = estimate_note_lines(notes, chars_per_line)
    if lines == 0:
        return 0.0
    return title_height + line_height * lines
