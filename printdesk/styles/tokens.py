from __future__ import annotations

"""Design tokens for the PrintDesk preview windows.

- Neutral chrome so the page itself carries the colour.
- Spacing scale uses 4px multiples.
"""


class Colors:
    # Light
    bg = "#fafafa"
    card = "#ffffff"
    text = "#222"
    subtext = "#444"
    border = "#e0e0e0"
    input_border = "#cfcfcf"
    primary = "#5b8def"
    # Backdrop behind the rendered page
    canvas = "#8a8f98"

    # Dark
    bg_dark = "#2b2b2b"
    card_dark = "#2f2f2f"
    text_dark = "#f0f0f0"
    border_dark = "#3d3d3d"
    input_border_dark = "#666"
    primary_dark = "#7aa2ff"
    canvas_dark = "#1e1e1e"


class Radius:
    sm = 6
    md = 10


class Space:
    xs = 4
    sm = 8
    md = 12
