from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from PySide6.QtCore import QLineF, QRectF, Qt
from PySide6.QtGui import QColor, QFont, QFontDatabase, QFontMetricsF, QImage, QPainter, QPen, QPixmap
from PySide6.QtWidgets import QLabel, QScrollArea, QWidget

from printdesk.core.errors import FontError
from printdesk.core.paths import FONT_FAMILY, font_path
from printdesk.pdf.layout import Box, PageLayout, Picture, Rule, Text, render_layout

logger = logging.getLogger(__name__)

# Screen pixels per millimetre at 100% zoom (96 DPI)
SCREEN_PX_PER_MM = 96 / 25.4

_loaded_family: Optional[str] = None

_ALIGN_FLAGS = {
    "left": Qt.AlignLeft,
    "right": Qt.AlignRight,
    "center": Qt.AlignHCenter,
}


def _flags(align: str) -> int:
    return _ALIGN_FLAGS.get(align, Qt.AlignLeft).value | Qt.AlignTop.value | Qt.TextDontClip.value


def load_fonts() -> str:
    """Register the bundled TTFs with Qt once and return the family they provide."""
    global _loaded_family
    if _loaded_family is not None:
        return _loaded_family
    for style in ("regular", "bold"):
        path = font_path(style)
        font_id = QFontDatabase.addApplicationFont(str(path))
        if font_id < 0:
            raise FontError(f"Could not load font {path}")
        families = QFontDatabase.applicationFontFamilies(font_id)
        if FONT_FAMILY not in families:
            raise FontError(f"Font {path} provides {families}, expected {FONT_FAMILY}")
    _loaded_family = FONT_FAMILY
    return _loaded_family


def layout_font(el: Text) -> QFont:
    font = QFont(load_fonts())
    font.setStyleHint(QFont.SansSerif)
    font.setPointSizeF(el.size)
    font.setBold(el.bold)
    return font


class QtPainterAdapter:
    """Paints PageLayout display lists with a QPainter, in device pixels.

    The paint device must carry a resolution of px_per_mm so that point sizes
    map to the same physical size as on the PDF canvas.
    """

    def __init__(self, painter: QPainter, px_per_mm: float) -> None:
        self.p = painter
        self.k = px_per_mm
        self._width = 0.0

    def begin_page(self, layout: PageLayout) -> None:
        self._width = layout.width * self.k

    def text(self, el: Text) -> None:
        font = layout_font(el)
        self.p.setFont(font)
        self.p.setPen(QColor(el.color))
        metrics = QFontMetricsF(font, self.p.device())
        top = el.y * self.k - metrics.ascent()
        x = el.x * self.k
        w = self._width
        if el.align == "right":
            rect = QRectF(x - w, top, w, metrics.height())
        elif el.align == "center":
            rect = QRectF(x - w / 2, top, w, metrics.height())
        else:
            rect = QRectF(x, top, w, metrics.height())
        self.p.drawText(rect, _flags(el.align), el.text)

    def rule(self, el: Rule) -> None:
        pen = QPen(QColor(el.color))
        pen.setWidthF(el.width * self.k)
        self.p.setPen(pen)
        self.p.drawLine(QLineF(el.x1 * self.k, el.y1 * self.k, el.x2 * self.k, el.y2 * self.k))

    def box(self, el: Box) -> None:
        rect = QRectF(el.x * self.k, el.y * self.k, el.w * self.k, el.h * self.k)
        if el.fill:
            self.p.fillRect(rect, QColor(el.fill))
        if el.stroke:
            pen = QPen(QColor(el.stroke))
            pen.setWidthF(el.width * self.k)
            self.p.setPen(pen)
            self.p.setBrush(Qt.NoBrush)
            self.p.drawRect(rect)

    def picture(self, el: Picture) -> None:
        image = QImage(el.path)
        if image.isNull():
            logger.warning("Preview could not load image %s", el.path)
            return
        self.p.drawImage(QRectF(el.x * self.k, el.y * self.k, el.w * self.k, el.h * self.k), image)

    def end_page(self, layout: PageLayout) -> None:
        pass


def render_layout_image(layout: PageLayout, px_per_mm: float = SCREEN_PX_PER_MM) -> QImage:
    """Paint one page into a white QImage whose resolution matches px_per_mm."""
    image = QImage(round(layout.width * px_per_mm), round(layout.height * px_per_mm), QImage.Format_RGB32)
    image.fill(Qt.white)
    dots_per_meter = round(px_per_mm * 1000)
    image.setDotsPerMeterX(dots_per_meter)
    image.setDotsPerMeterY(dots_per_meter)
    painter = QPainter(image)
    try:
        painter.setRenderHint(QPainter.Antialiasing)
        painter.setRenderHint(QPainter.TextAntialiasing)
        render_layout(layout, QtPainterAdapter(painter, px_per_mm))
    finally:
        painter.end()
    return image


class PageView(QScrollArea):
    """Scrollable single-page preview with zoom and page navigation."""

    ZOOM_MIN, ZOOM_MAX = 0.25, 4.0

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("PageView")
        self._layouts: List[PageLayout] = []
        self._index = 0
        self._zoom = 1.0
        self._label = QLabel()
        self._label.setAlignment(Qt.AlignCenter)
        self.setWidget(self._label)
        self.setWidgetResizable(True)
        self.setAlignment(Qt.AlignCenter)

    def set_layouts(self, layouts: Sequence[PageLayout]) -> None:
        self._layouts = list(layouts)
        self._index = 0
        self._refresh()

    def page_count(self) -> int:
        return len(self._layouts)

    def current_index(self) -> int:
        return self._index

    def go_to(self, index: int) -> None:
        if not self._layouts:
            return
        self._index = max(0, min(index, len(self._layouts) - 1))
        self._refresh()

    def next_page(self) -> None:
        self.go_to(self._index + 1)

    def previous_page(self) -> None:
        self.go_to(self._index - 1)

    def zoom(self) -> float:
        return self._zoom

    def set_zoom(self, zoom: float) -> None:
        self._zoom = max(self.ZOOM_MIN, min(self.ZOOM_MAX, zoom))
        self._refresh()

    def zoom_in(self) -> None:
        self.set_zoom(self._zoom * 1.1)

    def zoom_out(self) -> None:
        self.set_zoom(self._zoom / 1.1)

    def fit_width(self) -> None:
        if not self._layouts:
            return
        available = max(1, self.viewport().width() - 20)
        self.set_zoom(available / (self._layouts[self._index].width * SCREEN_PX_PER_MM))

    def _refresh(self) -> None:
        if not self._layouts:
            self._label.clear()
            return
        # Render at device pixel ratio so the preview stays sharp on high-DPI screens
        ratio = self.devicePixelRatioF()
        image = render_layout_image(self._layouts[self._index], SCREEN_PX_PER_MM * self._zoom * ratio)
        pixmap = QPixmap.fromImage(image)
        pixmap.setDevicePixelRatio(ratio)
        self._label.setPixmap(pixmap)
