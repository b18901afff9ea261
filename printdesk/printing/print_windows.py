import logging
import os
import subprocess
import sys

from PySide6.QtCore import QRectF
from PySide6.QtGui import QImage, QPageLayout, QPainter
from PySide6.QtPrintSupport import QPrinter

from printdesk.core.errors import ExportError
from printdesk.pdf.layout import PageLayout

logger = logging.getLogger(__name__)


def open_file(path):
    try:
        if sys.platform == "win32":
            os.startfile(path)
        elif sys.platform == "darwin":
            subprocess.Popen(["open", str(path)])
        else:
            subprocess.Popen(["xdg-open", str(path)])
        return True
    except OSError:
        logger.exception("Failed to open file: %s", path)
        return False


def orient_printer(printer: QPrinter, layout: PageLayout) -> None:
    """Match the printer orientation to the page (label sheets are landscape)."""
    landscape = layout.width > layout.height
    printer.setPageOrientation(QPageLayout.Landscape if landscape else QPageLayout.Portrait)


class QtPrintSink:
    """Receives rasterized pages in order and paints each onto its own printer page."""

    def __init__(self, printer: QPrinter) -> None:
        self.printer = printer
        self.painter = None
        self.pages = 0

    def __call__(self, layout: PageLayout, jpeg: bytes) -> None:
        image = QImage.fromData(jpeg, "JPEG")
        if image.isNull():
            raise ExportError(f"Page {layout.index + 1} could not be decoded for printing.", page_index=layout.index)
        if self.painter is None:
            orient_printer(self.printer, layout)
            self.painter = QPainter()
            if not self.painter.begin(self.printer):
                self.painter = None
                raise ExportError("The printer could not be started.")
        elif not self.printer.newPage():
            raise ExportError(f"The printer rejected page {layout.index + 1}.", page_index=layout.index)

        target = QRectF(self.painter.viewport())
        scale = min(target.width() / image.width(), target.height() / image.height())
        w, h = image.width() * scale, image.height() * scale
        self.painter.drawImage(QRectF(target.x() + (target.width() - w) / 2, target.y(), w, h), image)
        self.pages += 1

    def finish(self) -> int:
        if self.painter is not None:
            self.painter.end()
            self.painter = None
        logger.info("Sent %d page(s) to %s", self.pages, self.printer.printerName() or "printer")
        return self.pages
