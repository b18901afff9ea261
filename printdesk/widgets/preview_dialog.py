from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional, Sequence

from PySide6.QtCore import Qt
from PySide6.QtPrintSupport import QPrintDialog, QPrinter
from PySide6.QtWidgets import (
    QApplication,
    QDialog,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QProgressDialog,
    QPushButton,
    QVBoxLayout,
)

from printdesk.core.errors import ExportError
from printdesk.core.settings import SettingsStore
from printdesk.pdf.layout import PageLayout
from printdesk.pdf.raster_export import export_pdf, print_pages
from printdesk.printing.print_windows import QtPrintSink, open_file
from printdesk.widgets.page_view import PageView

logger = logging.getLogger(__name__)


class PdfPreviewDialog(QDialog):
    """On-screen preview of composed pages with export and print actions."""

    def __init__(
        self,
        layouts: Sequence[PageLayout],
        store: SettingsStore,
        file_name: str,
        title: str = "Preview",
        parent=None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle(title)
        self.resize(900, 760)
        self.layouts = list(layouts)
        self.store = store
        self.file_name = file_name
        self.exported: Optional[Path] = None

        v = QVBoxLayout(self)
        top = QHBoxLayout()
        self.title = QLabel(title)
        self.title.setObjectName("SectionTitle")
        top.addWidget(self.title)
        top.addStretch(1)
        self.btn_prev = QPushButton("<")
        self.page_label = QLabel()
        self.btn_next = QPushButton(">")
        self.btn_zoom_out = QPushButton("-")
        self.btn_zoom_in = QPushButton("+")
        self.btn_fit_width = QPushButton("Fit Width")
        for b in (self.btn_prev, self.page_label, self.btn_next, self.btn_zoom_out, self.btn_zoom_in, self.btn_fit_width):
            top.addWidget(b)
        v.addLayout(top)

        self.view = PageView(self)
        v.addWidget(self.view, 1)

        bottom = QHBoxLayout()
        self.btn_settings = QPushButton("Export Settings…")
        self.btn_print = QPushButton("Print")
        self.btn_export = QPushButton("Export PDF")
        self.btn_close = QPushButton("Close")
        bottom.addWidget(self.btn_settings)
        bottom.addStretch(1)
        for b in (self.btn_print, self.btn_export, self.btn_close):
            bottom.addWidget(b)
        v.addLayout(bottom)

        self.btn_prev.clicked.connect(lambda: self._go(self.view.previous_page))
        self.btn_next.clicked.connect(lambda: self._go(self.view.next_page))
        self.btn_zoom_in.clicked.connect(self.view.zoom_in)
        self.btn_zoom_out.clicked.connect(self.view.zoom_out)
        self.btn_fit_width.clicked.connect(self.view.fit_width)
        self.btn_settings.clicked.connect(self._open_settings)
        self.btn_print.clicked.connect(self.print_document)
        self.btn_export.clicked.connect(self._choose_and_export)
        self.btn_close.clicked.connect(self.accept)

        self.view.set_layouts(self.layouts)
        self._update_nav()

    def _go(self, step) -> None:
        step()
        self._update_nav()

    def _update_nav(self) -> None:
        n = self.view.page_count()
        i = self.view.current_index()
        self.page_label.setText(f"Page {i + 1} of {n}" if n else "No pages")
        self.btn_prev.setEnabled(i > 0)
        self.btn_next.setEnabled(i < n - 1)

    def _open_settings(self) -> None:
        from printdesk.widgets.settings_dialog import SettingsDialog

        dlg = SettingsDialog(self.store.settings, parent=self)
        if dlg.exec() == QDialog.Accepted:
            self.store.settings = dlg.result_settings()
            self.store.save()

    def _progress(self, label: str) -> QProgressDialog:
        dlg = QProgressDialog(label, "", 0, len(self.layouts), self)
        dlg.setWindowModality(Qt.WindowModal)
        dlg.setCancelButton(None)
        dlg.setMinimumDuration(0)
        return dlg

    def _choose_and_export(self) -> None:
        start_dir = self.store.settings.last_pdf_dir or str(Path.home())
        path, _ = QFileDialog.getSaveFileName(
            self,
            "Export PDF",
            str(Path(start_dir) / self.file_name),
            "PDF (*.pdf)",
        )
        if not path:
            return
        out = self.export_to(Path(path))
        if out is not None:
            open_file(str(out))

    def export_to(self, out: Path) -> Optional[Path]:
        """Rasterized export; shows a message box and returns None when it fails."""
        progress = self._progress("Exporting pages…")

        def on_page(done: int, total: int) -> None:
            progress.setValue(done)
            QApplication.processEvents()

        try:
            self.exported = asyncio.run(export_pdf(self.layouts, out, self.store.settings.export, on_page))
        except ExportError as e:
            logger.exception("Export failed")
            QMessageBox.critical(self, "Export failed", f"Could not export the PDF.\n\nDetails: {e}")
            return None
        finally:
            progress.close()
        self.store.settings.last_pdf_dir = str(out.parent)
        self.store.save()
        return self.exported

    def print_document(self) -> None:
        printer = QPrinter(QPrinter.HighResolution)
        printer.setResolution(self.store.settings.export.dpi)
        dlg = QPrintDialog(printer, self)
        if dlg.exec() != QDialog.Accepted:
            return
        sink = QtPrintSink(printer)
        progress = self._progress("Printing pages…")

        def on_page(done: int, total: int) -> None:
            progress.setValue(done)
            QApplication.processEvents()

        try:
            asyncio.run(print_pages(self.layouts, self.store.settings.export, sink, on_page))
        except ExportError as e:
            logger.exception("Print failed")
            QMessageBox.critical(self, "Print failed", f"Could not print the document.\n\nDetails: {e}")
        finally:
            sink.finish()
            progress.close()
