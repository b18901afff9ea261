from __future__ import annotations

# Allow running this file directly (python printdesk/main.py) by ensuring the project root is on sys.path
import os
import sys
if __package__ in (None, ""):
    sys.path.append(os.path.dirname(os.path.dirname(__file__)))

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from PySide6.QtWidgets import QApplication, QDialog, QFileDialog, QMessageBox

from printdesk.core.errors import PrintDeskError
from printdesk.core.settings import SettingsStore
from printdesk.core.state import AllocationStore
from printdesk.data.models import Company, Document, DocumentKind
from printdesk.data.sources import load_document_file
from printdesk.pdf.labels import build_document_labels
from printdesk.pdf.layout import PageLayout, build_layouts
from printdesk.pdf.raster_export import output_filename
from printdesk.styles.themes import apply_theme
from printdesk.widgets.packages_dialog import PackagesDialog
from printdesk.widgets.preview_dialog import PdfPreviewDialog

logger = logging.getLogger(__name__)


def _pick_document(parent=None) -> Optional[Path]:
    path, _ = QFileDialog.getOpenFileName(
        parent,
        "Open Document",
        str(Path.home()),
        "Documents (*.json);;All Files (*.*)",
    )
    return Path(path) if path else None


def _label_layouts(doc: Document, store: AllocationStore) -> Optional[List[PageLayout]]:
    dlg = PackagesDialog(doc, store)
    if dlg.exec() != QDialog.Accepted:
        return None
    return build_document_labels(doc, dlg.allocations())


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="printdesk-gui", description="Preview, export and print a document.")
    parser.add_argument("document", nargs="?", default=None, help="Document JSON file.")
    parser.add_argument("--kind", choices=[k.value for k in DocumentKind], default=None)
    parser.add_argument("--labels", action="store_true", help="Open the package dialog and preview shipping labels.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = QApplication(sys.argv[:1])
    store = SettingsStore()
    settings = store.load()
    apply_theme(app, settings.dark_mode)

    path = Path(args.document) if args.document else _pick_document()
    if path is None:
        return 0
    try:
        doc = load_document_file(path, DocumentKind(args.kind) if args.kind else None)
    except PrintDeskError as e:
        logger.exception("Could not open %s", path)
        QMessageBox.critical(None, "Open failed", f"Could not open the document.\n\nDetails: {e}")
        return 1

    if args.labels:
        layouts = _label_layouts(doc, AllocationStore().load())
        if layouts is None:
            return 0
        file_name = output_filename(doc.kind, doc.number, labels=True)
        title = f"Labels - {doc.number}"
    else:
        company = Company.from_dict(settings.company) if settings.company else None
        layouts = build_layouts(doc, settings.invoice, company)
        file_name = output_filename(doc.kind, doc.number)
        title = f"{doc.number} - {doc.counterparty.name}".strip(" -")

    dlg = PdfPreviewDialog(layouts, store, file_name, title=title)
    dlg.exec()
    return 0


if __name__ == "__main__":
    sys.exit(main())
