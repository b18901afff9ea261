from __future__ import annotations

import json
from pathlib import Path

import pytest

pytest.importorskip("PySide6")
pytest.importorskip("pytestqt")

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QMessageBox, QSpinBox

from conftest import make_document, make_items
from printdesk.core.errors import ExportError
from printdesk.core.settings import ExportSettings, SettingsStore
from printdesk.core.state import AllocationStore
from printdesk.pdf import raster_export
from printdesk.pdf.layout import build_layouts
from printdesk.widgets.packages_dialog import COL_PACKAGES, COL_PIECES, PackagesDialog
from printdesk.widgets.preview_dialog import PdfPreviewDialog


@pytest.fixture
def store(tmp_path: Path) -> SettingsStore:
    s = SettingsStore(tmp_path / "settings.json")
    s.load()
    s.settings.export = ExportSettings(scale=1.0, quality=0.5, dpi=72)
    return s


@pytest.fixture
def dialog(qtbot, store, invoice_settings) -> PdfPreviewDialog:
    layouts = build_layouts(make_document(items=make_items(40)), invoice_settings)
    dlg = PdfPreviewDialog(layouts, store, "Invoice_INV-42.pdf", title="INV-42")
    qtbot.addWidget(dlg)
    return dlg


def test_navigation_between_pages(qtbot, dialog) -> None:
    assert dialog.page_label.text() == "Page 1 of 3"
    assert not dialog.btn_prev.isEnabled()
    qtbot.mouseClick(dialog.btn_next, Qt.LeftButton)
    qtbot.mouseClick(dialog.btn_next, Qt.LeftButton)
    assert dialog.page_label.text() == "Page 3 of 3"
    assert not dialog.btn_next.isEnabled()
    qtbot.mouseClick(dialog.btn_prev, Qt.LeftButton)
    assert dialog.view.current_index() == 1


def test_zoom_is_bounded(dialog) -> None:
    for _ in range(50):
        dialog.view.zoom_in()
    assert dialog.view.zoom() == dialog.view.ZOOM_MAX
    dialog.view.set_zoom(0.01)
    assert dialog.view.zoom() == dialog.view.ZOOM_MIN


def test_export_writes_file_and_remembers_folder(tmp_path: Path, dialog, store) -> None:
    out = tmp_path / "exports" / "invoice.pdf"
    assert dialog.export_to(out) == out
    assert out.exists()
    saved = json.loads(store.path.read_text(encoding="utf-8"))
    assert saved["last_pdf_dir"] == str(out.parent)


def test_export_failure_is_reported(tmp_path: Path, monkeypatch, dialog) -> None:
    def fail(layout, export):
        raise ExportError("Failed to render page 1: boom", page_index=0)

    shown = []
    monkeypatch.setattr(raster_export, "rasterize_layout", fail)
    monkeypatch.setattr(QMessageBox, "critical", lambda *args: shown.append(args[2]))
    out = tmp_path / "invoice.pdf"
    assert dialog.export_to(out) is None
    assert not out.exists()
    assert "boom" in shown[0]


def test_packages_dialog_saves_each_change(qtbot, tmp_path: Path) -> None:
    doc = make_document(items=make_items(2, quantity=10))
    path = tmp_path / "alloc.json"
    dlg = PackagesDialog(doc, AllocationStore(path).load())
    qtbot.addWidget(dlg)

    count = dlg.table.cellWidget(0, COL_PACKAGES)
    count.setValue(3)
    assert dlg.allocations()[doc.items[0].key].pieces == (4, 3, 3)

    editors = dlg.table.cellWidget(0, COL_PIECES).findChildren(QSpinBox)
    editors[0].setValue(5)
    assert [e.value() for e in editors] == [5, 2, 3]

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw[doc.id][doc.items[0].key] == {"packageCount": 3, "piecesPerPackage": [5, 2, 3]}


def test_settings_dialog_round_trip(qtbot) -> None:
    from printdesk.core.settings import InvoiceSettings, Settings
    from printdesk.widgets.settings_dialog import SettingsDialog

    original = Settings(
        export=ExportSettings(2.5, 0.8, 150),
        invoice=InvoiceSettings(primary_color="#1F4E79", signatory="A. Signer", foreign_footer=["a", "b", "c"]),
        last_pdf_dir="/tmp/out",
        company={"legal_name": "Metal Works d.o.o.", "city": "Sarajevo"},
    )
    dlg = SettingsDialog(original)
    qtbot.addWidget(dlg)
    assert dlg.result_settings() == original

    dlg.sp_scale.setValue(9.0)
    dlg.cb_dpi.setCurrentIndex(dlg.cb_dpi.findData(300))
    result = dlg.result_settings()
    assert (result.export.scale, result.export.dpi) == (5.0, 300)


def test_dark_theme_layers_page_styles(qapp) -> None:
    from printdesk.styles.themes import apply_theme

    apply_theme(qapp, True)
    assert "QScrollArea#PageView" in qapp.styleSheet()
    apply_theme(qapp, False)
    assert "#8a8f98" in qapp.styleSheet()
