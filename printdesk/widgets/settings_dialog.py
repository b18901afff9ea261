from __future__ import annotations

from pathlib import Path
from typing import List

from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QDoubleSpinBox,
    QFileDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLineEdit,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
)

from printdesk.core.settings import (
    DPI_CHOICES,
    QUALITY_MAX,
    QUALITY_MIN,
    SCALE_MAX,
    SCALE_MIN,
    SETTINGS_PATH,
    ExportSettings,
    InvoiceSettings,
    Settings,
    load_settings,
    save_settings,
)

COMPANY_FIELDS = (
    ("legal_name", "Legal Name"),
    ("address", "Address"),
    ("postal_code", "Postal Code"),
    ("city", "City"),
    ("country", "Country"),
)


class SettingsDialog(QDialog):
    """Dialog to edit export quality, letterhead and document chrome."""

    def __init__(self, settings: Settings, parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self._orig = settings

        root = QVBoxLayout(self)

        # Export quality
        export_box = QGroupBox("PDF Export")
        export_form = QFormLayout(export_box)
        self.sp_scale = QDoubleSpinBox()
        self.sp_scale.setRange(SCALE_MIN, SCALE_MAX)
        self.sp_scale.setSingleStep(0.5)
        self.sp_scale.setDecimals(1)
        self.sp_scale.setToolTip("Higher scale gives sharper pages and slower exports")
        self.sp_quality = QDoubleSpinBox()
        self.sp_quality.setRange(QUALITY_MIN, QUALITY_MAX)
        self.sp_quality.setSingleStep(0.01)
        self.sp_quality.setDecimals(2)
        self.cb_dpi = QComboBox()
        for dpi in DPI_CHOICES:
            self.cb_dpi.addItem(f"{dpi} DPI", dpi)
        export_form.addRow("Scale", self.sp_scale)
        export_form.addRow("JPEG Quality", self.sp_quality)
        export_form.addRow("Resolution", self.cb_dpi)
        root.addWidget(export_box)

        # Letterhead
        company_box = QGroupBox("Letterhead")
        company_form = QFormLayout(company_box)
        self.ed_company = {key: QLineEdit() for key, _ in COMPANY_FIELDS}
        for key, label in COMPANY_FIELDS:
            company_form.addRow(label, self.ed_company[key])
        self.ed_logo = QLineEdit()
        btn_browse = QPushButton("Browse…")
        btn_browse.clicked.connect(self._browse_logo)
        logo_row = QHBoxLayout()
        logo_row.addWidget(self.ed_logo)
        logo_row.addWidget(btn_browse)
        company_form.addRow("Logo", logo_row)
        root.addWidget(company_box)

        # Document chrome
        doc_box = QGroupBox("Documents")
        doc_form = QFormLayout(doc_box)
        self.ed_color = QLineEdit()
        self.ed_color.setPlaceholderText("#000000")
        self.ed_signatory = QLineEdit()
        self.ed_foreign_note = QPlainTextEdit()
        self.ed_foreign_note.setPlaceholderText("Use {invoice_number} to insert the invoice number")
        self.ed_foreign_note.setFixedHeight(60)
        self.ed_domestic_footer = [QPlainTextEdit() for _ in range(3)]
        self.ed_foreign_footer = [QPlainTextEdit() for _ in range(3)]
        doc_form.addRow("Primary Colour", self.ed_color)
        doc_form.addRow("Signatory", self.ed_signatory)
        doc_form.addRow("Foreign Note", self.ed_foreign_note)
        doc_form.addRow("Domestic Footer", self._footer_row(self.ed_domestic_footer))
        doc_form.addRow("Foreign Footer", self._footer_row(self.ed_foreign_footer))
        root.addWidget(doc_box)

        # Export / Import row (for settings.json)
        io_row = QHBoxLayout()
        self.btn_export = QPushButton("Export Settings")
        self.btn_import = QPushButton("Import Settings")
        self.btn_reset = QPushButton("Reset to Defaults")
        self.btn_export.clicked.connect(self._export_settings)
        self.btn_import.clicked.connect(self._import_settings)
        self.btn_reset.clicked.connect(self._reset_defaults)
        io_row.addWidget(self.btn_reset)
        io_row.addStretch(1)
        io_row.addWidget(self.btn_export)
        io_row.addWidget(self.btn_import)
        root.addLayout(io_row)

        buttons = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        root.addWidget(buttons)

        self._populate(settings)

    @staticmethod
    def _footer_row(editors: List[QPlainTextEdit]) -> QHBoxLayout:
        row = QHBoxLayout()
        for ed in editors:
            ed.setFixedHeight(54)
            row.addWidget(ed)
        return row

    def _populate(self, s: Settings) -> None:
        self.sp_scale.setValue(s.export.scale)
        self.sp_quality.setValue(s.export.quality)
        idx = self.cb_dpi.findData(s.export.dpi)
        self.cb_dpi.setCurrentIndex(idx if idx >= 0 else self.cb_dpi.count() - 1)
        for key, _ in COMPANY_FIELDS:
            self.ed_company[key].setText(s.company.get(key, ""))
        self.ed_logo.setText(s.company.get("logo_path", ""))
        self.ed_color.setText(s.invoice.primary_color)
        self.ed_signatory.setText(s.invoice.signatory)
        self.ed_foreign_note.setPlainText(s.invoice.foreign_note)
        for ed, text in zip(self.ed_domestic_footer, s.invoice.domestic_footer):
            ed.setPlainText(text)
        for ed, text in zip(self.ed_foreign_footer, s.invoice.foreign_footer):
            ed.setPlainText(text)

    def _browse_logo(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self,
            "Select Logo Image",
            str(Path.home()),
            "Images (*.png *.jpg *.jpeg *.bmp *.gif);;All Files (*.*)",
        )
        if path:
            self.ed_logo.setText(path)

    def _export_settings(self) -> None:
        path, _ = QFileDialog.getSaveFileName(
            self,
            "Export Settings",
            str(SETTINGS_PATH),
            "JSON (*.json);;All Files (*.*)",
        )
        if not path:
            return
        try:
            save_settings(self.result_settings(), path)
            QMessageBox.information(self, "Export Settings", "Settings exported successfully.")
        except OSError as e:
            QMessageBox.warning(self, "Export Failed", f"Could not export settings:\n{e}")

    def _import_settings(self) -> None:
        # Load a JSON file and populate the fields; user can then Save to persist
        path, _ = QFileDialog.getOpenFileName(
            self,
            "Import Settings",
            str(Path.home()),
            "JSON (*.json);;All Files (*.*)",
        )
        if not path:
            return
        try:
            self._populate(load_settings(path))
            QMessageBox.information(self, "Import Settings", "Settings loaded. Click Save to apply.")
        except OSError as e:
            QMessageBox.warning(self, "Import Failed", f"Could not import settings:\n{e}")

    def result_export(self) -> ExportSettings:
        return ExportSettings.from_dict(
            {"scale": self.sp_scale.value(), "quality": self.sp_quality.value(), "dpi": self.cb_dpi.currentData()}
        )

    def result_settings(self) -> Settings:
        """Return a Settings object based on current inputs."""
        company = {key: self.ed_company[key].text().strip() for key, _ in COMPANY_FIELDS}
        logo = self.ed_logo.text().strip()
        if logo:
            company["logo_path"] = logo
        invoice = InvoiceSettings.from_dict(
            {
                "primary_color": self.ed_color.text().strip() or self._orig.invoice.primary_color,
                "signatory": self.ed_signatory.text().strip(),
                "foreign_note": self.ed_foreign_note.toPlainText().strip(),
                "domestic_footer": [ed.toPlainText() for ed in self.ed_domestic_footer],
                "foreign_footer": [ed.toPlainText() for ed in self.ed_foreign_footer],
            }
        )
        return Settings(
            export=self.result_export(),
            invoice=invoice,
            last_pdf_dir=self._orig.last_pdf_dir,
            archive_root=self._orig.archive_root,
            dark_mode=self._orig.dark_mode,
            company={k: v for k, v in company.items() if v},
        )

    def _reset_defaults(self) -> None:
        """Reset UI fields to default Settings (does not auto-save)."""
        self._populate(Settings())
