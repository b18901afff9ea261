from __future__ import annotations

import logging
from typing import Dict, List

from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QSpinBox,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from printdesk.core.state import AllocationStore
from printdesk.data.models import Document, LineItem
from printdesk.pdf.packages import PackageAllocation

logger = logging.getLogger(__name__)

COL_DESCRIPTION, COL_QUANTITY, COL_PACKAGES, COL_PIECES = range(4)


class PackagesDialog(QDialog):
    """Split each item's quantity over packages before printing shipping labels.

    Every change is written to the allocation store right away and once more on close.
    """

    def __init__(self, doc: Document, store: AllocationStore, parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle(f"Packages - {doc.number}")
        self.resize(820, 480)
        self.doc = doc
        self.store = store
        self._piece_editors: Dict[str, List[QSpinBox]] = {}

        root = QVBoxLayout(self)
        hint = QLabel("Set how many packages each item ships in; adjust pieces per package if needed.")
        hint.setWordWrap(True)
        root.addWidget(hint)

        self.table = QTableWidget(len(doc.items), 4)
        self.table.setHorizontalHeaderLabels(["Description", "Qty", "Packages", "Pieces per package"])
        self.table.horizontalHeader().setSectionResizeMode(COL_DESCRIPTION, QHeaderView.Stretch)
        self.table.horizontalHeader().setSectionResizeMode(COL_PIECES, QHeaderView.Stretch)
        self.table.verticalHeader().setVisible(False)
        root.addWidget(self.table, 1)

        for row, item in enumerate(doc.items):
            self.table.setItem(row, COL_DESCRIPTION, QTableWidgetItem(item.description))
            self.table.setItem(row, COL_QUANTITY, QTableWidgetItem(str(item.quantity)))
            count = QSpinBox()
            count.setRange(1, item.quantity)
            alloc = self.store.get(doc.id, item.key, item.quantity)
            count.setValue(alloc.package_count)
            count.valueChanged.connect(lambda value, it=item, r=row: self._on_count_changed(it, r, value))
            self.table.setCellWidget(row, COL_PACKAGES, count)
            self._rebuild_pieces(item, row, alloc)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.button(QDialogButtonBox.Ok).setText("Preview Labels")
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        root.addWidget(buttons)

    def _rebuild_pieces(self, item: LineItem, row: int, alloc: PackageAllocation) -> None:
        holder = QWidget()
        lay = QHBoxLayout(holder)
        lay.setContentsMargins(2, 0, 2, 0)
        editors: List[QSpinBox] = []
        for index, pieces in enumerate(alloc.pieces):
            sp = QSpinBox()
            sp.setRange(1, item.quantity)
            sp.setValue(pieces)
            sp.valueChanged.connect(lambda value, it=item, r=row, i=index: self._on_pieces_changed(it, r, i, value))
            lay.addWidget(sp)
            editors.append(sp)
        lay.addStretch(1)
        self._piece_editors[item.key] = editors
        self.table.setCellWidget(row, COL_PIECES, holder)
        self.table.resizeRowToContents(row)

    def _on_count_changed(self, item: LineItem, row: int, value: int) -> None:
        alloc = self.store.set_package_count(self.doc.id, item.key, item.quantity, value)
        logger.debug("Item %s split into %s", item.key, alloc.pieces)
        self._rebuild_pieces(item, row, alloc)

    def _on_pieces_changed(self, item: LineItem, row: int, index: int, value: int) -> None:
        alloc = self.store.edit_pieces(self.doc.id, item.key, item.quantity, index, value)
        # Reflect the neighbour that absorbed the difference without re-entering this handler
        for sp, pieces in zip(self._piece_editors.get(item.key, []), alloc.pieces):
            sp.blockSignals(True)
            sp.setValue(pieces)
            sp.blockSignals(False)

    def allocations(self) -> Dict[str, PackageAllocation]:
        return self.store.for_document(self.doc.id)

    def done(self, result: int) -> None:
        self.store.save()
        super().done(result)
