from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from printdesk.core.paths import allocations_path
from printdesk.pdf.packages import PackageAllocation

logger = logging.getLogger(__name__)


class AllocationStore:
	"""Per-document package allocations, keyed by document id then item key.

	Loaded once on start and written back after every change. A corrupt file is
	logged and ignored (treated as empty) but not overwritten until the next edit.
	"""

	def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
		self.path = Path(path) if path is not None else allocations_path()
		self._data: Dict[str, Dict[str, PackageAllocation]] = {}

	def load(self) -> "AllocationStore":
		self._data = {}
		if not self.path.exists():
			return self
		try:
			with self.path.open("r", encoding="utf-8") as f:
				raw: Any = json.load(f)
		except (json.JSONDecodeError, OSError, UnicodeDecodeError):
			logger.warning("Package allocations file %s is unreadable; starting empty", self.path, exc_info=True)
			return self
		if not isinstance(raw, dict):
			logger.warning("Package allocations file %s does not hold an object; starting empty", self.path)
			return self
		for doc_id, items in raw.items():
			if not isinstance(items, dict):
				continue
			parsed: Dict[str, PackageAllocation] = {}
			for key, value in items.items():
				try:
					parsed[key] = PackageAllocation.from_dict(value)
				except (ValueError, TypeError, AttributeError):
					logger.warning("Dropping malformed allocation %s/%s", doc_id, key)
			self._data[str(doc_id)] = parsed
		return self

	def save(self) -> None:
		self.path.parent.mkdir(parents=True, exist_ok=True)
		payload = {
			doc_id: {key: alloc.to_dict() for key, alloc in items.items()}
			for doc_id, items in self._data.items()
		}
		tmp = self.path.with_suffix(self.path.suffix + ".tmp")
		with tmp.open("w", encoding="utf-8", newline="\n") as f:
			json.dump(payload, f, indent=2, ensure_ascii=False)
			f.write("\n")
		tmp.replace(self.path)

	def for_document(self, document_id: str) -> Dict[str, PackageAllocation]:
		return dict(self._data.get(document_id, {}))

	def get(self, document_id: str, item_key: str, quantity: int) -> PackageAllocation:
		"""Cached allocation, or one package holding everything when none is usable."""
		alloc = self._data.get(document_id, {}).get(item_key)
		if alloc is None or not alloc.fits(quantity):
			return PackageAllocation.default(quantity)
		return alloc

	def set(self, document_id: str, item_key: str, allocation: PackageAllocation) -> None:
		self._data.setdefault(document_id, {})[item_key] = allocation
		self.save()

	def set_package_count(self, document_id: str, item_key: str, quantity: int, count: int) -> PackageAllocation:
		alloc = PackageAllocation.even(quantity, count)
		self.set(document_id, item_key, alloc)
		return alloc

	def edit_pieces(self, document_id: str, item_key: str, quantity: int, index: int, value: int) -> PackageAllocation:
		alloc = self.get(document_id, item_key, quantity).with_piece_count(index, value, quantity)
		self.set(document_id, item_key, alloc)
		return alloc
