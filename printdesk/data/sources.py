from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from printdesk.core.errors import DocumentFormatError, DocumentNotFoundError
from printdesk.data.models import Company, Document, DocumentKind

logger = logging.getLogger(__name__)


class DocumentSource(Protocol):
	"""Fetch contract for the backing store; returns a read-only Document per call."""

	def fetch(self, kind: DocumentKind, document_id: str) -> Document:
		...


def _read_json(p: Path) -> Dict[str, Any]:
	try:
		with p.open("r", encoding="utf-8") as f:
			raw = json.load(f)
	except (json.JSONDecodeError, UnicodeDecodeError) as e:
		raise DocumentFormatError(f"{p} is not valid JSON: {e}") from e
	if not isinstance(raw, dict):
		raise DocumentFormatError(f"{p} does not hold a JSON object")
	return raw


def _build(kind: DocumentKind, raw: Dict[str, Any], p: Path, company: Optional[Company] = None) -> Document:
	try:
		return Document.build(kind, raw, company=company)
	except (ValueError, TypeError, AttributeError) as e:
		raise DocumentFormatError(f"{p}: {e}") from e


class JsonDocumentSource:
	"""Reads documents exported as JSON files laid out as <root>/<kind>/<id>.json.

	An optional <root>/company.json supplies letterhead fields for documents that
	do not embed their own "company" mapping.
	"""

	def __init__(self, root: Path | str) -> None:
		self.root = Path(root)

	def _company(self) -> Optional[Company]:
		p = self.root / "company.json"
		if not p.exists():
			return None
		return Company.from_dict(_read_json(p))

	def fetch(self, kind: DocumentKind, document_id: str) -> Document:
		p = self.root / kind.value / f"{document_id}.json"
		if not p.exists():
			raise DocumentNotFoundError(f"No {kind.value} with id {document_id!r} under {self.root}")
		raw = _read_json(p)
		raw.setdefault("id", document_id)
		company = None if raw.get("company") else self._company()
		doc = _build(kind, raw, p, company)
		logger.debug("Loaded %s %s with %d items", kind.value, doc.number, len(doc.items))
		return doc


def load_document_file(path: Path | str, kind: DocumentKind | None = None) -> Document:
	"""Load a single JSON document file; kind defaults to the file's "kind" key."""
	p = Path(path)
	if not p.exists():
		raise DocumentNotFoundError(f"Document file not found: {p}")
	raw = _read_json(p)
	raw.setdefault("id", p.stem)
	try:
		resolved = kind or DocumentKind(raw.get("kind", DocumentKind.INVOICE.value))
	except ValueError as e:
		raise DocumentFormatError(f"{p}: unknown document kind {raw.get('kind')!r}") from e
	return _build(resolved, raw, p)
