from __future__ import annotations


class PrintDeskError(Exception):
	"""Base class for errors raised by the document engine."""


class DocumentNotFoundError(PrintDeskError):
	"""Raised when a document source has no document for the requested id."""


class ExportError(PrintDeskError):
	"""Raised when a page cannot be rasterized or the output cannot be assembled.

	The message is meant to be shown to the user as-is.
	"""

	def __init__(self, message: str, page_index: int | None = None) -> None:
		super().__init__(message)
		self.page_index = page_index


class DocumentFormatError(PrintDeskError):
	"""Raised when a document file cannot be parsed into a Document."""


class FontError(PrintDeskError):
	"""Raised when the bundled page font is missing or unreadable."""
