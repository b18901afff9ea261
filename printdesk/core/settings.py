from __future__ import annotations

from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json
import logging

from printdesk.core.paths import settings_path

logger = logging.getLogger(__name__)

# Path to the settings.json (runtime-aware)
SETTINGS_PATH = settings_path()

SCALE_MIN, SCALE_MAX = 1.0, 5.0
QUALITY_MIN, QUALITY_MAX = 0.5, 1.0
DPI_CHOICES = (72, 150, 300)


@dataclass
class ExportSettings:
	"""Rasterization trade-off used by every PDF export and direct print."""

	# Higher scale = sharper bitmap, slower export (1-5, 0.5 steps)
	scale: float = 4.0
	# JPEG compression quality (0.5-1.0)
	quality: float = 0.98
	dpi: int = 300

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "ExportSettings":
		defaults = cls()
		try:
			scale = float(data.get("scale", defaults.scale))
			quality = float(data.get("quality", defaults.quality))
			dpi = int(data.get("dpi", defaults.dpi))
		except (TypeError, ValueError):
			logger.warning("Malformed export settings %r; using defaults", data)
			return defaults
		# Snap scale to the 0.5 grid offered by the settings dialog
		scale = round(min(SCALE_MAX, max(SCALE_MIN, scale)) * 2) / 2
		quality = min(QUALITY_MAX, max(QUALITY_MIN, quality))
		if dpi not in DPI_CHOICES:
			dpi = defaults.dpi
		return cls(scale=scale, quality=quality, dpi=dpi)


@dataclass
class InvoiceSettings:
	"""Document chrome that is configured once and shared by all documents."""

	primary_color: str = "#000000"
	signatory: str = ""
	# Shown above the footer for foreign counterparties; {invoice_number} is substituted
	foreign_note: str = ""
	domestic_footer: List[str] = field(default_factory=lambda: ["", "", ""])
	foreign_footer: List[str] = field(default_factory=lambda: ["", "", ""])

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "InvoiceSettings":
		defaults = asdict(cls())
		merged: Dict[str, Any] = {**defaults, **{k: v for k, v in data.items() if k in defaults}}
		for key in ("domestic_footer", "foreign_footer"):
			cols = merged.get(key)
			if not isinstance(cols, list):
				cols = []
			cols = [str(c or "") for c in cols[:3]]
			merged[key] = cols + [""] * (3 - len(cols))
		for key in ("primary_color", "signatory", "foreign_note"):
			merged[key] = str(merged.get(key) or defaults[key])
		return cls(**merged)


@dataclass
class Settings:
	export: ExportSettings = field(default_factory=ExportSettings)
	invoice: InvoiceSettings = field(default_factory=InvoiceSettings)
	# Remember last used folder for the "Export PDF" dialog
	last_pdf_dir: Optional[str] = None
	# Optional root directory for batch exports; if None, defaults to Documents/PrintDesk
	archive_root: Optional[str] = None
	dark_mode: bool = False
	# Letterhead used when a document does not carry its own company fields
	company: Dict[str, str] = field(default_factory=dict)

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "Settings":
		# Merge provided values over defaults, ignore unknown keys
		export_raw = data.get("export")
		invoice_raw = data.get("invoice")
		last_dir = data.get("last_pdf_dir")
		archive_root = data.get("archive_root")
		company_raw = data.get("company")
		return cls(
			export=ExportSettings.from_dict(export_raw if isinstance(export_raw, dict) else {}),
			invoice=InvoiceSettings.from_dict(invoice_raw if isinstance(invoice_raw, dict) else {}),
			last_pdf_dir=str(last_dir) if last_dir else None,
			archive_root=str(archive_root) if archive_root else None,
			dark_mode=bool(data.get("dark_mode", False)),
			company={str(k): str(v) for k, v in company_raw.items() if v is not None} if isinstance(company_raw, dict) else {},
		)

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)


def _coerce_path(path: Optional[Union[str, Path]]) -> Path:
	return Path(path) if path is not None else SETTINGS_PATH


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
	"""
	Load settings from JSON (UTF-8). If the file is missing, write defaults and return them.
	"""
	p = _coerce_path(path)
	if not p.exists():
		settings = Settings()
		save_settings(settings, p)
		return settings

	try:
		with p.open("r", encoding="utf-8") as f:
			raw: Any = json.load(f)
	except (json.JSONDecodeError, OSError, UnicodeDecodeError):
		# If unreadable/corrupt, fall back to defaults (do not overwrite automatically)
		logger.warning("Settings file %s is unreadable; using defaults", p, exc_info=True)
		return Settings()

	if not isinstance(raw, dict):
		logger.warning("Settings file %s does not hold an object; using defaults", p)
		return Settings()
	return Settings.from_dict(raw)


def save_settings(settings: Settings, path: Optional[Union[str, Path]] = None) -> None:
	"""Save settings to JSON (UTF-8), creating parent dirs if needed."""
	p = _coerce_path(path)
	p.parent.mkdir(parents=True, exist_ok=True)
	# Pretty JSON, keep Unicode
	tmp = p.with_suffix(p.suffix + ".tmp")
	with tmp.open("w", encoding="utf-8", newline="\n") as f:
		json.dump(settings.to_dict(), f, indent=2, ensure_ascii=False)
		f.write("\n")
	tmp.replace(p)


class SettingsStore:
	"""Injected holder for the settings file: load on start, save on every change."""

	def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
		self.path = _coerce_path(path)
		self.settings = Settings()

	def load(self) -> Settings:
		self.settings = load_settings(self.path)
		return self.settings

	def update_export(self, export: ExportSettings) -> None:
		self.settings.export = ExportSettings.from_dict(asdict(export))
		save_settings(self.settings, self.path)

	def save(self) -> None:
		save_settings(self.settings, self.path)
