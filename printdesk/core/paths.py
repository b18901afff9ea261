from __future__ import annotations

import sys
from pathlib import Path


def is_frozen() -> bool:
    return bool(getattr(sys, "frozen", False))


def base_path() -> Path:
    """Return the base path for bundled resources (fonts, sample logos) depending on runtime.

    - In PyInstaller onefile, resources are extracted to sys._MEIPASS.
    - In dev, use the project root.
    """
    if is_frozen():
        meipass = getattr(sys, "_MEIPASS", None)
        if meipass:
            return Path(meipass)
    return Path(__file__).resolve().parents[2]


def resource_path(rel: str | Path) -> Path:
    """Resolve a resource path (e.g., 'assets/logo.png') for current runtime."""
    rel = Path(rel)
    return base_path() / rel


def resolve_image(value: str | Path | None) -> Path | None:
    """Return an existing image path for an absolute/relative setting, or None."""
    if not value:
        return None
    p = Path(value)
    if p.exists():
        return p
    rp = resource_path(value)
    return rp if rp.exists() else None


def user_writable_dir() -> Path:
    """Directory suitable for user-writable files (settings, cached package allocations).

    - In PyInstaller onefile, prefer the directory containing the executable.
    - In dev, use the project root.
    """
    if is_frozen():
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[2]


def settings_path() -> Path:
    """Location for settings.json that is readable and writable."""
    return user_writable_dir() / "settings.json"


def allocations_path() -> Path:
    """Location for the per-document package allocation cache."""
    return user_writable_dir() / "package_allocations.json"


# Bundled Unicode font shared by the PDF canvas and the Qt preview
FONT_FAMILY = "DejaVu Sans"
FONT_FILES = {
    "regular": "printdesk/assets/fonts/DejaVuSans.ttf",
    "bold": "printdesk/assets/fonts/DejaVuSans-Bold.ttf",
}


def font_path(style: str) -> Path:
    """Path of the bundled font file for 'regular' or 'bold'."""
    return resource_path(FONT_FILES[style])
