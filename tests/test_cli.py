from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import pytest
from pypdf import PdfReader

from conftest import make_items
from printdesk.cli import build_parser, export_settings_from, main
from printdesk.core.settings import Settings


def _document(**extra: Any) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "kind": "invoice",
        "number": "INV-9",
        "issue_date": "2024-03-01",
        "currency": "EUR",
        "counterparty": {"name": "Acme GmbH", "country": "Germany"},
        "company": {"legal_name": "Metal Works d.o.o."},
        "items": make_items(3, quantity=4),
    }
    data.update(extra)
    return data


@pytest.fixture
def doc_file(tmp_path: Path) -> Path:
    path = tmp_path / "inv-9.json"
    path.write_text(json.dumps(_document()), encoding="utf-8")
    return path


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    return tmp_path / "settings.json"


def test_archive_writes_vector_pdf(tmp_path: Path, doc_file: Path, settings_file: Path, capsys) -> None:
    out = tmp_path / "archive.pdf"
    assert main(["archive", str(doc_file), "-o", str(out), "--settings", str(settings_file)]) == 0
    assert capsys.readouterr().out.strip() == str(out)
    text = PdfReader(str(out)).pages[0].extract_text() or ""
    assert "INVOICE" in text
    assert "Acme GmbH" in text


def test_export_into_directory_uses_default_name(tmp_path: Path, doc_file: Path, settings_file: Path) -> None:
    out_dir = tmp_path / "exports"
    out_dir.mkdir()
    argv = ["export", str(doc_file), "-o", str(out_dir), "--settings", str(settings_file), "--scale", "1", "--quality", "0.5"]
    assert main(argv) == 0
    (written,) = out_dir.glob("Invoice_INV-9_*.pdf")
    reader = PdfReader(str(written))
    assert len(reader.pages) == 1
    assert len(reader.pages[0].images) == 1


def test_document_from_root_and_id(tmp_path: Path, settings_file: Path) -> None:
    root = tmp_path / "docs"
    (root / "order_confirmation").mkdir(parents=True)
    (root / "order_confirmation" / "7.json").write_text(json.dumps(_document(number="OC-7")), encoding="utf-8")
    out = tmp_path / "oc.pdf"
    argv = ["archive", "--root", str(root), "--id", "7", "--kind", "order_confirmation", "-o", str(out), "--settings", str(settings_file)]
    assert main(argv) == 0
    assert "ORDER CONFIRMATION" in (PdfReader(str(out)).pages[0].extract_text() or "")


def test_labels_use_cached_allocations(tmp_path: Path, doc_file: Path, settings_file: Path) -> None:
    allocations = tmp_path / "alloc.json"
    allocations.write_text(
        json.dumps({"inv-9": {"1-Bracket 1": {"packageCount": 2, "piecesPerPackage": [2, 2]}}}),
        encoding="utf-8",
    )
    out = tmp_path / "labels.pdf"
    argv = ["labels", str(doc_file), "--allocations", str(allocations), "--vector", "-o", str(out), "--settings", str(settings_file)]
    assert main(argv) == 0
    page = PdfReader(str(out)).pages[0]
    assert float(page.mediabox.width) > float(page.mediabox.height)
    text = page.extract_text() or ""
    assert "pkg 1/2" in text
    assert "pkg 2/2" in text


def test_missing_document_returns_error(tmp_path: Path, settings_file: Path) -> None:
    assert main(["archive", str(tmp_path / "nope.json"), "--settings", str(settings_file)]) == 1
    assert main(["archive", "--settings", str(settings_file)]) == 1


def test_malformed_document_returns_error(tmp_path: Path, settings_file: Path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps(_document(kind="receipt")), encoding="utf-8")
    assert main(["archive", str(bad), "--settings", str(settings_file)]) == 1


def test_quality_overrides_are_clamped() -> None:
    args = build_parser().parse_args(["export", "x.json", "--scale", "9", "--dpi", "150"])
    export = export_settings_from(args, Settings())
    assert (export.scale, export.quality, export.dpi) == (5.0, 0.98, 150)
    settings = Settings()
    args = build_parser().parse_args(["export", "x.json"])
    assert export_settings_from(args, settings) is settings.export
