from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from printdesk.core.errors import PrintDeskError
from printdesk.core.settings import ExportSettings, Settings, load_settings
from printdesk.core.state import AllocationStore
from printdesk.data.models import Company, Document, DocumentKind
from printdesk.data.sources import JsonDocumentSource, load_document_file
from printdesk.pdf.labels import build_document_labels
from printdesk.pdf.layout import PageLayout, build_layouts
from printdesk.pdf.pdf_draw import build_vector_pdf
from printdesk.pdf.raster_export import export_pdf_sync, output_filename

logger = logging.getLogger(__name__)


def _add_source_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("document", nargs="?", default=None, help="Document JSON file.")
    src = p.add_argument_group("Document source")
    src.add_argument("--root", dest="root", default=None, help="Directory laid out as <root>/<kind>/<id>.json.")
    src.add_argument("--id", dest="document_id", default=None, help="Document id under --root.")
    src.add_argument(
        "--kind",
        dest="kind",
        choices=[k.value for k in DocumentKind],
        default=None,
        help="Document kind (defaults to the file's \"kind\" key, else invoice).",
    )
    out = p.add_argument_group("Output")
    out.add_argument("-o", "--output", dest="output", default=None, help="Output PDF path or directory.")
    out.add_argument("--settings", dest="settings_path", default=None, help="settings.json to use.")


def _add_raster_args(p: argparse.ArgumentParser) -> None:
    q = p.add_argument_group("Quality")
    q.add_argument("--scale", type=float, default=None, help="Rasterization scale (1-5, 0.5 steps).")
    q.add_argument("--quality", type=float, default=None, help="JPEG quality (0.5-1.0).")
    q.add_argument("--dpi", type=int, default=None, help="Resolution tag: 72, 150 or 300.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="printdesk", description="Paginate business documents and export them as PDF.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_export = sub.add_parser("export", help="Rasterized PDF of an invoice or order confirmation.")
    _add_source_args(p_export)
    _add_raster_args(p_export)

    p_archive = sub.add_parser("archive", help="Vector PDF of an invoice or order confirmation.")
    _add_source_args(p_archive)

    p_labels = sub.add_parser("labels", help="Shipping label sheets for an invoice.")
    _add_source_args(p_labels)
    _add_raster_args(p_labels)
    p_labels.add_argument("--allocations", dest="allocations_path", default=None, help="package_allocations.json to use.")
    p_labels.add_argument("--vector", action="store_true", help="Write vector pages instead of rasterizing.")
    return parser


def load_document(args: argparse.Namespace) -> Document:
    kind = DocumentKind(args.kind) if args.kind else None
    if args.document:
        return load_document_file(args.document, kind)
    if args.root and args.document_id:
        return JsonDocumentSource(args.root).fetch(kind or DocumentKind.INVOICE, args.document_id)
    raise PrintDeskError("Pass a document file, or --root together with --id.")


def export_settings_from(args: argparse.Namespace, settings: Settings) -> ExportSettings:
    overrides = {k: getattr(args, k) for k in ("scale", "quality", "dpi") if getattr(args, k, None) is not None}
    if not overrides:
        return settings.export
    return ExportSettings.from_dict({**vars(settings.export), **overrides})


def resolve_output(args: argparse.Namespace, settings: Settings, file_name: str) -> Path:
    if args.output:
        out = Path(args.output)
        return out / file_name if out.is_dir() else out
    base = Path(settings.archive_root) if settings.archive_root else Path.cwd()
    return base / file_name


def run(args: argparse.Namespace) -> Path:
    settings = load_settings(args.settings_path)
    doc = load_document(args)
    company = Company.from_dict(settings.company) if settings.company else None

    if args.command == "labels":
        store = AllocationStore(args.allocations_path).load()
        layouts: List[PageLayout] = build_document_labels(doc, store.for_document(doc.id))
        out = resolve_output(args, settings, output_filename(doc.kind, doc.number, labels=True))
        if args.vector:
            return build_vector_pdf(out, layouts, title=f"Labels {doc.number}")
        return export_pdf_sync(layouts, out, export_settings_from(args, settings), _print_progress)

    layouts = build_layouts(doc, settings.invoice, company)
    out = resolve_output(args, settings, output_filename(doc.kind, doc.number))
    if args.command == "archive":
        return build_vector_pdf(out, layouts, title=f"{doc.kind.value} {doc.number}")
    return export_pdf_sync(layouts, out, export_settings_from(args, settings), _print_progress)


def _print_progress(done: int, total: int) -> None:
    print(f"\rPage {done}/{total}", end="\n" if done == total else "", file=sys.stderr, flush=True)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        out = run(args)
    except PrintDeskError as e:
        logger.error("%s", e)
        return 1
    print(out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
