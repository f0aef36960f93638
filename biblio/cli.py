#!/usr/bin/env python3
"""
Biblio Catalog CLI — load sources, search titles, export to Excel, run the API.

USAGE:
  python -m biblio.cli sources                              # Per-source load status
  python -m biblio.cli search "quimica"                     # Title search, all faculties
  python -m biblio.cli search "anatomia" --category salud   # One faculty
  python -m biblio.cli search --json                        # Whole catalog as JSON

  python -m biblio.cli export                               # Excel report of the whole catalog
  python -m biblio.cli export --query "diseño" --output ./diseno.xlsx

  python -m biblio.cli serve                                # Start API server
  python -m biblio.cli serve --port 8000

  python -m biblio.cli --data-dir ./datos sources           # Override BIBLIO_DATA_DIR
"""
from __future__ import annotations

import argparse
import json
import os
import sys
from datetime import datetime
from pathlib import Path

from biblio.config import ALL_CATEGORIES, EXPORTS_FOLDER
from biblio.data.query import SearchState, normalize_category
from biblio.data.store import CatalogStore
from biblio.logging_setup import setup_logging


def _build_store(args) -> CatalogStore:
    data_dir = Path(args.data_dir) if getattr(args, "data_dir", None) else None
    return CatalogStore(data_dir=data_dir, base_url=getattr(args, "base_url", None)).load()


def _check_category(store: CatalogStore, category: str) -> bool:
    if store.has_category(category):
        return True
    print(f"  Unknown category: '{category}' (choose from: {', '.join([ALL_CATEGORIES] + store.categories())})")
    return False


def _print_statuses(store: CatalogStore) -> None:
    for s in store.statuses():
        if s.ok:
            delim = f", delimiter {s.delimiter!r}" if s.delimiter else ""
            print(f"   [+] {s.label} ({s.category})")
            print(f"       {s.location}  |  {s.format}{delim}  |  header row {s.header_row}  |  {s.record_count:,} records")
        else:
            print(f"   [-] {s.label} ({s.category})")
            print(f"       FAILED: {s.error}")
        for w in s.warnings:
            print(f"       WARNING: {w}")


def cmd_sources(args):
    """Load every source and report how it went."""
    print("\n" + "=" * 70)
    print("  BIBLIO CATALOG — SOURCES")
    print("=" * 70 + "\n")

    store = _build_store(args)
    _print_statuses(store)

    print(f"\n  Total: {store.record_count():,} records, {store.failed_count()} failed source(s)\n")
    return 0 if store.failed_count() == 0 else 1


def cmd_search(args):
    """Search titles and print the matches."""
    store = _build_store(args)
    if not _check_category(store, args.category):
        return 2

    result = store.run_search(args.query, args.category)

    if args.json:
        from biblio.reports.catalog_report import generate_json
        print(json.dumps(generate_json(store, args.query, args.category), ensure_ascii=False, indent=2))
        return 0

    if result.state == SearchState.UNAVAILABLE:
        print("\n  No se pudo cargar el catálogo — no sources produced any records.")
        _print_statuses(store)
        return 1
    if result.state == SearchState.NO_MATCHES:
        print(f"\n  No titles match '{args.query}'.\n")
        return 0

    labels = store.labels()
    shown = result.records[:args.limit] if args.limit else result.records
    print(f"\n  {result.total:,} result(s)\n")
    for i, rec in enumerate(shown, 1):
        print(f"{i:<5}{rec.title or '(sin título)'}")
        author = rec.get("author")
        year = rec.get("year")
        meta = "  |  ".join(p for p in (author, year, labels.get(rec.category, rec.category)) if p)
        print(f"     {meta}")
    if len(shown) < result.total:
        print(f"\n  ... {result.total - len(shown):,} more (use --limit 0 to show all)")
    print()
    return 0


def cmd_export(args):
    """Write search results (default: whole catalog) to an Excel workbook."""
    from biblio.reports.catalog_report import generate_excel

    print("\n" + "=" * 70)
    print("  BIBLIO CATALOG — EXCEL EXPORT")
    print("=" * 70)
    print(f"  Started: {datetime.now():%Y-%m-%d %H:%M:%S}")

    store = _build_store(args)
    if not _check_category(store, args.category):
        return 2

    if args.output:
        out = Path(args.output)
    else:
        out = EXPORTS_FOLDER / f"Catalogo_{args.category}_{datetime.now():%Y%m%d_%H%M%S}.xlsx"

    path = generate_excel(store, out, args.query, args.category)
    print(f"\n  {store.record_count():,} records loaded, {store.failed_count()} failed source(s)")
    print(f"  Saved: {path}")
    print("=" * 70 + "\n")
    return 0


def cmd_serve(args):
    """Start the API server."""
    import uvicorn
    print(f"\nStarting Biblio Catalog API on port {args.port}...")
    if args.reload:
        # Reloader imports the app in a child process; pass overrides via env
        if args.data_dir:
            os.environ["BIBLIO_DATA_DIR"] = str(Path(args.data_dir).resolve())
        if args.base_url:
            os.environ["BIBLIO_BASE_URL"] = args.base_url
        uvicorn.run("biblio.main:app", host="0.0.0.0", port=args.port, reload=True,
                    timeout_keep_alive=65)
        return 0

    from biblio.main import create_app
    data_dir = Path(args.data_dir) if args.data_dir else None
    store = CatalogStore(data_dir=data_dir, base_url=args.base_url)
    uvicorn.run(create_app(store), host="0.0.0.0", port=args.port, timeout_keep_alive=65)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="biblio",
        description="Biblio Catalog — library catalog browser over faculty CSV/XLSX files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--data-dir", help="Directory holding the source files (overrides BIBLIO_DATA_DIR)")
    parser.add_argument("--base-url", help="Fetch sources over HTTP from this base URL")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    sources_parser = subparsers.add_parser("sources", help="Load sources and show their status")
    sources_parser.set_defaults(func=cmd_sources)

    search_parser = subparsers.add_parser("search", help="Search titles")
    search_parser.add_argument("query", nargs="?", default="", help="Title substring (empty = everything)")
    search_parser.add_argument("--category", type=normalize_category, default=ALL_CATEGORIES, help="'all' or a faculty category")
    search_parser.add_argument("--limit", type=int, default=50, help="Max results to print (0 = all)")
    search_parser.add_argument("--json", action="store_true", help="Print JSON instead of a listing")
    search_parser.set_defaults(func=cmd_search)

    export_parser = subparsers.add_parser("export", help="Export results to Excel")
    export_parser.add_argument("--query", default="", help="Title substring (empty = everything)")
    export_parser.add_argument("--category", type=normalize_category, default=ALL_CATEGORIES, help="'all' or a faculty category")
    export_parser.add_argument("--output", help="Output .xlsx path (default: exports folder)")
    export_parser.set_defaults(func=cmd_export)

    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")), help="Port (default 8000)")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    setup_logging(level=os.environ.get("LOG_LEVEL", "WARNING"))
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
