"""
Catalog Report — search results plus per-source load status, as JSON or Excel.
"""
from __future__ import annotations

from datetime import datetime
from pathlib import Path

from biblio.config import ALL_CATEGORIES
from biblio.data.query import SearchState
from biblio.data.store import CatalogStore
from biblio.data.schemas import CanonicalField, Record
from biblio.excel.writer import ExcelWriter


FIELD_LABELS = {
    CanonicalField.TITLE.value: "Título",
    CanonicalField.AUTHOR.value: "Autor",
    CanonicalField.PUBLISHER.value: "Editorial",
    CanonicalField.EDITION.value: "Edición",
    CanonicalField.YEAR.value: "Año",
    CanonicalField.ISBN.value: "ISBN",
    CanonicalField.PROGRAM.value: "Titulación",
    CanonicalField.SUBJECT.value: "Materias/Temáticas",
    CanonicalField.SHELF_LOCATION.value: "Signatura",
    CanonicalField.SUMMARY.value: "Resumen",
}

STATUS_COLS = [
    ("label", "text", "Fuente"),
    ("state", "text", "Estado"),
    ("format", "text", "Formato"),
    ("location", "text", "Ubicación"),
    ("record_count", "number", "Registros"),
    ("notes", "wrap", "Observaciones"),
]


def record_columns(records: list[Record]) -> list[tuple[str, str, str]]:
    """Canonical fields first (in fixed order), then any other keys seen."""
    present: list[str] = []
    for r in records:
        for key in r.fields:
            if key not in present:
                present.append(key)
    ordered = [k for k in FIELD_LABELS if k in present]
    ordered += [k for k in present if k not in FIELD_LABELS]
    return [
        (k, "wrap" if k == CanonicalField.SUMMARY.value else "text", FIELD_LABELS.get(k, k))
        for k in ordered
    ]


def generate_json(store: CatalogStore, query: str = "", category: str = ALL_CATEGORIES) -> dict:
    result = store.run_search(query, category)
    catalog = store.catalog
    return {
        "query": result.query,
        "category": result.category,
        "state": result.state.value,
        "total": result.total,
        "loaded_at": catalog.loaded_at.isoformat() if catalog.loaded_at else None,
        "sources": [s.to_dict() for s in catalog.statuses],
        "records": [r.to_dict() for r in result.records],
    }


def generate_excel(
    store: CatalogStore,
    output_path: str | Path,
    query: str = "",
    category: str = ALL_CATEGORIES,
) -> Path:
    result = store.run_search(query, category)
    statuses = store.statuses()
    labels = store.labels()
    ew = ExcelWriter()

    # Summary
    ws = ew.add_sheet("Resumen")
    scope = labels.get(result.category, "Todas las facultades")
    query_label = f"“{result.query}”" if result.query else "todos los títulos"
    row = ew.write_title(ws, "CATÁLOGO DE BIBLIOTECA",
                         f"{scope}  |  {query_label}  |  Generado {datetime.now():%d/%m/%Y}")

    row = ew.write_section(ws, row, "FUENTES")
    row = ew.write_kpi_row(ws, row, [
        (s.record_count if s.ok else "ERROR", s.label.upper(), not s.ok)
        for s in statuses
    ] + [(result.total, "RESULTADOS", False)])

    status_rows = [
        {
            "label": s.label,
            "state": "Cargada" if s.ok else "No disponible",
            "format": s.format or "",
            "location": s.location or "",
            "record_count": s.record_count,
            "notes": "; ".join(([s.error] if s.error else []) + s.warnings),
        }
        for s in statuses
    ]
    row = ew.write_section(ws, row, "ESTADO DE CARGA")
    ew.write_table(ws, row, STATUS_COLS, status_rows,
                   highlight_fn=lambda _, r: "failed" if r["state"] != "Cargada" else None,
                   freeze=False)

    # One sheet per category in the result
    by_category: dict[str, list[Record]] = {}
    for r in result.records:
        by_category.setdefault(r.category, []).append(r)

    for cat, records in by_category.items():
        ws_d = ew.add_sheet(labels.get(cat, cat))
        ew.write_table(ws_d, 1, record_columns(records), [r.fields for r in records])

    if not by_category:
        ws_d = ew.add_sheet("Sin resultados")
        ws_d.cell(row=1, column=1).value = (
            "No se pudo cargar el catálogo." if result.state == SearchState.UNAVAILABLE
            else "Ningún título coincide con la búsqueda."
        )

    return ew.save(output_path)
