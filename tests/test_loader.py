import asyncio
import zipfile

import pytest
from openpyxl import Workbook

from biblio.data.loader import (
    build_source, decode_text, load_catalog, make_reader, read_spreadsheet, resolve_source,
)
from biblio.data.query import search
from biblio.data.schemas import FetchedSource, Source, SourceUnavailable

from conftest import SALUD_CSV, TECNOLOGIAS_CSV


def _load(sources, data_dir, **kwargs):
    return asyncio.run(load_catalog(sources, make_reader(data_dir=data_dir, base_url=""), **kwargs))


# ---------------------------------------------------------------------------
# Resolution & decoding
# ---------------------------------------------------------------------------

def test_resolve_prefers_delimited_text(tmp_path):
    (tmp_path / "salud.xlsx").write_bytes(b"")
    (tmp_path / "salud.txt").write_text("Título\nA\n", encoding="utf-8")
    (tmp_path / "salud.csv").write_text("Título\nA\n", encoding="utf-8")
    assert resolve_source(Source("salud", "salud"), tmp_path).name == "salud.csv"


def test_resolve_raises_when_nothing_found(tmp_path):
    with pytest.raises(SourceUnavailable) as exc:
        resolve_source(Source("salud", "salud"), tmp_path)
    assert exc.value.category == "salud"
    assert "salud.csv" in exc.value.reason


def test_decode_text_strips_bom_and_flags_bad_bytes():
    text, warnings = decode_text("\ufeffTítulo\n".encode("utf-8"))
    assert text == "Título\n"
    assert warnings == []

    text, warnings = decode_text("Título\nCafé\n".encode("latin-1"))
    assert "\ufffd" in text
    assert len(warnings) == 1 and warnings[0].startswith("encoding")


def test_read_spreadsheet(tmp_path):
    wb = Workbook()
    ws = wb.active
    ws.append(["Catálogo 2024"])
    ws.append(["Título", "Autor", "Año"])
    ws.append(["Libro", "Autora", 2020])
    path = tmp_path / "libros.xlsx"
    wb.save(path)

    grid = read_spreadsheet(path.read_bytes())
    assert grid[0][0] == "Catálogo 2024"
    assert grid[1] == ["Título", "Autor", "Año"]
    assert grid[2][:2] == ["Libro", "Autora"]
    assert grid[2][2] == "2020"


# ---------------------------------------------------------------------------
# Per-source pipeline
# ---------------------------------------------------------------------------

def test_build_source_text():
    fetched = FetchedSource(location="mem", format="csv",
                            text="Catálogo 2024\nTítulo;Autor\nA;B\n;\nC;D\n")
    records, status = build_source(Source("salud", "salud", "Salud"), fetched)
    assert status.ok
    assert status.delimiter == ";"
    assert status.header_row == 1
    assert status.columns == ["title", "author"]
    assert status.record_count == 2
    assert [r.title for r in records] == ["A", "C"]
    assert status.warnings == []


def test_build_source_warns_without_title_column():
    fetched = FetchedSource(location="mem", format="csv", text="Nombre,Creador\nA,B\n")
    records, status = build_source(Source("x", "x"), fetched)
    assert status.ok
    assert records == []
    assert any("no title column" in w for w in status.warnings)


def test_build_source_empty_text():
    records, status = build_source(Source("x", "x"), FetchedSource(location="mem", format="csv", text=""))
    assert records == []
    assert status.ok and status.record_count == 0
    assert "source is empty" in status.warnings


def test_build_source_grid_skips_delimiter_detection():
    grid = [["Título", "Autor"], ["A", "B"]]
    records, status = build_source(Source("x", "x"), FetchedSource(location="mem", format="xlsx", grid=grid))
    assert status.delimiter is None
    assert records[0].fields == {"title": "A", "author": "B"}


# ---------------------------------------------------------------------------
# Catalog assembly
# ---------------------------------------------------------------------------

def test_end_to_end_two_sources(data_dir, sources):
    catalog = _load(sources, data_dir)

    assert [s.ok for s in catalog.statuses] == [True, True]
    assert [s.delimiter for s in catalog.statuses] == [";", ","]
    assert catalog.counts() == {"salud": 2, "tecnologias": 1}

    results = search(catalog, "", "all")
    assert len(results) == 3
    assert [r.title for r in results] == [
        "Anatomía humana", "Diseño de videojuegos", "Introducción a la Química",
    ]
    assert results[0].get("author") == "Gómez; Luis"
    assert results[1].get("year") == "2020"
    assert results[1].category == "tecnologias"


def test_missing_source_is_isolated(tmp_path, sources):
    (tmp_path / "salud.csv").write_text("Título;Autor\nA;B\nC;D\n", encoding="utf-8")
    catalog = _load(sources, tmp_path)

    salud, tecno = catalog.statuses
    assert salud.ok and salud.record_count == 2
    assert not tecno.ok
    assert "no file found" in tecno.error
    assert tecno.record_count == 0
    assert [r.category for r in search(catalog, "", "all")] == ["salud", "salud"]
    assert [s.category for s in catalog.failed()] == ["tecnologias"]


def test_spreadsheet_source(tmp_path):
    wb = Workbook()
    ws = wb.active
    ws.append(["Biblioteca - Nuevas Tecnologías"])
    ws.append(["Título", "Autor/a", "Signatura Topográfica"])
    ws.append(["Redes neuronales", "Haykin", "004.8 HAY"])
    wb.save(tmp_path / "tecnologias.xlsx")

    catalog = _load([Source("tecnologias", "tecnologias")], tmp_path)
    (status,) = catalog.statuses
    assert status.ok and status.format == "xlsx"
    assert status.header_row == 1
    (record,) = catalog.records
    assert record.get("shelf_location") == "004.8 HAY"


def test_corrupt_spreadsheet_is_source_failure(tmp_path):
    (tmp_path / "salud.xlsx").write_bytes(b"not really a workbook")
    catalog = _load([Source("salud", "salud")], tmp_path)
    (status,) = catalog.statuses
    assert not status.ok
    assert "cannot decode" in status.error


def test_mis_encoded_source_loads_with_warning(tmp_path):
    (tmp_path / "salud.csv").write_bytes("Title,Autor\nCafé,X\n".encode("latin-1"))
    catalog = _load([Source("salud", "salud")], tmp_path)
    (status,) = catalog.statuses
    assert status.ok
    assert any(w.startswith("encoding") for w in status.warnings)
    assert catalog.records[0].title == "Caf\ufffd"


def test_injected_reader_failure_and_timeout(sources):
    async def reader(source):
        if source.category == "tecnologias":
            raise SourceUnavailable(source.category, "HTTP 404")
        await asyncio.sleep(0)
        return FetchedSource(location="mem", format="csv", text="Título\nA\n")

    catalog = asyncio.run(load_catalog(sources, reader))
    assert [s.ok for s in catalog.statuses] == [True, False]
    assert catalog.statuses[1].error == "HTTP 404"

    async def slow(source):
        await asyncio.sleep(5)

    catalog = asyncio.run(load_catalog(sources[:1], slow, timeout=0.05))
    assert "timed out" in catalog.statuses[0].error


def test_workbook_without_sheets_does_not_sink_other_sources(tmp_path, sources):
    with zipfile.ZipFile(tmp_path / "salud.xlsx", "w") as zf:
        zf.writestr("hello.txt", "not a workbook")
    (tmp_path / "tecnologias.csv").write_text(TECNOLOGIAS_CSV, encoding="utf-8")

    catalog = _load(sources, tmp_path)
    salud, tecno = catalog.statuses
    assert not salud.ok
    assert salud.error
    assert tecno.ok and tecno.record_count == 1
    assert [r.title for r in search(catalog, "", "all")] == ["Diseño de videojuegos"]


def test_unexpected_reader_error_is_isolated(sources):
    async def reader(source):
        if source.category == "tecnologias":
            raise ConnectionResetError("peer reset")
        return FetchedSource(location="mem", format="csv", text=SALUD_CSV)

    catalog = asyncio.run(load_catalog(sources, reader))
    salud, tecno = catalog.statuses
    assert salud.ok and salud.record_count == 2
    assert not tecno.ok
    assert tecno.error == "ConnectionResetError: peer reset"
    assert catalog.counts() == {"salud": 2, "tecnologias": 0}
    assert [r.category for r in catalog.records] == ["salud", "salud"]


def test_reload_is_idempotent(data_dir, sources):
    first = _load(sources, data_dir)
    second = _load(sources, data_dir)
    assert [r.to_dict() for r in first.records] == [r.to_dict() for r in second.records]
