import pytest

from biblio.data.headers import (
    HEADER_RULES, HeaderRule, find_positional_row, find_signal_row,
    locate_header_row, map_header, map_headers,
)
from biblio.data.schemas import CanonicalField


# ---------------------------------------------------------------------------
# Header row location
# ---------------------------------------------------------------------------

def test_banner_row_skipped_by_title_signal():
    grid = [["Catálogo 2024"], ["Título", "Autor"], ["Libro", "Autora"]]
    assert locate_header_row(grid) == 1


def test_header_in_first_row():
    grid = [["Título", "Autor"], ["Libro", "Autora"]]
    assert locate_header_row(grid) == 0


def test_english_title_signal():
    grid = [[""], ["", ""], ["Book Title", "Author"], ["x", "y"]]
    assert find_signal_row(grid) == 2


def test_signal_only_looks_inside_window():
    grid = [["x"]] * 10 + [["Título"]]
    assert find_signal_row(grid, window=8) is None


def test_positional_uses_row_after_banner():
    grid = [["Biblioteca EUNEIZ"], ["Nombre", "Creador"], ["a", "b"]]
    assert find_signal_row(grid) is None
    assert locate_header_row(grid) == 1


def test_positional_keeps_anchor_when_next_row_blank():
    grid = [["", ""], ["Nombre", "Creador"], ["", " "], ["a", "b"]]
    assert find_positional_row(grid) == 1
    assert locate_header_row(grid) == 1


def test_positional_anchor_at_end_of_grid():
    assert find_positional_row([[""], ["Nombre"]]) == 1


def test_empty_and_blank_grids_fall_back_to_zero():
    assert locate_header_row([]) == 0
    assert locate_header_row([[""], ["  "]]) == 0


# ---------------------------------------------------------------------------
# Column mapping: one rule at a time
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("label, field", [
    ("Título", CanonicalField.TITLE),
    ("TITULO DE LA OBRA", CanonicalField.TITLE),
    ("Title", CanonicalField.TITLE),
    ("Titulación", CanonicalField.PROGRAM),
    ("Grado", CanonicalField.PROGRAM),
    ("Autor/a", CanonicalField.AUTHOR),
    ("Author", CanonicalField.AUTHOR),
    ("Editorial", CanonicalField.PUBLISHER),
    ("Publisher", CanonicalField.PUBLISHER),
    ("Edición", CanonicalField.EDITION),
    ("Edição", CanonicalField.EDITION),
    ("Año", CanonicalField.YEAR),
    ("anio", CanonicalField.YEAR),
    ("Year", CanonicalField.YEAR),
    ("Año de edición", CanonicalField.YEAR),
    ("Fecha de publicación", CanonicalField.YEAR),
    ("ISBN", CanonicalField.ISBN),
    ("Materias / Temáticas", CanonicalField.SUBJECT),
    ("Materias", CanonicalField.SUBJECT),
    ("Signatura Topográfica", CanonicalField.SHELF_LOCATION),
    ("Resumen", CanonicalField.SUMMARY),
    ("Sinopsis", CanonicalField.SUMMARY),
    ("Abstract", CanonicalField.SUMMARY),
])
def test_map_header_rules(label, field):
    assert map_header(label, 0) == field.value


def test_program_rule_precedes_title_rule():
    fields = [r.field for r in HEADER_RULES]
    assert fields.index(CanonicalField.PROGRAM) < fields.index(CanonicalField.TITLE)


def test_year_requires_whole_word():
    # "ano" inside a longer word is not a year column
    assert map_header("Humano", 0) == "humano"


def test_unrecognized_header_falls_back_to_slug():
    assert map_header("Nº de ejemplares", 0) == "n_de_ejemplares"
    assert map_header("Observaciones", 0) == "observaciones"


def test_empty_header_gets_positional_key():
    assert map_header("", 4) == "col4"
    assert map_header("--", 2) == "col2"


def test_map_headers_full_row():
    row = ["Título", "Autor/a", "Editorial", "Edición", "Año", "ISBN",
           "Titulación", "Materias / Temáticas", "Signatura Topográfica", "Resumen"]
    assert map_headers(row) == [
        "title", "author", "publisher", "edition", "year", "isbn",
        "program", "subject", "shelf_location", "summary",
    ]


def test_map_headers_suffixes_duplicates():
    assert map_headers(["Autor", "Autor", "", "Autor"]) == ["author", "author_2", "col2", "author_3"]


def test_custom_rules():
    rules = [HeaderRule(CanonicalField.TITLE, fragments=("nombre",))]
    assert map_headers(["Nombre del libro", "Autor"], rules) == ["title", "autor"]
