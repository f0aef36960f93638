from __future__ import annotations

from pathlib import Path

import pytest

from biblio.data.schemas import Source

SALUD_CSV = (
    "Título;Autor;Año\n"
    "Introducción a la Química;Pérez, Ana;2019\n"
    "Anatomía humana;\"Gómez; Luis\";2021\n"
)

TECNOLOGIAS_CSV = (
    "titulo,autor,anio\n"
    "Diseño de videojuegos,\"Smith, J.\",2020\n"
)


@pytest.fixture
def sources() -> list[Source]:
    return [
        Source("salud", "salud", "Ciencias de la Salud"),
        Source("tecnologias", "tecnologias", "Nuevas Tecnologías Interactivas"),
    ]


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Both faculty CSVs, one semicolon- and one comma-delimited."""
    (tmp_path / "salud.csv").write_text(SALUD_CSV, encoding="utf-8")
    (tmp_path / "tecnologias.csv").write_text(TECNOLOGIAS_CSV, encoding="utf-8")
    return tmp_path
