"""
Biblio Catalog — Configuration: paths, sources, parsing constants.
"""
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths: override with BIBLIO_DATA_DIR env var for deployment
# ---------------------------------------------------------------------------
_data_dir = Path(os.environ.get("BIBLIO_DATA_DIR", str(Path.home() / "biblio")))
DATA_FOLDER = _data_dir
EXPORTS_FOLDER = Path(os.environ.get("BIBLIO_EXPORTS_DIR", str(_data_dir / "exports")))

# When set, sources are fetched over HTTP from BASE_URL/<base_name><ext>
BASE_URL = os.environ.get("BIBLIO_BASE_URL") or None

# Per-source deadline in seconds for fetching; parsing runs after it
FETCH_TIMEOUT = float(os.environ.get("BIBLIO_FETCH_TIMEOUT", "15"))

# ---------------------------------------------------------------------------
# Sources: (category, base file name, display label)
# ---------------------------------------------------------------------------
SOURCES = [
    ("salud", "salud", "Ciencias de la Salud"),
    ("tecnologias", "tecnologias", "Nuevas Tecnologías Interactivas"),
]

ALL_CATEGORIES = "all"

# Tried in order; first hit wins. Delimited text before spreadsheet containers.
SOURCE_EXTENSIONS = [".csv", ".tsv", ".txt", ".xlsx", ".xlsm"]
SPREADSHEET_EXTENSIONS = {".xlsx", ".xlsm"}

# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------
SNIFF_CHARS = 4096
# Order matters: first candidate wins ties
DELIMITER_CANDIDATES = (",", ";", "\t")
DEFAULT_DELIMITER = ","

HEADER_SCAN_ROWS = 8
HEADER_SIGNALS = ("titul", "title")

OVERFLOW_KEY = "extra"
OVERFLOW_SEPARATOR = " | "
