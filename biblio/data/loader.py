"""
Source resolution, reading, and concurrent catalog assembly.
"""
from __future__ import annotations

import asyncio
import datetime as dt
import io
import logging
import zipfile
from pathlib import Path
from typing import Awaitable, Callable, Optional

import aiohttp
import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from biblio.config import (
    BASE_URL, DATA_FOLDER, FETCH_TIMEOUT, SOURCES,
    SOURCE_EXTENSIONS, SPREADSHEET_EXTENSIONS,
)
from biblio.data.headers import locate_header_row, map_headers
from biblio.data.normalize import clean_cell
from biblio.data.parser import detect_delimiter, parse_rows, strip_bom
from biblio.data.records import build_records
from biblio.data.schemas import (
    Catalog, CanonicalField, FetchedSource, RawGrid, Record, Source,
    SourceStatus, SourceUnavailable,
)

logger = logging.getLogger(__name__)

Reader = Callable[[Source], Awaitable[FetchedSource]]


def default_sources() -> list[Source]:
    return [Source(category, base_name, label) for category, base_name, label in SOURCES]


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def decode_text(raw: bytes) -> tuple[str, list[str]]:
    """UTF-8 decode without failing; replacement characters become a warning."""
    text = strip_bom(raw.decode("utf-8", errors="replace"))
    warnings = []
    bad = text.count("\ufffd")
    if bad:
        warnings.append(f"encoding: {bad} undecodable character(s) replaced; expected UTF-8")
    return text, warnings


def read_spreadsheet(data: bytes | Path) -> RawGrid:
    """First worksheet of an .xlsx/.xlsm as a grid of cleaned strings."""
    handle = io.BytesIO(data) if isinstance(data, bytes) else data
    df = pd.read_excel(
        handle, sheet_name=0, header=None, dtype=str,
        keep_default_na=False, engine="openpyxl",
    )
    return [[clean_cell(v) for v in row] for row in df.values.tolist()]


def _fetched_from_bytes(source: Source, location: str, ext: str, data: bytes) -> FetchedSource:
    fmt = ext.lstrip(".").lower()
    if ext.lower() in SPREADSHEET_EXTENSIONS:
        try:
            grid = read_spreadsheet(data)
        except (ValueError, OSError, zipfile.BadZipFile, InvalidFileException) as exc:
            raise SourceUnavailable(source.category, f"cannot decode {location}: {exc}") from exc
        return FetchedSource(location=location, format=fmt, grid=grid)
    text, warnings = decode_text(data)
    return FetchedSource(location=location, format=fmt, text=text, warnings=tuple(warnings))


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------

def resolve_source(
    source: Source,
    data_dir: Path = DATA_FOLDER,
    extensions: list[str] = SOURCE_EXTENSIONS,
) -> Path:
    """First existing <data_dir>/<base_name><ext>, in extension preference order."""
    for ext in extensions:
        candidate = Path(data_dir) / f"{source.base_name}{ext}"
        if candidate.is_file():
            return candidate
    tried = ", ".join(f"{source.base_name}{ext}" for ext in extensions)
    raise SourceUnavailable(source.category, f"no file found in {data_dir} (tried {tried})")


async def read_local(source: Source, data_dir: Path = DATA_FOLDER) -> FetchedSource:
    path = resolve_source(source, data_dir)
    try:
        data = await asyncio.to_thread(path.read_bytes)
    except OSError as exc:
        raise SourceUnavailable(source.category, f"cannot read {path}: {exc}") from exc
    return _fetched_from_bytes(source, str(path), path.suffix, data)


async def read_remote(
    source: Source,
    base_url: str,
    extensions: list[str] = SOURCE_EXTENSIONS,
) -> FetchedSource:
    """GET <base_url>/<base_name><ext> for each extension until one answers 2xx."""
    failures = []
    async with aiohttp.ClientSession() as session:
        for ext in extensions:
            url = f"{base_url.rstrip('/')}/{source.base_name}{ext}"
            try:
                async with session.get(url) as resp:
                    if resp.status >= 400:
                        failures.append(f"{url} → HTTP {resp.status}")
                        continue
                    data = await resp.read()
            except aiohttp.ClientError as exc:
                failures.append(f"{url} → {exc}")
                continue
            return _fetched_from_bytes(source, url, ext, data)
    raise SourceUnavailable(source.category, "; ".join(failures) or "no candidates")


def make_reader(data_dir: Optional[Path] = None, base_url: Optional[str] = None) -> Reader:
    """Reader for the configured transport: HTTP when a base URL is set, else disk."""
    base_url = base_url if base_url is not None else BASE_URL
    data_dir = data_dir if data_dir is not None else DATA_FOLDER

    async def reader(source: Source) -> FetchedSource:
        if base_url:
            return await read_remote(source, base_url)
        return await read_local(source, data_dir)

    return reader


# ---------------------------------------------------------------------------
# Per-source pipeline
# ---------------------------------------------------------------------------

def build_source(source: Source, fetched: FetchedSource) -> tuple[list[Record], SourceStatus]:
    """detect → parse → locate header → map → build, for one fetched source."""
    status = SourceStatus(
        category=source.category,
        label=source.display_label,
        ok=True,
        location=fetched.location,
        format=fetched.format,
        warnings=list(fetched.warnings),
    )

    if fetched.grid is not None:
        grid = fetched.grid
    else:
        text = fetched.text or ""
        status.delimiter = detect_delimiter(text)
        grid = parse_rows(text, status.delimiter)

    if not grid:
        status.warnings.append("source is empty")
        logger.warning("  %s: source is empty (%s)", source.category, fetched.location)
        return [], status

    header_idx = locate_header_row(grid)
    columns = map_headers(grid[header_idx])
    status.header_row = header_idx
    status.columns = columns

    if CanonicalField.TITLE.value not in columns:
        msg = f"no title column recognized in header row {header_idx}"
        status.warnings.append(msg)
        logger.warning("  %s: %s (headers: %s)", source.category, msg, grid[header_idx])

    records = build_records(grid, header_idx, columns, source.category)
    status.record_count = len(records)

    for w in fetched.warnings:
        logger.warning("  %s: %s", source.category, w)
    logger.info(
        "  %s: %s [%s%s] header row %d → %s, %d records",
        source.category, fetched.location, fetched.format,
        f" delim={status.delimiter!r}" if status.delimiter else "",
        header_idx, columns, len(records),
    )
    return records, status


async def _load_one(
    source: Source,
    reader: Reader,
    timeout: Optional[float],
) -> tuple[list[Record], SourceStatus]:
    try:
        fetched = await asyncio.wait_for(reader(source), timeout)
        return build_source(source, fetched)
    except asyncio.TimeoutError:
        reason = f"timed out after {timeout}s"
        logger.warning("  %s: source unavailable, %s", source.category, reason)
    except SourceUnavailable as exc:
        reason = exc.reason
        logger.warning("  %s: source unavailable, %s", source.category, reason)
    except Exception as exc:
        # Anything else is still confined to this source
        reason = f"{type(exc).__name__}: {exc}"
        logger.exception("  %s: failed to load", source.category)

    return [], SourceStatus(
        category=source.category,
        label=source.display_label,
        ok=False,
        error=reason,
    )


async def load_catalog(
    sources: Optional[list[Source]] = None,
    reader: Optional[Reader] = None,
    timeout: Optional[float] = FETCH_TIMEOUT,
) -> Catalog:
    """Load every source concurrently and merge in source order.

    A failing source contributes no records and a failed status; the
    others load regardless.
    """
    sources = default_sources() if sources is None else list(sources)
    reader = reader or make_reader()

    results = await asyncio.gather(*(_load_one(s, reader, timeout) for s in sources))

    records: list[Record] = []
    statuses: list[SourceStatus] = []
    for recs, status in results:
        records.extend(recs)
        statuses.append(status)

    failed = sum(1 for s in statuses if not s.ok)
    logger.info("  Catalog: %d records from %d source(s), %d failed",
                len(records), len(statuses) - failed, failed)
    return Catalog(records=tuple(records), statuses=tuple(statuses), loaded_at=dt.datetime.now())
