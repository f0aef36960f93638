"""
Catalog data model: canonical fields, sources, records, load status.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from biblio.config import ALL_CATEGORIES

RawGrid = list[list[str]]


class CanonicalField(str, Enum):
    TITLE = "title"
    AUTHOR = "author"
    PUBLISHER = "publisher"
    EDITION = "edition"
    YEAR = "year"
    ISBN = "isbn"
    PROGRAM = "program"
    SUBJECT = "subject"
    SHELF_LOCATION = "shelf_location"
    SUMMARY = "summary"


class SourceUnavailable(Exception):
    """A configured source could not be fetched or opened."""

    def __init__(self, category: str, reason: str) -> None:
        super().__init__(f"{category}: {reason}")
        self.category = category
        self.reason = reason


@dataclass(frozen=True)
class Source:
    """One tabular source file, tagged with the category its records get."""
    category: str
    base_name: str
    label: str = ""

    @property
    def display_label(self) -> str:
        return self.label or self.category


@dataclass(frozen=True)
class FetchedSource:
    """Raw content obtained for a source: text for delimited files, a grid for spreadsheets."""
    location: str
    format: str                          # file extension without the dot: "csv", "xlsx"...
    text: Optional[str] = None
    grid: Optional[RawGrid] = None
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class Record:
    """A catalog entry: canonical (or fallback) field → value, plus its category."""
    category: str
    fields: dict[str, str]

    def get(self, key: str | CanonicalField, default: str = "") -> str:
        if isinstance(key, CanonicalField):
            key = key.value
        return self.fields.get(key, default)

    @property
    def title(self) -> str:
        return self.get(CanonicalField.TITLE)

    def to_dict(self) -> dict[str, str]:
        return {**self.fields, "category": self.category}


@dataclass
class SourceStatus:
    """Outcome of loading one source."""
    category: str
    label: str
    ok: bool
    location: Optional[str] = None
    format: Optional[str] = None
    delimiter: Optional[str] = None
    header_row: Optional[int] = None
    columns: list[str] = field(default_factory=list)
    record_count: int = 0
    error: Optional[str] = None
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "label": self.label,
            "ok": self.ok,
            "location": self.location,
            "format": self.format,
            "delimiter": self.delimiter,
            "header_row": self.header_row,
            "columns": list(self.columns),
            "record_count": self.record_count,
            "error": self.error,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class Catalog:
    """All loaded records across sources. Built once per load, never mutated."""
    records: tuple[Record, ...] = ()
    statuses: tuple[SourceStatus, ...] = ()
    loaded_at: Optional[dt.datetime] = None

    @property
    def is_empty(self) -> bool:
        return not self.records

    def record_count(self) -> int:
        return len(self.records)

    def by_category(self, category: str) -> list[Record]:
        if category == ALL_CATEGORIES:
            return list(self.records)
        return [r for r in self.records if r.category == category]

    def counts(self) -> dict[str, int]:
        return {s.category: s.record_count for s in self.statuses}

    def failed(self) -> list[SourceStatus]:
        return [s for s in self.statuses if not s.ok]

