"""
Pydantic response schemas for the API.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    records: int
    by_category: dict[str, int]
    failed_sources: int
    loaded_at: Optional[str] = None


class CategoryInfo(BaseModel):
    category: str
    label: str
    records: int
    ok: bool


class CategoriesResponse(BaseModel):
    categories: list[CategoryInfo]


class SourceStatusResponse(BaseModel):
    category: str
    label: str
    ok: bool
    location: Optional[str] = None
    format: Optional[str] = None
    delimiter: Optional[str] = None
    header_row: Optional[int] = None
    columns: list[str] = []
    record_count: int = 0
    error: Optional[str] = None
    warnings: list[str] = []


class SourcesResponse(BaseModel):
    sources: list[SourceStatusResponse]


class SearchResponse(BaseModel):
    query: str
    category: str
    state: str  # "ok" | "no_matches" | "unavailable"
    total: int
    records: list[dict[str, str]]
