"""
Schemas for record browsing, ingestion and web-search endpoints.
"""

from __future__ import annotations

from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.search import ServiceSummary


class RecordListItem(CamelModel):
    id: str
    program_name: str | None = None
    source_type: str
    source_url: str | None = None
    page_title: str | None = None
    created_at: str | None = None
    preview: str = ""


class RecordListResponse(CamelModel):
    items: list[RecordListItem] = Field(default_factory=list)


class RecordDetail(CamelModel):
    id: str
    program_name: str | None = None
    source_type: str
    source_url: str | None = None
    page_title: str | None = None
    created_at: str | None = None
    raw_eligibility_text: str
    raw_text_snippet: str = ""
    eligibility: dict
    location_city: str | None = None
    location_county: str | None = None
    location_state: str | None = None


class HistoryItem(CamelModel):
    id: str
    program_name: str | None = None
    file_name: str
    file_size: int
    mime_type: str
    created_at: str | None = None
    raw_eligibility_text: str
    eligibility_json: dict


class HistoryResponse(CamelModel):
    items: list[HistoryItem] = Field(default_factory=list)


class IngestResponse(CamelModel):
    record: RecordDetail
    service: ServiceSummary


class ParseUrlRequest(CamelModel):
    url: str


class WebSearchRequest(CamelModel):
    query: str


class WebResult(CamelModel):
    id: str
    title: str
    url: str
    snippet: str = ""
    display_url: str


class WebSearchResponse(CamelModel):
    query: str
    results: list[WebResult] = Field(default_factory=list)
