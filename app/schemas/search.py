"""
Request/response schemas for the search endpoint plus the QueryHints
value built by the query interpreter.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from app.schemas.base import CamelModel


class SearchFilters(CamelModel):
    """Explicit caller overrides; each one beats the inferred value."""
    location_city: str | None = None
    location_county: str | None = None
    state: str | None = None
    populations: list[str] = Field(default_factory=list)
    need_types: list[str] = Field(default_factory=list)


class SearchRequest(CamelModel):
    query: str
    limit: int | None = None
    filters: SearchFilters | None = None


class QueryHints(BaseModel):
    """Structured interpretation of a free-text query."""
    query: str  # trimmed, original case
    normalized_query: str  # lowercase copy
    keywords: list[str] = Field(default_factory=list)
    city: str | None = None
    county: str | None = None
    state: str | None = None
    populations: list[str] = Field(default_factory=list)
    need_types: list[str] = Field(default_factory=list)

    @property
    def has_locality(self) -> bool:
        return bool(self.city or self.county)


class MatchTier(str, Enum):
    DIRECT = "direct"
    BROADER = "broader"
    FUZZY = "fuzzy"


class InterpretedFilters(CamelModel):
    query: str
    location_city: str | None = None
    location_county: str | None = None
    state: str | None = None
    populations: list[str] = Field(default_factory=list)
    need_types: list[str] = Field(default_factory=list)


class ServiceSummary(CamelModel):
    id: str
    program_name: str | None = None
    source_type: str
    source_url: str | None = None
    page_title: str | None = None
    created_at: str | None = None
    preview_eligibility_text: str = ""
    location_city: str | None = None
    location_county: str | None = None
    location_state: str | None = None
    population: list[str] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)


class SearchResultItem(CamelModel):
    service: ServiceSummary
    match_reason: list[str]
    match_tier: MatchTier


class SearchResponse(CamelModel):
    query: str
    interpreted_filters: InterpretedFilters
    results: list[SearchResultItem] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
    message: str
