"""
Internal shapes that flow between the search cascade stages.

CandidateRow is what a stage executor returns from storage;
PipelineResult tags a row with the stage that first produced it and,
after scoring, its score.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class SearchStage(str, Enum):
    LOCALIZED = "localized"
    RELAXED = "relaxed"
    FUZZY = "fuzzy"
    FALLBACK = "fallback"


class CandidateRow(BaseModel):
    """One eligibility record as returned by a stage query."""
    id: str
    program_name: str | None = None
    source_type: str = "pdf"
    source_url: str | None = None
    page_title: str | None = None
    created_at: datetime | None = None
    raw_eligibility_text: str = ""
    eligibility: dict[str, Any] = Field(default_factory=dict)
    location_city: str | None = None
    location_county: str | None = None
    location_state: str | None = None
    search_text: str = ""

    # Stage-specific relevance signals
    rank: float | None = None  # ts_rank_cd for the full-text stages
    similarity: float | None = None  # trigram similarity for the fuzzy stage

    @property
    def population(self) -> list[str]:
        return _string_list(self.eligibility.get("population"))

    @property
    def requirements(self) -> list[str]:
        return _string_list(self.eligibility.get("requirements"))


class PipelineResult(BaseModel):
    row: CandidateRow
    stage: SearchStage
    score: float = 0.0


class CascadeResult(BaseModel):
    """Output of the cascade: id -> first-seen result, in insertion order."""
    candidates: dict[str, PipelineResult] = Field(default_factory=dict)
    stages_fired: list[SearchStage] = Field(default_factory=list)


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if isinstance(v, str) and v]
