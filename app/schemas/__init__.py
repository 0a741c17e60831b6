"""
Pydantic schemas for every pipeline and API boundary.
Each module covers one pipeline stage or cross-cutting concern.
"""

from app.schemas.eligibility import (
    Eligibility,
    AgeRange,
    PopulationTag,
    GenderRestriction,
    RequirementTag,
)
from app.schemas.pipeline import (
    SearchStage,
    CandidateRow,
    PipelineResult,
    CascadeResult,
)
from app.schemas.search import (
    SearchFilters,
    SearchRequest,
    QueryHints,
    MatchTier,
    InterpretedFilters,
    ServiceSummary,
    SearchResultItem,
    SearchResponse,
    ErrorResponse,
)
from app.schemas.records import (
    RecordListItem,
    RecordListResponse,
    RecordDetail,
    HistoryItem,
    HistoryResponse,
    IngestResponse,
    ParseUrlRequest,
    WebSearchRequest,
    WebResult,
    WebSearchResponse,
)

__all__ = [
    # Eligibility
    "Eligibility",
    "AgeRange",
    "PopulationTag",
    "GenderRestriction",
    "RequirementTag",
    # Pipeline
    "SearchStage",
    "CandidateRow",
    "PipelineResult",
    "CascadeResult",
    # Search
    "SearchFilters",
    "SearchRequest",
    "QueryHints",
    "MatchTier",
    "InterpretedFilters",
    "ServiceSummary",
    "SearchResultItem",
    "SearchResponse",
    "ErrorResponse",
    # Records / ingestion / web search
    "RecordListItem",
    "RecordListResponse",
    "RecordDetail",
    "HistoryItem",
    "HistoryResponse",
    "IngestResponse",
    "ParseUrlRequest",
    "WebSearchRequest",
    "WebResult",
    "WebSearchResponse",
]
