"""
Search stages 1-4: stage executors over the storage collaborator.

Each executor takes QueryHints and a row limit and returns up to that
many CandidateRows, best first:

  localized  full-text on search_tsv + city/county (+ state) prefix filter
  relaxed    full-text on search_tsv + state filter only
  fuzzy      substring OR trigram similarity on search_text + state filter
  fallback   no text condition, state filter only, newest first

``SearchStore`` is the seam the orchestrator depends on; ``SqlSearchStore``
is the PostgreSQL implementation and tests use an in-memory fake.
Statement construction is kept in pure ``build_*_statement`` functions.
"""

from __future__ import annotations

from typing import Protocol

from sqlalchemy import Select, cast, func, or_, select
from sqlalchemy.dialects.postgresql import REGCONFIG
from sqlalchemy.orm import Session

from app.core.config import SearchConfig
from app.db.models import EligibilityDocument
from app.schemas.pipeline import CandidateRow
from app.schemas.search import QueryHints
from app.utils.logging import get_logger

logger = get_logger("eligibility.pipeline.stages")


class SearchStore(Protocol):
    """Read-only query capability the cascade runs against."""

    def localized_full_text(self, hints: QueryHints, limit: int) -> list[CandidateRow]: ...

    def relaxed_full_text(self, hints: QueryHints, limit: int) -> list[CandidateRow]: ...

    def fuzzy_similarity(self, hints: QueryHints, limit: int) -> list[CandidateRow]: ...

    def fallback_recency(self, hints: QueryHints, limit: int) -> list[CandidateRow]: ...


# ── Statement builders (pure) ───────────────────────────────────────

_RECORD_COLUMNS = (
    EligibilityDocument.id,
    EligibilityDocument.program_name,
    EligibilityDocument.source_type,
    EligibilityDocument.source_url,
    EligibilityDocument.page_title,
    EligibilityDocument.created_at,
    EligibilityDocument.raw_eligibility_text,
    EligibilityDocument.eligibility_json,
    EligibilityDocument.location_city,
    EligibilityDocument.location_county,
    EligibilityDocument.location_state,
    EligibilityDocument.search_text,
)


def _ts_query(hints: QueryHints, config: SearchConfig):
    # plainto_tsquery: tokenises, drops stopwords, ANDs the terms
    return func.plainto_tsquery(cast(config.text_search_config, REGCONFIG), hints.query)


def _state_filter(stmt: Select, hints: QueryHints) -> Select:
    if hints.state:
        stmt = stmt.where(
            EligibilityDocument.location_state.istartswith(hints.state, autoescape=True)
        )
    return stmt


def _full_text_statement(hints: QueryHints, limit: int, config: SearchConfig) -> Select:
    ts_query = _ts_query(hints, config)
    rank = func.ts_rank_cd(EligibilityDocument.search_tsv, ts_query).label("rank")
    stmt = (
        select(*_RECORD_COLUMNS, rank)
        .where(EligibilityDocument.search_tsv.op("@@")(ts_query))
        .order_by(rank.desc(), EligibilityDocument.created_at.desc())
        .limit(limit)
    )
    return _state_filter(stmt, hints)


def build_localized_statement(hints: QueryHints, limit: int, config: SearchConfig) -> Select:
    """Full-text match restricted to rows whose city or county matches the hints."""
    stmt = _full_text_statement(hints, limit, config)
    locality = []
    if hints.city:
        locality.append(
            EligibilityDocument.location_city.istartswith(hints.city, autoescape=True)
        )
    if hints.county:
        locality.append(
            EligibilityDocument.location_county.istartswith(hints.county, autoescape=True)
        )
    if locality:
        stmt = stmt.where(or_(*locality))
    return stmt


def build_relaxed_statement(hints: QueryHints, limit: int, config: SearchConfig) -> Select:
    return _full_text_statement(hints, limit, config)


def build_fuzzy_statement(hints: QueryHints, limit: int, config: SearchConfig) -> Select:
    similarity = func.similarity(EligibilityDocument.search_text, hints.query)
    stmt = (
        select(*_RECORD_COLUMNS, similarity.label("similarity"))
        .where(
            or_(
                EligibilityDocument.search_text.icontains(hints.query, autoescape=True),
                similarity > config.fuzzy_similarity_threshold,
            )
        )
        .order_by(similarity.desc(), EligibilityDocument.created_at.desc())
        .limit(limit)
    )
    return _state_filter(stmt, hints)


def build_fallback_statement(hints: QueryHints, limit: int, config: SearchConfig) -> Select:
    stmt = (
        select(*_RECORD_COLUMNS)
        .order_by(EligibilityDocument.created_at.desc())
        .limit(limit)
    )
    return _state_filter(stmt, hints)


# ── SQL store ───────────────────────────────────────────────────────

class SqlSearchStore:
    """SearchStore backed by the eligibility_documents table."""

    def __init__(self, db: Session, config: SearchConfig):
        self.db = db
        self.config = config

    def localized_full_text(self, hints: QueryHints, limit: int) -> list[CandidateRow]:
        return self._fetch(build_localized_statement(hints, limit, self.config))

    def relaxed_full_text(self, hints: QueryHints, limit: int) -> list[CandidateRow]:
        return self._fetch(build_relaxed_statement(hints, limit, self.config))

    def fuzzy_similarity(self, hints: QueryHints, limit: int) -> list[CandidateRow]:
        return self._fetch(build_fuzzy_statement(hints, limit, self.config))

    def fallback_recency(self, hints: QueryHints, limit: int) -> list[CandidateRow]:
        return self._fetch(build_fallback_statement(hints, limit, self.config))

    def _fetch(self, stmt: Select) -> list[CandidateRow]:
        rows = self.db.execute(stmt).all()
        logger.debug("[STAGE] fetched %s rows", len(rows))
        return [row_to_candidate(row._mapping) for row in rows]


def row_to_candidate(mapping) -> CandidateRow:
    """Map one result row (column name -> value) to a CandidateRow."""
    rank = mapping.get("rank")
    similarity = mapping.get("similarity")
    return CandidateRow(
        id=str(mapping["id"]),
        program_name=mapping["program_name"],
        source_type="web" if mapping["source_type"] == "web" else "pdf",
        source_url=mapping["source_url"],
        page_title=mapping["page_title"],
        created_at=mapping["created_at"],
        raw_eligibility_text=mapping["raw_eligibility_text"] or "",
        eligibility=mapping["eligibility_json"] or {},
        location_city=mapping["location_city"],
        location_county=mapping["location_county"],
        location_state=mapping["location_state"],
        search_text=mapping["search_text"] or "",
        rank=float(rank) if rank is not None else None,
        similarity=float(similarity) if similarity is not None else None,
    )
