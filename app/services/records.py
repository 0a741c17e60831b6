"""
Eligibility record queries and ORM -> schema mapping.

Shared by the browsing routes, the ingestion service and the backfill
script.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.core.config import SearchConfig
from app.db.models import EligibilityDocument
from app.pipeline.response_mapper import build_service_summary
from app.schemas.pipeline import CandidateRow
from app.schemas.records import HistoryItem, RecordDetail, RecordListItem
from app.schemas.search import ServiceSummary
from app.utils.text import create_snippet

LIST_PREVIEW_LENGTH = 160
RAW_TEXT_SNIPPET_LENGTH = 2_000
HISTORY_LIMIT = 10


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _source_type(document: EligibilityDocument) -> str:
    return "web" if document.source_type == "web" else "pdf"


# ── Mapping ─────────────────────────────────────────────────────────

def document_to_candidate(document: EligibilityDocument) -> CandidateRow:
    return CandidateRow(
        id=str(document.id),
        program_name=document.program_name,
        source_type=_source_type(document),
        source_url=document.source_url,
        page_title=document.page_title,
        created_at=document.created_at,
        raw_eligibility_text=document.raw_eligibility_text or "",
        eligibility=document.eligibility_json or {},
        location_city=document.location_city,
        location_county=document.location_county,
        location_state=document.location_state,
        search_text=document.search_text or "",
    )


def to_service_summary(document: EligibilityDocument, config: SearchConfig) -> ServiceSummary:
    return build_service_summary(document_to_candidate(document), config)


def to_list_item(document: EligibilityDocument) -> RecordListItem:
    return RecordListItem(
        id=str(document.id),
        program_name=document.program_name,
        source_type=_source_type(document),
        source_url=document.source_url,
        page_title=document.page_title,
        created_at=_iso(document.created_at),
        preview=create_snippet(document.raw_eligibility_text, LIST_PREVIEW_LENGTH, collapse=True),
    )


def to_detail(document: EligibilityDocument) -> RecordDetail:
    return RecordDetail(
        id=str(document.id),
        program_name=document.program_name,
        source_type=_source_type(document),
        source_url=document.source_url,
        page_title=document.page_title,
        created_at=_iso(document.created_at),
        raw_eligibility_text=document.raw_eligibility_text or "",
        raw_text_snippet=create_snippet(document.raw_text, RAW_TEXT_SNIPPET_LENGTH),
        eligibility=document.eligibility_json or {},
        location_city=document.location_city,
        location_county=document.location_county,
        location_state=document.location_state,
    )


def to_history_item(document: EligibilityDocument) -> HistoryItem:
    return HistoryItem(
        id=str(document.id),
        program_name=document.program_name,
        file_name=document.file_name,
        file_size=document.file_size,
        mime_type=document.mime_type,
        created_at=_iso(document.created_at),
        raw_eligibility_text=document.raw_eligibility_text or "",
        eligibility_json=document.eligibility_json or {},
    )


# ── Queries ─────────────────────────────────────────────────────────

def build_list_statement(limit: int, source_type: str | None = None, q: str | None = None):
    stmt = select(EligibilityDocument).order_by(EligibilityDocument.created_at.desc())
    if source_type:
        stmt = stmt.where(EligibilityDocument.source_type == source_type)
    term = (q or "").strip()
    if term:
        stmt = stmt.where(
            or_(
                EligibilityDocument.program_name.icontains(term, autoescape=True),
                EligibilityDocument.page_title.icontains(term, autoescape=True),
                EligibilityDocument.source_url.icontains(term, autoescape=True),
            )
        )
    return stmt.limit(limit)


def list_records(
    db: Session,
    limit: int,
    source_type: str | None = None,
    q: str | None = None,
) -> list[EligibilityDocument]:
    return list(db.scalars(build_list_statement(limit, source_type, q)))


def get_record(db: Session, record_id: str) -> EligibilityDocument | None:
    """None for an unknown or malformed id."""
    try:
        key = uuid.UUID(str(record_id))
    except ValueError:
        return None
    return db.get(EligibilityDocument, key)


def recent_history(db: Session, limit: int = HISTORY_LIMIT) -> list[EligibilityDocument]:
    stmt = (
        select(EligibilityDocument)
        .order_by(EligibilityDocument.created_at.desc())
        .limit(limit)
    )
    return list(db.scalars(stmt))
