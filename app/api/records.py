"""
Record browsing routes: list, detail and recent upload history.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.schemas.records import HistoryResponse, RecordDetail, RecordListResponse
from app.schemas.search import ErrorResponse
from app.services import records as record_service
from app.utils.logging import get_logger

logger = get_logger("eligibility.api.records")

router = APIRouter(tags=["Records"])

DEFAULT_LIST_LIMIT = 20
MAX_LIST_LIMIT = 100


def resolve_list_limit(raw: str | None) -> int:
    try:
        limit = int(raw) if raw is not None else DEFAULT_LIST_LIMIT
    except ValueError:
        return DEFAULT_LIST_LIMIT
    if limit <= 0:
        return DEFAULT_LIST_LIMIT
    return min(limit, MAX_LIST_LIMIT)


@router.get("/eligibility-records", response_model=RecordListResponse)
def list_eligibility_records(
    limit: str | None = Query(None),
    source_type: str | None = Query(None, alias="sourceType", pattern="^(pdf|web)$"),
    q: str | None = Query(None),
    db: Session = Depends(get_db),
):
    """
    Newest first. A missing, non-numeric or non-positive ``limit`` means
    the default of 20; larger values are capped at 100.
    """
    limit = resolve_list_limit(limit)
    documents = record_service.list_records(db, limit, source_type, q)
    logger.info(
        "[RECORDS] list | limit=%s sourceType=%s q=%s count=%s",
        limit, source_type or "-", q or "-", len(documents),
    )
    return RecordListResponse(items=[record_service.to_list_item(d) for d in documents])


@router.get("/eligibility-records/{record_id}", response_model=RecordDetail)
def get_eligibility_record(record_id: str, db: Session = Depends(get_db)):
    document = record_service.get_record(db, record_id)
    if document is None:
        return JSONResponse(
            status_code=404,
            content=ErrorResponse(error="not_found", message="Record not found.").model_dump(),
        )
    return record_service.to_detail(document)


@router.get("/history", response_model=HistoryResponse)
def get_history(db: Session = Depends(get_db)):
    documents = record_service.recent_history(db)
    return HistoryResponse(items=[record_service.to_history_item(d) for d in documents])
