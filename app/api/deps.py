"""
Request-scoped dependencies for the API routes.

Tests swap any of these with ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import partial

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.database import check_database, get_db
from app.ingestion.extractor import EligibilityExtractor
from app.ingestion.service import IngestionService, PageLoader
from app.ingestion.web_extractor import load_page
from app.pipeline.stages import SearchStore, SqlSearchStore
from app.services.llm import get_openai_client
from app.services.web_search import WebSearchClient


def get_database_status() -> bool:
    return check_database()


def get_search_store(db: Session = Depends(get_db)) -> SearchStore:
    return SqlSearchStore(db, settings.search)


def get_extractor() -> EligibilityExtractor:
    return EligibilityExtractor(
        get_openai_client(),
        settings.openai_model,
        max_pdf_chars=settings.max_pdf_text_chars,
        max_page_chars=settings.max_page_text_chars,
    )


def get_page_loader() -> PageLoader:
    return partial(
        load_page,
        timeout=settings.http_timeout_seconds,
        max_length=settings.max_page_text_chars,
    )


def get_ingestion_service(
    db: Session = Depends(get_db),
    extractor: EligibilityExtractor = Depends(get_extractor),
    page_loader: PageLoader = Depends(get_page_loader),
) -> IngestionService:
    return IngestionService(
        db,
        extractor,
        search_config=settings.search,
        page_loader=page_loader,
        max_raw_text_chars=settings.max_pdf_text_chars,
    )


def get_web_search_client() -> WebSearchClient:
    return WebSearchClient(
        settings.google_cse_id,
        settings.google_cse_key,
        timeout=settings.http_timeout_seconds,
    )
