"""
Thin API route for /search-eligibility.

No business logic: validates the request body, calls
orchestrator.run_search() and returns the response.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_search_store
from app.core.config import settings
from app.pipeline.orchestrator import run_search
from app.pipeline.stages import SearchStore
from app.schemas.search import SearchRequest, SearchResponse
from app.utils.logging import get_logger

logger = get_logger("eligibility.api.search")

router = APIRouter(tags=["Search"])


@router.post("/search-eligibility", response_model=SearchResponse)
def search_eligibility(
    request: SearchRequest,
    store: SearchStore = Depends(get_search_store),
):
    """
    Natural-language search over stored eligibility records.

    Sync on purpose: stages run sequential blocking DB queries, so
    FastAPI runs this in its threadpool.
    """
    q = (request.query or "").strip()
    logger.info("[SEARCH_API] query=%s%s", q[:80], "..." if len(q) > 80 else "")
    return run_search(
        store,
        request.query,
        limit=request.limit,
        filters=request.filters,
        config=settings.search,
    )
