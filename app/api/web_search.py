"""
External web search route: the broaden-search fallback for empty results.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_web_search_client
from app.pipeline.errors import InvalidSearchRequestError
from app.schemas.records import WebSearchRequest, WebSearchResponse
from app.services.web_search import WebSearchClient

router = APIRouter(tags=["Web Search"])


@router.post("/web-search", response_model=WebSearchResponse)
async def web_search(
    request: WebSearchRequest,
    client: WebSearchClient = Depends(get_web_search_client),
):
    query = (request.query or "").strip()
    if not query:
        raise InvalidSearchRequestError("A search query is required.")
    results = await client.search(query)
    return WebSearchResponse(query=query, results=results)
