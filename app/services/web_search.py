"""
Google Custom Search client, used by callers to broaden a search that
found nothing in the local library.
"""

from __future__ import annotations

import hashlib
import re
from typing import Any
from urllib.parse import urlparse

import httpx

from app.schemas.records import WebResult
from app.utils.logging import get_logger

logger = get_logger("eligibility.services.web_search")

GOOGLE_CSE_ENDPOINT = "https://www.googleapis.com/customsearch/v1"
MAX_WEB_RESULTS = 8

_TAGS = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


class WebSearchError(Exception):
    code = "web_search_failed"
    status_code = 502

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class WebSearchNotConfiguredError(WebSearchError):
    code = "web_search_not_configured"
    status_code = 500


def _strip_html(value: str | None) -> str:
    if not value or not isinstance(value, str):
        return ""
    return _WHITESPACE.sub(" ", _TAGS.sub("", value)).strip()


def map_results(items: list[dict[str, Any]]) -> list[WebResult]:
    """Map CSE ``items`` to WebResult; entries without a URL are skipped."""
    results: list[WebResult] = []
    for index, item in enumerate(items):
        url = item.get("link") or item.get("formattedUrl")
        if not url:
            continue
        id_source = item.get("cacheId") or f"{url}-{index}"
        results.append(
            WebResult(
                id=hashlib.sha1(id_source.encode("utf-8")).hexdigest(),
                title=item.get("title") or _strip_html(item.get("htmlTitle")) or url,
                url=url,
                snippet=item.get("snippet") or _strip_html(item.get("htmlSnippet")),
                display_url=(
                    item.get("displayLink")
                    or item.get("formattedUrl")
                    or urlparse(url).hostname
                    or url
                ),
            )
        )
        if len(results) >= MAX_WEB_RESULTS:
            break
    return results


class WebSearchClient:
    def __init__(self, cse_id: str | None, cse_key: str | None, *, timeout: float = 20.0):
        self.cse_id = cse_id
        self.cse_key = cse_key
        self.timeout = timeout

    async def search(self, query: str) -> list[WebResult]:
        if not self.cse_id or not self.cse_key:
            logger.error("[WEB_SEARCH] Attempted without GOOGLE_CSE_ID/KEY")
            raise WebSearchNotConfiguredError(
                "Web search is not configured. Please provide GOOGLE_CSE_ID and "
                "GOOGLE_CSE_KEY in the environment."
            )

        params = {"key": self.cse_key, "cx": self.cse_id, "q": query, "num": str(MAX_WEB_RESULTS)}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    GOOGLE_CSE_ENDPOINT, params=params, headers={"Accept": "application/json"},
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "[WEB_SEARCH] Provider error %s: %s",
                exc.response.status_code, exc.response.text[:200],
            )
            raise WebSearchError("Unable to reach the web search provider.") from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("[WEB_SEARCH] Request failed: %s", exc)
            raise WebSearchError("Unable to reach the web search provider.") from exc

        items = payload.get("items") if isinstance(payload, dict) else None
        results = map_results(items if isinstance(items, list) else [])
        logger.info("[WEB_SEARCH] query=%s results=%s", query[:80], len(results))
        return results
