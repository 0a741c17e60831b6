"""
Web page fetching (httpx) and main-content extraction (BeautifulSoup).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from app.ingestion.errors import DocumentFetchError, UnsupportedDocumentError
from app.utils.logging import get_logger
from app.utils.text import truncate_with_marker

logger = get_logger("eligibility.ingestion.web_extractor")

USER_AGENT = "EligibilityIngestorBot/1.0"
ACCEPT_HTML = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

STRIPPED_TAGS = ["script", "style", "noscript", "iframe", "svg", "nav", "header", "footer", "aside"]
CONTENT_SELECTORS = ("main", "article", "[role='main']", ".content", ".post")
MIN_PREFERRED_CONTENT = 500  # a candidate this long wins outright
MIN_USABLE_CONTENT = 300  # below this, fall back to the whole body

_TRAILING_SPACE = re.compile(r"[ \t]+\n")
_BLANK_RUNS = re.compile(r"\n{3,}")


@dataclass
class PageContent:
    url: str
    title: str | None
    text: str


def normalize_url(raw: str | None) -> str:
    """Validate an http(s) URL and return it trimmed."""
    url = (raw or "").strip()
    if not url:
        raise UnsupportedDocumentError("A URL is required in the request body.")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise UnsupportedDocumentError("The provided URL is not valid.")
    return url


async def fetch_page(url: str, *, timeout: float = 20.0) -> tuple[str, str]:
    """
    GET ``url`` following redirects.

    Returns ``(final_url, html)``; non-2xx or transport errors raise
    DocumentFetchError.
    """
    headers = {"User-Agent": USER_AGENT, "Accept": ACCEPT_HTML}
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            response = await client.get(url, headers=headers)
            response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        logger.warning("[WEB] Fetch failed | url=%s status=%s", url, status)
        raise DocumentFetchError(
            f"Failed to fetch page content (status {status})."
        ) from exc
    except httpx.HTTPError as exc:
        logger.warning("[WEB] Fetch failed | url=%s error=%s", url, exc)
        raise DocumentFetchError("Failed to fetch page content.") from exc

    logger.info("[WEB] Fetched %s | bytes=%s", response.url, len(response.content))
    return str(response.url), response.text


def _element_text(elements) -> str:
    lines = []
    for element in elements:
        for line in element.get_text("\n").split("\n"):
            line = line.strip()
            if line:
                lines.append(line)
    return "\n".join(lines)


def extract_main_content(html: str, max_length: int = 20_000) -> tuple[str | None, str]:
    """
    Return ``(title, text)`` for an HTML document.

    Chrome (nav, header, footer ...) is dropped; the first content
    container longer than MIN_PREFERRED_CONTENT wins, otherwise the last
    one tried; the body is used when that is shorter than
    MIN_USABLE_CONTENT.
    """
    soup = BeautifulSoup(html, "html.parser")

    title_tag = soup.find("title")
    title = title_tag.get_text().strip() if title_tag else ""

    for tag in soup(STRIPPED_TAGS):
        tag.decompose()

    content = ""
    for selector in CONTENT_SELECTORS:
        elements = soup.select(selector)
        if not elements:
            continue
        content = _element_text(elements)
        if len(content) > MIN_PREFERRED_CONTENT:
            break

    if len(content) < MIN_USABLE_CONTENT:
        body = soup.body
        content = _element_text([body] if body is not None else [soup])

    return title or None, sanitize_page_text(content, max_length)


def sanitize_page_text(text: str, max_length: int) -> str:
    normalized = _TRAILING_SPACE.sub("\n", text)
    normalized = _BLANK_RUNS.sub("\n\n", normalized)
    return truncate_with_marker(normalized, max_length)


async def load_page(url: str, *, timeout: float = 20.0, max_length: int = 20_000) -> PageContent:
    final_url, html = await fetch_page(url, timeout=timeout)
    title, text = extract_main_content(html, max_length)
    return PageContent(url=final_url, title=title, text=text)
