"""
PDF text extraction with pdfplumber.
"""

from __future__ import annotations

import io
import re
from dataclasses import dataclass

import pdfplumber

from app.ingestion.errors import NoReadableTextError, UnsupportedDocumentError
from app.utils.logging import get_logger

logger = get_logger("eligibility.ingestion.pdf_parser")

_SPACE_RUNS = re.compile(r"[ \t]{2,}")
_BLANK_RUNS = re.compile(r"\n{3,}")


@dataclass
class ParsedPdf:
    text: str
    num_pages: int
    title: str | None = None


def clean_pdf_text(text: str) -> str:
    """Normalise line endings, squeeze space runs, keep at most one blank line."""
    cleaned = text.replace("\r\n", "\n").replace("\r", "\n")
    cleaned = _SPACE_RUNS.sub(" ", cleaned)
    cleaned = _BLANK_RUNS.sub("\n\n", cleaned)
    return cleaned.strip()


def parse_pdf(data: bytes) -> ParsedPdf:
    """
    Extract the text of every page, joined with blank lines.

    Raises UnsupportedDocumentError when the bytes are not a readable PDF
    and NoReadableTextError when no page yields text (image-only scans).
    """
    pages: list[str] = []
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            num_pages = len(pdf.pages)
            raw_title = (pdf.metadata or {}).get("Title")
            for page in pdf.pages:
                page_text = page.extract_text()
                if page_text:
                    pages.append(page_text)
    except Exception as exc:
        logger.warning("[PDF] Could not open document: %s", exc)
        raise UnsupportedDocumentError(
            "The uploaded file could not be read as a PDF."
        ) from exc

    text = clean_pdf_text("\n\n".join(pages))
    if not text:
        raise NoReadableTextError(
            "No text content found in PDF. This may be an image-based or encrypted PDF."
        )

    title = raw_title.strip() if isinstance(raw_title, str) and raw_title.strip() else None
    logger.info("[PDF] Parsed %s pages | chars=%s title=%s", num_pages, len(text), title or "-")
    return ParsedPdf(text=text, num_pages=num_pages, title=title)
