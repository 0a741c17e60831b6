"""
Document ingestion: PDF upload or web page -> extracted eligibility ->
stored record with derived location and search_text.

A record is only written when the extractor found an eligibility
excerpt; every failure before that point leaves the table untouched.
"""

from __future__ import annotations

import hashlib
from typing import Awaitable, Callable

from sqlalchemy.orm import Session

from app.core.config import SearchConfig
from app.db.models import EligibilityDocument
from app.ingestion.errors import (
    NoEligibilityFoundError,
    NoReadableTextError,
    UnsupportedDocumentError,
)
from app.ingestion.extractor import EligibilityExtractor
from app.ingestion.pdf_parser import ParsedPdf, parse_pdf
from app.ingestion.search_text import build_search_text, derive_location
from app.ingestion.web_extractor import PageContent, load_page, normalize_url
from app.schemas.eligibility import Eligibility
from app.schemas.records import IngestResponse
from app.services.records import to_detail, to_service_summary
from app.utils.logging import get_logger
from app.utils.text import truncate_with_marker

logger = get_logger("eligibility.ingestion.service")

PDF_MIME_TYPE = "application/pdf"
HTML_MIME_TYPE = "text/html"

PageLoader = Callable[[str], Awaitable[PageContent]]
PdfParser = Callable[[bytes], ParsedPdf]


class IngestionService:
    def __init__(
        self,
        db: Session,
        extractor: EligibilityExtractor,
        *,
        search_config: SearchConfig | None = None,
        page_loader: PageLoader = load_page,
        pdf_parser: PdfParser = parse_pdf,
        max_raw_text_chars: int = 50_000,
    ):
        self.db = db
        self.extractor = extractor
        self.search_config = search_config or SearchConfig()
        self.page_loader = page_loader
        self.pdf_parser = pdf_parser
        self.max_raw_text_chars = max_raw_text_chars

    # ── PDF ─────────────────────────────────────────────────────────

    def ingest_pdf(self, file_name: str, mime_type: str | None, data: bytes) -> IngestResponse:
        if mime_type and mime_type != PDF_MIME_TYPE:
            raise UnsupportedDocumentError("Only PDF files are supported.")
        if not data:
            raise UnsupportedDocumentError("Uploaded file is empty.")

        digest = hashlib.sha256(data).hexdigest()
        parsed = self.pdf_parser(data)

        eligibility = self.extractor.extract(
            parsed.text, "pdf", file_name=file_name, title=parsed.title,
        )
        self._require_excerpt(
            eligibility,
            "We couldn't find clear service details in this PDF. Make sure the file "
            "describes who the service helps and what someone needs to do next.",
        )

        document = self._build_document(
            eligibility,
            file_name=file_name,
            file_size=len(data),
            mime_type=mime_type or PDF_MIME_TYPE,
            raw_text=truncate_with_marker(parsed.text, self.max_raw_text_chars),
            source_type="pdf",
            source_url=None,
            page_title=parsed.title,
            hash=digest,
        )
        return self._save(document)

    # ── Web page ────────────────────────────────────────────────────

    async def ingest_url(self, url: str) -> IngestResponse:
        normalized = normalize_url(url)
        page = await self.page_loader(normalized)
        if not page.text.strip():
            raise NoReadableTextError(
                "Could not extract readable text from the provided URL. Please try another page.",
                status_code=502,
            )

        eligibility = self.extractor.extract(
            page.text, "web", title=page.title, url=normalized,
        )
        self._require_excerpt(
            eligibility,
            "We parsed the page but could not identify any explicit eligibility "
            "language. Please verify the page contains eligibility details.",
        )

        document = self._build_document(
            eligibility,
            file_name=page.title or "web-page",
            file_size=len(page.text),
            mime_type=HTML_MIME_TYPE,
            raw_text=page.text,
            source_type="web",
            source_url=normalized,
            page_title=page.title,
            hash=None,
        )
        return self._save(document)

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    def _require_excerpt(eligibility: Eligibility, message: str) -> None:
        if not eligibility.raw_eligibility_text.strip():
            logger.info("[INGEST] No eligibility excerpt found; nothing stored")
            raise NoEligibilityFoundError(message)

    def _build_document(self, eligibility: Eligibility, **fields) -> EligibilityDocument:
        document = EligibilityDocument(
            raw_eligibility_text=eligibility.raw_eligibility_text,
            eligibility_json=eligibility.to_json(),
            program_name=eligibility.program_name,
            **fields,
        )
        apply_search_fields(document, eligibility)
        return document

    def _save(self, document: EligibilityDocument) -> IngestResponse:
        self.db.add(document)
        self.db.commit()
        self.db.refresh(document)
        logger.info(
            "[INGEST] Stored %s record %s | program=%s location=%s/%s/%s",
            document.source_type, document.id, document.program_name or "-",
            document.location_city or "-", document.location_county or "-",
            document.location_state or "-",
        )
        return IngestResponse(
            record=to_detail(document),
            service=to_service_summary(document, self.search_config),
        )


def apply_search_fields(document: EligibilityDocument, eligibility: Eligibility) -> bool:
    """
    (Re)compute derived location and search_text on ``document``.
    Returns True when any of those fields changed.
    """
    location = derive_location(eligibility)
    search_text = build_search_text(
        program_name=document.program_name,
        page_title=document.page_title,
        eligibility=eligibility,
        raw_eligibility_text=document.raw_eligibility_text or eligibility.raw_eligibility_text,
        location=location,
    )
    updates = {
        "location_city": location.city,
        "location_county": location.county,
        "location_state": location.state,
        "search_text": search_text,
    }
    changed = False
    for name, value in updates.items():
        if getattr(document, name) != value:
            setattr(document, name, value)
            changed = True
    return changed
