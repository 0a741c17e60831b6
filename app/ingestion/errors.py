"""
Ingestion error taxonomy.

Raised by the parsers, the extractor and IngestionService; the API layer
renders them as ``{"error": code, "message": message}``.
"""

from __future__ import annotations


class IngestionError(Exception):
    """Base class for document ingestion failures."""
    code = "ingestion_failed"
    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class UnsupportedDocumentError(IngestionError):
    """Wrong mime type, empty upload or malformed URL."""
    code = "invalid_request"
    status_code = 400


class DocumentFetchError(IngestionError):
    code = "fetch_failed"
    status_code = 502


class NoReadableTextError(IngestionError):
    """Parsed successfully but nothing readable came out (scanned PDF, empty page)."""
    code = "no_readable_text"
    status_code = 422


class NoEligibilityFoundError(IngestionError):
    code = "no_eligibility_found"
    status_code = 422


class ExtractionFailedError(IngestionError):
    code = "extraction_failed"
    status_code = 500


class ExtractorNotConfiguredError(IngestionError):
    code = "extractor_not_configured"
    status_code = 503
