"""
OpenAI client singleton.

The extractor receives its client explicitly; this module is the one
place that builds it from settings.
"""

from __future__ import annotations

import threading

from openai import OpenAI

from app.core.config import Settings, settings
from app.ingestion.errors import ExtractorNotConfiguredError
from app.utils.logging import get_logger

logger = get_logger("eligibility.services.llm")

_client_lock = threading.Lock()
_client_instance: OpenAI | None = None


def build_openai_client(config: Settings) -> OpenAI:
    """Raises ExtractorNotConfiguredError when the API key is missing."""
    if not config.openai_api_key:
        raise ExtractorNotConfiguredError(
            "Eligibility extraction is not configured (OPENAI_API_KEY)."
        )
    return OpenAI(api_key=config.openai_api_key, timeout=config.http_timeout_seconds * 3)


def get_openai_client() -> OpenAI:
    """Return a module-level OpenAI client singleton built from ``settings``."""
    global _client_instance
    if _client_instance is not None:
        return _client_instance

    with _client_lock:
        if _client_instance is not None:
            return _client_instance
        _client_instance = build_openai_client(settings)
        logger.info("OpenAI client singleton initialized.")
        return _client_instance
