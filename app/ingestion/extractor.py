"""
LLM-backed eligibility extraction.

Sends the (capped) source text to a chat model in JSON mode and
validates the reply into an ``Eligibility``. Any reply that is empty,
not JSON or fails validation raises ExtractionFailedError.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from app.ingestion.errors import ExtractionFailedError
from app.prompts.eligibility import build_eligibility_prompt
from app.schemas.eligibility import Eligibility
from app.utils.logging import get_logger
from app.utils.timing import Timer

logger = get_logger("eligibility.ingestion.extractor")

DEFAULT_MAX_PDF_CHARS = 50_000
DEFAULT_MAX_PAGE_CHARS = 20_000


class EligibilityExtractor:
    """
    Args:
        client: an ``openai.OpenAI`` (or compatible) client.
        model: chat model name.
    """

    def __init__(
        self,
        client: Any,
        model: str,
        *,
        max_pdf_chars: int = DEFAULT_MAX_PDF_CHARS,
        max_page_chars: int = DEFAULT_MAX_PAGE_CHARS,
        temperature: float = 0.0,
    ):
        self.client = client
        self.model = model
        self.max_pdf_chars = max_pdf_chars
        self.max_page_chars = max_page_chars
        self.temperature = temperature

    def source_cap(self, source_type: str) -> int:
        return self.max_page_chars if source_type == "web" else self.max_pdf_chars

    def extract(
        self,
        text: str,
        source_type: str,
        *,
        file_name: str | None = None,
        title: str | None = None,
        url: str | None = None,
    ) -> Eligibility:
        capped = text[: self.source_cap(source_type)]
        system_prompt, user_prompt = build_eligibility_prompt(
            capped, source_type, file_name=file_name, title=title, url=url,
        )

        with Timer("eligibility_extraction") as t:
            try:
                response = self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    response_format={"type": "json_object"},
                    temperature=self.temperature,
                )
            except Exception as exc:
                logger.error("[EXTRACT] LLM call failed: %s", exc, exc_info=True)
                raise ExtractionFailedError(
                    "Failed to analyze the document. Please try again."
                ) from exc

        logger.info(
            "[EXTRACT] %s (%.1fms) | model=%s chars=%s",
            source_type, t.elapsed_ms, self.model, len(capped),
        )
        return parse_extraction_reply(response)


def parse_extraction_reply(response: Any) -> Eligibility:
    """Validate a chat-completion response into an Eligibility."""
    if not getattr(response, "choices", None):
        raise ExtractionFailedError("The extractor returned no choices.")

    raw = response.choices[0].message.content
    if not raw or not raw.strip():
        raise ExtractionFailedError("The extractor returned an empty reply.")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("[EXTRACT] Invalid JSON reply: %s", exc)
        raise ExtractionFailedError("The extractor returned invalid JSON.") from exc

    if not isinstance(data, dict):
        raise ExtractionFailedError("The extractor reply was not a JSON object.")

    try:
        return Eligibility.model_validate(data)
    except ValidationError as exc:
        logger.warning("[EXTRACT] Reply failed validation: %s", exc.errors()[:3])
        raise ExtractionFailedError(
            "The extractor reply did not match the eligibility schema."
        ) from exc
