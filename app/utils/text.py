"""
Text helpers shared by the search pipeline, ingestion and record routes.

All functions are pure (no I/O, no DB, no LLM).
"""

from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")

ELLIPSIS = "…"


def collapse_whitespace(value: str | None) -> str:
    """Collapse every whitespace run to a single space and trim."""
    if not value:
        return ""
    return _WHITESPACE.sub(" ", value).strip()


def create_snippet(text: str | None, max_length: int, *, collapse: bool = False) -> str:
    """
    Truncate ``text`` to ``max_length`` characters, appending an ellipsis
    when anything was cut.
    """
    if not text:
        return ""
    cleaned = collapse_whitespace(text) if collapse else text
    if len(cleaned) <= max_length:
        return cleaned
    return f"{cleaned[:max_length]}{ELLIPSIS}"


def truncate_with_marker(text: str, max_length: int) -> str:
    """Hard cap for stored bodies; marks the cut so readers know."""
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}\n...[truncated]"


def title_case(value: str) -> str:
    """``"fort worth"`` -> ``"Fort Worth"`` (whitespace-normalised)."""
    return " ".join(
        part[:1].upper() + part[1:]
        for part in value.lower().split()
    )


def dedupe_casefold(values: list[str]) -> list[str]:
    """
    Drop blanks and case-insensitive duplicates, keeping the casing and
    position of the first occurrence.
    """
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        cleaned = (value or "").strip()
        if not cleaned:
            continue
        key = cleaned.casefold()
        if key in seen:
            continue
        seen.add(key)
        result.append(cleaned)
    return result
