"""
Derived location fields and the ``search_text`` surrogate for a record.

``search_text`` feeds the generated ``search_tsv`` column and the trigram
index, so everything a searcher might type about a program goes in here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from app.pipeline.query_interpreter import extract_county, extract_state
from app.pipeline.vocabulary import DEFAULT_VOCABULARY, KNOWN_CITIES, QueryVocabulary
from app.schemas.eligibility import Eligibility
from app.utils.text import collapse_whitespace, title_case

_PART_SPLIT = re.compile(r"[,\-]")


@dataclass
class DerivedLocation:
    city: str | None = None
    county: str | None = None
    state: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.city or self.county or self.state)


def _is_county(value: str, vocabulary: QueryVocabulary) -> bool:
    words = value.lower().split()
    return bool(words) and any(w in vocabulary.county_suffixes for w in words)


def _is_state(value: str, vocabulary: QueryVocabulary) -> bool:
    lowered = value.lower().strip()
    return lowered in vocabulary.state_names or value.strip().upper() in vocabulary.state_abbreviations


def _strip_trailing_state(value: str, vocabulary: QueryVocabulary) -> str:
    tokens = value.split()
    if len(tokens) > 1 and tokens[-1].upper() in vocabulary.state_abbreviations:
        tokens = tokens[:-1]
    stripped = " ".join(tokens)
    lowered = stripped.lower()
    for name in sorted(vocabulary.state_names, key=len, reverse=True):
        if lowered.endswith(" " + name):
            return stripped[: -len(name) - 1].strip()
    return stripped


def parse_location_hint(
    raw: str,
    vocabulary: QueryVocabulary = DEFAULT_VOCABULARY,
    known_cities: tuple[str, ...] = KNOWN_CITIES,
) -> DerivedLocation:
    """
    Parse one free-text location constraint such as "Dallas County, TX"
    or "Residents of Plano".

    With a state present, the leading comma/dash separated part is the
    county when it carries a county suffix, otherwise the city. Without
    one, the county comes from a "<name> county" phrase and the city from
    the known-city list.
    """
    normalized = collapse_whitespace(raw)
    if not normalized:
        return DerivedLocation()

    lowered = normalized.lower()
    state = extract_state(normalized, vocabulary)
    location = DerivedLocation(state=state)

    if state:
        parts = [p.strip() for p in _PART_SPLIT.split(normalized)]
        leading = _strip_trailing_state(parts[0], vocabulary) if parts else ""
        if leading and _is_state(leading, vocabulary):
            leading = ""
        if leading and _is_county(leading, vocabulary):
            location.county = extract_county(leading.lower(), vocabulary) or title_case(leading)
        elif leading:
            location.city = title_case(leading)

        if not location.county:
            for part in parts[1:]:
                if _is_county(part, vocabulary):
                    location.county = extract_county(part.lower(), vocabulary) or title_case(part)
                    break
        return location

    location.county = extract_county(lowered, vocabulary)
    for city in known_cities:
        if re.search(rf"\b{re.escape(city)}\b", lowered):
            location.city = title_case(city)
            break
    return location


def derive_location(
    eligibility: Eligibility,
    vocabulary: QueryVocabulary = DEFAULT_VOCABULARY,
) -> DerivedLocation:
    """First location constraint that yields any of city/county/state."""
    for hint in eligibility.location_constraints:
        parsed = parse_location_hint(hint, vocabulary)
        if not parsed.is_empty:
            return parsed
    return DerivedLocation()


def build_search_text(
    *,
    program_name: str | None,
    page_title: str | None,
    eligibility: Eligibility,
    raw_eligibility_text: str,
    location: DerivedLocation,
) -> str:
    pieces = [
        program_name,
        eligibility.program_name,
        page_title,
        location.city,
        location.county,
        location.state,
        " ".join(eligibility.population),
        " ".join(eligibility.requirements),
        " ".join(eligibility.location_constraints),
        eligibility.notes,
        raw_eligibility_text,
    ]
    return " ".join(
        cleaned for cleaned in (collapse_whitespace(p) for p in pieces) if cleaned
    )
