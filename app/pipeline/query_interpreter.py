"""
Search stage 0: rule-based query interpretation.

Turns a free-text query plus optional explicit filters into QueryHints:
location guesses, population / need-type tags and free keywords.
Zero cost, no I/O, never raises: a missing signal is None or [].
"""

from __future__ import annotations

import re

from app.pipeline.vocabulary import DEFAULT_VOCABULARY, QueryVocabulary
from app.schemas.search import QueryHints, SearchFilters
from app.utils.logging import get_logger
from app.utils.text import dedupe_casefold, title_case

logger = get_logger("eligibility.pipeline.query_interpreter")

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")
_TWO_LETTER_TOKEN = re.compile(r"\b[A-Za-z]{2}\b")


def interpret_query(
    query: str,
    filters: SearchFilters | None = None,
    vocabulary: QueryVocabulary = DEFAULT_VOCABULARY,
) -> QueryHints:
    """
    Build QueryHints for ``query``.

    Explicit ``filters`` always win over inferred values for scalar
    fields; list fields are unioned (explicit first) and de-duplicated
    case-insensitively.
    """
    trimmed = (query or "").strip()
    lowered = trimmed.lower()

    city = extract_city(lowered, vocabulary)
    county = extract_county(lowered, vocabulary)
    state = extract_state(trimmed, vocabulary)
    populations = extract_tags(lowered, vocabulary.population_terms)
    need_types = extract_tags(lowered, vocabulary.need_terms)
    keywords = extract_keywords(lowered, vocabulary)

    filters = filters or SearchFilters()

    hints = QueryHints(
        query=trimmed,
        normalized_query=lowered,
        keywords=keywords,
        city=_clean(filters.location_city) or city,
        county=_clean(filters.location_county) or county,
        state=_clean(filters.state) or state,
        populations=dedupe_casefold([*filters.populations, *populations]),
        need_types=dedupe_casefold([*filters.need_types, *need_types]),
    )

    logger.info(
        "[INTERPRET] city=%s county=%s state=%s populations=%s needs=%s keywords=%s",
        hints.city or "-", hints.county or "-", hints.state or "-",
        hints.populations, hints.need_types, hints.keywords,
    )
    return hints


# ── Location ────────────────────────────────────────────────────────

def extract_city(lowered: str, vocabulary: QueryVocabulary = DEFAULT_VOCABULARY) -> str | None:
    """
    Try each prepositional pattern ("in X,", "near X" ...) in order and
    return the first usable place name, title-cased.
    """
    subject = lowered.rstrip(" ?!.")
    if not subject:
        return None

    for pattern in vocabulary.compiled_location_patterns():
        match = pattern.search(subject)
        if not match:
            continue
        candidate = _clean_city_candidate(match.group(1), vocabulary)
        if candidate:
            return title_case(candidate)
    return None


def _clean_city_candidate(raw: str, vocabulary: QueryVocabulary) -> str | None:
    tokens: list[str] = []
    blocked = vocabulary.stopwords | vocabulary.vocabulary_words
    # "plano for families" -> "plano"
    for token in raw.strip(" .'-").split():
        if token in blocked:
            break
        tokens.append(token)
    if not tokens:
        return None

    # "plano tx" / "plano texas" -> "plano"
    if len(tokens) > 1 and tokens[-1].upper() in vocabulary.state_abbreviations:
        tokens = tokens[:-1]
    candidate = " ".join(tokens)
    for name in vocabulary.state_names:
        if candidate.endswith(" " + name):
            candidate = candidate[: -len(name) - 1].strip()
            break

    if not candidate or candidate in vocabulary.state_names:
        return None
    if candidate.split()[-1] in vocabulary.county_suffixes:
        return None
    return candidate


def extract_county(lowered: str, vocabulary: QueryVocabulary = DEFAULT_VOCABULARY) -> str | None:
    """
    Match "<name> county|parish|borough" and title-case it.

    The name is the single word before the suffix; the word ahead of it
    is kept only for known two-word names ("fort bend", "san patricio"),
    so "food bank harris county" yields "Harris County".
    """
    match = re.search(vocabulary.county_pattern, lowered)
    if not match:
        return None

    blocked = vocabulary.stopwords | vocabulary.vocabulary_words
    tokens = match.group(1).split()
    if tokens[-1] in blocked:
        return None
    if len(tokens) > 1 and tokens[-2] not in vocabulary.multiword_county_prefixes:
        tokens = tokens[-1:]
    return title_case(f"{' '.join(tokens)} {match.group(2)}")


def extract_state(query: str, vocabulary: QueryVocabulary = DEFAULT_VOCABULARY) -> str | None:
    """
    Full state names first (longest first, so "west virginia" beats
    "virginia"); otherwise a bare two-letter abbreviation token.
    """
    lowered = query.lower()
    for name in sorted(vocabulary.state_names, key=len, reverse=True):
        if re.search(rf"\b{re.escape(name)}\b", lowered):
            return vocabulary.state_names[name]

    abbreviations = vocabulary.state_abbreviations
    for token in _TWO_LETTER_TOKEN.findall(query):
        candidate = token.upper()
        if candidate not in abbreviations:
            continue
        # "in", "or", "me" ... only count when typed as "IN", "OR", "ME"
        if token.isupper() or token.lower() not in vocabulary.ambiguous_abbreviations:
            return candidate
    return None


# ── Tags and keywords ───────────────────────────────────────────────

def extract_tags(lowered: str, terms: dict[str, str]) -> list[str]:
    """
    Collect the canonical tag of every vocabulary term found in the query.

    Terms match at the start of a word ("teen" finds "teens"); terms of
    three letters or fewer must be the whole word, plural allowed, so
    "men" does not fire on "women" or "mental".
    """
    tags: list[str] = []
    for term, tag in terms.items():
        escaped = re.escape(term)
        pattern = rf"\b{escaped}s?\b" if len(term) <= 3 else rf"\b{escaped}"
        if re.search(pattern, lowered):
            tags.append(tag)
    return dedupe_casefold(tags)


def extract_keywords(lowered: str, vocabulary: QueryVocabulary = DEFAULT_VOCABULARY) -> list[str]:
    """Tokens longer than 2 chars that are neither stopwords nor tag terms."""
    blocked = vocabulary.stopwords | vocabulary.vocabulary_words
    keywords: list[str] = []
    seen: set[str] = set()
    for token in _TOKEN_SPLIT.split(lowered):
        if len(token) <= 2 or token in blocked or token in seen:
            continue
        seen.add(token)
        keywords.append(token)
    return keywords


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None
