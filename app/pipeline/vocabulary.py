"""
Vocabularies and patterns used to interpret search queries and parse
location constraints.

Kept as data so they can be swapped or extended without touching the
interpreter: pass a different ``QueryVocabulary`` to ``interpret_query``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field


# ── US states: full name -> abbreviation (scan order matters) ───────
STATE_NAMES: dict[str, str] = {
    "alabama": "AL",
    "alaska": "AK",
    "arizona": "AZ",
    "arkansas": "AR",
    "california": "CA",
    "colorado": "CO",
    "connecticut": "CT",
    "delaware": "DE",
    "district of columbia": "DC",
    "florida": "FL",
    "georgia": "GA",
    "hawaii": "HI",
    "idaho": "ID",
    "illinois": "IL",
    "indiana": "IN",
    "iowa": "IA",
    "kansas": "KS",
    "kentucky": "KY",
    "louisiana": "LA",
    "maine": "ME",
    "maryland": "MD",
    "massachusetts": "MA",
    "michigan": "MI",
    "minnesota": "MN",
    "mississippi": "MS",
    "missouri": "MO",
    "montana": "MT",
    "nebraska": "NE",
    "nevada": "NV",
    "new hampshire": "NH",
    "new jersey": "NJ",
    "new mexico": "NM",
    "new york": "NY",
    "north carolina": "NC",
    "north dakota": "ND",
    "ohio": "OH",
    "oklahoma": "OK",
    "oregon": "OR",
    "pennsylvania": "PA",
    "rhode island": "RI",
    "south carolina": "SC",
    "south dakota": "SD",
    "tennessee": "TN",
    "texas": "TX",
    "utah": "UT",
    "vermont": "VT",
    "virginia": "VA",
    "washington": "WA",
    "west virginia": "WV",
    "wisconsin": "WI",
    "wyoming": "WY",
}

STATE_ABBREVIATIONS: frozenset[str] = frozenset(STATE_NAMES.values())

# Abbreviations that are also everyday words; only trusted when typed in caps
AMBIGUOUS_ABBREVIATIONS: frozenset[str] = frozenset({
    "al", "co", "de", "hi", "id", "in", "la", "ma", "me", "mo", "ne",
    "oh", "ok", "or", "pa", "wa",
})

COUNTY_SUFFIXES: tuple[str, ...] = ("county", "parish", "borough")

# Used when parsing free-text location constraints that carry no state
KNOWN_CITIES: tuple[str, ...] = (
    "atlanta", "austin", "baltimore", "boston", "charlotte", "chicago",
    "cleveland", "columbus", "dallas", "denver", "detroit", "fort worth",
    "houston", "indianapolis", "jacksonville", "kansas city", "las vegas",
    "los angeles", "miami", "milwaukee", "minneapolis", "nashville",
    "new orleans", "new york", "oakland", "oklahoma city", "orlando",
    "philadelphia", "phoenix", "pittsburgh", "plano", "portland",
    "sacramento", "san antonio", "san diego", "san francisco", "san jose",
    "seattle", "st louis", "tampa", "tucson", "washington",
)


# ── Query location patterns, tried in order on the lowercase query ──
_PLACE = r"([a-z][a-z .'\-]*?)"

LOCATION_PATTERNS: tuple[str, ...] = (
    rf"\bin {_PLACE},",
    rf"\bin {_PLACE}$",
    rf"\bnear {_PLACE},",
    rf"\bnear {_PLACE}$",
    rf"\baround {_PLACE}$",
    rf"\bfor {_PLACE},",
)

COUNTY_PATTERN = (
    r"\b([a-z.'\-]+(?:\s+[a-z.'\-]+)?)\s+(" + "|".join(COUNTY_SUFFIXES) + r")\b"
)

# First words of two-word county names ("san patricio", "fort bend", "st louis")
MULTIWORD_COUNTY_PREFIXES: frozenset[str] = frozenset({
    "de", "del", "el", "fort", "la", "las", "los", "new", "palm", "prince",
    "saint", "san", "santa", "st", "st.", "ste", "van",
})


# ── Tag vocabularies: query term -> canonical tag ───────────────────
POPULATION_TERMS: dict[str, str] = {
    "youth": "youth",
    "teen": "youth",
    "teens": "youth",
    "teen boys": "youth",
    "teen girls": "youth",
    "family": "families",
    "families": "families",
    "women": "women",
    "men": "men",
    "lgbtq": "lgbtq",
    "veteran": "veterans",
    "veterans": "veterans",
    "seniors": "seniors",
    "children": "families",
    "kids": "families",
}

NEED_TERMS: dict[str, str] = {
    "shelter": "shelter",
    "housing": "housing",
    "voucher": "voucher",
    "rapid rehousing": "rapid rehousing",
    "bed": "bed",
    "food": "food",
    "meal": "meal",
    "clothing": "clothing",
    "rent": "rent",
    "utility": "utility",
}

STOPWORDS: frozenset[str] = frozenset({
    "a", "an", "the", "and", "or", "but", "for", "in", "near", "around",
    "with", "without", "to", "of", "on", "at", "by", "from", "into", "about",
    "i", "me", "my", "we", "our", "you", "your", "they", "them", "their",
    "he", "she", "his", "her", "it", "its", "who", "what", "where", "which",
    "when", "that", "this", "these", "those", "is", "are", "am", "was",
    "be", "been", "can", "could", "would", "should", "will", "do", "does",
    "any", "some", "all", "please", "need", "needs", "needing", "looking",
    "find", "finding", "help", "helping", "get", "want", "there", "have",
    "has", "just", "like", "also", "than", "then", "not", "no", "yes",
    "how", "program", "programs", "service", "services", "options",
    "option", "place", "places", "area", "local", "nearby", "available",
    "someone", "person", "people", "client", "clients", "currently",
})


@dataclass(frozen=True)
class QueryVocabulary:
    """Bundle of everything the interpreter matches against."""
    state_names: dict[str, str] = field(default_factory=lambda: dict(STATE_NAMES))
    ambiguous_abbreviations: frozenset[str] = AMBIGUOUS_ABBREVIATIONS
    county_suffixes: tuple[str, ...] = COUNTY_SUFFIXES
    location_patterns: tuple[str, ...] = LOCATION_PATTERNS
    county_pattern: str = COUNTY_PATTERN
    multiword_county_prefixes: frozenset[str] = MULTIWORD_COUNTY_PREFIXES
    population_terms: dict[str, str] = field(default_factory=lambda: dict(POPULATION_TERMS))
    need_terms: dict[str, str] = field(default_factory=lambda: dict(NEED_TERMS))
    stopwords: frozenset[str] = STOPWORDS

    @property
    def state_abbreviations(self) -> frozenset[str]:
        return frozenset(self.state_names.values())

    @property
    def vocabulary_words(self) -> frozenset[str]:
        """Single words that belong to a tag term; never free keywords."""
        words: set[str] = set()
        for term in (*self.population_terms, *self.need_terms):
            words.add(term)
            words.update(term.split())
        return frozenset(words)

    def compiled_location_patterns(self) -> list[re.Pattern[str]]:
        return [re.compile(p) for p in self.location_patterns]


DEFAULT_VOCABULARY = QueryVocabulary()
