"""
Candidate scoring and ordering.

All functions here are pure: no I/O, no DB, no LLM. ``now`` is passed
in so identical inputs always give identical scores.
"""

from __future__ import annotations

from datetime import datetime, timezone

from app.core.config import SearchConfig
from app.schemas.pipeline import CandidateRow, PipelineResult, SearchStage
from app.schemas.search import QueryHints


def stage_bonus(stage: SearchStage, config: SearchConfig) -> float:
    return {
        SearchStage.LOCALIZED: config.localized_stage_bonus,
        SearchStage.RELAXED: config.relaxed_stage_bonus,
        SearchStage.FUZZY: config.fuzzy_stage_bonus,
        SearchStage.FALLBACK: config.fallback_stage_bonus,
    }[SearchStage(stage)]


def recency_bonus(created_at: datetime | None, now: datetime, config: SearchConfig) -> float:
    """Linear decay from ``recency_max_bonus`` to 0 (180 days with defaults)."""
    if created_at is None:
        return 0.0
    age_days = (now - _as_utc(created_at)).total_seconds() / 86400
    return max(0.0, config.recency_max_bonus - age_days / config.recency_decay_days)


def matching_populations(row: CandidateRow, hints: QueryHints) -> list[str]:
    """Hint population tags that the record's structured population lists."""
    served = {p.casefold() for p in row.population}
    return [tag for tag in hints.populations if tag.casefold() in served]


def need_matches(row: CandidateRow, hints: QueryHints) -> list[tuple[str, str]]:
    """
    (need, where) for each need hint the record satisfies; ``where`` is
    "text" when search_text mentions it, else "requirements".
    """
    text = row.search_text.casefold()
    requirements = {r.casefold() for r in row.requirements}
    matches: list[tuple[str, str]] = []
    for need in hints.need_types:
        key = need.casefold()
        if key in text:
            matches.append((need, "text"))
        elif key in requirements:
            matches.append((need, "requirements"))
    return matches


def is_exact_city_match(row: CandidateRow, hints: QueryHints) -> bool:
    return bool(
        hints.city
        and row.location_city
        and row.location_city.strip().casefold() == hints.city.strip().casefold()
    )


def _prefix_match(value: str | None, prefix: str | None) -> bool:
    return bool(value and prefix and value.casefold().startswith(prefix.casefold()))


def score_result(
    result: PipelineResult,
    hints: QueryHints,
    config: SearchConfig,
    now: datetime,
) -> float:
    """Weighted sum of text, recency, locality, tag-overlap and stage signals."""
    row = result.row
    score = 0.0

    if row.rank is not None:
        score += row.rank * config.rank_weight
    if row.similarity is not None:
        score += row.similarity * config.similarity_weight

    score += recency_bonus(row.created_at, now, config)

    if is_exact_city_match(row, hints):
        score += config.city_match_bonus
    if _prefix_match(row.location_county, hints.county):
        score += config.county_match_bonus
    if _prefix_match(row.location_state, hints.state):
        score += config.state_match_bonus

    score += len(matching_populations(row, hints)) * config.population_match_bonus

    for _need, where in need_matches(row, hints):
        if where == "text":
            score += config.need_text_match_bonus
        else:
            score += config.need_requirement_match_bonus

    score += stage_bonus(result.stage, config)
    return score


def rank_results(
    results: list[PipelineResult],
    hints: QueryHints,
    config: SearchConfig,
    now: datetime | None = None,
) -> list[PipelineResult]:
    """
    Score every result and sort by score desc, then created_at desc.
    Returns new PipelineResult objects; the inputs are not modified.
    """
    now = now or datetime.now(timezone.utc)
    scored = [
        result.model_copy(update={"score": score_result(result, hints, config, now)})
        for result in results
    ]
    scored.sort(key=lambda r: (-r.score, -_timestamp(r.row.created_at)))
    return scored


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _timestamp(value: datetime | None) -> float:
    if value is None:
        return float("-inf")
    return _as_utc(value).timestamp()
