"""
Search orchestrator: top-level entry point.

Validates the request, interprets the query, runs the stage cascade
(localized -> relaxed -> fuzzy -> fallback) with first-write-wins
de-duplication, then scores, sorts, truncates and maps the results.
Each step is independently callable.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from app.core.config import SearchConfig
from app.pipeline.errors import InvalidSearchRequestError, SearchStorageError
from app.pipeline.query_interpreter import interpret_query
from app.pipeline.response_mapper import build_result_items, to_interpreted_filters
from app.pipeline.scorer import rank_results
from app.pipeline.stages import SearchStore
from app.pipeline.vocabulary import DEFAULT_VOCABULARY, QueryVocabulary
from app.schemas.pipeline import CandidateRow, CascadeResult, PipelineResult, SearchStage
from app.schemas.search import QueryHints, SearchFilters, SearchResponse
from app.utils.logging import get_logger
from app.utils.timing import Timer

logger = get_logger("eligibility.pipeline.orchestrator")

STAGE_ORDER: tuple[SearchStage, ...] = (
    SearchStage.LOCALIZED,
    SearchStage.RELAXED,
    SearchStage.FUZZY,
    SearchStage.FALLBACK,
)


def run_search(
    store: SearchStore,
    query: str | None,
    *,
    limit: int | None = None,
    filters: SearchFilters | None = None,
    config: SearchConfig | None = None,
    vocabulary: QueryVocabulary = DEFAULT_VOCABULARY,
    now: datetime | None = None,
) -> SearchResponse:
    """
    Execute one search.

    Raises InvalidSearchRequestError before touching storage when the
    query is blank or the limit is out of range, and SearchStorageError
    when any stage query fails.
    """
    config = config or SearchConfig()
    trimmed = (query or "").strip()
    if not trimmed:
        raise InvalidSearchRequestError("Query is required.")
    effective_limit = resolve_limit(limit, config)

    logger.info("[SEARCH] Started | query=%s limit=%s", trimmed[:80], effective_limit)

    with Timer("search") as t:
        hints = interpret_query(trimmed, filters, vocabulary)
        cascade = run_cascade(store, hints, effective_limit, config)

        now = now or datetime.now(timezone.utc)
        ranked = rank_results(list(cascade.candidates.values()), hints, config, now)
        items = build_result_items(ranked[:effective_limit], hints, config)

    logger.info(
        "[SEARCH] Done (%.1fms) | candidates=%s returned=%s stages=%s",
        t.elapsed_ms,
        len(cascade.candidates),
        len(items),
        [stage.value for stage in cascade.stages_fired],
    )
    return SearchResponse(
        query=trimmed,
        interpreted_filters=to_interpreted_filters(hints),
        results=items,
    )


def resolve_limit(limit: int | None, config: SearchConfig) -> int:
    if limit is None:
        return config.default_limit
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidSearchRequestError("Limit must be an integer.")
    if limit < 1 or limit > config.max_limit:
        raise InvalidSearchRequestError(
            f"Limit must be between 1 and {config.max_limit}."
        )
    return limit


def oversample_limit(limit: int, config: SearchConfig) -> int:
    """Rows requested from each stage: limit * factor, capped."""
    return min(limit * config.oversample_factor, config.oversample_cap)


# ── Cascade ─────────────────────────────────────────────────────────

def run_cascade(
    store: SearchStore,
    hints: QueryHints,
    limit: int,
    config: SearchConfig,
) -> CascadeResult:
    """
    Run the stages in order, skipping those whose trigger is not met.

      localized  only when the hints carry a city or county
      relaxed    while fewer than ``min_strong_matches`` candidates
      fuzzy      while fewer than ``limit`` candidates
      fallback   while fewer than ``limit`` candidates

    A record keeps the stage that first produced it.
    """
    fetch_limit = oversample_limit(limit, config)
    candidates: dict[str, PipelineResult] = {}
    stages_fired: list[SearchStage] = []

    for stage in STAGE_ORDER:
        if not should_run_stage(stage, hints, len(candidates), limit, config):
            logger.debug("[CASCADE] %s skipped | candidates=%s", stage.value, len(candidates))
            continue

        with Timer(f"stage_{stage.value}") as t:
            rows = _execute_stage(stage, store, hints, fetch_limit)
        if rows:
            stages_fired.append(stage)

        before = len(candidates)
        candidates = merge_stage_rows(candidates, rows, stage)
        logger.info(
            "[CASCADE] %s (%.1fms) | rows=%s new=%s total=%s",
            stage.value, t.elapsed_ms, len(rows), len(candidates) - before, len(candidates),
        )

    return CascadeResult(candidates=candidates, stages_fired=stages_fired)


def should_run_stage(
    stage: SearchStage,
    hints: QueryHints,
    candidate_count: int,
    limit: int,
    config: SearchConfig,
) -> bool:
    if stage == SearchStage.LOCALIZED:
        return hints.has_locality
    if stage == SearchStage.RELAXED:
        return candidate_count < config.min_strong_matches
    return candidate_count < limit


def merge_stage_rows(
    candidates: dict[str, PipelineResult],
    rows: list[CandidateRow],
    stage: SearchStage,
) -> dict[str, PipelineResult]:
    """Return a new map with ``rows`` added; existing ids are never replaced."""
    merged = dict(candidates)
    for row in rows:
        if row.id in merged:
            continue
        merged[row.id] = PipelineResult(row=row, stage=stage)
    return merged


def _stage_executor(
    stage: SearchStage, store: SearchStore,
) -> Callable[[QueryHints, int], list[CandidateRow]]:
    return {
        SearchStage.LOCALIZED: store.localized_full_text,
        SearchStage.RELAXED: store.relaxed_full_text,
        SearchStage.FUZZY: store.fuzzy_similarity,
        SearchStage.FALLBACK: store.fallback_recency,
    }[stage]


def _execute_stage(
    stage: SearchStage,
    store: SearchStore,
    hints: QueryHints,
    fetch_limit: int,
) -> list[CandidateRow]:
    executor = _stage_executor(stage, store)
    try:
        return list(executor(hints, fetch_limit))
    except Exception as exc:
        logger.error("[CASCADE] %s stage failed: %s", stage.value, exc, exc_info=True)
        raise SearchStorageError() from exc
