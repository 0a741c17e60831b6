"""
Search stage 6: map ranked results to the public response shape.

Produces the service summary card, a short list of human-readable match
reasons and the match tier for each result.
"""

from __future__ import annotations

from app.core.config import SearchConfig
from app.pipeline.scorer import is_exact_city_match, matching_populations, need_matches
from app.schemas.pipeline import CandidateRow, PipelineResult, SearchStage
from app.schemas.search import (
    InterpretedFilters,
    MatchTier,
    QueryHints,
    SearchResultItem,
    ServiceSummary,
)
from app.utils.text import create_snippet

_TIER_BY_STAGE = {
    SearchStage.LOCALIZED: MatchTier.DIRECT,
    SearchStage.RELAXED: MatchTier.BROADER,
    SearchStage.FUZZY: MatchTier.FUZZY,
    SearchStage.FALLBACK: MatchTier.BROADER,
}

FUZZY_NOTE = "Fuzzy match on similar wording"
FALLBACK_NOTE = "Showing broader options in the region"
DEFAULT_REASON = "Recently added to your library"


def match_tier_for(stage: SearchStage) -> MatchTier:
    return _TIER_BY_STAGE[SearchStage(stage)]


def build_service_summary(row: CandidateRow, config: SearchConfig) -> ServiceSummary:
    return ServiceSummary(
        id=row.id,
        program_name=row.program_name,
        source_type=row.source_type,
        source_url=row.source_url,
        page_title=row.page_title,
        created_at=row.created_at.isoformat() if row.created_at else None,
        preview_eligibility_text=create_snippet(
            row.raw_eligibility_text, config.preview_length, collapse=True,
        ),
        location_city=row.location_city,
        location_county=row.location_county,
        location_state=row.location_state,
        population=row.population,
        requirements=row.requirements,
    )


def build_match_reasons(
    result: PipelineResult,
    hints: QueryHints,
    config: SearchConfig,
) -> list[str]:
    """
    Explain why a result was returned, most specific signal first.
    Never empty; capped at ``config.max_match_reasons``.
    """
    row = result.row
    reasons: list[str] = []

    text = row.search_text.casefold()
    matched_keywords = [k for k in hints.keywords if k.casefold() in text]
    if matched_keywords:
        shown = matched_keywords[: config.max_keyword_reasons]
        reasons.append(f"Matches keywords: {', '.join(shown)}")

    if is_exact_city_match(row, hints):
        reasons.append(f"Located in {row.location_city}")
    elif hints.city:
        reasons.append(f"Nearby option for {hints.city}")

    populations = matching_populations(row, hints)
    if populations:
        reasons.append(f"Serves: {', '.join(populations)}")

    needs = [need for need, _where in need_matches(row, hints)]
    if needs:
        reasons.append(f"Matches need: {', '.join(needs)}")

    stage = SearchStage(result.stage)
    if stage == SearchStage.FUZZY:
        reasons.append(FUZZY_NOTE)
    elif stage == SearchStage.FALLBACK:
        reasons.append(FALLBACK_NOTE)

    if not reasons:
        reasons.append(DEFAULT_REASON)
    return reasons[: config.max_match_reasons]


def build_result_items(
    results: list[PipelineResult],
    hints: QueryHints,
    config: SearchConfig,
) -> list[SearchResultItem]:
    return [
        SearchResultItem(
            service=build_service_summary(result.row, config),
            match_reason=build_match_reasons(result, hints, config),
            match_tier=match_tier_for(result.stage),
        )
        for result in results
    ]


def to_interpreted_filters(hints: QueryHints) -> InterpretedFilters:
    return InterpretedFilters(
        query=hints.query,
        location_city=hints.city,
        location_county=hints.county,
        state=hints.state,
        populations=hints.populations,
        need_types=hints.need_types,
    )
