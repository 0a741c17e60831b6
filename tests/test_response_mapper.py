from datetime import datetime, timezone

from app.pipeline.response_mapper import (
    DEFAULT_REASON,
    FALLBACK_NOTE,
    FUZZY_NOTE,
    build_match_reasons,
    build_service_summary,
    match_tier_for,
    to_interpreted_filters,
)
from app.schemas.pipeline import PipelineResult, SearchStage

from conftest import make_hints, make_row


def test_match_tiers():
    assert match_tier_for(SearchStage.LOCALIZED) == "direct"
    assert match_tier_for(SearchStage.RELAXED) == "broader"
    assert match_tier_for(SearchStage.FUZZY) == "fuzzy"
    assert match_tier_for(SearchStage.FALLBACK) == "broader"


def test_service_summary_preview_is_collapsed_and_truncated(config):
    row = make_row(
        "r1",
        raw_eligibility_text="word   " * 100,
        created_at=datetime(2026, 9, 1, tzinfo=timezone.utc),
        eligibility={"population": ["youth"], "requirements": ["id_required"]},
    )

    summary = build_service_summary(row, config)

    assert len(summary.preview_eligibility_text) == 221
    assert summary.preview_eligibility_text.endswith("…")
    assert "  " not in summary.preview_eligibility_text
    assert summary.created_at == "2026-09-01T00:00:00+00:00"
    assert summary.population == ["youth"]
    assert summary.requirements == ["id_required"]


def test_summary_without_timestamp(config):
    summary = build_service_summary(make_row("r1", days_old=None), config)
    assert summary.created_at is None


def test_nearby_note_when_city_differs(config):
    row = make_row("r1", location_city="Frisco")
    result = PipelineResult(row=row, stage=SearchStage.RELAXED)

    reasons = build_match_reasons(result, make_hints(city="Plano"), config)

    assert reasons == ["Nearby option for Plano"]


def test_keyword_reason_lists_at_most_five(config):
    words = ["alpha", "bravo", "charlie", "delta", "echo", "foxtrot"]
    row = make_row("r1", search_text=" ".join(words))
    result = PipelineResult(row=row, stage=SearchStage.RELAXED)

    reasons = build_match_reasons(result, make_hints(keywords=words), config)

    assert reasons == ["Matches keywords: alpha, bravo, charlie, delta, echo"]


def test_stage_notes(config):
    row = make_row("r1")
    fuzzy = PipelineResult(row=row, stage=SearchStage.FUZZY)
    fallback = PipelineResult(row=row, stage=SearchStage.FALLBACK)

    assert build_match_reasons(fuzzy, make_hints(), config) == [FUZZY_NOTE]
    assert build_match_reasons(fallback, make_hints(), config) == [FALLBACK_NOTE]


def test_reasons_are_never_empty(config):
    result = PipelineResult(row=make_row("r1"), stage=SearchStage.RELAXED)

    assert build_match_reasons(result, make_hints(), config) == [DEFAULT_REASON]


def test_reasons_are_capped(config, plano_family_shelter):
    hints = make_hints(
        city="Plano",
        keywords=["plano"],
        populations=["families"],
        need_types=["shelter"],
    )
    result = PipelineResult(row=plano_family_shelter, stage=SearchStage.FUZZY)

    reasons = build_match_reasons(result, hints, config.model_copy(update={"max_match_reasons": 3}))

    assert reasons == [
        "Matches keywords: plano",
        "Located in Plano",
        "Serves: families",
    ]


def test_interpreted_filters_mirror_hints():
    hints = make_hints("beds in Dallas", city="Dallas", state="TX", need_types=["bed"])

    filters = to_interpreted_filters(hints)

    assert filters.model_dump(by_alias=True) == {
        "query": "beds in Dallas",
        "locationCity": "Dallas",
        "locationCounty": None,
        "state": "TX",
        "populations": [],
        "needTypes": ["bed"],
    }
