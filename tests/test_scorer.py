from datetime import timedelta

import pytest

from app.pipeline.scorer import rank_results, recency_bonus, score_result
from app.schemas.pipeline import PipelineResult, SearchStage

from conftest import make_hints, make_row


def test_recency_bonus_decays_linearly_to_zero(config, now):
    assert recency_bonus(now, now, config) == pytest.approx(6.0)
    assert recency_bonus(now - timedelta(days=30), now, config) == pytest.approx(5.0)
    assert recency_bonus(now - timedelta(days=180), now, config) == pytest.approx(0.0)
    assert recency_bonus(now - timedelta(days=400), now, config) == 0.0
    assert recency_bonus(None, now, config) == 0.0


def test_naive_timestamps_are_treated_as_utc(config, now):
    naive = (now - timedelta(days=30)).replace(tzinfo=None)
    assert recency_bonus(naive, now, config) == pytest.approx(5.0)


def test_full_score_breakdown(config, now, plano_family_shelter):
    row = plano_family_shelter.model_copy(update={"rank": 0.5})
    hints = make_hints(
        "family shelter in Plano",
        city="Plano",
        populations=["families"],
        need_types=["shelter"],
        keywords=["plano"],
    )
    result = PipelineResult(row=row, stage=SearchStage.LOCALIZED)

    expected = (
        0.5 * 2.0          # text rank
        + (6 - 2 / 30)     # recency, two days old
        + 1.5              # exact city
        + 1.2              # families
        + 0.8              # "shelter" in search_text
        + 1.5              # localized stage
    )
    assert score_result(result, hints, config, now) == pytest.approx(expected)


def test_county_and_state_use_prefix_matching(config, now):
    row = make_row("r1", location_county="Dallas County", location_state="TX", days_old=None)
    hints = make_hints(county="dallas", state="tx")
    result = PipelineResult(row=row, stage=SearchStage.FALLBACK)

    assert score_result(result, hints, config, now) == pytest.approx(1.0 + 0.75)


def test_city_bonus_requires_exact_match(config, now):
    row = make_row("r1", location_city="Plano East", days_old=None)
    result = PipelineResult(row=row, stage=SearchStage.FALLBACK)

    assert score_result(result, make_hints(city="Plano"), config, now) == 0.0
    assert score_result(result, make_hints(city="plano east"), config, now) == pytest.approx(1.5)


def test_need_text_match_preferred_over_requirement_match(config, now):
    row = make_row(
        "r1",
        search_text="Sober living program",
        eligibility={"requirements": ["sober", "id_required"]},
        days_old=None,
    )
    hints = make_hints(need_types=["sober", "id_required"])
    result = PipelineResult(row=row, stage=SearchStage.FUZZY)

    assert score_result(result, hints, config, now) == pytest.approx(0.8 + 0.6)


def test_similarity_and_stage_bonus(config, now):
    row = make_row("r1", similarity=0.4, days_old=None)
    relaxed = PipelineResult(row=row, stage=SearchStage.RELAXED)
    fuzzy = PipelineResult(row=row, stage=SearchStage.FUZZY)

    assert score_result(relaxed, make_hints(), config, now) == pytest.approx(0.4 + 0.5)
    assert score_result(fuzzy, make_hints(), config, now) == pytest.approx(0.4)


def test_score_is_deterministic(config, now, plano_family_shelter):
    result = PipelineResult(row=plano_family_shelter, stage=SearchStage.RELAXED)
    hints = make_hints(city="Plano", populations=["families"])

    assert score_result(result, hints, config, now) == score_result(result, hints, config, now)


def test_rank_results_orders_by_score_then_recency(config, now):
    old = make_row("old", days_old=400)
    older = make_row("older", days_old=500)
    undated = make_row("undated", days_old=None)
    fresh = make_row("fresh", days_old=0)
    results = [
        PipelineResult(row=row, stage=SearchStage.FALLBACK)
        for row in (undated, older, fresh, old)
    ]

    ranked = rank_results(results, make_hints(), config, now)

    assert [r.row.id for r in ranked] == ["fresh", "old", "older", "undated"]
    assert ranked[0].score == pytest.approx(6.0)
    assert all(r.score == 0.0 for r in results)
