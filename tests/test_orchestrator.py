import pytest

from app.core.config import SearchConfig
from app.pipeline.errors import InvalidSearchRequestError, SearchStorageError
from app.pipeline.orchestrator import (
    merge_stage_rows,
    oversample_limit,
    run_cascade,
    run_search,
)
from app.pipeline.response_mapper import FALLBACK_NOTE
from app.schemas.pipeline import SearchStage
from app.schemas.search import SearchFilters

from conftest import FakeStore, make_hints, make_row


def _rows(prefix: str, count: int, **fields):
    return [make_row(f"{prefix}-{i}", **fields) for i in range(count)]


# ── Scenarios ───────────────────────────────────────────────────────

def test_localized_match_is_direct_with_city_and_population_reasons(now, plano_family_shelter):
    elsewhere = make_row("dallas-1", location_city="Dallas", search_text="family shelter dallas")
    store = FakeStore(localized=[plano_family_shelter], relaxed=[plano_family_shelter, elsewhere])

    response = run_search(store, "family shelter in Plano", now=now)

    assert response.interpreted_filters.location_city == "Plano"
    assert response.interpreted_filters.populations == ["families"]
    top = response.results[0]
    assert top.service.id == "plano-1"
    assert top.match_tier == "direct"
    assert "Located in Plano" in top.match_reason
    assert "Serves: families" in top.match_reason
    assert top.service.preview_eligibility_text == (
        "Families with children under 18. Must live in Collin County."
    )


def test_same_record_from_two_stages_keeps_first_stage(now, plano_family_shelter):
    store = FakeStore(localized=[plano_family_shelter], relaxed=[plano_family_shelter])

    response = run_search(store, "family shelter in Plano", now=now)

    ids = [item.service.id for item in response.results]
    assert ids.count("plano-1") == 1
    assert response.results[0].match_tier == "direct"


def test_localized_stage_skipped_without_locality(now):
    store = FakeStore(relaxed=_rows("youth", 2))

    run_search(store, "youth shelter", now=now)

    assert "localized" not in store.stages_called
    assert store.stages_called[0] == "relaxed"


def test_fallback_only_results_are_broader(now):
    store = FakeStore(fallback=_rows("recent", 3))

    response = run_search(store, "xyzzy plugh", now=now)

    assert store.stages_called == ["relaxed", "fuzzy", "fallback"]
    assert len(response.results) == 3
    for item in response.results:
        assert item.match_tier == "broader"
        assert FALLBACK_NOTE in item.match_reason


def test_no_matches_is_an_empty_success(now):
    response = run_search(FakeStore(), "nothing matches this", now=now)

    assert response.results == []
    assert response.query == "nothing matches this"


# ── Cascade triggers ────────────────────────────────────────────────

def test_enough_strong_matches_skip_relaxed_but_not_fuzzy(config):
    store = FakeStore(localized=_rows("loc", 5))
    hints = make_hints("shelter in plano", city="Plano")

    result = run_cascade(store, hints, 20, config)

    assert store.stages_called == ["localized", "fuzzy", "fallback"]
    assert result.stages_fired == [SearchStage.LOCALIZED]


def test_reaching_limit_stops_the_cascade(config):
    store = FakeStore(relaxed=_rows("rel", 10), fuzzy=_rows("fz", 3))

    result = run_cascade(store, make_hints(), 10, config)

    assert store.stages_called == ["relaxed"]
    assert len(result.candidates) == 10


def test_every_stage_gets_the_oversampled_limit(config):
    store = FakeStore()
    run_cascade(store, make_hints(city="Plano"), 30, config)

    assert [limit for _stage, _hints, limit in store.calls] == [60, 60, 60, 60]
    assert oversample_limit(4, config) == 12


def test_stages_fired_only_lists_stages_with_rows(config):
    store = FakeStore(relaxed=_rows("rel", 1), fallback=_rows("fb", 1))

    result = run_cascade(store, make_hints(), 20, config)

    assert result.stages_fired == [SearchStage.RELAXED, SearchStage.FALLBACK]


def test_merge_stage_rows_is_first_write_wins():
    first = make_row("same", program_name="first")
    second = make_row("same", program_name="second")

    merged = merge_stage_rows({}, [first], SearchStage.RELAXED)
    merged_again = merge_stage_rows(merged, [second, make_row("new")], SearchStage.FUZZY)

    assert merged_again["same"].stage == SearchStage.RELAXED
    assert merged_again["same"].row.program_name == "first"
    assert merged_again["new"].stage == SearchStage.FUZZY
    assert list(merged) == ["same"]


# ── Validation and failures ─────────────────────────────────────────

@pytest.mark.parametrize("query", ["", "   ", None])
def test_blank_query_rejected_before_any_stage(query):
    store = FakeStore(fallback=_rows("fb", 1))

    with pytest.raises(InvalidSearchRequestError):
        run_search(store, query)

    assert store.calls == []


@pytest.mark.parametrize("limit", [0, -1, 51])
def test_out_of_range_limit_rejected(limit):
    store = FakeStore()

    with pytest.raises(InvalidSearchRequestError):
        run_search(store, "shelter", limit=limit)

    assert store.calls == []


def test_results_truncated_to_limit(now):
    store = FakeStore(relaxed=_rows("rel", 4), fallback=_rows("fb", 8))

    response = run_search(store, "shelter", limit=5, now=now)

    assert len(response.results) == 5


def test_default_limit_comes_from_config(now):
    store = FakeStore(fallback=_rows("fb", 30))
    config = SearchConfig(default_limit=7)

    response = run_search(store, "shelter", config=config, now=now)

    assert len(response.results) == 7
    assert store.calls[0][2] == 21


def test_storage_failure_aborts_with_generic_error():
    store = FakeStore(relaxed=_rows("rel", 1), fail_on="fuzzy")

    with pytest.raises(SearchStorageError) as excinfo:
        run_search(store, "shelter")

    assert excinfo.value.message == "Search failed. Please try again."
    assert "eligibility_documents" not in excinfo.value.message
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert store.stages_called == ["relaxed", "fuzzy"]


def test_identical_requests_give_identical_responses(now, plano_family_shelter):
    store = FakeStore(localized=[plano_family_shelter], fallback=_rows("fb", 5))
    filters = SearchFilters(populations=["families"])

    first = run_search(store, "family shelter in Plano", filters=filters, now=now)
    second = run_search(store, "family shelter in Plano", filters=filters, now=now)

    assert first.model_dump() == second.model_dump()
