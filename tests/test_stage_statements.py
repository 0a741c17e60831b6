from sqlalchemy.dialects import postgresql

from app.pipeline.stages import (
    build_fallback_statement,
    build_fuzzy_statement,
    build_localized_statement,
    build_relaxed_statement,
    row_to_candidate,
)

from conftest import make_hints


def _sql(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect())).lower()


def _params(stmt) -> dict:
    return stmt.compile(dialect=postgresql.dialect()).params


def test_localized_filters_on_city_or_county_prefix(config):
    hints = make_hints("shelter in plano", city="Plano", county="Collin County")

    sql = _sql(build_localized_statement(hints, 60, config))

    assert "plainto_tsquery" in sql
    assert "ts_rank_cd" in sql
    assert "@@" in sql
    assert "location_city" in sql and "location_county" in sql
    assert " or " in sql
    assert "order by rank desc" in sql


def test_relaxed_has_no_locality_but_keeps_state(config):
    hints = make_hints("shelter", city="Plano", state="TX")

    stmt = build_relaxed_statement(hints, 60, config)
    sql = _sql(stmt)

    assert "location_city" not in sql.split("where", 1)[1]
    assert "location_state" in sql.split("where", 1)[1]
    assert "TX%" in _params(stmt).values() or any(
        str(v).startswith("TX") for v in _params(stmt).values()
    )


def test_fuzzy_uses_substring_or_similarity(config):
    stmt = build_fuzzy_statement(make_hints("sheltr"), 30, config)
    sql = _sql(stmt)

    assert "similarity(" in sql
    assert " or " in sql
    assert "order by similarity" in sql
    assert 0.2 in _params(stmt).values()


def test_fallback_has_no_text_condition(config):
    sql = _sql(build_fallback_statement(make_hints("anything"), 15, config))

    assert "where" not in sql
    assert "order by eligibility_documents.created_at desc" in sql
    assert "limit" in sql


def test_fallback_state_filter(config):
    sql = _sql(build_fallback_statement(make_hints("anything", state="TX"), 15, config))

    assert "location_state" in sql


def test_row_to_candidate_normalises_source_type_and_nulls():
    mapping = {
        "id": "5b3c6a2e-0000-4000-8000-000000000001",
        "program_name": None,
        "source_type": "upload",
        "source_url": None,
        "page_title": None,
        "created_at": None,
        "raw_eligibility_text": None,
        "eligibility_json": None,
        "location_city": None,
        "location_county": None,
        "location_state": None,
        "search_text": None,
        "rank": 0.25,
    }

    row = row_to_candidate(mapping)

    assert row.source_type == "pdf"
    assert row.raw_eligibility_text == ""
    assert row.eligibility == {}
    assert row.rank == 0.25
    assert row.similarity is None
