"""Shared fixtures: an in-memory SearchStore and candidate-row factories."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from app.core.config import SearchConfig
from app.schemas.pipeline import CandidateRow
from app.schemas.search import QueryHints

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def make_row(record_id: str, *, days_old: float | None = 1, **fields) -> CandidateRow:
    created_at = NOW - timedelta(days=days_old) if days_old is not None else None
    data = {
        "id": record_id,
        "program_name": f"Program {record_id}",
        "source_type": "pdf",
        "created_at": created_at,
        "raw_eligibility_text": "Open to anyone in need.",
        "search_text": "",
    }
    data.update(fields)
    return CandidateRow(**data)


def make_hints(query: str = "shelter", **fields) -> QueryHints:
    data = {"query": query, "normalized_query": query.lower()}
    data.update(fields)
    return QueryHints(**data)


class FakeStore:
    """
    SearchStore double: each stage returns its configured rows (cut to the
    requested limit) and every call is recorded as ``(stage, hints, limit)``.
    """

    def __init__(self, localized=None, relaxed=None, fuzzy=None, fallback=None, fail_on=None):
        self.rows = {
            "localized": list(localized or []),
            "relaxed": list(relaxed or []),
            "fuzzy": list(fuzzy or []),
            "fallback": list(fallback or []),
        }
        self.fail_on = fail_on
        self.calls: list[tuple[str, QueryHints, int]] = []

    @property
    def stages_called(self) -> list[str]:
        return [stage for stage, _hints, _limit in self.calls]

    def _run(self, stage: str, hints: QueryHints, limit: int) -> list[CandidateRow]:
        self.calls.append((stage, hints, limit))
        if self.fail_on == stage:
            raise RuntimeError(f'relation "eligibility_documents" broke during {stage}')
        return self.rows[stage][:limit]

    def localized_full_text(self, hints, limit):
        return self._run("localized", hints, limit)

    def relaxed_full_text(self, hints, limit):
        return self._run("relaxed", hints, limit)

    def fuzzy_similarity(self, hints, limit):
        return self._run("fuzzy", hints, limit)

    def fallback_recency(self, hints, limit):
        return self._run("fallback", hints, limit)


@pytest.fixture
def config() -> SearchConfig:
    return SearchConfig()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def plano_family_shelter() -> CandidateRow:
    return make_row(
        "plano-1",
        program_name="Plano Family Shelter",
        raw_eligibility_text="Families with children  under 18.\nMust live in Collin County.",
        eligibility={"population": ["families"], "requirements": ["must_have_child"]},
        location_city="Plano",
        location_county="Collin County",
        location_state="TX",
        search_text="Plano Family Shelter Plano Collin County TX families must_have_child family shelter",
        days_old=2,
    )


class FakeCompletions:
    def __init__(self, content: str | None = None, error: Exception | None = None):
        self.content = content
        self.error = error
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    """Just enough of ``openai.OpenAI`` for ``client.chat.completions.create``."""

    def __init__(self, content: str | None = None, error: Exception | None = None):
        self.completions = FakeCompletions(content, error)
        self.chat = SimpleNamespace(completions=self.completions)


class FakeSession:
    """Records added objects; refresh() fills the server-side defaults."""

    def __init__(self):
        self.added: list = []
        self.commits = 0

    def add(self, obj):
        self.added.append(obj)

    def commit(self):
        self.commits += 1

    def refresh(self, obj):
        if obj.id is None:
            obj.id = uuid.uuid4()
        if obj.created_at is None:
            obj.created_at = NOW


ELIGIBILITY_REPLY = {
    "programName": "Hope House",
    "rawEligibilityText": "Single women 18+ experiencing homelessness in Dallas County, TX.",
    "population": ["single_adults"],
    "genderRestriction": "women_only",
    "requirements": ["id_required"],
    "locationConstraints": ["Dallas County, TX"],
    "maxStayDays": 90,
    "ageRange": {"min": 18, "max": None},
    "notes": "",
}


@pytest.fixture
def eligibility_reply() -> dict:
    return dict(ELIGIBILITY_REPLY)
