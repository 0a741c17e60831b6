"""
Structured eligibility record extracted from a program document.

Stored verbatim (camelCase keys) in ``eligibility_documents.eligibility_json``
and used by the scorer for population / requirement overlap.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class PopulationTag(str, Enum):
    SINGLE_ADULTS = "single_adults"
    FAMILIES = "families"
    YOUTH = "youth"
    VETERANS = "veterans"
    SENIORS = "seniors"
    ANY = "any"


class GenderRestriction(str, Enum):
    ANY = "any"
    WOMEN_ONLY = "women_only"
    MEN_ONLY = "men_only"
    NON_MALE = "non_male"
    NON_FEMALE = "non_female"


class RequirementTag(str, Enum):
    SOBER = "sober"
    ID_REQUIRED = "id_required"
    BACKGROUND_CHECK = "background_check"
    INCOME_LIMIT = "income_limit"
    MUST_BE_RESIDENT = "must_be_resident"
    MUST_BE_VETERAN = "must_be_veteran"
    MUST_HAVE_CHILD = "must_have_child"


class AgeRange(BaseModel):
    min: int | None = Field(default=None, ge=0)
    max: int | None = Field(default=None, ge=0)


class Eligibility(BaseModel):
    """
    Only directly-stated information: anything the source does not say is
    null (scalars) or [] (arrays), never inferred.
    """
    program_name: str | None = None
    raw_eligibility_text: str
    population: list[PopulationTag] = Field(default_factory=list)
    gender_restriction: GenderRestriction = GenderRestriction.ANY
    requirements: list[RequirementTag] = Field(default_factory=list)
    location_constraints: list[str] = Field(default_factory=list)
    max_stay_days: int | None = Field(default=None, ge=0)
    age_range: AgeRange = Field(default_factory=AgeRange)
    notes: str = ""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True

    @field_validator("program_name", mode="before")
    @classmethod
    def _blank_program_name(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("raw_eligibility_text", "notes", mode="before")
    @classmethod
    def _null_text(cls, value):
        return "" if value is None else value

    @field_validator("gender_restriction", mode="before")
    @classmethod
    def _default_gender(cls, value):
        return GenderRestriction.ANY if value is None else value

    @field_validator("population", "requirements", "location_constraints", mode="before")
    @classmethod
    def _null_list(cls, value):
        return [] if value is None else value

    @field_validator("location_constraints")
    @classmethod
    def _clean_constraints(cls, value: list[str]) -> list[str]:
        return [v.strip() for v in value if v and v.strip()]

    @field_validator("age_range", mode="before")
    @classmethod
    def _null_age_range(cls, value):
        return {} if value is None else value

    def to_json(self) -> dict:
        """JSON-ready dict with camelCase keys, as persisted."""
        return self.model_dump(mode="json", by_alias=True)
