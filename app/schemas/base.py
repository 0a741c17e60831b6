"""Shared base for models exposed over the public camelCase JSON contract."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire; both accepted as input."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True
