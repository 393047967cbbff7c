"""Shared pydantic bases: camelCase on the wire, snake_case in Python."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

HHMM = r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TimeRangeSchema(CamelModel):
    start: str = Field(..., pattern=HHMM, examples=["09:00"])
    end: str = Field(..., pattern=HHMM, examples=["17:00"])
