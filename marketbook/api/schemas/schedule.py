"""Schemas for owner-side weekly pattern and break exclusion endpoints."""
from __future__ import annotations

import datetime as _dt
from typing import List, Literal, Optional

from pydantic import Field

from marketbook.api.schemas.common import HHMM, CamelModel, TimeRangeSchema


class DayScheduleSchema(CamelModel):
    enabled: bool = False
    work_hours: Optional[TimeRangeSchema] = None
    breaks: List[TimeRangeSchema] = []


class WeeklyPatternSchema(CamelModel):
    monday: DayScheduleSchema = DayScheduleSchema()
    tuesday: DayScheduleSchema = DayScheduleSchema()
    wednesday: DayScheduleSchema = DayScheduleSchema()
    thursday: DayScheduleSchema = DayScheduleSchema()
    friday: DayScheduleSchema = DayScheduleSchema()
    saturday: DayScheduleSchema = DayScheduleSchema()
    sunday: DayScheduleSchema = DayScheduleSchema()
    subscribe_ahead_days: int = Field(90, ge=0)


class ApplyDefaultsRequest(CamelModel):
    start: Optional[str] = Field(None, pattern=HHMM)
    end: Optional[str] = Field(None, pattern=HHMM)


class BreakCreate(CamelModel):
    start: Optional[str] = Field(None, pattern=HHMM)
    end: Optional[str] = Field(None, pattern=HHMM)


class BreakUpdate(CamelModel):
    field: Literal["start", "end"]
    time: str = Field(..., pattern=HHMM)


class BreakCreated(CamelModel):
    pattern: WeeklyPatternSchema
    placed: TimeRangeSchema = Field(..., alias="break")


class BreakExclusionIn(CamelModel):
    date: _dt.date
    start: str = Field(..., pattern=HHMM)
    end: str = Field(..., pattern=HHMM)


class BreakExclusionOut(CamelModel):
    id: int
    date: _dt.date
    start: str
    end: str


class OverlapBookingSchema(CamelModel):
    id: Optional[int] = None
    start_time: str
    end_time: str
    client_id: Optional[int] = None
    market_member_id: Optional[int] = None


class BreakOverlapOut(CamelModel):
    date: _dt.date
    placed: TimeRangeSchema = Field(..., alias="break")
    booking: OverlapBookingSchema
