"""Schemas for GET /orders/{id}/available-slots."""
from __future__ import annotations

import datetime as _dt
from typing import List, Optional

from marketbook.api.schemas.common import CamelModel, TimeRangeSchema


class CapacitySchema(CamelModel):
    total: int
    booked: int
    available: int


class DayBookingSchema(CamelModel):
    start_time: str
    end_time: str
    client_id: Optional[int] = None
    market_member_id: Optional[int] = None


class AvailableDaySchema(CamelModel):
    date: _dt.date
    work_hours: Optional[TimeRangeSchema] = None
    breaks: List[TimeRangeSchema] = []
    bookings: List[DayBookingSchema] = []
    capacity: Optional[CapacitySchema] = None
    bookable: bool


class AvailableSlotsResponse(CamelModel):
    available_days: List[AvailableDaySchema]
    work_duration_per_client: Optional[int] = None
