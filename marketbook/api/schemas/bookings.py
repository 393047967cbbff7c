"""Schemas for check-in and booking lifecycle endpoints."""
from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from marketbook.api.schemas.common import HHMM, CamelModel


class SlotIn(CamelModel):
    date: _dt.date
    start_time: str = Field(..., pattern=HHMM)
    end_time: str = Field(..., pattern=HHMM)
    market_member_id: Optional[int] = None
    message: Optional[str] = Field(None, max_length=2000)


class CheckInRequest(CamelModel):
    order_id: int
    slots: List[SlotIn] = []
    client_id: Optional[int] = None


class BookingOut(CamelModel):
    id: int
    order_id: int
    client_id: Optional[int] = None
    market_member_id: Optional[int] = None
    date: _dt.date
    start_time: str
    end_time: str
    status: str
    message: Optional[str] = None
    created_at: Optional[_dt.datetime] = None


class CheckInResponse(CamelModel):
    bookings: List[BookingOut]
    errors: List[Dict[str, Any]] = []


class RescheduleRequest(CamelModel):
    date: _dt.date
    start_time: str = Field(..., pattern=HHMM)
    end_time: str = Field(..., pattern=HHMM)


class StatusUpdate(CamelModel):
    status: Literal["confirmed", "rejected", "cancelled"]
