"""Availability API: bookable days of an order for the client's calendar."""
from __future__ import annotations

import datetime as _dt
from typing import Optional

from fastapi import APIRouter, Depends, Query

from marketbook.api.dependencies import get_availability_service
from marketbook.api.schemas.availability import AvailableSlotsResponse
from marketbook.services import AvailabilityService

router = APIRouter(prefix="/orders", tags=["availability"])


@router.get("/{order_id}/available-slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
    order_id: int,
    start_date: Optional[_dt.date] = Query(None, alias="startDate"),
    end_date: Optional[_dt.date] = Query(None, alias="endDate"),
    market_member_id: Optional[int] = Query(None, alias="marketMemberId"),
    service: AvailabilityService = Depends(get_availability_service),
):
    result = await service.get_available_slots(order_id, start_date, end_date, market_member_id)
    return result.to_dict()
