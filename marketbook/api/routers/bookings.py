"""Bookings API: atomic check-in, listing, rescheduling and status changes."""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from marketbook.api.dependencies import get_booking_service
from marketbook.api.schemas.bookings import (
    BookingOut,
    CheckInRequest,
    CheckInResponse,
    RescheduleRequest,
    StatusUpdate,
)
from marketbook.infra.database.models.booking import Booking
from marketbook.scheduling.times import format_time, parse_time
from marketbook.services import BookingService, SlotRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _to_response(b: Booking) -> BookingOut:
    return BookingOut(
        id=b.id,
        order_id=b.order_id,
        client_id=b.client_id,
        market_member_id=b.market_member_id,
        date=b.date,
        start_time=format_time(b.start_time),
        end_time=format_time(b.end_time),
        status=b.status,
        message=b.message,
        created_at=b.created_at,
    )


@router.post("", response_model=CheckInResponse, status_code=status.HTTP_201_CREATED)
async def check_in(body: CheckInRequest, service: BookingService = Depends(get_booking_service)):
    """Book all slots or none; a rejected batch answers 409 with one error per slot."""
    slots = [
        SlotRequest(
            date=s.date,
            start_time=parse_time(s.start_time, "startTime"),
            end_time=parse_time(s.end_time, "endTime"),
            market_member_id=s.market_member_id,
            message=s.message,
        )
        for s in body.slots
    ]
    bookings = await service.check_in(body.order_id, slots, client_id=body.client_id)
    return CheckInResponse(bookings=[_to_response(b) for b in bookings], errors=[])


@router.get("", response_model=List[BookingOut])
async def list_bookings(
    order_id: Optional[int] = Query(None, alias="orderId"),
    client_id: Optional[int] = Query(None, alias="clientId"),
    status_filter: Optional[str] = Query(None, alias="status"),
    skip: int = 0,
    limit: int = Query(100, le=500),
    service: BookingService = Depends(get_booking_service),
):
    items = await service.list_bookings(
        order_id=order_id, client_id=client_id, status=status_filter, skip=skip, limit=limit
    )
    return [_to_response(b) for b in items]


@router.get("/{booking_id}", response_model=BookingOut)
async def get_booking(booking_id: int, service: BookingService = Depends(get_booking_service)):
    return _to_response(await service.get_booking(booking_id))


@router.patch("/{booking_id}", response_model=BookingOut)
async def reschedule_booking(
    booking_id: int,
    body: RescheduleRequest,
    service: BookingService = Depends(get_booking_service),
):
    updated = await service.reschedule(
        booking_id,
        body.date,
        parse_time(body.start_time, "startTime"),
        parse_time(body.end_time, "endTime"),
    )
    return _to_response(updated)


@router.patch("/{booking_id}/status", response_model=BookingOut)
async def update_booking_status(
    booking_id: int,
    body: StatusUpdate,
    service: BookingService = Depends(get_booking_service),
):
    return _to_response(await service.update_status(booking_id, body.status))
