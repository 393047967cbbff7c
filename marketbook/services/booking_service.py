"""BookingService: atomic check-in, rescheduling and the owner approval flow."""
from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from marketbook.config.booking import BookingConfig
from marketbook.core.exceptions import (
    BookingConflict,
    BookingRejected,
    ConflictError,
    EmptySelection,
    NotFoundError,
    ProjectError,
    ValidationError,
)
from marketbook.infra.database.models.booking import Booking
from marketbook.infra.database.repositories import BookingRepository
from marketbook.scheduling.projector import BookingStatus, CommittedBooking
from marketbook.scheduling.resources import ResourceBookingMode, ResourceResolver
from marketbook.scheduling.times import TimeRange, parse_date, parse_time
from marketbook.scheduling.validator import SelectedBooking, SlotValidator
from marketbook.services.availability_service import AvailabilityService, ScheduleContext

logger = logging.getLogger(__name__)

# current status -> statuses it may move to
_TRANSITIONS: Dict[BookingStatus, frozenset] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.REJECTED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.REJECTED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class SlotRequest:
    date: _dt.date
    start_time: _dt.time
    end_time: _dt.time
    market_member_id: Optional[int] = None
    message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SlotRequest":
        member = data.get("marketMemberId")
        return cls(
            date=parse_date(data.get("date")),
            start_time=parse_time(data.get("startTime"), "startTime"),
            end_time=parse_time(data.get("endTime"), "endTime"),
            market_member_id=int(member) if member is not None else None,
            message=data.get("message"),
        )


def _error_entry(index: int, exc: ProjectError) -> Dict[str, Any]:
    return {"index": index, "code": exc.code, "message": exc.message, "details": exc.details}


class BookingService:
    def __init__(
        self,
        session: AsyncSession,
        config: Optional[BookingConfig] = None,
        today: Optional[Callable[[], _dt.date]] = None,
    ) -> None:
        self._availability = AvailabilityService(session, config, today)
        self._repo = BookingRepository(session)

    async def get_booking(self, booking_id: int) -> Booking:
        booking = await self._repo.get_by_id(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking {booking_id} not found", details={"bookingId": booking_id})
        return booking

    async def list_bookings(
        self,
        *,
        order_id: Optional[int] = None,
        client_id: Optional[int] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Booking]:
        if status is not None:
            try:
                status = BookingStatus(status).value
            except ValueError:
                raise ValidationError(f"Unknown booking status {status!r}", details={"status": status}) from None
        return await self._repo.list_filtered(
            order_id=order_id, client_id=client_id, status=status, skip=skip, limit=limit
        )

    # ─── check-in ────────────────────────────────────────────────────────

    def _place(
        self,
        ctx: ScheduleContext,
        slot: SlotRequest,
        accepted: List[CommittedBooking],
        staged: List[SelectedBooking],
        validator: SlotValidator,
    ) -> Optional[int]:
        """Validate one slot against committed plus already-accepted slots.

        Returns the resource the slot is booked on (None when unassigned).
        """
        resource_id: Optional[int] = None
        if ctx.mode is ResourceBookingMode.SELECT and ctx.eligible:
            if slot.market_member_id is None:
                raise ValidationError("marketMemberId is required for this order")
            ctx.check_resource(slot.market_member_id)
            resource_id = slot.market_member_id

        day = ctx.day(slot.date, resource_id, extra=accepted)
        if day is None:
            raise ValidationError(
                "Date is outside the bookable range", details={"date": slot.date.isoformat()}
            )
        validator.validate(day, slot.start_time, slot.end_time, staged, resource_id)

        if ctx.mode is ResourceBookingMode.AUTO and ctx.eligible:
            chosen = ResourceResolver.assign_resource(
                ctx.eligible, list(ctx.bookings) + accepted, slot.date, TimeRange(slot.start_time, slot.end_time)
            )
            if chosen is None:
                raise BookingConflict(
                    "No specialist is free for the selected time",
                    details={"date": slot.date.isoformat()},
                )
            resource_id = chosen.id
        return resource_id

    async def check_in(
        self,
        order_id: int,
        slots: List[SlotRequest],
        client_id: Optional[int] = None,
    ) -> List[Booking]:
        """Book every slot or none.

        Slots are validated in order; each accepted slot counts as committed
        for the ones after it. Any failure raises BookingRejected carrying
        one error entry per rejected slot, and nothing is written.
        """
        if not slots:
            raise EmptySelection("Select at least one time slot before booking")

        order = await self._availability.get_order(order_id, lock=True)
        first = min(s.date for s in slots)
        last = max(s.date for s in slots)
        ctx = await self._availability.load_context(order, first, last)
        validator = SlotValidator(ctx.mode)
        status = BookingStatus.PENDING if order.checkin_requires_approval else BookingStatus.CONFIRMED

        accepted: List[CommittedBooking] = []
        staged: List[SelectedBooking] = []
        rows: List[Dict[str, Any]] = []
        errors: List[Dict[str, Any]] = []
        for index, slot in enumerate(slots):
            try:
                resource_id = self._place(ctx, slot, accepted, staged, validator)
            except ProjectError as exc:
                errors.append(_error_entry(index, exc))
                continue
            accepted.append(
                CommittedBooking(slot.date, slot.start_time, slot.end_time, client_id, resource_id, status)
            )
            rows.append(
                {
                    "order_id": order.id,
                    "client_id": client_id,
                    "market_member_id": resource_id,
                    "date": slot.date,
                    "start_time": slot.start_time,
                    "end_time": slot.end_time,
                    "status": status.value,
                    "message": slot.message,
                }
            )

        if errors:
            logger.info(
                "Check-in rejected for order %s: %d of %d slots failed", order_id, len(errors), len(slots),
                extra={"order_id": order_id},
            )
            raise BookingRejected("Booking was rejected", details={"errors": errors})

        bookings = await self._repo.bulk_create(rows)
        logger.info(
            "Checked in %d slot(s) on order %s as %s", len(bookings), order_id, status.value,
            extra={"order_id": order_id},
        )
        return bookings

    # ─── lifecycle ───────────────────────────────────────────────────────

    async def reschedule(
        self, booking_id: int, date: _dt.date, start_time: _dt.time, end_time: _dt.time
    ) -> Booking:
        """Move a booking; it is validated with its own current slot left out."""
        booking = await self.get_booking(booking_id)
        if BookingStatus(booking.status) not in (BookingStatus.PENDING, BookingStatus.CONFIRMED):
            raise ConflictError(
                f"Cannot reschedule a {booking.status} booking", details={"bookingId": booking_id}
            )
        order = await self._availability.get_order(booking.order_id, lock=True)
        ctx = await self._availability.load_context(order, date, date, exclude_booking_ids=[booking.id])

        resource_id = booking.market_member_id if ctx.mode is ResourceBookingMode.SELECT else None
        day = ctx.day(date, resource_id)
        if day is None:
            raise ValidationError("Date is outside the bookable range", details={"date": date.isoformat()})
        SlotValidator(ctx.mode).check(day, TimeRange(start_time, end_time), [], resource_id)

        updates: Dict[str, Any] = {"date": date, "start_time": start_time, "end_time": end_time}
        if ctx.mode is ResourceBookingMode.AUTO and ctx.eligible:
            slot = TimeRange(start_time, end_time)
            busy = {
                b.resource_id for b in ctx.bookings if b.date == date and b.time_range.overlaps(slot)
            }
            if booking.market_member_id is None or booking.market_member_id in busy:
                chosen = ResourceResolver.assign_resource(ctx.eligible, ctx.bookings, date, slot)
                if chosen is None:
                    raise BookingConflict("No specialist is free for the selected time")
                updates["market_member_id"] = chosen.id

        updated = await self._repo.update(booking.id, updates)
        logger.info("Rescheduled booking %s to %s %s", booking_id, date, TimeRange(start_time, end_time),
                    extra={"booking_id": booking_id})
        return updated

    async def update_status(self, booking_id: int, status: str) -> Booking:
        booking = await self.get_booking(booking_id)
        try:
            target = BookingStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown booking status {status!r}") from None
        current = BookingStatus(booking.status)
        if target not in _TRANSITIONS[current]:
            raise ConflictError(
                f"Cannot change booking from {current.value} to {target.value}",
                details={"bookingId": booking_id, "from": current.value, "to": target.value},
            )
        updated = await self._repo.update_status(booking.id, target.value)
        logger.info("Booking %s: %s -> %s", booking_id, current.value, target.value, extra={"booking_id": booking_id})
        return updated
