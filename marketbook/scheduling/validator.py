"""SlotValidator: accept or reject a candidate time range for one day."""
from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from marketbook.core.exceptions import (
    BookingConflict,
    BreakConflict,
    DuplicateSelection,
    OutOfWorkHours,
    SlotRejected,
    StartAfterEnd,
)
from marketbook.scheduling.projector import AvailableDay
from marketbook.scheduling.resources import ResourceBookingMode
from marketbook.scheduling.times import TimeRange, date_label, format_date, format_time, peak_concurrency

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectedBooking:
    """A slot the client has staged but not yet submitted."""

    date: _dt.date
    start_time: _dt.time
    end_time: _dt.time
    resource_id: Optional[int] = None

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(self.start_time, self.end_time)

    @property
    def label(self) -> str:
        return date_label(self.date)

    def to_payload(self, include_resource: bool = False) -> Dict[str, Any]:
        item: Dict[str, Any] = {
            "date": format_date(self.date),
            "startTime": format_time(self.start_time),
            "endTime": format_time(self.end_time),
        }
        if include_resource and self.resource_id is not None:
            item["marketMemberId"] = self.resource_id
        return item


class SlotValidator:
    """Runs the rejection checks in a fixed order; the first failure wins."""

    def __init__(self, mode: ResourceBookingMode = ResourceBookingMode.SINGLE) -> None:
        self.mode = ResourceBookingMode.of(mode)

    def check(
        self,
        day: AvailableDay,
        slot: TimeRange,
        staged: List[SelectedBooking],
        resource_id: Optional[int] = None,
    ) -> SelectedBooking:
        details = {"date": format_date(day.date), "start": format_time(slot.start), "end": format_time(slot.end)}
        hours = day.work_hours
        if hours is None or slot.start < hours.start or slot.end > hours.end:
            raise OutOfWorkHours("Selected time is outside working hours", details=details)
        if slot.start >= slot.end:
            raise StartAfterEnd("Start time must be before end time", details=details)

        for brk in day.breaks:
            if slot.overlaps(brk):
                raise BreakConflict(
                    f"Selected time overlaps the {brk} break", details={**details, "break": brk.to_dict()}
                )

        self._check_bookings(day, slot, resource_id, details)

        candidate = SelectedBooking(day.date, slot.start, slot.end, resource_id)
        if candidate in staged:
            raise DuplicateSelection("This slot is already selected", details=details)
        return candidate

    def validate(
        self,
        day: AvailableDay,
        start: Any,
        end: Any,
        staged: List[SelectedBooking],
        resource_id: Optional[int] = None,
    ) -> List[SelectedBooking]:
        """Stage the slot and return the list; raise SlotRejected leaving it unchanged."""
        slot = TimeRange.of(start, end)
        try:
            candidate = self.check(day, slot, staged, resource_id)
        except SlotRejected as exc:
            logger.info("Slot rejected (%s): %s", exc.code, exc.message, extra={"error_code": exc.code})
            raise
        staged.append(candidate)
        return staged

    def _check_bookings(
        self, day: AvailableDay, slot: TimeRange, resource_id: Optional[int], details: Dict[str, Any]
    ) -> None:
        bookings = day.bookings
        if self.mode is ResourceBookingMode.SELECT and resource_id is not None:
            bookings = [b for b in bookings if b.resource_id == resource_id]

        if day.capacity is not None:
            load = peak_concurrency((b.time_range for b in bookings), within=slot)
            if load >= day.capacity.total:
                raise BookingConflict(
                    "No free capacity for the selected time",
                    details={**details, "booked": load, "total": day.capacity.total},
                )
            return

        for booking in bookings:
            if slot.overlaps(booking.time_range):
                raise BookingConflict(
                    "Selected time overlaps an existing booking",
                    details={**details, "booking": booking.to_dict()},
                )
