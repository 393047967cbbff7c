"""AvailabilityProjector: expand a WeeklyPattern into dated availability.

Inputs are the pattern, today's local date, committed bookings, per-date
break exclusions and an optional concurrent-slot capacity. The output is one
AvailableDay per date in ``[today, today + subscribe_ahead_days]``.
"""
from __future__ import annotations

import datetime as _dt
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from marketbook.scheduling.pattern import DaySchedule, WeeklyPattern
from marketbook.scheduling.times import (
    TimeRange,
    format_date,
    format_time,
    parse_date,
    parse_time,
    peak_concurrency,
)


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


COMMITTED_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


@dataclass(frozen=True)
class CommittedBooking:
    """A booking that occupies time (pending or confirmed)."""

    date: _dt.date
    start_time: _dt.time
    end_time: _dt.time
    client_id: Optional[int] = None
    resource_id: Optional[int] = None
    status: BookingStatus = BookingStatus.CONFIRMED
    booking_id: Optional[int] = None

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(self.start_time, self.end_time)

    @property
    def is_committed(self) -> bool:
        return BookingStatus(self.status) in COMMITTED_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "startTime": format_time(self.start_time),
            "endTime": format_time(self.end_time),
        }
        if self.client_id is not None:
            out["clientId"] = self.client_id
        if self.resource_id is not None:
            out["marketMemberId"] = self.resource_id
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any], day: Optional[_dt.date] = None) -> "CommittedBooking":
        raw_date = data.get("date")
        return cls(
            date=parse_date(raw_date) if raw_date else day,
            start_time=parse_time(data.get("startTime"), "startTime"),
            end_time=parse_time(data.get("endTime"), "endTime"),
            client_id=data.get("clientId"),
            resource_id=data.get("marketMemberId"),
            status=BookingStatus(data.get("status", BookingStatus.CONFIRMED.value)),
            booking_id=data.get("id"),
        )


@dataclass(frozen=True)
class Capacity:
    total: int
    booked: int

    @property
    def available(self) -> int:
        return self.total - self.booked

    def to_dict(self) -> Dict[str, int]:
        return {"total": self.total, "booked": self.booked, "available": self.available}


@dataclass
class AvailableDay:
    """Projection of one calendar date; derived, never stored."""

    date: _dt.date
    work_hours: Optional[TimeRange] = None
    breaks: List[TimeRange] = field(default_factory=list)
    bookings: List[CommittedBooking] = field(default_factory=list)
    capacity: Optional[Capacity] = None

    @property
    def bookable(self) -> bool:
        if self.work_hours is None:
            return False
        return self.capacity is None or self.capacity.available > 0

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "date": format_date(self.date),
            "workHours": self.work_hours.to_dict() if self.work_hours else None,
            "breaks": [b.to_dict() for b in self.breaks],
            "bookings": [b.to_dict() for b in self.bookings],
            "bookable": self.bookable,
        }
        if self.capacity is not None:
            out["capacity"] = self.capacity.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AvailableDay":
        day = parse_date(data.get("date"))
        hours = data.get("workHours")
        cap = data.get("capacity")
        return cls(
            date=day,
            work_hours=TimeRange.from_dict(hours) if hours else None,
            breaks=[TimeRange.from_dict(b) for b in data.get("breaks") or []],
            bookings=sorted(
                (CommittedBooking.from_dict(b, day) for b in data.get("bookings") or []),
                key=lambda b: b.start_time,
            ),
            capacity=Capacity(int(cap["total"]), int(cap["booked"])) if cap else None,
        )


ExclusionMap = Mapping[_dt.date, Iterable[TimeRange]]


def index_exclusions(pairs: Iterable[tuple]) -> Dict[_dt.date, Set[TimeRange]]:
    """Group ``(date, TimeRange)`` pairs into the per-date lookup the projector uses."""
    out: Dict[_dt.date, Set[TimeRange]] = defaultdict(set)
    for day, rng in pairs:
        out[day].add(rng)
    return dict(out)


def effective_breaks(
    schedule: DaySchedule, day: _dt.date, exclusions: Optional[ExclusionMap] = None
) -> List[TimeRange]:
    """Pattern breaks minus the ones excluded for exactly this date."""
    excluded = set((exclusions or {}).get(day, ()))
    return [b for b in schedule.breaks if b not in excluded]


class AvailabilityProjector:
    """Pure projection; the same inputs always give the same days."""

    def __init__(
        self,
        pattern: WeeklyPattern,
        today: _dt.date,
        bookings: Iterable[CommittedBooking] = (),
        exclusions: Optional[ExclusionMap] = None,
        capacity: Optional[int] = None,
    ) -> None:
        self.pattern = pattern
        self.today = today
        self.exclusions: ExclusionMap = exclusions or {}
        self.capacity = capacity
        self._by_date: Dict[_dt.date, List[CommittedBooking]] = defaultdict(list)
        for booking in bookings:
            if booking.is_committed:
                self._by_date[booking.date].append(booking)

    @property
    def horizon_end(self) -> _dt.date:
        return self.today + _dt.timedelta(days=self.pattern.subscribe_ahead_days)

    def in_horizon(self, day: _dt.date) -> bool:
        return self.today <= day <= self.horizon_end

    def project(
        self, start: Optional[_dt.date] = None, end: Optional[_dt.date] = None
    ) -> List[AvailableDay]:
        """AvailableDay entries for the horizon, optionally clipped to ``[start, end]``."""
        first = max(start or self.today, self.today)
        last = min(end or self.horizon_end, self.horizon_end)
        days: List[AvailableDay] = []
        current = first
        while current <= last:
            days.append(self._project(current))
            current += _dt.timedelta(days=1)
        return days

    def project_day(self, day: _dt.date) -> Optional[AvailableDay]:
        if not self.in_horizon(day):
            return None
        return self._project(day)

    def _project(self, day: _dt.date) -> AvailableDay:
        schedule = self.pattern.for_date(day)
        bookings = sorted(self._by_date.get(day, ()), key=lambda b: (b.start_time, b.end_time))
        if not schedule.is_open:
            return AvailableDay(date=day, bookings=bookings)
        capacity = None
        if self.capacity is not None:
            booked = peak_concurrency(b.time_range for b in bookings)
            capacity = Capacity(total=self.capacity, booked=booked)
        return AvailableDay(
            date=day,
            work_hours=schedule.work_hours,
            breaks=effective_breaks(schedule, day, self.exclusions),
            bookings=bookings,
            capacity=capacity,
        )


@dataclass
class AvailabilityResponse:
    """Body of ``GET /orders/{id}/available-slots``."""

    available_days: List[AvailableDay] = field(default_factory=list)
    work_duration_per_client: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"availableDays": [d.to_dict() for d in self.available_days]}
        if self.work_duration_per_client is not None:
            out["workDurationPerClient"] = self.work_duration_per_client
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AvailabilityResponse":
        return cls(
            available_days=[AvailableDay.from_dict(d) for d in data.get("availableDays") or []],
            work_duration_per_client=data.get("workDurationPerClient"),
        )
