"""WeeklyPattern: the owner's recurring availability template.

A pattern maps every weekday to a DaySchedule (enabled flag, work hours,
breaks) and carries the look-ahead horizon clients may book into. Every
mutating method validates first and leaves the pattern untouched when the
edit is rejected.
"""
from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from marketbook.core.exceptions import NoAvailableSlot, ValidationError
from marketbook.scheduling.times import (
    TimeRange,
    from_minutes,
    parse_time,
    to_minutes,
)

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 90
DEFAULT_BREAK_MINUTES = 60
MIDDAY = _dt.time(12, 0)


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def of(cls, value: Union["Weekday", str]) -> "Weekday":
        if isinstance(value, Weekday):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown weekday {value!r}", details={"day": value}) from None

    @classmethod
    def from_date(cls, value: _dt.date) -> "Weekday":
        return _ORDER[value.weekday()]


_ORDER: List[Weekday] = list(Weekday)
WORKDAYS = tuple(_ORDER[:5])

DayKey = Union[Weekday, str]


@dataclass
class DaySchedule:
    enabled: bool = False
    work_hours: Optional[TimeRange] = None
    breaks: List[TimeRange] = field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return self.enabled and self.work_hours is not None

    def validate(self, day: Optional[Weekday] = None) -> None:
        """Raise ValidationError when hours or breaks break the day invariant."""
        label = day.value if day else "day"
        if self.enabled and self.work_hours is None:
            raise ValidationError(f"{label}: enabled day needs work hours", details={"day": label})
        if self.work_hours is not None and not self.work_hours.is_valid:
            raise ValidationError(
                f"{label}: work hours start must be before end",
                details={"day": label, "workHours": self.work_hours.to_dict()},
            )
        if self.breaks and self.work_hours is None:
            raise ValidationError(f"{label}: breaks need work hours", details={"day": label})
        ordered = sorted(self.breaks)
        for i, brk in enumerate(ordered):
            _check_break(label, self.work_hours, brk)
            if i and ordered[i - 1].overlaps(brk):
                raise ValidationError(
                    f"{label}: breaks {ordered[i - 1]} and {brk} overlap",
                    details={"day": label, "break": brk.to_dict()},
                )

    def copy(self) -> "DaySchedule":
        return DaySchedule(self.enabled, self.work_hours, list(self.breaks))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "workHours": self.work_hours.to_dict() if self.work_hours else None,
            "breaks": [b.to_dict() for b in self.breaks],
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DaySchedule":
        if not data:
            return cls()
        hours = data.get("workHours") or data.get("work_hours")
        return cls(
            enabled=bool(data.get("enabled", False)),
            work_hours=TimeRange.from_dict(hours) if hours else None,
            breaks=sorted(TimeRange.from_dict(b) for b in data.get("breaks") or []),
        )


def _check_break(label: str, work_hours: Optional[TimeRange], brk: TimeRange) -> None:
    if not brk.is_valid:
        raise ValidationError(
            f"{label}: break start must be before end", details={"day": label, "break": brk.to_dict()}
        )
    if work_hours is None or not work_hours.contains(brk):
        raise ValidationError(
            f"{label}: break {brk} must lie within work hours",
            details={"day": label, "break": brk.to_dict()},
        )


class WeeklyPattern:
    """Recurring weekly availability with a booking horizon."""

    def __init__(
        self,
        days: Optional[Dict[DayKey, DaySchedule]] = None,
        subscribe_ahead_days: int = DEFAULT_HORIZON_DAYS,
    ) -> None:
        if not isinstance(subscribe_ahead_days, int) or subscribe_ahead_days < 0:
            raise ValidationError(
                f"subscribeAheadDays must be a non-negative integer, got {subscribe_ahead_days!r}"
            )
        self.subscribe_ahead_days = subscribe_ahead_days
        self.days: Dict[Weekday, DaySchedule] = {d: DaySchedule() for d in Weekday}
        for key, schedule in (days or {}).items():
            day = Weekday.of(key)
            schedule.validate(day)
            self.days[day] = DaySchedule(schedule.enabled, schedule.work_hours, sorted(schedule.breaks))

    # ─── queries ─────────────────────────────────────────────────────────

    def day(self, day: DayKey) -> DaySchedule:
        return self.days[Weekday.of(day)]

    def for_date(self, value: _dt.date) -> DaySchedule:
        return self.days[Weekday.from_date(value)]

    def validate(self) -> None:
        for day, schedule in self.days.items():
            schedule.validate(day)

    # ─── day edits ───────────────────────────────────────────────────────

    def set_day(self, day: DayKey, schedule: DaySchedule) -> DaySchedule:
        weekday = Weekday.of(day)
        candidate = DaySchedule(schedule.enabled, schedule.work_hours, sorted(schedule.breaks))
        candidate.validate(weekday)
        self.days[weekday] = candidate
        return candidate

    def toggle_day(self, day: DayKey, default_hours: Optional[TimeRange] = None) -> DaySchedule:
        """Flip a day on or off; enabling a day without hours gives it ``default_hours``."""
        weekday = Weekday.of(day)
        current = self.days[weekday]
        if current.enabled:
            return self.set_day(weekday, DaySchedule(False, current.work_hours, current.breaks))
        hours = current.work_hours or default_hours or TimeRange(_dt.time(9, 0), _dt.time(17, 0))
        return self.set_day(weekday, DaySchedule(True, hours, current.breaks))

    def set_work_hours(self, day: DayKey, start: Any, end: Any) -> DaySchedule:
        weekday = Weekday.of(day)
        current = self.days[weekday]
        return self.set_day(weekday, DaySchedule(current.enabled, TimeRange.of(start, end), current.breaks))

    def apply_defaults_to_workdays(self, start: Any, end: Any) -> None:
        """Monday to Friday open with the given hours, weekend closed; horizon kept."""
        hours = TimeRange.of(start, end)
        if not hours.is_valid:
            raise ValidationError("work hours start must be before end", details={"workHours": hours.to_dict()})
        for day in Weekday:
            self.days[day] = DaySchedule(True, hours, []) if day in WORKDAYS else DaySchedule(False, None, [])

    def set_horizon(self, days: int, max_days: Optional[int] = None) -> None:
        if not isinstance(days, int) or days < 0:
            raise ValidationError(f"subscribeAheadDays must be a non-negative integer, got {days!r}")
        if max_days is not None and days > max_days:
            raise ValidationError(
                f"subscribeAheadDays may not exceed {max_days}", details={"max": max_days, "value": days}
            )
        self.subscribe_ahead_days = days

    # ─── break edits ─────────────────────────────────────────────────────

    def add_break(
        self,
        day: DayKey,
        start: Any = None,
        end: Any = None,
        *,
        default_minutes: int = DEFAULT_BREAK_MINUTES,
        midday_start: _dt.time = MIDDAY,
    ) -> TimeRange:
        """Place a new break inside the day's work hours and return it.

        The requested range is tried first (or the midday slot when nothing
        was requested); failing that the break goes at the start of the first
        chronological gap long enough to hold it.
        """
        weekday = Weekday.of(day)
        schedule = self.days[weekday]
        work = schedule.work_hours
        if not schedule.is_open or work is None:
            raise ValidationError(
                f"{weekday.value}: cannot add a break to a closed day", details={"day": weekday.value}
            )

        preferred: Optional[TimeRange]
        if start is not None and end is not None:
            preferred = TimeRange.of(start, end)
            if not preferred.is_valid:
                raise ValidationError("break start must be before end", details={"break": preferred.to_dict()})
            duration = preferred.minutes
        else:
            duration = default_minutes
            anchor = parse_time(start, "start") if start is not None else midday_start
            preferred = _range_from(anchor, duration)

        if preferred is not None and _fits(work, schedule.breaks, preferred):
            placed = preferred
        else:
            placed = _first_gap(work, schedule.breaks, duration)
            if placed is None:
                raise NoAvailableSlot(
                    f"{weekday.value}: no free {duration}-minute gap for a break",
                    details={"day": weekday.value, "minutes": duration},
                )

        schedule.breaks = sorted(schedule.breaks + [placed])
        logger.debug("Added break %s on %s", placed, weekday.value)
        return placed

    def update_break(self, day: DayKey, index: int, field_name: str, new_time: Any) -> TimeRange:
        weekday = Weekday.of(day)
        schedule = self.days[weekday]
        current = _break_at(weekday, schedule, index)
        value = parse_time(new_time, field_name)
        if field_name == "start":
            updated = TimeRange(value, current.end)
        elif field_name == "end":
            updated = TimeRange(current.start, value)
        else:
            raise ValidationError(f"field must be 'start' or 'end', got {field_name!r}")

        _check_break(weekday.value, schedule.work_hours, updated)
        others = [b for i, b in enumerate(schedule.breaks) if i != index]
        for other in others:
            if other.overlaps(updated):
                raise ValidationError(
                    f"{weekday.value}: break {updated} overlaps {other}",
                    details={"day": weekday.value, "break": updated.to_dict()},
                )
        schedule.breaks = sorted(others + [updated])
        return updated

    def delete_break(self, day: DayKey, index: int) -> TimeRange:
        weekday = Weekday.of(day)
        schedule = self.days[weekday]
        removed = _break_at(weekday, schedule, index)
        schedule.breaks = [b for i, b in enumerate(schedule.breaks) if i != index]
        return removed

    # ─── serialization ───────────────────────────────────────────────────

    def copy(self) -> "WeeklyPattern":
        return WeeklyPattern({d: s.copy() for d, s in self.days.items()}, self.subscribe_ahead_days)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {d.value: s.to_dict() for d, s in self.days.items()}
        out["subscribeAheadDays"] = self.subscribe_ahead_days
        return out

    @classmethod
    def from_dict(
        cls, data: Optional[Dict[str, Any]], default_horizon: int = DEFAULT_HORIZON_DAYS
    ) -> "WeeklyPattern":
        """Load the JSON form; missing weekdays are closed, unknown keys ignored."""
        data = data or {}
        horizon = data.get("subscribeAheadDays")
        if horizon is None:
            horizon = default_horizon
        try:
            horizon = int(horizon)
        except (TypeError, ValueError):
            raise ValidationError(f"subscribeAheadDays must be an integer, got {horizon!r}") from None
        days = {d: DaySchedule.from_dict(data.get(d.value)) for d in Weekday}
        return cls(days, horizon)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WeeklyPattern):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        open_days = [d.value for d, s in self.days.items() if s.is_open]
        return f"WeeklyPattern(open={open_days}, subscribe_ahead_days={self.subscribe_ahead_days})"


def default_pattern(
    start: _dt.time = _dt.time(9, 0),
    end: _dt.time = _dt.time(17, 0),
    subscribe_ahead_days: int = DEFAULT_HORIZON_DAYS,
) -> WeeklyPattern:
    pattern = WeeklyPattern(subscribe_ahead_days=subscribe_ahead_days)
    pattern.apply_defaults_to_workdays(start, end)
    return pattern


def _range_from(start: _dt.time, minutes: int) -> Optional[TimeRange]:
    end = from_minutes(to_minutes(start) + minutes)
    return TimeRange(start, end) if end is not None else None


def _fits(work: TimeRange, breaks: Iterable[TimeRange], candidate: TimeRange) -> bool:
    return work.contains(candidate) and not any(candidate.overlaps(b) for b in breaks)


def _first_gap(work: TimeRange, breaks: List[TimeRange], minutes: int) -> Optional[TimeRange]:
    cursor = work.start
    for brk in sorted(breaks) + [TimeRange(work.end, work.end)]:
        if to_minutes(brk.start) - to_minutes(cursor) >= minutes:
            return _range_from(cursor, minutes)
        cursor = max(cursor, brk.end)
    return None


def _break_at(day: Weekday, schedule: DaySchedule, index: int) -> TimeRange:
    if not isinstance(index, int) or not 0 <= index < len(schedule.breaks):
        raise ValidationError(
            f"{day.value}: no break at index {index!r}",
            details={"day": day.value, "index": index, "count": len(schedule.breaks)},
        )
    return schedule.breaks[index]


__all__ = [
    "DEFAULT_BREAK_MINUTES",
    "DEFAULT_HORIZON_DAYS",
    "DaySchedule",
    "WORKDAYS",
    "WeeklyPattern",
    "Weekday",
    "default_pattern",
]
