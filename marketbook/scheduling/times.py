"""Time-of-day primitives: HH:MM parsing, half-open TimeRange, overlap counting."""
from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from marketbook.core.exceptions import ValidationError

_TIME_FORMATS = ("%H:%M", "%H:%M:%S")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _parse_time(s: str) -> Optional[_dt.time]:
    for fmt in _TIME_FORMATS:
        try:
            return _dt.datetime.strptime(s, fmt).time()
        except (TypeError, ValueError):
            continue
    return None


def parse_time(value: Any, field: str = "time") -> _dt.time:
    """Parse ``HH:MM`` (or ``HH:MM:SS``, truncated to minutes) into a time."""
    if isinstance(value, _dt.time):
        return value.replace(second=0, microsecond=0)
    parsed = _parse_time(value.strip()) if isinstance(value, str) else None
    if parsed is None:
        raise ValidationError(
            f"{field} must be HH:MM, got {value!r}", details={"field": field, "value": value}
        )
    return parsed.replace(second=0)


def format_time(value: _dt.time) -> str:
    return value.strftime("%H:%M")


def parse_date(value: Any, field: str = "date") -> _dt.date:
    """Parse a local calendar date ``YYYY-MM-DD``; no timezone shifting."""
    if isinstance(value, _dt.datetime):
        return value.date()
    if isinstance(value, _dt.date):
        return value
    try:
        return _dt.date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(
            f"{field} must be YYYY-MM-DD, got {value!r}", details={"field": field, "value": value}
        ) from None


def format_date(value: _dt.date) -> str:
    return value.isoformat()


def date_label(value: _dt.date) -> str:
    """Short human label, e.g. ``Oct 19, 2026``."""
    return f"{_MONTHS[value.month - 1]} {value.day}, {value.year}"


def to_minutes(value: _dt.time) -> int:
    return value.hour * 60 + value.minute


def from_minutes(minutes: int) -> Optional[_dt.time]:
    """Inverse of to_minutes; None when the value falls outside one day."""
    if minutes < 0 or minutes >= 24 * 60:
        return None
    return _dt.time(minutes // 60, minutes % 60)


@dataclass(frozen=True, order=True)
class TimeRange:
    """Half-open interval ``[start, end)`` within one day."""

    start: _dt.time
    end: _dt.time

    @classmethod
    def of(cls, start: Any, end: Any) -> "TimeRange":
        return cls(parse_time(start, "start"), parse_time(end, "end"))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeRange":
        if not isinstance(data, dict):
            raise ValidationError(f"time range must be an object, got {data!r}")
        return cls.of(data.get("start"), data.get("end"))

    def to_dict(self) -> Dict[str, str]:
        return {"start": format_time(self.start), "end": format_time(self.end)}

    @property
    def is_valid(self) -> bool:
        return self.start < self.end

    @property
    def minutes(self) -> int:
        return to_minutes(self.end) - to_minutes(self.start)

    def overlaps(self, other: "TimeRange") -> bool:
        # touching endpoints do not conflict
        return self.start < other.end and other.start < self.end

    def contains(self, other: "TimeRange") -> bool:
        return self.start <= other.start and other.end <= self.end

    def __str__(self) -> str:
        return f"{format_time(self.start)}-{format_time(self.end)}"


def overlaps_any(candidate: TimeRange, ranges: Iterable[TimeRange]) -> bool:
    return any(candidate.overlaps(r) for r in ranges)


def peak_concurrency(ranges: Iterable[TimeRange], within: Optional[TimeRange] = None) -> int:
    """Maximum number of ranges active at the same instant.

    With ``within`` only the part of each range inside that window counts, so
    the result is the peak load a candidate slot would share.
    """
    events: List[tuple] = []
    for r in ranges:
        start, end = r.start, r.end
        if within is not None:
            if not within.overlaps(r):
                continue
            start, end = max(start, within.start), min(end, within.end)
        if start >= end:
            continue
        events.append((start, 1))
        events.append((end, -1))
    # ends sort before starts at the same instant (half-open)
    events.sort(key=lambda e: (e[0], e[1]))
    peak = current = 0
    for _, delta in events:
        current += delta
        peak = max(peak, current)
    return peak
