"""Timeline blocks for a day: what a time-range picker draws."""
from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from marketbook.scheduling.projector import AvailableDay
from marketbook.scheduling.times import TimeRange, from_minutes, to_minutes

DEFAULT_SUGGESTED_MINUTES = 60


class BlockKind(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    BREAK = "break"


@dataclass(frozen=True)
class TimelineBlock:
    kind: BlockKind
    time_range: TimeRange

    def to_dict(self) -> dict:
        return {"type": self.kind.value, **self.time_range.to_dict()}


def _saturated(ranges: List[TimeRange], total: int) -> List[TimeRange]:
    """Segments where at least ``total`` ranges are active at once."""
    events: List[Tuple[_dt.time, int]] = []
    for r in ranges:
        events.append((r.start, 1))
        events.append((r.end, -1))
    events.sort(key=lambda e: (e[0], e[1]))
    out: List[TimeRange] = []
    current = 0
    opened: Optional[_dt.time] = None
    for at, delta in events:
        current += delta
        if current >= total and opened is None:
            opened = at
        elif current < total and opened is not None:
            if opened < at:
                out.append(TimeRange(opened, at))
            opened = None
    return out


def build_timeline(day: AvailableDay, resource_id: Optional[int] = None) -> List[TimelineBlock]:
    """Split the work window into ordered available, booked and break blocks.

    Breaks win over bookings where they overlap. With a capacity only the
    stretches where every slot is taken count as booked.
    """
    hours = day.work_hours
    if hours is None:
        return []

    bookings = [b.time_range for b in day.bookings if resource_id is None or b.resource_id == resource_id]
    if day.capacity is not None:
        bookings = _saturated(bookings, max(day.capacity.total, 1)) if day.capacity.total > 0 else [hours]

    busy: List[Tuple[TimeRange, BlockKind]] = [(b, BlockKind.BREAK) for b in day.breaks]
    busy += [(b, BlockKind.BOOKED) for b in bookings]
    # at equal starts breaks come first
    busy.sort(key=lambda item: (item[0].start, item[1] is not BlockKind.BREAK, item[0].end))

    blocks: List[TimelineBlock] = []
    cursor = hours.start
    for rng, kind in busy:
        start, end = max(rng.start, cursor), min(rng.end, hours.end)
        if end <= start:
            continue
        if start > cursor:
            blocks.append(TimelineBlock(BlockKind.AVAILABLE, TimeRange(cursor, start)))
        blocks.append(TimelineBlock(kind, TimeRange(start, end)))
        cursor = end
    if cursor < hours.end:
        blocks.append(TimelineBlock(BlockKind.AVAILABLE, TimeRange(cursor, hours.end)))
    return blocks


def available_blocks(day: AvailableDay, resource_id: Optional[int] = None) -> List[TimeRange]:
    return [b.time_range for b in build_timeline(day, resource_id) if b.kind is BlockKind.AVAILABLE]


def suggest_range(block: TimeRange, suggested_minutes: Optional[int] = None) -> TimeRange:
    """Initial pick inside a block: its start plus min(suggested or 60, block length)."""
    minutes = min(suggested_minutes or DEFAULT_SUGGESTED_MINUTES, block.minutes)
    end = from_minutes(to_minutes(block.start) + minutes) or block.end
    return TimeRange(block.start, end)
