"""Unit tests for timeline blocks and the initial range suggestion."""
from __future__ import annotations

import datetime as _dt
import unittest

from marketbook.scheduling.projector import AvailableDay, Capacity, CommittedBooking
from marketbook.scheduling.timeline import BlockKind, available_blocks, build_timeline, suggest_range
from marketbook.scheduling.times import TimeRange, parse_time

MONDAY = _dt.date(2026, 10, 19)


def _r(start: str, end: str) -> TimeRange:
    return TimeRange.of(start, end)


def _booking(start: str, end: str, resource_id=None) -> CommittedBooking:
    return CommittedBooking(MONDAY, parse_time(start), parse_time(end), resource_id=resource_id)


class TestBuildTimeline(unittest.TestCase):
    def test_blocks_cover_the_work_window_in_order(self):
        day = AvailableDay(
            MONDAY, _r("09:00", "17:00"), breaks=[_r("12:00", "13:00")], bookings=[_booking("10:00", "11:00")]
        )
        blocks = [(b.kind, str(b.time_range)) for b in build_timeline(day)]
        self.assertEqual(
            blocks,
            [
                (BlockKind.AVAILABLE, "09:00-10:00"),
                (BlockKind.BOOKED, "10:00-11:00"),
                (BlockKind.AVAILABLE, "11:00-12:00"),
                (BlockKind.BREAK, "12:00-13:00"),
                (BlockKind.AVAILABLE, "13:00-17:00"),
            ],
        )

    def test_closed_day_has_no_blocks(self):
        self.assertEqual(build_timeline(AvailableDay(MONDAY)), [])

    def test_break_wins_over_overlapping_booking(self):
        day = AvailableDay(
            MONDAY, _r("09:00", "17:00"), breaks=[_r("12:00", "13:00")], bookings=[_booking("12:30", "14:00")]
        )
        blocks = [(b.kind, str(b.time_range)) for b in build_timeline(day)]
        self.assertIn((BlockKind.BREAK, "12:00-13:00"), blocks)
        self.assertIn((BlockKind.BOOKED, "13:00-14:00"), blocks)

    def test_resource_filter(self):
        day = AvailableDay(MONDAY, _r("09:00", "12:00"), bookings=[_booking("10:00", "11:00", resource_id=1)])
        self.assertEqual(available_blocks(day, resource_id=2), [_r("09:00", "12:00")])
        self.assertEqual(available_blocks(day, resource_id=1), [_r("09:00", "10:00"), _r("11:00", "12:00")])

    def test_capacity_marks_only_saturated_stretches(self):
        day = AvailableDay(
            MONDAY,
            _r("09:00", "12:00"),
            bookings=[_booking("09:00", "11:00"), _booking("10:00", "12:00")],
            capacity=Capacity(total=2, booked=2),
        )
        booked = [b.time_range for b in build_timeline(day) if b.kind is BlockKind.BOOKED]
        self.assertEqual(booked, [_r("10:00", "11:00")])


class TestSuggestRange(unittest.TestCase):
    def test_defaults_to_an_hour(self):
        self.assertEqual(suggest_range(_r("09:00", "12:00")), _r("09:00", "10:00"))

    def test_uses_suggested_duration(self):
        self.assertEqual(suggest_range(_r("09:00", "12:00"), 45), _r("09:00", "09:45"))

    def test_clamped_to_block(self):
        self.assertEqual(suggest_range(_r("16:30", "17:00"), 60), _r("16:30", "17:00"))


if __name__ == "__main__":
    unittest.main()
