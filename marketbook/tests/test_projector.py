"""Unit tests for AvailabilityProjector and the capacity / exclusion rules."""
from __future__ import annotations

import datetime as _dt
import unittest

from marketbook.scheduling.pattern import default_pattern
from marketbook.scheduling.projector import (
    AvailabilityProjector,
    AvailabilityResponse,
    AvailableDay,
    BookingStatus,
    CommittedBooking,
    index_exclusions,
)
from marketbook.scheduling.times import TimeRange, parse_time

TODAY = _dt.date(2026, 10, 19)  # a Monday


def _r(start: str, end: str) -> TimeRange:
    return TimeRange.of(start, end)


def _booking(day: _dt.date, start: str, end: str, **kwargs) -> CommittedBooking:
    return CommittedBooking(day, parse_time(start), parse_time(end), **kwargs)


class TestHorizon(unittest.TestCase):
    def test_exactly_horizon_plus_one_entries(self):
        pattern = default_pattern(subscribe_ahead_days=7)
        days = AvailabilityProjector(pattern, TODAY).project()
        self.assertEqual(len(days), 8)
        self.assertEqual(days[0].date, TODAY)
        self.assertEqual(days[-1].date, TODAY + _dt.timedelta(days=7))

    def test_zero_horizon_is_today_only(self):
        days = AvailabilityProjector(default_pattern(subscribe_ahead_days=0), TODAY).project()
        self.assertEqual([d.date for d in days], [TODAY])

    def test_default_pattern_spans_ninety_days(self):
        days = AvailabilityProjector(default_pattern(), TODAY).project()
        self.assertEqual(len(days), 91)

    def test_sub_range_is_clipped(self):
        projector = AvailabilityProjector(default_pattern(subscribe_ahead_days=10), TODAY)
        days = projector.project(TODAY - _dt.timedelta(days=3), TODAY + _dt.timedelta(days=40))
        self.assertEqual(days[0].date, TODAY)
        self.assertEqual(days[-1].date, TODAY + _dt.timedelta(days=10))

    def test_project_day_outside_horizon(self):
        projector = AvailabilityProjector(default_pattern(subscribe_ahead_days=5), TODAY)
        self.assertIsNone(projector.project_day(TODAY + _dt.timedelta(days=6)))
        self.assertIsNone(projector.project_day(TODAY - _dt.timedelta(days=1)))
        self.assertIsNotNone(projector.project_day(TODAY + _dt.timedelta(days=5)))


class TestDays(unittest.TestCase):
    def test_closed_weekend(self):
        days = AvailabilityProjector(default_pattern(subscribe_ahead_days=6), TODAY).project()
        saturday = days[5]
        self.assertEqual(saturday.date.weekday(), 5)
        self.assertIsNone(saturday.work_hours)
        self.assertFalse(saturday.bookable)
        self.assertTrue(days[0].bookable)

    def test_exclusion_applies_to_its_date_only(self):
        pattern = default_pattern(subscribe_ahead_days=14)
        pattern.add_break("monday")
        exclusions = index_exclusions([(TODAY, _r("12:00", "13:00"))])
        projector = AvailabilityProjector(pattern, TODAY, exclusions=exclusions)
        self.assertEqual(projector.project_day(TODAY).breaks, [])
        next_monday = TODAY + _dt.timedelta(days=7)
        self.assertEqual(projector.project_day(next_monday).breaks, [_r("12:00", "13:00")])

    def test_exclusion_needs_exact_match(self):
        pattern = default_pattern()
        pattern.add_break("monday")
        exclusions = index_exclusions([(TODAY, _r("12:00", "12:30"))])
        day = AvailabilityProjector(pattern, TODAY, exclusions=exclusions).project_day(TODAY)
        self.assertEqual(day.breaks, [_r("12:00", "13:00")])

    def test_bookings_sorted_and_only_committed(self):
        bookings = [
            _booking(TODAY, "14:00", "15:00"),
            _booking(TODAY, "10:00", "11:00", status=BookingStatus.PENDING),
            _booking(TODAY, "11:00", "12:00", status=BookingStatus.CANCELLED),
            _booking(TODAY, "12:00", "12:30", status=BookingStatus.REJECTED),
        ]
        day = AvailabilityProjector(default_pattern(), TODAY, bookings).project_day(TODAY)
        self.assertEqual([b.time_range for b in day.bookings], [_r("10:00", "11:00"), _r("14:00", "15:00")])

    def test_capacity_uses_peak_concurrency(self):
        bookings = [_booking(TODAY, "10:00", "11:00"), _booking(TODAY, "11:00", "12:00")]
        day = AvailabilityProjector(default_pattern(), TODAY, bookings, capacity=2).project_day(TODAY)
        self.assertEqual(day.capacity.booked, 1)
        self.assertEqual(day.capacity.available, 1)
        self.assertTrue(day.bookable)

    def test_full_capacity_not_bookable(self):
        bookings = [_booking(TODAY, "10:00", "11:00"), _booking(TODAY, "10:30", "11:30")]
        day = AvailabilityProjector(default_pattern(), TODAY, bookings, capacity=2).project_day(TODAY)
        self.assertEqual(day.capacity.available, 0)
        self.assertFalse(day.bookable)

    def test_projection_is_deterministic(self):
        bookings = [_booking(TODAY, "10:00", "11:00")]
        first = [d.to_dict() for d in AvailabilityProjector(default_pattern(), TODAY, bookings).project()]
        second = [d.to_dict() for d in AvailabilityProjector(default_pattern(), TODAY, bookings).project()]
        self.assertEqual(first, second)


class TestWireForm(unittest.TestCase):
    def test_day_to_dict(self):
        pattern = default_pattern()
        pattern.add_break("monday")
        bookings = [_booking(TODAY, "10:00", "11:00", client_id=5, resource_id=9)]
        data = AvailabilityProjector(pattern, TODAY, bookings, capacity=3).project_day(TODAY).to_dict()
        self.assertEqual(
            data,
            {
                "date": "2026-10-19",
                "workHours": {"start": "09:00", "end": "17:00"},
                "breaks": [{"start": "12:00", "end": "13:00"}],
                "bookings": [{"startTime": "10:00", "endTime": "11:00", "clientId": 5, "marketMemberId": 9}],
                "bookable": True,
                "capacity": {"total": 3, "booked": 1, "available": 2},
            },
        )

    def test_response_round_trip_keeps_bookability(self):
        body = {
            "workDurationPerClient": 45,
            "availableDays": [
                {"date": "2026-10-24", "workHours": None, "breaks": [], "bookings": [], "bookable": False},
                {
                    "date": "2026-10-19",
                    "workHours": {"start": "09:00", "end": "17:00"},
                    "breaks": [],
                    "bookings": [{"startTime": "10:00", "endTime": "11:00"}],
                },
            ],
        }
        response = AvailabilityResponse.from_dict(body)
        self.assertEqual(response.work_duration_per_client, 45)
        closed, open_day = response.available_days
        self.assertIsInstance(open_day, AvailableDay)
        self.assertFalse(closed.bookable)
        self.assertTrue(open_day.bookable)
        self.assertEqual(open_day.bookings[0].date, _dt.date(2026, 10, 19))


if __name__ == "__main__":
    unittest.main()
