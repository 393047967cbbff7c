"""Tests for ScheduleService owner edits and break exclusions."""
from __future__ import annotations

import asyncio
import datetime as _dt
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from marketbook.config.booking import BookingConfig
from marketbook.core.exceptions import NoAvailableSlot, NotFoundError, ValidationError
from marketbook.scheduling.pattern import WeeklyPattern, default_pattern
from marketbook.scheduling.times import TimeRange
from marketbook.services.schedule_service import ScheduleService

MONDAY = _dt.date(2026, 10, 19)
TUESDAY = _dt.date(2026, 10, 20)


def _run(coro):
    return asyncio.run(coro)


def _t(value: str) -> _dt.time:
    return _dt.time.fromisoformat(value)


def _order(weekly_schedule=None):
    if weekly_schedule is None:
        pattern = default_pattern(subscribe_ahead_days=14)
        pattern.add_break("monday")
        weekly_schedule = pattern.to_dict()
    return SimpleNamespace(
        id=7,
        market_id=None,
        weekly_schedule=weekly_schedule,
        work_duration_per_client=None,
        checkin_requires_approval=False,
        resource_booking_mode="single",
        required_resource_count=1,
        capacity=None,
        is_active=True,
    )


def _row(id, start, end, date=MONDAY):
    return SimpleNamespace(
        id=id, order_id=7, client_id=11, market_member_id=None, date=date,
        start_time=_t(start), end_time=_t(end), status="confirmed",
    )


def _service(order=None, bookings=(), exclusions=()):
    order = order or _order()
    service = ScheduleService(MagicMock(), BookingConfig(), today=lambda: MONDAY)
    availability = service._availability
    availability._order_repo = AsyncMock()
    availability._order_repo.get_by_id.return_value = order
    availability._booking_repo = AsyncMock()
    availability._booking_repo.list_committed.return_value = list(bookings)
    availability._exclusion_repo = AsyncMock()
    availability._exclusion_repo.list_for_order.return_value = list(exclusions)
    service._order_repo = AsyncMock()
    service._exclusion_repo = AsyncMock()
    service._exclusion_repo.find.return_value = None
    service._exclusion_repo.create.side_effect = lambda data: SimpleNamespace(id=1, **data)
    return service


def _saved(service) -> WeeklyPattern:
    order_id, data = service._order_repo.save_schedule.call_args.args
    return WeeklyPattern.from_dict(data)


# ─── pattern edits ─────────────────────────────────────────────────────


class TestPatternEdits(unittest.TestCase):
    def test_get_pattern(self):
        pattern = _run(_service().get_pattern(7))
        self.assertTrue(pattern.day("monday").is_open)
        self.assertFalse(pattern.day("sunday").is_open)

    def test_replace_pattern(self):
        service = _service()
        data = {"friday": {"enabled": True, "workHours": {"start": "10:00", "end": "14:00"}}, "subscribeAheadDays": 30}
        pattern = _run(service.replace_pattern(7, data))
        self.assertEqual(pattern.subscribe_ahead_days, 30)
        self.assertFalse(_saved(service).day("monday").is_open)

    def test_replace_pattern_beyond_max_horizon(self):
        service = _service()
        with self.assertRaises(ValidationError):
            _run(service.replace_pattern(7, {"subscribeAheadDays": 400}))
        service._order_repo.save_schedule.assert_not_called()

    def test_missing_order(self):
        service = _service()
        service._availability._order_repo.get_by_id.return_value = None
        with self.assertRaises(NotFoundError):
            _run(service.get_pattern(7))

    def test_set_day(self):
        service = _service()
        _run(service.set_day(7, "saturday", {"enabled": True, "workHours": {"start": "10:00", "end": "13:00"}}))
        self.assertEqual(str(_saved(service).day("saturday").work_hours), "10:00-13:00")

    def test_apply_defaults(self):
        service = _service(_order(weekly_schedule={}))
        _run(service.apply_defaults(7))
        saved = _saved(service)
        self.assertEqual(str(saved.day("wednesday").work_hours), "09:00-17:00")
        self.assertFalse(saved.day("sunday").is_open)


class TestBreaks(unittest.TestCase):
    def test_add_break_fills_first_gap(self):
        service = _service()
        pattern, placed = _run(service.add_break(7, "monday"))
        # midday is taken, so the break lands at opening time
        self.assertEqual(placed, TimeRange.of("09:00", "10:00"))
        self.assertEqual(len(pattern.day("monday").breaks), 2)
        service._order_repo.save_schedule.assert_awaited_once()

    def test_add_break_on_closed_day(self):
        with self.assertRaises(ValidationError):
            _run(_service().add_break(7, "sunday"))

    def test_add_break_without_room(self):
        order = _order(
            {"monday": {"enabled": True, "workHours": {"start": "09:00", "end": "10:00"},
                        "breaks": [{"start": "09:00", "end": "10:00"}]}}
        )
        with self.assertRaises(NoAvailableSlot):
            _run(_service(order).add_break(7, "monday"))

    def test_update_and_delete(self):
        service = _service()
        _run(service.update_break(7, "monday", 0, "end", "13:30"))
        self.assertEqual(_saved(service).day("monday").breaks, [TimeRange.of("12:00", "13:30")])
        _run(service.delete_break(7, "monday", 0))
        self.assertEqual(_saved(service).day("monday").breaks, [])


# ─── overlaps and exclusions ───────────────────────────────────────────


class TestOverlaps(unittest.TestCase):
    def test_reports_bookings_inside_breaks(self):
        bookings = [_row(1, "12:30", "13:30"), _row(2, "09:00", "10:00"), _row(3, "12:00", "13:00", date=TUESDAY)]
        overlaps = _run(_service(bookings=bookings).break_overlaps(7))
        self.assertEqual(len(overlaps), 1)
        self.assertEqual(overlaps[0].booking.booking_id, 1)
        self.assertEqual(overlaps[0].to_dict()["break"], {"start": "12:00", "end": "13:00"})

    def test_excluded_break_does_not_count(self):
        exclusion = SimpleNamespace(date=MONDAY, start_time=_t("12:00"), end_time=_t("13:00"))
        overlaps = _run(_service(bookings=[_row(1, "12:30", "13:30")], exclusions=[exclusion]).break_overlaps(7))
        self.assertEqual(overlaps, [])

    def test_prioritize_creates_one_exclusion_per_date(self):
        service = _service(bookings=[_row(1, "12:00", "12:30"), _row(2, "12:30", "13:00")])
        created = _run(service.prioritize_bookings(7))
        self.assertEqual(len(created), 1)
        service._exclusion_repo.create.assert_awaited_once_with(
            {"order_id": 7, "date": MONDAY, "start_time": _t("12:00"), "end_time": _t("13:00")}
        )


class TestExclusions(unittest.TestCase):
    def test_add_exclusion(self):
        service = _service()
        created = _run(service.add_exclusion(7, MONDAY, TimeRange.of("12:00", "13:00")))
        self.assertEqual(created.date, MONDAY)

    def test_add_exclusion_is_idempotent(self):
        service = _service()
        existing = SimpleNamespace(id=9)
        service._exclusion_repo.find.return_value = existing
        self.assertIs(_run(service.add_exclusion(7, MONDAY, TimeRange.of("12:00", "13:00"))), existing)
        service._exclusion_repo.create.assert_not_called()

    def test_add_exclusion_for_unknown_break(self):
        with self.assertRaises(ValidationError):
            _run(_service().add_exclusion(7, TUESDAY, TimeRange.of("12:00", "13:00")))

    def test_delete_missing_exclusion(self):
        service = _service()
        service._exclusion_repo.delete_match.return_value = 0
        with self.assertRaises(NotFoundError):
            _run(service.delete_exclusion(7, MONDAY, TimeRange.of("12:00", "13:00")))

    def test_delete_exclusion(self):
        service = _service()
        service._exclusion_repo.delete_match.return_value = 1
        _run(service.delete_exclusion(7, MONDAY, TimeRange.of("12:00", "13:00")))
        service._exclusion_repo.delete_match.assert_awaited_once_with(7, MONDAY, _t("12:00"), _t("13:00"))


if __name__ == "__main__":
    unittest.main()
