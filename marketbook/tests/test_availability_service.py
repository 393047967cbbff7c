"""Tests for AvailabilityService with the repositories mocked out."""
from __future__ import annotations

import asyncio
import datetime as _dt
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from marketbook.config.booking import BookingConfig
from marketbook.core.exceptions import NotFoundError, ValidationError
from marketbook.scheduling.pattern import default_pattern
from marketbook.services.availability_service import AvailabilityService

MONDAY = _dt.date(2026, 10, 19)
TUESDAY = _dt.date(2026, 10, 20)


def _run(coro):
    return asyncio.run(coro)


def _order(**overrides):
    pattern = default_pattern(subscribe_ahead_days=14)
    pattern.add_break("monday")
    fields = dict(
        id=7,
        market_id=None,
        weekly_schedule=pattern.to_dict(),
        work_duration_per_client=30,
        checkin_requires_approval=False,
        resource_booking_mode="single",
        required_resource_count=1,
        capacity=None,
        is_active=True,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def _booking_row(id, start, end, date=MONDAY, member=None, status="confirmed"):
    return SimpleNamespace(
        id=id,
        order_id=7,
        client_id=11,
        market_member_id=member,
        date=date,
        start_time=_dt.time.fromisoformat(start),
        end_time=_dt.time.fromisoformat(end),
        status=status,
    )


def _member(id, status="accepted", is_active=True):
    return SimpleNamespace(id=id, name=f"Member {id}", avatar_url=None, role=None, status=status, is_active=is_active)


def _exclusion(date, start, end):
    return SimpleNamespace(date=date, start_time=_dt.time.fromisoformat(start), end_time=_dt.time.fromisoformat(end))


def _service(order=None, bookings=(), exclusions=(), members=(), config=None):
    service = AvailabilityService(MagicMock(), config or BookingConfig(), today=lambda: MONDAY)
    service._order_repo = AsyncMock()
    service._order_repo.get_by_id.return_value = order
    service._booking_repo = AsyncMock()
    service._booking_repo.list_committed.return_value = list(bookings)
    service._exclusion_repo = AsyncMock()
    service._exclusion_repo.list_for_order.return_value = list(exclusions)
    service._member_repo = AsyncMock()
    service._member_repo.list_for_market.return_value = list(members)
    return service


class TestGetAvailableSlots(unittest.TestCase):
    def test_unknown_order(self):
        with self.assertRaises(NotFoundError):
            _run(_service(None).get_available_slots(7))

    def test_whole_horizon_by_default(self):
        response = _run(_service(_order()).get_available_slots(7))
        self.assertEqual(len(response.available_days), 15)
        self.assertEqual(response.available_days[0].date, MONDAY)
        self.assertEqual(response.work_duration_per_client, 30)

    def test_range_and_bookings(self):
        service = _service(_order(), bookings=[_booking_row(1, "10:00", "11:00")])
        response = _run(service.get_available_slots(7, MONDAY, MONDAY))
        day = response.available_days[0]
        self.assertEqual([str(b) for b in day.breaks], ["12:00-13:00"])
        self.assertEqual([b.booking_id for b in day.bookings], [1])
        service._booking_repo.list_committed.assert_awaited_once()
        args = service._booking_repo.list_committed.call_args.args
        self.assertEqual(args, (7, MONDAY, MONDAY))

    def test_exclusion_removes_break_for_that_date(self):
        service = _service(_order(), exclusions=[_exclusion(MONDAY, "12:00", "13:00")])
        day = _run(service.get_available_slots(7, MONDAY, MONDAY)).available_days[0]
        self.assertEqual(day.breaks, [])

    def test_inverted_range_rejected(self):
        with self.assertRaises(ValidationError):
            _run(_service(_order()).get_available_slots(7, TUESDAY, MONDAY))

    def test_order_without_schedule_is_closed(self):
        response = _run(_service(_order(weekly_schedule=None)).get_available_slots(7, MONDAY, MONDAY))
        self.assertFalse(response.available_days[0].bookable)

    def test_horizon_capped_by_config(self):
        config = BookingConfig(horizon_days=5, max_horizon_days=5)
        response = _run(_service(_order(), config=config).get_available_slots(7))
        self.assertEqual(response.available_days[-1].date, MONDAY + _dt.timedelta(days=5))


class TestResourceModes(unittest.TestCase):
    def test_select_mode_scopes_to_member(self):
        order = _order(market_id=3, resource_booking_mode="select")
        bookings = [_booking_row(1, "09:00", "10:00", member=1), _booking_row(2, "10:00", "11:00", member=2)]
        service = _service(order, bookings=bookings, members=[_member(1), _member(2)])
        day = _run(service.get_available_slots(7, MONDAY, MONDAY, market_member_id=2)).available_days[0]
        self.assertEqual([b.booking_id for b in day.bookings], [2])

    def test_select_mode_rejects_ineligible_member(self):
        order = _order(market_id=3, resource_booking_mode="select")
        service = _service(order, members=[_member(1), _member(2, status="pending")])
        with self.assertRaises(ValidationError):
            _run(service.get_available_slots(7, MONDAY, MONDAY, market_member_id=2))

    def test_multi_mode_reports_capacity(self):
        order = _order(market_id=3, resource_booking_mode="multi")
        service = _service(
            order,
            bookings=[_booking_row(1, "09:00", "10:00", member=1)],
            members=[_member(1), _member(2), _member(3, is_active=False)],
        )
        day = _run(service.get_available_slots(7, MONDAY, MONDAY)).available_days[0]
        self.assertEqual((day.capacity.total, day.capacity.booked), (2, 1))
        self.assertTrue(day.bookable)

    def test_explicit_capacity_wins(self):
        order = _order(market_id=3, resource_booking_mode="auto", capacity=5)
        service = _service(order, members=[_member(1)])
        day = _run(service.get_available_slots(7, MONDAY, MONDAY)).available_days[0]
        self.assertEqual(day.capacity.total, 5)

    def test_single_mode_ignores_members(self):
        service = _service(_order(market_id=3), members=[_member(1)])
        _run(service.get_available_slots(7, MONDAY, MONDAY, market_member_id=1))
        service._member_repo.list_for_market.assert_not_called()


if __name__ == "__main__":
    unittest.main()
