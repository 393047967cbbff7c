"""Tests for reminder planning and the polling ReminderService."""
from __future__ import annotations

import asyncio
import datetime as _dt
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

from marketbook.config.booking import BookingConfig
from marketbook.scheduling.projector import CommittedBooking
from marketbook.services.reminder_service import ReminderPlanner, ReminderService

MONDAY = _dt.date(2026, 10, 19)
TUESDAY = _dt.date(2026, 10, 20)


def _run(coro):
    return asyncio.run(coro)


def _at(day: _dt.date, hhmm: str) -> _dt.datetime:
    return _dt.datetime.combine(day, _dt.time.fromisoformat(hhmm))


def _booking(day=TUESDAY, booking_id=1):
    return CommittedBooking(day, _dt.time(10, 0), _dt.time(11, 0), booking_id=booking_id)


class TestPlanner(unittest.TestCase):
    def test_day_before_and_same_day(self):
        reminders = ReminderPlanner(20).plan(_booking(), _at(MONDAY, "09:00"))
        self.assertEqual([(r.kind, r.at) for r in reminders],
                         [("tomorrow", _at(MONDAY, "20:00")), ("today", _at(TUESDAY, "20:00"))])
        self.assertEqual(reminders[0].title, "Booking tomorrow")
        self.assertEqual(reminders[0].body, "Oct 20, 2026 10:00")

    def test_only_future_instants(self):
        reminders = ReminderPlanner(20).plan(_booking(), _at(MONDAY, "21:00"))
        self.assertEqual([r.kind for r in reminders], ["today"])

    def test_past_bookings_get_nothing(self):
        self.assertEqual(ReminderPlanner(20).plan(_booking(MONDAY), _at(TUESDAY, "08:00")), [])

    def test_plan_all_sorted(self):
        bookings = [_booking(TUESDAY + _dt.timedelta(days=1), 2), _booking(TUESDAY, 1)]
        reminders = ReminderPlanner(20).plan_all(bookings, _at(MONDAY, "09:00"))
        self.assertEqual([r.at for r in reminders], sorted(r.at for r in reminders))


class TestReminderService(unittest.TestCase):
    def setUp(self):
        row = SimpleNamespace(
            id=1, order_id=7, client_id=11, market_member_id=None, date=TUESDAY,
            start_time=_dt.time(10, 0), end_time=_dt.time(11, 0), status="confirmed",
        )
        self.repo = AsyncMock()
        self.repo.list_upcoming.return_value = [row]
        patcher = patch("marketbook.services.reminder_service.BookingRepository", return_value=self.repo)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.notifier = AsyncMock()
        self.clock = MagicMock()
        self.service = ReminderService(MagicMock(), self.notifier, BookingConfig(), clock=self.clock)

    def test_tick_delivers_due_reminders_once(self):
        self.clock.return_value = _at(MONDAY, "20:30")
        due = _run(self.service.tick())
        self.assertEqual([r.kind for r in due], ["tomorrow"])
        self.notifier.notify.assert_awaited_once()

        self.clock.return_value = _at(MONDAY, "21:30")
        self.assertEqual(_run(self.service.tick()), [])

        self.clock.return_value = _at(TUESDAY, "20:30")
        self.assertEqual([r.kind for r in _run(self.service.tick())], ["today"])
        self.assertEqual(self.notifier.notify.await_count, 2)

    def test_sent_keys_pruned_after_booking_day(self):
        self.clock.return_value = _at(MONDAY, "20:30")
        _run(self.service.tick())
        self.clock.return_value = _at(TUESDAY, "20:30")
        _run(self.service.tick())
        self.assertEqual({key[2] for key in self.service._sent}, {TUESDAY})

        self.clock.return_value = _at(TUESDAY + _dt.timedelta(days=1), "09:00")
        self.assertEqual(_run(self.service.tick()), [])
        self.assertEqual(self.service._sent, set())
        self.assertEqual(self.notifier.notify.await_count, 2)

    def test_nothing_due_before_reminder_hour(self):
        self.clock.return_value = _at(MONDAY, "10:00")
        self.assertEqual(_run(self.service.tick()), [])
        self.notifier.notify.assert_not_called()

    def test_start_and_stop(self):
        self.clock.return_value = _at(MONDAY, "10:00")

        async def cycle():
            self.service.start()
            self.assertTrue(self.service.running)
            for _ in range(5):
                await asyncio.sleep(0)
            await self.service.stop()

        _run(cycle())
        self.assertFalse(self.service.running)
        self.repo.list_upcoming.assert_awaited()


if __name__ == "__main__":
    unittest.main()
