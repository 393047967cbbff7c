"""HTTP tests for the API routers with the services replaced by mocks."""
from __future__ import annotations

import datetime as _dt
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from marketbook.api.dependencies import (
    get_availability_service,
    get_booking_service,
    get_schedule_service,
)
from marketbook.api.main import app
from marketbook.core.exceptions import BookingRejected, NotFoundError
from marketbook.scheduling.pattern import default_pattern
from marketbook.scheduling.projector import AvailabilityResponse, AvailableDay, Capacity
from marketbook.scheduling.times import TimeRange
from marketbook.services.booking_service import BookingService

MONDAY = _dt.date(2026, 10, 19)


def _booking(id=1, status="confirmed"):
    return SimpleNamespace(
        id=id, order_id=7, client_id=11, market_member_id=None, date=MONDAY,
        start_time=_dt.time(9, 0), end_time=_dt.time(10, 0), status=status, message=None,
        created_at=_dt.datetime(2026, 10, 18, 12, 0),
    )


class _ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.availability = AsyncMock()
        self.bookings = AsyncMock()
        self.schedule = AsyncMock()
        app.dependency_overrides[get_availability_service] = lambda: self.availability
        app.dependency_overrides[get_booking_service] = lambda: self.bookings
        app.dependency_overrides[get_schedule_service] = lambda: self.schedule
        self.addCleanup(app.dependency_overrides.clear)
        self.client = TestClient(app)


class TestHealth(_ApiTestCase):
    def test_health(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ok"})


# ─── availability ──────────────────────────────────────────────────────


class TestAvailability(_ApiTestCase):
    def test_camel_case_days(self):
        self.availability.get_available_slots.return_value = AvailabilityResponse(
            [
                AvailableDay(
                    MONDAY,
                    TimeRange.of("09:00", "17:00"),
                    breaks=[TimeRange.of("12:00", "13:00")],
                    capacity=Capacity(2, 1),
                ),
                AvailableDay(MONDAY + _dt.timedelta(days=6)),
            ],
            work_duration_per_client=30,
        )
        resp = self.client.get(
            "/api/v1/orders/7/available-slots",
            params={"startDate": "2026-10-19", "endDate": "2026-10-25", "marketMemberId": 2},
        )
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["workDurationPerClient"], 30)
        first, last = body["availableDays"]
        self.assertEqual(first["workHours"], {"start": "09:00", "end": "17:00"})
        self.assertEqual(first["capacity"], {"total": 2, "booked": 1, "available": 1})
        self.assertTrue(first["bookable"])
        self.assertFalse(last["bookable"])
        self.availability.get_available_slots.assert_awaited_once_with(
            7, MONDAY, _dt.date(2026, 10, 25), 2
        )

    def test_unknown_order(self):
        self.availability.get_available_slots.side_effect = NotFoundError("Order 7 not found")
        resp = self.client.get("/api/v1/orders/7/available-slots")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["code"], "NOT_FOUND")


# ─── bookings ──────────────────────────────────────────────────────────


class TestBookings(_ApiTestCase):
    BODY = {
        "orderId": 7,
        "clientId": 11,
        "slots": [{"date": "2026-10-19", "startTime": "09:00", "endTime": "10:00"}],
    }

    def test_check_in_created(self):
        self.bookings.check_in.return_value = [_booking()]
        resp = self.client.post("/api/v1/bookings", json=self.BODY)
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertEqual(body["errors"], [])
        self.assertEqual(body["bookings"][0]["startTime"], "09:00")
        order_id, slots = self.bookings.check_in.call_args.args
        self.assertEqual(order_id, 7)
        self.assertEqual(slots[0].start_time, _dt.time(9, 0))
        self.assertEqual(self.bookings.check_in.call_args.kwargs["client_id"], 11)

    def test_check_in_rejected(self):
        errors = [{"index": 0, "code": "BREAK_CONFLICT", "message": "overlaps break", "details": {}}]
        self.bookings.check_in.side_effect = BookingRejected("Booking was rejected", details={"errors": errors})
        resp = self.client.post("/api/v1/bookings", json=self.BODY)
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["code"], "BOOKING_REJECTED")
        self.assertEqual(resp.json()["details"]["errors"], errors)

    def test_malformed_time(self):
        body = {"orderId": 7, "slots": [{"date": "2026-10-19", "startTime": "9am", "endTime": "10:00"}]}
        resp = self.client.post("/api/v1/bookings", json=body)
        self.assertEqual(resp.status_code, 422)
        self.bookings.check_in.assert_not_called()

    def test_reschedule(self):
        self.bookings.reschedule.return_value = _booking()
        resp = self.client.patch(
            "/api/v1/bookings/1", json={"date": "2026-10-19", "startTime": "09:00", "endTime": "10:00"}
        )
        self.assertEqual(resp.status_code, 200)
        self.bookings.reschedule.assert_awaited_once_with(1, MONDAY, _dt.time(9, 0), _dt.time(10, 0))

    def test_approve(self):
        self.bookings.update_status.return_value = _booking(status="confirmed")
        resp = self.client.patch("/api/v1/bookings/1/status", json={"status": "confirmed"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "confirmed")

    def test_list_filters(self):
        self.bookings.list_bookings.return_value = [_booking(1), _booking(2)]
        resp = self.client.get("/api/v1/bookings", params={"orderId": 7, "status": "pending"})
        self.assertEqual([b["id"] for b in resp.json()], [1, 2])
        kwargs = self.bookings.list_bookings.call_args.kwargs
        self.assertEqual((kwargs["order_id"], kwargs["status"]), (7, "pending"))

    def test_unknown_status_filter(self):
        service = BookingService(MagicMock())
        service._repo = AsyncMock()
        app.dependency_overrides[get_booking_service] = lambda: service
        resp = self.client.get("/api/v1/bookings", params={"status": "bogus"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], "VALIDATION_ERROR")
        self.assertEqual(resp.json()["details"], {"status": "bogus"})
        service._repo.list_filtered.assert_not_called()


# ─── schedule ──────────────────────────────────────────────────────────


class TestSchedule(_ApiTestCase):
    def test_add_break(self):
        pattern = default_pattern()
        placed = pattern.add_break("monday")
        self.schedule.add_break.return_value = (pattern, placed)
        resp = self.client.post("/api/v1/orders/7/weekly-pattern/days/monday/breaks", json={})
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertEqual(body["break"], {"start": "12:00", "end": "13:00"})
        self.assertEqual(body["pattern"]["monday"]["breaks"], [{"start": "12:00", "end": "13:00"}])
        self.schedule.add_break.assert_awaited_once_with(7, "monday", None, None)

    def test_replace_pattern_passes_camel_case(self):
        self.schedule.replace_pattern.return_value = default_pattern()
        body = {"monday": {"enabled": True, "workHours": {"start": "09:00", "end": "17:00"}}, "subscribeAheadDays": 30}
        resp = self.client.put("/api/v1/orders/7/weekly-pattern", json=body)
        self.assertEqual(resp.status_code, 200)
        sent = self.schedule.replace_pattern.call_args.args[1]
        self.assertEqual(sent["subscribeAheadDays"], 30)
        self.assertEqual(sent["monday"]["workHours"], {"start": "09:00", "end": "17:00"})

    def test_delete_exclusion(self):
        resp = self.client.request(
            "DELETE", "/api/v1/orders/7/break-exclusions",
            json={"date": "2026-10-19", "start": "12:00", "end": "13:00"},
        )
        self.assertEqual(resp.status_code, 204)
        self.schedule.delete_exclusion.assert_awaited_once_with(7, MONDAY, TimeRange.of("12:00", "13:00"))

    def test_add_exclusion(self):
        self.schedule.add_exclusion.return_value = SimpleNamespace(
            id=3, date=MONDAY, start_time=_dt.time(12, 0), end_time=_dt.time(13, 0)
        )
        resp = self.client.post(
            "/api/v1/orders/7/break-exclusions", json={"date": "2026-10-19", "start": "12:00", "end": "13:00"}
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json(), {"id": 3, "date": "2026-10-19", "start": "12:00", "end": "13:00"})


if __name__ == "__main__":
    unittest.main()
