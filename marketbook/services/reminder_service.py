"""Booking reminders: plan the instants and hand due ones to a Notifier.

ReminderPlanner is pure. ReminderService is built explicitly (the API
lifespan does it), polls confirmed bookings on an interval and delivers
each reminder once.
"""
from __future__ import annotations

import asyncio
import datetime as _dt
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Protocol, Set, Tuple

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketbook.config.booking import BookingConfig
from marketbook.infra.database.repositories import BookingRepository
from marketbook.scheduling.projector import CommittedBooking
from marketbook.scheduling.times import date_label, format_time
from marketbook.services.availability_service import booking_to_committed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reminder:
    at: _dt.datetime
    kind: str  # "tomorrow" | "today"
    booking: CommittedBooking

    @property
    def key(self) -> Tuple[Optional[int], str, _dt.date]:
        return (self.booking.booking_id, self.kind, self.booking.date)

    @property
    def title(self) -> str:
        return "Booking today" if self.kind == "today" else "Booking tomorrow"

    @property
    def body(self) -> str:
        return f"{date_label(self.booking.date)} {format_time(self.booking.start_time)}"


class Notifier(Protocol):
    async def notify(self, reminder: Reminder) -> None:
        ...


class LoggingNotifier:
    """Default notifier: delivery is somebody else's job, we just log."""

    async def notify(self, reminder: Reminder) -> None:
        logger.info(
            "Reminder (%s) for booking %s: %s", reminder.kind, reminder.booking.booking_id, reminder.body,
            extra={"booking_id": reminder.booking.booking_id},
        )


class ReminderPlanner:
    def __init__(self, hour: int = 20, minute: int = 0) -> None:
        self.at = _dt.time(hour, minute)

    def plan(self, booking: CommittedBooking, now: _dt.datetime) -> List[Reminder]:
        """Reminders at ``hour`` the day before and on the day, future instants only."""
        if booking.date < now.date():
            return []
        day_before = _dt.datetime.combine(booking.date - _dt.timedelta(days=1), self.at)
        same_day = _dt.datetime.combine(booking.date, self.at)
        out: List[Reminder] = []
        if day_before > now:
            out.append(Reminder(day_before, "tomorrow", booking))
        if same_day > now:
            out.append(Reminder(same_day, "today", booking))
        return out

    def plan_all(self, bookings: Iterable[CommittedBooking], now: _dt.datetime) -> List[Reminder]:
        reminders = [r for b in bookings for r in self.plan(b, now)]
        reminders.sort(key=lambda r: r.at)
        return reminders


class ReminderService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        notifier: Optional[Notifier] = None,
        config: Optional[BookingConfig] = None,
        clock: Optional[Callable[[], _dt.datetime]] = None,
    ) -> None:
        self._config = config or BookingConfig()
        self._session_factory = session_factory
        self._notifier = notifier or LoggingNotifier()
        self._planner = ReminderPlanner(self._config.reminder_hour)
        self._clock = clock or _dt.datetime.now
        self._sent: Set[Tuple[Optional[int], str, _dt.date]] = set()
        self._last_tick: Optional[_dt.datetime] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _upcoming(self, since: _dt.datetime, now: _dt.datetime) -> List[CommittedBooking]:
        async with self._session_factory() as session:
            rows = await BookingRepository(session).list_upcoming(since.date(), now.date() + _dt.timedelta(days=1))
        return [booking_to_committed(b) for b in rows]

    async def tick(self) -> List[Reminder]:
        """Deliver reminders that came due since the previous tick."""
        now = self._clock()
        self._sent = {key for key in self._sent if key[2] >= now.date()}
        since = self._last_tick or now - _dt.timedelta(seconds=self._config.reminder_interval_seconds)
        bookings = await self._upcoming(since, now)
        due = [
            r for r in self._planner.plan_all(bookings, since)
            if r.at <= now and r.key not in self._sent
        ]
        for reminder in due:
            await self._notifier.notify(reminder)
            self._sent.add(reminder.key)
        self._last_tick = now
        return due

    async def _run(self) -> None:
        while True:
            try:
                await self.tick()
            except Exception as exc:
                logger.warning("ReminderService: tick failed: %s", exc)
            await asyncio.sleep(self._config.reminder_interval_seconds)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("ReminderService started (every %ds)", self._config.reminder_interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("ReminderService stopped")
