"""ScheduleService: owner edits to an order's weekly pattern and break exclusions."""
from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from marketbook.config.booking import BookingConfig
from marketbook.core.exceptions import NotFoundError, ValidationError
from marketbook.infra.database.models.break_exclusion import BreakExclusion
from marketbook.infra.database.models.service_order import ServiceOrder
from marketbook.infra.database.repositories import BreakExclusionRepository, ServiceOrderRepository
from marketbook.scheduling.pattern import DaySchedule, WeeklyPattern
from marketbook.scheduling.projector import CommittedBooking, effective_breaks
from marketbook.scheduling.times import TimeRange
from marketbook.services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BreakOverlap:
    """A committed booking that runs into one of the day's effective breaks."""

    date: _dt.date
    break_range: TimeRange
    booking: CommittedBooking

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "break": self.break_range.to_dict(),
            "booking": {**self.booking.to_dict(), "id": self.booking.booking_id},
        }


class ScheduleService:
    def __init__(
        self,
        session: AsyncSession,
        config: Optional[BookingConfig] = None,
        today: Optional[Callable[[], _dt.date]] = None,
    ) -> None:
        self._availability = AvailabilityService(session, config, today)
        self._config = self._availability.config
        self._order_repo = ServiceOrderRepository(session)
        self._exclusion_repo = BreakExclusionRepository(session)

    async def _load(self, order_id: int) -> Tuple[ServiceOrder, WeeklyPattern]:
        order = await self._availability.get_order(order_id)
        return order, self._availability.pattern_for(order)

    async def _save(self, order: ServiceOrder, pattern: WeeklyPattern) -> WeeklyPattern:
        await self._order_repo.save_schedule(order.id, pattern.to_dict())
        logger.info("Saved weekly pattern for order %s", order.id, extra={"order_id": order.id})
        return pattern

    # ─── pattern ─────────────────────────────────────────────────────────

    async def get_pattern(self, order_id: int) -> WeeklyPattern:
        _, pattern = await self._load(order_id)
        return pattern

    async def replace_pattern(self, order_id: int, data: Dict[str, Any]) -> WeeklyPattern:
        order = await self._availability.get_order(order_id)
        pattern = WeeklyPattern.from_dict(data, default_horizon=self._config.horizon_days)
        pattern.set_horizon(pattern.subscribe_ahead_days, self._config.max_horizon_days)
        return await self._save(order, pattern)

    async def set_day(self, order_id: int, day: str, data: Dict[str, Any]) -> WeeklyPattern:
        order, pattern = await self._load(order_id)
        pattern.set_day(day, DaySchedule.from_dict(data))
        return await self._save(order, pattern)

    async def apply_defaults(self, order_id: int, start: Any = None, end: Any = None) -> WeeklyPattern:
        order, pattern = await self._load(order_id)
        pattern.apply_defaults_to_workdays(
            start or self._config.default_work_start, end or self._config.default_work_end
        )
        return await self._save(order, pattern)

    async def add_break(
        self, order_id: int, day: str, start: Any = None, end: Any = None
    ) -> Tuple[WeeklyPattern, TimeRange]:
        order, pattern = await self._load(order_id)
        placed = pattern.add_break(
            day,
            start,
            end,
            default_minutes=self._config.default_break_minutes,
            midday_start=self._config.midday_break_start,
        )
        return await self._save(order, pattern), placed

    async def update_break(
        self, order_id: int, day: str, index: int, field_name: str, new_time: Any
    ) -> WeeklyPattern:
        order, pattern = await self._load(order_id)
        pattern.update_break(day, index, field_name, new_time)
        return await self._save(order, pattern)

    async def delete_break(self, order_id: int, day: str, index: int) -> WeeklyPattern:
        order, pattern = await self._load(order_id)
        pattern.delete_break(day, index)
        return await self._save(order, pattern)

    # ─── break overlaps ──────────────────────────────────────────────────

    async def break_overlaps(self, order_id: int) -> List[BreakOverlap]:
        """Committed bookings in the horizon that collide with an effective break."""
        order = await self._availability.get_order(order_id)
        ctx = await self._availability.load_context(order)
        overlaps: List[BreakOverlap] = []
        for booking in ctx.bookings:
            schedule = ctx.pattern.for_date(booking.date)
            if not schedule.is_open:
                continue
            for brk in effective_breaks(schedule, booking.date, ctx.exclusions):
                if booking.time_range.overlaps(brk):
                    overlaps.append(BreakOverlap(booking.date, brk, booking))
        overlaps.sort(key=lambda o: (o.date, o.break_range, o.booking.start_time))
        return overlaps

    async def prioritize_bookings(self, order_id: int) -> List[BreakExclusion]:
        """Exclude every break that collides with a booking, on that booking's date only."""
        pairs = {(o.date, o.break_range) for o in await self.break_overlaps(order_id)}
        created = [
            await self._exclusion_repo.create(
                {"order_id": order_id, "date": day, "start_time": brk.start, "end_time": brk.end}
            )
            for day, brk in sorted(pairs)
        ]
        logger.info("Prioritised bookings over %d break(s) on order %s", len(created), order_id,
                    extra={"order_id": order_id})
        return created

    # ─── exclusions ──────────────────────────────────────────────────────

    async def list_exclusions(self, order_id: int) -> List[BreakExclusion]:
        await self._availability.get_order(order_id)
        return await self._exclusion_repo.list_for_order(order_id)

    async def add_exclusion(self, order_id: int, date: _dt.date, brk: TimeRange) -> BreakExclusion:
        _, pattern = await self._load(order_id)
        if brk not in pattern.for_date(date).breaks:
            raise ValidationError(
                f"No {brk} break on {date.isoformat()} to exclude",
                details={"date": date.isoformat(), "break": brk.to_dict()},
            )
        existing = await self._exclusion_repo.find(order_id, date, brk.start, brk.end)
        if existing is not None:
            return existing
        return await self._exclusion_repo.create(
            {"order_id": order_id, "date": date, "start_time": brk.start, "end_time": brk.end}
        )

    async def delete_exclusion(self, order_id: int, date: _dt.date, brk: TimeRange) -> None:
        await self._availability.get_order(order_id)
        deleted = await self._exclusion_repo.delete_match(order_id, date, brk.start, brk.end)
        if not deleted:
            raise NotFoundError(
                "Break exclusion not found", details={"date": date.isoformat(), "break": brk.to_dict()}
            )
