"""AvailabilityService: project an order's weekly pattern into bookable days.

Loads the order, its market members, break exclusions and committed
bookings, then hands them to the pure scheduling code. BookingService and
ScheduleService build on the same ScheduleContext.
"""
from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession

from marketbook.config.booking import BookingConfig
from marketbook.core.exceptions import NotFoundError, ValidationError
from marketbook.infra.database.models.booking import Booking
from marketbook.infra.database.models.market import MarketMember
from marketbook.infra.database.models.service_order import ServiceOrder
from marketbook.infra.database.repositories import (
    BookingRepository,
    BreakExclusionRepository,
    MarketMemberRepository,
    ServiceOrderRepository,
)
from marketbook.scheduling.pattern import WeeklyPattern
from marketbook.scheduling.projector import (
    AvailabilityResponse,
    AvailableDay,
    BookingStatus,
    CommittedBooking,
    index_exclusions,
)
from marketbook.scheduling.resources import (
    MemberStatus,
    Resource,
    ResourceBookingMode,
    ResourceResolver,
)
from marketbook.scheduling.times import TimeRange

logger = logging.getLogger(__name__)


def member_to_resource(member: MarketMember) -> Resource:
    return Resource(
        id=member.id,
        name=member.name or "",
        avatar_url=member.avatar_url,
        role=member.role,
        status=MemberStatus(member.status),
        is_active=bool(member.is_active),
    )


def booking_to_committed(booking: Booking) -> CommittedBooking:
    return CommittedBooking(
        date=booking.date,
        start_time=booking.start_time,
        end_time=booking.end_time,
        client_id=booking.client_id,
        resource_id=booking.market_member_id,
        status=BookingStatus(booking.status),
        booking_id=booking.id,
    )


@dataclass
class ScheduleContext:
    """Everything needed to project one order over a date range."""

    order: ServiceOrder
    pattern: WeeklyPattern
    resolver: ResourceResolver
    today: _dt.date
    eligible: List[Resource] = field(default_factory=list)
    bookings: List[CommittedBooking] = field(default_factory=list)
    exclusions: Dict[_dt.date, Set[TimeRange]] = field(default_factory=dict)

    @property
    def mode(self) -> ResourceBookingMode:
        return self.resolver.mode

    def days(
        self,
        start: Optional[_dt.date] = None,
        end: Optional[_dt.date] = None,
        resource_id: Optional[int] = None,
        extra: Iterable[CommittedBooking] = (),
    ) -> List[AvailableDay]:
        return self.resolver.project(
            self.pattern,
            self.today,
            list(self.bookings) + list(extra),
            self.exclusions,
            eligible=self.eligible,
            resource_id=resource_id,
            start=start,
            end=end,
        )

    def day(
        self,
        date: _dt.date,
        resource_id: Optional[int] = None,
        extra: Iterable[CommittedBooking] = (),
    ) -> Optional[AvailableDay]:
        """Projection of a single date, or None outside the horizon."""
        found = self.days(date, date, resource_id, extra)
        return found[0] if found and found[0].date == date else None

    def check_resource(self, resource_id: Optional[int]) -> None:
        if resource_id is None:
            return
        if resource_id not in {r.id for r in self.eligible}:
            raise ValidationError(
                f"Market member {resource_id} cannot be booked for this order",
                details={"marketMemberId": resource_id},
            )


class AvailabilityService:
    def __init__(
        self,
        session: AsyncSession,
        config: Optional[BookingConfig] = None,
        today: Optional[Callable[[], _dt.date]] = None,
    ) -> None:
        self._config = config or BookingConfig()
        self._today = today or _dt.date.today
        self._order_repo = ServiceOrderRepository(session)
        self._booking_repo = BookingRepository(session)
        self._exclusion_repo = BreakExclusionRepository(session)
        self._member_repo = MarketMemberRepository(session)

    @property
    def config(self) -> BookingConfig:
        return self._config

    def today(self) -> _dt.date:
        return self._today()

    async def get_order(self, order_id: int, *, lock: bool = False) -> ServiceOrder:
        if lock:
            order = await self._order_repo.get_for_update(order_id)
        else:
            order = await self._order_repo.get_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found", details={"orderId": order_id})
        return order

    def pattern_for(self, order: ServiceOrder) -> WeeklyPattern:
        """The order's stored pattern; orders without one are closed every day."""
        pattern = WeeklyPattern.from_dict(order.weekly_schedule, default_horizon=self._config.horizon_days)
        if pattern.subscribe_ahead_days > self._config.max_horizon_days:
            pattern.subscribe_ahead_days = self._config.max_horizon_days
        return pattern

    async def eligible_resources(self, order: ServiceOrder) -> List[Resource]:
        if order.market_id is None:
            return []
        members = await self._member_repo.list_for_market(order.market_id)
        return ResourceResolver.list_eligible_resources(member_to_resource(m) for m in members)

    async def load_context(
        self,
        order: ServiceOrder,
        start: Optional[_dt.date] = None,
        end: Optional[_dt.date] = None,
        *,
        exclude_booking_ids: Iterable[int] = (),
    ) -> ScheduleContext:
        """Load bookings and exclusions for ``[start, end]`` (defaults to the horizon)."""
        today = self.today()
        pattern = self.pattern_for(order)
        mode = ResourceBookingMode.of(order.resource_booking_mode)
        resolver = ResourceResolver(mode, order.required_resource_count or 1, order.capacity)
        eligible = await self.eligible_resources(order) if mode is not ResourceBookingMode.SINGLE else []

        first = start or today
        last = end or today + _dt.timedelta(days=pattern.subscribe_ahead_days)
        rows = await self._booking_repo.list_committed(
            order.id, first, last, exclude_ids=exclude_booking_ids
        )
        excluded = await self._exclusion_repo.list_for_order(order.id, first, last)
        exclusions = index_exclusions((row.date, TimeRange(row.start_time, row.end_time)) for row in excluded)

        return ScheduleContext(
            order=order,
            pattern=pattern,
            resolver=resolver,
            today=today,
            eligible=eligible,
            bookings=[booking_to_committed(b) for b in rows],
            exclusions=exclusions,
        )

    async def get_available_slots(
        self,
        order_id: int,
        start_date: Optional[_dt.date] = None,
        end_date: Optional[_dt.date] = None,
        market_member_id: Optional[int] = None,
    ) -> AvailabilityResponse:
        order = await self.get_order(order_id)
        if start_date and end_date and start_date > end_date:
            raise ValidationError("startDate must not be after endDate")

        ctx = await self.load_context(order, start_date, end_date)
        if ctx.mode is ResourceBookingMode.SELECT:
            ctx.check_resource(market_member_id)
        else:
            market_member_id = None

        days = ctx.days(start_date, end_date, market_member_id)
        logger.debug(
            "Projected %d days for order %s (mode=%s)", len(days), order_id, ctx.mode.value,
            extra={"order_id": order_id, "resource_id": market_member_id},
        )
        return AvailabilityResponse(
            available_days=days,
            work_duration_per_client=order.work_duration_per_client,
        )
