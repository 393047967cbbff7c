"""BookingSession: client-side flow from date pick to check-in.

Idle -> DateSelected -> [ResourceSelected] -> SlotsStaged -> Submitting ->
Committed | Rejected. Every fetch captures a request generation; a response
whose generation is no longer current is dropped, so the last request wins.
"""
from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

from marketbook.core.exceptions import ProjectError, ValidationError
from marketbook.scheduling.projector import AvailabilityResponse, AvailableDay
from marketbook.scheduling.resources import Resource, ResourceBookingMode, ResourceResolver
from marketbook.scheduling.submission import BookingSubmission, CheckInGateway, SubmissionResult
from marketbook.scheduling.validator import SelectedBooking, SlotValidator

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    DATE_SELECTED = "date_selected"
    RESOURCE_SELECTED = "resource_selected"
    SLOTS_STAGED = "slots_staged"
    SUBMITTING = "submitting"
    COMMITTED = "committed"
    REJECTED = "rejected"
    CLOSED = "closed"


class MarketplaceGateway(CheckInGateway, Protocol):
    async def get_available_slots(
        self,
        order_id: int,
        start_date: Optional[_dt.date] = None,
        end_date: Optional[_dt.date] = None,
        market_member_id: Optional[int] = None,
    ) -> AvailabilityResponse:
        ...

    async def get_market_members(self, market_id: int) -> List[Resource]:
        ...


@dataclass(frozen=True)
class OrderContext:
    """What the session needs to know about the order being booked."""

    id: int
    market_id: Optional[int] = None
    resource_booking_mode: ResourceBookingMode = ResourceBookingMode.SINGLE
    required_resource_count: int = 1
    checkin_requires_approval: bool = False
    work_duration_per_client: Optional[int] = None


class BookingSession:
    def __init__(self, gateway: MarketplaceGateway, order: OrderContext, client_id: Optional[int] = None) -> None:
        self._gateway = gateway
        self.order = order
        self.client_id = client_id
        mode = ResourceBookingMode.of(order.resource_booking_mode)
        self.resolver = ResourceResolver(mode, order.required_resource_count)
        self.validator = SlotValidator(mode)
        self.submission = BookingSubmission(gateway, order.id, mode, order.checkin_requires_approval)

        self.state = SessionState.IDLE
        self.generation = 0
        self._resources_generation = 0
        self.days: Dict[_dt.date, AvailableDay] = {}
        self.resources: List[Resource] = []
        self.selected_date: Optional[_dt.date] = None
        self.selected_resource: Optional[int] = None
        self.staged: List[SelectedBooking] = []
        self.picker_ready = False
        self.work_duration_per_client = order.work_duration_per_client

    @property
    def mode(self) -> ResourceBookingMode:
        return self.resolver.mode

    @property
    def closed(self) -> bool:
        return self.state is SessionState.CLOSED

    # ─── fetches ─────────────────────────────────────────────────────────

    async def load_availability(
        self,
        start: Optional[_dt.date] = None,
        end: Optional[_dt.date] = None,
        resource_id: Optional[int] = None,
    ) -> bool:
        """Fetch available days; returns False when the response was stale."""
        self.generation += 1
        token = self.generation
        response = await self._gateway.get_available_slots(self.order.id, start, end, resource_id)
        if token != self.generation:
            logger.debug(
                "Dropping stale availability response (generation %d, current %d)",
                token, self.generation, extra={"order_id": self.order.id, "generation": token},
            )
            return False
        if start is None and end is None:
            self.days = {}
        for day in response.available_days:
            self.days[day.date] = day
        if response.work_duration_per_client is not None:
            self.work_duration_per_client = response.work_duration_per_client
        return True

    async def load_resources(self) -> List[Resource]:
        if self.order.market_id is None or self.mode is ResourceBookingMode.SINGLE:
            return []
        self._resources_generation += 1
        token = self._resources_generation
        members = await self._gateway.get_market_members(self.order.market_id)
        if token != self._resources_generation:
            logger.debug("Dropping stale resource list (generation %d)", token)
            return self.resources
        self.resources = self.resolver.list_eligible_resources(members)
        return self.resources

    # ─── selection ───────────────────────────────────────────────────────

    def _ensure_open(self) -> None:
        if self.closed:
            raise ValidationError("Booking session is closed")

    def select_date(self, day: _dt.date) -> None:
        """Choose a date; clears the resource choice and anything staged."""
        self._ensure_open()
        self.generation += 1
        self.selected_date = day
        self.selected_resource = None
        self.staged.clear()
        self.picker_ready = not self.resolver.requires_resource(self.resources)
        self.state = SessionState.DATE_SELECTED

    async def select_resource(self, resource_id: int) -> bool:
        """Pick a resource and re-fetch the selected date scoped to it.

        The picker stays gated until that fetch lands. Returns False if a
        newer request superseded it.
        """
        self._ensure_open()
        if self.selected_date is None:
            raise ValidationError("Select a date before choosing a specialist")
        if self.resources and resource_id not in {r.id for r in self.resources}:
            raise ValidationError(
                f"Resource {resource_id} is not available for this order", details={"resourceId": resource_id}
            )
        self.selected_resource = resource_id
        self.staged.clear()
        self.picker_ready = False
        self.state = SessionState.RESOURCE_SELECTED
        day = self.selected_date
        applied = await self.load_availability(day, day, resource_id)
        if not applied or self.selected_resource != resource_id or self.selected_date != day:
            return False
        self.picker_ready = True
        return True

    def stage(self, start: Any, end: Any) -> List[SelectedBooking]:
        self._ensure_open()
        if self.selected_date is None:
            raise ValidationError("Select a date first")
        if not self.picker_ready:
            raise ValidationError("Availability is still loading for the selected specialist")
        day = self.days.get(self.selected_date)
        if day is None:
            raise ValidationError(
                "Selected date is outside the bookable range",
                details={"date": self.selected_date.isoformat()},
            )
        self.validator.validate(day, start, end, self.staged, self.selected_resource)
        self.state = SessionState.SLOTS_STAGED
        return self.staged

    def remove(self, index: int) -> SelectedBooking:
        if not 0 <= index < len(self.staged):
            raise ValidationError(f"No staged slot at index {index}")
        removed = self.staged.pop(index)
        if not self.staged and self.state is SessionState.SLOTS_STAGED:
            self.state = SessionState.DATE_SELECTED
        return removed

    # ─── submission ──────────────────────────────────────────────────────

    async def submit(self) -> SubmissionResult:
        self._ensure_open()
        previous = self.state
        self.state = SessionState.SUBMITTING
        try:
            result = await self.submission.submit(self.staged, client_id=self.client_id)
        except ProjectError:
            if not self.closed:
                self.state = SessionState.REJECTED if self.staged else previous
            raise
        if self.closed:
            return result
        self.state = SessionState.COMMITTED
        return result

    def close(self) -> None:
        """Drop anything in flight and clear staged selections."""
        self.generation += 1
        self._resources_generation += 1
        self.staged.clear()
        self.picker_ready = False
        self.state = SessionState.CLOSED
