"""ResourceResolver: per-specialist timelines and pooled capacity."""
from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence

from marketbook.scheduling.pattern import WeeklyPattern
from marketbook.scheduling.projector import (
    AvailabilityProjector,
    AvailableDay,
    CommittedBooking,
    ExclusionMap,
)
from marketbook.scheduling.times import TimeRange

logger = logging.getLogger(__name__)


class ResourceBookingMode(str, Enum):
    SINGLE = "single"
    SELECT = "select"
    MULTI = "multi"
    AUTO = "auto"

    @classmethod
    def of(cls, value: Any) -> "ResourceBookingMode":
        if value is None or value == "":
            return cls.SINGLE
        return cls(value)

    @property
    def pooled(self) -> bool:
        return self in (ResourceBookingMode.MULTI, ResourceBookingMode.AUTO)


class MemberStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Resource:
    """A market member who can be booked (specialist, seat, ...)."""

    id: int
    name: str = ""
    avatar_url: Optional[str] = None
    role: Optional[str] = None
    status: MemberStatus = MemberStatus.ACCEPTED
    is_active: bool = True

    @property
    def eligible(self) -> bool:
        return MemberStatus(self.status) is MemberStatus.ACCEPTED and self.is_active

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "avatarUrl": self.avatar_url,
            "role": self.role,
            "status": MemberStatus(self.status).value,
            "isActive": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Resource":
        user = data.get("User") or {}
        return cls(
            id=int(data["id"]),
            name=data.get("name") or user.get("name") or "",
            avatar_url=data.get("avatarUrl") or user.get("avatar"),
            role=data.get("role"),
            status=MemberStatus(data.get("status", MemberStatus.ACCEPTED.value)),
            is_active=bool(data.get("isActive", True)),
        )


class ResourceResolver:
    """Decides how resources partition availability for one order.

    ``select`` keeps an independent timeline per resource over the shared
    pattern. ``multi`` and ``auto`` pool bookings and expose capacity.
    """

    def __init__(
        self,
        mode: ResourceBookingMode = ResourceBookingMode.SINGLE,
        required_resource_count: int = 1,
        capacity: Optional[int] = None,
    ) -> None:
        self.mode = ResourceBookingMode.of(mode)
        self.required_resource_count = max(int(required_resource_count or 1), 1)
        self.capacity = capacity

    @staticmethod
    def list_eligible_resources(members: Iterable[Resource]) -> List[Resource]:
        return [m for m in members if m.eligible]

    def requires_resource(self, eligible: Sequence[Resource]) -> bool:
        """True when the client must pick a resource before choosing times."""
        return self.mode is ResourceBookingMode.SELECT and len(eligible) > 0

    def concurrent_slots(self, eligible: Sequence[Resource]) -> Optional[int]:
        if not self.mode.pooled:
            return None
        if self.capacity is not None:
            return self.capacity
        return len(eligible) // self.required_resource_count

    @staticmethod
    def bookings_for_resource(
        bookings: Iterable[CommittedBooking], resource_id: int
    ) -> List[CommittedBooking]:
        return [b for b in bookings if b.resource_id == resource_id]

    def project_for_resource(
        self,
        pattern: WeeklyPattern,
        resource_id: int,
        today: _dt.date,
        bookings: Iterable[CommittedBooking],
        exclusions: Optional[ExclusionMap] = None,
        start: Optional[_dt.date] = None,
        end: Optional[_dt.date] = None,
    ) -> List[AvailableDay]:
        own = self.bookings_for_resource(bookings, resource_id)
        return AvailabilityProjector(pattern, today, own, exclusions).project(start, end)

    def project(
        self,
        pattern: WeeklyPattern,
        today: _dt.date,
        bookings: Iterable[CommittedBooking],
        exclusions: Optional[ExclusionMap] = None,
        eligible: Sequence[Resource] = (),
        resource_id: Optional[int] = None,
        start: Optional[_dt.date] = None,
        end: Optional[_dt.date] = None,
    ) -> List[AvailableDay]:
        """Project according to the booking mode."""
        if self.mode is ResourceBookingMode.SELECT and resource_id is not None:
            return self.project_for_resource(pattern, resource_id, today, bookings, exclusions, start, end)
        projector = AvailabilityProjector(
            pattern, today, bookings, exclusions, capacity=self.concurrent_slots(eligible)
        )
        return projector.project(start, end)

    @staticmethod
    def assign_resource(
        eligible: Iterable[Resource],
        bookings: Iterable[CommittedBooking],
        day: _dt.date,
        slot: TimeRange,
    ) -> Optional[Resource]:
        """First eligible resource (by id) free for ``slot`` on ``day``."""
        busy = {
            b.resource_id
            for b in bookings
            if b.date == day and b.is_committed and b.time_range.overlaps(slot)
        }
        for resource in sorted(eligible, key=lambda r: r.id):
            if resource.eligible and resource.id not in busy:
                return resource
        logger.info("No free resource on %s for %s", day, slot)
        return None
