"""BookingSubmission: send staged selections as one all-or-nothing check-in."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from marketbook.core.exceptions import (
    BookingRejected,
    ConflictError,
    EmptySelection,
    ExternalServiceError,
    ProjectError,
)
from marketbook.scheduling.projector import BookingStatus
from marketbook.scheduling.resources import ResourceBookingMode
from marketbook.scheduling.validator import SelectedBooking

logger = logging.getLogger(__name__)


class CheckInGateway(Protocol):
    async def check_in(
        self, order_id: int, slots: List[Dict[str, Any]], client_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """POST /bookings; returns ``{"bookings": [...], "errors": [...]}``."""
        ...


@dataclass
class SubmissionResult:
    status: BookingStatus
    bookings: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def awaiting_approval(self) -> bool:
        return self.status is BookingStatus.PENDING


class BookingSubmission:
    def __init__(
        self,
        gateway: CheckInGateway,
        order_id: int,
        mode: ResourceBookingMode = ResourceBookingMode.SINGLE,
        requires_approval: bool = False,
    ) -> None:
        self._gateway = gateway
        self.order_id = order_id
        self.mode = ResourceBookingMode.of(mode)
        self.requires_approval = requires_approval

    def build_payload(self, staged: List[SelectedBooking]) -> List[Dict[str, Any]]:
        include_resource = self.mode is ResourceBookingMode.SELECT
        return [item.to_payload(include_resource) for item in staged]

    async def submit(
        self, staged: List[SelectedBooking], client_id: Optional[int] = None
    ) -> SubmissionResult:
        """Submit every staged slot in a single call.

        On any failure nothing is committed and ``staged`` is left as is so
        the client can retry. On success ``staged`` is cleared.
        """
        if not staged:
            raise EmptySelection("Select at least one time slot before booking")

        payload = self.build_payload(staged)
        try:
            response = await self._gateway.check_in(self.order_id, payload, client_id=client_id)
        except (BookingRejected, ExternalServiceError):
            raise
        except ConflictError as exc:
            raise BookingRejected(exc.message, details=exc.details, cause=exc) from exc
        except ProjectError:
            raise
        except Exception as exc:
            logger.warning("Check-in for order %s failed: %s", self.order_id, exc, extra={"order_id": self.order_id})
            raise ExternalServiceError("Booking service unavailable, please retry", cause=exc) from exc

        errors = (response or {}).get("errors") or []
        if errors:
            logger.info(
                "Check-in for order %s rejected: %s", self.order_id, errors, extra={"order_id": self.order_id}
            )
            raise BookingRejected("Booking was rejected", details={"errors": errors})

        staged.clear()
        status = BookingStatus.PENDING if self.requires_approval else BookingStatus.CONFIRMED
        return SubmissionResult(status=status, bookings=list((response or {}).get("bookings") or []))
