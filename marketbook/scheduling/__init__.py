"""
Availability scheduling and booking-slot management.

Pure domain code: no I/O except through the gateways handed to
BookingSubmission and BookingSession.
"""
from marketbook.scheduling.pattern import DaySchedule, WeeklyPattern, Weekday, default_pattern
from marketbook.scheduling.projector import (
    AvailabilityProjector,
    AvailabilityResponse,
    AvailableDay,
    BookingStatus,
    Capacity,
    CommittedBooking,
    effective_breaks,
    index_exclusions,
)
from marketbook.scheduling.resources import MemberStatus, Resource, ResourceBookingMode, ResourceResolver
from marketbook.scheduling.session import BookingSession, OrderContext, SessionState
from marketbook.scheduling.submission import BookingSubmission, SubmissionResult
from marketbook.scheduling.timeline import BlockKind, TimelineBlock, available_blocks, build_timeline, suggest_range
from marketbook.scheduling.times import TimeRange, format_time, parse_date, parse_time
from marketbook.scheduling.validator import SelectedBooking, SlotValidator

__all__ = [
    "AvailabilityProjector",
    "AvailabilityResponse",
    "AvailableDay",
    "BlockKind",
    "BookingSession",
    "BookingStatus",
    "BookingSubmission",
    "Capacity",
    "CommittedBooking",
    "DaySchedule",
    "MemberStatus",
    "OrderContext",
    "Resource",
    "ResourceBookingMode",
    "ResourceResolver",
    "SelectedBooking",
    "SessionState",
    "SlotValidator",
    "SubmissionResult",
    "TimeRange",
    "TimelineBlock",
    "WeeklyPattern",
    "Weekday",
    "available_blocks",
    "build_timeline",
    "default_pattern",
    "effective_breaks",
    "format_time",
    "index_exclusions",
    "parse_date",
    "parse_time",
    "suggest_range",
]
