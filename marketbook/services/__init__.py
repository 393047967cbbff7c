"""Service layer: availability projection, check-in and lifecycle, schedule edits, reminders."""
from marketbook.services.availability_service import AvailabilityService, ScheduleContext
from marketbook.services.booking_service import BookingService, SlotRequest
from marketbook.services.reminder_service import (
    LoggingNotifier,
    Reminder,
    ReminderPlanner,
    ReminderService,
)
from marketbook.services.schedule_service import BreakOverlap, ScheduleService

__all__ = [
    "AvailabilityService",
    "ScheduleContext",
    "BookingService",
    "SlotRequest",
    "ScheduleService",
    "BreakOverlap",
    "ReminderPlanner",
    "ReminderService",
    "Reminder",
    "LoggingNotifier",
]
