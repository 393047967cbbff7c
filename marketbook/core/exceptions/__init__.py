"""
Project exception system.

Usage:
    from marketbook.core.exceptions import ProjectError, ValidationError, exception_factory

    # Built-in types
    raise ValidationError("Break must end after it starts", details={"day": "monday"})

    # Add new type on demand
    SyncError = exception_factory("SyncError", code="SYNC_ERROR", http_status=502)
    raise SyncError("Failed to refresh bookings", cause=original_error)
"""
from marketbook.core.exceptions.base import ProjectError, exception_factory
from marketbook.core.exceptions.errors import (
    BookingConflict,
    BookingRejected,
    BreakConflict,
    ConfigurationError,
    ConflictError,
    DuplicateSelection,
    EmptySelection,
    ExternalServiceError,
    NoAvailableSlot,
    NotFoundError,
    OutOfWorkHours,
    SlotRejected,
    StartAfterEnd,
    ValidationError,
)

__all__ = [
    "ProjectError",
    "exception_factory",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ExternalServiceError",
    "NoAvailableSlot",
    "SlotRejected",
    "OutOfWorkHours",
    "StartAfterEnd",
    "BreakConflict",
    "BookingConflict",
    "DuplicateSelection",
    "EmptySelection",
    "BookingRejected",
]
