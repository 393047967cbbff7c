"""
Built-in exception types. Add new ones here or via exception_factory().
"""
from __future__ import annotations

from marketbook.core.exceptions.base import ProjectError


class ConfigurationError(ProjectError):
    """Invalid or missing configuration."""

    default_code = "CONFIGURATION_ERROR"
    default_http_status = 500


class ValidationError(ProjectError):
    """Request or input validation failed (pattern edits, malformed times)."""

    default_code = "VALIDATION_ERROR"
    default_http_status = 400


class NotFoundError(ProjectError):
    """Requested resource not found."""

    default_code = "NOT_FOUND"
    default_http_status = 404


class ConflictError(ProjectError):
    """Resource state conflict (e.g. duplicate, invalid status transition)."""

    default_code = "CONFLICT"
    default_http_status = 409


class ExternalServiceError(ProjectError):
    """Marketplace backend or database failed; safe to retry."""

    default_code = "EXTERNAL_SERVICE_ERROR"
    default_http_status = 502


# ── Scheduling ───────────────────────────────────────────────────────────────


class NoAvailableSlot(ProjectError):
    """No gap in the work window can hold the requested break."""

    default_code = "NO_AVAILABLE_SLOT"
    default_http_status = 409


class SlotRejected(ProjectError):
    """Base for candidate-slot rejections; the staged list is left unchanged."""

    default_code = "SLOT_REJECTED"
    default_http_status = 409


class OutOfWorkHours(SlotRejected):
    default_code = "OUT_OF_WORK_HOURS"
    default_http_status = 400


class StartAfterEnd(SlotRejected):
    default_code = "START_AFTER_END"
    default_http_status = 400


class BreakConflict(SlotRejected):
    default_code = "BREAK_CONFLICT"


class BookingConflict(SlotRejected):
    default_code = "BOOKING_CONFLICT"


class DuplicateSelection(SlotRejected):
    default_code = "DUPLICATE_SELECTION"


class EmptySelection(ProjectError):
    """Submission attempted with nothing staged."""

    default_code = "EMPTY_SELECTION"
    default_http_status = 400


class BookingRejected(ConflictError):
    """Backend refused a check-in batch; none of its slots were committed."""

    default_code = "BOOKING_REJECTED"
