"""
marketbook.config.booking – scheduling defaults (horizon, breaks, reminders).

Env vars: BOOKING_HORIZON_DAYS, BOOKING_MAX_HORIZON_DAYS, BOOKING_DEFAULT_BREAK_MINUTES,
BOOKING_MIDDAY_BREAK_START, BOOKING_DEFAULT_WORK_START, BOOKING_DEFAULT_WORK_END,
BOOKING_REMINDER_HOUR, BOOKING_REMINDER_INTERVAL_SECONDS.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, time


def _parse_hhmm(value: str, name: str) -> time:
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except (AttributeError, ValueError):
        raise ValueError(f"{name} must be HH:MM, got {value!r}") from None


@dataclass(frozen=True)
class BookingConfig:
    """
    Defaults used when the owner's pattern does not say otherwise.

    ``horizon_days`` is the look-ahead applied to orders with no
    ``subscribeAheadDays``; ``max_horizon_days`` caps what an owner may set.
    """

    horizon_days: int = 90
    max_horizon_days: int = 365
    default_break_minutes: int = 60
    midday_break_start: time = time(12, 0)
    default_work_start: time = time(9, 0)
    default_work_end: time = time(17, 0)
    reminder_hour: int = 20
    reminder_interval_seconds: int = 3600

    def __post_init__(self) -> None:
        if self.horizon_days < 0:
            raise ValueError(f"horizon_days must be >= 0, got {self.horizon_days!r}")
        if self.max_horizon_days < self.horizon_days:
            raise ValueError("max_horizon_days must be >= horizon_days")
        if not 1 <= self.default_break_minutes <= 24 * 60:
            raise ValueError(
                f"default_break_minutes must be within 1..1440, got {self.default_break_minutes!r}"
            )
        if self.default_work_start >= self.default_work_end:
            raise ValueError("default_work_start must be before default_work_end")
        if not 0 <= self.reminder_hour <= 23:
            raise ValueError(f"reminder_hour must be within 0..23, got {self.reminder_hour!r}")
        if self.reminder_interval_seconds < 1:
            raise ValueError("reminder_interval_seconds must be positive")

    @classmethod
    def from_env(cls, **overrides: object) -> BookingConfig:
        def _int(attr: str, env_name: str, default: int) -> int:
            value = overrides.get(attr)
            return int(value) if value is not None else int(os.environ.get(env_name, default))

        def _time(attr: str, env_name: str, default: str) -> time:
            value = overrides.get(attr)
            if isinstance(value, time):
                return value
            return _parse_hhmm(str(value or os.environ.get(env_name, default)), env_name)

        return cls(
            horizon_days=_int("horizon_days", "BOOKING_HORIZON_DAYS", 90),
            max_horizon_days=_int("max_horizon_days", "BOOKING_MAX_HORIZON_DAYS", 365),
            default_break_minutes=_int("default_break_minutes", "BOOKING_DEFAULT_BREAK_MINUTES", 60),
            midday_break_start=_time("midday_break_start", "BOOKING_MIDDAY_BREAK_START", "12:00"),
            default_work_start=_time("default_work_start", "BOOKING_DEFAULT_WORK_START", "09:00"),
            default_work_end=_time("default_work_end", "BOOKING_DEFAULT_WORK_END", "17:00"),
            reminder_hour=_int("reminder_hour", "BOOKING_REMINDER_HOUR", 20),
            reminder_interval_seconds=_int(
                "reminder_interval_seconds", "BOOKING_REMINDER_INTERVAL_SECONDS", 3600
            ),
        )


def load_booking_config(**overrides: object) -> BookingConfig:
    return BookingConfig.from_env(**overrides)
