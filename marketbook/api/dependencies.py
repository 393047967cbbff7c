"""FastAPI dependency providers."""
from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from marketbook.config.booking import BookingConfig
from marketbook.services import AvailabilityService, BookingService, ScheduleService


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a transactional AsyncSession from the app-level session factory."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_booking_config(request: Request) -> BookingConfig:
    return getattr(request.app.state, "booking_config", None) or BookingConfig()


def get_availability_service(
    session: AsyncSession = Depends(get_session),
    config: BookingConfig = Depends(get_booking_config),
) -> AvailabilityService:
    return AvailabilityService(session, config)


def get_booking_service(
    session: AsyncSession = Depends(get_session),
    config: BookingConfig = Depends(get_booking_config),
) -> BookingService:
    return BookingService(session, config)


def get_schedule_service(
    session: AsyncSession = Depends(get_session),
    config: BookingConfig = Depends(get_booking_config),
) -> ScheduleService:
    return ScheduleService(session, config)
