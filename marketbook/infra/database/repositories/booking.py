"""Booking repository: committed-time lookups and the owner/client listings."""
from __future__ import annotations

import datetime as _dt
from typing import Iterable, List, Optional

from sqlalchemy import select

from marketbook.infra.database.models.booking import Booking
from marketbook.infra.database.repositories.base import BaseRepository

COMMITTED = ("pending", "confirmed")


class BookingRepository(BaseRepository[Booking]):
    model = Booking

    async def list_committed(
        self,
        order_id: int,
        start_date: _dt.date,
        end_date: _dt.date,
        *,
        market_member_id: Optional[int] = None,
        exclude_ids: Iterable[int] = (),
    ) -> List[Booking]:
        """Pending and confirmed bookings of an order between two dates (inclusive)."""
        stmt = (
            select(Booking)
            .where(Booking.order_id == order_id)
            .where(Booking.status.in_(COMMITTED))
            .where(Booking.date >= start_date)
            .where(Booking.date <= end_date)
            .order_by(Booking.date, Booking.start_time)
        )
        if market_member_id is not None:
            stmt = stmt.where(Booking.market_member_id == market_member_id)
        excluded = list(exclude_ids)
        if excluded:
            stmt = stmt.where(Booking.id.not_in(excluded))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_filtered(
        self,
        *,
        order_id: Optional[int] = None,
        client_id: Optional[int] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Booking]:
        stmt = select(Booking).order_by(Booking.date, Booking.start_time)
        if order_id is not None:
            stmt = stmt.where(Booking.order_id == order_id)
        if client_id is not None:
            stmt = stmt.where(Booking.client_id == client_id)
        if status:
            stmt = stmt.where(Booking.status == status)
        stmt = stmt.offset(skip).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_upcoming(self, since: _dt.date, until: _dt.date, status: str = "confirmed") -> List[Booking]:
        stmt = (
            select(Booking)
            .where(Booking.status == status)
            .where(Booking.date >= since)
            .where(Booking.date <= until)
            .order_by(Booking.date, Booking.start_time)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update_status(self, id: int, status: str) -> Optional[Booking]:
        return await self.update(id, {"status": status})
