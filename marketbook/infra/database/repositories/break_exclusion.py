"""BreakExclusion repository."""
from __future__ import annotations

import datetime as _dt
from typing import List, Optional

from sqlalchemy import delete as sa_delete, select

from marketbook.infra.database.models.break_exclusion import BreakExclusion
from marketbook.infra.database.repositories.base import BaseRepository


class BreakExclusionRepository(BaseRepository[BreakExclusion]):
    model = BreakExclusion

    async def list_for_order(
        self,
        order_id: int,
        start_date: Optional[_dt.date] = None,
        end_date: Optional[_dt.date] = None,
    ) -> List[BreakExclusion]:
        stmt = (
            select(BreakExclusion)
            .where(BreakExclusion.order_id == order_id)
            .order_by(BreakExclusion.date, BreakExclusion.start_time)
        )
        if start_date is not None:
            stmt = stmt.where(BreakExclusion.date >= start_date)
        if end_date is not None:
            stmt = stmt.where(BreakExclusion.date <= end_date)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find(
        self, order_id: int, date: _dt.date, start_time: _dt.time, end_time: _dt.time
    ) -> Optional[BreakExclusion]:
        stmt = (
            select(BreakExclusion)
            .where(BreakExclusion.order_id == order_id)
            .where(BreakExclusion.date == date)
            .where(BreakExclusion.start_time == start_time)
            .where(BreakExclusion.end_time == end_time)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_match(
        self, order_id: int, date: _dt.date, start_time: _dt.time, end_time: _dt.time
    ) -> int:
        """Delete the exclusion for exactly this date and break; returns rows deleted."""
        stmt = (
            sa_delete(BreakExclusion)
            .where(BreakExclusion.order_id == order_id)
            .where(BreakExclusion.date == date)
            .where(BreakExclusion.start_time == start_time)
            .where(BreakExclusion.end_time == end_time)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount
