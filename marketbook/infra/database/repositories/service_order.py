"""ServiceOrder repository."""
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import select

from marketbook.infra.database.models.service_order import ServiceOrder
from marketbook.infra.database.repositories.base import BaseRepository


class ServiceOrderRepository(BaseRepository[ServiceOrder]):
    model = ServiceOrder

    async def get_for_update(self, id: int) -> Optional[ServiceOrder]:
        """Load the order with a row lock held until the transaction ends.

        Check-ins and reschedules on the same order queue up behind it.
        """
        stmt = select(ServiceOrder).where(ServiceOrder.id == id).with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def save_schedule(self, id: int, schedule: dict[str, Any]) -> Optional[ServiceOrder]:
        return await self.update(id, {"weekly_schedule": schedule})
