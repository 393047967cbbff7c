"""Market and MarketMember repositories."""
from __future__ import annotations

from typing import List

from sqlalchemy import select

from marketbook.infra.database.models.market import Market, MarketMember
from marketbook.infra.database.repositories.base import BaseRepository


class MarketRepository(BaseRepository[Market]):
    model = Market


class MarketMemberRepository(BaseRepository[MarketMember]):
    model = MarketMember

    async def list_for_market(self, market_id: int) -> List[MarketMember]:
        stmt = select(MarketMember).where(MarketMember.market_id == market_id).order_by(MarketMember.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
