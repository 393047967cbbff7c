"""Markets API: a market and its members (the bookable resources)."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from marketbook.api.dependencies import get_session
from marketbook.api.schemas.markets import MarketOut, MemberOut
from marketbook.infra.database.repositories import MarketMemberRepository, MarketRepository

router = APIRouter(prefix="/markets", tags=["markets"])


@router.get("/{market_id}", response_model=MarketOut)
async def get_market(market_id: int, session: AsyncSession = Depends(get_session)):
    market = await MarketRepository(session).get_by_id(market_id)
    if market is None:
        raise HTTPException(status_code=404, detail="Market not found")
    members = await MarketMemberRepository(session).list_for_market(market_id)
    return MarketOut(
        id=market.id,
        name=market.name,
        members=[
            MemberOut(
                id=m.id,
                name=m.name or "",
                avatar_url=m.avatar_url,
                role=m.role,
                status=m.status,
                is_active=m.is_active,
            )
            for m in members
        ],
    )
