#!/usr/bin/env python3
"""Seed a demo market with three specialists and one bookable order.

The order runs in ``select`` mode with Monday to Friday 09:00-17:00 and a
midday break, so the client flow (pick a specialist, then a time) can be
tried against a local API straight away. Re-running replaces the demo rows.

Run:
    python -m marketbook.scripts.seed_demo
"""
from __future__ import annotations

import asyncio
import logging

from sqlalchemy import delete, select

from marketbook.config import load_booking_config
from marketbook.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
    session_scope,
)
from marketbook.infra.database.models import Market, MarketMember, ServiceOrder
from marketbook.scheduling.pattern import WORKDAYS, default_pattern

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

DEMO_MARKET = "Demo Studio"

MEMBERS = [
    {"name": "Ada", "role": "stylist", "status": "accepted"},
    {"name": "Grace", "role": "stylist", "status": "accepted"},
    # pending members are listed but cannot be booked
    {"name": "Linus", "role": "assistant", "status": "pending"},
]


async def seed() -> None:
    config = load_booking_config()
    await ensure_database_exists()
    factory = build_session_factory(build_engine())
    await init_db()

    pattern = default_pattern(config.default_work_start, config.default_work_end, config.horizon_days)
    for day in WORKDAYS:
        pattern.add_break(
            day,
            default_minutes=config.default_break_minutes,
            midday_start=config.midday_break_start,
        )

    async with session_scope(factory) as session:
        old = (await session.execute(select(Market.id).where(Market.name == DEMO_MARKET))).scalars().all()
        if old:
            await session.execute(delete(ServiceOrder).where(ServiceOrder.market_id.in_(old)))
            await session.execute(delete(MarketMember).where(MarketMember.market_id.in_(old)))
            await session.execute(delete(Market).where(Market.id.in_(old)))
            logger.info("Removed %d previous demo market(s)", len(old))

        market = Market(name=DEMO_MARKET, description="Seeded by marketbook.scripts.seed_demo")
        session.add(market)
        await session.flush()

        session.add_all(MarketMember(market_id=market.id, **m) for m in MEMBERS)
        order = ServiceOrder(
            market_id=market.id,
            title="Haircut",
            weekly_schedule=pattern.to_dict(),
            work_duration_per_client=45,
            resource_booking_mode="select",
        )
        session.add(order)
        await session.flush()
        logger.info("Seeded market %s with order %s", market.id, order.id)

    await close_engine()


if __name__ == "__main__":
    asyncio.run(seed())
