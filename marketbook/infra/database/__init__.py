"""
marketbook.infra.database – PostgreSQL async engine, models and repositories.

Public API
──────────
  build_engine, build_session_factory, session_scope, init_db, close_engine
  Base, Market, MarketMember, ServiceOrder, Booking, BreakExclusion (models)
  BaseRepository and one repository per model
"""
from marketbook.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
    session_scope,
)
from marketbook.infra.database.models import (
    Base,
    Booking,
    BreakExclusion,
    Market,
    MarketMember,
    ServiceOrder,
)
from marketbook.infra.database.repositories import (
    BaseRepository,
    BookingRepository,
    BreakExclusionRepository,
    MarketMemberRepository,
    MarketRepository,
    ServiceOrderRepository,
)

__all__ = [
    "build_engine",
    "build_session_factory",
    "close_engine",
    "ensure_database_exists",
    "init_db",
    "session_scope",
    "Base",
    "Booking",
    "BreakExclusion",
    "Market",
    "MarketMember",
    "ServiceOrder",
    "BaseRepository",
    "BookingRepository",
    "BreakExclusionRepository",
    "MarketMemberRepository",
    "MarketRepository",
    "ServiceOrderRepository",
]
