"""Repositories for the marketbook database."""
from marketbook.infra.database.repositories.base import BaseRepository
from marketbook.infra.database.repositories.booking import BookingRepository
from marketbook.infra.database.repositories.break_exclusion import BreakExclusionRepository
from marketbook.infra.database.repositories.market import MarketMemberRepository, MarketRepository
from marketbook.infra.database.repositories.service_order import ServiceOrderRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "BreakExclusionRepository",
    "MarketRepository",
    "MarketMemberRepository",
    "ServiceOrderRepository",
]
