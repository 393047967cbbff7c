"""
marketbook.infra.database.models – SQLAlchemy 2.0 ORM models.

Exports Base, mixins, and all model classes.
"""
from marketbook.infra.database.models.base import Base, TimestampMixin, _int_pk
from marketbook.infra.database.models.booking import Booking
from marketbook.infra.database.models.break_exclusion import BreakExclusion
from marketbook.infra.database.models.market import Market, MarketMember
from marketbook.infra.database.models.service_order import ServiceOrder

__all__ = [
    "Base",
    "TimestampMixin",
    "_int_pk",
    "Market",
    "MarketMember",
    "ServiceOrder",
    "Booking",
    "BreakExclusion",
]
