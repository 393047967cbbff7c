"""Market and MarketMember ORM models: the owner's storefront and its bookable staff."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from marketbook.infra.database.models.base import Base, TimestampMixin, _int_pk


class Market(Base, TimestampMixin):
    __tablename__ = "markets"

    id: Mapped[int] = _int_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class MarketMember(Base, TimestampMixin):
    """
    A specialist (or seat) inside a market.
    status: "pending" | "accepted" | "rejected"; only accepted + active members are bookable.
    """

    __tablename__ = "market_members"
    __table_args__ = (
        Index("ix_market_members_market_status", "market_id", "status"),
    )

    id: Mapped[int] = _int_pk()
    market_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("markets.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    role: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)
