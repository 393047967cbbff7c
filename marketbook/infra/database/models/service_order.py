"""ServiceOrder ORM: a permanent service clients book time slots into."""
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import BigInteger, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from marketbook.infra.database.models.base import Base, TimestampMixin, _int_pk


class ServiceOrder(Base, TimestampMixin):
    """
    weekly_schedule holds the WeeklyPattern JSON form
    ({"monday": {...}, ..., "subscribeAheadDays": 90}); NULL means no schedule yet.
    resource_booking_mode: "single" | "select" | "multi" | "auto"
    """

    __tablename__ = "service_orders"

    id: Mapped[int] = _int_pk()
    market_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("markets.id", ondelete="SET NULL"), nullable=True, index=True
    )
    owner_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    weekly_schedule: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONB, nullable=True)
    work_duration_per_client: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    checkin_requires_approval: Mapped[bool] = mapped_column(nullable=False, default=False)
    resource_booking_mode: Mapped[str] = mapped_column(String(16), nullable=False, default="single")
    required_resource_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # Explicit concurrent-slot capacity for multi/auto; NULL derives it from members
    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)
