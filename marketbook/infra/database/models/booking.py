"""Booking ORM: one client's time slot on a service order."""
from __future__ import annotations

import datetime as _dt
from typing import Optional

from sqlalchemy import BigInteger, Date, ForeignKey, Index, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column

from marketbook.infra.database.models.base import Base, TimestampMixin, _int_pk


class Booking(Base, TimestampMixin):
    """
    status: "pending" | "confirmed" | "rejected" | "cancelled".
    Only pending and confirmed rows occupy time.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_order_date", "order_id", "date"),
        Index("ix_bookings_member_date", "market_member_id", "date"),
    )

    id: Mapped[int] = _int_pk()
    order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("service_orders.id", ondelete="CASCADE"), nullable=False
    )
    client_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True, index=True)
    market_member_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("market_members.id", ondelete="SET NULL"), nullable=True
    )
    date: Mapped[_dt.date] = mapped_column(Date, nullable=False)
    start_time: Mapped[_dt.time] = mapped_column(Time, nullable=False)
    end_time: Mapped[_dt.time] = mapped_column(Time, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="confirmed")
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
