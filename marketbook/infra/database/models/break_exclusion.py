"""BreakExclusion ORM: a pattern break suppressed for one date of one order."""
from __future__ import annotations

import datetime as _dt

from sqlalchemy import BigInteger, Date, ForeignKey, Time, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from marketbook.infra.database.models.base import Base, TimestampMixin, _int_pk


class BreakExclusion(Base, TimestampMixin):
    __tablename__ = "break_exclusions"
    __table_args__ = (
        UniqueConstraint("order_id", "date", "start_time", "end_time", name="uq_break_exclusions_slot"),
    )

    id: Mapped[int] = _int_pk()
    order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("service_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date: Mapped[_dt.date] = mapped_column(Date, nullable=False)
    start_time: Mapped[_dt.time] = mapped_column(Time, nullable=False)
    end_time: Mapped[_dt.time] = mapped_column(Time, nullable=False)
