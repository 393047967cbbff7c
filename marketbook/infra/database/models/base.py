"""Declarative base, timestamp mixin and primary-key helper shared by all models."""
from __future__ import annotations

import datetime as _dt

from sqlalchemy import BigInteger, DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    created_at: Mapped[_dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[_dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


def _int_pk() -> Mapped[int]:
    """Auto-incrementing integer id; ids travel on the wire as plain numbers."""
    return mapped_column(BigInteger, primary_key=True, autoincrement=True)
