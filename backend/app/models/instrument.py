"""Instrument universe and latest market snapshot models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Instrument(Base):
    __tablename__ = "instrument"

    id: Mapped[int] = mapped_column(primary_key=True)
    symbol: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    provider_symbol: Mapped[str] = mapped_column(String(40))
    name: Mapped[str] = mapped_column(String(128))
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)

    market_data: Mapped[Optional["MarketData"]] = relationship(
        back_populates="instrument",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        uselist=False,
    )


class MarketData(Base):
    __tablename__ = "market_data"

    id: Mapped[int] = mapped_column(primary_key=True)
    instrument_id: Mapped[int] = mapped_column(
        ForeignKey("instrument.id", ondelete="CASCADE"), unique=True
    )
    cmp: Mapped[float] = mapped_column(Numeric(18, 4))
    high_52w: Mapped[float] = mapped_column(Numeric(18, 4))
    low_52w: Mapped[float] = mapped_column(Numeric(18, 4))
    prev_close: Mapped[float] = mapped_column(Numeric(18, 4))
    change_amount: Mapped[float] = mapped_column(Numeric(18, 4))
    change_percent: Mapped[float] = mapped_column(Numeric(12, 4))
    volume: Mapped[int] = mapped_column(BigInteger, default=0)
    dma_20: Mapped[float | None] = mapped_column(Numeric(18, 4), nullable=True)
    dma_distance: Mapped[float | None] = mapped_column(Numeric(12, 4), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    instrument: Mapped[Instrument] = relationship(back_populates="market_data")


__all__ = ["Instrument", "MarketData"]
