"""Holding, realized trade, capital and SIP models."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import Boolean, Date, DateTime, Enum, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.instrument import Instrument

CAPITAL_TRANSACTION_TYPES = ("ADD", "WITHDRAW")
SIP_FREQUENCIES = ("WEEKLY", "MONTHLY")


class Holding(Base):
    """An open lot."""

    __tablename__ = "holding"
    __table_args__ = (Index("ix_holding_instrument_buy_date", "instrument_id", "buy_date"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    instrument_id: Mapped[int] = mapped_column(ForeignKey("instrument.id", ondelete="RESTRICT"))
    buy_date: Mapped[dt.date] = mapped_column(Date)
    buy_price: Mapped[float] = mapped_column(Numeric(18, 4))
    quantity: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=dt.datetime.utcnow)

    instrument: Mapped[Instrument] = relationship(lazy="joined")


class Trade(Base):
    """A realized trade; derived figures are stored when the trade is created."""

    __tablename__ = "trade"
    __table_args__ = (Index("ix_trade_sell_date", "sell_date"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    instrument_id: Mapped[int] = mapped_column(ForeignKey("instrument.id", ondelete="RESTRICT"))
    buy_date: Mapped[dt.date] = mapped_column(Date)
    sell_date: Mapped[dt.date] = mapped_column(Date)
    buy_price: Mapped[float] = mapped_column(Numeric(18, 4))
    sell_price: Mapped[float] = mapped_column(Numeric(18, 4))
    quantity: Mapped[int] = mapped_column(Integer)
    profit: Mapped[float] = mapped_column(Numeric(18, 4))
    profit_percent: Mapped[float] = mapped_column(Numeric(12, 4))
    holding_days: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=dt.datetime.utcnow)

    instrument: Mapped[Instrument] = relationship(lazy="joined")


class CapitalTransaction(Base):
    __tablename__ = "capital_transaction"

    id: Mapped[int] = mapped_column(primary_key=True)
    type: Mapped[str] = mapped_column(Enum(*CAPITAL_TRANSACTION_TYPES, name="capital_transaction_type"))
    amount: Mapped[float] = mapped_column(Numeric(18, 4))
    date: Mapped[dt.date] = mapped_column(Date, index=True)
    notes: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=dt.datetime.utcnow)


class SipEntry(Base):
    __tablename__ = "sip_entry"

    id: Mapped[int] = mapped_column(primary_key=True)
    instrument_id: Mapped[int] = mapped_column(ForeignKey("instrument.id", ondelete="CASCADE"))
    amount: Mapped[float] = mapped_column(Numeric(18, 4))
    frequency: Mapped[str] = mapped_column(Enum(*SIP_FREQUENCIES, name="sip_frequency"))
    next_date: Mapped[dt.date] = mapped_column(Date)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=dt.datetime.utcnow)

    instrument: Mapped[Instrument] = relationship(lazy="joined")


__all__ = [
    "CAPITAL_TRANSACTION_TYPES",
    "CapitalTransaction",
    "Holding",
    "SIP_FREQUENCIES",
    "SipEntry",
    "Trade",
]
