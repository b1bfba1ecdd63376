"""Domain records used by the ETF Shop accounting engine."""
from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Mapping, Optional


class CapitalTransactionType(str, Enum):
    ADD = "ADD"
    WITHDRAW = "WITHDRAW"


class ActivityKind(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class SipFrequency(str, Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class CashFlowKind(str, Enum):
    INVESTMENT = "INVESTMENT"
    RETURN = "RETURN"
    CAPITAL_ADD = "CAPITAL_ADD"
    CAPITAL_WITHDRAW = "CAPITAL_WITHDRAW"


@dataclass(frozen=True)
class Instrument:
    """A tradable ETF and its market-data alias."""

    id: int
    symbol: str
    provider_symbol: str
    name: str
    category: str | None = None


@dataclass(frozen=True)
class Lot:
    """One purchase of a fixed quantity at a fixed price and date."""

    id: int
    symbol: str
    buy_date: date
    buy_price: Decimal
    quantity: int
    created_at: Optional[datetime] = None
    instrument_id: Optional[int] = None

    @property
    def invested_value(self) -> Decimal:
        return self.buy_price * self.quantity

    @property
    def recency_key(self) -> tuple:
        """Sort key by buy date, then creation time, then id."""

        created = self.created_at.timestamp() if self.created_at else 0.0
        return (self.buy_date, created, self.id)


@dataclass(frozen=True)
class RealizedTrade:
    """A liquidated lot (or part of one) with its stored derived figures."""

    symbol: str
    buy_date: date
    sell_date: date
    buy_price: Decimal
    sell_price: Decimal
    quantity: int
    profit: Decimal
    profit_percent: Decimal
    holding_days: int
    id: Optional[int] = None
    instrument_id: Optional[int] = None

    @property
    def invested_value(self) -> Decimal:
        return self.buy_price * self.quantity

    @property
    def sell_value(self) -> Decimal:
        return self.sell_price * self.quantity


@dataclass(frozen=True)
class CapitalTransaction:
    type: CapitalTransactionType
    amount: Decimal
    date: date
    notes: Optional[str] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class DailyActivity:
    """Buy and sell counters for one calendar date."""

    date: date
    buy_count: int = 0
    sell_count: int = 0

    def count(self, kind: ActivityKind) -> int:
        return self.buy_count if ActivityKind(kind) == ActivityKind.BUY else self.sell_count


@dataclass(frozen=True)
class MarketSnapshot:
    """Latest quote figures for one instrument."""

    symbol: str
    cmp: Decimal
    high_52w: Decimal
    low_52w: Decimal
    prev_close: Decimal
    change: Decimal
    change_percent: Decimal
    volume: int
    dma20: Decimal
    dma_distance: Decimal
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class CashFlow:
    """A dated cash movement; ``amount`` is a magnitude, ``kind`` gives the sign."""

    date: date
    amount: Decimal
    kind: CashFlowKind

    @property
    def signed_amount(self) -> float:
        magnitude = abs(float(self.amount))
        if self.kind in (CashFlowKind.INVESTMENT, CashFlowKind.CAPITAL_ADD):
            return -magnitude
        return magnitude


@dataclass(frozen=True)
class SipPlan:
    symbol: str
    amount: Decimal
    frequency: SipFrequency
    next_date: date
    is_active: bool = True
    id: Optional[int] = None


_INTEGER_RULES = {"min_volume", "max_daily_buys", "max_daily_sells"}


def _parse_number(raw: object, default: Decimal | int, *, integer: bool) -> Decimal | int:
    if raw is None:
        return default
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return default
    if not value.is_finite():
        return default
    return int(value) if integer else value


@dataclass(frozen=True)
class TradingRules:
    """Typed view of the settings singleton.

    Stored as one settings row per field, keyed by the field name.
    """

    profit_target_percent: Decimal = Decimal("6")
    min_profit_amount: Decimal = Decimal("500")
    per_transaction_amount: Decimal = Decimal("10000")
    total_capital: Decimal = Decimal("500000")
    min_volume: int = 15000
    averaging_threshold: Decimal = Decimal("2.5")
    max_daily_buys: int = 1
    max_daily_sells: int = 1

    @classmethod
    def from_mapping(cls, raw: Mapping[str, str | None]) -> "TradingRules":
        """Parse stored key/value strings, falling back to defaults for missing or bad values."""

        defaults = cls()
        parsed: dict[str, Decimal | int] = {}
        for item in fields(cls):
            parsed[item.name] = _parse_number(
                raw.get(item.name),
                getattr(defaults, item.name),
                integer=item.name in _INTEGER_RULES,
            )
        return cls(**parsed)  # type: ignore[arg-type]

    def to_mapping(self) -> dict[str, str]:
        return {item.name: str(getattr(self, item.name)) for item in fields(self)}


__all__ = [
    "ActivityKind",
    "CapitalTransaction",
    "CapitalTransactionType",
    "CashFlow",
    "CashFlowKind",
    "DailyActivity",
    "Instrument",
    "Lot",
    "MarketSnapshot",
    "RealizedTrade",
    "SipFrequency",
    "SipPlan",
    "TradingRules",
]
