"""Schemas for holdings, trades, capital, settings, activity and SIPs."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field

from etf_shop.matching import LotMethod
from etf_shop.models import ActivityKind, CapitalTransactionType, SipFrequency


class LimitEvaluationSchema(BaseModel):
    """Soft daily cap status; ``allowed`` is always true."""

    allowed: bool
    kind: ActivityKind
    count: int
    limit: int
    warning: str | None = None


class HoldingCreateRequest(BaseModel):
    symbol: str = Field(..., min_length=1, max_length=32)
    buy_date: dt.date
    buy_price: float = Field(..., gt=0)
    quantity: int = Field(..., gt=0)


class HoldingUpdateRequest(BaseModel):
    buy_date: dt.date | None = None
    buy_price: float | None = Field(default=None, gt=0)
    quantity: int | None = Field(default=None, gt=0)


class HoldingSchema(BaseModel):
    id: int
    symbol: str
    buy_date: dt.date
    buy_price: float
    quantity: int
    invested_value: float
    cmp: float | None = None
    current_value: float | None = None
    notional_pl: float | None = None
    notional_pl_percent: float | None = None


class BuyResponse(BaseModel):
    holding: HoldingSchema
    limit: LimitEvaluationSchema


class AveragingSignalSchema(BaseModel):
    drop_percent: float
    should_average: bool
    should_sip: bool


class PositionSchema(BaseModel):
    symbol: str
    lot_count: int
    total_quantity: int
    average_price: float
    invested_value: float
    cmp: float
    current_value: float
    notional_pl: float
    notional_pl_percent: float
    target_price: float
    last_buy_price: float
    signal: AveragingSignalSchema


class SellRequest(BaseModel):
    sell_price: float = Field(..., gt=0)
    sell_date: dt.date
    quantity: int | None = Field(default=None, gt=0, description="Defaults to the whole lot")


class LiquidateRequest(BaseModel):
    symbol: str = Field(..., min_length=1, max_length=32)
    quantity: int = Field(..., gt=0)
    sell_price: float = Field(..., gt=0)
    sell_date: dt.date
    method: LotMethod | None = Field(default=None, description="Defaults to the configured allocation method")


class TradeCreateRequest(BaseModel):
    symbol: str = Field(..., min_length=1, max_length=32)
    buy_date: dt.date
    sell_date: dt.date
    buy_price: float = Field(..., gt=0)
    sell_price: float = Field(..., gt=0)
    quantity: int = Field(..., gt=0)


class TradeSchema(BaseModel):
    id: int | None
    symbol: str
    buy_date: dt.date
    sell_date: dt.date
    buy_price: float
    sell_price: float
    quantity: int
    profit: float
    profit_percent: float
    holding_days: int


class LotChangeSchema(BaseModel):
    lot_id: int
    new_quantity: int
    deleted: bool


class SellResponse(BaseModel):
    trades: list[TradeSchema]
    lot_changes: list[LotChangeSchema]
    remaining_quantity: int
    total_profit: float
    limit: LimitEvaluationSchema


class CapitalTransactionCreateRequest(BaseModel):
    type: CapitalTransactionType
    amount: float = Field(..., gt=0)
    date: dt.date
    notes: str | None = Field(default=None, max_length=255)


class CapitalTransactionSchema(BaseModel):
    id: int | None
    type: CapitalTransactionType
    amount: float
    date: dt.date
    notes: str | None = None


class CapitalSummarySchema(BaseModel):
    base_capital: float
    total_additions: float
    total_withdrawals: float
    net_capital: float
    invested_value: float
    realized_profit: float
    available_capital: float
    used_percent: float
    notional_pl: float
    dynamic_target_percent: float


class SettingsSchema(BaseModel):
    profit_target_percent: float
    min_profit_amount: float
    per_transaction_amount: float
    total_capital: float
    min_volume: int
    averaging_threshold: float
    max_daily_buys: int
    max_daily_sells: int


class SettingsUpdateRequest(BaseModel):
    """Partial update; omitted fields keep their stored value."""

    profit_target_percent: float | None = Field(default=None, ge=0)
    min_profit_amount: float | None = Field(default=None, ge=0)
    per_transaction_amount: float | None = Field(default=None, ge=0)
    total_capital: float | None = Field(default=None, ge=0)
    min_volume: int | None = Field(default=None, ge=0)
    averaging_threshold: float | None = Field(default=None, ge=0)
    max_daily_buys: int | None = Field(default=None, ge=0)
    max_daily_sells: int | None = Field(default=None, ge=0)


class ActivitySchema(BaseModel):
    date: dt.date
    buy_count: int
    sell_count: int
    max_daily_buys: int
    max_daily_sells: int
    buy_limit_reached: bool
    sell_limit_reached: bool


class SipCreateRequest(BaseModel):
    symbol: str = Field(..., min_length=1, max_length=32)
    amount: float = Field(..., gt=0)
    frequency: SipFrequency
    next_date: dt.date


class SipUpdateRequest(BaseModel):
    amount: float | None = Field(default=None, gt=0)
    frequency: SipFrequency | None = None
    next_date: dt.date | None = None
    is_active: bool | None = None


class SipSchema(BaseModel):
    id: int | None
    symbol: str
    amount: float
    frequency: SipFrequency
    next_date: dt.date
    is_active: bool


class SipSummarySchema(BaseModel):
    monthly_total: float
    weekly_total: float
    effective_monthly: float
    yearly_total: float
    active_plans: int


__all__ = [
    "ActivitySchema",
    "AveragingSignalSchema",
    "BuyResponse",
    "CapitalSummarySchema",
    "CapitalTransactionCreateRequest",
    "CapitalTransactionSchema",
    "HoldingCreateRequest",
    "HoldingSchema",
    "HoldingUpdateRequest",
    "LimitEvaluationSchema",
    "LiquidateRequest",
    "LotChangeSchema",
    "PositionSchema",
    "SellRequest",
    "SellResponse",
    "SettingsSchema",
    "SettingsUpdateRequest",
    "SipCreateRequest",
    "SipSchema",
    "SipSummarySchema",
    "SipUpdateRequest",
    "TradeCreateRequest",
    "TradeSchema",
]
