"""Schemas for return and trade-history reports."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field

from etf_shop.models import CashFlowKind


class CashFlowSchema(BaseModel):
    date: dt.date
    amount: float = Field(..., description="Signed: outflows negative, inflows positive")
    kind: CashFlowKind


class XirrResponse(BaseModel):
    xirr_percent: float
    total_invested: float
    total_returned: float
    current_value: float
    absolute_profit: float
    absolute_return_percent: float
    as_of: dt.date
    cash_flows: list[CashFlowSchema]


class MonthlySummarySchema(BaseModel):
    year: int
    month: int
    profit: float
    invested: float
    trade_count: int


class TradeStatisticsSchema(BaseModel):
    total_profit: float
    total_trades: int
    winning_trades: int
    win_rate: float
    average_profit: float
    average_holding_days: float


__all__ = ["CashFlowSchema", "MonthlySummarySchema", "TradeStatisticsSchema", "XirrResponse"]
