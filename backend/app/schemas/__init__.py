"""Pydantic schema exports."""

from .market import EtfCreateRequest, EtfListResponse, EtfSchema, HealthResponse, MarketRefreshResponse
from .portfolio import (
    ActivitySchema,
    AveragingSignalSchema,
    BuyResponse,
    CapitalSummarySchema,
    CapitalTransactionCreateRequest,
    CapitalTransactionSchema,
    HoldingCreateRequest,
    HoldingSchema,
    HoldingUpdateRequest,
    LimitEvaluationSchema,
    LiquidateRequest,
    LotChangeSchema,
    PositionSchema,
    SellRequest,
    SellResponse,
    SettingsSchema,
    SettingsUpdateRequest,
    SipCreateRequest,
    SipSchema,
    SipSummarySchema,
    SipUpdateRequest,
    TradeCreateRequest,
    TradeSchema,
)
from .reports import CashFlowSchema, MonthlySummarySchema, TradeStatisticsSchema, XirrResponse

__all__ = [
    "ActivitySchema",
    "AveragingSignalSchema",
    "BuyResponse",
    "CapitalSummarySchema",
    "CapitalTransactionCreateRequest",
    "CapitalTransactionSchema",
    "CashFlowSchema",
    "EtfCreateRequest",
    "EtfListResponse",
    "EtfSchema",
    "HealthResponse",
    "HoldingCreateRequest",
    "HoldingSchema",
    "HoldingUpdateRequest",
    "LimitEvaluationSchema",
    "LiquidateRequest",
    "LotChangeSchema",
    "MarketRefreshResponse",
    "MonthlySummarySchema",
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
    "TradeStatisticsSchema",
    "XirrResponse",
]
