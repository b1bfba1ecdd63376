"""Core package for the ETF Shop accounting and rule engine."""

from .activity import DailyActivityLog, LimitEvaluation, evaluate
from .capital import CapitalSummary, summarize_capital
from .lots import PositionSummary, average_price, summarize_position
from .matching import LotMethod, MatchResult, liquidation_plan, match_lots, realize_trade, sell_single_lot
from .models import (
    ActivityKind,
    CapitalTransaction,
    CapitalTransactionType,
    CashFlow,
    CashFlowKind,
    DailyActivity,
    Instrument,
    Lot,
    MarketSnapshot,
    RealizedTrade,
    SipFrequency,
    SipPlan,
    TradingRules,
)
from .reports import MonthlySummary, monthly_summaries, trade_statistics
from .signals import averaging_signal, passes_buy_filter, should_average, should_sip
from .targets import InvalidArgument, dynamic_target_percent, target_price
from .xirr import build_cash_flows, solve_xirr, xirr_report

__all__ = [
    "ActivityKind",
    "CapitalSummary",
    "CapitalTransaction",
    "CapitalTransactionType",
    "CashFlow",
    "CashFlowKind",
    "DailyActivity",
    "DailyActivityLog",
    "Instrument",
    "InvalidArgument",
    "LimitEvaluation",
    "Lot",
    "LotMethod",
    "MarketSnapshot",
    "MatchResult",
    "MonthlySummary",
    "PositionSummary",
    "RealizedTrade",
    "SipFrequency",
    "SipPlan",
    "TradingRules",
    "average_price",
    "averaging_signal",
    "build_cash_flows",
    "dynamic_target_percent",
    "evaluate",
    "liquidation_plan",
    "match_lots",
    "monthly_summaries",
    "passes_buy_filter",
    "realize_trade",
    "sell_single_lot",
    "should_average",
    "should_sip",
    "solve_xirr",
    "summarize_capital",
    "summarize_position",
    "target_price",
    "trade_statistics",
    "xirr_report",
]
