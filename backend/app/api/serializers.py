"""Conversions from core records to response schemas."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from app.schemas import (
    CapitalTransactionSchema,
    EtfSchema,
    HoldingSchema,
    LimitEvaluationSchema,
    LotChangeSchema,
    PositionSchema,
    SellResponse,
    SipSchema,
    TradeSchema,
)
from app.services.market_data import EtfRow
from app.services.portfolio import SellResult
from etf_shop.activity import LimitEvaluation
from etf_shop.lots import PositionSummary, notional_pl, notional_pl_percent
from etf_shop.models import CapitalTransaction, Lot, RealizedTrade, SipPlan


def _float(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def serialize_limit(evaluation: LimitEvaluation) -> LimitEvaluationSchema:
    return LimitEvaluationSchema(
        allowed=evaluation.allowed,
        kind=evaluation.kind,
        count=evaluation.count,
        limit=evaluation.limit,
        warning=evaluation.warning,
    )


def serialize_holding(lot: Lot, cmp: Optional[Decimal] = None) -> HoldingSchema:
    return HoldingSchema(
        id=lot.id,
        symbol=lot.symbol,
        buy_date=lot.buy_date,
        buy_price=float(lot.buy_price),
        quantity=lot.quantity,
        invested_value=float(lot.invested_value),
        cmp=_float(cmp),
        current_value=float(cmp * lot.quantity) if cmp else None,
        notional_pl=float(notional_pl(lot, cmp)) if cmp else None,
        notional_pl_percent=float(notional_pl_percent(lot, cmp)) if cmp else None,
    )


def serialize_position(summary: PositionSummary) -> PositionSchema:
    return PositionSchema(
        symbol=summary.symbol,
        lot_count=summary.lot_count,
        total_quantity=summary.total_quantity,
        average_price=float(summary.average_price),
        invested_value=float(summary.invested_value),
        cmp=float(summary.cmp),
        current_value=float(summary.current_value),
        notional_pl=float(summary.notional_pl),
        notional_pl_percent=float(summary.notional_pl_percent),
        target_price=float(summary.target_price),
        last_buy_price=float(summary.last_buy_price),
        signal={
            "drop_percent": float(summary.signal.drop_percent),
            "should_average": summary.signal.should_average,
            "should_sip": summary.signal.should_sip,
        },
    )


def serialize_trade(trade: RealizedTrade) -> TradeSchema:
    return TradeSchema(
        id=trade.id,
        symbol=trade.symbol,
        buy_date=trade.buy_date,
        sell_date=trade.sell_date,
        buy_price=float(trade.buy_price),
        sell_price=float(trade.sell_price),
        quantity=trade.quantity,
        profit=float(trade.profit),
        profit_percent=float(trade.profit_percent),
        holding_days=trade.holding_days,
    )


def serialize_sell(result: SellResult) -> SellResponse:
    return SellResponse(
        trades=[serialize_trade(trade) for trade in result.trades],
        lot_changes=[
            LotChangeSchema(lot_id=change.lot_id, new_quantity=max(change.new_quantity, 0), deleted=change.deletes_lot)
            for change in result.lot_changes
        ],
        remaining_quantity=result.remaining_quantity,
        total_profit=float(sum((trade.profit for trade in result.trades), Decimal("0"))),
        limit=serialize_limit(result.limit),
    )


def serialize_capital(tx: CapitalTransaction) -> CapitalTransactionSchema:
    return CapitalTransactionSchema(id=tx.id, type=tx.type, amount=float(tx.amount), date=tx.date, notes=tx.notes)


def serialize_sip(plan: SipPlan) -> SipSchema:
    return SipSchema(
        id=plan.id,
        symbol=plan.symbol,
        amount=float(plan.amount),
        frequency=plan.frequency,
        next_date=plan.next_date,
        is_active=plan.is_active,
    )


def serialize_etf(row: EtfRow) -> EtfSchema:
    snapshot = row.snapshot
    instrument = row.instrument
    payload = {
        "id": instrument.id,
        "symbol": instrument.symbol,
        "provider_symbol": instrument.provider_symbol,
        "name": instrument.name,
        "category": instrument.category,
        "held_quantity": row.held_quantity,
        "is_candidate": row.is_candidate,
        "distance_from_low": _float(row.distance_from_low),
        "distance_from_high": _float(row.distance_from_high),
        "dma_distance": _float(row.dma_distance),
    }
    if snapshot is not None:
        payload.update(
            cmp=float(snapshot.cmp),
            high_52w=float(snapshot.high_52w),
            low_52w=float(snapshot.low_52w),
            prev_close=float(snapshot.prev_close),
            change=float(snapshot.change),
            change_percent=float(snapshot.change_percent),
            volume=snapshot.volume,
            dma20=float(snapshot.dma20) if snapshot.dma20 else None,
            updated_at=snapshot.updated_at,
        )
    return EtfSchema(**payload)


__all__ = [
    "serialize_capital",
    "serialize_etf",
    "serialize_holding",
    "serialize_limit",
    "serialize_position",
    "serialize_sell",
    "serialize_sip",
    "serialize_trade",
]
