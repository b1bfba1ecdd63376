"""Lot arithmetic and per-instrument position rollups."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from .models import Lot, TradingRules
from .signals import AveragingSignal, averaging_signal
from .targets import target_price


def average_price(lots: Iterable[Lot]) -> Decimal:
    """Quantity-weighted mean purchase price; 0 for an empty group."""

    total_value = Decimal("0")
    total_qty = 0
    for lot in lots:
        total_value += Decimal(lot.buy_price) * lot.quantity
        total_qty += lot.quantity
    if total_qty <= 0:
        return Decimal("0")
    return total_value / total_qty


def total_quantity(lots: Iterable[Lot]) -> int:
    return sum(lot.quantity for lot in lots)


def invested_value(lot: Lot) -> Decimal:
    return Decimal(lot.buy_price) * lot.quantity


def current_value(lot: Lot, cmp: Decimal) -> Decimal:
    return Decimal(cmp) * lot.quantity


def notional_pl(lot: Lot, cmp: Decimal) -> Decimal:
    return current_value(lot, cmp) - invested_value(lot)


def notional_pl_percent(lot: Lot, cmp: Decimal) -> Decimal:
    price = Decimal(lot.buy_price)
    if price == 0:
        return Decimal("0")
    return (Decimal(cmp) - price) / price * 100


def group_by_symbol(lots: Iterable[Lot]) -> Dict[str, List[Lot]]:
    grouped: Dict[str, List[Lot]] = {}
    for lot in lots:
        grouped.setdefault(lot.symbol, []).append(lot)
    return grouped


@dataclass(frozen=True)
class PositionSummary:
    symbol: str
    lot_count: int
    total_quantity: int
    average_price: Decimal
    invested_value: Decimal
    cmp: Decimal
    current_value: Decimal
    notional_pl: Decimal
    notional_pl_percent: Decimal
    target_price: Decimal
    last_buy_price: Decimal
    signal: AveragingSignal


def summarize_position(
    symbol: str,
    lots: Sequence[Lot],
    cmp: Optional[Decimal],
    rules: TradingRules,
) -> PositionSummary:
    """Roll one instrument's open lots into a single position line.

    Without a quote the last buy price stands in for the current price, so
    the position shows zero notional P/L rather than a total loss.
    """

    if not lots:
        raise ValueError(f"No open lots for {symbol}")
    last = max(lots, key=lambda lot: lot.recency_key)
    price = Decimal(cmp) if cmp else Decimal(last.buy_price)
    qty = total_quantity(lots)
    avg = average_price(lots)
    invested = sum((invested_value(lot) for lot in lots), Decimal("0"))
    market = price * qty
    pl_percent = (price - avg) / avg * 100 if avg else Decimal("0")
    return PositionSummary(
        symbol=symbol,
        lot_count=len(lots),
        total_quantity=qty,
        average_price=avg,
        invested_value=invested,
        cmp=price,
        current_value=market,
        notional_pl=market - invested,
        notional_pl_percent=pl_percent,
        target_price=target_price(avg, qty, rules) if qty > 0 else Decimal("0"),
        last_buy_price=Decimal(last.buy_price),
        signal=averaging_signal(last.buy_price, price),
    )


__all__ = [
    "PositionSummary",
    "average_price",
    "current_value",
    "group_by_symbol",
    "invested_value",
    "notional_pl",
    "notional_pl_percent",
    "summarize_position",
    "total_quantity",
]
