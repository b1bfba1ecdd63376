"""FIFO/LIFO lot matching for liquidations.

Lots are immutable snapshots. A partially sold lot comes back as a new
``Lot`` with the same id and a reduced quantity, and the caller persists the
change through an explicit replace-by-id instruction.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Sequence

from .models import Lot, RealizedTrade


class LotMethod(str, Enum):
    FIFO = "FIFO"
    LIFO = "LIFO"


@dataclass(frozen=True)
class LotFill:
    lot: Lot
    quantity_sold: int

    @property
    def is_full(self) -> bool:
        return self.quantity_sold >= self.lot.quantity


@dataclass(frozen=True)
class MatchResult:
    fills: List[LotFill]
    remaining: List[Lot]

    @property
    def quantity_sold(self) -> int:
        return sum(fill.quantity_sold for fill in self.fills)


@dataclass(frozen=True)
class LotChange:
    """Storage instruction for a source lot after a sale."""

    lot_id: int
    new_quantity: int

    @property
    def deletes_lot(self) -> bool:
        return self.new_quantity <= 0


@dataclass(frozen=True)
class LiquidationPlan:
    trades: List[RealizedTrade]
    lot_changes: List[LotChange]
    remaining: List[Lot]


def realize_trade(lot: Lot, quantity: int, sell_price: Decimal, sell_date: date) -> RealizedTrade:
    """Build the realized trade for selling ``quantity`` units of ``lot``.

    Every sell path goes through here so stored figures are computed once
    and the same way. A sell date before the buy date yields negative
    holding days; it is not rejected.
    """

    buy_price = Decimal(lot.buy_price)
    price = Decimal(sell_price)
    profit = (price - buy_price) * quantity
    profit_percent = (price - buy_price) / buy_price * 100 if buy_price else Decimal("0")
    return RealizedTrade(
        symbol=lot.symbol,
        buy_date=lot.buy_date,
        sell_date=sell_date,
        buy_price=buy_price,
        sell_price=price,
        quantity=quantity,
        profit=profit,
        profit_percent=profit_percent,
        holding_days=(sell_date - lot.buy_date).days,
        instrument_id=lot.instrument_id,
    )


def order_lots(lots: Sequence[Lot], method: LotMethod | str) -> List[Lot]:
    """Return lots in consumption order: oldest first for FIFO, newest first for LIFO."""

    return sorted(lots, key=lambda lot: lot.recency_key, reverse=LotMethod(method) == LotMethod.LIFO)


def match_lots(lots: Sequence[Lot], quantity: int, method: LotMethod | str = LotMethod.LIFO) -> MatchResult:
    """Select the lots that satisfy ``quantity`` under the given policy.

    A non-positive quantity consumes nothing. A quantity above the total on
    hand consumes everything without raising; validating against holdings is
    the caller's job.
    """

    fills: list[LotFill] = []
    remaining: list[Lot] = []
    to_sell = quantity
    for lot in order_lots(lots, method):
        if to_sell <= 0:
            remaining.append(lot)
            continue
        if lot.quantity <= to_sell:
            fills.append(LotFill(lot=lot, quantity_sold=lot.quantity))
            to_sell -= lot.quantity
        else:
            fills.append(LotFill(lot=lot, quantity_sold=to_sell))
            remaining.append(replace(lot, quantity=lot.quantity - to_sell))
            to_sell = 0
    return MatchResult(fills=fills, remaining=remaining)


def sell_fifo(lots: Sequence[Lot], quantity: int) -> MatchResult:
    return match_lots(lots, quantity, LotMethod.FIFO)


def sell_lifo(lots: Sequence[Lot], quantity: int) -> MatchResult:
    return match_lots(lots, quantity, LotMethod.LIFO)


def liquidation_plan(result: MatchResult, sell_price: Decimal, sell_date: date) -> LiquidationPlan:
    """Turn matched fills into trades to create and lot changes to apply."""

    trades = [realize_trade(fill.lot, fill.quantity_sold, sell_price, sell_date) for fill in result.fills]
    changes = [
        LotChange(lot_id=fill.lot.id, new_quantity=fill.lot.quantity - fill.quantity_sold)
        for fill in result.fills
    ]
    return LiquidationPlan(trades=trades, lot_changes=changes, remaining=list(result.remaining))


def sell_single_lot(
    lot: Lot,
    sell_price: Decimal,
    sell_date: date,
    quantity: int | None = None,
) -> LiquidationPlan:
    """Manual sell of one named lot, whole or in part."""

    qty = lot.quantity if quantity is None else quantity
    if qty <= 0:
        return LiquidationPlan(trades=[], lot_changes=[], remaining=[lot])
    qty = min(qty, lot.quantity)
    trade = realize_trade(lot, qty, sell_price, sell_date)
    left = lot.quantity - qty
    remaining = [replace(lot, quantity=left)] if left > 0 else []
    return LiquidationPlan(
        trades=[trade],
        lot_changes=[LotChange(lot_id=lot.id, new_quantity=left)],
        remaining=remaining,
    )


__all__ = [
    "LiquidationPlan",
    "LotChange",
    "LotFill",
    "LotMethod",
    "MatchResult",
    "liquidation_plan",
    "match_lots",
    "order_lots",
    "realize_trade",
    "sell_fifo",
    "sell_lifo",
    "sell_single_lot",
]
