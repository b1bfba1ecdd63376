"""Domain services backing the holdings, trades and capital endpoints.

Every function takes a ``PortfolioRepository`` and turns the instructions
computed by ``etf_shop`` into repository writes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional

from app.core.errors import NotFoundError, PartialLiquidationError
from app.repositories import PortfolioRepository
from etf_shop.activity import LimitEvaluation, evaluate, limit_for
from etf_shop.capital import CapitalSummary, summarize_capital
from etf_shop.lots import PositionSummary, group_by_symbol, summarize_position, total_quantity
from etf_shop.matching import LiquidationPlan, LotChange, LotMethod, liquidation_plan, match_lots, realize_trade, sell_single_lot
from etf_shop.models import ActivityKind, Lot, RealizedTrade

logger = logging.getLogger(__name__)


@dataclass
class BuyResult:
    lot: Lot
    limit: LimitEvaluation


@dataclass
class SellResult:
    trades: List[RealizedTrade]
    lot_changes: List[LotChange]
    limit: LimitEvaluation
    remaining_quantity: int = 0


def _require_positive(**values: object) -> None:
    for name, value in values.items():
        if value is None or value <= 0:  # type: ignore[operator]
            raise ValueError(f"{name} must be greater than zero")


async def evaluate_activity(repo: PortfolioRepository, on: date, kind: ActivityKind | str) -> LimitEvaluation:
    """Read-only check of the day's counter against its configured cap."""

    rules = await repo.get_rules()
    activity = await repo.get_activity(on)
    return evaluate(activity, kind, limit_for(rules, kind))


async def _check_soft_limit(repo: PortfolioRepository, on: date, kind: ActivityKind) -> LimitEvaluation:
    evaluation = await evaluate_activity(repo, on, kind)
    if evaluation.exceeded:
        logger.warning("%s; proceeding because daily limits are advisory", evaluation.warning)
    return evaluation


async def record_buy(
    repo: PortfolioRepository,
    symbol: str,
    buy_date: date,
    buy_price: Decimal,
    quantity: int,
) -> BuyResult:
    _require_positive(buy_price=buy_price, quantity=quantity)
    evaluation = await _check_soft_limit(repo, buy_date, ActivityKind.BUY)
    lot = await repo.add_lot(symbol, buy_date, buy_price, quantity)
    await repo.increment_activity(buy_date, ActivityKind.BUY)
    logger.info("Bought %s x %s @ %s on %s", lot.quantity, lot.symbol, lot.buy_price, lot.buy_date)
    return BuyResult(lot=lot, limit=evaluation)


async def record_trade(
    repo: PortfolioRepository,
    symbol: str,
    buy_date: date,
    sell_date: date,
    buy_price: Decimal,
    sell_price: Decimal,
    quantity: int,
) -> SellResult:
    """Store a sale entered by hand, without touching open lots."""

    _require_positive(buy_price=buy_price, sell_price=sell_price, quantity=quantity)
    instrument = await repo.find_instrument(symbol)
    if instrument is None:
        raise NotFoundError(f"Unknown ETF symbol {symbol.strip().upper()}")
    evaluation = await _check_soft_limit(repo, sell_date, ActivityKind.SELL)
    source = Lot(
        id=0,
        symbol=instrument.symbol,
        buy_date=buy_date,
        buy_price=Decimal(buy_price),
        quantity=quantity,
        instrument_id=instrument.id,
    )
    trades = await repo.add_trades([realize_trade(source, quantity, Decimal(sell_price), sell_date)])
    await repo.increment_activity(sell_date, ActivityKind.SELL)
    return SellResult(trades=trades, lot_changes=[], limit=evaluation)


async def _execute_plan(
    repo: PortfolioRepository,
    plan: LiquidationPlan,
    sell_date: date,
    evaluation: LimitEvaluation,
) -> SellResult:
    """Persist a sale as two separate commits: trades first, then lot changes."""

    stored = await repo.add_trades(plan.trades)
    try:
        await repo.apply_lot_changes(plan.lot_changes)
    except Exception as exc:
        await repo.session.rollback()
        logger.exception("Lot update failed after storing trades %s", [t.id for t in stored])
        raise PartialLiquidationError(
            trade_ids=[t.id for t in stored if t.id is not None],
            lot_ids=[change.lot_id for change in plan.lot_changes],
            reason=str(exc),
        ) from exc
    await repo.increment_activity(sell_date, ActivityKind.SELL)
    return SellResult(
        trades=stored,
        lot_changes=plan.lot_changes,
        limit=evaluation,
        remaining_quantity=total_quantity(plan.remaining),
    )


async def sell_holding(
    repo: PortfolioRepository,
    lot_id: int,
    sell_price: Decimal,
    sell_date: date,
    quantity: Optional[int] = None,
) -> SellResult:
    """Sell one named lot, whole or a given quantity of it."""

    _require_positive(sell_price=sell_price)
    lot = await repo.get_lot(lot_id)
    if quantity is not None:
        _require_positive(quantity=quantity)
        if quantity > lot.quantity:
            raise ValueError(f"Cannot sell {quantity} units from a lot of {lot.quantity}")
    evaluation = await _check_soft_limit(repo, sell_date, ActivityKind.SELL)
    plan = sell_single_lot(lot, Decimal(sell_price), sell_date, quantity)
    return await _execute_plan(repo, plan, sell_date, evaluation)


async def liquidate(
    repo: PortfolioRepository,
    symbol: str,
    quantity: int,
    sell_price: Decimal,
    sell_date: date,
    method: LotMethod | str = LotMethod.LIFO,
) -> SellResult:
    """Sell ``quantity`` units of an instrument across its lots."""

    _require_positive(quantity=quantity, sell_price=sell_price)
    lots = await repo.list_lots(symbol)
    held = total_quantity(lots)
    if not lots:
        raise ValueError(f"No open lots for {symbol.strip().upper()}")
    if quantity > held:
        raise ValueError(f"Cannot sell {quantity} units of {symbol.strip().upper()}; only {held} held")
    evaluation = await _check_soft_limit(repo, sell_date, ActivityKind.SELL)
    plan = liquidation_plan(match_lots(lots, quantity, method), Decimal(sell_price), sell_date)
    logger.info(
        "Liquidating %s x %s via %s across %s lots",
        quantity,
        symbol.strip().upper(),
        LotMethod(method).value,
        len(plan.trades),
    )
    return await _execute_plan(repo, plan, sell_date, evaluation)


async def list_positions(repo: PortfolioRepository) -> list[PositionSummary]:
    rules = await repo.get_rules()
    prices = await repo.latest_prices()
    grouped = group_by_symbol(await repo.list_lots())
    return [
        summarize_position(symbol, lots, prices.get(symbol), rules)
        for symbol, lots in sorted(grouped.items())
    ]


async def capital_summary(repo: PortfolioRepository) -> CapitalSummary:
    return summarize_capital(
        await repo.get_rules(),
        await repo.list_capital_transactions(),
        await repo.list_lots(),
        await repo.list_trades(),
        await repo.latest_prices(),
    )


async def portfolio_value(repo: PortfolioRepository) -> Decimal:
    """Open lots at their latest quote, or at cost when no quote is stored."""

    prices = await repo.latest_prices()
    lots = await repo.list_lots()
    return sum(
        (Decimal(prices.get(lot.symbol) or lot.buy_price) * lot.quantity for lot in lots),
        Decimal("0"),
    )


__all__ = [
    "BuyResult",
    "SellResult",
    "capital_summary",
    "evaluate_activity",
    "liquidate",
    "list_positions",
    "portfolio_value",
    "record_buy",
    "record_trade",
    "sell_holding",
]
