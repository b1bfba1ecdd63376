"""Capital ledger: a point-in-time summary recomputed from the full history."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence

from .lots import notional_pl
from .models import CapitalTransaction, CapitalTransactionType, Lot, RealizedTrade, TradingRules
from .targets import dynamic_target_percent


@dataclass(frozen=True)
class CapitalSummary:
    base_capital: Decimal
    total_additions: Decimal
    total_withdrawals: Decimal
    net_capital: Decimal
    invested_value: Decimal
    realized_profit: Decimal
    available_capital: Decimal
    used_percent: Decimal
    notional_pl: Decimal
    dynamic_target_percent: Decimal


def net_capital(base_capital: Decimal, transactions: Iterable[CapitalTransaction]) -> Decimal:
    total = Decimal(base_capital)
    for tx in transactions:
        if CapitalTransactionType(tx.type) == CapitalTransactionType.ADD:
            total += Decimal(tx.amount)
        else:
            total -= Decimal(tx.amount)
    return total


def used_percent(invested: Decimal, capital: Decimal) -> Decimal:
    if capital <= 0:
        return Decimal("0")
    return invested / capital * 100


def summarize_capital(
    rules: TradingRules,
    transactions: Sequence[CapitalTransaction],
    lots: Sequence[Lot],
    trades: Sequence[RealizedTrade],
    prices: Optional[Mapping[str, Decimal]] = None,
) -> CapitalSummary:
    """Build the capital summary from settings, capital log, open lots and trades.

    ``prices`` maps symbols to current prices for the notional P/L figure;
    lots without a price are valued at cost.
    """

    prices = prices or {}
    additions = sum(
        (Decimal(tx.amount) for tx in transactions if tx.type == CapitalTransactionType.ADD),
        Decimal("0"),
    )
    withdrawals = sum(
        (Decimal(tx.amount) for tx in transactions if tx.type == CapitalTransactionType.WITHDRAW),
        Decimal("0"),
    )
    capital = net_capital(rules.total_capital, transactions)
    invested = sum((Decimal(lot.buy_price) * lot.quantity for lot in lots), Decimal("0"))
    realized = sum((Decimal(trade.profit) for trade in trades), Decimal("0"))
    unrealized = sum(
        (notional_pl(lot, prices.get(lot.symbol) or lot.buy_price) for lot in lots),
        Decimal("0"),
    )
    used = used_percent(invested, capital)
    return CapitalSummary(
        base_capital=Decimal(rules.total_capital),
        total_additions=additions,
        total_withdrawals=withdrawals,
        net_capital=capital,
        invested_value=invested,
        realized_profit=realized,
        available_capital=capital - invested + realized,
        used_percent=used,
        notional_pl=unrealized,
        dynamic_target_percent=dynamic_target_percent(rules.profit_target_percent, used),
    )


__all__ = ["CapitalSummary", "net_capital", "summarize_capital", "used_percent"]
