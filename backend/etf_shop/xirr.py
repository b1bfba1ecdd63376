"""Money-weighted annualized return (XIRR) over irregular cash flows."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from .models import CashFlow, CashFlowKind, CapitalTransaction, CapitalTransactionType, Lot, RealizedTrade

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365.25
INITIAL_GUESS = 0.10
MAX_ITERATIONS = 100
TOLERANCE = 1e-7
MIN_DERIVATIVE = 1e-10


def build_cash_flows(
    lots: Iterable[Lot],
    trades: Iterable[RealizedTrade],
    capital_transactions: Iterable[CapitalTransaction] = (),
) -> List[CashFlow]:
    """Cash flows of the trading history, sorted by date.

    Open lots and the buy legs of realized trades are investments at their
    buy date; each trade's sale value is a return at its sell date.
    """

    flows: list[CashFlow] = []
    for lot in lots:
        flows.append(CashFlow(date=lot.buy_date, amount=lot.invested_value, kind=CashFlowKind.INVESTMENT))
    for trade in trades:
        flows.append(CashFlow(date=trade.buy_date, amount=trade.invested_value, kind=CashFlowKind.INVESTMENT))
        flows.append(
            CashFlow(
                date=trade.sell_date,
                amount=trade.invested_value + Decimal(trade.profit),
                kind=CashFlowKind.RETURN,
            )
        )
    for tx in capital_transactions:
        kind = (
            CashFlowKind.CAPITAL_ADD
            if tx.type == CapitalTransactionType.ADD
            else CashFlowKind.CAPITAL_WITHDRAW
        )
        flows.append(CashFlow(date=tx.date, amount=Decimal(tx.amount), kind=kind))
    return sorted(flows, key=lambda flow: flow.date)


def _year_fractions(dated: Sequence[tuple[date, float]]) -> list[tuple[float, float]]:
    start = dated[0][0]
    return [((d - start).days / DAYS_PER_YEAR, amount) for d, amount in dated]


def _npv(rate: float, flows: Sequence[tuple[float, float]]) -> float:
    return sum(amount / (1 + rate) ** years for years, amount in flows)


def _npv_derivative(rate: float, flows: Sequence[tuple[float, float]]) -> float:
    return sum(-years * amount / (1 + rate) ** (years + 1) for years, amount in flows)


def solve_xirr(
    cash_flows: Sequence[CashFlow],
    current_value: Decimal | float,
    *,
    as_of: Optional[date] = None,
) -> float:
    """Solve for the annualized rate, returned as a percentage.

    ``current_value`` is appended as a final inflow dated ``as_of`` (today by
    default). Fewer than two flows give 0. The loop is capped at
    ``MAX_ITERATIONS`` and stops on a vanishing derivative, a non-positive
    growth factor or an overflow; in those cases the last estimate is
    returned instead of raising.
    """

    today = as_of or date.today()
    dated = [(flow.date, flow.signed_amount) for flow in cash_flows]
    dated.append((today, float(current_value)))
    if len(dated) < 2:
        return 0.0
    dated.sort(key=lambda item: item[0])
    flows = _year_fractions(dated)

    rate = INITIAL_GUESS
    for _ in range(MAX_ITERATIONS):
        try:
            value = _npv(rate, flows)
            slope = _npv_derivative(rate, flows)
        except (OverflowError, ZeroDivisionError):
            logger.debug("XIRR iteration overflowed at rate %s", rate)
            break
        if abs(slope) < MIN_DERIVATIVE:
            break
        next_rate = rate - value / slope
        if abs(next_rate - rate) < TOLERANCE:
            return next_rate * 100
        if next_rate <= -1:
            # (1 + r) must stay positive for fractional exponents
            logger.debug("XIRR estimate left the domain at %s", next_rate)
            break
        rate = next_rate
    return rate * 100


@dataclass(frozen=True)
class XirrReport:
    xirr_percent: float
    total_invested: Decimal
    total_returned: Decimal
    current_value: Decimal
    absolute_profit: Decimal
    absolute_return_percent: Decimal
    cash_flows: List[CashFlow]


def xirr_report(
    lots: Sequence[Lot],
    trades: Sequence[RealizedTrade],
    current_value: Decimal,
    *,
    as_of: Optional[date] = None,
) -> XirrReport:
    flows = build_cash_flows(lots, trades)
    invested = sum((f.amount for f in flows if f.kind == CashFlowKind.INVESTMENT), Decimal("0"))
    returned = sum((f.amount for f in flows if f.kind == CashFlowKind.RETURN), Decimal("0"))
    profit = returned + Decimal(current_value) - invested
    return XirrReport(
        xirr_percent=solve_xirr(flows, current_value, as_of=as_of),
        total_invested=invested,
        total_returned=returned,
        current_value=Decimal(current_value),
        absolute_profit=profit,
        absolute_return_percent=profit / invested * 100 if invested > 0 else Decimal("0"),
        cash_flows=flows,
    )


__all__ = [
    "DAYS_PER_YEAR",
    "XirrReport",
    "build_cash_flows",
    "solve_xirr",
    "xirr_report",
]
