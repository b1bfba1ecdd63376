"""Trade history reports."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence, Tuple

from .models import RealizedTrade, SipFrequency, SipPlan

WEEKS_PER_MONTH = 4


@dataclass(frozen=True)
class MonthlySummary:
    period: Tuple[int, int]
    profit: Decimal
    invested: Decimal
    trade_count: int

    @property
    def year(self) -> int:
        return self.period[0]

    @property
    def month(self) -> int:
        return self.period[1]


def monthly_summaries(trades: Iterable[RealizedTrade]) -> List[MonthlySummary]:
    """Group realized trades by sell month, ordered by (year, month)."""

    buckets: Dict[Tuple[int, int], list[RealizedTrade]] = {}
    for trade in trades:
        buckets.setdefault((trade.sell_date.year, trade.sell_date.month), []).append(trade)
    return [
        MonthlySummary(
            period=period,
            profit=sum((Decimal(t.profit) for t in items), Decimal("0")),
            invested=sum((t.invested_value for t in items), Decimal("0")),
            trade_count=len(items),
        )
        for period, items in sorted(buckets.items())
    ]


@dataclass(frozen=True)
class TradeStatistics:
    total_profit: Decimal
    total_trades: int
    winning_trades: int
    win_rate: Decimal
    average_profit: Decimal
    average_holding_days: Decimal


def trade_statistics(trades: Sequence[RealizedTrade]) -> TradeStatistics:
    total = sum((Decimal(t.profit) for t in trades), Decimal("0"))
    count = len(trades)
    winners = sum(1 for t in trades if t.profit > 0)
    if not count:
        return TradeStatistics(total, 0, 0, Decimal("0"), Decimal("0"), Decimal("0"))
    return TradeStatistics(
        total_profit=total,
        total_trades=count,
        winning_trades=winners,
        win_rate=Decimal(winners) / count * 100,
        average_profit=total / count,
        average_holding_days=Decimal(sum(t.holding_days for t in trades)) / count,
    )


@dataclass(frozen=True)
class SipCommitment:
    monthly_total: Decimal
    weekly_total: Decimal
    effective_monthly: Decimal
    yearly_total: Decimal
    active_plans: int


def sip_commitment(plans: Iterable[SipPlan]) -> SipCommitment:
    """Effective monthly outlay of active plans; a month counts four weekly runs."""

    active = [plan for plan in plans if plan.is_active]
    monthly = sum(
        (Decimal(p.amount) for p in active if p.frequency == SipFrequency.MONTHLY), Decimal("0")
    )
    weekly = sum(
        (Decimal(p.amount) for p in active if p.frequency == SipFrequency.WEEKLY), Decimal("0")
    )
    effective = monthly + weekly * WEEKS_PER_MONTH
    return SipCommitment(
        monthly_total=monthly,
        weekly_total=weekly,
        effective_monthly=effective,
        yearly_total=effective * 12,
        active_plans=len(active),
    )


__all__ = [
    "MonthlySummary",
    "SipCommitment",
    "TradeStatistics",
    "monthly_summaries",
    "sip_commitment",
    "trade_statistics",
]
