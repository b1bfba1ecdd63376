"""Daily buy/sell caps evaluated as soft advisories.

Nothing here blocks an action. ``evaluate`` reports whether a cap has been
reached and leaves the decision to proceed to the caller.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Dict, Optional

from .models import ActivityKind, DailyActivity, TradingRules


@dataclass(frozen=True)
class LimitEvaluation:
    allowed: bool
    kind: ActivityKind
    count: int
    limit: int
    warning: Optional[str] = None

    @property
    def exceeded(self) -> bool:
        return self.warning is not None


def limit_reached(count: int, limit: int) -> bool:
    """A cap of zero or less means no cap."""

    return limit > 0 and count >= limit


def evaluate(activity: DailyActivity, kind: ActivityKind | str, limit: int) -> LimitEvaluation:
    kind = ActivityKind(kind)
    count = activity.count(kind)
    warning = None
    if limit_reached(count, limit):
        warning = (
            f"Daily {kind.value.lower()} limit of {limit} reached for "
            f"{activity.date.isoformat()} ({count} recorded)"
        )
    return LimitEvaluation(allowed=True, kind=kind, count=count, limit=limit, warning=warning)


def limit_for(rules: TradingRules, kind: ActivityKind | str) -> int:
    return rules.max_daily_buys if ActivityKind(kind) == ActivityKind.BUY else rules.max_daily_sells


def increment(activity: DailyActivity, kind: ActivityKind | str) -> DailyActivity:
    if ActivityKind(kind) == ActivityKind.BUY:
        return replace(activity, buy_count=activity.buy_count + 1)
    return replace(activity, sell_count=activity.sell_count + 1)


class DailyActivityLog:
    """In-memory per-date counters with the same contract as the stored table."""

    def __init__(self) -> None:
        self._days: Dict[date, DailyActivity] = {}

    def get(self, day: date) -> DailyActivity:
        return self._days.get(day, DailyActivity(date=day))

    def record_buy(self, day: date) -> DailyActivity:
        return self._record(day, ActivityKind.BUY)

    def record_sell(self, day: date) -> DailyActivity:
        return self._record(day, ActivityKind.SELL)

    def check_limit(self, day: date, kind: ActivityKind | str, limit: int) -> bool:
        return limit_reached(self.get(day).count(ActivityKind(kind)), limit)

    def evaluate(self, day: date, kind: ActivityKind | str, limit: int) -> LimitEvaluation:
        return evaluate(self.get(day), kind, limit)

    def _record(self, day: date, kind: ActivityKind) -> DailyActivity:
        updated = increment(self.get(day), kind)
        self._days[day] = updated
        return updated


__all__ = [
    "DailyActivityLog",
    "LimitEvaluation",
    "evaluate",
    "increment",
    "limit_for",
    "limit_reached",
]
