"""Profit-target pricing rules."""
from __future__ import annotations

from decimal import Decimal

from .models import TradingRules

# (used capital percent strictly above, multiplier), checked in order.
UTILIZATION_BANDS: tuple[tuple[Decimal, Decimal], ...] = (
    (Decimal("90"), Decimal("0.52")),
    (Decimal("80"), Decimal("0.67")),
    (Decimal("70"), Decimal("0.83")),
)


class InvalidArgument(ValueError):
    """Raised when a pricing rule is called outside its domain."""


def target_price(avg_price: Decimal, quantity: int | Decimal, rules: TradingRules) -> Decimal:
    """Return the minimum acceptable sell price for a pooled position.

    The result satisfies both the percentage target and the absolute profit
    floor, so small positions are priced by ``min_profit_amount``.
    """

    if quantity <= 0:
        raise InvalidArgument("quantity must be > 0 to compute a target price")
    avg = Decimal(avg_price)
    qty = Decimal(quantity)
    by_percent = avg * (1 + Decimal(rules.profit_target_percent) / 100)
    by_min_profit = (avg * qty + Decimal(rules.min_profit_amount)) / qty
    return max(by_percent, by_min_profit)


def dynamic_target_percent(base_target: Decimal, used_capital_percent: Decimal) -> Decimal:
    """Shrink the profit target as more of the capital is deployed."""

    base = Decimal(base_target)
    used = Decimal(used_capital_percent)
    for threshold, multiplier in UTILIZATION_BANDS:
        if used > threshold:
            return base * multiplier
    return base


__all__ = [
    "InvalidArgument",
    "UTILIZATION_BANDS",
    "dynamic_target_percent",
    "target_price",
]
