"""Averaging and accumulation signals derived from the last purchase price."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from .models import Lot

AVERAGE_DOWN_DROP_PERCENT = Decimal("5")
SIP_DROP_PERCENT = Decimal("10")


@dataclass(frozen=True)
class AveragingSignal:
    drop_percent: Decimal
    should_average: bool
    should_sip: bool


def drop_percent(last_buy_price: Decimal, current_price: Decimal) -> Decimal:
    """Percentage fall from the last buy price; negative when the price rose."""

    last = Decimal(last_buy_price)
    if last <= 0:
        return Decimal("0")
    return (last - Decimal(current_price)) / last * 100


def should_average(last_buy_price: Decimal, current_price: Decimal) -> bool:
    return drop_percent(last_buy_price, current_price) > AVERAGE_DOWN_DROP_PERCENT


def should_sip(last_buy_price: Decimal, current_price: Decimal) -> bool:
    return drop_percent(last_buy_price, current_price) > SIP_DROP_PERCENT


def averaging_signal(last_buy_price: Decimal, current_price: Decimal) -> AveragingSignal:
    drop = drop_percent(last_buy_price, current_price)
    return AveragingSignal(
        drop_percent=drop,
        should_average=drop > AVERAGE_DOWN_DROP_PERCENT,
        should_sip=drop > SIP_DROP_PERCENT,
    )


def latest_lot(lots: Sequence[Lot]) -> Optional[Lot]:
    """Most recent purchase by buy date, then creation time, then id."""

    if not lots:
        return None
    return max(lots, key=lambda lot: lot.recency_key)


def passes_buy_filter(
    held_lots: Sequence[Lot],
    current_price: Optional[Decimal],
    averaging_threshold: Decimal,
) -> bool:
    """Whether an instrument belongs on the buy list.

    Instruments that are not held always pass. A held instrument is shown
    only once its price has dropped at least ``averaging_threshold`` percent
    below the most recent purchase. This gate is independent of the fixed
    5%/10% advisories above.
    """

    last = latest_lot(held_lots)
    if last is None or not current_price or not averaging_threshold:
        return True
    return drop_percent(last.buy_price, Decimal(current_price)) >= Decimal(averaging_threshold)


def distance_from_low(current_price: Decimal, low_52w: Decimal) -> Decimal:
    low = Decimal(low_52w)
    if low == 0:
        return Decimal("0")
    return (Decimal(current_price) - low) / low * 100


def distance_from_high(current_price: Decimal, high_52w: Decimal) -> Decimal:
    high = Decimal(high_52w)
    if high == 0:
        return Decimal("0")
    return (high - Decimal(current_price)) / high * 100


__all__ = [
    "AVERAGE_DOWN_DROP_PERCENT",
    "AveragingSignal",
    "SIP_DROP_PERCENT",
    "averaging_signal",
    "distance_from_high",
    "distance_from_low",
    "drop_percent",
    "latest_lot",
    "passes_buy_filter",
    "should_average",
    "should_sip",
]
