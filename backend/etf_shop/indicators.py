"""Moving-average helpers and quote snapshot construction."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

import pandas as pd

from .models import MarketSnapshot

DMA_WINDOW = 20


def _clean(values: Sequence[Optional[float]]) -> pd.Series:
    return pd.Series(list(values), dtype="float64").dropna()


def moving_average(closes: Sequence[Optional[float]], window: int = DMA_WINDOW) -> Decimal:
    """Mean of the most recent ``window`` closes, or of all closes when fewer exist."""

    series = _clean(closes)
    if series.empty:
        return Decimal("0")
    return Decimal(str(series.tail(window).mean()))


def dma_distance(cmp: Decimal, dma: Decimal) -> Decimal:
    """Signed percent distance of price from its moving average; negative is below."""

    if dma <= 0:
        return Decimal("0")
    return (Decimal(cmp) - dma) / dma * 100


def build_quote(
    symbol: str,
    *,
    cmp: float,
    prev_close: float | None,
    volume: float | None,
    closes: Sequence[Optional[float]] = (),
    highs: Sequence[Optional[float]] = (),
    lows: Sequence[Optional[float]] = (),
    as_of: datetime | None = None,
) -> MarketSnapshot:
    """Derive the stored snapshot from raw provider figures.

    Highs and lows come from the fetched window and fall back to the current
    price when the provider returned none.
    """

    price = Decimal(str(cmp or 0))
    previous = Decimal(str(prev_close or 0))
    high_series = _clean(highs)
    low_series = _clean(lows)
    high = Decimal(str(high_series.max())) if not high_series.empty else price
    low = Decimal(str(low_series.min())) if not low_series.empty else price
    change = price - previous if previous else Decimal("0")
    change_pct = change / previous * 100 if previous else Decimal("0")
    dma = moving_average(closes)
    return MarketSnapshot(
        symbol=symbol,
        cmp=price,
        high_52w=high,
        low_52w=low,
        prev_close=previous,
        change=change,
        change_percent=change_pct,
        volume=int(volume or 0),
        dma20=dma,
        dma_distance=dma_distance(price, dma),
        updated_at=as_of,
    )


__all__ = ["DMA_WINDOW", "build_quote", "dma_distance", "moving_average"]
