"""Quote refresh and the ETF listing built on stored snapshots."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from app.providers.yahoo import ChartQuote, MarketDataError, YahooChartClient
from app.repositories import PortfolioRepository
from etf_shop.indicators import build_quote
from etf_shop.lots import group_by_symbol
from etf_shop.models import Instrument, MarketSnapshot
from etf_shop.signals import distance_from_high, distance_from_low, passes_buy_filter

logger = logging.getLogger(__name__)

# Instruments without a moving average sort after every quoted one.
_MISSING_DISTANCE = Decimal("999999")
STRONG_BUY_DISTANCE = Decimal("-5")


@dataclass
class RefreshResult:
    success: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    refreshed_at: Optional[datetime] = None

    @property
    def message(self) -> str:
        return f"Updated {self.success} ETFs, {self.failed} failed"


async def _fetch(client: YahooChartClient, instrument: Instrument) -> ChartQuote | MarketDataError:
    try:
        return await client.chart(instrument.provider_symbol)
    except MarketDataError as exc:
        return exc


async def refresh_market_data(repo: PortfolioRepository, client: YahooChartClient) -> RefreshResult:
    """Fetch every instrument concurrently, then store the snapshots one by one.

    A failing symbol is recorded and skipped; it never aborts the batch.
    """

    instruments = await repo.list_instruments()
    fetched = await asyncio.gather(*(_fetch(client, instrument) for instrument in instruments))
    now = datetime.utcnow()
    result = RefreshResult(refreshed_at=now)
    for instrument, outcome in zip(instruments, fetched):
        if isinstance(outcome, MarketDataError):
            logger.warning("Quote refresh failed for %s: %s", instrument.symbol, outcome)
            result.failed += 1
            result.errors.append(f"{instrument.symbol}: {outcome}")
            continue
        snapshot = build_quote(
            instrument.symbol,
            cmp=outcome.price,
            prev_close=outcome.previous_close,
            volume=outcome.volume,
            closes=outcome.closes,
            highs=outcome.highs,
            lows=outcome.lows,
            as_of=now,
        )
        await repo.upsert_snapshot(instrument.id, snapshot)
        result.success += 1
    logger.info(result.message)
    return result


@dataclass
class EtfRow:
    instrument: Instrument
    snapshot: Optional[MarketSnapshot]
    distance_from_low: Optional[Decimal]
    distance_from_high: Optional[Decimal]
    held_quantity: int
    is_candidate: bool

    @property
    def dma_distance(self) -> Optional[Decimal]:
        if self.snapshot is None or not self.snapshot.dma20:
            return None
        return self.snapshot.dma_distance


@dataclass
class EtfListing:
    rows: list[EtfRow]
    last_updated: Optional[datetime]
    below_dma_count: int
    strong_buy_count: int

    @property
    def count(self) -> int:
        return len(self.rows)


def _sort_key(row: EtfRow) -> tuple[Decimal, str]:
    distance = row.dma_distance
    return (distance if distance is not None else _MISSING_DISTANCE, row.instrument.symbol)


async def list_etfs(
    repo: PortfolioRepository,
    *,
    candidates_only: bool = False,
    category: str | None = None,
    query: str | None = None,
) -> EtfListing:
    """ETFs with their latest snapshot, most discounted to the 20-DMA first.

    ``candidates_only`` keeps the buy list: instruments passing the averaging
    gate whose last volume meets ``min_volume``.
    """

    rules = await repo.get_rules()
    held = group_by_symbol(await repo.list_lots())
    rows: list[EtfRow] = []
    for instrument, snapshot in await repo.list_market_rows():
        if category and (instrument.category or "").lower() != category.lower():
            continue
        if query and query.lower() not in f"{instrument.symbol} {instrument.name}".lower():
            continue
        lots = held.get(instrument.symbol, [])
        cmp = snapshot.cmp if snapshot is not None else None
        candidate = passes_buy_filter(lots, cmp, rules.averaging_threshold)
        if snapshot is not None and rules.min_volume > 0 and snapshot.volume < rules.min_volume:
            candidate = False
        if candidates_only and not candidate:
            continue
        rows.append(
            EtfRow(
                instrument=instrument,
                snapshot=snapshot,
                distance_from_low=distance_from_low(snapshot.cmp, snapshot.low_52w) if snapshot else None,
                distance_from_high=distance_from_high(snapshot.cmp, snapshot.high_52w) if snapshot else None,
                held_quantity=sum(lot.quantity for lot in lots),
                is_candidate=candidate,
            )
        )
    rows.sort(key=_sort_key)
    quoted = [row for row in rows if row.dma_distance is not None]
    return EtfListing(
        rows=rows,
        last_updated=await repo.market_last_updated(),
        below_dma_count=sum(1 for row in quoted if row.dma_distance < 0),
        strong_buy_count=sum(1 for row in quoted if row.dma_distance < STRONG_BUY_DISTANCE),
    )


__all__ = ["EtfListing", "EtfRow", "RefreshResult", "list_etfs", "refresh_market_data"]
