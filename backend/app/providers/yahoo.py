"""Yahoo Finance chart client used for quote refreshes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from app.config import get_settings

logger = logging.getLogger(__name__)

_HEADERS = {"User-Agent": "Mozilla/5.0 (compatible; etf-shop/0.1)"}


class MarketDataError(RuntimeError):
    """Raised when the chart endpoint fails or returns no usable quote."""


@dataclass
class ChartQuote:
    """Raw figures for one symbol over the requested window."""

    symbol: str
    price: float
    previous_close: Optional[float]
    volume: Optional[float]
    closes: list[Optional[float]] = field(default_factory=list)
    highs: list[Optional[float]] = field(default_factory=list)
    lows: list[Optional[float]] = field(default_factory=list)


class YahooChartClient:
    """Thin async wrapper over the v8 chart API with an injectable HTTP client."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        range_: str | None = None,
        client: httpx.AsyncClient | Any | None = None,
    ) -> None:
        settings = get_settings()
        self._base_url = (base_url or settings.market_data_base_url).rstrip("/")
        self._timeout = timeout or settings.market_data_timeout_seconds
        self._range = range_ or settings.market_data_range
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(headers=_HEADERS)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def chart(self, provider_symbol: str) -> ChartQuote:
        url = f"{self._base_url}/{provider_symbol}"
        params = {"interval": "1d", "range": self._range}
        try:
            response = await self._client.get(url, params=params, timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise MarketDataError(f"{provider_symbol}: {exc}") from exc
        return parse_chart(provider_symbol, payload)


def parse_chart(provider_symbol: str, payload: dict[str, Any]) -> ChartQuote:
    chart = payload.get("chart") or {}
    if chart.get("error"):
        error = chart["error"]
        description = error.get("description") if isinstance(error, dict) else error
        raise MarketDataError(f"{provider_symbol}: {description}")
    results = chart.get("result") or []
    if not results:
        raise MarketDataError(f"{provider_symbol}: no data returned")
    result = results[0]
    if not isinstance(result, dict):
        raise MarketDataError(f"{provider_symbol}: malformed chart result")
    meta = result.get("meta") or {}
    try:
        price = float(meta["regularMarketPrice"])
    except (KeyError, TypeError, ValueError) as exc:
        raise MarketDataError(f"{provider_symbol}: missing regularMarketPrice") from exc
    indicators = result.get("indicators") or {}
    quotes = (indicators.get("quote") if isinstance(indicators, dict) else None) or [{}]
    quote = (quotes[0] if isinstance(quotes, list) else None) or {}
    if not isinstance(quote, dict):
        raise MarketDataError(f"{provider_symbol}: malformed quote series")
    return ChartQuote(
        symbol=provider_symbol,
        price=price,
        previous_close=meta.get("previousClose") or meta.get("chartPreviousClose"),
        volume=meta.get("regularMarketVolume"),
        closes=list(quote.get("close") or []),
        highs=list(quote.get("high") or []),
        lows=list(quote.get("low") or []),
    )


__all__ = ["ChartQuote", "MarketDataError", "YahooChartClient", "parse_chart"]
