"""Schemas for the ETF universe and quote refreshes."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class EtfCreateRequest(BaseModel):
    symbol: str = Field(..., min_length=1, max_length=32, description="Exchange symbol, e.g. GOLDBEES")
    name: str = Field(..., min_length=1, max_length=128)
    category: str = Field(..., min_length=1, max_length=64)
    provider_symbol: str | None = Field(
        default=None, max_length=40, description="Quote alias; defaults to the symbol plus the exchange suffix"
    )


class EtfSchema(BaseModel):
    id: int
    symbol: str
    provider_symbol: str
    name: str
    category: str | None
    cmp: float | None = None
    high_52w: float | None = None
    low_52w: float | None = None
    prev_close: float | None = None
    change: float | None = None
    change_percent: float | None = None
    volume: int | None = None
    dma20: float | None = None
    dma_distance: float | None = Field(default=None, description="Percent distance from the 20-DMA")
    distance_from_low: float | None = None
    distance_from_high: float | None = None
    held_quantity: int = 0
    is_candidate: bool = Field(default=True, description="Passes the averaging gate and volume filter")
    updated_at: datetime | None = None


class EtfListResponse(BaseModel):
    etfs: list[EtfSchema]
    count: int
    last_updated: datetime | None
    below_dma_count: int
    strong_buy_count: int


class MarketRefreshResponse(BaseModel):
    message: str
    success: int
    failed: int
    errors: list[str]
    refreshed_at: datetime | None = None


class HealthResponse(BaseModel):
    status: str
    service: str
    timestamp: datetime
    timezone: str


__all__ = [
    "EtfCreateRequest",
    "EtfListResponse",
    "EtfSchema",
    "HealthResponse",
    "MarketRefreshResponse",
]
