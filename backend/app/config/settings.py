"""Application configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_TIMEZONE = "Asia/Kolkata"
DEFAULT_BASE_CURRENCY = "INR"


class AppSettings(BaseSettings):
    """Configuration options for the ETF Shop service."""

    app_name: str = Field(default="ETF Shop")
    timezone: str = Field(default=DEFAULT_TIMEZONE)
    base_currency: str = Field(default=DEFAULT_BASE_CURRENCY)
    log_level: str = Field(default="INFO")

    database_url: str = Field(
        default="sqlite+aiosqlite:///./etf_shop.db",
        description="SQLAlchemy database URL.",
    )
    seed_universe: bool = Field(
        default=True,
        description="Insert the default ETF list when the instrument table is empty.",
    )

    market_data_base_url: str = Field(default="https://query1.finance.yahoo.com/v8/finance/chart")
    market_data_timeout_seconds: float = Field(default=10.0)
    market_data_range: str = Field(default="1mo")
    provider_symbol_suffix: str = Field(default=".NS")

    lot_allocation_method: Literal["FIFO", "LIFO"] = Field(default="LIFO")

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="etf-shop")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:5173", "http://localhost:4200"])

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        hidden = {"database_url"}
        return {k: ("***" if k in hidden else v) for k, v in self.model_dump().items()}


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """Return cached application settings with optional overrides."""

    if overrides:
        return AppSettings(**overrides)
    return AppSettings()
