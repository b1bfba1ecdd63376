"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import api_router
from app.config import AppSettings, get_settings
from app.core.logging import setup_logging
from app.core.telemetry import setup_telemetry
from app.db.database import Database
from app.db.init import init_database
from app.providers.yahoo import YahooChartClient
from app.schemas import HealthResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI, db: Database, settings: AppSettings):
    await init_database(
        db,
        seed_universe=settings.seed_universe,
        provider_suffix=settings.provider_symbol_suffix,
    )
    try:
        yield
    finally:
        await app.state.market_data_client.aclose()


def create_app(
    db: Database | None = None,
    *,
    settings: AppSettings | None = None,
    market_data_client: YahooChartClient | None = None,
) -> FastAPI:
    """Build the service around an explicitly supplied database."""

    settings = settings or get_settings()
    database_instance = db or Database(settings.database_url)
    setup_logging(settings.log_level)
    logger.info("Starting %s with %s", settings.app_name, settings.dict_for_logging())

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lambda app: _lifespan(app, database_instance, settings),
    )
    app.state.settings = settings
    app.state.database = database_instance
    app.state.market_data_client = market_data_client or YahooChartClient(
        settings.market_data_base_url,
        timeout=settings.market_data_timeout_seconds,
        range_=settings.market_data_range,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_telemetry(app, settings, engine=database_instance.engine)
    app.include_router(api_router)

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(
            status="ok",
            service=settings.app_name,
            timestamp=datetime.now(),
            timezone=settings.timezone,
        )

    return app


app = create_app()

__all__ = ["app", "create_app"]
