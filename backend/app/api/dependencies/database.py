"""Request-scoped dependencies resolved from the application state."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import AppSettings
from app.db.database import Database
from app.providers.yahoo import YahooChartClient
from app.repositories import PortfolioRepository


def get_app_settings(request: Request) -> AppSettings:
    return request.app.state.settings


async def get_db_session(request: Request) -> AsyncIterator[AsyncSession]:
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session


def get_repository(
    session: AsyncSession = Depends(get_db_session),
    settings: AppSettings = Depends(get_app_settings),
) -> PortfolioRepository:
    return PortfolioRepository(session, provider_suffix=settings.provider_symbol_suffix)


def get_market_data_client(request: Request) -> YahooChartClient:
    return request.app.state.market_data_client


__all__ = ["get_app_settings", "get_db_session", "get_market_data_client", "get_repository"]
