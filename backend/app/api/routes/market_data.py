"""Quote refresh endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.dependencies.database import get_market_data_client, get_repository
from app.providers.yahoo import YahooChartClient
from app.repositories import PortfolioRepository
from app.schemas import MarketRefreshResponse
from app.services import market_data as market_service

router = APIRouter()


@router.post("/refresh", response_model=MarketRefreshResponse)
async def refresh(
    repo: PortfolioRepository = Depends(get_repository),
    client: YahooChartClient = Depends(get_market_data_client),
) -> MarketRefreshResponse:
    result = await market_service.refresh_market_data(repo, client)
    return MarketRefreshResponse(
        message=result.message,
        success=result.success,
        failed=result.failed,
        errors=result.errors,
        refreshed_at=result.refreshed_at,
    )


__all__ = ["router"]
