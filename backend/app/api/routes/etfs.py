"""ETF universe endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from app.api.dependencies.database import get_repository
from app.api.errors import http_error
from app.api.serializers import serialize_etf
from app.repositories import PortfolioRepository
from app.schemas import EtfCreateRequest, EtfListResponse, EtfSchema
from app.services import market_data as market_service

router = APIRouter()


@router.get("", response_model=EtfListResponse)
async def list_etfs(
    candidates_only: bool = Query(default=False, description="Only instruments on the buy list"),
    category: str | None = Query(default=None),
    q: str | None = Query(default=None, max_length=64, description="Symbol or name search"),
    repo: PortfolioRepository = Depends(get_repository),
) -> EtfListResponse:
    listing = await market_service.list_etfs(repo, candidates_only=candidates_only, category=category, query=q)
    return EtfListResponse(
        etfs=[serialize_etf(row) for row in listing.rows],
        count=listing.count,
        last_updated=listing.last_updated,
        below_dma_count=listing.below_dma_count,
        strong_buy_count=listing.strong_buy_count,
    )


@router.post("", response_model=EtfSchema, status_code=status.HTTP_201_CREATED)
async def post_etf(payload: EtfCreateRequest, repo: PortfolioRepository = Depends(get_repository)) -> EtfSchema:
    try:
        instrument = await repo.add_instrument(
            payload.symbol, payload.name, payload.category, provider_symbol=payload.provider_symbol
        )
    except ValueError as exc:
        raise http_error(exc) from exc
    return EtfSchema(
        id=instrument.id,
        symbol=instrument.symbol,
        provider_symbol=instrument.provider_symbol,
        name=instrument.name,
        category=instrument.category,
    )


@router.delete("/{etf_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_etf(etf_id: int, repo: PortfolioRepository = Depends(get_repository)) -> Response:
    try:
        await repo.delete_instrument(etf_id)
    except ValueError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
