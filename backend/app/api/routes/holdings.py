"""Open lot endpoints: buy, edit, sell and liquidate."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, Query, Response, status

from app.api.dependencies.database import get_app_settings, get_repository
from app.api.errors import http_error
from app.api.serializers import serialize_holding, serialize_limit, serialize_position, serialize_sell
from app.config import AppSettings
from app.core.errors import PartialLiquidationError
from app.repositories import PortfolioRepository
from app.schemas import (
    BuyResponse,
    HoldingCreateRequest,
    HoldingSchema,
    HoldingUpdateRequest,
    LiquidateRequest,
    PositionSchema,
    SellRequest,
    SellResponse,
)
from app.services import portfolio as portfolio_service

router = APIRouter()


@router.get("", response_model=list[HoldingSchema])
async def get_holdings(
    symbol: str | None = Query(default=None, max_length=32),
    repo: PortfolioRepository = Depends(get_repository),
) -> list[HoldingSchema]:
    prices = await repo.latest_prices()
    return [serialize_holding(lot, prices.get(lot.symbol)) for lot in await repo.list_lots(symbol)]


@router.post("", response_model=BuyResponse, status_code=status.HTTP_201_CREATED)
async def post_holding(payload: HoldingCreateRequest, repo: PortfolioRepository = Depends(get_repository)) -> BuyResponse:
    try:
        result = await portfolio_service.record_buy(
            repo,
            payload.symbol,
            payload.buy_date,
            Decimal(str(payload.buy_price)),
            payload.quantity,
        )
    except ValueError as exc:
        raise http_error(exc) from exc
    return BuyResponse(holding=serialize_holding(result.lot), limit=serialize_limit(result.limit))


@router.get("/positions", response_model=list[PositionSchema])
async def get_positions(repo: PortfolioRepository = Depends(get_repository)) -> list[PositionSchema]:
    return [serialize_position(summary) for summary in await portfolio_service.list_positions(repo)]


@router.post("/liquidate", response_model=SellResponse)
async def liquidate(
    payload: LiquidateRequest,
    repo: PortfolioRepository = Depends(get_repository),
    settings: AppSettings = Depends(get_app_settings),
) -> SellResponse:
    try:
        result = await portfolio_service.liquidate(
            repo,
            payload.symbol,
            payload.quantity,
            Decimal(str(payload.sell_price)),
            payload.sell_date,
            payload.method or settings.lot_allocation_method,
        )
    except (ValueError, PartialLiquidationError) as exc:
        raise http_error(exc) from exc
    return serialize_sell(result)


@router.put("/{holding_id}", response_model=HoldingSchema)
async def put_holding(
    holding_id: int,
    payload: HoldingUpdateRequest,
    repo: PortfolioRepository = Depends(get_repository),
) -> HoldingSchema:
    try:
        lot = await repo.update_lot(
            holding_id,
            buy_date=payload.buy_date,
            buy_price=Decimal(str(payload.buy_price)) if payload.buy_price is not None else None,
            quantity=payload.quantity,
        )
    except ValueError as exc:
        raise http_error(exc) from exc
    return serialize_holding(lot)


@router.delete("/{holding_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_holding(holding_id: int, repo: PortfolioRepository = Depends(get_repository)) -> Response:
    try:
        await repo.delete_lot(holding_id)
    except ValueError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{holding_id}/sell", response_model=SellResponse)
async def sell_holding(
    holding_id: int,
    payload: SellRequest,
    repo: PortfolioRepository = Depends(get_repository),
) -> SellResponse:
    try:
        result = await portfolio_service.sell_holding(
            repo,
            holding_id,
            Decimal(str(payload.sell_price)),
            payload.sell_date,
            payload.quantity,
        )
    except (ValueError, PartialLiquidationError) as exc:
        raise http_error(exc) from exc
    return serialize_sell(result)


__all__ = ["router"]
