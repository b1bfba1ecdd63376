"""Realized trade endpoints."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, Response, status

from app.api.dependencies.database import get_repository
from app.api.errors import http_error
from app.api.serializers import serialize_sell, serialize_trade
from app.repositories import PortfolioRepository
from app.schemas import SellResponse, TradeCreateRequest, TradeSchema
from app.services import portfolio as portfolio_service

router = APIRouter()


@router.get("", response_model=list[TradeSchema])
async def get_trades(repo: PortfolioRepository = Depends(get_repository)) -> list[TradeSchema]:
    return [serialize_trade(trade) for trade in await repo.list_trades()]


@router.post("", response_model=SellResponse, status_code=status.HTTP_201_CREATED)
async def post_trade(payload: TradeCreateRequest, repo: PortfolioRepository = Depends(get_repository)) -> SellResponse:
    try:
        result = await portfolio_service.record_trade(
            repo,
            payload.symbol,
            payload.buy_date,
            payload.sell_date,
            Decimal(str(payload.buy_price)),
            Decimal(str(payload.sell_price)),
            payload.quantity,
        )
    except ValueError as exc:
        raise http_error(exc) from exc
    return serialize_sell(result)


@router.delete("/{trade_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trade(trade_id: int, repo: PortfolioRepository = Depends(get_repository)) -> Response:
    try:
        await repo.delete_trade(trade_id)
    except ValueError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
