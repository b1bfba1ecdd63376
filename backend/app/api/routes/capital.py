"""Capital ledger endpoints."""

from __future__ import annotations

from dataclasses import asdict
from decimal import Decimal

from fastapi import APIRouter, Depends, status

from app.api.dependencies.database import get_repository
from app.api.serializers import serialize_capital
from app.repositories import PortfolioRepository
from app.schemas import CapitalSummarySchema, CapitalTransactionCreateRequest, CapitalTransactionSchema
from app.services import portfolio as portfolio_service

router = APIRouter()


@router.get("", response_model=list[CapitalTransactionSchema])
async def get_capital_transactions(repo: PortfolioRepository = Depends(get_repository)) -> list[CapitalTransactionSchema]:
    return [serialize_capital(tx) for tx in await repo.list_capital_transactions()]


@router.post("", response_model=CapitalTransactionSchema, status_code=status.HTTP_201_CREATED)
async def post_capital_transaction(
    payload: CapitalTransactionCreateRequest,
    repo: PortfolioRepository = Depends(get_repository),
) -> CapitalTransactionSchema:
    tx = await repo.add_capital_transaction(payload.type, Decimal(str(payload.amount)), payload.date, payload.notes)
    return serialize_capital(tx)


@router.get("/summary", response_model=CapitalSummarySchema)
async def get_capital_summary(repo: PortfolioRepository = Depends(get_repository)) -> CapitalSummarySchema:
    summary = await portfolio_service.capital_summary(repo)
    return CapitalSummarySchema(**{name: float(value) for name, value in asdict(summary).items()})


__all__ = ["router"]
