"""Return and trade-history reports."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from app.api.dependencies.database import get_repository
from app.repositories import PortfolioRepository
from app.schemas import CashFlowSchema, MonthlySummarySchema, TradeStatisticsSchema, XirrResponse
from app.services import reports as report_service

router = APIRouter()


@router.get("/xirr", response_model=XirrResponse)
async def get_xirr(
    as_of: date | None = Query(default=None, description="Valuation date; defaults to today"),
    repo: PortfolioRepository = Depends(get_repository),
) -> XirrResponse:
    valuation_date = as_of or date.today()
    report = await report_service.xirr(repo, as_of=valuation_date)
    return XirrResponse(
        xirr_percent=report.xirr_percent,
        total_invested=float(report.total_invested),
        total_returned=float(report.total_returned),
        current_value=float(report.current_value),
        absolute_profit=float(report.absolute_profit),
        absolute_return_percent=float(report.absolute_return_percent),
        as_of=valuation_date,
        cash_flows=[
            CashFlowSchema(date=flow.date, amount=flow.signed_amount, kind=flow.kind) for flow in report.cash_flows
        ],
    )


@router.get("/monthly", response_model=list[MonthlySummarySchema])
async def get_monthly(repo: PortfolioRepository = Depends(get_repository)) -> list[MonthlySummarySchema]:
    return [
        MonthlySummarySchema(
            year=summary.year,
            month=summary.month,
            profit=float(summary.profit),
            invested=float(summary.invested),
            trade_count=summary.trade_count,
        )
        for summary in await report_service.monthly(repo)
    ]


@router.get("/trades", response_model=TradeStatisticsSchema)
async def get_trade_statistics(repo: PortfolioRepository = Depends(get_repository)) -> TradeStatisticsSchema:
    stats = await report_service.trade_stats(repo)
    return TradeStatisticsSchema(
        total_profit=float(stats.total_profit),
        total_trades=stats.total_trades,
        winning_trades=stats.winning_trades,
        win_rate=float(stats.win_rate),
        average_profit=float(stats.average_profit),
        average_holding_days=float(stats.average_holding_days),
    )


__all__ = ["router"]
