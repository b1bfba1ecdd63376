"""Read-only reports over stored trades, lots and SIP plans."""

from __future__ import annotations

from datetime import date
from typing import Optional

from app.repositories import PortfolioRepository
from app.services.portfolio import portfolio_value
from etf_shop.reports import MonthlySummary, SipCommitment, TradeStatistics, monthly_summaries, sip_commitment, trade_statistics
from etf_shop.xirr import XirrReport, xirr_report


async def xirr(repo: PortfolioRepository, *, as_of: Optional[date] = None) -> XirrReport:
    lots = await repo.list_lots()
    trades = await repo.list_trades()
    return xirr_report(lots, trades, await portfolio_value(repo), as_of=as_of)


async def monthly(repo: PortfolioRepository) -> list[MonthlySummary]:
    return monthly_summaries(await repo.list_trades())


async def trade_stats(repo: PortfolioRepository) -> TradeStatistics:
    return trade_statistics(await repo.list_trades())


async def sip_summary(repo: PortfolioRepository) -> SipCommitment:
    return sip_commitment(await repo.list_sip_plans())


__all__ = ["monthly", "sip_summary", "trade_stats", "xirr"]
