"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .activity import router as activity_router
from .capital import router as capital_router
from .etfs import router as etfs_router
from .holdings import router as holdings_router
from .market_data import router as market_data_router
from .reports import router as reports_router
from .settings import router as settings_router
from .sip import router as sip_router
from .trades import router as trades_router

api_router = APIRouter()
api_router.include_router(etfs_router, prefix="/etfs", tags=["etfs"])
api_router.include_router(market_data_router, prefix="/market-data", tags=["market-data"])
api_router.include_router(holdings_router, prefix="/holdings", tags=["holdings"])
api_router.include_router(trades_router, prefix="/trades", tags=["trades"])
api_router.include_router(capital_router, prefix="/capital", tags=["capital"])
api_router.include_router(settings_router, prefix="/settings", tags=["settings"])
api_router.include_router(activity_router, prefix="/activity", tags=["activity"])
api_router.include_router(sip_router, prefix="/sip", tags=["sip"])
api_router.include_router(reports_router, prefix="/reports", tags=["reports"])

__all__ = ["api_router"]
