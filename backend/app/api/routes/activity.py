"""Daily activity counters and soft-limit evaluation."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from app.api.dependencies.database import get_repository
from app.api.serializers import serialize_limit
from app.repositories import PortfolioRepository
from app.schemas import ActivitySchema, LimitEvaluationSchema
from app.services import portfolio as portfolio_service
from etf_shop.activity import limit_reached
from etf_shop.models import ActivityKind

router = APIRouter()


@router.get("/{day}", response_model=ActivitySchema)
async def get_activity(day: date, repo: PortfolioRepository = Depends(get_repository)) -> ActivitySchema:
    rules = await repo.get_rules()
    activity = await repo.get_activity(day)
    return ActivitySchema(
        date=activity.date,
        buy_count=activity.buy_count,
        sell_count=activity.sell_count,
        max_daily_buys=rules.max_daily_buys,
        max_daily_sells=rules.max_daily_sells,
        buy_limit_reached=limit_reached(activity.buy_count, rules.max_daily_buys),
        sell_limit_reached=limit_reached(activity.sell_count, rules.max_daily_sells),
    )


@router.get("/{day}/evaluate", response_model=LimitEvaluationSchema)
async def evaluate_activity(
    day: date,
    kind: ActivityKind = Query(...),
    repo: PortfolioRepository = Depends(get_repository),
) -> LimitEvaluationSchema:
    """Ask before acting: the answer carries a warning once the cap is reached."""

    return serialize_limit(await portfolio_service.evaluate_activity(repo, day, kind))


__all__ = ["router"]
