"""Trading rule settings endpoints."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from app.api.dependencies.database import get_repository
from app.repositories import PortfolioRepository
from app.schemas import SettingsSchema, SettingsUpdateRequest
from etf_shop.models import TradingRules

router = APIRouter()


def _serialize_rules(rules: TradingRules) -> SettingsSchema:
    values = asdict(rules)
    return SettingsSchema(
        **{name: value if isinstance(value, int) else float(value) for name, value in values.items()}
    )


@router.get("", response_model=SettingsSchema)
async def get_settings(repo: PortfolioRepository = Depends(get_repository)) -> SettingsSchema:
    return _serialize_rules(await repo.get_rules())


@router.put("", response_model=SettingsSchema)
async def put_settings(payload: SettingsUpdateRequest, repo: PortfolioRepository = Depends(get_repository)) -> SettingsSchema:
    return _serialize_rules(await repo.set_settings(payload.model_dump(exclude_none=True)))


__all__ = ["router"]
