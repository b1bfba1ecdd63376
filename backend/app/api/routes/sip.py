"""Systematic investment plan endpoints."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, Response, status

from app.api.dependencies.database import get_repository
from app.api.errors import http_error
from app.api.serializers import serialize_sip
from app.repositories import PortfolioRepository
from app.schemas import SipCreateRequest, SipSchema, SipSummarySchema, SipUpdateRequest
from app.services import reports as report_service

router = APIRouter()


@router.get("", response_model=list[SipSchema])
async def get_sip_plans(repo: PortfolioRepository = Depends(get_repository)) -> list[SipSchema]:
    return [serialize_sip(plan) for plan in await repo.list_sip_plans()]


@router.post("", response_model=SipSchema, status_code=status.HTTP_201_CREATED)
async def post_sip_plan(payload: SipCreateRequest, repo: PortfolioRepository = Depends(get_repository)) -> SipSchema:
    try:
        plan = await repo.add_sip_plan(
            payload.symbol, Decimal(str(payload.amount)), payload.frequency, payload.next_date
        )
    except ValueError as exc:
        raise http_error(exc) from exc
    return serialize_sip(plan)


@router.get("/summary", response_model=SipSummarySchema)
async def get_sip_summary(repo: PortfolioRepository = Depends(get_repository)) -> SipSummarySchema:
    summary = await report_service.sip_summary(repo)
    return SipSummarySchema(
        monthly_total=float(summary.monthly_total),
        weekly_total=float(summary.weekly_total),
        effective_monthly=float(summary.effective_monthly),
        yearly_total=float(summary.yearly_total),
        active_plans=summary.active_plans,
    )


@router.put("/{plan_id}", response_model=SipSchema)
async def put_sip_plan(
    plan_id: int,
    payload: SipUpdateRequest,
    repo: PortfolioRepository = Depends(get_repository),
) -> SipSchema:
    try:
        plan = await repo.update_sip_plan(
            plan_id,
            amount=Decimal(str(payload.amount)) if payload.amount is not None else None,
            frequency=payload.frequency,
            next_date=payload.next_date,
            is_active=payload.is_active,
        )
    except ValueError as exc:
        raise http_error(exc) from exc
    return serialize_sip(plan)


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sip_plan(plan_id: int, repo: PortfolioRepository = Depends(get_repository)) -> Response:
    try:
        await repo.delete_sip_plan(plan_id)
    except ValueError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
