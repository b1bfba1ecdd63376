"""Translate service exceptions into HTTP errors."""

from __future__ import annotations

from fastapi import HTTPException, status

from app.core.errors import ConflictError, NotFoundError, PartialLiquidationError


def http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, PartialLiquidationError):
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": str(exc),
                "trade_ids": exc.trade_ids,
                "unreconciled_lot_ids": exc.lot_ids,
            },
        )
    if isinstance(exc, ValueError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


__all__ = ["http_error"]
