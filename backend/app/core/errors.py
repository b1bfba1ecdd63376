"""Service-level exceptions mapped to HTTP responses by the routes."""

from __future__ import annotations

from typing import Sequence


class NotFoundError(ValueError):
    """Raised when a referenced record does not exist."""


class ConflictError(ValueError):
    """Raised when a write would violate a uniqueness or ownership rule."""


class PartialLiquidationError(RuntimeError):
    """Trades were stored but the matching lot changes were not.

    Carries the ids needed to reconcile by hand; the stored trades are kept.
    """

    def __init__(self, trade_ids: Sequence[int], lot_ids: Sequence[int], reason: str) -> None:
        self.trade_ids = list(trade_ids)
        self.lot_ids = list(lot_ids)
        self.reason = reason
        super().__init__(
            f"Stored trades {self.trade_ids} but failed to update lots {self.lot_ids}: {reason}"
        )


__all__ = ["ConflictError", "NotFoundError", "PartialLiquidationError"]
