"""Storage repositories."""

from .portfolio import PortfolioRepository

__all__ = ["PortfolioRepository"]
