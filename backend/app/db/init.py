"""Database schema initialization and seed helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from app.db.database import Database
from app.repositories import PortfolioRepository

logger = logging.getLogger(__name__)

UNIVERSE_PATH = Path(__file__).with_name("etf_universe.json")


def load_universe(path: Path = UNIVERSE_PATH) -> list[dict[str, Any]]:
    return json.loads(path.read_text(encoding="utf-8"))


async def init_database(database: Database, *, seed_universe: bool = True, provider_suffix: str = ".NS") -> None:
    """Ensure tables exist, then fill in missing settings and an empty ETF list."""

    try:
        await database.create_all()
        async with database.session() as session:
            repo = PortfolioRepository(session, provider_suffix=provider_suffix)
            await repo.ensure_default_settings()
            if seed_universe and not await repo.list_instruments():
                added = await repo.add_instruments(load_universe())
                logger.info("Seeded %s ETFs", added)
    except SQLAlchemyError:
        logger.exception("Failed to initialise database schema")
        raise


__all__ = ["init_database", "load_universe"]
