"""Load an ETF list JSON file into the database."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from app.config import get_settings
from app.db.database import Database
from app.db.init import UNIVERSE_PATH, init_database, load_universe
from app.repositories import PortfolioRepository


async def _run(seed_path: Path) -> None:
    settings = get_settings()
    database = Database(settings.database_url)
    try:
        await init_database(database, seed_universe=False)
        async with database.session() as session:
            repo = PortfolioRepository(session, provider_suffix=settings.provider_symbol_suffix)
            added = await repo.add_instruments(load_universe(seed_path))
        print(f"Added {added} ETFs from {seed_path}")
    finally:
        await database.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Load ETF definitions into the ETF Shop database")
    parser.add_argument("seed_file", nargs="?", default=str(UNIVERSE_PATH))
    args = parser.parse_args()
    seed_path = Path(args.seed_file)
    if not seed_path.exists():
        raise SystemExit(f"Seed file not found: {seed_path}")
    asyncio.run(_run(seed_path))


if __name__ == "__main__":
    main()
