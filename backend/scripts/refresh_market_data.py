"""CLI wrapper for the quote refresh."""

from __future__ import annotations

import argparse
import asyncio

from app.config import get_settings
from app.core.logging import setup_logging
from app.db.database import Database
from app.db.init import init_database
from app.providers.yahoo import YahooChartClient
from app.repositories import PortfolioRepository
from app.services.market_data import refresh_market_data


async def _run(database_url: str | None) -> None:
    settings = get_settings()
    database = Database(database_url or settings.database_url)
    client = YahooChartClient()
    try:
        await init_database(database, seed_universe=settings.seed_universe)
        async with database.session() as session:
            repo = PortfolioRepository(session, provider_suffix=settings.provider_symbol_suffix)
            result = await refresh_market_data(repo, client)
        print(result.message)
        for error in result.errors:
            print(f"  {error}")
    finally:
        await client.aclose()
        await database.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Refresh stored quotes for every ETF")
    parser.add_argument("--database-url", default=None)
    args = parser.parse_args()
    setup_logging(get_settings().log_level)
    asyncio.run(_run(args.database_url))


if __name__ == "__main__":
    main()
