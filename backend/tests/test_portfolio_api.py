import asyncio
from contextlib import asynccontextmanager

from httpx import ASGITransport, AsyncClient

from app.config import AppSettings
from app.db.database import Database
from app.main import create_app
from app.providers.yahoo import ChartQuote, MarketDataError, YahooChartClient
from app.repositories import PortfolioRepository


class StubMarketData:
    """Quotes NIFTYBEES 6% under a flat 20-DMA and fails everything else."""

    def __init__(self) -> None:
        self.requested: list[str] = []

    async def chart(self, provider_symbol: str) -> ChartQuote:
        self.requested.append(provider_symbol)
        if provider_symbol != "NIFTYBEES.NS":
            raise MarketDataError(f"{provider_symbol}: No data found")
        return ChartQuote(
            symbol=provider_symbol,
            price=94.0,
            previous_close=95.0,
            volume=20000,
            closes=[100.0] * 20,
            highs=[104.0] * 20,
            lows=[90.0] * 20,
        )

    async def aclose(self) -> None:
        return None


def _client(database: Database, market_data=None):
    settings = AppSettings(database_url=database.url, seed_universe=False)
    app = create_app(database, settings=settings, market_data_client=market_data or StubMarketData())

    @asynccontextmanager
    async def _manager():
        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                yield client
        await database.dispose()

    return _manager


async def _add_etf(api_client: AsyncClient, symbol: str, category: str = "Index") -> dict:
    response = await api_client.post("/etfs", json={"symbol": symbol, "name": f"{symbol} ETF", "category": category})
    assert response.status_code == 201
    return response.json()


def test_health(database: Database):
    client_manager = _client(database)

    async def _scenario():
        async with client_manager() as api_client:
            response = await api_client.get("/health")
            assert response.status_code == 200
            payload = response.json()
            assert payload["status"] == "ok"
            assert payload["timezone"] == "Asia/Kolkata"

    asyncio.run(_scenario())


def test_etf_create_duplicate_and_delete(database: Database):
    client_manager = _client(database)

    async def _scenario():
        async with client_manager() as api_client:
            created = await _add_etf(api_client, "niftybees")
            assert created["symbol"] == "NIFTYBEES"
            assert created["provider_symbol"] == "NIFTYBEES.NS"

            duplicate = await api_client.post(
                "/etfs", json={"symbol": "NIFTYBEES", "name": "Again", "category": "Index"}
            )
            assert duplicate.status_code == 409

            listing = (await api_client.get("/etfs")).json()
            assert listing["count"] == 1

            deleted = await api_client.delete(f"/etfs/{created['id']}")
            assert deleted.status_code == 204
            missing = await api_client.delete(f"/etfs/{created['id']}")
            assert missing.status_code == 404

    asyncio.run(_scenario())


def test_etf_with_open_lots_cannot_be_deleted(database: Database):
    client_manager = _client(database)

    async def _scenario():
        async with client_manager() as api_client:
            etf = await _add_etf(api_client, "GOLDBEES", "Gold")
            bought = await api_client.post(
                "/holdings",
                json={"symbol": "GOLDBEES", "buy_date": "2024-05-06", "buy_price": 60.5, "quantity": 100},
            )
            assert bought.status_code == 201
            response = await api_client.delete(f"/etfs/{etf['id']}")
            assert response.status_code == 409

    asyncio.run(_scenario())


def test_buy_for_unknown_symbol_is_not_found(database: Database):
    client_manager = _client(database)

    async def _scenario():
        async with client_manager() as api_client:
            response = await api_client.post(
                "/holdings",
                json={"symbol": "NOPE", "buy_date": "2024-05-06", "buy_price": 10, "quantity": 1},
            )
            assert response.status_code == 404

    asyncio.run(_scenario())


def test_second_buy_warns_but_is_recorded(database: Database):
    client_manager = _client(database)

    async def _scenario():
        async with client_manager() as api_client:
            await _add_etf(api_client, "BANKBEES", "Banking")
            lot = {"symbol": "BANKBEES", "buy_date": "2024-05-06", "buy_price": 450, "quantity": 10}

            first = await api_client.post("/holdings", json=lot)
            assert first.status_code == 201
            assert first.json()["limit"]["warning"] is None

            before = await api_client.get("/activity/2024-05-06/evaluate", params={"kind": "BUY"})
            assert before.json()["warning"] is not None
            assert before.json()["allowed"] is True

            second = await api_client.post("/holdings", json=lot)
            assert second.status_code == 201
            limit = second.json()["limit"]
            assert limit["allowed"] is True
            assert limit["count"] == 1
            assert limit["warning"]

            activity = (await api_client.get("/activity/2024-05-06")).json()
            assert activity["buy_count"] == 2
            assert activity["buy_limit_reached"] is True
            assert activity["sell_count"] == 0

            holdings = (await api_client.get("/holdings")).json()
            assert len(holdings) == 2

    asyncio.run(_scenario())


def test_liquidate_consumes_newest_lots_first(database: Database):
    client_manager = _client(database)

    async def _scenario():
        async with client_manager() as api_client:
            await _add_etf(api_client, "ITBEES", "Sectoral")
            for day, price in (("2024-01-10", 100), ("2024-02-10", 95), ("2024-03-10", 90)):
                response = await api_client.post(
                    "/holdings",
                    json={"symbol": "ITBEES", "buy_date": day, "buy_price": price, "quantity": 10},
                )
                assert response.status_code == 201

            too_many = await api_client.post(
                "/holdings/liquidate",
                json={"symbol": "ITBEES", "quantity": 31, "sell_price": 110, "sell_date": "2024-04-10"},
            )
            assert too_many.status_code == 400

            response = await api_client.post(
                "/holdings/liquidate",
                json={"symbol": "ITBEES", "quantity": 15, "sell_price": 110, "sell_date": "2024-04-10"},
            )
            assert response.status_code == 200
            payload = response.json()
            assert [(t["buy_price"], t["quantity"]) for t in payload["trades"]] == [(90.0, 10), (95.0, 5)]
            assert payload["total_profit"] == 275.0
            assert payload["remaining_quantity"] == 15
            assert [change["deleted"] for change in payload["lot_changes"]] == [True, False]

            holdings = (await api_client.get("/holdings", params={"symbol": "ITBEES"})).json()
            assert sorted((h["buy_price"], h["quantity"]) for h in holdings) == [(95.0, 5), (100.0, 10)]

            trades = (await api_client.get("/trades")).json()
            assert len(trades) == 2

            positions = (await api_client.get("/holdings/positions")).json()
            assert positions[0]["total_quantity"] == 15
            assert positions[0]["last_buy_price"] == 95.0

    asyncio.run(_scenario())


def test_sell_single_holding_in_part(database: Database):
    client_manager = _client(database)

    async def _scenario():
        async with client_manager() as api_client:
            await _add_etf(api_client, "JUNIORBEES")
            bought = await api_client.post(
                "/holdings",
                json={"symbol": "JUNIORBEES", "buy_date": "2024-01-02", "buy_price": 600, "quantity": 10},
            )
            holding_id = bought.json()["holding"]["id"]

            oversized = await api_client.post(
                f"/holdings/{holding_id}/sell",
                json={"sell_price": 650, "sell_date": "2024-02-01", "quantity": 11},
            )
            assert oversized.status_code == 400

            sold = await api_client.post(
                f"/holdings/{holding_id}/sell",
                json={"sell_price": 650, "sell_date": "2024-02-01", "quantity": 4},
            )
            assert sold.status_code == 200
            trade = sold.json()["trades"][0]
            assert trade["profit"] == 200.0
            assert trade["holding_days"] == 30

            holdings = (await api_client.get("/holdings")).json()
            assert holdings[0]["quantity"] == 6

    asyncio.run(_scenario())


def test_capital_summary_after_settings_update(database: Database):
    client_manager = _client(database)

    async def _scenario():
        async with client_manager() as api_client:
            updated = await api_client.put("/settings", json={"total_capital": 500000, "max_daily_buys": 3})
            assert updated.status_code == 200
            rules = updated.json()
            assert rules["total_capital"] == 500000.0
            assert rules["max_daily_buys"] == 3
            assert rules["profit_target_percent"] == 6.0

            await _add_etf(api_client, "NIFTYBEES")
            await _add_etf(api_client, "GOLDBEES", "Gold")
            for tx in (
                {"type": "ADD", "amount": 50000, "date": "2024-02-01"},
                {"type": "WITHDRAW", "amount": 20000, "date": "2024-03-01", "notes": "fees"},
            ):
                response = await api_client.post("/capital", json=tx)
                assert response.status_code == 201

            await api_client.post(
                "/holdings",
                json={"symbol": "NIFTYBEES", "buy_date": "2024-01-05", "buy_price": 250, "quantity": 400},
            )
            trade = await api_client.post(
                "/trades",
                json={
                    "symbol": "GOLDBEES",
                    "buy_date": "2024-01-02",
                    "sell_date": "2024-04-02",
                    "buy_price": 50,
                    "sell_price": 55,
                    "quantity": 1000,
                },
            )
            assert trade.status_code == 201
            assert trade.json()["total_profit"] == 5000.0

            summary = (await api_client.get("/capital/summary")).json()
            assert summary["net_capital"] == 530000.0
            assert summary["available_capital"] == 435000.0
            assert round(summary["used_percent"], 2) == 18.87
            assert summary["realized_profit"] == 5000.0

            transactions = (await api_client.get("/capital")).json()
            assert len(transactions) == 2

    asyncio.run(_scenario())


def test_sip_plans_and_summary(database: Database):
    client_manager = _client(database)

    async def _scenario():
        async with client_manager() as api_client:
            await _add_etf(api_client, "NIFTYBEES")
            monthly = await api_client.post(
                "/sip",
                json={"symbol": "NIFTYBEES", "amount": 5000, "frequency": "MONTHLY", "next_date": "2024-06-01"},
            )
            weekly = await api_client.post(
                "/sip",
                json={"symbol": "NIFTYBEES", "amount": 1000, "frequency": "WEEKLY", "next_date": "2024-06-03"},
            )
            assert monthly.status_code == 201 and weekly.status_code == 201

            summary = (await api_client.get("/sip/summary")).json()
            assert summary["effective_monthly"] == 9000.0
            assert summary["yearly_total"] == 108000.0

            paused = await api_client.put(f"/sip/{weekly.json()['id']}", json={"is_active": False})
            assert paused.json()["is_active"] is False
            summary = (await api_client.get("/sip/summary")).json()
            assert summary["effective_monthly"] == 5000.0
            assert summary["active_plans"] == 1

    asyncio.run(_scenario())


def test_refresh_then_list_by_dma_distance(database: Database):
    market_data = StubMarketData()
    client_manager = _client(database, market_data)

    async def _scenario():
        async with client_manager() as api_client:
            await _add_etf(api_client, "GOLDBEES", "Gold")
            await _add_etf(api_client, "NIFTYBEES")

            refreshed = await api_client.post("/market-data/refresh")
            assert refreshed.status_code == 200
            result = refreshed.json()
            assert result["message"] == "Updated 1 ETFs, 1 failed"
            assert result["errors"][0].startswith("GOLDBEES")
            assert sorted(market_data.requested) == ["GOLDBEES.NS", "NIFTYBEES.NS"]

            listing = (await api_client.get("/etfs")).json()
            assert [etf["symbol"] for etf in listing["etfs"]] == ["NIFTYBEES", "GOLDBEES"]
            nifty = listing["etfs"][0]
            assert nifty["cmp"] == 94.0
            assert nifty["dma20"] == 100.0
            assert round(nifty["dma_distance"], 4) == -6.0
            assert listing["etfs"][1]["dma_distance"] is None
            assert listing["below_dma_count"] == 1
            assert listing["strong_buy_count"] == 1
            assert listing["last_updated"] is not None

            gold_only = (await api_client.get("/etfs", params={"category": "gold"})).json()
            assert [etf["symbol"] for etf in gold_only["etfs"]] == ["GOLDBEES"]

            candidates = (await api_client.get("/etfs", params={"candidates_only": True})).json()
            assert candidates["count"] == 2

    asyncio.run(_scenario())


def test_xirr_report_values_open_lots_at_latest_quote(database: Database):
    client_manager = _client(database)

    async def _scenario():
        async with client_manager() as api_client:
            await _add_etf(api_client, "NIFTYBEES")
            await api_client.post(
                "/holdings",
                json={"symbol": "NIFTYBEES", "buy_date": "2023-01-01", "buy_price": 100, "quantity": 100},
            )
            await api_client.post("/market-data/refresh")

            report = (await api_client.get("/reports/xirr", params={"as_of": "2024-01-01"})).json()
            assert report["total_invested"] == 10000.0
            assert report["current_value"] == 9400.0
            assert report["absolute_profit"] == -600.0
            assert report["xirr_percent"] < 0
            assert report["as_of"] == "2024-01-01"
            assert report["cash_flows"] == [{"date": "2023-01-01", "amount": -10000.0, "kind": "INVESTMENT"}]

            stats = (await api_client.get("/reports/trades")).json()
            assert stats["total_trades"] == 0
            assert (await api_client.get("/reports/monthly")).json() == []

    asyncio.run(_scenario())


class ChartResponse:
    def __init__(self, payload: dict) -> None:
        self._payload = payload

    def raise_for_status(self) -> None:
        return None

    def json(self) -> dict:
        return self._payload


class ChartHttpClient:
    """Serves a good chart for NIFTYBEES and an empty result entry for anything else."""

    async def get(self, url: str, params: dict, timeout: float) -> ChartResponse:
        if url.endswith("/NIFTYBEES.NS"):
            return ChartResponse(
                {
                    "chart": {
                        "result": [
                            {
                                "meta": {"regularMarketPrice": 250.0, "previousClose": 248.0, "regularMarketVolume": 50000},
                                "indicators": {"quote": [{"close": [245.0, 250.0], "high": [251.0], "low": [244.0]}]},
                            }
                        ],
                        "error": None,
                    }
                }
            )
        return ChartResponse({"chart": {"result": [None], "error": None}})

    async def aclose(self) -> None:
        return None


def test_refresh_survives_malformed_chart_result(database: Database):
    client_manager = _client(database, YahooChartClient("https://charts.test", client=ChartHttpClient()))

    async def _scenario():
        async with client_manager() as api_client:
            await _add_etf(api_client, "GOLDBEES", "Gold")
            await _add_etf(api_client, "NIFTYBEES")

            refreshed = await api_client.post("/market-data/refresh")
            assert refreshed.status_code == 200
            result = refreshed.json()
            assert result["success"] == 1
            assert result["failed"] == 1
            assert result["errors"][0].startswith("GOLDBEES")

            listing = (await api_client.get("/etfs")).json()
            quoted = {etf["symbol"]: etf["cmp"] for etf in listing["etfs"]}
            assert quoted == {"NIFTYBEES": 250.0, "GOLDBEES": None}

    asyncio.run(_scenario())


def test_failed_lot_update_reports_stored_trades(database: Database, monkeypatch):
    async def _failing_lot_update(self, changes):
        raise RuntimeError("disk I/O error")

    client_manager = _client(database)

    async def _scenario():
        async with client_manager() as api_client:
            await _add_etf(api_client, "BANKBEES", "Banking")
            bought = await api_client.post(
                "/holdings",
                json={"symbol": "BANKBEES", "buy_date": "2024-01-10", "buy_price": 450, "quantity": 10},
            )
            holding_id = bought.json()["holding"]["id"]

            monkeypatch.setattr(PortfolioRepository, "apply_lot_changes", _failing_lot_update)
            response = await api_client.post(
                "/holdings/liquidate",
                json={"symbol": "BANKBEES", "quantity": 4, "sell_price": 480, "sell_date": "2024-03-01"},
            )
            monkeypatch.undo()

            assert response.status_code == 500
            detail = response.json()["detail"]
            trades = (await api_client.get("/trades")).json()
            assert len(trades) == 1
            assert detail["trade_ids"] == [trades[0]["id"]]
            assert detail["unreconciled_lot_ids"] == [holding_id]
            assert "disk I/O error" in detail["message"]

            holdings = (await api_client.get("/holdings")).json()
            assert [(h["id"], h["quantity"]) for h in holdings] == [(holding_id, 10)]

            activity = (await api_client.get("/activity/2024-03-01")).json()
            assert activity["sell_count"] == 0

    asyncio.run(_scenario())
