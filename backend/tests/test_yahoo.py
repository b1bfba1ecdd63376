"""Yahoo chart client tests."""

from __future__ import annotations

import httpx
import pytest

from app.providers.yahoo import MarketDataError, YahooChartClient, parse_chart


def chart_payload(price: float = 250.5) -> dict[str, object]:
    return {
        "chart": {
            "result": [
                {
                    "meta": {
                        "regularMarketPrice": price,
                        "chartPreviousClose": 248.0,
                        "regularMarketVolume": 120000,
                    },
                    "indicators": {
                        "quote": [
                            {
                                "close": [245.0, None, 250.0],
                                "high": [247.0, None, 252.0],
                                "low": [243.0, None, 249.0],
                            }
                        ]
                    },
                }
            ],
            "error": None,
        }
    }


class StubResponse:
    def __init__(self, payload: dict[str, object], status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            request = httpx.Request("GET", "https://example.test")
            raise httpx.HTTPStatusError("error", request=request, response=httpx.Response(self.status_code))

    def json(self) -> dict[str, object]:
        return self._payload


class StubClient:
    def __init__(self, payload: dict[str, object] | None = None, status_code: int = 200) -> None:
        self.calls: list[tuple[str, dict[str, object]]] = []
        self._payload = payload if payload is not None else chart_payload()
        self._status_code = status_code

    async def get(self, url: str, params: dict[str, object], timeout: float) -> StubResponse:
        self.calls.append((url, params))
        return StubResponse(self._payload, self._status_code)

    async def aclose(self) -> None:  # pragma: no cover - included for interface completeness
        return None


@pytest.mark.asyncio
async def test_requests_daily_chart_for_provider_symbol():
    stub = StubClient()
    client = YahooChartClient("https://charts.test/v8/", range_="1mo", client=stub)
    quote = await client.chart("NIFTYBEES.NS")
    url, params = stub.calls[0]
    assert url == "https://charts.test/v8/NIFTYBEES.NS"
    assert params == {"interval": "1d", "range": "1mo"}
    assert quote.price == 250.5
    assert quote.previous_close == 248.0
    assert quote.volume == 120000
    assert quote.closes == [245.0, None, 250.0]


@pytest.mark.asyncio
async def test_raises_on_chart_error():
    payload = {"chart": {"result": None, "error": {"code": "Not Found", "description": "No data found"}}}
    client = YahooChartClient(client=StubClient(payload))
    with pytest.raises(MarketDataError, match="No data found"):
        await client.chart("MISSING.NS")


@pytest.mark.asyncio
async def test_http_failure_becomes_market_data_error():
    client = YahooChartClient(client=StubClient(status_code=503))
    with pytest.raises(MarketDataError):
        await client.chart("GOLDBEES.NS")


@pytest.mark.parametrize(
    "payload",
    [
        {"chart": {"result": [None], "error": None}},
        {"chart": {"result": [{"meta": {"regularMarketPrice": "n/a"}}], "error": None}},
        {"chart": {"result": [{"meta": {"regularMarketPrice": 10.0}, "indicators": {"quote": ["bad"]}}]}},
    ],
)
def test_parse_chart_rejects_malformed_results(payload):
    with pytest.raises(MarketDataError):
        parse_chart("GOLDBEES.NS", payload)


def test_parse_chart_requires_price():
    payload = chart_payload()
    payload["chart"]["result"][0]["meta"].pop("regularMarketPrice")  # type: ignore[index]
    with pytest.raises(MarketDataError):
        parse_chart("ITBEES.NS", payload)
