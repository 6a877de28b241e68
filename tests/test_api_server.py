"""HTTP API tests through FastAPI's TestClient"""

import pytest
from fastapi.testclient import TestClient

from conftest import CannedAlphaVantageClient, rising_history
from screener.api.server import create_app
from screener.app import build_services
from screener.core.config import ScreenerSettings


@pytest.fixture
def api(fake_client, limiter):
    settings = ScreenerSettings(alpha_vantage_api_key="test")
    app = create_app(build_services(settings, client=fake_client, limiter=limiter))
    with TestClient(app) as client:
        yield client


class TestHealth:

    def test_health(self, api):
        response = api.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "OK", "message": "Stock Screener API is running"}


class TestQuoteRoute:

    def test_found(self, api, fake_client):
        fake_client.set_quote("AAPL", 187.44, change=1.52, change_percent=0.82)

        response = api.get("/api/quote/aapl")

        assert response.status_code == 200
        body = response.json()
        assert body["symbol"] == "AAPL"
        assert body["price"] == 187.44
        assert body["changePercent"] == 0.82

    def test_not_found(self, api):
        response = api.get("/api/quote/ZZZZ")

        assert response.status_code == 404
        assert response.json() == {"error": "Symbol not found"}

    def test_provider_failure(self, api, fake_client):
        fake_client.fail("quote", "AAPL")

        response = api.get("/api/quote/AAPL")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch quote"}


class TestTechnicalsRoute:

    def test_found(self, api, fake_client):
        fake_client.set_history("AAPL", rising_history(days=60))

        response = api.get("/api/technicals/AAPL")

        assert response.status_code == 200
        body = response.json()
        assert body["currentPrice"] == 100.0
        assert {"rsi", "distanceFromMA50", "distanceFromMA200", "ma50", "ma200"} <= set(body)

    def test_not_found(self, api):
        response = api.get("/api/technicals/ZZZZ")

        assert response.status_code == 404
        assert response.json() == {"error": "Technical data not found"}

    def test_provider_failure(self, api, fake_client):
        fake_client.fail("daily_full", "AAPL")

        response = api.get("/api/technicals/AAPL")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch technical data"}


class TestOverviewRoute:

    def test_found(self, api, fake_client):
        fake_client.set_profile("AAPL", name="Apple Inc", pe=29.1)

        response = api.get("/api/overview/AAPL")

        assert response.status_code == 200
        assert response.json()["name"] == "Apple Inc"
        assert response.json()["marketCap"] == "3400000000"

    def test_not_found(self, api):
        response = api.get("/api/overview/ZZZZ")

        assert response.status_code == 404
        assert response.json() == {"error": "Company not found"}


class TestScreenRoute:

    def test_screen(self, api, fake_client):
        fake_client.set_quote("NVDA", 100.0)
        fake_client.set_history("NVDA", rising_history())
        fake_client.set_profile("NVDA", short_interest=3.0)

        response = api.post("/api/screen", json={"type": "swing", "filters": {"sector": "tech"}})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [s["ticker"] for s in body["stocks"]] == ["NVDA"]
        assert body["stocks"][0]["stopLoss"] == pytest.approx(90.0)
        assert body["skipped"] == {"AAPL": "no_quote", "MSFT": "no_quote"}
        assert body["note"].startswith("Live data with technical indicators.")

    def test_filters_are_optional(self, api):
        response = api.post("/api/screen", json={"type": "growth"})

        assert response.status_code == 200
        assert body_tickers(response) == []

    def test_unknown_type(self, api):
        response = api.post("/api/screen", json={"type": "value", "filters": {}})

        assert response.status_code == 400
        assert "Unknown screen type" in response.json()["error"]

    def test_malformed_filters(self, api):
        response = api.post("/api/screen", json={"type": "swing", "filters": {"rsiMin": "low"}})

        assert response.status_code == 422

    def test_missing_type(self, api):
        response = api.post("/api/screen", json={"filters": {}})

        assert response.status_code == 422


def body_tickers(response):
    return [s["ticker"] for s in response.json()["stocks"]]


class TestMalformedProviderPayloads:
    """Payloads that parse as JSON but not as models answer with the JSON error body"""

    @pytest.fixture
    def canned_api(self, limiter):
        client = CannedAlphaVantageClient({
            "OVERVIEW": {"Symbol": "AAPL", "Name": ["Apple", "Inc"]},
            "GLOBAL_QUOTE": {"Global Quote": {"05. price": "187.44"}},
            "TIME_SERIES_DAILY": {"Time Series (Daily)": {"2024-05-10": {"4. close": "187.44"}}},
        })
        settings = ScreenerSettings(alpha_vantage_api_key="test")
        app = create_app(build_services(settings, client=client, limiter=limiter))
        with TestClient(app) as http:
            yield http

    def test_overview(self, canned_api):
        response = canned_api.get("/api/overview/AAPL")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch overview"}

    def test_screen_skips_symbols(self, canned_api):
        response = canned_api.post("/api/screen", json={"type": "swing"})

        assert response.status_code == 200
        assert response.json()["stocks"] == []
        assert set(response.json()["skipped"].values()) == {"fetch_failed"}
