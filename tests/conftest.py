"""Shared fixtures: a fake clock and an in-memory market data client."""

from typing import Dict, List, Optional, Tuple

import pytest

from screener.clients.alpha_vantage_client import AlphaVantageClient, check_payload
from screener.core.cache import TTLCache
from screener.core.errors import ProviderError
from screener.core.models import CompanyProfile, PriceSeries, Quote
from screener.core.rate_limiter import RateLimiter


class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeMarketDataClient:
    """In-memory MarketDataClient that records every call with the clock time."""

    def __init__(self, clock: Optional[FakeClock] = None) -> None:
        self._clock = clock or FakeClock()
        self.quotes: Dict[str, Quote] = {}
        self.histories: Dict[str, PriceSeries] = {}
        self.profiles: Dict[str, CompanyProfile] = {}
        self.failures: Dict[Tuple[str, str], str] = {}
        self.calls: List[Tuple[str, str, float]] = []

    def set_quote(self, symbol: str, price: float, change: float = 1.0, change_percent: float = 0.5,
                  volume: int = 1_000_000) -> None:
        self.quotes[symbol] = Quote(
            symbol=symbol, price=price, change=change, change_percent=change_percent,
            volume=volume, high=price + 1, low=price - 1,
        )

    def set_history(self, symbol: str, closes: List[float]) -> None:
        self.histories[symbol] = PriceSeries(symbol=symbol, closes=closes)

    def set_profile(self, symbol: str, **fields) -> None:
        defaults = {"name": f"{symbol} Inc", "sector": "TECHNOLOGY", "market_cap": "3400000000"}
        defaults.update(fields)
        self.profiles[symbol] = CompanyProfile(symbol=symbol, **defaults)

    def fail(self, kind: str, symbol: str, reason: str = "HTTP 503") -> None:
        self.failures[(kind, symbol)] = reason

    def calls_for(self, symbol: str) -> List[str]:
        return [kind for kind, s, _ in self.calls if s == symbol]

    def _record(self, kind: str, symbol: str) -> None:
        self.calls.append((kind, symbol, self._clock()))
        if (kind, symbol) in self.failures:
            raise ProviderError(symbol, self.failures[(kind, symbol)])

    async def fetch_quote(self, symbol: str) -> Optional[Quote]:
        self._record("quote", symbol)
        return self.quotes.get(symbol)

    async def fetch_daily(self, symbol: str, output_size: str = "compact") -> Optional[PriceSeries]:
        self._record(f"daily_{output_size}", symbol)
        return self.histories.get(symbol)

    async def fetch_overview(self, symbol: str) -> Optional[CompanyProfile]:
        self._record("overview", symbol)
        return self.profiles.get(symbol)


class CannedAlphaVantageClient(AlphaVantageClient):
    """AlphaVantageClient answering from fixed payloads keyed by function name."""

    def __init__(self, payloads: Dict[str, object]) -> None:
        super().__init__(api_key="test")
        self.payloads = payloads

    async def _query(self, function: str, symbol: str, **extra: str):
        return check_payload(symbol, self.payloads[function])


def rising_history(days: int = 100, latest: float = 100.0, step: float = 0.5) -> List[float]:
    """Closes most recent first, each older day `step` lower than the next."""
    return [latest - i * step for i in range(days)]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter(calls_per_minute=5, margin_seconds=1.0, clock=clock, sleep=clock.sleep)


@pytest.fixture
def cache(clock):
    return TTLCache(ttl=300, max_entries=1024, clock=clock)


@pytest.fixture
def fake_client(clock):
    return FakeMarketDataClient(clock)
