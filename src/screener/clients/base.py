"""Market data client interface the screener depends on."""

from typing import Optional, Protocol

from screener.core.models import CompanyProfile, PriceSeries, Quote


class MarketDataClient(Protocol):
    """Quote, daily-history and profile lookups. None means the symbol is unknown."""

    async def fetch_quote(self, symbol: str) -> Optional[Quote]:
        ...

    async def fetch_daily(self, symbol: str, output_size: str = "compact") -> Optional[PriceSeries]:
        ...

    async def fetch_overview(self, symbol: str) -> Optional[CompanyProfile]:
        ...
