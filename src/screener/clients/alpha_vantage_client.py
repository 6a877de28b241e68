"""
Alpha Vantage client: quotes, daily history and company overviews.

Each fetch returns a parsed model, or None when the provider reports the symbol
as unknown. Transport failures, non-2xx statuses, non-JSON bodies and throttle
notices raise ProviderError; callers decide whether that skips or fails.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional, TypeVar

import aiohttp
from pydantic import ValidationError

from screener.core.errors import ProviderError
from screener.core.formatting import (
    parse_changes_pct,
    parse_float_or_zero,
    parse_int_prefix,
    parse_price,
)
from screener.core.models import CompanyProfile, PriceSeries, Quote

logger = logging.getLogger(__name__)

ALPHA_VANTAGE_BASE = "https://www.alphavantage.co/query"
HISTORY_DAYS = 200

T = TypeVar("T")

# keys Alpha Vantage uses for rate-limit and quota messages instead of an HTTP error
_NOTICE_KEYS = ("Note", "Information")


def check_payload(symbol: str, data: Any) -> Dict[str, Any]:
    """Raise ProviderError for throttle notices and non-object bodies."""
    if not isinstance(data, dict):
        raise ProviderError(symbol, f"unexpected payload type {type(data).__name__}")
    for key in _NOTICE_KEYS:
        if key in data and len(data) == 1:
            raise ProviderError(symbol, str(data[key]))
    return data


def parse_global_quote(symbol: str, data: Dict[str, Any]) -> Optional[Quote]:
    quote = data.get("Global Quote")
    if not quote or not isinstance(quote, dict):
        return None

    price = parse_price(quote.get("05. price"))
    if price is None:
        return None

    return Quote(
        symbol=symbol,
        price=price,
        change=parse_price(quote.get("09. change")) or 0.0,
        change_percent=parse_changes_pct(quote.get("10. change percent")) or 0.0,
        volume=parse_int_prefix(quote.get("06. volume")) or 0,
        high=parse_price(quote.get("03. high")),
        low=parse_price(quote.get("04. low")),
    )


def parse_daily_closes(symbol: str, data: Dict[str, Any], days: int = HISTORY_DAYS) -> Optional[PriceSeries]:
    """Closing prices from TIME_SERIES_DAILY, most recent first, capped at `days`."""
    series = data.get("Time Series (Daily)")
    if not series or not isinstance(series, dict):
        return None

    closes = []
    # ISO dates sort lexicographically
    for day in sorted(series, reverse=True):
        bar = series[day]
        close = parse_price(bar.get("4. close")) if isinstance(bar, dict) else None
        if close is None:
            continue
        closes.append(close)
        if len(closes) == days:
            break

    if not closes:
        return None
    return PriceSeries(symbol=symbol, closes=closes)


def parse_overview(symbol: str, data: Dict[str, Any]) -> Optional[CompanyProfile]:
    if not data.get("Symbol"):
        return None

    short_interest = None
    short_float = parse_price(data.get("ShortPercentFloat"))
    if short_float:
        short_interest = round(short_float * 100, 2)

    return CompanyProfile(
        symbol=data["Symbol"],
        name=data.get("Name"),
        sector=data.get("Sector"),
        market_cap=data.get("MarketCapitalization"),
        pe=parse_float_or_zero(data.get("PERatio")),
        dividend_yield=parse_float_or_zero(data.get("DividendYield")),
        profit_margin=parse_float_or_zero(data.get("ProfitMargin")),
        revenue_growth=parse_float_or_zero(data.get("QuarterlyRevenueGrowthYOY")),
        description=data.get("Description"),
        short_interest=short_interest,
    )


class AlphaVantageClient:

    def __init__(
        self,
        api_key: str,
        base_url: str = ALPHA_VANTAGE_BASE,
        timeout: float = 30,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout

    async def _query(self, function: str, symbol: str, **extra: str) -> Dict[str, Any]:
        params = {"function": function, "symbol": symbol, "apikey": self.api_key, **extra}

        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
            try:
                async with session.get(self.base_url, params=params) as response:
                    response.raise_for_status()
                    data = await response.json(content_type=None)
            except aiohttp.ClientResponseError as e:
                raise ProviderError(symbol, f"{function} returned HTTP {e.status}") from e
            except aiohttp.ClientError as e:
                raise ProviderError(symbol, f"{function} request failed: {e}") from e
            except asyncio.TimeoutError as e:
                raise ProviderError(symbol, f"{function} timed out after {self.timeout}s") from e
            except ValueError as e:
                raise ProviderError(symbol, f"{function} returned malformed JSON") from e

        data = check_payload(symbol, data)
        if "Error Message" in data:
            # Alpha Vantage answers unknown symbols with an error message, not a 404
            logger.debug("%s %s: %s", function, symbol, data["Error Message"])
        return data

    async def _fetch(
        self,
        function: str,
        symbol: str,
        parse: Callable[[str, Dict[str, Any]], Optional[T]],
        **extra: str,
    ) -> Optional[T]:
        data = await self._query(function, symbol, **extra)
        try:
            return parse(symbol, data)
        except ValidationError as e:
            logger.debug("%s %s: %s", function, symbol, e)
            raise ProviderError(symbol, f"{function} returned malformed payload") from e

    async def fetch_quote(self, symbol: str) -> Optional[Quote]:
        return await self._fetch("GLOBAL_QUOTE", symbol, parse_global_quote)

    async def fetch_daily(self, symbol: str, output_size: str = "compact") -> Optional[PriceSeries]:
        if output_size not in ("compact", "full"):
            raise ValueError(f"output_size must be 'compact' or 'full', got {output_size!r}")
        return await self._fetch("TIME_SERIES_DAILY", symbol, parse_daily_closes, outputsize=output_size)

    async def fetch_overview(self, symbol: str) -> Optional[CompanyProfile]:
        return await self._fetch("OVERVIEW", symbol, parse_overview)
