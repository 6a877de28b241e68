"""
Single-symbol lookups: quote, company overview and technicals.

These share the screen's cache and process-wide rate limiter, so a lookup
right after a screen is free and a burst of lookups still respects the budget.
"""

import logging
from typing import Optional

from screener.clients.base import MarketDataClient
from screener.core.cache import TTLCache, cache_key
from screener.core.errors import InvalidRequestError
from screener.core.indicators import compute_indicators
from screener.core.models import CompanyProfile, Quote, TechnicalsSnapshot
from screener.core.rate_limiter import RateLimiter
from screener.core.sequencer import FetchSequencer

logger = logging.getLogger(__name__)


def normalize_symbol(symbol: str) -> str:
    cleaned = (symbol or "").strip().upper()
    if not cleaned:
        raise InvalidRequestError("Symbol must not be empty")
    return cleaned


class LookupService:

    def __init__(
        self,
        client: MarketDataClient,
        limiter: RateLimiter,
        cache: TTLCache,
        timeout: Optional[float] = None,
        fixed_ma_divisor: bool = True,
    ) -> None:
        self._client = client
        self._sequencer = FetchSequencer(limiter, cache, timeout=timeout)
        self._fixed_ma_divisor = fixed_ma_divisor

    async def get_quote(self, symbol: str) -> Optional[Quote]:
        symbol = normalize_symbol(symbol)
        return await self._sequencer.call(
            cache_key("quote", symbol), lambda: self._client.fetch_quote(symbol)
        )

    async def get_overview(self, symbol: str) -> Optional[CompanyProfile]:
        symbol = normalize_symbol(symbol)
        return await self._sequencer.call(
            cache_key("overview", symbol), lambda: self._client.fetch_overview(symbol)
        )

    async def get_technicals(self, symbol: str) -> Optional[TechnicalsSnapshot]:
        """Indicators from the full daily history, priced at the latest close."""
        symbol = normalize_symbol(symbol)
        series = await self._sequencer.call(
            cache_key("daily", symbol, "full"),
            lambda: self._client.fetch_daily(symbol, output_size="full"),
        )
        if series is None:
            return None

        current_price = series.closes[0]
        indicators = compute_indicators(current_price, series.closes, fixed_divisor=self._fixed_ma_divisor)
        return TechnicalsSnapshot(
            symbol=symbol,
            current_price=round(current_price, 2),
            **indicators.model_dump(),
        )
