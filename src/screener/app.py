"""
Wiring for the screener: one shared cache and rate limiter per process,
handed to both the lookup service and the screening orchestrator.

Usage:
    python -m screener.app            # serve the HTTP API with uvicorn
"""

import logging
from dataclasses import dataclass
from typing import Optional

from screener.clients.alpha_vantage_client import AlphaVantageClient
from screener.clients.base import MarketDataClient
from screener.core.cache import TTLCache
from screener.core.config import ScreenerSettings, load_settings
from screener.core.logging_config import setup_logging
from screener.core.lookups import LookupService
from screener.core.rate_limiter import RateLimiter
from screener.core.screening import ScreeningOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class ScreenerServices:
    settings: ScreenerSettings
    lookups: LookupService
    screening: ScreeningOrchestrator
    cache: TTLCache
    limiter: RateLimiter


def build_services(
    settings: Optional[ScreenerSettings] = None,
    client: Optional[MarketDataClient] = None,
    limiter: Optional[RateLimiter] = None,
) -> ScreenerServices:
    """Build the service graph. Without an injected client the Alpha Vantage key is required."""
    settings = settings or load_settings()

    if client is None:
        client = AlphaVantageClient(
            api_key=settings.require_api_key(),
            base_url=settings.alpha_vantage_base_url,
            timeout=settings.request_timeout_seconds,
        )
    if limiter is None:
        limiter = RateLimiter(
            calls_per_minute=settings.calls_per_minute,
            margin_seconds=settings.rate_limit_margin_seconds,
        )
    cache = TTLCache(ttl=settings.cache_ttl_seconds, max_entries=settings.cache_max_entries)

    lookups = LookupService(
        client,
        limiter,
        cache,
        timeout=settings.request_timeout_seconds,
        fixed_ma_divisor=settings.fixed_ma_divisor,
    )
    screening = ScreeningOrchestrator(
        client,
        limiter,
        cache,
        max_symbols=settings.max_symbols_per_screen,
        timeout=settings.request_timeout_seconds,
        fixed_ma_divisor=settings.fixed_ma_divisor,
    )
    logger.info(
        "Screener ready: %.1fs between provider calls, cache TTL %ss, max %d symbols per screen",
        limiter.interval, settings.cache_ttl_seconds, settings.max_symbols_per_screen,
    )
    return ScreenerServices(settings=settings, lookups=lookups, screening=screening, cache=cache, limiter=limiter)


def main(settings: Optional[ScreenerSettings] = None) -> None:
    import uvicorn

    from screener.api.server import create_app

    settings = settings or load_settings()
    setup_logging(settings.log_level)
    app = create_app(build_services(settings))
    logger.info("Stock Screener API running on port %d", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
