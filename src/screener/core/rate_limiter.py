"""
Process-wide rate limiter for the market-data provider.

The provider allows a fixed number of calls per minute. Every outbound call
acquires this limiter first; acquisitions are spaced at least `interval`
seconds apart across all concurrent requests sharing the instance.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class RateLimiter:
    """Leaky bucket with capacity one: at most one acquisition per interval."""

    def __init__(
        self,
        calls_per_minute: float = 5,
        margin_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if calls_per_minute <= 0:
            raise ValueError("calls_per_minute must be positive")
        if margin_seconds < 0:
            raise ValueError("margin_seconds must not be negative")
        self.interval = 60.0 / calls_per_minute + margin_seconds
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_acquired: Optional[float] = None
        self.acquisitions = 0

    def time_until_ready(self) -> float:
        if self._last_acquired is None:
            return 0.0
        return max(0.0, self._last_acquired + self.interval - self._clock())

    async def acquire(self) -> None:
        async with self._lock:
            wait = self.time_until_ready()
            if wait > 0:
                logger.debug("Rate limit: waiting %.2fs before next provider call", wait)
                await self._sleep(wait)
            self._last_acquired = self._clock()
            self.acquisitions += 1
