"""
Rate-limited fetch sequencer.

Runs provider calls strictly one at a time, in order. Each call is gated by the
cache first (a live entry costs nothing) and by the shared rate limiter second.
A failing call yields an error outcome for its slot and the sequence continues.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from screener.core.cache import TTLCache
from screener.core.errors import ProviderError
from screener.core.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchCall:
    key: str
    fetch: Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class CallOutcome:
    key: str
    value: Any = None
    error: Optional[ProviderError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FetchSequencer:

    def __init__(
        self,
        limiter: RateLimiter,
        cache: TTLCache,
        timeout: Optional[float] = None,
    ) -> None:
        self._limiter = limiter
        self._cache = cache
        self._timeout = timeout
        self._lock = asyncio.Lock()
        self.calls_made = 0

    async def _gated(self, call: FetchCall) -> Any:
        await self._limiter.acquire()
        self.calls_made += 1
        logger.debug("Provider call %s", call.key)
        try:
            if self._timeout:
                return await asyncio.wait_for(call.fetch(), timeout=self._timeout)
            return await call.fetch()
        except asyncio.TimeoutError as e:
            raise ProviderError(call.key, f"timed out after {self._timeout}s") from e

    async def call(self, key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        """Run a single cache-gated, rate-limited call. Raises ProviderError on failure."""
        call = FetchCall(key, fetch)
        return await self._cache.get_or_fetch(key, lambda: self._gated(call))

    async def sequence(self, calls: Sequence[FetchCall]) -> List[CallOutcome]:
        """Run calls in order; every slot gets a value or the error that call raised."""
        outcomes: List[CallOutcome] = []
        async with self._lock:
            for call in calls:
                try:
                    value = await self.call(call.key, call.fetch)
                except ProviderError as e:
                    logger.warning("Call %s failed: %s", call.key, e.reason)
                    outcomes.append(CallOutcome(call.key, error=e))
                    continue
                outcomes.append(CallOutcome(call.key, value=value))
        return outcomes
