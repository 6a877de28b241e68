"""
In-memory time-windowed cache shielding the rate-limited provider.

Entries are (value, fetched_at) pairs keyed by string. An entry is live while
now - fetched_at < ttl; a stale entry is never read and is overwritten by the
next fetch. Concurrent get_or_fetch calls for one key are coalesced behind a
per-key lock so the provider sees at most one in-flight request per key.
"""

import asyncio
import logging
import time
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_MAX_ENTRIES = 1024

_MISSING = object()


class TTLCache:

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[Any, float]]" = OrderedDict()
        self._key_locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _is_live(self, fetched_at: float, now: float) -> bool:
        return now - fetched_at < self.ttl

    def peek(self, key: str, default: Any = None) -> Any:
        """Return the live value for key without fetching, or default."""
        value = self._lookup(key)
        return default if value is _MISSING else value

    def _lookup(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING
        value, fetched_at = entry
        if not self._is_live(fetched_at, self._clock()):
            return _MISSING
        return value

    def set(self, key: str, value: Any) -> None:
        # re-inserting moves the key to the young end
        self._entries.pop(key, None)
        self._entries[key] = (value, self._clock())
        if len(self._entries) > self.max_entries:
            self._evict()

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def sweep(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        now = self._clock()
        expired = [k for k, (_, ts) in self._entries.items() if not self._is_live(ts, now)]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def _evict(self) -> None:
        removed = self.sweep()
        while len(self._entries) > self.max_entries:
            oldest, _ = self._entries.popitem(last=False)
            removed += 1
            logger.debug("Cache full, evicted %s", oldest)
        if removed:
            logger.debug("Cache eviction removed %d entries (%d left)", removed, len(self._entries))

    async def get_or_fetch(self, key: str, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        """Return the live cached value for key, or await fetcher() and store its result.

        A fetcher that raises stores nothing and the exception propagates.
        """
        value = self._lookup(key)
        if value is not _MISSING:
            logger.debug("Cache hit: %s", key)
            return value

        lock = self._key_locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                # another caller may have filled the entry while we waited
                value = self._lookup(key)
                if value is not _MISSING:
                    logger.debug("Cache hit after wait: %s", key)
                    return value

                logger.debug("Cache miss: %s", key)
                value = await fetcher()
                self.set(key, value)
                return value
        finally:
            # the last caller out drops the lock, whether or not the fetch stored anything
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._key_locks[key]


def cache_key(kind: str, symbol: str, variant: Optional[str] = None) -> str:
    """Canonical cache key, e.g. quote_AAPL or daily_AAPL_compact."""
    key = f"{kind}_{symbol.upper()}"
    return f"{key}_{variant}" if variant else key
