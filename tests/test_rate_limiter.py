"""RateLimiter unit tests"""

import asyncio

import pytest

from screener.core.rate_limiter import RateLimiter


class TestRateLimiter:

    def test_interval_from_budget(self, limiter):
        """5 calls per minute plus a 1s margin"""
        assert limiter.interval == pytest.approx(13.0)

    @pytest.mark.asyncio
    async def test_first_acquire_does_not_wait(self, limiter, clock):
        await limiter.acquire()

        assert clock.sleeps == []
        assert limiter.acquisitions == 1

    @pytest.mark.asyncio
    async def test_back_to_back_acquires_are_spaced(self, limiter, clock):
        await limiter.acquire()
        await limiter.acquire()
        await limiter.acquire()

        assert clock.sleeps == [pytest.approx(13.0), pytest.approx(13.0)]

    @pytest.mark.asyncio
    async def test_waits_only_for_remaining_time(self, limiter, clock):
        await limiter.acquire()
        clock.advance(10)
        await limiter.acquire()

        assert clock.sleeps == [pytest.approx(3.0)]

    @pytest.mark.asyncio
    async def test_no_wait_after_interval_elapsed(self, limiter, clock):
        await limiter.acquire()
        clock.advance(20)

        assert limiter.time_until_ready() == 0.0
        await limiter.acquire()
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_the_budget(self, limiter, clock):
        """Independent requests on one limiter are spaced against each other"""
        await asyncio.gather(limiter.acquire(), limiter.acquire(), limiter.acquire())

        assert limiter.acquisitions == 3
        assert clock.sleeps == [pytest.approx(13.0), pytest.approx(13.0)]

    def test_rejects_invalid_budget(self):
        with pytest.raises(ValueError):
            RateLimiter(calls_per_minute=0)
        with pytest.raises(ValueError):
            RateLimiter(margin_seconds=-1)
