"""FetchSequencer unit tests"""

import asyncio

import pytest

from conftest import CannedAlphaVantageClient
from screener.core.errors import ProviderError
from screener.core.sequencer import FetchCall, FetchSequencer


def returning(value, log=None):
    async def fetch():
        if log is not None:
            log.append(value)
        return value
    return fetch


def failing(symbol="AAPL", reason="HTTP 500"):
    async def fetch():
        raise ProviderError(symbol, reason)
    return fetch


class TestSequence:

    @pytest.mark.asyncio
    async def test_runs_calls_in_order(self, limiter, cache):
        order = []
        sequencer = FetchSequencer(limiter, cache)

        outcomes = await sequencer.sequence([
            FetchCall("a", returning(1, order)),
            FetchCall("b", returning(2, order)),
            FetchCall("c", returning(3, order)),
        ])

        assert order == [1, 2, 3]
        assert [o.value for o in outcomes] == [1, 2, 3]
        assert all(o.ok for o in outcomes)

    @pytest.mark.asyncio
    async def test_waits_configured_delay_between_calls(self, limiter, cache, clock):
        sequencer = FetchSequencer(limiter, cache)

        await sequencer.sequence([FetchCall(k, returning(k)) for k in ("a", "b", "c")])

        assert clock.sleeps == [pytest.approx(13.0), pytest.approx(13.0)]
        assert sequencer.calls_made == 3

    @pytest.mark.asyncio
    async def test_failed_call_fills_its_slot_and_sequence_continues(self, limiter, cache):
        sequencer = FetchSequencer(limiter, cache)

        outcomes = await sequencer.sequence([
            FetchCall("a", returning(1)),
            FetchCall("b", failing(reason="HTTP 503")),
            FetchCall("c", returning(3)),
        ])

        assert [o.ok for o in outcomes] == [True, False, True]
        assert outcomes[1].error.reason == "HTTP 503"
        assert outcomes[2].value == 3

    @pytest.mark.asyncio
    async def test_cached_calls_skip_the_limiter(self, limiter, cache, clock):
        cache.set("quote_AAPL", "cached")
        sequencer = FetchSequencer(limiter, cache)

        outcomes = await sequencer.sequence([FetchCall("quote_AAPL", failing())])

        assert outcomes[0].value == "cached"
        assert limiter.acquisitions == 0
        assert sequencer.calls_made == 0

    @pytest.mark.asyncio
    async def test_empty_sequence(self, limiter, cache):
        assert await FetchSequencer(limiter, cache).sequence([]) == []


class TestCall:

    @pytest.mark.asyncio
    async def test_call_raises_provider_error(self, limiter, cache):
        sequencer = FetchSequencer(limiter, cache)

        with pytest.raises(ProviderError):
            await sequencer.call("quote_AAPL", failing())

    @pytest.mark.asyncio
    async def test_call_result_is_cached(self, limiter, cache):
        sequencer = FetchSequencer(limiter, cache)

        await sequencer.call("quote_AAPL", returning("first"))
        second = await sequencer.call("quote_AAPL", returning("second"))

        assert second == "first"
        assert limiter.acquisitions == 1

    @pytest.mark.asyncio
    async def test_hung_call_times_out_as_provider_error(self, limiter, cache):
        async def hung():
            await asyncio.sleep(10)

        sequencer = FetchSequencer(limiter, cache, timeout=0.01)

        outcomes = await sequencer.sequence([FetchCall("quote_AAPL", hung), FetchCall("b", returning(2))])

        assert not outcomes[0].ok
        assert "timed out" in outcomes[0].error.reason
        assert outcomes[1].value == 2

    @pytest.mark.asyncio
    async def test_malformed_payload_fills_its_slot(self, limiter, cache):
        """A wrongly typed provider field is a provider error, not a crash"""
        client = CannedAlphaVantageClient({"OVERVIEW": {"Symbol": "AAPL", "Name": ["Apple", "Inc"]}})
        sequencer = FetchSequencer(limiter, cache)

        outcomes = await sequencer.sequence([
            FetchCall("overview_AAPL", lambda: client.fetch_overview("AAPL")),
            FetchCall("b", returning(2)),
        ])

        assert [o.ok for o in outcomes] == [False, True]
        assert outcomes[0].error.reason == "OVERVIEW returned malformed payload"
        assert outcomes[1].value == 2
