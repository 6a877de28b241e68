"""
Screening orchestrator.

Turns a screen type plus filters into candidate records:

    catalog -> symbols (capped) -> per symbol: quote, then history + profile
    -> indicators -> filters -> CandidateRecord

Every provider call goes through a request-scoped FetchSequencer that shares
the process-wide cache and rate limiter. Each symbol produces a SymbolOutcome;
a failure on one symbol is recorded as a skip and never aborts the batch.
"""

import logging
import random
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from screener.clients.base import MarketDataClient
from screener.core.cache import TTLCache, cache_key
from screener.core.catalog import resolve_symbols
from screener.core.errors import InvalidRequestError, ProviderError
from screener.core.filters import passes
from screener.core.formatting import format_market_cap_value
from screener.core.indicators import compute_indicators
from screener.core.models import (
    CandidateMetrics,
    CandidateRecord,
    CompanyProfile,
    FilterSpec,
    IndicatorSet,
    Quote,
    ScreenResult,
    SkipReason,
    SymbolOutcome,
)
from screener.core.rate_limiter import RateLimiter
from screener.core.sequencer import FetchCall, FetchSequencer

logger = logging.getLogger(__name__)

TARGET_MULTIPLIER = 1.25
STOP_LOSS_MULTIPLIER = 0.90
RISK_REWARD_LABEL = "1:2.5"
SHORT_INTEREST_PLACEHOLDER_RANGE = 15.0


class ScreeningOrchestrator:

    def __init__(
        self,
        client: MarketDataClient,
        limiter: RateLimiter,
        cache: TTLCache,
        max_symbols: int = 3,
        timeout: Optional[float] = None,
        fixed_ma_divisor: bool = True,
        rng: Optional[random.Random] = None,
    ) -> None:
        if max_symbols < 1:
            raise ValueError("max_symbols must be at least 1")
        self._client = client
        self._limiter = limiter
        self._cache = cache
        self.max_symbols = max_symbols
        self._timeout = timeout
        self._fixed_ma_divisor = fixed_ma_divisor
        self._rng = rng or random.Random()

    @property
    def note(self) -> str:
        return (
            "Live data with technical indicators. "
            f"Free tier: max {self.max_symbols} symbols per query."
        )

    async def screen(
        self,
        screen_type: str,
        filters: Union[FilterSpec, Dict[str, Any], None] = None,
    ) -> ScreenResult:
        """Screen the catalog list for screen_type against filters."""
        spec = self._coerce_filters(filters)
        symbols = resolve_symbols(screen_type, spec)[: self.max_symbols]
        logger.info("Screening %s: %s", screen_type, ", ".join(symbols))

        # one sequencer per request; pacing across requests comes from the shared limiter
        sequencer = FetchSequencer(self._limiter, self._cache, timeout=self._timeout)

        outcomes: List[SymbolOutcome] = []
        for symbol in symbols:
            outcomes.append(await self._screen_symbol(sequencer, symbol, spec))

        result = ScreenResult(
            stocks=[o.record for o in outcomes if o.accepted],
            note=self.note,
            skipped={o.symbol: o.skip_reason for o in outcomes if not o.accepted},
        )
        logger.info(
            "Screen %s done: %d accepted, %d skipped, %d provider calls",
            screen_type, len(result.stocks), len(result.skipped), sequencer.calls_made,
        )
        return result

    @staticmethod
    def _coerce_filters(filters: Union[FilterSpec, Dict[str, Any], None]) -> FilterSpec:
        if filters is None:
            return FilterSpec()
        if isinstance(filters, FilterSpec):
            return filters
        try:
            return FilterSpec.model_validate(filters)
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid filters: {e}") from e

    async def _screen_symbol(self, sequencer: FetchSequencer, symbol: str, spec: FilterSpec) -> SymbolOutcome:
        try:
            return await self._evaluate_symbol(sequencer, symbol, spec)
        except ProviderError as e:
            logger.warning("Skipping %s: %s", symbol, e.reason)
            return SymbolOutcome(symbol=symbol, skip_reason=SkipReason.FETCH_FAILED, detail=e.reason)
        except Exception as e:
            logger.exception("Unexpected error screening %s", symbol)
            return SymbolOutcome(symbol=symbol, skip_reason=SkipReason.FETCH_FAILED, detail=str(e))

    async def _evaluate_symbol(self, sequencer: FetchSequencer, symbol: str, spec: FilterSpec) -> SymbolOutcome:
        quote = await sequencer.call(cache_key("quote", symbol), lambda: self._client.fetch_quote(symbol))
        if quote is None:
            logger.info("Skipping %s: no usable quote", symbol)
            return SymbolOutcome(symbol=symbol, skip_reason=SkipReason.NO_QUOTE)

        history_outcome, profile_outcome = await sequencer.sequence([
            FetchCall(
                cache_key("daily", symbol, "compact"),
                lambda: self._client.fetch_daily(symbol, output_size="compact"),
            ),
            FetchCall(cache_key("overview", symbol), lambda: self._client.fetch_overview(symbol)),
        ])
        for outcome in (history_outcome, profile_outcome):
            if not outcome.ok:
                return SymbolOutcome(
                    symbol=symbol, skip_reason=SkipReason.FETCH_FAILED, detail=outcome.error.reason
                )

        history = history_outcome.value
        profile: Optional[CompanyProfile] = profile_outcome.value

        indicators = compute_indicators(
            quote.price,
            history.closes if history is not None else None,
            fixed_divisor=self._fixed_ma_divisor,
        )
        short_interest = self._short_interest(quote, profile)

        metrics = CandidateMetrics(
            price=quote.price,
            rsi=indicators.rsi,
            distance_from_ma50=indicators.distance_from_ma50,
            distance_from_ma200=indicators.distance_from_ma200,
            short_interest=short_interest,
        )
        if not passes(spec, metrics):
            logger.info("Skipping %s: filtered out", symbol)
            return SymbolOutcome(symbol=symbol, skip_reason=SkipReason.FILTERED_OUT)

        return SymbolOutcome(
            symbol=symbol,
            record=build_candidate_record(symbol, quote, profile, indicators, short_interest),
        )

    def _short_interest(self, quote: Quote, profile: Optional[CompanyProfile]) -> Optional[float]:
        """Real short interest when the profile has it, else an approximate stand-in.

        The stand-in is not sourced data: a random base plus today's absolute
        percent move. Without a profile there is no estimate at all.
        """
        if profile is None:
            return None
        if profile.short_interest is not None:
            return profile.short_interest
        volatility = abs(quote.change_percent)
        return round(self._rng.uniform(0, SHORT_INTEREST_PLACEHOLDER_RANGE) + volatility, 2)


def build_candidate_record(
    symbol: str,
    quote: Quote,
    profile: Optional[CompanyProfile],
    indicators: IndicatorSet,
    short_interest: Optional[float],
) -> CandidateRecord:
    price = quote.price
    return CandidateRecord(
        ticker=symbol,
        name=(profile.name if profile else None) or symbol,
        price=price,
        change=quote.change,
        change_percent=quote.change_percent,
        volume=quote.volume,
        sector=(profile.sector if profile else None) or "N/A",
        market_cap=format_market_cap_value(profile.market_cap if profile else None),
        entry=price,
        target=price * TARGET_MULTIPLIER,
        stop_loss=price * STOP_LOSS_MULTIPLIER,
        risk_reward=RISK_REWARD_LABEL,
        short_interest=short_interest,
        **indicators.model_dump(),
    )
