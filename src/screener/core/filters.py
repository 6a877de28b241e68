"""
Filter evaluation for screening candidates.

Each configured bound is checked on its own and the results are AND-ed.
A sub-check whose metric is unavailable (None) is skipped, so a candidate with
no RSI still passes an rsiMin filter.
"""

from screener.core.models import CandidateMetrics, FilterSpec, MAPosition


def _passes_ma_position(position: MAPosition, metrics: CandidateMetrics) -> bool:
    ma50 = metrics.distance_from_ma50
    ma200 = metrics.distance_from_ma200

    if position is MAPosition.ABOVE_BOTH:
        if ma50 is None or ma200 is None:
            return True
        return not (ma50 < 0 or ma200 < 0)
    if position is MAPosition.ABOVE_MA50:
        return ma50 is None or ma50 >= 0
    if position is MAPosition.BELOW_MA50:
        return ma50 is None or ma50 <= 0
    if position is MAPosition.BETWEEN:
        if ma50 is None or ma200 is None:
            return True
        # below the 50-day or above the 200-day disqualifies
        return not (ma50 < 0 or ma200 > 0)
    return True


def passes(spec: FilterSpec, metrics: CandidateMetrics) -> bool:
    """True if the candidate satisfies every configured filter in spec."""
    if spec.max_price is not None and metrics.price > spec.max_price:
        return False

    if metrics.rsi is not None:
        if spec.rsi_min is not None and metrics.rsi < spec.rsi_min:
            return False
        if spec.rsi_max is not None and metrics.rsi > spec.rsi_max:
            return False

    if spec.ma50_position is not None and not _passes_ma_position(spec.ma50_position, metrics):
        return False

    if metrics.short_interest is not None:
        if spec.short_interest_max is not None and metrics.short_interest > spec.short_interest_max:
            return False
        if spec.short_interest_min is not None and metrics.short_interest < spec.short_interest_min:
            return False

    return True
