"""
Indicator calculations over daily closes, most recent first.

These are simplified approximations, not production quant signals:
- RSI sums the first `period` transitions of the list as-is (no Wilder smoothing).
- MA50 divides by a fixed 50 even when fewer samples exist, which skews it low
  on short histories. This matches the behavior clients already rely on and is
  kept as the default; pass fixed_divisor=False to average the real samples.
"""

from typing import Dict, Optional, Sequence

from screener.core.models import IndicatorSet

RSI_PERIOD = 14
MA_SHORT_WINDOW = 50
MA_LONG_WINDOW = 200


def calculate_rsi(prices: Sequence[float], period: int = RSI_PERIOD) -> Optional[float]:
    """RSI over the most recent `period` transitions; None when fewer than period+1 samples."""
    if period < 1 or len(prices) < period + 1:
        return None

    gains = 0.0
    losses = 0.0
    for i in range(1, period + 1):
        change = prices[i] - prices[i - 1]
        if change > 0:
            gains += change
        else:
            losses += abs(change)

    avg_gain = gains / period
    avg_loss = losses / period

    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def _distance_pct(current_price: float, average: Optional[float]) -> Optional[float]:
    if not average:
        return None
    return round((current_price - average) / average * 100, 2)


def calculate_ma_distance(
    current_price: float,
    prices: Sequence[float],
    fixed_divisor: bool = True,
) -> Dict[str, Optional[float]]:
    """Percent distance of current_price from the 50- and 200-day averages, plus the averages."""
    if not prices:
        return {"distance_from_ma50": None, "distance_from_ma200": None, "ma50": None, "ma200": None}

    short = prices[:MA_SHORT_WINDOW]
    short_divisor = MA_SHORT_WINDOW if fixed_divisor else len(short)
    ma50 = sum(short) / short_divisor

    long_window = prices[:MA_LONG_WINDOW]
    ma200 = sum(long_window) / min(MA_LONG_WINDOW, len(prices))

    return {
        "distance_from_ma50": _distance_pct(current_price, ma50),
        "distance_from_ma200": _distance_pct(current_price, ma200),
        "ma50": round(ma50, 2),
        "ma200": round(ma200, 2),
    }


def compute_indicators(
    current_price: float,
    prices: Optional[Sequence[float]],
    fixed_divisor: bool = True,
) -> IndicatorSet:
    """RSI and MA distances for one symbol; every field None when there is no history."""
    if not prices:
        return IndicatorSet()

    rsi = calculate_rsi(prices)
    return IndicatorSet(
        rsi=round(rsi, 2) if rsi is not None else None,
        **calculate_ma_distance(current_price, prices, fixed_divisor=fixed_divisor),
    )
