"""
Parsing helpers for provider payloads and display formatting.
Alpha Vantage returns every number as a string, sometimes with '%' or 'None'.
"""

import re
from typing import Any, Optional

_pct_re = re.compile(r"[-+]?[0-9]*\.?[0-9]+")
_int_prefix_re = re.compile(r"^\s*([-+]?\d+)")


def parse_changes_pct(val) -> Optional[float]:
    """
    Parse fields like '12.34%', '(+12.34%)', '+12.34%', 12.34, None -> float or None
    """
    if val is None:
        return None
    if isinstance(val, (int, float)):
        return float(val)
    s = str(val)
    m = _pct_re.search(s)
    if not m:
        return None
    try:
        return float(m.group(0))
    except ValueError:
        return None


def parse_price(val) -> Optional[float]:
    """
    Parse price if numeric or numeric-like string; else None
    """
    if val is None:
        return None
    if isinstance(val, (int, float)):
        return float(val)
    s = str(val).replace(",", "").strip()
    try:
        return float(s)
    except ValueError:
        return None


def parse_float_or_zero(val) -> float:
    """Numeric field that degrades to 0 when missing or unparseable ('None', '-')."""
    parsed = parse_price(val)
    if parsed is None or parsed != parsed:
        return 0.0
    return parsed


def parse_int_prefix(val: Any) -> Optional[int]:
    """Leading integer digits of a value: '2500000000000' -> 2500000000000, '12abc' -> 12."""
    if val is None:
        return None
    if isinstance(val, bool):
        return None
    if isinstance(val, int):
        return val
    if isinstance(val, float):
        return int(val) if val == val else None
    m = _int_prefix_re.match(str(val))
    if not m:
        return None
    return int(m.group(1))


def format_market_cap_value(market_cap: Any) -> str:
    """Human-scaled market cap: 2.5T, 3.4B, 12M, raw digits below a million, else 'N/A'."""
    if market_cap is None or market_cap == "N/A" or market_cap == "":
        return "N/A"

    cap = parse_int_prefix(market_cap)
    if cap is None:
        return "N/A"

    if cap >= 1_000_000_000_000:
        return f"{cap / 1_000_000_000_000:.1f}T"
    if cap >= 1_000_000_000:
        return f"{cap / 1_000_000_000:.1f}B"
    if cap >= 1_000_000:
        return f"{cap / 1_000_000:.0f}M"
    return str(cap)
