"""
Static symbol lists keyed by screen type and sub-category.
Unknown sub-categories fall back to the type's default list.
"""

import logging
from typing import Dict, List, Optional

from screener.core.errors import InvalidRequestError
from screener.core.models import FilterSpec

logger = logging.getLogger(__name__)

STOCK_LISTS: Dict[str, Dict[str, List[str]]] = {
    "swing": {
        "tech": ["NVDA", "AAPL", "MSFT", "META", "GOOGL", "AMD", "TSLA"],
        "finance": ["JPM", "BAC", "GS", "MS", "WFC", "C", "BLK"],
        "healthcare": ["JNJ", "UNH", "PFE", "ABBV", "TMO", "MRK", "LLY"],
        "energy": ["XOM", "CVX", "COP", "SLB", "EOG", "MPC"],
        "consumer": ["AMZN", "TSLA", "NKE", "SBUX", "MCD", "HD", "WMT"],
        "industrials": ["CAT", "BA", "GE", "HON", "UPS", "MMM"],
        "realestate": ["AMT", "PLD", "CCI", "EQIX", "PSA"],
        "utilities": ["NEE", "DUK", "SO", "D", "AEP"],
        "materials": ["LIN", "APD", "ECL", "SHW", "NEM"],
    },
    "growth": {
        "ai": ["PLTR", "AI", "SOUN", "BBAI", "PATH"],
        "cyber": ["CRWD", "PANW", "ZS", "FTNT", "S"],
        "fintech": ["SQ", "PYPL", "UPST", "AFRM", "SOFI", "COIN"],
        "saas": ["SNOW", "DDOG", "NET", "MDB", "DOCN", "HUBS"],
        "cleantech": ["ENPH", "SEDG", "RUN", "FSLR", "TSLA"],
        "biotech": ["MRNA", "BNTX", "NVAX", "CRSP", "EDIT"],
        "ecommerce": ["SHOP", "ETSY", "W", "CHWY", "DASH"],
        "gaming": ["RBLX", "U", "TTWO", "EA", "DKNG"],
        "semiconductor": ["NVDA", "AMD", "AVGO", "QCOM", "MRVL"],
    },
}

DEFAULT_SUBCATEGORY = {"swing": "tech", "growth": "ai"}


def screen_types() -> List[str]:
    return list(STOCK_LISTS)


def subcategories(screen_type: str) -> List[str]:
    return list(STOCK_LISTS.get(screen_type, {}))


def _selector(screen_type: str, filters: FilterSpec) -> Optional[str]:
    if screen_type == "swing":
        return filters.sector
    return filters.growth_sector


def resolve_symbols(screen_type: str, filters: Optional[FilterSpec] = None) -> List[str]:
    """Symbols for a screen type and the sub-category selected in filters, de-duplicated."""
    if screen_type not in STOCK_LISTS:
        raise InvalidRequestError(
            f"Unknown screen type {screen_type!r}; expected one of {', '.join(screen_types())}"
        )
    lists = STOCK_LISTS[screen_type]
    default = DEFAULT_SUBCATEGORY[screen_type]

    selected = _selector(screen_type, filters or FilterSpec()) or default
    if selected not in lists:
        logger.info("Unknown %s sub-category %r, using %r", screen_type, selected, default)
        selected = default

    seen = set()
    symbols = []
    for symbol in lists[selected]:
        if symbol not in seen:
            seen.add(symbol)
            symbols.append(symbol)
    return symbols
