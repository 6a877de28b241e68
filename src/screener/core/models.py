"""
Data models for the screener.
No implementation logic, only Pydantic models and typed structures.
All models serialize with camelCase keys and accept either form on input.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _FrozenModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Quote(_FrozenModel):
    """Current trading snapshot for one symbol, immutable once fetched."""
    symbol: str = Field(..., description="Ticker symbol")
    price: float = Field(..., description="Last traded price")
    change: float = Field(0.0, description="Absolute change vs previous close")
    change_percent: float = Field(0.0, description="Percent change vs previous close")
    volume: int = Field(0, description="Session volume")
    high: Optional[float] = Field(None, description="Session high")
    low: Optional[float] = Field(None, description="Session low")


class PriceSeries(_FrozenModel):
    """Daily closing prices, most recent first."""
    symbol: str
    closes: List[float] = Field(..., min_length=1, description="Closing prices, most recent first")


class CompanyProfile(_FrozenModel):
    symbol: str = Field(..., description="Ticker symbol")
    name: Optional[str] = Field(None, description="Company name")
    sector: Optional[str] = Field(None, description="Sector")
    market_cap: Optional[str] = Field(None, description="Market capitalization as the raw numeric string")
    pe: float = Field(0.0, description="P/E ratio")
    dividend_yield: float = Field(0.0, description="Dividend yield")
    profit_margin: float = Field(0.0, description="Profit margin")
    revenue_growth: float = Field(0.0, description="Quarterly revenue growth YoY")
    description: Optional[str] = Field(None, description="Business description")
    short_interest: Optional[float] = Field(None, description="Short percent of float, when the provider reports it")


class IndicatorSet(_FrozenModel):
    """Derived technicals; None means the history was too short."""
    rsi: Optional[float] = None
    distance_from_ma50: Optional[float] = Field(None, alias="distanceFromMA50")
    distance_from_ma200: Optional[float] = Field(None, alias="distanceFromMA200")
    ma50: Optional[float] = None
    ma200: Optional[float] = None


class TechnicalsSnapshot(IndicatorSet):
    symbol: str
    current_price: float


class MAPosition(str, Enum):
    ABOVE_BOTH = "above_both"
    ABOVE_MA50 = "above_ma50"
    BELOW_MA50 = "below_ma50"
    BETWEEN = "between"


class FilterSpec(_Model):
    """User-supplied screening criteria. Unset options impose no constraint."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    sector: Optional[str] = Field(None, description="Swing sub-category selector")
    growth_sector: Optional[str] = Field(None, description="Growth sub-category selector")
    max_price: Optional[float] = None
    rsi_min: Optional[float] = None
    rsi_max: Optional[float] = None
    ma50_position: Optional[MAPosition] = Field(None, alias="ma50Position")
    short_interest_min: Optional[float] = None
    short_interest_max: Optional[float] = None

    @field_validator(
        "max_price", "rsi_min", "rsi_max", "short_interest_min", "short_interest_max",
        mode="before",
    )
    @classmethod
    def _blank_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("ma50_position", mode="before")
    @classmethod
    def _unknown_position_is_unset(cls, value):
        if value is None or value == "":
            return None
        if isinstance(value, MAPosition):
            return value
        try:
            return MAPosition(value)
        except ValueError:
            logger.info("Ignoring unrecognized ma50Position %r", value)
            return None


class CandidateMetrics(BaseModel):
    """What the filter evaluator looks at for one symbol."""
    price: float
    rsi: Optional[float] = None
    distance_from_ma50: Optional[float] = None
    distance_from_ma200: Optional[float] = None
    short_interest: Optional[float] = None


class CandidateRecord(_FrozenModel):
    """Fully assembled, accepted screening result. Never mutated after construction."""
    ticker: str
    name: str
    price: float
    change: float
    change_percent: float
    volume: int
    sector: str
    market_cap: str
    entry: float
    target: float
    stop_loss: float
    risk_reward: str
    rsi: Optional[float] = None
    distance_from_ma50: Optional[float] = Field(None, alias="distanceFromMA50")
    distance_from_ma200: Optional[float] = Field(None, alias="distanceFromMA200")
    ma50: Optional[float] = None
    ma200: Optional[float] = None
    short_interest: Optional[float] = None


class SkipReason(str, Enum):
    NO_QUOTE = "no_quote"
    FETCH_FAILED = "fetch_failed"
    FILTERED_OUT = "filtered_out"


class SymbolOutcome(BaseModel):
    """Per-symbol screening result: either a record or the reason it was skipped."""
    symbol: str
    record: Optional[CandidateRecord] = None
    skip_reason: Optional[SkipReason] = None
    detail: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.record is not None


class ScreenResult(_Model):
    success: bool = True
    stocks: List[CandidateRecord] = Field(default_factory=list)
    note: str = ""
    skipped: Dict[str, SkipReason] = Field(default_factory=dict)
