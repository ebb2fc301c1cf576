"""Models for market-size estimation."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN = "Unknown"


class Confidence(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MarketScope(StrEnum):
    NARROW = "narrow"
    BROAD = "broad"


class Geography(StrEnum):
    GLOBAL = "global"
    US = "us"
    EU = "eu"
    APAC = "apac"


class ScopedFigure(BaseModel):
    """A dollar figure tagged with the market scope of the sentence it came from."""

    model_config = ConfigDict(frozen=True)

    value: float = Field(ge=0)
    scope: MarketScope


class ScopeEstimate(BaseModel):
    model_config = ConfigDict(frozen=True)

    low: str
    high: str
    description: str


class TamEstimate(BaseModel):
    model_config = ConfigDict(frozen=True)

    low: str = UNKNOWN
    high: str = UNKNOWN
    narrow_estimate: ScopeEstimate | None = None
    broad_estimate: ScopeEstimate | None = None

    @property
    def is_known(self) -> bool:
        return self.low != UNKNOWN


class MarketSizeSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    url: str
    snippet: str = ""


class MarketSizeEstimate(BaseModel):
    """Output of estimate_market_size."""

    model_config = ConfigDict(frozen=True)

    tam_estimate: TamEstimate = Field(default_factory=TamEstimate)
    growth_rate: str | None = None
    sources: list[MarketSizeSource] = Field(default_factory=list, max_length=5)
    confidence: Confidence = Confidence.LOW
    message: str | None = Field(
        default=None, description="Why no estimate could be produced, when search failed"
    )
    note: str | None = Field(default=None, description="Explains wide ranges or scope mismatches")
