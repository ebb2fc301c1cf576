"""Models for the composite research report."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from oxira.models.community import Community
from oxira.models.competitor import Competitor
from oxira.models.market import MarketSizeEstimate
from oxira.models.pricing import PricingExtraction

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ReportSection(BaseModel, Generic[T]):
    """One independently-failable part of a report.

    ``data`` is None exactly when the underlying operation failed.
    """

    model_config = ConfigDict(frozen=True)

    data: T | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.data is None


class ReportSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    key_takeaways: list[str] = Field(default_factory=list)
    failed_sections: list[str] = Field(default_factory=list)


class FullReport(BaseModel):
    """Output of full_research_report."""

    model_config = ConfigDict(frozen=True)

    business_idea: str
    generated_at: datetime = Field(default_factory=_utcnow)
    market_size: ReportSection[MarketSizeEstimate]
    competitors: ReportSection[list[Competitor]]
    communities: ReportSection[list[Community]]
    pricing: ReportSection[list[PricingExtraction]]
    summary: ReportSummary
