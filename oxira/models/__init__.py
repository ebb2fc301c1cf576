"""Re-exports all Pydantic models."""

from oxira.models.community import Community, Platform
from oxira.models.competitor import Competitor
from oxira.models.market import (
    Confidence,
    Geography,
    MarketScope,
    MarketSizeEstimate,
    MarketSizeSource,
    ScopedFigure,
    ScopeEstimate,
    TamEstimate,
)
from oxira.models.pricing import (
    BillingPeriod,
    PricingExtraction,
    PricingModel,
    PricingTier,
    StructuredPricing,
)
from oxira.models.report import FullReport, ReportSection, ReportSummary
from oxira.models.requests import (
    CommunitySearchRequest,
    CompetitorSearchRequest,
    MarketSizeRequest,
    PricingRequest,
    ReportRequest,
)
from oxira.models.search import HitSource, ScoredCandidate, SearchHit

__all__ = [
    "BillingPeriod",
    "Community",
    "CommunitySearchRequest",
    "Competitor",
    "CompetitorSearchRequest",
    "Confidence",
    "FullReport",
    "Geography",
    "HitSource",
    "MarketScope",
    "MarketSizeEstimate",
    "MarketSizeRequest",
    "MarketSizeSource",
    "Platform",
    "PricingExtraction",
    "PricingModel",
    "PricingRequest",
    "PricingTier",
    "ReportRequest",
    "ReportSection",
    "ReportSummary",
    "ScopeEstimate",
    "ScopedFigure",
    "ScoredCandidate",
    "SearchHit",
    "StructuredPricing",
    "TamEstimate",
]
