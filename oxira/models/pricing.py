"""Models for pricing-page extraction."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class BillingPeriod(StrEnum):
    MONTHLY = "monthly"
    ANNUAL = "annual"
    FREE = "free"
    CUSTOM = "custom"


class PricingModel(StrEnum):
    FLAT_RATE = "flat-rate"
    PER_USER = "per-user"
    USAGE_BASED = "usage-based"
    SUBSCRIPTION = "subscription"


class PricingTier(BaseModel):
    """One priced plan on a pricing page."""

    model_config = ConfigDict(frozen=True)

    name: str
    price: str | None = None
    billing_period: BillingPeriod | None = None
    features: list[str] | None = Field(default=None, max_length=5)


class StructuredPricing(BaseModel):
    model_config = ConfigDict(frozen=True)

    tiers: list[PricingTier] = Field(default_factory=list)
    has_free_tier: bool = False
    has_enterprise: bool = False
    pricing_model: PricingModel | None = None
    currency: str | None = None


class PricingExtraction(BaseModel):
    """Output of extract_pricing. Fetch failures are encoded in the text fields."""

    model_config = ConfigDict(frozen=True)

    url: str
    markdown_content: str
    extraction_hints: str
    structured_pricing: StructuredPricing | None = None
