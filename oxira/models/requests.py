"""Tool request schemas, validated at the CLI boundary."""

from __future__ import annotations

from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

from oxira.models.market import Geography


class MarketSizeRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    industry: str = Field(
        min_length=1,
        description=(
            "Market segment in market-research terms, "
            "e.g. 'on-demand mobile car wash services'"
        ),
    )
    geography: Geography = Geography.GLOBAL


class CompetitorSearchRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    industry: str = Field(
        min_length=1,
        description="Product/service terms, e.g. 'project management platform'",
    )
    product_type: str | None = Field(
        default=None, description="Appended to the query, e.g. 'SaaS', 'mobile app'"
    )
    max_results: int = Field(default=5, ge=1, le=10)


class CommunitySearchRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    target_audience: str = Field(min_length=1, description="The people, not the product")
    topics: list[str] = Field(description="Specific multi-word topic phrases")


class PricingRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = Field(description="Pricing page URL, or a company homepage")
    competitor_name: str | None = Field(default=None, description="Label only")

    @field_validator("url")
    @classmethod
    def _must_be_http_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"Invalid URL: {value!r}")
        return value


class ReportRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    business_idea: str = Field(min_length=1, description="Specific product description")
    target_segment: str | None = None
    geography: Geography = Geography.GLOBAL
    product_type: str | None = None
