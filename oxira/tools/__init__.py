"""Research tools and the name -> (request schema, runner) registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from oxira.models.requests import (
    CommunitySearchRequest,
    CompetitorSearchRequest,
    MarketSizeRequest,
    PricingRequest,
    ReportRequest,
)
from oxira.tools.communities import find_communities
from oxira.tools.competitors import search_competitors
from oxira.tools.market_size import estimate_market_size
from oxira.tools.pricing import extract_pricing
from oxira.tools.report import full_research_report

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from pydantic import BaseModel


@dataclass(frozen=True, slots=True)
class Tool:
    name: str
    title: str
    request_model: type[BaseModel]
    runner: Callable[..., Awaitable[Any]]


TOOLS: dict[str, Tool] = {
    tool.name: tool
    for tool in (
        Tool(
            "estimate_market_size",
            "Market size estimation",
            MarketSizeRequest,
            estimate_market_size,
        ),
        Tool(
            "search_competitors",
            "Competitor search",
            CompetitorSearchRequest,
            search_competitors,
        ),
        Tool("find_communities", "Community search", CommunitySearchRequest, find_communities),
        Tool("extract_pricing", "Pricing extraction", PricingRequest, extract_pricing),
        Tool("full_research_report", "Research report", ReportRequest, full_research_report),
    )
}

__all__ = [
    "TOOLS",
    "Tool",
    "estimate_market_size",
    "extract_pricing",
    "find_communities",
    "full_research_report",
    "search_competitors",
]
