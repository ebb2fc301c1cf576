"""Tests for the pricing extraction tool."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
from conftest import FakeFetcher

from oxira.models.pricing import PricingModel
from oxira.pricing_parser import TRUNCATION_MARKER
from oxira.tools.pricing import FETCH_FAILED_HINT, extract_pricing

if TYPE_CHECKING:
    from collections.abc import Callable

    from oxira.search import Services

PAGE = """# Plans

## Starter
$9/mo
- 1 location
- Online booking widget

## Team
$19/mo per user
- Unlimited locations

## Enterprise
Contact sales
"""


class TestExtractPricing:
    def test_extracts_tiers_and_hints(self, make_services: Callable[..., Services]) -> None:
        services = make_services(fetcher=FakeFetcher({"https://acme.io": PAGE}))
        result = asyncio.run(extract_pricing("https://acme.io", "Acme", services=services))

        assert result.url == "https://acme.io"
        assert result.markdown_content == PAGE
        assert result.structured_pricing is not None
        assert [t.name for t in result.structured_pricing.tiers] == [
            "Starter",
            "Team",
            "Enterprise",
        ]
        assert result.structured_pricing.has_enterprise is True
        assert result.structured_pricing.has_free_tier is False
        assert result.structured_pricing.pricing_model == PricingModel.PER_USER
        assert result.extraction_hints.startswith("Extracted 3 pricing tiers")
        assert "Source: Acme" in result.extraction_hints

    def test_tiers_read_from_untruncated_page(
        self, make_services: Callable[..., Services]
    ) -> None:
        page = "Lorem ipsum dolor sit amet.\n" * 700 + "## Pro\n$29/mo\n"
        services = make_services(fetcher=FakeFetcher({"https://acme.io/pricing": page}))
        result = asyncio.run(extract_pricing("https://acme.io/pricing", services=services))

        assert result.markdown_content.endswith(TRUNCATION_MARKER)
        assert "## Pro" not in result.markdown_content
        assert len(result.markdown_content) <= 15_000 + len(TRUNCATION_MARKER)
        assert result.structured_pricing is not None
        assert [t.name for t in result.structured_pricing.tiers] == ["Pro"]

    def test_fetch_failure_is_data(self, make_services: Callable[..., Services]) -> None:
        result = asyncio.run(extract_pricing("https://gone.io", services=make_services()))

        assert result.url == "https://gone.io"
        assert result.markdown_content == "Failed to fetch pricing page: HTTP error: 404 Not Found"
        assert result.extraction_hints.startswith(FETCH_FAILED_HINT)
        assert result.extraction_hints.endswith("Reason: HTTP error: 404 Not Found")
        assert result.structured_pricing is None

    def test_timeout_is_data(self, make_services: Callable[..., Services]) -> None:
        fetcher = FakeFetcher({"https://slow.io": httpx.ReadTimeout("read timed out")})
        services = make_services(fetcher=fetcher)
        result = asyncio.run(extract_pricing("https://slow.io", services=services))

        assert "Request timed out" in result.markdown_content
        assert "Request timed out" in result.extraction_hints
