"""Tests for competitor discovery."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest
from conftest import FakeFetcher, FakeSearch, make_hit

from oxira.errors import ConfigurationError, OxiraError, SearchError
from oxira.models.search import HitSource
from oxira.tools.competitors import mine_category_listing, rank_candidates, search_competitors

if TYPE_CHECKING:
    from collections.abc import Callable

    from oxira.models.search import SearchHit
    from oxira.search import Services

CATEGORY_URL = "https://www.g2.com/categories/car-wash"
CATEGORY_PAGE = (
    "# Best Car Wash Software\n\n"
    "Compare the top products in this category, read reviews and pick the right tool.\n\n"
    "[Washly - booking for car washes](https://washly.com/features)\n"
    "[Bubbles](https://bubbles.app/)\n"
    "[G2 on LinkedIn](https://linkedin.com/company/g2)\n"
)

PRODUCT_PAGE = (
    "# Washly\n\n"
    "Book a car wash from your phone\n\n"
    "- Real-time wash tracking\n"
    "- Automated customer reminders\n\n"
    "Sign up today. Plans from $9/mo."
)

WEB_HITS = [
    make_hit(
        "https://washly.com/",
        title="Washly - Car wash booking",
        snippet="Our platform lets customers book washes. Sign up",
    ),
    make_hit("https://sudsy.io/pricing", title="Sudsy pricing", snippet="We offer online booking."),
    make_hit(
        "https://example-reviews.com/blog/top-10-car-wash-apps",
        title="Top 10 car wash apps",
        snippet="We compared the best apps.",
    ),
    make_hit("https://www.reddit.com/r/carwash", title="r/carwash", snippet="Discussion"),
    make_hit(
        "https://appwizardsolutions.com/car-wash-app",
        title="Car wash app development company",
    ),
]


def _handler(web: list[SearchHit] | Exception):
    def handler(query: str, count: int) -> list[SearchHit] | Exception:
        if query.startswith("site:g2.com"):
            return [make_hit(CATEGORY_URL, title="Best Car Wash Software")]
        return web

    return handler


class TestRankCandidates:
    def test_filters_sorts_and_tags_bonuses(self) -> None:
        category = [
            make_hit("https://washly.com", title="Washly", source=HitSource.CATEGORY),
            make_hit("https://bubbles.app", title="Bubbles", source=HitSource.CATEGORY),
        ]
        ranked = rank_candidates(WEB_HITS + category)

        assert [c.hit.url for c in ranked] == [
            "https://washly.com/",
            "https://sudsy.io/pricing",
            "https://bubbles.app",
        ]
        assert ranked[0].bonuses == ("multi_source",)
        assert ranked[0].score == 95
        assert ranked[2].bonuses == ("category_listing",)

    def test_brave_and_tavily_count_as_one_source(self) -> None:
        hits = [
            make_hit("https://washly.com/", snippet="Sign up"),
            make_hit("https://washly.com/", source=HitSource.TAVILY),
        ]
        assert rank_candidates(hits)[0].bonuses == ()

    def test_content_url_normalized_to_root(self) -> None:
        hits = [make_hit("https://acme.io/blog/launch", title="Acme", snippet="Sign up")]
        assert rank_candidates(hits)[0].hit.url == "https://acme.io"


class TestMineCategoryListing:
    def test_extracts_products(self, make_services: Callable[..., Services]) -> None:
        services = make_services(
            FakeSearch(_handler([])), FakeFetcher({CATEGORY_URL: CATEGORY_PAGE})
        )
        products = asyncio.run(mine_category_listing("car wash", services))

        assert [p.title for p in products] == ["Washly", "Bubbles"]
        assert all(p.source == HitSource.CATEGORY for p in products)

    def test_short_page_ignored(self, make_services: Callable[..., Services]) -> None:
        services = make_services(FakeSearch(_handler([])), FakeFetcher({CATEGORY_URL: "tiny"}))
        assert asyncio.run(mine_category_listing("car wash", services)) == []

    def test_failure_yields_empty(self, make_services: Callable[..., Services]) -> None:
        search = FakeSearch(lambda q, c: SearchError(q, ["brave: down"]))
        assert asyncio.run(mine_category_listing("car wash", make_services(search))) == []


class TestSearchCompetitors:
    def test_end_to_end(self, make_services: Callable[..., Services]) -> None:
        search = FakeSearch(_handler(WEB_HITS))
        fetcher = FakeFetcher(
            {
                CATEGORY_URL: CATEGORY_PAGE,
                "https://washly.com/": PRODUCT_PAGE,
                "https://sudsy.io/pricing": "Read our blog about washing your car at home.",
            }
        )
        competitors = asyncio.run(
            search_competitors("car wash booking", services=make_services(search, fetcher))
        )

        assert [c.name for c in competitors] == ["Washly", "Bubbles"]

        washly = competitors[0]
        assert washly.tagline == "Book a car wash from your phone"
        assert washly.features == ["Real-time wash tracking", "Automated customer reminders"]
        assert washly.description == "Our platform lets customers book washes. Sign up"

        # Unfetchable pages are kept with search data only
        bubbles = competitors[1]
        assert bubbles.url == "https://bubbles.app"
        assert bubbles.tagline is None
        assert bubbles.features is None

    def test_queries_and_counts(self, make_services: Callable[..., Services]) -> None:
        search = FakeSearch(_handler(WEB_HITS))
        asyncio.run(
            search_competitors(
                "car wash booking", "mobile app", max_results=3, services=make_services(search)
            )
        )

        assert ("car wash booking mobile app software platform", 13) in search.calls
        assert ("site:g2.com/categories car wash booking software", 3) in search.calls

    def test_backfill_skips_product_check(self, make_services: Callable[..., Services]) -> None:
        hits = [
            make_hit(f"https://prod{i}.io/", title=f"Prod {i}", snippet="Sign up")
            for i in range(5)
        ]
        fetcher = FakeFetcher({f"https://prod{i}.io/": "Just a blog post." for i in range(5)})
        competitors = asyncio.run(
            search_competitors(
                "widgets",
                max_results=1,
                services=make_services(FakeSearch(_handler(hits)), fetcher),
            )
        )

        # The first four fail the product check; the fifth is admitted unchecked
        assert [c.url for c in competitors] == ["https://prod4.io/"]

    def test_respects_max_results(self, make_services: Callable[..., Services]) -> None:
        hits = [make_hit(f"https://prod{i}.io/", snippet="Sign up") for i in range(10)]
        competitors = asyncio.run(
            search_competitors(
                "widgets", max_results=2, services=make_services(FakeSearch(_handler(hits)))
            )
        )
        assert len(competitors) == 2

    def test_all_queries_failed(self, make_services: Callable[..., Services]) -> None:
        search = FakeSearch(lambda q, c: SearchError(q, ["brave: Brave Search API error: 401"]))

        with pytest.raises(OxiraError, match="Search failed: All search providers failed"):
            asyncio.run(search_competitors("car wash", services=make_services(search)))

    def test_no_results(self, make_services: Callable[..., Services]) -> None:
        with pytest.raises(OxiraError, match="Search returned no results."):
            asyncio.run(search_competitors("car wash", services=make_services()))

    def test_unconfigured(self, make_services: Callable[..., Services]) -> None:
        search = FakeSearch(configured=False)

        with pytest.raises(ConfigurationError):
            asyncio.run(search_competitors("car wash", services=make_services(search)))
        assert search.calls == []
