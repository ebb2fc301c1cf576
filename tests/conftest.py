"""Shared test fixtures and in-memory fakes of the external ports."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from oxira.clients.web_fetcher import FetchResult
from oxira.config import Settings
from oxira.errors import FetchError
from oxira.models.search import HitSource, SearchHit
from oxira.search import Services

if TYPE_CHECKING:
    from collections.abc import Callable

    from oxira.clients.hn_algolia import HNStory


def make_hit(
    url: str, title: str = "", snippet: str = "", source: HitSource = HitSource.BRAVE
) -> SearchHit:
    return SearchHit(title=title or url, url=url, snippet=snippet, source=source)


def make_story(
    object_id: str, title: str, points: int = 50, num_comments: int = 10, text: str | None = None
) -> HNStory:
    return {
        "title": title,
        "url": None,
        "author": "someone",
        "points": points,
        "num_comments": num_comments,
        "created_at": "2025-01-01T00:00:00Z",
        "objectID": object_id,
        "story_text": text,
    }


class FakeSearch:
    """WebSearch stand-in. *handler* maps (query, count) to hits or an exception."""

    def __init__(
        self,
        handler: Callable[[str, int], list[SearchHit] | Exception] | None = None,
        configured: bool = True,
    ) -> None:
        self.handler = handler or (lambda query, count: [])
        self.configured = configured
        self.calls: list[tuple[str, int]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def search(self, query: str, count: int = 10) -> list[SearchHit]:
        self.calls.append((query, count))
        result = self.handler(query, count)
        if isinstance(result, Exception):
            raise result
        return list(result)


class FakeFetcher:
    """PageFetcher stand-in serving markdown (or raising) per URL. Unknown URLs 404."""

    def __init__(self, pages: dict[str, str | Exception] | None = None) -> None:
        self.pages = pages or {}
        self.fetched: list[str] = []

    def _serve(self, url: str) -> FetchResult:
        self.fetched.append(url)
        page = self.pages.get(url)
        if page is None:
            raise FetchError(url, 404, "Not Found")
        if isinstance(page, Exception):
            raise page
        return FetchResult(url=url, markdown=page, title=None, status_code=200)

    async def fetch_as_markdown(self, url: str) -> FetchResult:
        return self._serve(url)

    async def fetch_pricing_page(self, url: str) -> FetchResult:
        return self._serve(url)


class FakeHN:
    def __init__(self, handler: Callable[[str], list[HNStory] | Exception] | None = None) -> None:
        self.handler = handler or (lambda query: [])
        self.queries: list[str] = []

    async def search_stories(self, query: str, hits_per_page: int = 20) -> list[HNStory]:
        self.queries.append(query)
        result = self.handler(query)
        if isinstance(result, Exception):
            raise result
        return list(result)


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        brave_search_api_key="test-brave-key",
        tavily_api_key="",
        max_retries=0,
        retry_base_delay=0.0,
        log_level="DEBUG",
        log_format="console",
        _env_file=None,
    )


@pytest.fixture()
def make_services(settings: Settings) -> Callable[..., Services]:
    def _make(
        search: FakeSearch | None = None,
        fetcher: FakeFetcher | None = None,
        hn: FakeHN | None = None,
    ) -> Services:
        return Services(
            search=search or FakeSearch(),
            fetcher=fetcher or FakeFetcher(),
            hn=hn or FakeHN(),
            settings=settings,
        )

    return _make
