"""Port interfaces (Protocols) for the external collaborators the tools use."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from oxira.clients.hn_algolia import HNStory
    from oxira.clients.web_fetcher import FetchResult
    from oxira.models.search import SearchHit


@runtime_checkable
class SearchProvider(Protocol):
    """One keyword web-search backend (Brave, Tavily)."""

    name: str

    @property
    def is_available(self) -> bool: ...
    async def search(self, query: str, count: int = 10) -> list[SearchHit]: ...


@runtime_checkable
class WebSearchPort(Protocol):
    """Ordered provider chain as seen by the tools."""

    @property
    def is_configured(self) -> bool: ...
    async def search(self, query: str, count: int = 10) -> list[SearchHit]: ...


@runtime_checkable
class PageFetcherPort(Protocol):
    """Fetch a page and convert it to markdown."""

    async def fetch_as_markdown(self, url: str) -> FetchResult: ...
    async def fetch_pricing_page(self, url: str) -> FetchResult: ...


@runtime_checkable
class StorySearchPort(Protocol):
    """Full-text search over forum stories with engagement counters."""

    async def search_stories(self, query: str, hits_per_page: int = 20) -> list[HNStory]: ...
