"""Web search with ordered provider fallback, and the shared service bundle."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from oxira.clients.brave import BraveSearchClient
from oxira.clients.hn_algolia import HNClient
from oxira.clients.tavily import TavilyClient
from oxira.clients.web_fetcher import PageFetcher
from oxira.config import Settings
from oxira.errors import NO_PROVIDER_MESSAGE, ConfigurationError, SearchError, classify_error

if TYPE_CHECKING:
    from oxira.models.search import SearchHit
    from oxira.protocols import PageFetcherPort, SearchProvider, StorySearchPort, WebSearchPort

logger = structlog.get_logger()


class WebSearch:
    """Tries each available provider in order until one returns hits."""

    def __init__(self, providers: list[SearchProvider]) -> None:
        self.providers = [p for p in providers if p.is_available]

    @classmethod
    def from_settings(cls, settings: Settings) -> WebSearch:
        retry = {"max_retries": settings.max_retries, "base_delay": settings.retry_base_delay}
        return cls(
            [
                BraveSearchClient(
                    settings.brave_search_api_key, timeout=settings.search_timeout_seconds, **retry
                ),
                TavilyClient(
                    settings.tavily_api_key, timeout=settings.search_timeout_seconds, **retry
                ),
            ]
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.providers)

    async def search(self, query: str, count: int = 10) -> list[SearchHit]:
        """Return the first non-empty result list from the provider chain.

        Raises:
            ConfigurationError: No provider is configured.
            SearchError: Every provider raised.
        """
        if not self.providers:
            raise ConfigurationError(NO_PROVIDER_MESSAGE)

        errors: list[str] = []
        for provider in self.providers:
            try:
                hits = await provider.search(query, count)
            except Exception as exc:
                logger.warning(
                    "search_provider_failed",
                    provider=provider.name,
                    query=query,
                    error=str(exc),
                )
                errors.append(f"{provider.name}: {classify_error(exc)}")
                continue
            if hits:
                return hits
            logger.info("search_provider_empty", provider=provider.name, query=query)

        if len(errors) == len(self.providers):
            raise SearchError(query, errors)
        return []


@dataclass(frozen=True, slots=True)
class Services:
    """External collaborators shared by every tool invocation."""

    search: WebSearchPort
    fetcher: PageFetcherPort
    hn: StorySearchPort
    settings: Settings

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> Services:
        settings = settings or Settings()
        return cls(
            search=WebSearch.from_settings(settings),
            fetcher=PageFetcher(
                timeout=settings.fetch_timeout_seconds,
                user_agent=settings.user_agent,
                max_retries=settings.max_retries,
                base_delay=settings.retry_base_delay,
            ),
            hn=HNClient(
                timeout=settings.search_timeout_seconds,
                max_retries=settings.max_retries,
                base_delay=settings.retry_base_delay,
            ),
            settings=settings,
        )
