"""Client for Tavily search API.

Tavily provides AI-optimized web search with structured output.
Used as the secondary provider when Brave is unconfigured or failing.
Free tier: 1,000 searches/month.
"""

from __future__ import annotations

import httpx
import structlog

from oxira.errors import ProviderError
from oxira.metrics import provider_requests_total
from oxira.models.search import HitSource, SearchHit
from oxira.rate_limiter import RateLimiter, tavily_rate_limiter
from oxira.retry import async_with_retry

logger = structlog.get_logger()


class TavilyClient:
    """Tavily API client. Unavailable without an API key."""

    name = "tavily"

    def __init__(
        self,
        api_key: str = "",
        timeout: float = 30.0,
        rate_limiter: RateLimiter = tavily_rate_limiter,
        max_retries: int = 2,
        base_delay: float = 1.0,
    ) -> None:
        self.api_key = api_key
        self.base_url = "https://api.tavily.com"
        self.timeout = timeout
        self.rate_limiter = rate_limiter
        self.max_retries = max_retries
        self.base_delay = base_delay

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    async def search(self, query: str, count: int = 10) -> list[SearchHit]:
        """Search the web using Tavily's basic search depth.

        Args:
            query: Search query string.
            count: Maximum number of results to return (1-20).

        Returns:
            Hits in provider order; ``content`` becomes the snippet.

        Raises:
            ProviderError: The API answered with a non-success status.
        """

        async def _attempt() -> list[SearchHit]:
            await self.rate_limiter.acquire()
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    f"{self.base_url}/search",
                    json={
                        "api_key": self.api_key,
                        "query": query,
                        "max_results": count,
                        "search_depth": "basic",
                    },
                )
            if resp.is_error:
                provider_requests_total.labels(provider=self.name, status="error").inc()
                raise ProviderError("Tavily", resp.status_code, resp.text)
            provider_requests_total.labels(provider=self.name, status="ok").inc()
            data: dict[str, object] = resp.json()
            raw_results = data.get("results", [])
            if not isinstance(raw_results, list):
                raw_results = []
            hits: list[SearchHit] = []
            for item in raw_results:
                if not isinstance(item, dict) or not item.get("url"):
                    continue
                hits.append(
                    SearchHit(
                        title=str(item.get("title") or ""),
                        url=str(item["url"]),
                        snippet=str(item.get("content") or ""),
                        source=HitSource.TAVILY,
                    )
                )
            return hits

        logger.info("tavily_search", query=query, count=count)
        return await async_with_retry(
            _attempt,
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            fn_name="tavily_search",
        )
