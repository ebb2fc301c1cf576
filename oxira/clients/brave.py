"""Client for the Brave Search web API.

Primary keyword-search provider. Free tier: 2,000 queries/month at
1 query/second. Docs: https://api.search.brave.com/app/documentation
"""

from __future__ import annotations

import httpx
import structlog

from oxira.errors import ProviderError
from oxira.metrics import provider_requests_total
from oxira.models.search import HitSource, SearchHit
from oxira.rate_limiter import RateLimiter, brave_rate_limiter
from oxira.retry import async_with_retry

logger = structlog.get_logger()

_BASE_URL = "https://api.search.brave.com/res/v1"


class BraveSearchClient:
    """Brave Search API client. Unavailable without an API key."""

    name = "brave"

    def __init__(
        self,
        api_key: str = "",
        timeout: float = 30.0,
        rate_limiter: RateLimiter = brave_rate_limiter,
        max_retries: int = 2,
        base_delay: float = 1.0,
    ) -> None:
        self.api_key = api_key
        self.base_url = _BASE_URL
        self.timeout = timeout
        self.rate_limiter = rate_limiter
        self.max_retries = max_retries
        self.base_delay = base_delay

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    async def search(self, query: str, count: int = 10) -> list[SearchHit]:
        """Search the web via Brave.

        Args:
            query: Search query string. Supports ``site:`` operators.
            count: Number of results to request (max 20).

        Returns:
            Hits in provider order, tagged with source ``brave``.

        Raises:
            ProviderError: The API answered with a non-success status.
        """

        async def _attempt() -> list[SearchHit]:
            await self.rate_limiter.acquire()
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(
                    f"{self.base_url}/web/search",
                    params={"q": query, "count": min(count, 20)},
                    headers={
                        "Accept": "application/json",
                        "X-Subscription-Token": self.api_key,
                    },
                )
            if resp.is_error:
                provider_requests_total.labels(provider=self.name, status="error").inc()
                raise ProviderError("Brave Search", resp.status_code, resp.text)
            provider_requests_total.labels(provider=self.name, status="ok").inc()
            return _parse_results(resp.json())

        logger.info("brave_search", query=query, count=count)
        return await async_with_retry(
            _attempt,
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            fn_name="brave_search",
        )


def _parse_results(data: dict[str, object]) -> list[SearchHit]:
    web = data.get("web")
    raw_results = web.get("results", []) if isinstance(web, dict) else []
    if not isinstance(raw_results, list):
        return []
    hits: list[SearchHit] = []
    for item in raw_results:
        if not isinstance(item, dict) or not item.get("url"):
            continue
        hits.append(
            SearchHit(
                title=str(item.get("title") or ""),
                url=str(item["url"]),
                snippet=str(item.get("description") or ""),
                source=HitSource.BRAVE,
            )
        )
    return hits
