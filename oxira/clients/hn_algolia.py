"""Story search over the Hacker News Algolia API (no key required).

Docs: https://hn.algolia.com/api
"""

from __future__ import annotations

from datetime import UTC, datetime

import httpx
import structlog
from typing_extensions import TypedDict

from oxira.errors import ProviderError
from oxira.metrics import provider_requests_total
from oxira.retry import async_with_retry

logger = structlog.get_logger()

_BASE_URL = "https://hn.algolia.com/api/v1"


class HNStory(TypedDict):
    title: str
    url: str | None
    author: str
    points: int
    num_comments: int
    created_at: str
    objectID: str
    story_text: str | None


def _count(value: object) -> int:
    return int(value) if isinstance(value, (int, float)) else 0


def _optional_text(value: object) -> str | None:
    return str(value) if value else None


def _timestamp(hit: dict[str, object]) -> str:
    iso = hit.get("created_at")
    if isinstance(iso, str) and iso:
        return iso
    epoch = hit.get("created_at_i")
    if isinstance(epoch, int):
        return datetime.fromtimestamp(epoch, tz=UTC).isoformat()
    return ""


def _parse_story(hit: dict[str, object]) -> HNStory:
    """Turn one Algolia hit into an HNStory; null and missing fields get empty values."""
    return HNStory(
        title=str(hit.get("title") or ""),
        url=_optional_text(hit.get("url")),
        author=str(hit.get("author") or ""),
        points=_count(hit.get("points")),
        num_comments=_count(hit.get("num_comments")),
        created_at=_timestamp(hit),
        objectID=str(hit.get("objectID") or ""),
        story_text=_optional_text(hit.get("story_text")),
    )


class HNClient:
    """Hacker News Algolia API client. Always available (no API key needed)."""

    name = "hn_algolia"

    def __init__(
        self, timeout: float = 30.0, max_retries: int = 2, base_delay: float = 1.0
    ) -> None:
        self.base_url = _BASE_URL
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_delay = base_delay

    @property
    def is_available(self) -> bool:
        return True

    async def search_stories(self, query: str, hits_per_page: int = 20) -> list[HNStory]:
        """Full-text search over Hacker News stories.

        Raises:
            ProviderError: The API answered with a non-success status.
        """

        async def _attempt() -> list[HNStory]:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(
                    f"{self.base_url}/search",
                    params={"query": query, "tags": "story", "hitsPerPage": hits_per_page},
                )
            if resp.is_error:
                provider_requests_total.labels(provider=self.name, status="error").inc()
                raise ProviderError("HN Algolia", resp.status_code, resp.text)
            provider_requests_total.labels(provider=self.name, status="ok").inc()
            data: dict[str, object] = resp.json()
            hits_raw = data.get("hits")
            if not isinstance(hits_raw, list):
                logger.warning("hn_search_unexpected_response", query=query)
                return []
            return [_parse_story(hit) for hit in hits_raw if isinstance(hit, dict)]

        logger.info("hn_search", query=query)
        return await async_with_retry(
            _attempt,
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            fn_name="hn_search",
        )
