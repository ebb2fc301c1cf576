"""Community discovery across Hacker News, Reddit, Discord and forums.

Four batches run concurrently and fail independently. The aggregate call
raises only when every batch failed, so "nothing found" stays
distinguishable from "every provider is broken".
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog

from oxira.concurrency import gather_settled
from oxira.dedupe import dedupe_by_url
from oxira.models.community import Community, Platform
from oxira.scoring import is_relevant_result
from oxira.search import Services

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from oxira.models.search import SearchHit

logger = structlog.get_logger()

MAX_COMMUNITIES = 15
MAX_DESCRIPTION = 200
HN_MIN_POINTS = 10
HN_HITS_PER_QUERY = 10
HN_STORIES_PER_QUERY = 3
MAX_REDDIT_QUERIES = 3

_SUBREDDIT = re.compile(r"reddit\.com/r/([^/?#]+)", re.IGNORECASE)
_DISCORD_SUFFIX = re.compile(r"\s*-\s*Discord$", re.IGNORECASE)
_FORUM_MARKERS = ("forum", "community", "slack", "groups", "circle.so")


def classify_community_url(url: str) -> tuple[Platform, str] | None:
    """Platform and canonical URL for a community link, or None.

    Reddit links are reduced to the subreddit root so that threads from
    one subreddit collapse into a single community.
    """
    subreddit = _SUBREDDIT.search(url)
    if subreddit:
        return Platform.REDDIT, f"https://www.reddit.com/r/{subreddit.group(1)}"
    lowered = url.lower()
    if "discord.gg/" in lowered or "discord.com/invite/" in lowered:
        return Platform.DISCORD, url
    if any(marker in lowered for marker in _FORUM_MARKERS):
        return Platform.FORUM, url
    return None


def _snippet(text: str | None) -> str | None:
    return text[:MAX_DESCRIPTION] if text else None


async def _settle_batch(name: str, calls: list[Awaitable[list[SearchHit]]]) -> list[SearchHit]:
    """Run one batch's queries; the batch fails only if all of them failed."""
    outcomes = await gather_settled(*calls)
    errors = [o.error for o in outcomes if not o.ok]
    if outcomes and len(errors) == len(outcomes):
        raise errors[0]  # type: ignore[misc]
    for error in errors:
        logger.warning("community_query_failed", batch=name, error=str(error))
    return [hit for o in outcomes if o.ok for hit in (o.value or [])]


async def _hacker_news(audience: str, topics: list[str], services: Services) -> list[Community]:
    queries = [audience, *topics[:2]]
    outcomes = await gather_settled(
        *(services.hn.search_stories(q, HN_HITS_PER_QUERY) for q in queries)
    )
    errors = [o.error for o in outcomes if not o.ok]
    if len(errors) == len(outcomes):
        raise errors[0]  # type: ignore[misc]

    found: list[Community] = []
    for outcome in outcomes:
        for story in (outcome.value or [])[:HN_STORIES_PER_QUERY]:
            if story["points"] < HN_MIN_POINTS:
                continue
            found.append(
                Community(
                    platform=Platform.HACKER_NEWS,
                    name=story["title"],
                    url=f"https://news.ycombinator.com/item?id={story['objectID']}",
                    description=_snippet(story["story_text"]),
                    member_count=f"{story['num_comments']} comments, {story['points']} points",
                )
            )
    return found


async def _reddit(audience: str, topics: list[str], services: Services) -> list[Community]:
    queries = [
        f"site:reddit.com {audience} community subreddit",
        *(f"site:reddit.com r/{topic}" for topic in topics),
    ][:MAX_REDDIT_QUERIES]
    hits = await _settle_batch("reddit", [services.search.search(q, 5) for q in queries])
    found: list[Community] = []
    for hit in hits:
        classified = classify_community_url(hit.url)
        if classified is None or classified[0] is not Platform.REDDIT:
            continue
        url = classified[1]
        found.append(
            Community(
                platform=Platform.REDDIT,
                name=f"r/{url.rsplit('/', 1)[-1]}",
                url=url,
                description=_snippet(hit.snippet),
            )
        )
    return found


async def _discord(audience: str, topics: list[str], services: Services) -> list[Community]:
    query = f"site:discord.gg OR site:discord.com {audience} {' '.join(topics)}".strip()
    hits = await _settle_batch("discord", [services.search.search(query, 5)])
    return [
        Community(
            platform=Platform.DISCORD,
            name=_DISCORD_SUFFIX.sub("", hit.title).strip() or hit.url,
            url=hit.url,
            description=_snippet(hit.snippet),
        )
        for hit in hits
        if (c := classify_community_url(hit.url)) is not None and c[0] is Platform.DISCORD
    ]


async def _forums(audience: str, topics: list[str], services: Services) -> list[Community]:
    query = f"{audience} forum community {' '.join(topics[:2])}".strip()
    hits = await _settle_batch("forum", [services.search.search(query, 10)])
    terms = [audience, *topics]
    found: list[Community] = []
    for hit in hits:
        classified = classify_community_url(hit.url)
        if classified is None or classified[0] is not Platform.FORUM:
            continue
        if not is_relevant_result(f"{hit.title} {hit.snippet}", terms):
            logger.debug("forum_hit_irrelevant", url=hit.url)
            continue
        found.append(
            Community(
                platform=Platform.FORUM,
                name=hit.title or hit.url,
                url=hit.url,
                description=_snippet(hit.snippet),
            )
        )
    return found


async def find_communities(
    target_audience: str,
    topics: list[str],
    services: Services | None = None,
) -> list[Community]:
    """Find communities where *target_audience* gathers, at most 15."""
    services = services or Services.from_settings()
    batches = ("hackernews", "reddit", "discord", "forum")
    outcomes = await gather_settled(
        _hacker_news(target_audience, topics, services),
        _reddit(target_audience, topics, services),
        _discord(target_audience, topics, services),
        _forums(target_audience, topics, services),
    )

    found: list[Community] = []
    errors: list[Exception] = []
    for batch, outcome in zip(batches, outcomes, strict=True):
        if outcome.ok:
            found.extend(outcome.value or [])
        else:
            errors.append(outcome.error)  # type: ignore[arg-type]
            logger.warning("community_batch_failed", batch=batch, error=str(outcome.error))

    if not found and len(errors) == len(batches):
        raise errors[0]

    communities = dedupe_by_url(found, lambda c: c.url)[:MAX_COMMUNITIES]
    logger.info("communities_found", audience=target_audience, count=len(communities))
    return communities
