"""Competitor discovery: search, score, normalize, verify, backfill.

Three query variants and a category-listing mine run concurrently. Hits are
deduplicated by domain, scored, and only candidates above the threshold are
fetched. A fetched page must also look like a product page; a page that
cannot be fetched at all is kept on the strength of its search score.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

import structlog

from oxira.concurrency import gather_settled
from oxira.dedupe import dedupe_by_domain, extract_domain
from oxira.errors import NO_PROVIDER_MESSAGE, ConfigurationError, OxiraError, classify_error
from oxira.extraction import extract_features, extract_tagline
from oxira.models.competitor import Competitor
from oxira.models.search import HitSource, ScoredCandidate, SearchHit
from oxira.scoring import (
    CATEGORY_BONUS,
    MULTI_SOURCE_BONUS,
    SCORE_THRESHOLD,
    build_category_query,
    build_search_queries,
    extract_category_products,
    extract_company_name,
    is_category_page_url,
    is_product_page,
    normalize_product_url,
    score_result,
)
from oxira.search import Services

if TYPE_CHECKING:
    from oxira.clients.web_fetcher import FetchResult

logger = structlog.get_logger()

EXTRA_RESULTS_PER_QUERY = 10
EXTRA_FETCH_CANDIDATES = 3
CATEGORY_QUERY_COUNT = 3
MIN_CATEGORY_PAGE_LENGTH = 100


async def mine_category_listing(industry: str, services: Services) -> list[SearchHit]:
    """Product links from a curated category page. Any failure yields []."""
    try:
        query = build_category_query(industry)
        results = await services.search.search(query, CATEGORY_QUERY_COUNT)
        category_url = next((r.url for r in results if is_category_page_url(r.url)), None)
        if category_url is None:
            return []
        page = await services.fetcher.fetch_as_markdown(category_url)
    except Exception as exc:
        logger.info("category_mining_failed", industry=industry, error=str(exc))
        return []
    if len(page.markdown) < MIN_CATEGORY_PAGE_LENGTH:
        return []
    products = extract_category_products(page.markdown)
    logger.info("category_mining_done", url=category_url, products=len(products))
    return products


def rank_candidates(hits: list[SearchHit]) -> list[ScoredCandidate]:
    """Dedupe by domain, score with source bonuses, threshold, sort, normalize."""
    # Brave and Tavily hits count as one "web search" source.
    sources_by_domain: dict[str, set[str]] = defaultdict(set)
    for hit in hits:
        kind = "category" if hit.source == HitSource.CATEGORY else "web"
        sources_by_domain[extract_domain(hit.url)].add(kind)

    scored: list[ScoredCandidate] = []
    for hit in dedupe_by_domain(hits, lambda h: h.url):
        bonuses: list[str] = []
        score = score_result(hit)
        if hit.source == HitSource.CATEGORY:
            score += CATEGORY_BONUS
            bonuses.append("category_listing")
        if len(sources_by_domain[extract_domain(hit.url)]) > 1:
            score += MULTI_SOURCE_BONUS
            bonuses.append("multi_source")
        if score >= SCORE_THRESHOLD:
            scored.append(ScoredCandidate(hit=hit, score=score, bonuses=tuple(bonuses)))

    scored.sort(key=lambda c: c.score, reverse=True)

    normalized = [
        c.model_copy(
            update={"hit": c.hit.model_copy(update={"url": normalize_product_url(c.hit.url)})}
        )
        for c in scored
    ]
    return dedupe_by_domain(normalized, lambda c: c.hit.url)


def _competitor_name(hit: SearchHit) -> str:
    if hit.source == HitSource.CATEGORY and hit.title:
        return hit.title
    return extract_company_name(hit.url, hit.title)


def _to_competitor(hit: SearchHit, page: FetchResult | None) -> Competitor:
    if page is None:
        return Competitor(name=_competitor_name(hit), url=hit.url, description=hit.snippet)
    return Competitor(
        name=_competitor_name(hit),
        url=hit.url,
        description=hit.snippet,
        tagline=extract_tagline(page.markdown),
        features=extract_features(page.markdown) or None,
    )


async def _collect_hits(
    queries: list[str], industry: str, count: int, services: Services
) -> tuple[list[SearchHit], str | None]:
    outcomes = await gather_settled(
        *(services.search.search(q, count) for q in queries),
        mine_category_listing(industry, services),
    )
    search_hits: list[SearchHit] = []
    error: str | None = None
    for query, outcome in zip(queries, outcomes[:-1], strict=True):
        if outcome.ok:
            search_hits.extend(outcome.value or [])
        else:
            error = classify_error(outcome.error)  # type: ignore[arg-type]
            logger.warning("competitor_query_failed", query=query, error=error)
    category_hits = outcomes[-1].value or []
    return search_hits + category_hits, error


async def search_competitors(
    industry: str,
    product_type: str | None = None,
    max_results: int = 5,
    services: Services | None = None,
) -> list[Competitor]:
    """Find product companies competing in *industry*.

    Raises:
        ConfigurationError: No search provider is configured.
        OxiraError: Every query came back empty or failed.
    """
    services = services or Services.from_settings()
    if not services.search.is_configured:
        raise ConfigurationError(NO_PROVIDER_MESSAGE)

    queries = build_search_queries(industry, product_type)
    hits, error = await _collect_hits(
        queries, industry, max_results + EXTRA_RESULTS_PER_QUERY, services
    )
    if not hits:
        if error:
            raise OxiraError(f"Search failed: {error}")
        raise OxiraError("Search returned no results.")

    candidates = rank_candidates(hits)
    logger.info(
        "competitor_candidates", industry=industry, hits=len(hits), candidates=len(candidates)
    )

    fetch_limit = min(len(candidates), max_results + EXTRA_FETCH_CANDIDATES)
    head = candidates[:fetch_limit]
    pages = await gather_settled(*(services.fetcher.fetch_as_markdown(c.hit.url) for c in head))

    competitors: list[Competitor] = []
    for candidate, page in zip(head, pages, strict=True):
        if len(competitors) >= max_results:
            break
        if not page.ok:
            logger.info("competitor_fetch_failed", url=candidate.hit.url, error=str(page.error))
            competitors.append(_to_competitor(candidate.hit, None))
            continue
        if page.value is None or not is_product_page(page.value.markdown):
            logger.debug("competitor_not_product_page", url=candidate.hit.url)
            continue
        competitors.append(_to_competitor(candidate.hit, page.value))

    taken = {extract_domain(c.url) for c in competitors}
    for candidate in candidates[fetch_limit:]:
        if len(competitors) >= max_results:
            break
        domain = extract_domain(candidate.hit.url)
        if domain in taken:
            continue
        page_result: FetchResult | None
        try:
            page_result = await services.fetcher.fetch_as_markdown(candidate.hit.url)
        except Exception as exc:
            logger.info("competitor_fetch_failed", url=candidate.hit.url, error=str(exc))
            page_result = None
        competitors.append(_to_competitor(candidate.hit, page_result))
        taken.add(domain)

    logger.info("competitors_found", industry=industry, count=len(competitors))
    return competitors
