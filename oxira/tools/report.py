"""Composite research report over the four research tools.

Competitors, market size and communities run concurrently; pricing runs
afterwards for the top competitors. Every branch is captured as a
ReportSection, so no branch failure escapes the report call.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import TYPE_CHECKING, TypeVar

import structlog

from oxira.concurrency import Outcome, gather_settled
from oxira.errors import classify_error
from oxira.models.community import Community
from oxira.models.competitor import Competitor
from oxira.models.market import Geography, MarketSizeEstimate
from oxira.models.pricing import PricingExtraction
from oxira.models.report import FullReport, ReportSection, ReportSummary
from oxira.scoring import STOP_WORDS
from oxira.search import Services
from oxira.tools.communities import find_communities
from oxira.tools.competitors import search_competitors
from oxira.tools.market_size import estimate_market_size
from oxira.tools.pricing import extract_pricing

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = structlog.get_logger()

T = TypeVar("T")

MAX_TOPICS = 5
MIN_TOPIC_WORD_LENGTH = 4
PRICED_COMPETITORS = 3
REPORT_COMPETITORS = 5


def derive_topics(business_idea: str) -> list[str]:
    """Topic phrases for community search, compound phrases first.

    The whole idea leads, then bigrams of consecutive non-stop-words
    ("car wash"), then single meaningful words no bigram already covers.
    """
    cleaned = re.sub(r"[^a-z0-9\s]", "", business_idea.lower()).strip()
    all_words = cleaned.split()
    meaningful = [w for w in all_words if len(w) >= MIN_TOPIC_WORD_LENGTH and w not in STOP_WORDS]
    if not meaningful:
        return [business_idea]

    topics: list[str] = [cleaned]
    for first, second in zip(all_words, all_words[1:]):
        bigram = f"{first} {second}"
        if first in STOP_WORDS or second in STOP_WORDS or bigram in topics:
            continue
        topics.append(bigram)

    covered = {word for topic in topics[1:] for word in topic.split()}
    for word in meaningful:
        if word not in covered and word not in topics:
            topics.append(word)

    return topics[:MAX_TOPICS]


def _section_from(outcome: Outcome[T], section: type[ReportSection[T]]) -> ReportSection[T]:
    if outcome.ok:
        return section(data=outcome.value)
    return section(error=classify_error(outcome.error))  # type: ignore[arg-type]


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def _market_takeaway(
    estimate: MarketSizeEstimate, target_segment: str | None, geography: Geography
) -> str:
    if not estimate.tam_estimate.is_known:
        return "Market size data was unavailable from search results."
    segment = f" for {target_segment}" if target_segment else ""
    geo = f" ({str(geography).upper()})" if geography != Geography.GLOBAL else ""
    growth = f", growing at {estimate.growth_rate}" if estimate.growth_rate else ""
    return (
        f"Market size{segment}{geo} is estimated between {estimate.tam_estimate.low} "
        f"and {estimate.tam_estimate.high} ({estimate.confidence} confidence){growth}."
    )


def _pricing_takeaway(extractions: Sequence[PricingExtraction]) -> str:
    structured = [p.structured_pricing for p in extractions if p.structured_pricing is not None]
    hints = " ".join(p.extraction_hints for p in extractions)
    has_free = any(s.has_free_tier for s in structured) or bool(
        re.search(r"free tier", hints, re.IGNORECASE)
    )
    has_enterprise = any(s.has_enterprise for s in structured) or bool(
        re.search(r"enterprise", hints, re.IGNORECASE)
    )
    models = Counter(str(s.pricing_model) for s in structured if s.pricing_model is not None)

    extras: list[str] = []
    if has_free:
        extras.append("at least one offers a free tier")
    if has_enterprise:
        extras.append("enterprise pricing is common")
    if models:
        extras.append(f"most common pricing model is {models.most_common(1)[0][0]}")

    count = len(extractions)
    suffix = f"; {'; '.join(extras)}" if extras else ""
    noun = _plural(count, "competitor", "competitors")
    return f"Pricing analysis completed for {count} {noun}{suffix}."


def generate_summary(
    competitors: ReportSection[list[Competitor]],
    market_size: ReportSection[MarketSizeEstimate],
    communities: ReportSection[list[Community]],
    pricing: ReportSection[list[PricingExtraction]],
    target_segment: str | None = None,
    geography: Geography = Geography.GLOBAL,
) -> ReportSummary:
    takeaways: list[str] = []
    failed: list[str] = []

    if not market_size.failed:
        takeaways.append(_market_takeaway(market_size.data, target_segment, geography))
    else:
        failed.append("market_size")

    if not competitors.failed:
        count = len(competitors.data)
        names = ", ".join(c.name for c in competitors.data[:3])
        including = f", including {names}" if count else ""
        takeaways.append(f"Found {count} {_plural(count, 'competitor', 'competitors')}{including}.")
    else:
        failed.append("competitors")

    if not communities.failed:
        count = len(communities.data)
        platforms = list(dict.fromkeys(str(c.platform) for c in communities.data))
        across = f" across {', '.join(platforms)}" if platforms else ""
        takeaways.append(
            f"Identified {count} {_plural(count, 'community', 'communities')}{across}."
        )
    else:
        failed.append("communities")

    if pricing.data:
        takeaways.append(_pricing_takeaway(pricing.data))
    elif pricing.failed:
        failed.append("pricing")
    else:
        takeaways.append(
            "No competitor pricing pages could be analysed (no competitor URLs available)."
        )

    return ReportSummary(key_takeaways=takeaways, failed_sections=failed)


async def _price_competitors(
    competitors: list[Competitor], services: Services
) -> ReportSection[list[PricingExtraction]]:
    top = competitors[:PRICED_COMPETITORS]
    outcomes = await gather_settled(
        *(extract_pricing(url=c.url, competitor_name=c.name, services=services) for c in top)
    )
    succeeded = [o.value for o in outcomes if o.ok and o.value is not None]
    failures = [classify_error(o.error) for o in outcomes if not o.ok]  # type: ignore[arg-type]

    error: str | None = None
    if failures:
        error = f"Failed for {len(failures)} competitor(s): {'; '.join(failures)}"
        if succeeded:
            error += f" (pricing extracted for {len(succeeded)} competitor(s))"
        logger.warning("pricing_partial_failure", failed=len(failures), succeeded=len(succeeded))
    return ReportSection[list[PricingExtraction]](data=succeeded or None, error=error)


async def full_research_report(
    business_idea: str,
    target_segment: str | None = None,
    geography: Geography | str = Geography.GLOBAL,
    product_type: str | None = None,
    services: Services | None = None,
) -> FullReport:
    """Run every research tool for *business_idea* and summarize the results."""
    services = services or Services.from_settings()
    geography = Geography(geography)

    topics = derive_topics(business_idea)
    if product_type and product_type.lower() not in topics:
        topics.append(product_type.lower())
    industry = f"{business_idea} {target_segment}" if target_segment else business_idea
    audience = target_segment or business_idea

    logger.info("report_started", business_idea=business_idea, topics=topics)
    competitors_outcome, market_outcome, communities_outcome = await gather_settled(
        search_competitors(
            industry=industry,
            product_type=product_type,
            max_results=REPORT_COMPETITORS,
            services=services,
        ),
        estimate_market_size(industry=business_idea, geography=geography, services=services),
        find_communities(target_audience=audience, topics=topics, services=services),
    )

    competitors = _section_from(competitors_outcome, ReportSection[list[Competitor]])
    market_size = _section_from(market_outcome, ReportSection[MarketSizeEstimate])
    communities = _section_from(communities_outcome, ReportSection[list[Community]])

    if competitors.data:
        pricing = await _price_competitors(competitors.data, services)
    else:
        pricing = ReportSection[list[PricingExtraction]](data=[])

    summary = generate_summary(
        competitors, market_size, communities, pricing, target_segment, geography
    )
    logger.info("report_finished", failed_sections=summary.failed_sections)
    return FullReport(
        business_idea=business_idea,
        market_size=market_size,
        competitors=competitors,
        communities=communities,
        pricing=pricing,
        summary=summary,
    )
