"""Market-size (TAM) estimation from web-search snippets.

Two searches per industry, one phrased for the specific segment and one for
the whole industry. Every dollar figure in the snippets is tagged narrow or
broad, outliers are fenced off per scope group, and the reported range
prefers the narrow group. A broad maximum far above the narrow one is
reported as a scope mismatch rather than silently merged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from oxira.concurrency import gather_settled
from oxira.dedupe import dedupe_by_url
from oxira.errors import classify_error
from oxira.extraction import extract_growth_rate, extract_scoped_figures
from oxira.models.market import (
    Confidence,
    Geography,
    MarketScope,
    MarketSizeEstimate,
    MarketSizeSource,
    ScopedFigure,
    ScopeEstimate,
    TamEstimate,
)
from oxira.search import Services
from oxira.stats import calculate_confidence, filter_outliers, format_dollar_amount, spread

if TYPE_CHECKING:
    from oxira.models.search import SearchHit

logger = structlog.get_logger()

NARROW_QUERY_COUNT = 10
BROAD_QUERY_COUNT = 5
MAX_SOURCES = 5
SCOPE_MISMATCH_RATIO = 2.0

NARROW_DESCRIPTION = "Digital/platform segment (apps, SaaS, online)"
BROAD_DESCRIPTION = "Total industry including traditional services"
SCOPE_MISMATCH_NOTE = (
    "Figures span different market scopes (digital/platform vs total industry). "
    "The primary estimate uses the narrower digital/platform segment. "
    "See narrow_estimate and broad_estimate for the breakdown."
)
NO_RESULTS_MESSAGE = "Search returned no results."


def build_market_queries(industry: str, geography: Geography = Geography.GLOBAL) -> tuple[str, str]:
    geo = "" if geography == Geography.GLOBAL else f" {geography}"
    return (
        f"{industry}{geo} market size 2024 2025",
        f"{industry}{geo} industry market size 2024",
    )


def _scope_values(figures: list[ScopedFigure], scope: MarketScope | None = None) -> list[float]:
    return filter_outliers(sorted(f.value for f in figures if scope is None or f.scope == scope))


def _scope_estimate(values: list[float], description: str) -> ScopeEstimate | None:
    if not values:
        return None
    return ScopeEstimate(
        low=format_dollar_amount(values[0]),
        high=format_dollar_amount(values[-1]),
        description=description,
    )


def assemble_estimate(hits: list[SearchHit]) -> MarketSizeEstimate:
    """Build an estimate from already-deduplicated search hits."""
    figures: list[ScopedFigure] = []
    sources: list[MarketSizeSource] = []
    growth_rate: str | None = None

    for hit in hits:
        hit_figures = extract_scoped_figures(hit.title, hit.snippet)
        if hit_figures:
            figures.extend(hit_figures)
            sources.append(MarketSizeSource(title=hit.title, url=hit.url, snippet=hit.snippet))
        if growth_rate is None:
            growth_rate = extract_growth_rate(hit.snippet)

    if not figures:
        return MarketSizeEstimate(
            growth_rate=growth_rate,
            sources=sources[:MAX_SOURCES],
            confidence=Confidence.LOW,
        )

    narrow = _scope_values(figures, MarketScope.NARROW)
    broad = _scope_values(figures, MarketScope.BROAD)
    if len(narrow) >= 2:
        primary = narrow
    elif len(broad) >= 2:
        primary = broad
    else:
        primary = _scope_values(figures)
    low, high = primary[0], primary[-1]

    has_mismatch = bool(narrow and broad and broad[-1] > narrow[-1] * SCOPE_MISMATCH_RATIO)
    confidence = calculate_confidence(len(sources), len(primary), spread(low, high), has_mismatch)

    return MarketSizeEstimate(
        tam_estimate=TamEstimate(
            low=format_dollar_amount(low),
            high=format_dollar_amount(high),
            narrow_estimate=_scope_estimate(narrow, NARROW_DESCRIPTION),
            broad_estimate=_scope_estimate(broad, BROAD_DESCRIPTION),
        ),
        growth_rate=growth_rate,
        sources=sources[:MAX_SOURCES],
        confidence=confidence,
        note=SCOPE_MISMATCH_NOTE if has_mismatch else None,
    )


async def estimate_market_size(
    industry: str,
    geography: Geography | str = Geography.GLOBAL,
    services: Services | None = None,
) -> MarketSizeEstimate:
    """Estimate the total addressable market for *industry*.

    Never raises for search problems: a missing provider or an empty result
    set comes back as an "Unknown" estimate with low confidence and a message.
    """
    services = services or Services.from_settings()

    geography = Geography(geography)
    narrow_query, broad_query = build_market_queries(industry, geography)
    logger.info("market_size_search", industry=industry, geography=str(geography))

    outcomes = await gather_settled(
        services.search.search(narrow_query, NARROW_QUERY_COUNT),
        services.search.search(broad_query, BROAD_QUERY_COUNT),
    )

    hits: list[SearchHit] = []
    error: str | None = None
    for outcome in outcomes:
        if outcome.ok:
            hits.extend(outcome.value or [])
        elif error is None:
            error = classify_error(outcome.error)  # type: ignore[arg-type]
            logger.warning("market_size_search_failed", industry=industry, error=error)

    hits = dedupe_by_url(hits, lambda h: h.url)
    if not hits:
        return MarketSizeEstimate(confidence=Confidence.LOW, message=error or NO_RESULTS_MESSAGE)

    estimate = assemble_estimate(hits)
    logger.info(
        "market_size_estimated",
        industry=industry,
        low=estimate.tam_estimate.low,
        high=estimate.tam_estimate.high,
        confidence=str(estimate.confidence),
    )
    return estimate
