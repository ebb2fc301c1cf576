"""Pricing-page extraction. Fetch failures become data, never exceptions."""

from __future__ import annotations

import structlog

from oxira.errors import classify_error
from oxira.models.pricing import PricingExtraction
from oxira.pricing_parser import (
    extract_structured_pricing,
    generate_extraction_hints,
    truncate_markdown,
)
from oxira.search import Services

logger = structlog.get_logger()

FETCH_FAILED_HINT = (
    "Could not fetch the pricing page. The URL may be incorrect, the site may be down, "
    "or it may be blocking automated requests"
)


async def extract_pricing(
    url: str,
    competitor_name: str | None = None,
    services: Services | None = None,
) -> PricingExtraction:
    """Fetch the pricing page for *url* and extract tiers and hints.

    On any fetch failure the returned object carries the reason in both
    ``markdown_content`` and ``extraction_hints``.
    """
    services = services or Services.from_settings()
    try:
        page = await services.fetcher.fetch_pricing_page(url)
    except Exception as exc:
        reason = classify_error(exc)
        logger.warning("pricing_fetch_failed", url=url, error=reason)
        return PricingExtraction(
            url=url,
            markdown_content=f"Failed to fetch pricing page: {reason}",
            extraction_hints=f"{FETCH_FAILED_HINT}. Reason: {reason}",
        )

    # Tiers come from the full page; only the returned text is truncated.
    structured = extract_structured_pricing(page.markdown)
    markdown = truncate_markdown(page.markdown, services.settings.max_markdown_length)
    hints = generate_extraction_hints(page.markdown, competitor_name, structured)
    logger.info("pricing_extracted", url=page.url, tiers=len(structured.tiers))
    return PricingExtraction(
        url=page.url,
        markdown_content=markdown,
        extraction_hints=hints,
        structured_pricing=structured,
    )
