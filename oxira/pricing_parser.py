"""Structured pricing extraction from pricing-page markdown.

Tiers are found by segmenting the page on headings (ATX ``#`` headings or
bold-only lines that are not themselves a price) and keeping the sections
that look like a priced plan.
The same markdown also yields the free-text hints attached to every
extraction result.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from oxira.models.pricing import BillingPeriod, PricingModel, PricingTier, StructuredPricing

MAX_TIER_FEATURES = 5
MAX_HEADING_LENGTH = 60
TRUNCATION_MARKER = "\n\n[Content truncated...]"

_ATX_HEADING = re.compile(r"^#{1,6}\s+(.+?)\s*#*\s*$")
_BOLD_HEADING = re.compile(r"^\*\*([^*]+)\*\*:?$")

_TIER_NAME = re.compile(
    r"\b(?:free|basic|starter|standard|pro|professional|teams?|business|enterprise|"
    r"plus|premium|growth|scale|personal|individual|hobby|startup|essentials?|"
    r"advanced|ultimate|unlimited|lite|custom|pay\s+as\s+you\s+go)\b",
    re.IGNORECASE,
)
_NON_TIER_HEADING = re.compile(
    r"^(?:pricing|plans?|plans\s+(?:and|&)\s+pricing|pricing\s+plans|compare\s+plans|"
    r"faqs?|frequently\s+asked\s+questions)$",
    re.IGNORECASE,
)
_PLAN_SUFFIX = re.compile(r"\s+plan$", re.IGNORECASE)

_PRICE = re.compile(
    r"\$\s?(\d[\d,]*(?:\.\d+)?)"
    r"(?:[ \t]*(?:/[ \t]*|per[ \t]+)(?:mo|month|yr|year|annum|user|seat|member)\b)*",
    re.IGNORECASE,
)
_CONTACT_SALES = re.compile(
    r"\b(?:contact\s+(?:us|sales)|custom\s+(?:pricing|quote|plan|price)|"
    r"request\s+(?:a\s+)?(?:quote|pricing|demo)|talk\s+to\s+(?:sales|us)|"
    r"get\s+a\s+quote|let'?s\s+talk)\b",
    re.IGNORECASE,
)
_ANNUAL_MARKER = re.compile(r"\b(?:yr|year|yearly|annum|annual(?:ly)?)\b", re.IGNORECASE)
_MONTHLY_MARKER = re.compile(r"\b(?:mo|month|monthly|user|seat|member)\b", re.IGNORECASE)
_BULLET = re.compile(r"^\s*(?:[-*•+]|\d+[.)])\s+(.+?)\s*$")

_PER_USER = re.compile(r"\bper\s+(?:user|seat|member)\b|/\s*(?:user|seat|member)\b", re.IGNORECASE)
_USAGE_BASED = re.compile(r"\b(?:usage|metered|pay\s+as\s+you\s+go)\b", re.IGNORECASE)
_SUBSCRIPTION = re.compile(r"\b(?:subscribe|subscription|membership)\b", re.IGNORECASE)

# Fallback hints, used when no tier could be parsed.
_HINT_MONTHLY = re.compile(r"\$[\d,]+(?:\.\d{2})?\s*/\s*(?:mo|month)", re.IGNORECASE)
_HINT_ANNUAL = re.compile(r"\$[\d,]+(?:\.\d{2})?\s*/\s*(?:yr|year|annual)", re.IGNORECASE)
_HINT_PER_SEAT = re.compile(r"per\s+(?:user|seat|member)", re.IGNORECASE)
_HINT_PER_PROJECT = re.compile(r"per\s+(?:project|workspace|team)", re.IGNORECASE)
_HINT_PLAN_HEADING = re.compile(
    r"#{1,3}\s*(?:free|basic|starter|pro|professional|team|business|enterprise|plus|premium)",
    re.IGNORECASE,
)


@dataclass(slots=True)
class _Section:
    heading: str
    body: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.body)


def _heading_of(line: str) -> str | None:
    stripped = line.strip()
    match = _ATX_HEADING.match(stripped)
    if match is None:
        match = _BOLD_HEADING.match(stripped)
        # A bold amount ("**$29**") is a pricing-card price, not a new tier.
        if match is None or _PRICE.search(match.group(1)):
            return None
    return match.group(1).strip().strip("*").strip()


def _split_sections(markdown: str) -> list[_Section]:
    sections: list[_Section] = []
    current: _Section | None = None
    for line in markdown.splitlines():
        heading = _heading_of(line)
        if heading is not None:
            current = _Section(heading=heading)
            sections.append(current)
        elif current is not None:
            current.body.append(line)
    return sections


def _is_tier_section(section: _Section) -> bool:
    heading = section.heading
    if not heading or len(heading) > MAX_HEADING_LENGTH:
        return False
    if _NON_TIER_HEADING.match(heading):
        return False
    if _TIER_NAME.search(heading):
        return True
    body = section.text
    return bool(_PRICE.search(body) or _CONTACT_SALES.search(body))


def _price_amount(token: re.Match[str]) -> float | None:
    try:
        return float(token.group(1).replace(",", ""))
    except ValueError:
        return None


def _billing_period(
    name: str, price_token: re.Match[str] | None, body: str
) -> BillingPeriod | None:
    if price_token is not None:
        if _price_amount(price_token) == 0:
            return BillingPeriod.FREE
        token = price_token.group(0)
        if _ANNUAL_MARKER.search(token):
            return BillingPeriod.ANNUAL
        if _MONTHLY_MARKER.search(token):
            return BillingPeriod.MONTHLY
        if _ANNUAL_MARKER.search(body):
            return BillingPeriod.ANNUAL
        if _MONTHLY_MARKER.search(body):
            return BillingPeriod.MONTHLY
        return None
    if re.search(r"\bfree\b", name, re.IGNORECASE):
        return BillingPeriod.FREE
    if _CONTACT_SALES.search(body):
        return BillingPeriod.CUSTOM
    return None


def _tier_features(body_lines: list[str]) -> list[str] | None:
    features: list[str] = []
    for line in body_lines:
        match = _BULLET.match(line)
        if match:
            features.append(match.group(1).strip())
            if len(features) >= MAX_TIER_FEATURES:
                break
    return features or None


def _tier_from_section(section: _Section) -> PricingTier:
    name = _PLAN_SUFFIX.sub("", section.heading).strip() or section.heading
    body = section.text
    price_token = _PRICE.search(body)
    billing = _billing_period(name, price_token, body)
    if price_token is not None:
        price: str | None = price_token.group(0).strip()
    elif billing is BillingPeriod.FREE:
        price = "Free"
    elif billing is BillingPeriod.CUSTOM:
        price = "Custom"
    else:
        price = None
    return PricingTier(
        name=name,
        price=price,
        billing_period=billing,
        features=_tier_features(section.body),
    )


def _is_free_tier(tier: PricingTier) -> bool:
    if tier.billing_period is BillingPeriod.FREE:
        return True
    if tier.price is None:
        return False
    match = _PRICE.search(tier.price)
    return match is not None and _price_amount(match) == 0


def _pricing_model(markdown: str, has_price: bool) -> PricingModel | None:
    if _PER_USER.search(markdown):
        return PricingModel.PER_USER
    if _USAGE_BASED.search(markdown):
        return PricingModel.USAGE_BASED
    if _SUBSCRIPTION.search(markdown):
        return PricingModel.SUBSCRIPTION
    if has_price:
        return PricingModel.FLAT_RATE
    return None


def extract_structured_pricing(markdown: str) -> StructuredPricing:
    """Parse pricing tiers and document-level pricing flags out of *markdown*."""
    tiers = [_tier_from_section(s) for s in _split_sections(markdown) if _is_tier_section(s)]

    first_price = _PRICE.search(markdown)
    if not tiers and first_price is not None:
        amount = _price_amount(first_price)
        tiers = [
            PricingTier(
                name="Default",
                price=first_price.group(0).strip(),
                billing_period=_billing_period("Default", first_price, markdown)
                if amount != 0
                else BillingPeriod.FREE,
            )
        ]

    has_price = first_price is not None
    return StructuredPricing(
        tiers=tiers,
        has_free_tier=any(_is_free_tier(t) for t in tiers),
        has_enterprise=any(t.name.strip().lower() == "enterprise" for t in tiers),
        pricing_model=_pricing_model(markdown, has_price),
        currency="USD" if has_price else None,
    )


def _describe_tier(tier: PricingTier) -> str:
    if tier.price is None:
        return tier.name
    return f"{tier.name} ({tier.price})"


def generate_extraction_hints(
    markdown: str,
    competitor_name: str | None = None,
    structured: StructuredPricing | None = None,
) -> str:
    """Human-readable notes on what a pricing page contains, joined by ". "."""
    hints: list[str] = []

    if structured is not None and structured.tiers:
        summary = ", ".join(_describe_tier(t) for t in structured.tiers)
        hints.append(f"Extracted {len(structured.tiers)} pricing tiers: {summary}")
        if structured.has_free_tier:
            hints.append("Has a free tier")
        if structured.has_enterprise:
            hints.append("Has an enterprise tier")
        if structured.pricing_model is not None:
            hints.append(f"Pricing model: {structured.pricing_model}")
        if competitor_name:
            hints.append(f"Source: {competitor_name}")
        return ". ".join(hints)

    lowered = markdown.lower()
    if "free" in lowered:
        hints.append("Has a free tier or free trial")
    if "enterprise" in lowered:
        hints.append("Has enterprise/custom pricing")
    if _HINT_MONTHLY.search(markdown):
        hints.append("Contains monthly pricing")
    if _HINT_ANNUAL.search(markdown):
        hints.append("Contains annual pricing")
    if _HINT_PER_SEAT.search(markdown):
        hints.append("Per-user/seat pricing model")
    if _HINT_PER_PROJECT.search(markdown):
        hints.append("Per-project/workspace pricing model")
    plan_headings = _HINT_PLAN_HEADING.findall(markdown)
    if plan_headings:
        hints.append(f"{len(plan_headings)} pricing tiers detected")

    hints.append("Pricing information extracted as markdown")
    if competitor_name:
        hints.append(f"Source: {competitor_name}")
    hints.append("Parse the markdown content to extract specific prices and features")
    return ". ".join(hints)


def truncate_markdown(markdown: str, max_length: int = 15_000) -> str:
    """Cap *markdown* at *max_length*, preferring to cut on a late newline."""
    if len(markdown) <= max_length:
        return markdown
    truncated = markdown[:max_length]
    last_newline = truncated.rfind("\n")
    if last_newline > max_length * 0.8:
        return truncated[:last_newline] + TRUNCATION_MARKER
    return truncated + TRUNCATION_MARKER
