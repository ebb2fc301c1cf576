"""Relevance heuristics that separate product pages from web-search noise.

Raw keyword search for "competitors of X" returns listicles, review
aggregators, forums and development agencies far more often than actual
products. The scores here are deliberately simple additive rules so that
each one can be tested and tuned in isolation.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from oxira.dedupe import extract_domain
from oxira.models.search import HitSource, SearchHit

BASELINE_SCORE = 50
SCORE_THRESHOLD = 30
CATEGORY_BONUS = 15
MULTI_SOURCE_BONUS = 20

CONTENT_DOMAINS = frozenset(
    {
        "reddit.com",
        "medium.com",
        "news.ycombinator.com",
        "quora.com",
        "youtube.com",
        "wikipedia.org",
        "forbes.com",
        "techcrunch.com",
        "linkedin.com",
        "twitter.com",
        "x.com",
        "facebook.com",
        "tiktok.com",
        "instagram.com",
        "pinterest.com",
        "g2.com",
        "capterra.com",
        "trustpilot.com",
        "crunchbase.com",
        "glassdoor.com",
        "yelp.com",
        "tracxn.com",
        "clutch.co",
        "goodfirms.co",
        "sourceforge.net",
    }
)

CONTENT_PATH_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"/blog\b",
        r"/article",
        r"/top-",
        r"/best-",
        r"/category/",
        r"/tag/",
        r"/news/",
        r"/reviews?/",
        r"/comparison",
        r"/vs/",
        r"/resources/",
        r"/guide/",
        r"/faq/",
    )
)

LISTICLE_TITLE_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\btop\s+\d+\b",
        r"\bbest\s+\d+\b",
        r"\bbest\b.*\b(?:software|tools|apps|platforms|solutions)\b",
        r"\d+\s+best\b",
        r"\bhow\s+to\s+build\b",
        r"\bdevelopment\s+company\b",
        r"\bdevelopment\s+services?\b",
        r"\bvs\.?\s+\w",
        r"\balternatives?\s+to\b",
        r"\breviews?\s+of\b",
        r"\bcomparison\b",
    )
)

AGENCY_DOMAIN_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"solutions?$",
        r"agency$",
        r"consulting$",
        r"development$",
        r"developers?$",
        r"services?$",
        r"technologies$",
        r"techno$",
        r"soft$",
        r"infotech$",
    )
)

PRODUCT_PATH_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"/pricing",
        r"/features",
        r"/product",
        r"/plans",
        r"/demo",
        r"/signup",
        r"/register",
        r"/get-?started",
    )
)

FIRST_PERSON_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\bwe offer\b",
        r"\bour (?:platform|product|solution|app|software|tool)\b",
        r"\bsign up\b",
        r"\bstart (?:your |a )?free trial\b",
        r"\bget started\b",
        r"\btry (?:it |us )?free\b",
    )
)

_FORUM_DOMAIN = re.compile(r"forum|community|discuss", re.IGNORECASE)
_MAGAZINE_DOMAIN = re.compile(r"forum|community|discuss|magazine|mag\b", re.IGNORECASE)

_CTA_SIGNAL = re.compile(
    r"sign\s*up|create\s+(?:an?\s+)?account|get\s+started|start\s+(?:your\s+)?free\s+trial|"
    r"request\s+a?\s*demo",
    re.IGNORECASE,
)
_PRICING_SIGNAL = re.compile(
    r"pricing|plans?\s+(?:&|and)\s+pricing|\$\d|free\s+plan|per\s+month|/mo\b", re.IGNORECASE
)
_PRODUCT_VOICE_SIGNAL = re.compile(
    r"\bour (?:platform|product|solution|software|app|tool)\b|"
    r"\bwe (?:help|offer|provide|enable|make)\b",
    re.IGNORECASE,
)
PRODUCT_PAGE_SAMPLE = 3000

NOISE_PATH_PREFIXES = (
    "/blog/",
    "/blog",
    "/resources/",
    "/guide/",
    "/faq/",
    "/article/",
    "/articles/",
    "/top-",
    "/best-",
    "/news/",
    "/comparison",
    "/vs/",
    "/reviews/",
    "/review/",
)

CATEGORY_SKIP_DOMAINS = frozenset(
    {
        "facebook.com",
        "twitter.com",
        "linkedin.com",
        "youtube.com",
        "github.com",
        "instagram.com",
        "tiktok.com",
        "pinterest.com",
        "g2.com",
    }
)
_ASSET_HOST = re.compile(r"^(?:cdn|assets|fonts|analytics|static|media)\.", re.IGNORECASE)
_MARKDOWN_LINK = re.compile(r"\[([^\]]+)\]\((https?://[^)\s]+)\)")
_NAME_SEPARATOR = re.compile(r"\s*[-|–—:].*")

STOP_WORDS = frozenset(
    {
        "a", "an", "the", "for", "and", "or", "of", "in", "to", "that",
        "with", "is", "are", "on", "it", "as", "at", "by", "be", "do",
        "we", "my", "our", "your", "this", "from", "into", "was",
    }
)


def _domain_name(domain: str) -> str:
    return domain.split(".")[0]


def _path_of(url: str) -> str:
    try:
        return urlsplit(url).path
    except ValueError:
        return ""


def is_content_domain(domain: str) -> bool:
    return any(domain == d or domain.endswith(f".{d}") for d in CONTENT_DOMAINS)


def score_result(hit: SearchHit) -> int:
    """Score a search hit for how much it looks like a product homepage.

    Content platforms score 0 outright. Every other rule fires at most once.
    """
    domain = extract_domain(hit.url).lower()
    if is_content_domain(domain):
        return 0

    name = _domain_name(domain)
    path = _path_of(hit.url)
    score = BASELINE_SCORE

    if any(p.search(path) for p in CONTENT_PATH_PATTERNS):
        score -= 20
    if any(p.search(hit.title) for p in LISTICLE_TITLE_PATTERNS):
        score -= 25
    if any(p.search(name) for p in AGENCY_DOMAIN_PATTERNS):
        score -= 25
    if _FORUM_DOMAIN.search(name):
        score -= 30

    if len(name) <= 12:
        score += 5
    if any(p.search(path) for p in PRODUCT_PATH_PATTERNS):
        score += 10
    if any(p.search(hit.snippet) for p in FIRST_PERSON_PATTERNS):
        score += 15
    if len([segment for segment in path.split("/") if segment]) <= 1:
        score += 5

    return max(0, score)


def is_product_page(markdown: str) -> bool:
    """Post-fetch check: at least two of CTA, pricing and product-voice signals."""
    sample = markdown[:PRODUCT_PAGE_SAMPLE]
    signals = sum(
        1
        for pattern in (_CTA_SIGNAL, _PRICING_SIGNAL, _PRODUCT_VOICE_SIGNAL)
        if pattern.search(sample)
    )
    return signals >= 2


def looks_like_product_domain(hostname: str) -> bool:
    clean = hostname.lower().removeprefix("www.")
    if len(clean) >= 20:
        return False
    name = _domain_name(clean)
    if any(p.search(name) for p in AGENCY_DOMAIN_PATTERNS):
        return False
    return not _MAGAZINE_DOMAIN.search(name)


def normalize_product_url(url: str) -> str:
    """Rewrite a content page on a product-looking domain to the domain root.

    Agency, forum and magazine domains keep their full URL.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if not parts.scheme or not parts.netloc or not parts.hostname:
        return url
    path = parts.path.lower()
    has_noise_path = any(prefix in path for prefix in NOISE_PATH_PREFIXES)
    if has_noise_path and looks_like_product_domain(parts.hostname):
        return f"{parts.scheme}://{parts.netloc}"
    return url


def build_search_queries(industry: str, product_type: str | None = None) -> list[str]:
    base = f"{industry} {product_type}" if product_type else industry
    return [
        f"{base} software platform",
        f"{base} competitors alternatives",
        f'"{base}" pricing signup',
    ]


def build_category_query(industry: str) -> str:
    return f"site:g2.com/categories {industry} software"


def is_category_page_url(url: str) -> bool:
    return "g2.com/categories/" in url and "/compare" not in url and "/reviews" not in url


def is_product_url(url: str) -> bool:
    """False for social, code-hosting, directory and asset/CDN links."""
    try:
        hostname = (urlsplit(url).hostname or "").lower()
    except ValueError:
        return False
    if not hostname:
        return False
    if hostname in CATEGORY_SKIP_DOMAINS or hostname.removeprefix("www.") in CATEGORY_SKIP_DOMAINS:
        return False
    return not _ASSET_HOST.match(hostname)


def extract_category_products(markdown: str) -> list[SearchHit]:
    """Product links from a category-listing page, one per domain."""
    products: list[SearchHit] = []
    seen: set[str] = set()
    for match in _MARKDOWN_LINK.finditer(markdown):
        text, url = match.group(1), match.group(2)
        if not is_product_url(url):
            continue
        try:
            parts = urlsplit(url)
        except ValueError:
            continue
        origin = f"{parts.scheme}://{parts.netloc}"
        domain = extract_domain(origin)
        if domain in seen:
            continue
        seen.add(domain)

        name = " ".join(_NAME_SEPARATOR.sub("", text).split())
        if not 2 <= len(name) <= 60:
            continue
        products.append(SearchHit(title=name, url=origin, source=HitSource.CATEGORY))
    return products


def extract_company_name(url: str, title: str = "") -> str:
    """Capitalised first label of the domain, falling back to the title's lead."""
    name = _domain_name(extract_domain(url))
    if name and "/" not in name:
        return name[:1].upper() + name[1:]
    return re.split(r"[|\-–—:]", title)[0].strip() or title


def _meaningful_words(terms: list[str]) -> set[str]:
    words: set[str] = set()
    for term in terms:
        for word in re.findall(r"[a-z0-9]+", term.lower()):
            if len(word) >= 3 and word not in STOP_WORDS:
                words.add(word)
    return words


def _contains_phrase(text: str, phrase: str) -> bool:
    pattern = r"\b" + r"\s+".join(re.escape(w) for w in phrase.split()) + r"\b"
    return re.search(pattern, text, re.IGNORECASE) is not None


def is_relevant_result(text: str, terms: list[str]) -> bool:
    """Whole-word relevance test for community search hits.

    A multi-word term matching as a phrase is enough on its own. Otherwise
    two distinct meaningful words from the terms must appear, so that
    "wash" alone never matches "Washington".
    """
    for term in terms:
        if len(term.split()) > 1 and _contains_phrase(text, term):
            return True
    words = _meaningful_words(terms)
    if not words:
        return False
    matched = sum(1 for word in words if _contains_phrase(text, word))
    return matched >= min(2, len(words))
