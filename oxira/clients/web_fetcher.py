"""Page fetching and HTML-to-markdown conversion.

httpx fetches the page, BeautifulSoup strips non-content elements and the
remaining tree is rendered as lightweight markdown (ATX headings, bullet
lists, absolute links, bold) so the text heuristics can see page structure.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urljoin, urlsplit

import httpx
import structlog
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import Comment, Declaration, Doctype, ProcessingInstruction

from oxira.config import DEFAULT_USER_AGENT
from oxira.errors import FetchError
from oxira.metrics import page_fetches_total
from oxira.retry import RetryExhaustedError, async_with_retry

logger = structlog.get_logger()

PRICING_PATHS = ("/pricing", "/price", "/plans", "/subscription")

_STRIP_TAGS = ["script", "style", "nav", "footer", "header", "aside", "noscript", "svg", "iframe"]
_BLOCK_TAGS = frozenset(
    {"p", "div", "section", "article", "main", "table", "tr", "blockquote", "pre", "form", "dl"}
)
_SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)
_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


@dataclass(frozen=True, slots=True)
class FetchResult:
    url: str
    markdown: str
    title: str | None
    status_code: int


def _render_children(node: Tag, base_url: str) -> str:
    return "".join(_render(child, base_url) for child in node.children)


def _render_list(node: Tag, base_url: str) -> str:
    ordered = node.name == "ol"
    # Items may sit inside wrapper elements; nested lists own their own items.
    items = [li for li in node.find_all("li") if li.find_parent(["ul", "ol"]) is node]
    lines: list[str] = []
    for index, item in enumerate(items, start=1):
        text = _render_children(item, base_url).strip()
        if not text:
            continue
        marker = f"{index}." if ordered else "-"
        lines.append(f"{marker} {text}")
    return "\n\n" + "\n".join(lines) + "\n\n"


def _render(node: object, base_url: str) -> str:
    if isinstance(node, _SKIPPED_STRINGS):
        return ""
    if isinstance(node, NavigableString):
        return re.sub(r"\s+", " ", str(node))
    if not isinstance(node, Tag):
        return ""

    name = node.name
    if name in ("h1", "h2", "h3", "h4", "h5", "h6"):
        text = " ".join(_render_children(node, base_url).split())
        return f"\n\n{'#' * int(name[1])} {text}\n\n" if text else ""
    if name in ("ul", "ol"):
        return _render_list(node, base_url)
    if name == "li":
        return f"\n- {_render_children(node, base_url).strip()}\n"
    if name == "br":
        return "\n"
    if name in ("strong", "b"):
        text = _render_children(node, base_url).strip()
        return f"**{text}**" if text else ""
    if name == "a":
        text = " ".join(_render_children(node, base_url).split())
        href = node.get("href")
        if not text or not isinstance(href, str):
            return text
        absolute = urljoin(base_url, href.strip())
        if urlsplit(absolute).scheme not in ("http", "https"):
            return text
        return f"[{text}]({absolute})"
    if name in _BLOCK_TAGS:
        return f"\n\n{_render_children(node, base_url)}\n\n"
    return _render_children(node, base_url)


def html_to_markdown(html: str, base_url: str = "") -> tuple[str, str | None]:
    """Convert an HTML document to markdown. Returns ``(markdown, title)``."""
    soup = BeautifulSoup(html, "html.parser")

    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else None

    for tag in soup(_STRIP_TAGS + ["title", "head"]):
        tag.decompose()

    root = soup.body or soup
    rendered = _render_children(root, base_url)

    lines = [line.strip() for line in rendered.splitlines()]
    markdown = re.sub(r"\n{3,}", "\n\n", "\n".join(lines)).strip()
    return markdown, title or None


def is_pricing_url(url: str) -> bool:
    lowered = url.lower()
    return any(path in lowered for path in PRICING_PATHS) or "price" in lowered


class PageFetcher:
    """Fetches pages with a bounded timeout and a descriptive user agent."""

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        max_retries: int = 2,
        base_delay: float = 1.0,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.max_retries = max_retries
        self.base_delay = base_delay

    async def _get(self, url: str) -> FetchResult:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent, "Accept": _ACCEPT},
            ) as client:
                resp = await client.get(url)
        except httpx.HTTPError:
            page_fetches_total.labels(status="error").inc()
            raise
        if resp.is_error:
            page_fetches_total.labels(status="error").inc()
            raise FetchError(url, resp.status_code, resp.reason_phrase)
        page_fetches_total.labels(status="ok").inc()
        markdown, title = html_to_markdown(resp.text, base_url=str(resp.url))
        return FetchResult(url=url, markdown=markdown, title=title, status_code=resp.status_code)

    async def fetch_as_markdown(self, url: str, max_retries: int | None = None) -> FetchResult:
        """Fetch *url* and convert it to markdown.

        Raises:
            FetchError: Non-success HTTP status.
            RetryExhaustedError: Transient failures outlasted the retry budget.
        """
        logger.debug("page_fetch", url=url)
        return await async_with_retry(
            lambda: self._get(url),
            max_retries=self.max_retries if max_retries is None else max_retries,
            base_delay=self.base_delay,
            fn_name="page_fetch",
        )

    async def fetch_pricing_page(self, url: str) -> FetchResult:
        """Fetch the pricing page for a site.

        A URL that already looks pricing-related is fetched as-is. Otherwise
        the common pricing paths on the site's origin are probed in order,
        falling back to the original URL.
        """
        if is_pricing_url(url):
            return await self.fetch_as_markdown(url)

        parts = urlsplit(url)
        origin = f"{parts.scheme}://{parts.netloc}"
        for path in PRICING_PATHS:
            candidate = f"{origin}{path}"
            try:
                result = await self.fetch_as_markdown(candidate, max_retries=0)
            except (FetchError, RetryExhaustedError, httpx.HTTPError) as exc:
                logger.debug("pricing_path_miss", url=candidate, error=str(exc))
                continue
            if result.status_code == 200:
                return result

        return await self.fetch_as_markdown(url)
