"""Canonical domain/URL keys and the two deduplication strategies.

Competitor discovery dedupes by domain: one company, one homepage.
Communities and market-size sources dedupe by URL: two subreddits on
reddit.com are different communities.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar
from urllib.parse import urlsplit

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

T = TypeVar("T")


def extract_domain(url: str) -> str:
    """Hostname without a leading ``www.``; the input itself when unparseable."""
    try:
        hostname = urlsplit(url).hostname
    except ValueError:
        return url
    if not hostname:
        return url
    return hostname.removeprefix("www.")


def canonical_url(url: str) -> str:
    """Lower-cased URL with one trailing slash removed."""
    return url.lower().removesuffix("/")


def _dedupe(items: Iterable[T], key: Callable[[T], str]) -> list[T]:
    seen: set[str] = set()
    unique: list[T] = []
    for item in items:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        unique.append(item)
    return unique


def dedupe_by_domain(items: Iterable[T], url_of: Callable[[T], str]) -> list[T]:
    """Keep the first item per canonical domain, preserving order."""
    return _dedupe(items, lambda item: extract_domain(url_of(item)))


def dedupe_by_url(items: Iterable[T], url_of: Callable[[T], str]) -> list[T]:
    """Keep the first item per canonical URL, preserving order."""
    return _dedupe(items, lambda item: canonical_url(url_of(item)))
