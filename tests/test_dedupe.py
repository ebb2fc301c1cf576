"""Tests for canonical URL keys and deduplication."""

from __future__ import annotations

from conftest import make_hit

from oxira.dedupe import canonical_url, dedupe_by_domain, dedupe_by_url, extract_domain


class TestExtractDomain:
    def test_strips_www(self) -> None:
        assert extract_domain("https://www.Acme.com/pricing") == "acme.com"

    def test_keeps_other_subdomains(self) -> None:
        assert extract_domain("https://app.acme.com") == "app.acme.com"

    def test_unparseable_returns_input(self) -> None:
        assert extract_domain("not a url") == "not a url"


class TestDedupe:
    def test_by_domain_keeps_first(self) -> None:
        hits = [
            make_hit("https://acme.com/pricing", title="first"),
            make_hit("https://www.acme.com/", title="second"),
            make_hit("https://beta.io", title="third"),
        ]
        assert [h.title for h in dedupe_by_domain(hits, lambda h: h.url)] == ["first", "third"]

    def test_by_url_keeps_distinct_paths_on_one_domain(self) -> None:
        urls = ["https://reddit.com/r/saas", "https://reddit.com/r/startups"]
        assert dedupe_by_url(urls, lambda u: u) == urls

    def test_by_url_collapses_case_and_trailing_slash(self) -> None:
        urls = [
            "https://reddit.com/r/saas",
            "https://reddit.com/r/saas/",
            "https://Reddit.com/r/SaaS",
        ]
        assert dedupe_by_url(urls, lambda u: u) == ["https://reddit.com/r/saas"]

    def test_canonical_url(self) -> None:
        assert canonical_url("https://Example.com/Path/") == "https://example.com/path"
