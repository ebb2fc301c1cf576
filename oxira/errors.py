"""Error taxonomy and human-readable error classification."""

from __future__ import annotations

import httpx

NO_PROVIDER_MESSAGE = "No search provider configured. Set BRAVE_SEARCH_API_KEY or TAVILY_API_KEY."


class OxiraError(Exception):
    """Base class for all Oxira errors."""


class ConfigurationError(OxiraError):
    """A required credential or setting is missing. Never retried."""


class ProviderError(OxiraError):
    """A search provider answered with a non-success HTTP status."""

    def __init__(self, provider: str, status_code: int, detail: str = "") -> None:
        self.provider = provider
        self.status_code = status_code
        message = f"{provider} API error: {status_code}"
        if detail:
            message = f"{message} - {detail[:200]}"
        super().__init__(message)


class SearchError(OxiraError):
    """Every configured search provider failed for one query."""

    def __init__(self, query: str, errors: list[str]) -> None:
        self.query = query
        self.errors = errors
        super().__init__(f"All search providers failed for '{query}': {'; '.join(errors)}")


class FetchError(OxiraError):
    """A page fetch answered with a non-success HTTP status."""

    def __init__(self, url: str, status_code: int, reason: str = "") -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(f"HTTP error: {status_code} {reason}".rstrip())


def classify_error(exc: BaseException) -> str:
    """Turn an exception into a message fit for a report or a CLI error payload."""
    message = str(exc).strip()
    if isinstance(exc, httpx.TimeoutException):
        return f"Request timed out{': ' + message if message else ''}"
    if isinstance(exc, httpx.ConnectError):
        return f"Could not connect{': ' + message if message else ''}"
    if not message:
        return type(exc).__name__
    return message
