"""API clients for external services.

Each client follows the same pattern:
- Accepts API key(s) and timeouts in __init__
- Exposes an `is_available` property (True when the key is set)
- Uses httpx.AsyncClient per call, wrapped in the transient-error retry policy
- Raises typed errors from oxira.errors instead of returning partial data
"""

from oxira.clients.brave import BraveSearchClient
from oxira.clients.hn_algolia import HNClient, HNStory
from oxira.clients.tavily import TavilyClient
from oxira.clients.web_fetcher import FetchResult, PageFetcher, html_to_markdown

__all__ = [
    "BraveSearchClient",
    "FetchResult",
    "HNClient",
    "HNStory",
    "PageFetcher",
    "TavilyClient",
    "html_to_markdown",
]
