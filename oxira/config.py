"""Application configuration via pydantic-settings."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; OxiraBot/1.0; +https://github.com/oxira)"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Search providers (at least one is required for web search)
    brave_search_api_key: str = ""
    tavily_api_key: str = ""

    # HTTP behaviour
    search_timeout_seconds: float = 30.0
    fetch_timeout_seconds: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT

    # Retry policy for provider and page-fetch calls
    max_retries: int = 2
    retry_base_delay: float = 1.0

    # Pricing extraction
    max_markdown_length: int = 15_000

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"

    @property
    def has_search_provider(self) -> bool:
        return bool(self.brave_search_api_key or self.tavily_api_key)
