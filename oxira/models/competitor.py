"""Models for competitor discovery."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Competitor(BaseModel):
    """A product company found for an industry. One per canonical domain."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    description: str = ""
    tagline: str | None = None
    features: list[str] | None = Field(default=None, max_length=5)
