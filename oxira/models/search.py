"""Search hits and the scored candidates built from them."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class HitSource(StrEnum):
    BRAVE = "brave"
    TAVILY = "tavily"
    CATEGORY = "category"


class SearchHit(BaseModel):
    """A single keyword-search result from any provider."""

    model_config = ConfigDict(frozen=True)

    title: str
    url: str
    snippet: str = ""
    source: HitSource = Field(description="Provider or listing that produced the hit")


class ScoredCandidate(BaseModel):
    """A search hit annotated with its relevance score and bonus tags."""

    model_config = ConfigDict(frozen=True)

    hit: SearchHit
    score: int = Field(ge=0)
    bonuses: tuple[str, ...] = ()
