"""Models for community discovery."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class Platform(StrEnum):
    HACKER_NEWS = "HackerNews"
    REDDIT = "Reddit"
    DISCORD = "Discord"
    FORUM = "Forum"


class Community(BaseModel):
    model_config = ConfigDict(frozen=True)

    platform: Platform
    name: str
    url: str
    description: str | None = None
    member_count: str | None = None
