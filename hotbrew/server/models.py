"""Pydantic v2 models for the subscription API."""
from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

MAX_EMAIL_LENGTH = 320
MAX_NAME_LENGTH = 256


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SubscribeRequest(BaseModel):
    """Body of ``POST /api/subscribe``.  Unknown fields are rejected."""
    email: str = ""
    name: str = ""

    model_config = {"extra": "forbid"}


class UserConfig(BaseModel):
    """Preferences handed to ``hotbrew login``."""
    theme: str = "synthwave"
    hn_enabled: bool = True
    hn_max: int = 8
    github_enabled: bool = True
    github_topics: list[str] = Field(default_factory=lambda: ["ai", "llm", "machine-learning"])
    search_terms: list[str] = Field(
        default_factory=lambda: ["Claude Code", "vibe coding", "AI coding"]
    )


class Subscriber(BaseModel):
    """A stored subscriber record."""
    token: str
    email: str = ""
    name: str = ""
    created_at: datetime = Field(default_factory=_now)
    config: UserConfig = Field(default_factory=UserConfig)


class SubscribeResponse(BaseModel):
    success: bool = True
    token: str
    message: str


class NewsletterResponse(BaseModel):
    """Tells the CLI to fetch content from the sources directly."""
    fetch_live: bool = True
    message: str = "Fetch content directly from sources"


class HealthStatus(BaseModel):
    """Health of the subscription server."""
    status: str = Field(default="ok", pattern=r"^(ok|degraded)$")
    time: datetime = Field(default_factory=_now)
    service_name: str
    version: str
    subscribers: int = 0
    uptime_seconds: float = 0.0
