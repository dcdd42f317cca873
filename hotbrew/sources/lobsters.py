"""Lobste.rs hottest stories."""
from __future__ import annotations

from datetime import timedelta
from typing import Any

import httpx

from hotbrew.shared.errors import SourceFetchError
from hotbrew.shared.utils import now_utc, parse_rfc3339
from hotbrew.sources.base import Action, Section, Source, SourceConfig, SourceItem, priority_for

HOTTEST_URL = "https://lobste.rs/hottest.json"
MAX_FLAGS = 2


class LobstersSource(Source):
    """Hottest stories, optionally restricted to a set of tags."""

    ttl = timedelta(minutes=15)

    def __init__(self, name: str, tags: list[str] | None = None, icon: str = "") -> None:
        self.name = name
        self.tags = list(tags or [])
        self.icon = icon or "🦞"
        self.endpoint = HOTTEST_URL

    async def fetch(self, client: httpx.AsyncClient, config: SourceConfig) -> Section:
        max_items = config.get_int("max", 10)

        stories = await self._get_json(client, self.endpoint)
        if not isinstance(stories, list):
            raise SourceFetchError(self.name, "unexpected hottest payload")

        wanted = set(self.tags)
        items: list[SourceItem] = []
        for story in stories:
            if len(items) >= max_items:
                break
            if wanted and not wanted.intersection(story.get("tags") or []):
                continue
            if int(story.get("flags") or 0) > MAX_FLAGS:
                continue
            items.append(self._to_item(story))

        return Section(name=self.name, icon=self.icon, priority=40, items=items)

    def _to_item(self, story: dict[str, Any]) -> SourceItem:
        score = int(story.get("score") or 0)
        url = story.get("url", "")
        comments_url = story.get("comments_url", "")
        return SourceItem(
            id=story.get("short_id", ""),
            title=story.get("title", ""),
            subtitle=story.get("description_plain", ""),
            url=url,
            priority=priority_for(score, 30, 15, 5, inclusive=True),
            timestamp=parse_rfc3339(story.get("created_at")) or now_utc(),
            category="tech",
            icon=self.icon,
            actions=[
                Action(key="o", label="open", command=url),
                Action(key="c", label="comments", command=comments_url),
            ],
            metadata={
                "points": score,
                "comments": int(story.get("comment_count") or 0),
                "tags": list(story.get("tags") or []),
                "submitter": story.get("submitter_user", ""),
                "comments_url": comments_url,
                "lobsters_url": story.get("short_id_url", ""),
            },
        )
