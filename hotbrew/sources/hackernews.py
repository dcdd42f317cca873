"""Hacker News top stories via the Firebase API."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from hotbrew.shared.errors import SourceFetchError
from hotbrew.sources.base import Action, Section, Source, SourceConfig, SourceItem, priority_for

logger = logging.getLogger(__name__)

BASE_URL = "https://hacker-news.firebaseio.com/v0"
TOP_STORIES_URL = f"{BASE_URL}/topstories.json"
ITEM_URL = BASE_URL + "/item/{id}.json"
HN_ITEM_PAGE = "https://news.ycombinator.com/item?id={id}"


class HackerNewsSource(Source):
    """Top stories from news.ycombinator.com."""

    name = "Hacker News"
    icon = "🔶"
    ttl = timedelta(minutes=10)

    async def fetch(self, client: httpx.AsyncClient, config: SourceConfig) -> Section:
        max_items = config.get_int("max", 8)

        ids = await self._get_json(client, TOP_STORIES_URL)
        if not isinstance(ids, list):
            raise SourceFetchError(self.name, "unexpected top stories payload")
        ids = ids[:max_items]

        stories = await asyncio.gather(*(self._fetch_story(client, sid) for sid in ids))

        items = [self._to_item(story) for story in stories if story]
        return Section(name=self.name, icon=self.icon, priority=30, items=items)

    async def _fetch_story(self, client: httpx.AsyncClient, story_id: int) -> dict[str, Any] | None:
        try:
            story = await self._get_json(client, ITEM_URL.format(id=story_id))
        except SourceFetchError as exc:
            logger.warning("Hacker News story %s skipped: %s", story_id, exc)
            return None
        return story if isinstance(story, dict) else None

    def _to_item(self, story: dict[str, Any]) -> SourceItem:
        story_id = story.get("id", 0)
        score = int(story.get("score") or 0)
        comments = int(story.get("descendants") or 0)
        author = story.get("by", "")
        hn_url = HN_ITEM_PAGE.format(id=story_id)
        url = story.get("url") or hn_url
        posted = int(story.get("time") or 0)

        return SourceItem(
            id=f"hn-{story_id}",
            title=story.get("title", ""),
            subtitle=f"{score} points by {author} • {comments} comments",
            url=url,
            timestamp=datetime.fromtimestamp(posted, tz=timezone.utc) if posted else None,
            priority=priority_for(score, 500, 200, 50),
            category="hackernews",
            icon=self.icon,
            actions=[
                Action(key="o", label="open article", command=url),
                Action(key="c", label="open comments", command=hn_url),
            ],
            metadata={
                "score": score,
                "points": score,
                "comments": comments,
                "author": author,
                "hn_url": hn_url,
            },
        )
