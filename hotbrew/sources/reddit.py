"""Hot posts from one or more subreddits."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from hotbrew.shared.errors import SourceFetchError
from hotbrew.shared.utils import truncate
from hotbrew.sources.base import Action, Section, Source, SourceConfig, SourceItem, priority_for

logger = logging.getLogger(__name__)

LISTING_URL = "https://www.reddit.com/r/{subreddit}/{sort}.json"
REDDIT_BASE = "https://www.reddit.com"
# Reddit blocks generic user agents
REDDIT_USER_AGENT = "hotbrew:v1.0 (terminal-rss)"
MIN_SCORE = 2


class RedditSource(Source):
    """Hot posts, split evenly across the configured subreddits."""

    ttl = timedelta(minutes=15)

    def __init__(self, name: str, subreddits: list[str], icon: str = "", sort: str = "hot") -> None:
        self.name = name
        self.subreddits = list(subreddits)
        self.icon = icon or "🤖"
        self.sort = sort

    async def fetch(self, client: httpx.AsyncClient, config: SourceConfig) -> Section:
        max_items = config.get_int("max", 8)
        per_sub = max_items
        if len(self.subreddits) > 1:
            per_sub = max_items // len(self.subreddits) + 1

        items: list[SourceItem] = []
        for subreddit in self.subreddits:
            try:
                items.extend(await self._fetch_subreddit(client, subreddit, per_sub))
            except SourceFetchError as exc:
                logger.warning("Skipping r/%s: %s", subreddit, exc)

        return Section(name=self.name, icon=self.icon, priority=45, items=items[:max_items])

    async def _fetch_subreddit(self, client: httpx.AsyncClient, subreddit: str, limit: int) -> list[SourceItem]:
        listing = await self._get_json(
            client,
            LISTING_URL.format(subreddit=subreddit, sort=self.sort),
            params={"limit": str(limit), "raw_json": "1"},
            headers={"User-Agent": REDDIT_USER_AGENT},
        )
        children = ((listing or {}).get("data") or {}).get("children") or []

        items: list[SourceItem] = []
        for child in children:
            post = child.get("data") or {}
            if int(post.get("score") or 0) < MIN_SCORE:
                continue
            items.append(self._to_item(post))
        return items

    def _to_item(self, post: dict[str, Any]) -> SourceItem:
        score = int(post.get("score") or 0)
        comments_url = REDDIT_BASE + post.get("permalink", "")
        url = comments_url if post.get("is_self") else post.get("url", "")

        tags = [post.get("subreddit", "")]
        if post.get("link_flair_text"):
            tags.append(post["link_flair_text"])

        created = float(post.get("created_utc") or 0)
        return SourceItem(
            id=post.get("id", ""),
            title=post.get("title", ""),
            subtitle=truncate(post.get("selftext") or "", 300),
            url=url,
            priority=priority_for(score, 500, 100, 20, inclusive=True),
            timestamp=datetime.fromtimestamp(created, tz=timezone.utc) if created else None,
            category="discussion",
            icon=self.icon,
            actions=[
                Action(key="o", label="open", command=url),
                Action(key="c", label="comments", command=comments_url),
            ],
            metadata={
                "points": score,
                "comments": int(post.get("num_comments") or 0),
                "author": post.get("author", ""),
                "subreddit": post.get("subreddit", ""),
                "domain": post.get("domain", ""),
                "tags": tags,
                "comments_url": comments_url,
            },
        )
