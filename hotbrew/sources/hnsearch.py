"""Topic searches over Hacker News using the Algolia API."""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

import httpx

from hotbrew.shared.errors import SourceFetchError
from hotbrew.shared.utils import now_utc, parse_rfc3339
from hotbrew.sources.base import Action, Section, Source, SourceConfig, SourceItem, priority_for

logger = logging.getLogger(__name__)

SEARCH_URL = "https://hn.algolia.com/api/v1/search"
HN_ITEM_PAGE = "https://news.ycombinator.com/item?id={id}"


class HNSearchSource(Source):
    """Stories matching any of a set of queries, ranked by points."""

    ttl = timedelta(minutes=15)

    def __init__(self, name: str, queries: list[str], icon: str = "") -> None:
        self.name = name
        self.queries = list(queries)
        self.icon = icon or "🔍"

    async def fetch(self, client: httpx.AsyncClient, config: SourceConfig) -> Section:
        max_items = config.get_int("max", 5)

        seen: set[str] = set()
        items: list[SourceItem] = []
        for query in self.queries:
            try:
                hits = await self._search(client, query, max_items)
            except SourceFetchError as exc:
                logger.warning("HN search %r failed: %s", query, exc)
                continue

            for hit in hits:
                object_id = str(hit.get("objectID", ""))
                if object_id in seen:
                    continue
                seen.add(object_id)
                items.append(self._to_item(hit, query))

        items.sort(key=lambda item: item.metadata.get("points", 0), reverse=True)
        return Section(name=self.name, icon=self.icon, priority=20, items=items[:max_items])

    async def _search(self, client: httpx.AsyncClient, query: str, limit: int) -> list[dict[str, Any]]:
        params = {
            "query": query,
            "tags": "story",
            "hitsPerPage": str(limit * 2),
            "numericFilters": "points>10",
        }
        data = await self._get_json(client, SEARCH_URL, params=params)
        hits = data.get("hits", []) if isinstance(data, dict) else []
        return [hit for hit in hits if str(hit.get("title") or "").strip()]

    def _to_item(self, hit: dict[str, Any], query: str) -> SourceItem:
        object_id = str(hit.get("objectID", ""))
        points = int(hit.get("points") or 0)
        comments = int(hit.get("num_comments") or 0)
        hn_url = HN_ITEM_PAGE.format(id=object_id)
        url = hit.get("url") or hn_url

        return SourceItem(
            id=f"hns-{object_id}",
            title=hit.get("title", ""),
            subtitle=f"{points} points by {hit.get('author', '')} • {comments} comments",
            url=url,
            timestamp=parse_rfc3339(hit.get("created_at")) or now_utc(),
            priority=priority_for(points, 200, 100, 30),
            category="hackernews",
            icon=self.icon,
            actions=[
                Action(key="o", label="open article", command=url),
                Action(key="c", label="open comments", command=hn_url),
            ],
            metadata={
                "points": points,
                "comments": comments,
                "hn_url": hn_url,
                "query": query,
            },
        )
