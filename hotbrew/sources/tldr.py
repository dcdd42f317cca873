"""TLDR newsletters, read through their RSS feeds."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from hotbrew.sources.base import Priority
from hotbrew.sources.rss import FeedEntry, RSSSource


@dataclass(frozen=True)
class TLDRFeed:
    name: str
    url: str
    icon: str


AVAILABLE_FEEDS: dict[str, TLDRFeed] = {
    "ai": TLDRFeed(name="TLDR AI", url="https://tldr.tech/api/rss/ai", icon="🧠"),
    "tech": TLDRFeed(name="TLDR Tech", url="https://tldr.tech/api/rss/tech", icon="💻"),
    "webdev": TLDRFeed(name="TLDR Web Dev", url="https://tldr.tech/api/rss/webdev", icon="🌐"),
}


class TLDRSource(RSSSource):
    """A TLDR newsletter; fresh issues (under six hours) rank high."""

    ttl = timedelta(minutes=30)
    default_max = 8
    category = "newsletter"
    section_priority = 35

    @classmethod
    def for_feed(cls, key: str) -> "TLDRSource":
        feed = AVAILABLE_FEEDS[key]
        return cls(feed.name, feed.url, feed.icon)

    def priority_for_age(self, age: timedelta) -> Priority:
        return Priority.HIGH if age < timedelta(hours=6) else Priority.MEDIUM

    def metadata_for(self, entry: FeedEntry) -> dict:
        return {"via": "TLDR"}
