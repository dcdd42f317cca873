"""Generic RSS 2.0 / Atom feed source.

Parsing uses :mod:`xml.etree.ElementTree`; both ``<rss><channel><item>``
and Atom ``<feed><entry>`` documents are understood.
"""
from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime

import httpx

from hotbrew.shared.errors import SourceFetchError
from hotbrew.shared.utils import now_utc, parse_rfc3339
from hotbrew.sources.base import Action, Priority, Section, Source, SourceConfig, SourceItem

ATOM_NS = "{http://www.w3.org/2005/Atom}"
_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")


class FeedParseError(Exception):
    """Raised when a feed document cannot be parsed."""


@dataclass
class FeedEntry:
    """One ``<item>`` or ``<entry>`` as found in the feed."""

    title: str
    link: str
    description: str
    guid: str
    published: datetime | None


def normalize_text(text: str) -> str:
    """Strip HTML tags and collapse whitespace."""
    text = _TAG_RE.sub(" ", text)
    return _SPACE_RE.sub(" ", text).strip()


def parse_feed_date(value: str | None) -> datetime | None:
    """Parse RFC 2822 (RSS) or RFC 3339 (Atom) dates."""
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return parse_rfc3339(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _text(element: ET.Element, tag: str) -> str:
    child = element.find(tag)
    if child is not None and child.text:
        return child.text.strip()
    return ""


def _atom_link(entry: ET.Element) -> str:
    fallback = ""
    for link in entry.findall(f"{ATOM_NS}link"):
        href = link.get("href", "")
        rel = link.get("rel", "alternate")
        if rel == "alternate" and href:
            return href
        fallback = fallback or href
    return fallback


def parse_feed(content: str | bytes) -> list[FeedEntry]:
    """Parse an RSS or Atom document into entries.

    Raises:
        FeedParseError: If the XML is malformed or is neither RSS nor Atom.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise FeedParseError(f"Invalid XML: {e}") from e

    if root.tag == f"{ATOM_NS}feed":
        entries = []
        for entry in root.findall(f"{ATOM_NS}entry"):
            summary = _text(entry, f"{ATOM_NS}summary") or _text(entry, f"{ATOM_NS}content")
            entries.append(
                FeedEntry(
                    title=normalize_text(_text(entry, f"{ATOM_NS}title")),
                    link=_atom_link(entry),
                    description=normalize_text(summary),
                    guid=_text(entry, f"{ATOM_NS}id"),
                    published=parse_feed_date(
                        _text(entry, f"{ATOM_NS}published") or _text(entry, f"{ATOM_NS}updated")
                    ),
                )
            )
        return entries

    channel = root.find("channel")
    if channel is not None:
        items = channel.findall("item")
    elif root.tag == "rss":
        items = root.findall(".//item")
    else:
        raise FeedParseError(f"Unsupported feed root <{root.tag}>")

    return [
        FeedEntry(
            title=normalize_text(_text(item, "title")),
            link=_text(item, "link"),
            description=normalize_text(_text(item, "description")),
            guid=_text(item, "guid"),
            published=parse_feed_date(_text(item, "pubDate")),
        )
        for item in items
    ]


class RSSSource(Source):
    """Any RSS or Atom feed, prioritised by recency."""

    ttl = timedelta(minutes=15)
    default_max = 5
    category = "news"
    section_priority = 50

    def __init__(self, name: str, url: str, icon: str = "") -> None:
        self.name = name
        self.url = url
        self.icon = icon or "📰"

    async def fetch(self, client: httpx.AsyncClient, config: SourceConfig) -> Section:
        max_items = config.get_int("max", self.default_max)
        response = await self._get(client, self.url)
        try:
            entries = parse_feed(response.content)
        except FeedParseError as exc:
            raise SourceFetchError(self.name, str(exc)) from exc

        now = now_utc()
        items = [self._to_item(entry, now) for entry in entries[:max_items]]
        return Section(name=self.name, icon=self.icon, priority=self.section_priority, items=items)

    def priority_for_age(self, age: timedelta) -> Priority:
        if age < timedelta(hours=1):
            return Priority.HIGH
        if age < timedelta(hours=6):
            return Priority.MEDIUM
        return Priority.LOW

    def metadata_for(self, entry: FeedEntry) -> dict:
        return {}

    def _to_item(self, entry: FeedEntry, now: datetime) -> SourceItem:
        timestamp = entry.published or now
        return SourceItem(
            id=entry.guid or entry.link,
            title=entry.title,
            subtitle=entry.description,
            url=entry.link,
            timestamp=timestamp,
            priority=self.priority_for_age(now - timestamp),
            category=self.category,
            icon=self.icon,
            actions=[Action(key="o", label="open", command=entry.link)],
            metadata=self.metadata_for(entry),
        )
