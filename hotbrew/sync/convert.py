"""Convert source items into TRSS items."""
from __future__ import annotations

from typing import Any

from hotbrew.shared.utils import now_utc
from hotbrew.sources.base import Priority, Section, SourceItem
from hotbrew.trss.fingerprint import canonical_url, fallback_key, fingerprint, generate_id
from hotbrew.trss.models import Item, ItemSource

PRIORITY_SCORES: dict[Priority, float] = {
    Priority.URGENT: 9.0,
    Priority.HIGH: 7.0,
    Priority.MEDIUM: 5.0,
    Priority.LOW: 3.0,
}


def priority_to_score(priority: Priority) -> float:
    """Map a source priority onto the 0-10 raw score range."""
    return PRIORITY_SCORES.get(priority, 3.0)


def _engagement(metadata: dict[str, Any]) -> dict[str, Any]:
    engagement: dict[str, Any] = {}
    if "points" in metadata:
        engagement["points"] = metadata["points"]
    elif "score" in metadata:
        engagement["points"] = metadata["score"]
    for key in ("comments", "stars"):
        if key in metadata:
            engagement[key] = metadata[key]
    return engagement


def _tags(metadata: dict[str, Any], category: str) -> list[str]:
    tags: list[str] = []
    raw = metadata.get("tags")
    if isinstance(raw, (list, tuple)):
        tags.extend(str(tag) for tag in raw if tag)
    language = metadata.get("language")
    if isinstance(language, str) and language:
        tags.append(language)
    if category:
        tags.append(category)
    return tags


def convert_item(src_item: SourceItem, source_name: str, icon: str = "") -> Item:
    """Build the TRSS item for *src_item* fetched from *source_name*.

    The id and fingerprint derive from the canonical URL, or from the
    title and source name when the item has no URL.
    """
    canonical = canonical_url(src_item.url)
    key = canonical or fallback_key(src_item.title, source_name)
    now = now_utc()
    metadata = dict(src_item.metadata or {})

    return Item(
        id=generate_id(key),
        fingerprint=fingerprint(key),
        title=src_item.title,
        url=src_item.url,
        url_canonical=canonical,
        source=ItemSource(name=source_name, icon=icon),
        published_at=src_item.timestamp or now,
        fetched_at=now,
        summary=src_item.subtitle,
        body=src_item.body,
        tags=_tags(metadata, src_item.category),
        score=priority_to_score(src_item.priority),
        engagement=_engagement(metadata),
        meta=metadata,
    )


def convert_section(section: Section | None, source_name: str, icon: str = "") -> list[Item]:
    if section is None:
        return []
    return [convert_item(item, source_name, icon) for item in section.items]
