"""TRSS item and digest models.

TRSS is a small JSON format for curated digests delivered to developer
surfaces (terminal, logs, editor panes).  Empty optional fields are omitted
on the wire.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from hotbrew.shared.utils import now_utc

DIGEST_TYPE = "trss-digest"
DIGEST_VERSION = "1"

_ITEM_OPTIONAL = ("url", "url_canonical", "summary", "body", "tags", "engagement", "meta")


class ItemSource(BaseModel):
    """Where an item came from."""
    name: str
    icon: str = ""
    via: str = ""


class Item(BaseModel):
    """A normalized content item."""
    id: str
    title: str
    url: str = ""
    url_canonical: str = ""
    source: ItemSource
    published_at: datetime = Field(default_factory=now_utc)
    fetched_at: datetime = Field(default_factory=now_utc)
    summary: str = ""
    body: str = ""
    tags: list[str] = Field(default_factory=list)
    score: float = 0.0
    engagement: dict[str, Any] = Field(default_factory=dict)
    fingerprint: str = ""
    meta: dict[str, Any] = Field(default_factory=dict)

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready dict with empty optional fields dropped."""
        data = self.model_dump(mode="json")
        for key in _ITEM_OPTIONAL:
            if not data.get(key):
                data.pop(key, None)
        source = data["source"]
        for key in ("icon", "via"):
            if not source.get(key):
                source.pop(key, None)
        return data


class DigestSection(BaseModel):
    """Items grouped under one heading (usually a source)."""
    name: str
    icon: str = ""
    item_ids: list[str] = Field(default_factory=list)


class DigestMeta(BaseModel):
    """Statistics about how a digest was produced."""
    sources_synced: int = 0
    items_considered: int = 0
    items_deduped: int = 0
    rules_applied: int = 0


class Digest(BaseModel):
    """A curated collection of items."""
    type: str = DIGEST_TYPE
    version: str = DIGEST_VERSION
    generated_at: datetime = Field(default_factory=now_utc)
    title: str
    window: str
    max_items: int
    item_count: int = 0
    items: list[Item] = Field(default_factory=list)
    sections: list[DigestSection] = Field(default_factory=list)
    meta: DigestMeta = Field(default_factory=DigestMeta)

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready dict, items in their wire form."""
        data = self.model_dump(mode="json", exclude={"items"})
        data["items"] = [item.to_wire() for item in self.items]
        if not data.get("sections"):
            data.pop("sections", None)
        return data


def new_digest(title: str, window: str, max_items: int) -> Digest:
    """Create an empty digest envelope stamped with the current time."""
    return Digest(title=title, window=window, max_items=max_items)
