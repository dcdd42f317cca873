"""Records returned by the store alongside TRSS items."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

ITEM_STATES: tuple[str, ...] = ("unread", "read", "saved")

RULE_KINDS: tuple[str, ...] = ("mute_domain", "mute_source", "boost_tag", "boost_domain")


@dataclass
class SourceRecord:
    """A row of the ``sources`` table."""

    id: int
    name: str
    kind: str
    url: str = ""
    icon: str = "📰"
    weight: float = 1.0
    enabled: bool = True
    settings: dict[str, Any] = field(default_factory=dict)
    added_at: datetime | None = None
    last_sync: datetime | None = None
    sync_errors: int = 0


@dataclass
class Rule:
    """A user curation rule (mute or boost)."""

    id: int
    kind: str
    pattern: str
    value: str = ""
    enabled: bool = True
    created_at: datetime | None = None


@dataclass
class ItemFilter:
    """Query parameters for :meth:`Store.list_items`."""

    unread: bool = False
    source_name: str = ""
    since: timedelta | None = None
    limit: int = 0
