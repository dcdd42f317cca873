"""Duplicate detection across sources.

Items are compared in order; the first occurrence is kept and later
duplicates are dropped.  Three tiers are checked, each recording a dedup
edge with its own confidence:

* identical fingerprint (1.0)
* identical canonical URL (0.95)
* near-identical title (0.8)
"""
from __future__ import annotations

import logging
from typing import Protocol

from hotbrew.trss.models import Item

logger = logging.getLogger(__name__)

CONFIDENCE_FINGERPRINT = 1.0
CONFIDENCE_URL = 0.95
CONFIDENCE_TITLE = 0.8

TITLE_PREFIXES: tuple[str, ...] = ("show hn: ", "ask hn: ", "tell hn: ", "[p] ", "[d] ")
CONTAINMENT_RATIO = 0.7


class EdgeRecorder(Protocol):
    def insert_dedup_edge(self, id_a: str, id_b: str, confidence: float) -> None: ...


def normalize_title(title: str) -> str:
    """Lowercase *title* and strip repost prefixes such as ``Show HN:``."""
    text = title.strip().lower()
    for prefix in TITLE_PREFIXES:
        if text.startswith(prefix):
            text = text[len(prefix):]
    return text


def fuzzy_title_match(title: str, kept: list[Item]) -> int | None:
    """Return the index in *kept* of an item whose title matches *title*.

    Titles match when their normalized forms are equal, or when one
    contains the other and the shorter is more than 70% of the longer.
    """
    normalized = normalize_title(title)
    if not normalized:
        return None

    for index, item in enumerate(kept):
        existing = normalize_title(item.title)
        if not existing:
            continue
        if normalized == existing:
            return index
        if normalized in existing or existing in normalized:
            shorter, longer = sorted((len(normalized), len(existing)))
            if shorter / longer > CONTAINMENT_RATIO:
                return index
    return None


def dedup(items: list[Item], recorder: EdgeRecorder | None = None) -> list[Item]:
    """Drop duplicates from *items*, keeping first occurrences in order.

    Args:
        items: Candidate items.
        recorder: Optional store that receives one dedup edge per drop.

    Returns:
        The kept items.
    """
    by_fingerprint: dict[str, int] = {}
    by_url: dict[str, int] = {}
    kept: list[Item] = []

    def _record(index: int, duplicate: Item, confidence: float) -> None:
        if recorder is not None:
            recorder.insert_dedup_edge(kept[index].id, duplicate.id, confidence)

    for item in items:
        index = by_fingerprint.get(item.fingerprint)
        if index is not None:
            _record(index, item, CONFIDENCE_FINGERPRINT)
            continue

        if item.url_canonical:
            index = by_url.get(item.url_canonical)
            if index is not None:
                _record(index, item, CONFIDENCE_URL)
                continue

        index = fuzzy_title_match(item.title, kept)
        if index is not None:
            _record(index, item, CONFIDENCE_TITLE)
            continue

        by_fingerprint[item.fingerprint] = len(kept)
        if item.url_canonical:
            by_url[item.url_canonical] = len(kept)
        kept.append(item)

    if len(kept) < len(items):
        logger.debug("Dedup dropped %d of %d items", len(items) - len(kept), len(items))
    return kept
