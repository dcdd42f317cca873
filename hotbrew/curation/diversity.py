"""Caps that keep any one domain, source or tag from dominating a digest."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from urllib.parse import urlsplit

from hotbrew.shared.constants import DEFAULT_DIGEST_MAX
from hotbrew.trss.models import Item


@dataclass
class DiversityLimits:
    """Maximum concentration allowed per dimension.

    Attributes:
        max_per_domain: Items from one URL host (0 disables the cap).
        max_source_percent: Share of ``max_items`` one source may fill.
        max_per_tag_cluster: Items sharing any one tag (0 disables the cap).
    """

    max_per_domain: int = 3
    max_source_percent: float = 0.4
    max_per_tag_cluster: int = 3


def default_limits() -> DiversityLimits:
    return DiversityLimits()


def extract_domain(url: str) -> str:
    """Return the host of *url* without a leading ``www.``, or ``""``."""
    if not url:
        return ""
    try:
        host = urlsplit(url).hostname or ""
    except ValueError:
        return ""
    return host.removeprefix("www.")


def is_tag_saturated(tags: list[str], counts: Counter, limit: int) -> bool:
    return any(counts[tag] >= limit for tag in tags)


def enforce_diversity(items: list[Item], limits: DiversityLimits, max_items: int) -> list[Item]:
    """Select up to *max_items* from *items* (best first) within *limits*."""
    if max_items <= 0:
        max_items = DEFAULT_DIGEST_MAX

    max_from_source = max(1, int(max_items * limits.max_source_percent))
    domains: Counter = Counter()
    sources: Counter = Counter()
    tags: Counter = Counter()
    selected: list[Item] = []

    for item in items:
        if len(selected) >= max_items:
            break

        domain = extract_domain(item.url)
        source = item.source.name

        if limits.max_per_domain > 0 and domain and domains[domain] >= limits.max_per_domain:
            continue
        if sources[source] >= max_from_source:
            continue
        if limits.max_per_tag_cluster > 0 and is_tag_saturated(
            item.tags, tags, limits.max_per_tag_cluster
        ):
            continue

        selected.append(item)
        if domain:
            domains[domain] += 1
        sources[source] += 1
        tags.update(item.tags)

    return selected
