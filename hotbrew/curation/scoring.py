"""Item scoring: ``recency * source_weight * engagement * user_boost``."""
from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from hotbrew.curation.diversity import extract_domain
from hotbrew.shared.utils import now_utc
from hotbrew.trss.models import Item

RECENCY_HALF_DAY_HOURS = 24.0
RECENCY_FLOOR = 0.1
ENGAGEMENT_REFERENCE = 500
ENGAGEMENT_CAP = 2.0


def recency_score(published: datetime, now: datetime) -> float:
    """``exp(-age_hours / 24)`` floored at 0.1; future items score 1.0."""
    age_hours = max(0.0, (now - published).total_seconds() / 3600)
    return max(RECENCY_FLOOR, math.exp(-age_hours / RECENCY_HALF_DAY_HOURS))


def _number(values: dict[str, Any], key: str) -> float:
    value = values.get(key)
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def engagement_score(engagement: dict[str, Any] | None) -> float:
    """Normalize points, stars and comments onto a log scale.

    The strongest of points and stars counts in full, comments at half.
    Items with no engagement signal score a neutral 1.0.
    """
    if not engagement:
        return 1.0
    signal = max(_number(engagement, "points"), _number(engagement, "stars"))
    signal += _number(engagement, "comments") * 0.5
    if signal <= 0:
        return 1.0
    return min(ENGAGEMENT_CAP, math.log1p(signal) / math.log1p(ENGAGEMENT_REFERENCE))


def source_weight(source_name: str, weights: dict[str, float] | None) -> float:
    if not weights:
        return 1.0
    return weights.get(source_name, 1.0)


def user_boost(item: Item, boosts: dict[str, float] | None) -> float:
    """Boost for the first matching tag, then source name, then domain."""
    if not boosts:
        return 1.0
    for tag in item.tags:
        if tag.lower() in boosts:
            return boosts[tag.lower()]
    for key in (item.source.name.lower(), extract_domain(item.url).lower()):
        if key and key in boosts:
            return boosts[key]
    return 1.0


def score_items(
    items: list[Item],
    weights: dict[str, float] | None = None,
    boosts: dict[str, float] | None = None,
    now: datetime | None = None,
) -> list[Item]:
    """Set ``item.score`` on every item in place and return the list."""
    now = now or now_utc()
    for item in items:
        item.score = (
            recency_score(item.published_at, now)
            * source_weight(item.source.name, weights)
            * engagement_score(item.engagement)
            * user_boost(item, boosts)
        )
    return items
