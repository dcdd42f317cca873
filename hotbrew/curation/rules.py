"""User mute and boost rules."""
from __future__ import annotations

from hotbrew.curation.diversity import extract_domain
from hotbrew.store.models import Rule
from hotbrew.trss.models import Item

BOOST_FACTOR = 2.0


def apply_rules(items: list[Item], rules: list[Rule]) -> tuple[list[Item], dict[str, float]]:
    """Drop muted items and collect boosts.

    Patterns are compared case-insensitively.  Only enabled rules take
    effect.

    Returns:
        ``(kept_items, boosts)`` where *boosts* maps a lowercased pattern to
        its multiplier.
    """
    boosts: dict[str, float] = {}
    muted_domains: set[str] = set()
    muted_sources: set[str] = set()

    for rule in rules:
        if not rule.enabled:
            continue
        pattern = rule.pattern.lower()
        if rule.kind == "mute_domain":
            muted_domains.add(pattern.removeprefix("www."))
        elif rule.kind == "mute_source":
            muted_sources.add(pattern)
        elif rule.kind in ("boost_tag", "boost_domain"):
            boosts[pattern] = BOOST_FACTOR

    kept = [
        item
        for item in items
        if extract_domain(item.url).lower() not in muted_domains
        and item.source.name.lower() not in muted_sources
    ]
    return kept, boosts


def count_applied_rules(considered: int, kept: int, boosts: dict[str, float]) -> int:
    """Muted item count plus the number of active boosts."""
    return (considered - kept) + len(boosts)
