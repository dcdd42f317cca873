"""Digest generation pipeline."""
from __future__ import annotations

import logging
from datetime import timedelta

from hotbrew.curation.dedup import dedup
from hotbrew.curation.diversity import DiversityLimits, enforce_diversity
from hotbrew.curation.rules import apply_rules, count_applied_rules
from hotbrew.curation.scoring import score_items
from hotbrew.shared.constants import DIGEST_TITLE
from hotbrew.shared.utils import format_duration
from hotbrew.store.models import ItemFilter
from hotbrew.store.store import Store
from hotbrew.trss.models import Digest, DigestMeta, DigestSection, Item, new_digest

logger = logging.getLogger(__name__)


def build_sections(items: list[Item]) -> list[DigestSection]:
    """Group item ids by source, in order of first appearance."""
    sections: dict[str, DigestSection] = {}
    for item in items:
        name = item.source.name
        if name not in sections:
            sections[name] = DigestSection(name=name, icon=item.source.icon)
        sections[name].item_ids.append(item.id)
    return list(sections.values())


class Engine:
    """Turns stored items into a curated :class:`Digest`.

    The pipeline is: load items fetched within the window, apply mute and
    boost rules, dedup, score with source weights, sort best first, cap by
    diversity limits, then persist the computed scores.
    """

    def __init__(self, store: Store, limits: DiversityLimits | None = None) -> None:
        self.store = store
        self.limits = limits or DiversityLimits()

    def generate_digest(
        self,
        window: timedelta,
        max_items: int,
        title: str = DIGEST_TITLE,
    ) -> Digest:
        items = self.store.list_items(ItemFilter(since=window))
        considered = len(items)

        filtered, boosts = apply_rules(items, self.store.list_rules())
        rules_applied = count_applied_rules(considered, len(filtered), boosts)

        unique = dedup(filtered, self.store)
        deduped = len(filtered) - len(unique)

        scored = score_items(unique, self.store.source_weights(), boosts)
        scored.sort(key=lambda item: item.score, reverse=True)

        selected = enforce_diversity(scored, self.limits, max_items)
        for item in selected:
            self.store.update_score(item.id, item.score)

        digest = new_digest(title, format_duration(window), max_items)
        digest.items = selected
        digest.item_count = len(selected)
        digest.sections = build_sections(selected)
        digest.meta = DigestMeta(
            sources_synced=len({item.source.name for item in selected}),
            items_considered=considered,
            items_deduped=deduped,
            rules_applied=rules_applied,
        )
        logger.info(
            "Generated digest: %d of %d items (%d deduped, %d rules applied)",
            digest.item_count,
            considered,
            deduped,
            rules_applied,
        )
        return digest
