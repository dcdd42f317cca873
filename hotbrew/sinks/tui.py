"""Adapt a digest back into source sections for the terminal viewer."""
from __future__ import annotations

from hotbrew.sources.base import Action, Priority, Section, SourceItem
from hotbrew.trss.models import Digest, Item


def score_to_priority(score: float) -> Priority:
    if score >= 7:
        return Priority.URGENT
    if score >= 5:
        return Priority.HIGH
    if score >= 3:
        return Priority.MEDIUM
    return Priority.LOW


def _actions(item: Item, metadata: dict) -> list[Action]:
    actions = [Action(key="o", label="open", command=item.url)]
    comments = metadata.get("hn_url") or metadata.get("comments_url")
    if isinstance(comments, str) and comments:
        actions.append(Action(key="c", label="comments", command=comments))
    return actions


def item_to_source_item(item: Item) -> SourceItem:
    metadata = dict(item.meta)
    metadata["trss_id"] = item.id
    metadata["trss_score"] = item.score
    return SourceItem(
        id=item.id,
        title=item.title,
        subtitle=item.summary,
        body=item.body,
        url=item.url,
        priority=score_to_priority(item.score),
        timestamp=item.published_at,
        icon=item.source.icon,
        metadata=metadata,
        actions=_actions(item, metadata),
    )


def digest_to_sections(digest: Digest | None) -> list[Section]:
    """Group digest items by source, in order of first appearance."""
    if digest is None or not digest.items:
        return []
    sections: dict[str, Section] = {}
    for item in digest.items:
        name = item.source.name
        if name not in sections:
            sections[name] = Section(name=name, icon=item.source.icon)
        sections[name].items.append(item_to_source_item(item))
    return list(sections.values())
