"""Tests for source item to TRSS conversion."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from hotbrew.sources.base import Priority, Section, SourceItem
from hotbrew.sync.convert import convert_item, convert_section, priority_to_score
from hotbrew.trss.fingerprint import canonical_url, fallback_key, fingerprint, generate_id


class TestPriorityToScore:
    @pytest.mark.parametrize(
        "priority,score",
        [(Priority.URGENT, 9.0), (Priority.HIGH, 7.0), (Priority.MEDIUM, 5.0), (Priority.LOW, 3.0)],
    )
    def test_mapping(self, priority, score):
        assert priority_to_score(priority) == score


class TestConvertItem:
    def test_url_item(self):
        posted = datetime(2024, 3, 1, tzinfo=timezone.utc)
        src = SourceItem(
            id="hn-1",
            title="Big launch",
            subtitle="600 points",
            url="https://a.com/x?utm_source=hn",
            priority=Priority.HIGH,
            timestamp=posted,
            category="hackernews",
            metadata={"points": 600, "comments": 80, "tags": ["ai"], "language": "Go"},
        )
        item = convert_item(src, "Hacker News", "🔶")

        canonical = canonical_url(src.url)
        assert item.id == generate_id(canonical)
        assert item.fingerprint == fingerprint(canonical)
        assert item.url_canonical == "https://a.com/x"
        assert item.source.name == "Hacker News"
        assert item.source.icon == "🔶"
        assert item.published_at == posted
        assert item.summary == "600 points"
        assert item.score == 7.0
        assert item.engagement == {"points": 600, "comments": 80}
        assert item.tags == ["ai", "Go", "hackernews"]
        assert item.meta["points"] == 600

    def test_item_without_url_uses_title_key(self):
        item = convert_item(SourceItem(id="x", title="No link"), "Notes")
        assert item.id == generate_id(fallback_key("No link", "Notes"))
        assert item.url_canonical == ""

    def test_score_becomes_points(self):
        item = convert_item(SourceItem(id="x", title="t", url="https://a.com", metadata={"score": 12}), "S")
        assert item.engagement == {"points": 12}

    def test_missing_timestamp_defaults_to_now(self):
        item = convert_item(SourceItem(id="x", title="t"), "S")
        assert item.published_at == item.fetched_at


class TestConvertSection:
    def test_none(self):
        assert convert_section(None, "S") == []

    def test_converts_all(self):
        section = Section(name="S", items=[SourceItem(id="1", title="a"), SourceItem(id="2", title="b")])
        assert [i.title for i in convert_section(section, "S")] == ["a", "b"]
