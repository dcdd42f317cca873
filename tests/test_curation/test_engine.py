"""Tests for the digest generation pipeline."""
from __future__ import annotations

from datetime import timedelta

from hotbrew.curation.engine import Engine, build_sections


class TestBuildSections:
    def test_groups_by_source_in_order(self, make_item):
        a = make_item(title="a", url="https://a.com", source="HN")
        b = make_item(title="b", url="https://b.com", source="Reddit", icon="🔮")
        c = make_item(title="c", url="https://c.com", source="HN")
        sections = build_sections([a, b, c])
        assert [s.name for s in sections] == ["HN", "Reddit"]
        assert sections[0].item_ids == [a.id, c.id]
        assert sections[1].icon == "🔮"


class TestEngine:
    def test_empty_store(self, store):
        digest = Engine(store).generate_digest(timedelta(hours=24), 10)
        assert digest.item_count == 0
        assert digest.window == "24h"
        assert digest.meta.items_considered == 0

    def test_full_pipeline(self, store, make_item):
        hn = store.insert_source("Hacker News", "hackernews", icon="🔶")
        lob = store.insert_source("Lobste.rs", "lobsters", icon="🦞")
        store.add_rule("mute_domain", "spam.com")
        store.add_rule("boost_tag", "ai")

        keep = make_item(title="Useful thing", url="https://useful.dev/a", engagement={"points": 300})
        boosted = make_item(title="Model release", url="https://ai.dev/b", tags=["ai"])
        spam = make_item(title="Buy now", url="https://spam.com/c")
        dup = make_item(title="Useful thing", url="https://useful.dev/a", source="Lobste.rs", id="sha256:dup000000000")
        store.insert_item(keep, hn)
        store.insert_item(boosted, hn)
        store.insert_item(spam, hn)
        store.insert_item(dup, lob)

        digest = Engine(store).generate_digest(timedelta(hours=24), 10, "Morning")

        assert digest.title == "Morning"
        assert digest.meta.items_considered == 4
        assert digest.meta.items_deduped == 1
        assert digest.meta.rules_applied == 2
        titles = [i.title for i in digest.items]
        assert "Buy now" not in titles
        assert sorted(titles) == ["Model release", "Useful thing"]
        assert digest.item_count == 2
        assert digest.items[0].score >= digest.items[1].score
        assert store.get_deduped_ids(keep.id) == [dup.id] or store.get_deduped_ids(dup.id) == [keep.id]

    def test_scores_are_persisted(self, store, make_item):
        sid = store.insert_source("Hacker News", "hackernews")
        item = make_item()
        store.insert_item(item, sid)
        digest = Engine(store).generate_digest(timedelta(hours=24), 10)
        assert store.get_item(item.id).score == digest.items[0].score
