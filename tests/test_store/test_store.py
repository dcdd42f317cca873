"""Tests for the SQLite store."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from hotbrew.shared.errors import ItemNotFoundError, StoreError
from hotbrew.store.models import ItemFilter
from hotbrew.store.schema import SCHEMA_VERSION, current_version
from hotbrew.store.store import Store
from hotbrew.trss.models import new_digest


@pytest.fixture
def source_id(store: Store) -> int:
    return store.insert_source("Hacker News", "hackernews", "https://news.ycombinator.com", "🔶")


class TestOpen:
    def test_schema_is_current(self, store: Store):
        assert current_version(store._pool) == SCHEMA_VERSION

    def test_reopen_is_idempotent(self, tmp_path: Path):
        path = tmp_path / "hotbrew.db"
        Store(path).close()
        with Store(path) as again:
            assert again.item_count() == 0

    def test_unopenable_path_raises_store_error(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")
        with pytest.raises(StoreError):
            Store(blocker / "hotbrew.db")


class TestItems:
    def test_insert_and_get_by_prefix(self, store, source_id, make_item):
        item = make_item(tags=["ai"], engagement={"points": 120})
        store.insert_item(item, source_id)

        loaded = store.get_item(item.id[:10])
        assert loaded.title == item.title
        assert loaded.tags == ["ai"]
        assert loaded.engagement == {"points": 120}
        assert loaded.source.icon == "🔶"

    def test_duplicate_for_same_source_is_ignored(self, store, source_id, make_item):
        item = make_item()
        store.insert_item(item, source_id)
        store.insert_item(item.model_copy(update={"id": "sha256:ffffffffffff"}), source_id)
        assert store.item_count() == 1

    def test_same_fingerprint_from_other_source_is_kept(self, store, source_id, make_item):
        other = store.insert_source("Lobste.rs", "lobsters")
        item = make_item()
        store.insert_item(item, source_id)
        store.insert_item(
            item.model_copy(update={"id": "sha256:eeeeeeeeeeee", "source": item.source.model_copy(update={"name": "Lobste.rs"})}),
            other,
        )
        assert store.item_count() == 2

    def test_get_item_unknown_prefix(self, store):
        with pytest.raises(ItemNotFoundError):
            store.get_item("sha256:000")

    def test_get_item_empty_prefix(self, store):
        with pytest.raises(ItemNotFoundError):
            store.get_item("")

    def test_get_item_by_bare_hex_prefix(self, store, source_id, make_item):
        item = make_item()
        store.insert_item(item, source_id)
        assert store.get_item(item.id[7:15]).id == item.id

    @pytest.mark.parametrize("prefix", ["%", "_", "sha256:%", "sha256:____"])
    def test_get_item_wildcards_match_literally(self, store, source_id, make_item, prefix):
        store.insert_item(make_item(), source_id)
        with pytest.raises(ItemNotFoundError):
            store.get_item(prefix)

    def test_list_orders_by_computed_score(self, store, source_id, make_item):
        low = make_item(title="low", url="https://a.com/1")
        high = make_item(title="high", url="https://a.com/2")
        store.insert_item(low, source_id)
        store.insert_item(high, source_id)
        store.update_score(high.id, 9.0)
        store.update_score(low.id, 2.0)

        items = store.list_items()
        assert [i.title for i in items] == ["high", "low"]
        assert items[0].score == 9.0

    def test_raw_score_used_until_computed(self, store, source_id, make_item):
        store.insert_item(make_item(score=8.0), source_id)
        assert store.list_items()[0].score == 8.0

    def test_filters(self, store, source_id, make_item):
        other = store.insert_source("Reddit", "reddit")
        a = make_item(title="a", url="https://a.com/1")
        b = make_item(title="b", url="https://a.com/2", source="Reddit")
        old = make_item(
            title="old",
            url="https://a.com/3",
            fetched_at=datetime.now(timezone.utc) - timedelta(days=3),
        )
        store.insert_item(a, source_id)
        store.insert_item(b, other)
        store.insert_item(old, source_id)
        store.mark_read(a.id)

        assert {i.title for i in store.list_items(ItemFilter(unread=True))} == {"b", "old"}
        assert [i.title for i in store.list_items(ItemFilter(source_name="Reddit"))] == ["b"]
        assert {i.title for i in store.list_items(ItemFilter(since=timedelta(hours=24)))} == {"a", "b"}
        assert len(store.list_items(ItemFilter(limit=1))) == 1

    def test_list_reports_state_in_meta(self, store, source_id, make_item):
        item = make_item()
        store.insert_item(item, source_id)
        store.mark_saved(item.id)
        assert store.list_items()[0].meta["state"] == "saved"

    def test_recent_items(self, store, source_id, make_item):
        assert not store.has_recent_items(timedelta(hours=1))
        store.insert_item(make_item(), source_id)
        assert store.has_recent_items(timedelta(hours=1))
        assert store.recent_items_since(datetime.now(timezone.utc) - timedelta(minutes=5)) == 1


class TestSources:
    def test_insert_defaults(self, store):
        sid = store.insert_source("Feed", "rss", "https://feed.example/rss")
        (record,) = store.list_sources()
        assert record.id == sid
        assert record.icon == "📰"
        assert record.enabled is True
        assert record.last_sync is None
        assert record.weight == 1.0

    def test_get_or_create_reuses(self, store):
        first = store.get_or_create_source("Curated", "manual", "", "📌")
        second = store.get_or_create_source("Curated", "manual")
        assert first == second
        assert len(store.list_sources()) == 1

    def test_sync_bookkeeping(self, store, source_id):
        store.incr_sync_errors(source_id)
        store.incr_sync_errors(source_id)
        assert store.list_sources()[0].sync_errors == 2

        store.update_last_sync(source_id)
        record = store.list_sources()[0]
        assert record.sync_errors == 0
        assert record.last_sync is not None

    def test_disable(self, store, source_id):
        store.set_source_enabled(source_id, False)
        assert store.list_sources()[0].enabled is False

    def test_source_weights(self, store, source_id):
        assert store.source_weights() == {"Hacker News": 1.0}


class TestRules:
    def test_add_list_delete(self, store):
        rule_id = store.add_rule("mute_domain", "medium.com")
        rules = store.list_rules()
        assert [(r.id, r.kind, r.pattern) for r in rules] == [(rule_id, "mute_domain", "medium.com")]
        assert store.delete_rule(rule_id) is True
        assert store.list_rules() == []

    def test_delete_unknown_rule(self, store):
        assert store.delete_rule(999) is False

    def test_has_mute_rule(self, store):
        store.add_rule("boost_tag", "ai")
        assert not store.has_mute_rule("ai")
        store.add_rule("mute_domain", "spam.com")
        assert store.has_mute_rule("spam.com")


class TestState:
    def test_transitions(self, store, source_id, make_item):
        item = make_item()
        store.insert_item(item, source_id)
        assert store.get_state(item.id) == "unread"
        store.mark_read(item.id)
        assert store.get_state(item.id) == "read"
        store.mark_saved(item.id)
        assert store.get_state(item.id) == "saved"
        store.mark_unread(item.id)
        assert store.get_state(item.id) == "unread"

    def test_counts_add_up(self, store, source_id, make_item):
        items = [make_item(title=str(n), url=f"https://a.com/{n}") for n in range(4)]
        for item in items:
            store.insert_item(item, source_id)
        store.mark_read(items[0].id)
        store.mark_saved(items[1].id)

        counts = store.count_by_state()
        assert counts == {"unread": 2, "read": 1, "saved": 1}
        assert sum(counts.values()) == store.item_count()
        assert store.unread_count() == 2


class TestDedupEdges:
    def test_edges_are_symmetric(self, store):
        store.insert_dedup_edge("sha256:bbb", "sha256:aaa", 1.0)
        store.insert_dedup_edge("sha256:aaa", "sha256:bbb", 0.8)
        assert store.get_deduped_ids("sha256:aaa") == ["sha256:bbb"]
        assert store.get_deduped_ids("sha256:bbb") == ["sha256:aaa"]


class TestDigests:
    def test_save_and_latest(self, store, make_item):
        assert store.get_latest_digest() is None
        first = new_digest("first", "24h", 5)
        second = new_digest("second", "24h", 5)
        second.items = [make_item()]
        second.item_count = 1
        store.save_digest(first)
        store.save_digest(second)

        latest = store.get_latest_digest()
        assert latest is not None
        assert latest.title == "second"
        assert latest.items[0].title == "An article"

    def test_digests_since(self, store):
        store.save_digest(new_digest("recent", "24h", 5))
        since = store.get_digests_since(datetime.now(timezone.utc) - timedelta(hours=1))
        assert [d.title for d in since] == ["recent"]


class TestFeedback:
    @pytest.mark.parametrize("rating", [1, 4])
    def test_valid_ratings(self, store, rating):
        store.insert_feedback(rating, "great issue")
        assert store._scalar("SELECT COUNT(*) FROM feedback") == 1

    @pytest.mark.parametrize("rating", [0, 5])
    def test_out_of_range(self, store, rating):
        with pytest.raises(StoreError):
            store.insert_feedback(rating)
