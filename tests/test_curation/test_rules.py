"""Tests for mute and boost rules."""
from __future__ import annotations

from hotbrew.curation.rules import BOOST_FACTOR, apply_rules, count_applied_rules
from hotbrew.store.models import Rule


def _rule(kind: str, pattern: str, enabled: bool = True) -> Rule:
    return Rule(id=1, kind=kind, pattern=pattern, enabled=enabled)


class TestApplyRules:
    def test_mute_domain_ignores_case_and_www(self, make_item):
        muted = make_item(title="a", url="https://www.Medium.com/post")
        kept = make_item(title="b", url="https://example.com/post")
        items, boosts = apply_rules([muted, kept], [_rule("mute_domain", "WWW.medium.com")])
        assert items == [kept]
        assert boosts == {}

    def test_mute_source(self, make_item):
        reddit = make_item(title="a", source="Reddit AI")
        hn = make_item(title="b", url="https://b.com")
        items, _ = apply_rules([reddit, hn], [_rule("mute_source", "reddit ai")])
        assert items == [hn]

    def test_boosts_are_lowercased(self, make_item):
        _, boosts = apply_rules([], [_rule("boost_tag", "AI"), _rule("boost_domain", "github.com")])
        assert boosts == {"ai": BOOST_FACTOR, "github.com": BOOST_FACTOR}

    def test_disabled_rules_ignored(self, make_item):
        item = make_item(url="https://medium.com/x")
        items, _ = apply_rules([item], [_rule("mute_domain", "medium.com", enabled=False)])
        assert items == [item]


class TestCountAppliedRules:
    def test_mutes_plus_boosts(self):
        assert count_applied_rules(10, 7, {"ai": 2.0}) == 4

    def test_nothing_applied(self):
        assert count_applied_rules(3, 3, {}) == 0
