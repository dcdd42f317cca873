"""Tests for diversity caps."""
from __future__ import annotations

from collections import Counter

import pytest

from hotbrew.curation.diversity import (
    DiversityLimits,
    enforce_diversity,
    extract_domain,
    is_tag_saturated,
)
from hotbrew.shared.constants import DEFAULT_DIGEST_MAX


class TestExtractDomain:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://www.example.com/x", "example.com"),
            ("http://sub.example.com:8080/", "sub.example.com"),
            ("", ""),
            ("not a url", ""),
        ],
    )
    def test_extract(self, url, expected):
        assert extract_domain(url) == expected


class TestTagSaturation:
    def test_saturated(self):
        assert is_tag_saturated(["ai", "go"], Counter({"ai": 3}), 3)

    def test_not_saturated(self):
        assert not is_tag_saturated(["ai"], Counter({"ai": 2}), 3)


class TestEnforceDiversity:
    def test_domain_cap(self, make_item):
        items = [make_item(title=f"t{n}", url=f"https://same.com/{n}", source=f"s{n}") for n in range(5)]
        selected = enforce_diversity(items, DiversityLimits(max_per_domain=3), 10)
        assert len(selected) == 3

    def test_source_cap_is_share_of_max(self, make_item):
        items = [make_item(title=f"t{n}", url=f"https://d{n}.com/", source="HN") for n in range(10)]
        selected = enforce_diversity(items, DiversityLimits(max_source_percent=0.4), 10)
        assert len(selected) == 4

    def test_source_cap_at_least_one(self, make_item):
        items = [make_item(title=f"t{n}", url=f"https://d{n}.com/", source="HN") for n in range(3)]
        selected = enforce_diversity(items, DiversityLimits(max_source_percent=0.1), 2)
        assert len(selected) == 1

    def test_tag_cap(self, make_item):
        items = [
            make_item(title=f"t{n}", url=f"https://d{n}.com/", source=f"s{n}", tags=["ai"])
            for n in range(5)
        ]
        selected = enforce_diversity(items, DiversityLimits(max_per_tag_cluster=2), 10)
        assert len(selected) == 2

    def test_zero_disables_domain_and_tag_caps(self, make_item):
        items = [
            make_item(title=f"t{n}", url=f"https://same.com/{n}", source=f"s{n}", tags=["ai"])
            for n in range(5)
        ]
        limits = DiversityLimits(max_per_domain=0, max_per_tag_cluster=0)
        assert len(enforce_diversity(items, limits, 10)) == 5

    def test_preserves_order_and_max(self, make_item):
        items = [make_item(title=f"t{n}", url=f"https://d{n}.com/", source=f"s{n}") for n in range(8)]
        selected = enforce_diversity(items, DiversityLimits(), 5)
        assert selected == items[:5]

    def test_non_positive_max_uses_default(self, make_item):
        items = [
            make_item(title=f"t{n}", url=f"https://d{n}.com/", source=f"s{n}")
            for n in range(DEFAULT_DIGEST_MAX + 5)
        ]
        assert len(enforce_diversity(items, DiversityLimits(), 0)) == DEFAULT_DIGEST_MAX
