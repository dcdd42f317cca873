"""Tests for source profiles and the source registry factory."""
from __future__ import annotations

from pathlib import Path

import pytest

from hotbrew.settings.config import default_config
from hotbrew.settings.profile import (
    Profile,
    SourceSpec,
    default_profile,
    ensure_default_profile,
    list_profiles,
    load_profile,
    save_profile,
)
from hotbrew.shared.errors import ConfigurationError
from hotbrew.sources.arxiv import ArxivSource
from hotbrew.sources.factory import build_registry, instantiate_source
from hotbrew.sources.hackernews import HackerNewsSource
from hotbrew.sources.rss import RSSSource
from hotbrew.sources.tldr import TLDRSource


class TestProfiles:
    def test_default_profile_contents(self):
        keys = [spec.key for spec in default_profile().sources]
        assert keys[0] == "hackernews"
        assert "arxiv-llm" in keys
        assert len(keys) == 8

    def test_missing_profile_falls_back_to_default(self):
        assert load_profile("nope").sources == default_profile().sources

    def test_save_and_load(self):
        save_profile("work", [SourceSpec(key="blog", driver="rss", name="Blog", feed_url="https://b.example/rss")])
        profile = load_profile("work")
        assert profile.name == "work"
        assert profile.sources[0].feed_url == "https://b.example/rss"

    def test_save_requires_name(self):
        with pytest.raises(ConfigurationError):
            save_profile("", [])

    def test_incomplete_entries_skipped(self, config_home: Path):
        path = config_home / "profiles" / "mixed.yaml"
        path.parent.mkdir(parents=True)
        path.write_text(
            "sources:\n  - key: ok\n    driver: lobsters\n  - key: missing-driver\n  - just a string\n",
            encoding="utf-8",
        )
        assert [s.key for s in load_profile("mixed").sources] == ["ok"]

    def test_default_merges_all_manifests(self, config_home: Path):
        save_profile("a", [SourceSpec(key="a", driver="lobsters")])
        save_profile("b", [SourceSpec(key="b", driver="hackernews")])
        assert [s.key for s in load_profile().sources] == ["a", "b"]

    def test_ensure_default_profile(self):
        assert ensure_default_profile() is True
        assert ensure_default_profile() is False
        infos = list_profiles()
        assert [(i.name, i.source_count) for i in infos] == [("default", 8)]

    def test_spec_to_dict_omits_empty(self):
        data = SourceSpec(key="hn", driver="hackernews").to_dict()
        assert "feed_url" not in data
        assert "queries" not in data


class TestFactory:
    @pytest.mark.parametrize(
        "spec,cls",
        [
            (SourceSpec(key="hn", driver="hackernews"), HackerNewsSource),
            (SourceSpec(key="t", driver="tldr", name="T", feed_url="https://t.example/rss"), TLDRSource),
            (SourceSpec(key="r", driver="rss", name="R", feed_url="https://r.example/rss"), RSSSource),
            (SourceSpec(key="x", driver="arxiv", name="X"), ArxivSource),
        ],
    )
    def test_instantiate(self, spec, cls):
        assert isinstance(instantiate_source(spec), cls)

    @pytest.mark.parametrize(
        "spec",
        [SourceSpec(key="r", driver="rss"), SourceSpec(key="?", driver="gopher")],
    )
    def test_incomplete_or_unknown(self, spec):
        assert instantiate_source(spec) is None

    def test_build_registry_honours_config_keys(self):
        cfg = default_config()
        registry = build_registry(cfg, default_profile())
        assert "hackernews" in registry.all()
        assert registry.config_for("hackernews").settings == {"max": 8}
        assert len(registry) == 8

        cfg.sources["hackernews"].enabled = False
        assert "hackernews" not in build_registry(cfg, default_profile()).all()

    def test_build_registry_skips_unknown_drivers(self):
        profile = Profile(sources=[SourceSpec(key="g", driver="gopher"), SourceSpec(key="l", driver="lobsters", name="L")])
        assert list(build_registry(default_config(), profile).all()) == ["l"]
