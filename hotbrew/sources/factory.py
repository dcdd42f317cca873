"""Turn profile source specs into live sources and a sync registry."""
from __future__ import annotations

import logging

from hotbrew.settings.config import HotbrewConfig
from hotbrew.settings.profile import Profile, SourceSpec, load_profile
from hotbrew.sources.arxiv import DEFAULT_CATEGORIES, ArxivSource
from hotbrew.sources.base import Registry, Source, SourceConfig
from hotbrew.sources.github import GitHubTrendingSource
from hotbrew.sources.hackernews import HackerNewsSource
from hotbrew.sources.hnsearch import HNSearchSource
from hotbrew.sources.lobsters import LobstersSource
from hotbrew.sources.reddit import RedditSource
from hotbrew.sources.rss import RSSSource
from hotbrew.sources.tldr import TLDRSource

logger = logging.getLogger(__name__)

DRIVERS: tuple[str, ...] = (
    "hackernews",
    "hnsearch",
    "github-trending",
    "tldr",
    "rss",
    "lobsters",
    "reddit",
    "arxiv",
)


def instantiate_source(spec: SourceSpec) -> Source | None:
    """Build the source for *spec*; ``None`` for unknown or incomplete specs."""
    driver = spec.driver
    if driver == "hackernews":
        return HackerNewsSource()
    if driver == "hnsearch":
        return HNSearchSource(spec.name, spec.queries, spec.icon)
    if driver == "github-trending":
        return GitHubTrendingSource(spec.name, spec.topics, spec.icon)
    if driver == "tldr":
        if not spec.feed_url:
            return None
        return TLDRSource(spec.name, spec.feed_url, spec.icon)
    if driver == "rss":
        if not spec.feed_url:
            return None
        return RSSSource(spec.name, spec.feed_url, spec.icon)
    if driver == "lobsters":
        return LobstersSource(spec.name, spec.tags, spec.icon)
    if driver == "reddit":
        return RedditSource(spec.name, spec.subreddits, spec.icon)
    if driver == "arxiv":
        return ArxivSource(spec.name, spec.categories or DEFAULT_CATEGORIES, spec.icon)
    return None


def build_registry(cfg: HotbrewConfig, profile: Profile | None = None) -> Registry:
    """Register every usable source of the active profile.

    Specs tied to a ``config_key`` are skipped unless that key is present
    and enabled in ``cfg.sources``; its settings are passed to the source.
    """
    profile = profile or load_profile(cfg.get_profile_name())
    registry = Registry()

    for spec in profile.sources:
        source_config = SourceConfig()
        if spec.config_key:
            settings = cfg.sources.get(spec.config_key)
            if settings is None or not settings.enabled:
                continue
            source_config = SourceConfig(enabled=True, settings=dict(settings.settings))

        source = instantiate_source(spec)
        if source is None:
            logger.warning("Skipping source %s: unknown or incomplete driver %r", spec.key, spec.driver)
            continue
        registry.register(spec.key, source, source_config)

    return registry
