"""Source profiles: YAML manifests describing which sources to sync.

Profiles live in ``<config_dir>/profiles/<name>.yaml``::

    sources:
      - key: hackernews
        driver: hackernews
        name: Hacker News
        icon: "🔶"
        config_key: hackernews
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from hotbrew.settings.config import pick_fields, profiles_dir
from hotbrew.shared.constants import DEFAULT_PROFILE
from hotbrew.shared.errors import ConfigurationError

logger = logging.getLogger(__name__)

_LIST_FIELDS = ("queries", "topics", "tags", "subreddits", "categories")


@dataclass
class SourceSpec:
    """One source entry in a profile manifest."""

    key: str
    driver: str
    name: str = ""
    icon: str = ""
    config_key: str = ""
    queries: list[str] = field(default_factory=list)
    topics: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    subreddits: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    feed_url: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        # omit empty optional fields in the manifest
        for key in ("config_key", "feed_url", *_LIST_FIELDS):
            if not data[key]:
                data.pop(key)
        return data


@dataclass
class Profile:
    name: str = DEFAULT_PROFILE
    sources: list[SourceSpec] = field(default_factory=list)


@dataclass
class ProfileInfo:
    name: str
    source_count: int


def default_profile() -> Profile:
    """Built-in profile used by the hosted newsletter."""
    return Profile(
        name=DEFAULT_PROFILE,
        sources=[
            SourceSpec(
                key="hackernews",
                driver="hackernews",
                name="Hacker News",
                icon="🔶",
                config_key="hackernews",
            ),
            SourceSpec(
                key="hnsearch-claude",
                driver="hnsearch",
                name="Claude Code & Vibe Coding",
                icon="🤖",
                queries=["Claude Code", "vibe coding", "AI coding assistant", "Anthropic Claude"],
            ),
            SourceSpec(
                key="github-trending",
                driver="github-trending",
                name="GitHub Trending",
                icon="🐙",
                topics=["ai", "llm", "machine-learning", "gpt", "claude"],
            ),
            SourceSpec(
                key="tldr-ai",
                driver="tldr",
                name="TLDR AI",
                icon="🧠",
                feed_url="https://tldr.tech/api/rss/ai",
            ),
            SourceSpec(
                key="tldr-tech",
                driver="tldr",
                name="TLDR Tech",
                icon="💻",
                feed_url="https://tldr.tech/api/rss/tech",
            ),
            SourceSpec(
                key="lobsters",
                driver="lobsters",
                name="Lobste.rs",
                icon="🦞",
                tags=["ai", "ml", "programming", "compsci", "plt"],
            ),
            SourceSpec(
                key="reddit-ai",
                driver="reddit",
                name="Reddit AI",
                icon="🔮",
                subreddits=["MachineLearning", "LocalLLaMA", "ClaudeAI"],
            ),
            SourceSpec(
                key="arxiv-llm",
                driver="arxiv",
                name="LLM Research",
                icon="📄",
                categories=["cs.CL", "cs.AI", "cs.LG", "cs.MA"],
            ),
        ],
    )


def _is_manifest(path: Path) -> bool:
    return path.is_file() and path.suffix in (".yaml", ".yml")


def _load_file(path: Path) -> Profile:
    """Parse one manifest.

    Raises:
        ConfigurationError: If the file is unreadable or malformed.
    """
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"cannot read profile: {exc}", str(path)) from exc
    if not isinstance(raw, dict):
        raise ConfigurationError("profile root must be a mapping", str(path))

    specs: list[SourceSpec] = []
    for entry in raw.get("sources") or []:
        if not isinstance(entry, dict) or not entry.get("key") or not entry.get("driver"):
            logger.warning("Ignoring incomplete source entry in %s: %r", path, entry)
            continue
        specs.append(SourceSpec(**pick_fields(entry, SourceSpec)))
    return Profile(name=path.stem, sources=specs)


def _merge_all(directory: Path) -> Profile:
    merged = Profile(name=DEFAULT_PROFILE)
    if not directory.is_dir():
        return merged
    for path in sorted(directory.iterdir()):
        if not _is_manifest(path):
            continue
        try:
            merged.sources.extend(_load_file(path).sources)
        except ConfigurationError as exc:
            logger.warning("Skipping profile %s: %s", path.name, exc)
    return merged


def load_profile(name: str = "") -> Profile:
    """Load the named profile, falling back to the built-in default.

    For the ``default`` profile with no usable ``default.yaml``, every
    manifest in the profiles directory is merged.
    """
    name = name or DEFAULT_PROFILE
    directory = profiles_dir()

    path = directory / f"{name}.yaml"
    if path.exists():
        try:
            profile = _load_file(path)
            if profile.sources:
                return profile
        except ConfigurationError as exc:
            logger.warning("Falling back from profile %s: %s", name, exc)

    if name == DEFAULT_PROFILE:
        merged = _merge_all(directory)
        if merged.sources:
            return merged

    return default_profile()


def list_profiles() -> list[ProfileInfo]:
    """Available profiles on disk, sorted by name."""
    ensure_default_profile()
    directory = profiles_dir()

    infos: dict[str, ProfileInfo] = {}
    if directory.is_dir():
        for path in directory.iterdir():
            if not _is_manifest(path) or path.stem in infos:
                continue
            try:
                infos[path.stem] = ProfileInfo(path.stem, len(_load_file(path).sources))
            except ConfigurationError:
                continue

    if not infos:
        infos[DEFAULT_PROFILE] = ProfileInfo(DEFAULT_PROFILE, len(default_profile().sources))
    return sorted(infos.values(), key=lambda info: info.name)


def save_profile(name: str, sources: list[SourceSpec]) -> Path:
    """Write *sources* as profile *name*.

    Raises:
        ConfigurationError: If *name* is empty.
    """
    if not name:
        raise ConfigurationError("profile name required")
    path = profiles_dir() / f"{name}.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.safe_dump(
            {"sources": [spec.to_dict() for spec in sources]},
            sort_keys=False,
            allow_unicode=True,
        ),
        encoding="utf-8",
    )
    return path


def ensure_default_profile() -> bool:
    """Write ``default.yaml`` if it does not exist yet.

    Returns:
        ``True`` when the file was created.
    """
    path = profiles_dir() / f"{DEFAULT_PROFILE}.yaml"
    if path.exists():
        return False
    save_profile(DEFAULT_PROFILE, default_profile().sources)
    return True
