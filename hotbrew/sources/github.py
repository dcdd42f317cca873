"""Trending GitHub repositories via the repository search API."""
from __future__ import annotations

from datetime import timedelta
from typing import Any

import httpx

from hotbrew.shared.utils import now_utc, parse_rfc3339, truncate
from hotbrew.sources.base import Action, Section, Source, SourceConfig, SourceItem, priority_for

SEARCH_URL = "https://api.github.com/search/repositories"

LANGUAGE_ICONS: dict[str, str] = {
    "Go": "🐹",
    "Python": "🐍",
    "JavaScript": "💛",
    "TypeScript": "💙",
    "Rust": "🦀",
    "Java": "☕",
    "C++": "⚡",
    "C": "⚙️",
    "Ruby": "💎",
    "Swift": "🍎",
    "Kotlin": "🟣",
    "Zig": "⚡",
    "Shell": "🐚",
    "Lua": "🌙",
}
DEFAULT_LANGUAGE_ICON = "📦"


def language_icon(language: str | None) -> str:
    return LANGUAGE_ICONS.get(language or "", DEFAULT_LANGUAGE_ICON)


def format_number(n: int) -> str:
    """Compact star counts: ``1234`` -> ``"1.2k"``."""
    if n >= 1000:
        return f"{n / 1000:.1f}k"
    return str(n)


def build_query(topics: list[str], since: str) -> str:
    """Search query for repos on *topics* pushed after *since* (YYYY-MM-DD)."""
    parts: list[str] = []
    if topics:
        parts.append("(" + " OR ".join(f"topic:{t}" for t in topics) + ")")
    parts.append(f"pushed:>{since}")
    parts.append("stars:>50")
    return " ".join(parts)


class GitHubTrendingSource(Source):
    """Recently active, well-starred repositories for a set of topics."""

    ttl = timedelta(minutes=30)

    def __init__(self, name: str, topics: list[str], icon: str = "") -> None:
        self.name = name
        self.topics = list(topics)
        self.icon = icon or "⭐"

    async def fetch(self, client: httpx.AsyncClient, config: SourceConfig) -> Section:
        max_items = config.get_int("max", 8)
        since = (now_utc() - timedelta(days=7)).strftime("%Y-%m-%d")

        data = await self._get_json(
            client,
            SEARCH_URL,
            params={
                "q": build_query(self.topics, since),
                "sort": "stars",
                "order": "desc",
                "per_page": str(max_items),
            },
            headers={
                "User-Agent": "hotbrew-cli",
                "Accept": "application/vnd.github.v3+json",
            },
        )
        repos = data.get("items", []) if isinstance(data, dict) else []
        items = [self._to_item(repo) for repo in repos]
        return Section(name=self.name, icon=self.icon, priority=25, items=items)

    def _to_item(self, repo: dict[str, Any]) -> SourceItem:
        stars = int(repo.get("stargazers_count") or 0)
        language = repo.get("language") or ""
        lang_icon = language_icon(language)
        owner = (repo.get("owner") or {}).get("login", "")
        url = repo.get("html_url", "")

        return SourceItem(
            id=f"gh-{repo.get('id', 0)}",
            title=repo.get("full_name", ""),
            subtitle=f"{lang_icon} ⭐ {format_number(stars)}  •  {owner}",
            body=truncate(repo.get("description") or "", 80),
            url=url,
            timestamp=parse_rfc3339(repo.get("updated_at")) or now_utc(),
            priority=priority_for(stars, 5000, 1000, 200),
            category="github",
            icon=lang_icon,
            actions=[Action(key="o", label="open repo", command=url)],
            metadata={
                "stars": stars,
                "forks": int(repo.get("forks_count") or 0),
                "language": language,
                "topics": list(repo.get("topics") or []),
            },
        )
