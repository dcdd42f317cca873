"""Shared test fixtures for the hotbrew test suite."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Generator

import pytest

from hotbrew.store.store import Store
from hotbrew.trss.fingerprint import canonical_url, fingerprint, generate_id
from hotbrew.trss.models import Item, ItemSource


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every config lookup at a throwaway directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("HOTBREW_SERVER", raising=False)
    monkeypatch.delenv("HOTBREW_LOG_LEVEL", raising=False)
    return home


@pytest.fixture
def config_home(tmp_path: Path) -> Path:
    """The ``hotbrew`` config directory used by the isolated home."""
    return tmp_path / "xdg" / "hotbrew"


@pytest.fixture
def store(tmp_path: Path) -> Generator[Store, None, None]:
    s = Store(tmp_path / "data" / "hotbrew.db")
    yield s
    s.close()


@pytest.fixture
def make_item() -> Callable[..., Item]:
    """Factory for TRSS items with sensible defaults."""

    def _make(
        title: str = "An article",
        url: str = "https://example.com/post",
        source: str = "Hacker News",
        icon: str = "🔶",
        age: timedelta = timedelta(hours=1),
        **kwargs,
    ) -> Item:
        canonical = canonical_url(url)
        published = datetime.now(timezone.utc) - age
        return Item(
            id=kwargs.pop("id", generate_id(canonical or title)),
            fingerprint=kwargs.pop("fingerprint", fingerprint(canonical or title)),
            title=title,
            url=url,
            url_canonical=canonical,
            source=ItemSource(name=source, icon=icon),
            published_at=published,
            fetched_at=kwargs.pop("fetched_at", datetime.now(timezone.utc)),
            **kwargs,
        )

    return _make
