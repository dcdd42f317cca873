"""Item commands: list, open, save, curate, add."""
from __future__ import annotations

import asyncio
import html
import logging
import re
import subprocess
import sys
import webbrowser
from pathlib import Path

import httpx
import typer

from hotbrew.shared.constants import USER_AGENT
from hotbrew.shared.errors import ItemNotFoundError
from hotbrew.shared.utils import format_age, now_utc, sanitize_text, truncate
from hotbrew.sources.base import SourceConfig, new_client
from hotbrew.sources.rss import RSSSource
from hotbrew.store.models import ItemFilter
from hotbrew.store.store import Store
from hotbrew.sync.sync import sync_source
from hotbrew.trss.fingerprint import canonical_url, fingerprint, generate_id, short_id
from hotbrew.trss.models import Item, ItemSource

logger = logging.getLogger(__name__)

DEFAULT_TOP = 20
LIST_SUMMARY_LIMIT = 100
CURATED_SOURCE = "Curated"
CURATED_ICON = "📌"
CURATED_SCORE = 8.0
ADD_SYNC_MAX = 20
ADD_SYNC_TIMEOUT = 30.0
TITLE_FETCH_TIMEOUT = 10.0
TITLE_FETCH_LIMIT = 64 * 1024

_TITLE_RE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)


def score_marker(score: float) -> str:
    if score >= 7:
        return "🔥"
    if score >= 4:
        return "⭐"
    return "  "


def _state_marker(item: Item) -> str:
    return {"read": " ✓", "saved": " ★"}.get(item.meta.get("state", ""), "")


# ---------------------------------------------------------------------------
# list / open / save
# ---------------------------------------------------------------------------


def list_items(store: Store, unread: bool = False, source_name: str = "", top: int = DEFAULT_TOP) -> int:
    """Print stored items best first; returns how many were shown."""
    if top <= 0:
        top = DEFAULT_TOP
    items = store.list_items(ItemFilter(unread=unread, source_name=source_name, limit=top))
    if not items:
        typer.echo("No items found. Run 'hotbrew sync' to fetch content.")
        return 0

    counts = store.count_by_state()
    typer.echo(f"☕ {counts['unread']} unread · {counts['read']} read · {counts['saved']} saved\n")

    for index, item in enumerate(items, start=1):
        title = sanitize_text(item.title)
        typer.echo(f"  {score_marker(item.score)} {index:2d}. {title}{_state_marker(item)}")
        typer.echo(
            f"       {item.source.icon} {sanitize_text(item.source.name)}"
            f" · {format_age(item.published_at)} · {short_id(item.id)}"
        )
        if item.summary:
            typer.echo(f"       {truncate(sanitize_text(item.summary), LIST_SUMMARY_LIMIT)}")
        typer.echo()
    return len(items)


def _find(store: Store, id_prefix: str) -> Item:
    try:
        return store.get_item(id_prefix)
    except ItemNotFoundError as exc:
        typer.echo(f"Item not found: {exc}", err=True)
        raise typer.Exit(1)


def open_browser(url: str) -> None:
    """Open *url* with the platform opener, falling back to :mod:`webbrowser`."""
    if sys.platform == "darwin":
        command = ["open", url]
    elif sys.platform.startswith("linux"):
        command = ["xdg-open", url]
    else:
        webbrowser.open(url)
        return
    try:
        subprocess.Popen(command, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except OSError:
        typer.echo(f"Open: {url}")


def open_item(store: Store, id_prefix: str) -> None:
    if not id_prefix:
        typer.echo("Usage: hotbrew open <id-prefix>")
        typer.echo("\nUse 'hotbrew list' to see item IDs.")
        raise typer.Exit(1)

    item = _find(store, id_prefix)
    if not item.url:
        typer.echo("This item has no URL.")
        return

    open_browser(item.url)
    typer.echo(f"✓ Opened: {sanitize_text(item.title)}")
    store.mark_read(item.id)


def save_item(store: Store, id_prefix: str) -> None:
    if not id_prefix:
        typer.echo("Usage: hotbrew save <id-prefix>")
        raise typer.Exit(1)

    item = _find(store, id_prefix)
    store.mark_saved(item.id)
    typer.echo(f"★ Saved: {sanitize_text(item.title)}")


# ---------------------------------------------------------------------------
# curate
# ---------------------------------------------------------------------------


def extract_title(document: str) -> str:
    """Return the unescaped ``<title>`` of an HTML document, or ``""``."""
    match = _TITLE_RE.search(document)
    if not match:
        return ""
    return html.unescape(match.group(1).strip())


def fetch_title(url: str, client: httpx.Client | None = None) -> str:
    """Best-effort page title lookup; ``""`` on any network failure."""
    owns_client = client is None
    http = client or httpx.Client(
        timeout=TITLE_FETCH_TIMEOUT,
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
    )
    try:
        response = http.get(url)
        return extract_title(response.content[:TITLE_FETCH_LIMIT].decode("utf-8", errors="replace"))
    except httpx.HTTPError as exc:
        logger.debug("Title fetch for %s failed: %s", url, exc)
        return ""
    finally:
        if owns_client:
            http.close()


def curate(
    store: Store,
    url: str,
    title: str = "",
    tags: list[str] | None = None,
    note: str = "",
) -> Item:
    """Store a hand-picked link as a saved, high-scoring item."""
    if not url:
        typer.echo('Usage: hotbrew curate <url> [--title "..."] [--tags ai,coding] [--note "..."]')
        typer.echo("\nExamples:")
        typer.echo("  hotbrew curate https://example.com/great-article")
        typer.echo('  hotbrew curate https://x.com/user/status/123 --title "Great thread on AI"')
        typer.echo("  hotbrew curate https://arxiv.org/abs/2401.00001 --tags ai,paper")
        raise typer.Exit(1)

    if not title:
        typer.echo("  Fetching title... ", nl=False)
        title = fetch_title(url)
        if title:
            typer.echo(title)
        else:
            typer.echo("(could not fetch, using URL)")
            title = url

    tags = [t.strip() for t in (tags or []) if t.strip()]
    canonical = canonical_url(url)
    now = now_utc()
    item = Item(
        id=generate_id(canonical),
        fingerprint=fingerprint(canonical),
        title=title,
        url=url,
        url_canonical=canonical,
        source=ItemSource(name=CURATED_SOURCE, icon=CURATED_ICON),
        published_at=now,
        fetched_at=now,
        summary=note,
        tags=tags,
        score=CURATED_SCORE,
        meta={"curated": True},
    )

    source_id = store.get_or_create_source(CURATED_SOURCE, "manual", "", CURATED_ICON)
    store.insert_item(item, source_id)
    store.mark_saved(item.id)

    typer.echo(f"📌 Curated: {title}")
    typer.echo(f"   ID: {item.id}")
    if tags:
        typer.echo(f"   Tags: {', '.join(tags)}")
    return item


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------


async def _initial_sync(store: Store, source: RSSSource) -> tuple[int, str]:
    async with new_client() as client:
        try:
            result = await asyncio.wait_for(
                sync_source(store, "rss", source, SourceConfig(settings={"max": ADD_SYNC_MAX}), client),
                timeout=ADD_SYNC_TIMEOUT,
            )
        except asyncio.TimeoutError:
            return 0, "timed out"
    return result.item_count, result.error


def add_feed(store: Store, feed_url: str, name: str = "") -> int:
    """Register an RSS/Atom feed and fetch its first items.

    Returns:
        The new source id.
    """
    if not feed_url:
        typer.echo("Usage: hotbrew add <feed-url> [name]")
        typer.echo("\nExamples:")
        typer.echo("  hotbrew add https://blog.golang.org/feed.atom")
        typer.echo('  hotbrew add https://simonwillison.net/atom/everything/ "Simon Willison"')
        raise typer.Exit(1)

    name = name or feed_url
    source_id = store.insert_source(name, "rss", feed_url, "📰")
    typer.echo(f"✓ Added source #{source_id}: {name}")
    typer.echo("  Fetching initial items...")

    count, error = asyncio.run(_initial_sync(store, RSSSource(name, feed_url, "📰")))
    if error:
        typer.echo(f"  Warning: initial sync failed: {error}", err=True)
        typer.echo("  Source saved. It will be fetched on next sync.")
    else:
        typer.echo(f"  ✓ Fetched {count} items")
    return source_id


# ---------------------------------------------------------------------------
# stream
# ---------------------------------------------------------------------------


def stream(log_path: Path) -> int:
    """Print every line of the stream log; returns the line count."""
    if not log_path.exists():
        typer.echo("No stream log yet. Run 'hotbrew sync' first, or start the daemon.")
        return 0

    count = 0
    with log_path.open(encoding="utf-8") as fh:
        for line in fh:
            typer.echo(line.rstrip("\n"))
            count += 1
    return count
