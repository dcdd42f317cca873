"""Digest output, the rating prompt, and the digest viewers."""
from __future__ import annotations

import asyncio
import logging
import sys
from typing import IO

import httpx
import typer

from hotbrew.cli.items import open_browser
from hotbrew.curation.engine import Engine
from hotbrew.display.interactive import DigestApp, DigestController
from hotbrew.display.theme import theme_for_config
from hotbrew.display.viewer import render_digest_view
from hotbrew.settings.config import HotbrewConfig
from hotbrew.shared.constants import DIGEST_TITLE
from hotbrew.shared.errors import HotbrewError, StoreError
from hotbrew.sinks.stdout import StdoutSink
from hotbrew.sinks.tui import digest_to_sections
from hotbrew.sources.base import Registry, Section, new_client
from hotbrew.sources.factory import build_registry
from hotbrew.store.store import Store
from hotbrew.trss.models import Digest
from hotbrew.trss.ndjson import encode_digest

logger = logging.getLogger(__name__)


def generate(store: Store, cfg: HotbrewConfig) -> Digest:
    return Engine(store).generate_digest(cfg.get_digest_window(), cfg.get_digest_max(), DIGEST_TITLE)


def show_digest(store: Store, cfg: HotbrewConfig, as_json: bool = False, stream: IO[str] | None = None) -> Digest:
    """Print the current digest; JSON mode writes TRSS NDJSON instead."""
    digest = generate(store, cfg)
    if as_json:
        encode_digest(stream or sys.stdout, digest)
        return digest

    StdoutSink().deliver(digest)
    prompt_rating(store)
    return digest


def prompt_rating(store: Store) -> int | None:
    """Ask for a 1-4 rating of the digest and store it as feedback."""
    typer.echo("How good was today's issue? (1=meh, 4=amazing)")
    try:
        value = typer.prompt("Rating [1-4, Enter to skip]", default="", show_default=False)
    except typer.Abort:
        return None

    value = value.strip()
    if not value:
        typer.echo("Thanks! We'll keep brewing.")
        return None
    try:
        rating = int(value)
    except ValueError:
        rating = 0
    if not 1 <= rating <= 4:
        typer.echo("Got it — skipping feedback.")
        return None

    try:
        store.insert_feedback(rating)
    except StoreError as exc:
        typer.echo(f"Couldn't record feedback: {exc}")
        return None
    typer.echo("Appreciate the feedback!")
    return rating


# ---------------------------------------------------------------------------
# Viewer
# ---------------------------------------------------------------------------


async def fetch_live_sections(registry: Registry) -> list[Section]:
    """Fetch every registered source directly, skipping the ones that fail."""
    async with new_client() as client:

        async def _fetch(key: str, source) -> Section | None:
            try:
                section = await source.fetch(client, registry.config_for(key))
            except (HotbrewError, httpx.HTTPError, ValueError) as exc:
                logger.warning("Live fetch of %s failed: %s", key, exc)
                return None
            return section if section.items else None

        sections = await asyncio.gather(*(_fetch(key, source) for key, source in registry))

    return [s for s in sections if s is not None]


def load_sections(cfg: HotbrewConfig, registry: Registry, store: Store | None = None) -> list[Section]:
    """Digest sections from the store, or from a live fetch when it has none."""
    sections: list[Section] = []
    try:
        if store is not None:
            sections = digest_to_sections(generate(store, cfg))
        else:
            with Store(cfg.get_db_path()) as opened:
                sections = digest_to_sections(generate(opened, cfg))
    except StoreError as exc:
        logger.warning("Store unavailable, fetching live: %s", exc)

    if not sections and len(registry):
        sections = asyncio.run(fetch_live_sections(registry))
    return sections


def run_interactive(cfg: HotbrewConfig, registry: Registry) -> list[Section]:
    """Browse the digest full-screen until the user quits."""
    try:
        store: Store | None = Store(cfg.get_db_path())
    except StoreError as exc:
        logger.warning("Store unavailable, browsing live items only: %s", exc)
        store = None

    profile_name = cfg.get_profile_name()

    def loader() -> list[Section]:
        # the profile picker can switch the set of live sources
        active = registry if cfg.get_profile_name() == profile_name else build_registry(cfg)
        return load_sections(cfg, active, store)

    controller = DigestController(cfg, store=store, opener=open_browser)
    try:
        DigestApp(controller, loader).run()
    finally:
        if store is not None:
            store.close()
    return controller.sections


def run_viewer(cfg: HotbrewConfig, registry: Registry, interactive: bool | None = None) -> list[Section]:
    """Show the digest: full-screen on a terminal, as a static view otherwise.

    *interactive* defaults to whether both stdin and stdout are a TTY.
    """
    if interactive is None:
        interactive = sys.stdin.isatty() and sys.stdout.isatty()
    if interactive:
        return run_interactive(cfg, registry)

    sections = load_sections(cfg, registry)
    render_digest_view(sections, theme_for_config(cfg.theme, cfg.custom_theme))
    return sections
