"""Fetch every registered source concurrently and store the results."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import httpx
from rich.console import Console
from rich.markup import escape

from hotbrew.shared.constants import MAX_CONCURRENT_SOURCES, SYNC_TIMEOUT_SECONDS
from hotbrew.shared.errors import HotbrewError
from hotbrew.sources.base import Registry, Source, SourceConfig, new_client
from hotbrew.store.store import Store
from hotbrew.sync.convert import convert_section

logger = logging.getLogger(__name__)

_console = Console()


@dataclass
class SyncResult:
    """Outcome of syncing one source."""

    source_key: str
    source_name: str
    item_count: int = 0
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error


def _record_failure(store: Store, key: str, source: Source) -> None:
    try:
        source_id = store.get_or_create_source(source.name, key, "", source.icon)
        store.incr_sync_errors(source_id)
    except Exception as exc:
        logger.warning("Could not record sync error for %s: %s", key, exc)


async def sync_source(
    store: Store,
    key: str,
    source: Source,
    config: SourceConfig,
    client: httpx.AsyncClient,
) -> SyncResult:
    """Fetch one source and insert its items.

    Fetch failures are captured in the result rather than raised, and
    bump the source's error counter.
    """
    result = SyncResult(source_key=key, source_name=source.name)
    try:
        section = await source.fetch(client, config)
    except (HotbrewError, httpx.HTTPError, ValueError) as exc:
        logger.warning("Fetch %s failed: %s", key, exc)
        _record_failure(store, key, source)
        result.error = f"fetch {key}: {exc}"
        return result

    if section is None or not section.items:
        return result

    source_id = store.get_or_create_source(source.name, key, "", source.icon)
    for item in convert_section(section, source.name, source.icon):
        try:
            store.insert_item(item, source_id)
        except Exception as exc:
            logger.warning("Insert item %s failed: %s", item.id, exc)
            continue
        result.item_count += 1

    store.update_last_sync(source_id)
    logger.info("Synced %s: %d items", key, result.item_count)
    return result


async def sync_all(
    store: Store,
    registry: Registry,
    timeout: float = SYNC_TIMEOUT_SECONDS,
    client: httpx.AsyncClient | None = None,
) -> list[SyncResult]:
    """Sync every source in *registry*, at most a few at a time.

    Each source must finish within *timeout* seconds.  Results come back
    in registry order.
    """
    semaphore = asyncio.Semaphore(MAX_CONCURRENT_SOURCES)
    owns_client = client is None
    http = client or new_client()

    async def _run(key: str, source: Source) -> SyncResult:
        async with semaphore:
            try:
                return await asyncio.wait_for(
                    sync_source(store, key, source, registry.config_for(key), http),
                    timeout=timeout,
                )
            except asyncio.TimeoutError:
                logger.warning("Sync of %s timed out after %.0fs", key, timeout)
                _record_failure(store, key, source)
                return SyncResult(key, source.name, error=f"fetch {key}: timed out")

    try:
        return list(await asyncio.gather(*(_run(key, source) for key, source in registry)))
    finally:
        if owns_client:
            await http.aclose()


def print_results(results: list[SyncResult], console: Console | None = None) -> None:
    """Print a per-source summary of a sync run."""
    out = console or _console
    total = 0
    errors = 0
    for r in results:
        if r.error:
            out.print(f"  [red]✗[/red] {escape(r.source_key)}: {escape(r.error)}")
            errors += 1
        else:
            out.print(f"  [green]✓[/green] {escape(r.source_key)}: {r.item_count} items")
            total += r.item_count

    summary = f"\nSynced {total} items from {len(results) - errors} sources"
    if errors:
        summary += f" ({errors} errors)"
    out.print(summary)
