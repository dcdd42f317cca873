"""``hotbrew sources``: registered sources and their sync health."""
from __future__ import annotations

import typer

from hotbrew.shared.utils import format_age
from hotbrew.store.store import Store


def show_sources(store: Store) -> None:
    sources = store.list_sources()
    if not sources:
        typer.echo("No sources registered.")
        typer.echo("\nUse 'hotbrew add <url>' to add an RSS feed.")
        typer.echo("Or run 'hotbrew sync' to register built-in sources.")
        return

    typer.echo("☕ Sources:\n")
    for src in sources:
        status = "✓" if src.enabled else "✗"
        if src.sync_errors > 0:
            status = f"⚠ ({src.sync_errors} errors)"
        last_sync = format_age(src.last_sync) if src.last_sync else "never"

        typer.echo(f"  {status} {src.icon} #{src.id} {src.name} ({src.kind})")
        typer.echo(f"      Last sync: {last_sync}")
        if src.url:
            typer.echo(f"      URL: {src.url}")
        typer.echo()
