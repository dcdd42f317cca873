"""hotbrew command line: ``hotbrew`` with no arguments syncs and shows the digest."""
from __future__ import annotations

import asyncio
import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Annotated, Optional

import typer
from rich.console import Console

from hotbrew import daemon as daemon_mod
from hotbrew.cli import digest as digest_cmd
from hotbrew.cli import items as items_cmd
from hotbrew.cli import onboarding
from hotbrew.cli import rules as rules_cmd
from hotbrew.cli import sources as sources_cmd
from hotbrew.display.theme import list_themes
from hotbrew.settings.config import (
    HotbrewConfig,
    config_path,
    init_config,
    is_first_run,
    load_config,
    save_config,
    server_data_dir,
)
from hotbrew.shared.config import HotbrewSettings
from hotbrew.shared.constants import DEFAULT_SERVE_ADDR, SERVICE_NAME, VERSION
from hotbrew.shared.errors import ConfigurationError, HotbrewError, StoreError
from hotbrew.shared.logging import setup_logging
from hotbrew.sources.factory import build_registry
from hotbrew.store.store import Store
from hotbrew.sync.sync import print_results, sync_all

_console = Console(highlight=False)

app = typer.Typer(
    name="hotbrew",
    help="Terminal RSS, piping hot.",
    add_completion=False,
    no_args_is_help=False,
)

HELP_TEXT = """
☕ hotbrew — Terminal RSS, piping hot

USAGE:
    hotbrew                  Sync, then show the digest viewer
    hotbrew sync             Fetch all sources → SQLite
    hotbrew sync --remote    Pull your account config from the server
    hotbrew digest           Show curated digest (pretty)
    hotbrew digest --json    Output as TRSS NDJSON
    hotbrew list [flags]     List items from store
    hotbrew open <id>        Open item in browser, mark read
    hotbrew save <id>        Save an item for later
    hotbrew add <url> [name] Add an RSS feed source
    hotbrew sources          List registered sources
    hotbrew curate <url>     Manually save a link (auto-fetches title)
    hotbrew mute <domain>    Mute a domain
    hotbrew boost <tag>      Boost items with a tag
    hotbrew rules            List active rules
    hotbrew stream           Tail the stream log
    hotbrew daemon start     Start background sync daemon
    hotbrew daemon stop      Stop the daemon
    hotbrew daemon status    Check daemon status
    hotbrew config           View config file location
    hotbrew themes           List available themes
    hotbrew login <token>    Save your hotbrew.dev token
    hotbrew setup            Shell integration instructions
    hotbrew serve [addr]     Run the web server
    hotbrew version          Show the version
    hotbrew help             Show this help

LIST FLAGS:
    --unread            Only show unread items
    --source <name>     Filter by source name
    --top <n>           Show top N items (default 20)

THEMES:
    synthwave, nord, dracula, mocha, ocean, forest, sunset, midnight

QUICK START:
    hotbrew sync && hotbrew digest

For more info: https://github.com/jcornudella/hotbrew
"""


# ---------------------------------------------------------------------------
# Shared plumbing
# ---------------------------------------------------------------------------


def _load_config() -> HotbrewConfig:
    try:
        return load_config()
    except ConfigurationError as exc:
        typer.echo(f"load config: {exc}", err=True)
        raise typer.Exit(1)


@contextmanager
def _open_store(cfg: HotbrewConfig | None = None) -> Iterator[Store]:
    cfg = cfg or _load_config()
    try:
        store = Store(cfg.get_db_path())
    except StoreError as exc:
        typer.echo(f"open store: {exc}", err=True)
        raise typer.Exit(1)
    with store:
        yield store


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"hotbrew v{VERSION}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def root(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version", "-v", callback=_version_callback, is_eager=True, help="Show the version and exit."
        ),
    ] = False,
) -> None:
    """Terminal RSS, piping hot."""
    setup_logging(SERVICE_NAME, HotbrewSettings().log_level)
    if ctx.invoked_subcommand is None:
        sync_and_run()


# ---------------------------------------------------------------------------
# Meta
# ---------------------------------------------------------------------------


@app.command("version")
def version_cmd() -> None:
    """Show the version."""
    typer.echo(f"hotbrew v{VERSION}")


@app.command("help")
def help_cmd() -> None:
    """Show usage for every command."""
    typer.echo(HELP_TEXT, nl=False)


@app.command("config")
def config_cmd(
    init: Annotated[bool, typer.Option("--init", help="Create the default config file.")] = False,
) -> None:
    """Show (and create if needed) the config file."""
    try:
        init_config()
    except OSError as exc:
        typer.echo(f"create config: {exc}", err=True)
        raise typer.Exit(1)

    path = config_path()
    if init:
        typer.echo(f"Config created at {path}")
        return
    editor = os.environ.get("EDITOR") or "vim"
    typer.echo(f"Config file: {path}")
    typer.echo(f"Open with: {editor} {path}")


def _theme(name: str) -> None:
    available = list_themes()
    if not name:
        typer.echo("☕ Available themes:")
        for theme_name in available:
            typer.echo(f"  • {theme_name}")
        typer.echo("\nSet theme with: hotbrew theme <name>")
        return

    if name not in available:
        typer.echo(f"Unknown theme '{name}'. Run 'hotbrew theme' to list options.")
        return

    cfg = _load_config()
    cfg.theme = name
    save_config(cfg)
    typer.echo(f"✓ Theme switched to {name}")
    typer.echo("Restart hotbrew to apply changes.")


@app.command("theme")
def theme_cmd(name: Annotated[str, typer.Argument(help="Theme to switch to.")] = "") -> None:
    """List themes, or switch to one."""
    _theme(name)


@app.command("themes", hidden=True)
def themes_cmd(name: Annotated[str, typer.Argument()] = "") -> None:
    _theme(name)


@app.command("login")
def login_cmd(token: Annotated[str, typer.Argument(help="Token from hotbrew.dev.")] = "") -> None:
    """Save your subscription token."""
    onboarding.login(token)


@app.command("setup")
def setup_cmd() -> None:
    """Print shell integration instructions."""
    onboarding.setup_instructions()


# ---------------------------------------------------------------------------
# Sync and digest
# ---------------------------------------------------------------------------


def _sync(cfg: HotbrewConfig) -> None:
    registry = build_registry(cfg)
    with _open_store(cfg) as store:
        _console.print("☕ Syncing sources...")
        results = asyncio.run(sync_all(store, registry))
        print_results(results, _console)
        typer.echo(f"\nTotal items in store: {store.item_count()}")


@app.command("sync")
def sync_cmd(
    remote: Annotated[bool, typer.Option("--remote", help="Pull account config from the server.")] = False,
) -> None:
    """Fetch all sources into the local store."""
    if remote:
        try:
            onboarding.sync_remote()
        except HotbrewError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(1)
        return
    _sync(_load_config())


@app.command("digest")
def digest_cmd_(
    as_json: Annotated[bool, typer.Option("--json", help="Output TRSS NDJSON.")] = False,
) -> None:
    """Show the curated digest."""
    cfg = _load_config()
    with _open_store(cfg) as store:
        digest_cmd.show_digest(store, cfg, as_json=as_json)


@app.command("sync-and-run")
def sync_and_run() -> None:
    """Sync, then show the digest viewer (the default command)."""
    if is_first_run():
        onboarding.first_run_setup()

    cfg = _load_config()
    try:
        _sync(cfg)
    except (typer.Exit, HotbrewError):
        typer.echo("⚠️  Local sync failed; continuing with cached items.")

    digest_cmd.run_viewer(cfg, build_registry(cfg))


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


@app.command("add")
def add_cmd(
    url: Annotated[str, typer.Argument(help="RSS or Atom feed URL.")] = "",
    name: Annotated[str, typer.Argument(help="Display name.")] = "",
) -> None:
    """Add an RSS feed source."""
    with _open_store() as store:
        items_cmd.add_feed(store, url, name)


def _list(unread: bool, source: str, top: int) -> None:
    with _open_store() as store:
        items_cmd.list_items(store, unread=unread, source_name=source, top=top)


@app.command("list")
def list_cmd(
    unread: Annotated[bool, typer.Option("--unread", help="Only show unread items.")] = False,
    source: Annotated[str, typer.Option("--source", help="Filter by source name.")] = "",
    top: Annotated[int, typer.Option("--top", help="Show top N items.")] = items_cmd.DEFAULT_TOP,
) -> None:
    """List items from the store."""
    _list(unread, source, top)


@app.command("ls", hidden=True)
def ls_cmd(
    unread: Annotated[bool, typer.Option("--unread")] = False,
    source: Annotated[str, typer.Option("--source")] = "",
    top: Annotated[int, typer.Option("--top")] = items_cmd.DEFAULT_TOP,
) -> None:
    _list(unread, source, top)


@app.command("open")
def open_cmd(item_id: Annotated[str, typer.Argument(help="Item ID prefix.")] = "") -> None:
    """Open an item in the browser and mark it read."""
    with _open_store() as store:
        items_cmd.open_item(store, item_id)


@app.command("save")
def save_cmd(item_id: Annotated[str, typer.Argument(help="Item ID prefix.")] = "") -> None:
    """Save an item for later."""
    with _open_store() as store:
        items_cmd.save_item(store, item_id)


@app.command("curate")
def curate_cmd(
    url: Annotated[str, typer.Argument(help="Link to save.")] = "",
    title: Annotated[str, typer.Option("--title", help="Title; fetched from the page when omitted.")] = "",
    tags: Annotated[str, typer.Option("--tags", help="Comma-separated tags.")] = "",
    note: Annotated[str, typer.Option("--note", help="Why it is worth reading.")] = "",
) -> None:
    """Manually save a link."""
    with _open_store() as store:
        items_cmd.curate(store, url, title=title, tags=tags.split(","), note=note)


@app.command("stream")
def stream_cmd() -> None:
    """Print the stream log."""
    items_cmd.stream(_load_config().get_stream_log_path())


# ---------------------------------------------------------------------------
# Rules and sources
# ---------------------------------------------------------------------------


@app.command("mute")
def mute_cmd(domain: Annotated[str, typer.Argument(help="Domain to exclude.")] = "") -> None:
    """Mute a domain."""
    with _open_store() as store:
        rules_cmd.mute(store, domain)


@app.command("boost")
def boost_cmd(tag: Annotated[str, typer.Argument(help="Tag to rank higher.")] = "") -> None:
    """Boost items with a tag."""
    with _open_store() as store:
        rules_cmd.boost(store, tag)


@app.command("rules")
def rules_cmd_(
    delete: Annotated[Optional[str], typer.Option("--delete", help="Rule ID to delete.")] = None,
) -> None:
    """List active rules, or delete one."""
    with _open_store() as store:
        if delete is not None:
            rules_cmd.delete_rule(store, delete)
        else:
            rules_cmd.show_rules(store)


@app.command("sources")
def sources_cmd_() -> None:
    """List registered sources."""
    with _open_store() as store:
        sources_cmd.show_sources(store)


# ---------------------------------------------------------------------------
# Long-running processes
# ---------------------------------------------------------------------------


@app.command("daemon")
def daemon_cmd(action: Annotated[str, typer.Argument(help="start, stop or status.")] = "status") -> None:
    """Manage the background sync daemon."""
    try:
        if action == "start":
            cfg = _load_config()
            daemon_mod.start(cfg, build_registry(cfg), _console)
        elif action == "stop":
            daemon_mod.stop(_console)
        elif action == "status":
            daemon_mod.status(_console)
        else:
            typer.echo("Usage: hotbrew daemon [start|stop|status]")
    except HotbrewError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1)


@app.command("serve")
def serve_cmd(addr: Annotated[str, typer.Argument(help="Listen address, e.g. :8080.")] = DEFAULT_SERVE_ADDR) -> None:
    """Run the subscription web server."""
    from hotbrew.server.main import run

    _console.print("☕ Starting hotbrew server...")
    run(addr, str(server_data_dir()))


def main() -> None:
    app(prog_name="hotbrew")


if __name__ == "__main__":
    main()
