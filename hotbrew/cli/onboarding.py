"""First-run setup, shell integration and server login."""
from __future__ import annotations

import logging
import os
from pathlib import Path

import httpx
import typer
from rich.console import Console

from hotbrew.shared.config import HotbrewSettings
from hotbrew.shared.constants import CAVEATS, DEFAULT_SERVER_URL, STARTUP_LINE, TAGLINE, TOKEN_FILE_MODE
from hotbrew.shared.errors import HotbrewError
from hotbrew.settings.config import init_config, load_config, save_config, token_path
from hotbrew.settings.profile import ensure_default_profile

logger = logging.getLogger(__name__)

_console = Console(highlight=False)

THEME_CHOICES = {
    "1": "synthwave",
    "2": "mocha",
    "3": "nord",
    "4": "dracula",
    "5": "ocean",
}
RC_COMMENT = "\n# hotbrew - Your morning, piping hot\n"

_CUP = """
    [#87d7ff]) )[/]
   [#87d7ff]( ([/]
    [#87d7ff]) )[/]
   [#ff5faf]______[/]
  [#ff5faf]|      |\\][/]
  [#ff5faf]|      |[/]
   [#ff5faf]\\____/[/]
"""


def shell_rc_file(shell: str | None = None, home: Path | None = None) -> Path | None:
    """The rc file first-run setup may append to (zsh and bash only)."""
    shell = os.environ.get("SHELL", "") if shell is None else shell
    home = home or Path.home()
    if "zsh" in shell:
        return home / ".zshrc"
    if "bash" in shell:
        return home / ".bashrc"
    return None


def shell_rc_hint(shell: str | None = None) -> str:
    shell = os.environ.get("SHELL", "") if shell is None else shell
    if "zsh" in shell:
        return "~/.zshrc"
    if "bash" in shell:
        return "~/.bashrc"
    if "fish" in shell:
        return "~/.config/fish/config.fish"
    return "your shell's rc file"


def setup_instructions(shell: str | None = None) -> None:
    typer.echo("☕ Setup hotbrew to run on terminal open")
    typer.echo()
    typer.echo(f"Add this line to {shell_rc_hint(shell)}:")
    typer.echo()
    typer.echo("  # Show hotbrew on new terminal")
    typer.echo("  hotbrew")
    typer.echo()
    typer.echo("Or for a less intrusive option:")
    typer.echo()
    typer.echo("  # Show hotbrew greeting")
    typer.echo("  echo \"☕ Run 'hotbrew' for your morning digest\"")
    typer.echo()
    typer.echo(CAVEATS)


def append_startup_line(rc_file: Path) -> bool:
    """Append the startup hook to an existing rc file."""
    if not rc_file.exists():
        return False
    try:
        with rc_file.open("a", encoding="utf-8") as fh:
            fh.write(RC_COMMENT)
            fh.write(f"{STARTUP_LINE}\n")
    except OSError as exc:
        logger.warning("Could not update %s: %s", rc_file, exc)
        return False
    return True


def first_run_setup(shell: str | None = None, home: Path | None = None) -> str:
    """Interactive welcome: config, default profile, theme and shell hook.

    Returns:
        The chosen theme name.
    """
    _console.print(_CUP)
    _console.print("[bold]☕ Welcome to hotbrew![/bold]")
    typer.echo(f"   {TAGLINE}")
    typer.echo()
    typer.echo("Let's get you set up in 10 seconds...")
    typer.echo()

    init_config()
    ensure_default_profile()

    typer.echo("Pick a theme:")
    typer.echo("  [1] synthwave - Neon pink/purple (default)")
    typer.echo("  [2] mocha     - Coffee browns")
    typer.echo("  [3] nord      - Arctic blues")
    typer.echo("  [4] dracula   - Dark purples")
    typer.echo("  [5] ocean     - Deep sea")
    choice = typer.prompt(
        "\nChoice [1-5, or Enter for default]", default="", show_default=False
    )
    selected = THEME_CHOICES.get(choice.strip(), "synthwave")

    cfg = load_config()
    cfg.theme = selected
    save_config(cfg)
    typer.echo(f"\n✓ Theme set to {selected}")

    answer = typer.prompt(
        "\nAdd hotbrew to your shell (shows on terminal open)? [Y/n]",
        default="",
        show_default=False,
    )
    if answer.strip().lower() in ("", "y"):
        rc_file = shell_rc_file(shell, home)
        if rc_file is not None and append_startup_line(rc_file):
            typer.echo(f"✓ Added to {rc_file}")

    typer.echo()
    _console.print("[bold]☕ You're all set! Loading your first brew...[/bold]")
    typer.echo()
    return selected


# ---------------------------------------------------------------------------
# Server account
# ---------------------------------------------------------------------------


def login(token: str) -> Path | None:
    """Persist the subscription token with owner-only permissions."""
    if not token:
        typer.echo("Usage: hotbrew login <token>")
        typer.echo(f"\nGet your token at {DEFAULT_SERVER_URL}")
        return None

    path = token_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, TOKEN_FILE_MODE)
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        fh.write(token)
    # O_CREAT leaves the mode of an existing file alone
    os.chmod(path, TOKEN_FILE_MODE)

    typer.echo("☕ Logged in successfully!")
    typer.echo()
    typer.echo("Next steps:")
    typer.echo("  1. Run 'hotbrew' to see your newsletter")
    typer.echo("  2. Run 'hotbrew setup' to add hotbrew to your shell")
    typer.echo()
    return path


def sync_remote(client: httpx.Client | None = None) -> dict | None:
    """Fetch this account's config from the subscription server.

    Raises:
        HotbrewError: When the server cannot be reached or answers garbage.
    """
    path = token_path()
    try:
        token = path.read_text(encoding="utf-8").strip()
    except OSError:
        typer.echo("Not logged in. Run 'hotbrew login <token>' first.")
        typer.echo(f"Get your token at {DEFAULT_SERVER_URL}")
        return None

    server_url = HotbrewSettings().server_url.rstrip("/")
    owns_client = client is None
    http = client or httpx.Client(timeout=15.0)
    try:
        response = http.get(f"{server_url}/api/config/{token}")
    except httpx.HTTPError as exc:
        raise HotbrewError(f"connect server: {exc}") from exc
    finally:
        if owns_client:
            http.close()

    if response.status_code == 404:
        typer.echo(f"Invalid token. Please check your token or subscribe at {DEFAULT_SERVER_URL}")
        return None
    try:
        remote = response.json()
    except ValueError as exc:
        raise HotbrewError(f"parse response: {exc}") from exc

    typer.echo("☕ Remote config synced!")
    typer.echo(f"Theme: {remote.get('theme')}")
    return remote
