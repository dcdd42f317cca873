"""Static terminal view of a digest.

Renders the wordmark banner, a time-of-day greeting, one block per
section and a footer of follow-up commands.  All output goes through a
module-level :class:`~rich.console.Console`.
"""

from __future__ import annotations

from datetime import datetime

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from hotbrew.display.theme import Theme, get_theme
from hotbrew.shared.constants import TAGLINE
from hotbrew.shared.utils import format_age, sanitize_text, truncate
from hotbrew.sources.base import Priority, Section, SourceItem
from hotbrew.trss.fingerprint import short_id

# ---------------------------------------------------------------------------
# Module-level Console singleton
# ---------------------------------------------------------------------------

_console = Console()

WORDMARK: tuple[str, ...] = (
    "█ █ █▀█ ▀█▀ █▄▄ █▀█ █▀▀ █ █ █",
    "█▀█ █ █  █  █ █ █▀▄ █▀▀ █ █ █",
    "▀ ▀ ▀▀▀  ▀  ▀▀▀ ▀ ▀ ▀▀▀ ▀▀▀▀▀",
)

PRIORITY_GLYPHS: dict[Priority, str] = {
    Priority.URGENT: "●",
    Priority.HIGH: "●",
    Priority.MEDIUM: "○",
    Priority.LOW: "·",
}

FOOTER_HINTS: tuple[tuple[str, str], ...] = (
    ("hotbrew list", "browse"),
    ("hotbrew open <id>", "open"),
    ("hotbrew save <id>", "save"),
    ("hotbrew sync", "refresh"),
)

TITLE_LIMIT = 90


# ---------------------------------------------------------------------------
# Pieces
# ---------------------------------------------------------------------------


def greeting(hour: int) -> str:
    """Return a greeting for the given hour of the day (0-23)."""
    if hour < 6:
        return "🌙 Night owl"
    if hour < 12:
        return "☀️  Good morning"
    if hour < 17:
        return "🌤  Good afternoon"
    if hour < 21:
        return "🌅 Good evening"
    return "🌙 Good night"


def _gradient_color(stops: tuple[str, ...], position: float) -> str:
    if not stops:
        return "white"
    if len(stops) == 1:
        return stops[0]
    scaled = position * (len(stops) - 1)
    return stops[min(int(round(scaled)), len(stops) - 1)]


def banner(theme: Theme) -> Text:
    """The wordmark, one gradient stop per line, plus the tagline."""
    text = Text()
    last = max(len(WORDMARK) - 1, 1)
    for index, line in enumerate(WORDMARK):
        text.append(line + "\n", style=f"bold {_gradient_color(theme.header_gradient, index / last)}")
    text.append(TAGLINE, style=theme.muted)
    return text


def header(theme: Theme, now: datetime) -> Panel:
    hour12 = now.hour % 12 or 12
    line = Text()
    line.append(f"{now:%A}, {now:%B} {now.day}", style=theme.text_muted)
    line.append("    ")
    line.append(greeting(now.hour), style=theme.text)
    line.append(f"  {hour12}:{now:%M} {now:%p}", style=theme.accent)
    return Panel(line, border_style=theme.primary, expand=False)


def _item_row(item: SourceItem, theme: Theme, first: bool) -> tuple[Text, Text]:
    title = Text(theme.bullet, style=theme.muted)
    title_style = f"bold {theme.text}" if first else theme.text
    title.append(truncate(sanitize_text(item.title), TITLE_LIMIT), style=title_style)
    title.append(" ")
    title.append(PRIORITY_GLYPHS.get(item.priority, "·"), style=theme.priority_color(item.priority))
    if item.subtitle:
        title.append("\n  " + truncate(sanitize_text(item.subtitle), TITLE_LIMIT), style=f"italic {theme.text_muted}")
    # only stored items can be passed to `hotbrew open`
    trss_id = item.metadata.get("trss_id")
    if trss_id:
        title.append(f"\n  {short_id(trss_id)}", style=theme.muted)

    age = Text(format_age(item.timestamp) if item.timestamp else "", style=theme.muted)
    return title, age


def section_table(section: Section, theme: Theme) -> Table:
    """One section as a two-column grid: title block and age."""
    table = Table.grid(expand=True, padding=(0, 1))
    table.add_column(ratio=1)
    table.add_column(justify="right", no_wrap=True)
    for index, item in enumerate(section.items):
        table.add_row(*_item_row(item, theme, first=index == 0))
    return table


def footer(theme: Theme, total: int) -> Text:
    text = Text(theme.separator * 40 + "\n", style=theme.muted)
    for index, (command, label) in enumerate(FOOTER_HINTS):
        if index:
            text.append("  │  ", style=theme.muted)
        text.append(command, style=f"bold {theme.accent}")
        text.append(f" {label}", style=theme.muted)
    text.append(f"\n{total} items", style=theme.muted)
    return text


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def render_digest_view(
    sections: list[Section],
    theme: Theme | None = None,
    console: Console | None = None,
    now: datetime | None = None,
) -> None:
    """Print the full digest view.

    Parameters
    ----------
    sections:
        Digest items grouped by source (see ``digest_to_sections``).
    theme:
        Palette to use; synthwave when omitted.
    console:
        Target console; the module-level console when omitted.
    now:
        Clock used for the greeting, mainly for tests.
    """
    out = console or _console
    theme = theme or get_theme("synthwave")
    now = now or datetime.now().astimezone()

    out.print(banner(theme))
    out.print(header(theme, now))

    if not sections:
        out.print(Text("\nNothing brewing yet. Run `hotbrew sync` to fetch fresh items.\n", style=theme.text_muted))
    for section in sections:
        title = Text(f"\n{section.icon} {section.name.upper()}", style=f"bold {theme.accent}")
        title.append(f"  {len(section.items)}", style=theme.muted)
        out.print(title)
        out.print(Text(theme.separator * 40, style=theme.muted))
        out.print(section_table(section, theme))

    out.print()
    out.print(footer(theme, sum(len(s.items) for s in sections)))
