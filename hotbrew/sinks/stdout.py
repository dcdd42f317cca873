"""Pretty terminal rendering of a digest."""
from __future__ import annotations

from datetime import datetime

from rich.console import Console
from rich.markup import escape

from hotbrew.shared.utils import sanitize_text, truncate
from hotbrew.sinks.base import Sink
from hotbrew.trss.models import Digest, Item

SUMMARY_LIMIT = 120


def format_timestamp(value: datetime) -> str:
    """Local time as ``Jan 2, 3:04 PM``."""
    local = value.astimezone()
    hour = local.hour % 12 or 12
    return f"{local:%b} {local.day}, {hour}:{local:%M} {local:%p}"


def score_marker(score: float) -> str:
    if score >= 7:
        return "🔥"
    if score >= 4:
        return "⭐"
    return "  "


class StdoutSink(Sink):
    """Print a numbered, human-readable digest."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False)

    def _item_lines(self, index: int, item: Item) -> list[str]:
        lines = [f"  {score_marker(item.score)} {index:2d}. {escape(sanitize_text(item.title))}"]
        if item.summary:
            summary = truncate(sanitize_text(item.summary), SUMMARY_LIMIT)
            lines.append(f"       [dim]{escape(summary)}[/dim]")
        origin = f"       {item.source.icon} {escape(item.source.name)}"
        if item.url:
            origin += f" · [cyan]{escape(item.url)}[/cyan]"
        lines.append(origin)
        return lines

    def deliver(self, digest: Digest) -> None:
        out = self.console
        out.print(f"\n☕ [bold]{escape(digest.title)}[/bold]")
        out.print(
            f"   {format_timestamp(digest.generated_at)} | {digest.item_count} items"
            f" | {digest.meta.sources_synced} sources\n"
        )
        for index, item in enumerate(digest.items, start=1):
            for line in self._item_lines(index, item):
                out.print(line, soft_wrap=True)
            out.print()

        meta = digest.meta
        if meta.items_deduped or meta.rules_applied:
            out.print(
                f"  [dim]--- {meta.items_deduped} deduped, {meta.rules_applied} rules applied ---[/dim]"
            )
