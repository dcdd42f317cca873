"""Interactive digest viewer.

Browse keys:

    j/k, ↓/↑      move between items (crossing section boundaries)
    enter, e      expand or collapse item details
    o             open the article (and mark it read)
    c             open the discussion (Hacker News, Lobsters, Reddit)
    s             save for later
    u             toggle read / unread
    m             mute the item's domain
    r             refresh
    1-9           jump to a section
    tab           next section (shift+tab: previous)
    t             theme picker
    p             profile picker (e inside it edits the profile)
    q, esc        quit

:class:`DigestController` owns all state and is driven by key names, so
it works without a terminal.  :class:`DigestApp` is the Textual shell that
feeds it key presses and paints the result.
"""

from __future__ import annotations

import logging
import webbrowser
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Any

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.widgets import Static

from hotbrew.curation.diversity import extract_domain
from hotbrew.display.theme import Theme, get_theme, list_themes, theme_for_config
from hotbrew.display.viewer import PRIORITY_GLYPHS, TITLE_LIMIT, banner, header
from hotbrew.settings.config import HotbrewConfig, save_config
from hotbrew.settings.profile import ProfileInfo, SourceSpec, list_profiles, load_profile, save_profile
from hotbrew.shared.errors import ConfigurationError
from hotbrew.shared.utils import format_age, sanitize_text, truncate
from hotbrew.sources.base import Section, SourceItem
from hotbrew.store.store import Store
from hotbrew.trss.fingerprint import short_id

logger = logging.getLogger(__name__)

BODY_LIMIT = 400
SWATCH_STOPS = 4


class Mode(str, Enum):
    BROWSE = "browse"
    THEMES = "themes"
    PROFILES = "profiles"
    EDITOR = "editor"


class Outcome(Enum):
    """What the shell should do after a key press."""

    NONE = "none"
    QUIT = "quit"
    RELOAD = "reload"


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class DigestController:
    """Selection, pickers and item actions for the interactive viewer.

    Args:
        cfg: Loaded config; theme and profile changes are written back
            through *persist_config*.
        store: Open store for save / read / mute, or ``None`` when the
            digest came from a live fetch only.
        sections: Initial sections; ``None`` means they are still loading.
        opener: Called with a URL to open it.
        persist_config: Called with *cfg* after the user changes it.
    """

    def __init__(
        self,
        cfg: HotbrewConfig,
        store: Store | None = None,
        sections: list[Section] | None = None,
        opener: Callable[[str], Any] = webbrowser.open,
        persist_config: Callable[[HotbrewConfig], Any] = save_config,
    ) -> None:
        self.cfg = cfg
        self.store = store
        self.opener = opener
        self.persist_config = persist_config

        self.sections: list[Section] = sections or []
        self.loading = sections is None
        self.section_idx = 0
        self.item_idx = 0
        self.expanded = False
        self.status = ""
        self.mode = Mode.BROWSE

        self.theme: Theme = theme_for_config(cfg.theme, cfg.custom_theme)
        self.theme_names: list[str] = list_themes()
        self.theme_cursor = 0

        self.profiles: list[ProfileInfo] = []
        self.profile_cursor = 0

        self.editor_name = ""
        self.editor_specs: list[SourceSpec] = []
        self.editor_enabled: list[bool] = []
        self.editor_cursor = 0

    # -- sections ----------------------------------------------------------

    def set_sections(self, sections: list[Section]) -> None:
        """Replace the content, keeping the selection where it still fits."""
        self.sections = sections
        self.loading = False
        if self.section_idx >= len(sections):
            self.section_idx = 0
            self.item_idx = 0
        elif sections and self.item_idx >= len(sections[self.section_idx].items):
            self.item_idx = 0

    def selected(self) -> SourceItem | None:
        if not self.sections or self.section_idx >= len(self.sections):
            return None
        items = self.sections[self.section_idx].items
        if self.item_idx >= len(items):
            return None
        return items[self.item_idx]

    def progress(self) -> tuple[int, int]:
        """``(position, total)`` of the selected item across all sections."""
        total = sum(len(s.items) for s in self.sections)
        if not total:
            return 0, 0
        before = sum(len(s.items) for s in self.sections[: self.section_idx])
        current = before + self.item_idx + 1
        return min(max(current, 1), total), total

    def move_down(self) -> None:
        if not self.sections:
            return
        if self.item_idx < len(self.sections[self.section_idx].items) - 1:
            self.item_idx += 1
        elif self.section_idx < len(self.sections) - 1:
            self.section_idx += 1
            self.item_idx = 0

    def move_up(self) -> None:
        if not self.sections:
            return
        if self.item_idx > 0:
            self.item_idx -= 1
        elif self.section_idx > 0:
            self.section_idx -= 1
            self.item_idx = max(len(self.sections[self.section_idx].items) - 1, 0)

    def jump_to(self, index: int) -> None:
        if 0 <= index < len(self.sections):
            self.section_idx = index
            self.item_idx = 0

    def cycle_section(self, step: int) -> None:
        if self.sections:
            self.section_idx = (self.section_idx + step) % len(self.sections)
            self.item_idx = 0

    # -- item actions -----------------------------------------------------------

    def _stored_id(self, item: SourceItem) -> str | None:
        """The store id of *item*, or ``None`` (with a status) when it has none."""
        item_id = item.metadata.get("trss_id")
        if self.store is None or not item_id:
            self.status = "Not in the local store; run `hotbrew sync` first"
            return None
        return str(item_id)

    def open_selected(self) -> None:
        item = self.selected()
        if item is None or not item.url:
            return
        self.opener(item.url)
        self.status = f"↗ Opened {truncate(sanitize_text(item.title), 40)}"
        item_id = item.metadata.get("trss_id")
        if self.store is not None and item_id:
            self.store.mark_read(str(item_id))

    def comments_url(self, item: SourceItem) -> str:
        for key in ("hn_url", "comments_url"):
            value = item.metadata.get(key)
            if isinstance(value, str) and value:
                return value
        for action in item.actions:
            if action.key == "c" and action.command:
                return action.command
        return ""

    def open_comments(self) -> None:
        item = self.selected()
        if item is None:
            return
        url = self.comments_url(item)
        if not url:
            self.status = "No discussion link for this item"
            return
        self.opener(url)
        self.status = "↗ Opened comments"

    def save_selected(self) -> None:
        item = self.selected()
        if item is None:
            return
        item_id = self._stored_id(item)
        if item_id:
            self.store.mark_saved(item_id)
            self.status = "★ Saved"

    def toggle_read(self) -> None:
        item = self.selected()
        if item is None:
            return
        item_id = self._stored_id(item)
        if not item_id:
            return
        if self.store.get_state(item_id) == "unread":
            self.store.mark_read(item_id)
            self.status = "✓ Marked read"
        else:
            self.store.mark_unread(item_id)
            self.status = "○ Marked unread"

    def mute_selected(self) -> None:
        item = self.selected()
        if item is None or not item.url:
            return
        domain = extract_domain(item.url)
        if not domain:
            return
        if self.store is None:
            self.status = "Not in the local store; run `hotbrew sync` first"
            return
        self.store.add_rule("mute_domain", domain)
        self.status = f"🔇 Muted {domain}"

    # -- themes -----------------------------------------------------------------

    def start_theme_picker(self) -> None:
        self.mode = Mode.THEMES
        self.theme_names = list_themes()
        current = self.cfg.theme
        self.theme_cursor = self.theme_names.index(current) if current in self.theme_names else 0
        self.theme = get_theme(self.theme_names[self.theme_cursor])

    def _theme_key(self, key: str) -> Outcome:
        if key in ("left", "h", "up", "k", "right", "l", "down", "j"):
            step = -1 if key in ("left", "h", "up", "k") else 1
            self.theme_cursor = (self.theme_cursor + step) % len(self.theme_names)
            self.theme = get_theme(self.theme_names[self.theme_cursor])
        elif key == "enter":
            self.apply_theme(self.theme_names[self.theme_cursor])
        elif key in ("escape", "q"):
            self.mode = Mode.BROWSE
            self.theme = theme_for_config(self.cfg.theme, self.cfg.custom_theme)
        return Outcome.NONE

    def apply_theme(self, name: str) -> None:
        self.mode = Mode.BROWSE
        self.cfg.theme = name
        self.theme = get_theme(name)
        self.persist_config(self.cfg)
        self.status = f"Theme switched to {name}"

    # -- profiles ---------------------------------------------------------------

    def start_profile_picker(self) -> None:
        self.mode = Mode.PROFILES
        self.profiles = list_profiles() or [ProfileInfo(self.cfg.get_profile_name(), 0)]
        names = [info.name for info in self.profiles]
        current = self.cfg.get_profile_name()
        self.profile_cursor = names.index(current) if current in names else 0

    def _profile_key(self, key: str) -> Outcome:
        if key in ("left", "h", "up", "k", "right", "l", "down", "j"):
            step = -1 if key in ("left", "h", "up", "k") else 1
            self.profile_cursor = (self.profile_cursor + step) % len(self.profiles)
        elif key == "enter":
            return self.apply_profile(self.profiles[self.profile_cursor].name)
        elif key == "e":
            self.start_editor(self.profiles[self.profile_cursor].name)
        elif key in ("escape", "q"):
            self.mode = Mode.BROWSE
        return Outcome.NONE

    def apply_profile(self, name: str, force: bool = False) -> Outcome:
        self.mode = Mode.BROWSE
        if not name or (name == self.cfg.get_profile_name() and not force):
            return Outcome.NONE
        self.cfg.profile = name
        self.persist_config(self.cfg)
        self.status = f"Profile switched to {name}"
        self.loading = True
        return Outcome.RELOAD

    def start_editor(self, name: str) -> None:
        profile = load_profile(name)
        self.mode = Mode.EDITOR
        self.editor_name = name
        self.editor_specs = list(profile.sources)
        self.editor_enabled = [True] * len(self.editor_specs)
        self.editor_cursor = 0

    def _editor_key(self, key: str) -> Outcome:
        count = len(self.editor_specs)
        if key in ("up", "k") and count:
            self.editor_cursor = (self.editor_cursor - 1) % count
        elif key in ("down", "j") and count:
            self.editor_cursor = (self.editor_cursor + 1) % count
        elif key in ("space", "enter") and count:
            self.editor_enabled[self.editor_cursor] = not self.editor_enabled[self.editor_cursor]
        elif key == "s":
            return self.save_editor()
        elif key in ("escape", "q"):
            self.mode = Mode.BROWSE
        return Outcome.NONE

    def save_editor(self) -> Outcome:
        kept = [spec for spec, on in zip(self.editor_specs, self.editor_enabled) if on]
        try:
            save_profile(self.editor_name, kept)
        except (ConfigurationError, OSError) as exc:
            logger.warning("Saving profile %s failed: %s", self.editor_name, exc)
            self.status = f"Save failed: {exc}"
            return Outcome.NONE
        outcome = self.apply_profile(self.editor_name, force=True)
        self.status = f"Profile {self.editor_name} saved"
        return outcome

    # -- keys -----------------------------------------------------------------------

    def handle_key(self, key: str) -> Outcome:
        """Apply one key press (Textual key names: ``j``, ``enter``, ``shift+tab`` ...)."""
        if self.mode is Mode.EDITOR:
            return self._editor_key(key)
        if self.mode is Mode.PROFILES:
            return self._profile_key(key)
        if self.mode is Mode.THEMES:
            return self._theme_key(key)
        return self._browse_key(key)

    def _browse_key(self, key: str) -> Outcome:
        if key in ("q", "escape"):
            return Outcome.QUIT
        if key == "r":
            self.status = ""
            self.loading = True
            return Outcome.RELOAD

        if key in ("j", "down"):
            self.move_down()
        elif key in ("k", "up"):
            self.move_up()
        elif key in ("enter", "e"):
            self.expanded = not self.expanded
        elif key == "o":
            self.open_selected()
        elif key == "c":
            self.open_comments()
        elif key == "s":
            self.save_selected()
        elif key == "u":
            self.toggle_read()
        elif key == "m":
            self.mute_selected()
        elif len(key) == 1 and key in "123456789":
            self.jump_to(int(key) - 1)
        elif key == "tab":
            self.cycle_section(1)
        elif key == "shift+tab":
            self.cycle_section(-1)
        elif key == "t":
            self.start_theme_picker()
        elif key == "p":
            self.start_profile_picker()
        return Outcome.NONE


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_masthead(ctl: DigestController, now: datetime) -> Group:
    return Group(banner(ctl.theme), header(ctl.theme, now))


def _append_item(body: Text, ctl: DigestController, item: SourceItem, selected: bool) -> None:
    theme = ctl.theme
    marker = theme.bullet_selected if selected else theme.bullet
    body.append(marker, style=f"bold {theme.primary}" if selected else theme.muted)
    body.append(
        truncate(sanitize_text(item.title), TITLE_LIMIT),
        style=f"bold {theme.text}" if selected else theme.text,
    )
    body.append(" ")
    body.append(PRIORITY_GLYPHS.get(item.priority, "·"), style=theme.priority_color(item.priority))
    if item.timestamp:
        body.append(f"  {format_age(item.timestamp)}", style=theme.muted)
    body.append("\n")

    if item.subtitle:
        body.append(f"  {truncate(sanitize_text(item.subtitle), TITLE_LIMIT)}\n", style=f"italic {theme.text_muted}")

    if not (selected and ctl.expanded):
        return
    if item.body:
        body.append(f"  {truncate(sanitize_text(item.body), BODY_LIMIT)}\n", style=theme.text)
    if item.url:
        body.append(f"  {sanitize_text(item.url)}\n", style=f"underline {theme.accent}")
    trss_id = item.metadata.get("trss_id")
    if trss_id:
        body.append(f"  {short_id(str(trss_id))}\n", style=theme.muted)
    if item.actions:
        body.append("  ")
        for action in item.actions:
            body.append(f"[{action.key}]", style=f"bold {theme.accent}")
            body.append(f" {action.label}   ", style=theme.muted)
        body.append("\n")


def render_body(ctl: DigestController) -> tuple[Text, int]:
    """The scrollable section list and the line the selected item starts on."""
    theme = ctl.theme
    body = Text()
    if ctl.loading:
        body.append("\n☕ Fetching your digest...\n", style=theme.accent)
        return body, 0
    if not ctl.sections:
        body.append("\nNo items to display. Run `hotbrew sync` to fetch fresh items.\n", style=theme.text_muted)
        return body, 0

    selected_line = 0
    for s_idx, section in enumerate(ctl.sections):
        current = s_idx == ctl.section_idx
        body.append(
            f"\n{section.icon} {section.name.upper()}",
            style=f"bold {theme.accent}" + (" underline" if current else ""),
        )
        body.append(f"  {len(section.items)}\n", style=theme.muted)
        body.append(theme.separator * 40 + "\n", style=theme.muted)
        for i_idx, item in enumerate(section.items):
            selected = current and i_idx == ctl.item_idx
            if selected:
                selected_line = body.plain.count("\n")
            _append_item(body, ctl, item, selected)
    return body, selected_line


def _swatch(theme: Theme) -> Text:
    text = Text()
    for color in theme.header_gradient[:SWATCH_STOPS]:
        text.append("██", style=color)
    return text


def _picker(ctl: DigestController, title: str, hint: str, rows: list[tuple[Text, bool, bool]]) -> Panel:
    """A bordered list; each row is ``(label, is_cursor, is_current)``."""
    theme = ctl.theme
    content = Text()
    content.append(f"{title}\n", style=f"bold {theme.accent}")
    content.append(f"{hint}\n\n", style=theme.muted)
    for label, is_cursor, is_current in rows:
        style = f"bold reverse {theme.primary}" if is_cursor else theme.text_muted
        if is_current and not is_cursor:
            style = f"bold {theme.text}"
        content.append(theme.bullet_selected if is_cursor else "  ", style=theme.primary)
        label.stylize_before(style)
        content.append_text(label)
        content.append("\n")
    return Panel(content, border_style=theme.accent, expand=False, padding=(1, 3))


def render_picker(ctl: DigestController) -> Panel | None:
    if ctl.mode is Mode.THEMES:
        rows = []
        for index, name in enumerate(ctl.theme_names):
            label = _swatch(get_theme(name))
            label.append(f" {name}")
            rows.append((label, index == ctl.theme_cursor, name == ctl.cfg.theme))
        return _picker(ctl, "Theme Picker", "←/→ preview  •  enter apply  •  esc cancel", rows)

    if ctl.mode is Mode.PROFILES:
        current = ctl.cfg.get_profile_name()
        rows = []
        for index, info in enumerate(ctl.profiles):
            label = f"{info.name}  •  {info.source_count} sources" if info.source_count else info.name
            rows.append((Text(label), index == ctl.profile_cursor, info.name == current))
        return _picker(ctl, "Profile Picker", "↑/↓ select  •  enter apply  •  e edit  •  esc cancel", rows)

    if ctl.mode is Mode.EDITOR:
        hint = "space toggle  •  s save  •  esc cancel"
        if not ctl.editor_specs:
            rows = [(Text("Profile is empty. Save to keep it blank or esc to cancel."), False, False)]
        else:
            rows = [
                (Text(f"[{'x' if on else ' '}] {spec.name or spec.key} ({spec.driver})"), index == ctl.editor_cursor, False)
                for index, (spec, on) in enumerate(zip(ctl.editor_specs, ctl.editor_enabled))
            ]
        return _picker(ctl, f"Editing: {ctl.editor_name}", hint, rows)
    return None


FOOTER_KEYS: tuple[tuple[str, str], ...] = (
    ("j/k", "move"),
    ("enter", "expand"),
    ("o", "open"),
    ("c", "comments"),
    ("s", "save"),
    ("u", "read"),
    ("m", "mute"),
    ("r", "refresh"),
    ("t", "theme"),
    ("p", "profile"),
    ("q", "quit"),
)


def render_footer(ctl: DigestController) -> Group:
    theme = ctl.theme
    parts: list[RenderableType] = []
    picker = render_picker(ctl)
    if picker is not None:
        parts.append(picker)
    if ctl.status:
        parts.append(Text(f"  {ctl.status}", style=theme.accent))

    keys = Text(theme.separator * 40 + "\n", style=theme.muted)
    for index, (key, label) in enumerate(FOOTER_KEYS):
        if index:
            keys.append("  ", style=theme.muted)
        keys.append(key, style=f"bold {theme.accent}")
        keys.append(f" {label}", style=theme.muted)
    current, total = ctl.progress()
    keys.append(f"\n{current}/{total}", style=theme.muted)
    parts.append(keys)
    return Group(*parts)


# ---------------------------------------------------------------------------
# Textual shell
# ---------------------------------------------------------------------------

KEYS: tuple[str, ...] = (
    "q", "escape", "j", "k", "h", "l", "up", "down", "left", "right",
    "enter", "space", "e", "o", "c", "s", "u", "m", "r", "t", "p",
    "tab", "shift+tab", "1", "2", "3", "4", "5", "6", "7", "8", "9",
)


class DigestApp(App[None]):
    """Full-screen digest browser around a :class:`DigestController`.

    Args:
        controller: State and actions.
        loader: Returns fresh sections; runs in a worker thread on start
            (while the controller is loading) and on refresh.
        now: Clock for the greeting, mainly for tests.
    """

    CSS = """
    #masthead { height: auto; }
    #digest { height: 1fr; }
    #footer { height: auto; }
    """

    BINDINGS = [Binding(key, f"digest_key('{key}')", show=False, priority=True) for key in KEYS]

    def __init__(
        self,
        controller: DigestController,
        loader: Callable[[], list[Section]],
        now: datetime | None = None,
    ) -> None:
        super().__init__()
        self.controller = controller
        self._loader = loader
        self._now = now

    def compose(self) -> ComposeResult:
        yield Static(id="masthead")
        with VerticalScroll(id="digest"):
            yield Static(id="body")
        yield Static(id="footer")

    def on_mount(self) -> None:
        self.refresh_view()
        if self.controller.loading:
            self.load_sections()

    @work(thread=True, exclusive=True)
    def load_sections(self) -> None:
        sections = self._loader()
        self.call_from_thread(self._sections_loaded, sections)

    def _sections_loaded(self, sections: list[Section]) -> None:
        self.controller.set_sections(sections)
        self.refresh_view()

    def action_digest_key(self, key: str) -> None:
        outcome = self.controller.handle_key(key)
        if outcome is Outcome.QUIT:
            self.exit()
            return
        if outcome is Outcome.RELOAD:
            self.load_sections()
        self.refresh_view()

    def refresh_view(self) -> None:
        now = self._now or datetime.now().astimezone()
        body, selected_line = render_body(self.controller)
        self.query_one("#masthead", Static).update(render_masthead(self.controller, now))
        self.query_one("#body", Static).update(body)
        self.query_one("#footer", Static).update(render_footer(self.controller))
        self.query_one("#digest", VerticalScroll).scroll_to(y=max(selected_line - 2, 0), animate=False)
