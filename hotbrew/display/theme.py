"""Colour themes for the terminal viewer."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

from hotbrew.sources.base import Priority

DEFAULT_THEME = "synthwave"


@dataclass(frozen=True)
class Theme:
    """A named palette.  Colours are ``#rrggbb`` strings usable as rich styles."""

    name: str
    primary: str
    secondary: str
    accent: str
    muted: str
    background: str
    text: str
    text_muted: str
    header_gradient: tuple[str, ...] = field(default_factory=tuple)
    priority_urgent: str = ""
    priority_high: str = ""
    priority_medium: str = ""
    priority_low: str = ""

    bullet = "│ "
    bullet_selected = "▶ "
    separator = "─"

    def priority_color(self, priority: Priority) -> str:
        return {
            Priority.URGENT: self.priority_urgent,
            Priority.HIGH: self.priority_high,
            Priority.MEDIUM: self.priority_medium,
        }.get(priority, self.priority_low)


SYNTHWAVE = Theme(
    name="synthwave",
    primary="#ff6ad5",
    secondary="#c774e8",
    accent="#94d0ff",
    muted="#6a6a8a",
    background="#1a1a2e",
    text="#ffffff",
    text_muted="#a0a0c0",
    header_gradient=("#ff6ad5", "#c774e8", "#ad8cff", "#8795e8", "#94d0ff"),
    priority_urgent="#ff2a6d",
    priority_high="#ff6ad5",
    priority_medium="#c774e8",
    priority_low="#6a6a8a",
)

NORD = Theme(
    name="nord",
    primary="#88c0d0",
    secondary="#81a1c1",
    accent="#8fbcbb",
    muted="#4c566a",
    background="#2e3440",
    text="#eceff4",
    text_muted="#d8dee9",
    header_gradient=("#8fbcbb", "#88c0d0", "#81a1c1", "#5e81ac"),
    priority_urgent="#bf616a",
    priority_high="#d08770",
    priority_medium="#ebcb8b",
    priority_low="#a3be8c",
)

DRACULA = Theme(
    name="dracula",
    primary="#bd93f9",
    secondary="#ff79c6",
    accent="#8be9fd",
    muted="#6272a4",
    background="#282a36",
    text="#f8f8f2",
    text_muted="#bfbfbf",
    header_gradient=("#ff79c6", "#bd93f9", "#8be9fd", "#50fa7b"),
    priority_urgent="#ff5555",
    priority_high="#ffb86c",
    priority_medium="#f1fa8c",
    priority_low="#50fa7b",
)

PRESETS: dict[str, dict[str, Any]] = {
    "mocha": {
        "primary": "#d4a574",
        "secondary": "#a67c52",
        "accent": "#e8c39e",
        "muted": "#6b5344",
        "background": "#1c1410",
        "text": "#f5e6d3",
        "text_muted": "#b8a089",
        "header_gradient": ["#d4a574", "#c4956a", "#a67c52", "#8b6545", "#e8c39e"],
        "priority_urgent": "#ff6b6b",
    },
    "ocean": {
        "primary": "#00d9ff",
        "secondary": "#0099cc",
        "accent": "#66ffcc",
        "muted": "#4a6670",
        "background": "#0a1628",
        "text": "#e0f7ff",
        "text_muted": "#8ab4c4",
        "header_gradient": ["#00d9ff", "#00b8d4", "#0099cc", "#00796b", "#66ffcc"],
        "priority_urgent": "#ff5252",
    },
    "forest": {
        "primary": "#7cb342",
        "secondary": "#558b2f",
        "accent": "#c5e1a5",
        "muted": "#4a5a40",
        "background": "#1a1f16",
        "text": "#e8f5e9",
        "text_muted": "#a5c49a",
        "header_gradient": ["#c5e1a5", "#aed581", "#9ccc65", "#7cb342", "#558b2f"],
        "priority_urgent": "#ff7043",
    },
    "sunset": {
        "primary": "#ff7043",
        "secondary": "#ff5722",
        "accent": "#ffcc80",
        "muted": "#6d5a4a",
        "background": "#1f1410",
        "text": "#fff3e0",
        "text_muted": "#c9a88a",
        "header_gradient": ["#ffcc80", "#ffb74d", "#ffa726", "#ff9800", "#ff7043", "#ff5722"],
        "priority_urgent": "#f44336",
    },
    "midnight": {
        "primary": "#bb86fc",
        "secondary": "#985eff",
        "accent": "#03dac6",
        "muted": "#4a4458",
        "background": "#121212",
        "text": "#e1e1e1",
        "text_muted": "#a0a0a0",
        "header_gradient": ["#bb86fc", "#a66efa", "#985eff", "#7c4dff", "#03dac6"],
        "priority_urgent": "#cf6679",
    },
}

_COLOR_FIELDS = tuple(f.name for f in fields(Theme) if f.name not in ("name", "header_gradient"))


def custom_theme(name: str, colors: Any) -> Theme:
    """Build a theme from user colours, filling blanks from synthwave.

    *colors* may be a mapping or any object with matching attributes
    (such as the ``custom_theme`` block of ``hotbrew.yaml``).  Unset
    priority colours follow primary, secondary and muted.
    """
    def _get(key: str) -> Any:
        if isinstance(colors, dict):
            return colors.get(key)
        return getattr(colors, key, None)

    values = {key: _get(key) or "" for key in _COLOR_FIELDS}
    for key in ("primary", "secondary", "accent", "muted", "background", "text", "text_muted"):
        values[key] = values[key] or getattr(SYNTHWAVE, key)
    values["priority_urgent"] = values["priority_urgent"] or SYNTHWAVE.priority_urgent
    values["priority_high"] = values["priority_high"] or values["primary"]
    values["priority_medium"] = values["priority_medium"] or values["secondary"]
    values["priority_low"] = values["priority_low"] or values["muted"]

    gradient = tuple(_get("header_gradient") or ()) or (
        values["primary"],
        values["secondary"],
        values["accent"],
    )
    return Theme(name=name, header_gradient=gradient, **values)


_THEMES: dict[str, Theme] = {t.name: t for t in (SYNTHWAVE, NORD, DRACULA)}
_THEMES.update({name: custom_theme(name, colors) for name, colors in PRESETS.items()})


def register_theme(theme: Theme) -> None:
    _THEMES[theme.name] = theme


def get_theme(name: str) -> Theme:
    """Return the theme called *name*, or synthwave when unknown."""
    return _THEMES.get(name, SYNTHWAVE)


def list_themes() -> list[str]:
    return sorted(_THEMES)


def theme_for_config(theme_name: str, custom: Any = None) -> Theme:
    """Resolve the configured theme, registering ``custom`` when defined."""
    if theme_name == "custom" and custom is not None:
        register_theme(custom_theme("custom", custom))
    return get_theme(theme_name)
