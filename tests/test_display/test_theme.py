"""Tests for viewer themes."""
from __future__ import annotations

from hotbrew.display.theme import (
    SYNTHWAVE,
    custom_theme,
    get_theme,
    list_themes,
    theme_for_config,
)
from hotbrew.settings.config import CustomThemeConfig
from hotbrew.sources.base import Priority


class TestThemes:
    def test_builtins_and_presets_listed(self):
        names = list_themes()
        for name in ("synthwave", "nord", "dracula", "mocha", "ocean", "forest", "sunset", "midnight"):
            assert name in names
        assert names == sorted(names)

    def test_unknown_falls_back(self):
        assert get_theme("no-such-theme") is SYNTHWAVE

    def test_priority_colours(self):
        nord = get_theme("nord")
        assert nord.priority_color(Priority.URGENT) == "#bf616a"
        assert nord.priority_color(Priority.LOW) == "#a3be8c"

    def test_preset_priority_defaults(self):
        mocha = get_theme("mocha")
        assert mocha.priority_urgent == "#ff6b6b"
        assert mocha.priority_high == mocha.primary
        assert mocha.priority_medium == mocha.secondary
        assert mocha.priority_low == mocha.muted


class TestCustomTheme:
    def test_blank_fields_from_synthwave(self):
        theme = custom_theme("mine", {"primary": "#123456"})
        assert theme.primary == "#123456"
        assert theme.background == SYNTHWAVE.background
        assert theme.header_gradient == ("#123456", SYNTHWAVE.secondary, SYNTHWAVE.accent)

    def test_from_config_block(self):
        block = CustomThemeConfig(primary="#010101", header_gradient=["#000000", "#ffffff"])
        theme = theme_for_config("custom", block)
        assert theme.name == "custom"
        assert theme.primary == "#010101"
        assert theme.header_gradient == ("#000000", "#ffffff")
        assert get_theme("custom") == theme

    def test_named_theme_ignores_custom_block(self):
        assert theme_for_config("dracula", CustomThemeConfig(primary="#010101")).name == "dracula"
