"""Terminal presentation: themes and the digest viewer."""
from hotbrew.display.theme import Theme, get_theme, list_themes, theme_for_config
from hotbrew.display.viewer import greeting, render_digest_view

__all__ = ["Theme", "get_theme", "greeting", "list_themes", "render_digest_view", "theme_for_config"]
