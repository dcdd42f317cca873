"""Configuration dataclasses and loader for ``hotbrew.yaml``.

The file lives at ``$XDG_CONFIG_HOME/hotbrew/hotbrew.yaml`` (falling back
to ``~/.config/hotbrew/hotbrew.yaml``).  Missing keys fall back to defaults
and unknown keys are ignored so that older and newer config files both load.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml

from hotbrew.shared.config import HotbrewSettings
from hotbrew.shared.constants import (
    DEFAULT_DIGEST_MAX,
    DEFAULT_DIGEST_WINDOW_HOURS,
    DEFAULT_PROFILE,
    DEFAULT_SYNC_INTERVAL_MINUTES,
)
from hotbrew.shared.errors import ConfigurationError
from hotbrew.shared.utils import parse_duration

CONFIG_FILENAME = "hotbrew.yaml"


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def config_dir() -> Path:
    """Directory holding every hotbrew file for the current user."""
    xdg = HotbrewSettings().xdg_config_home
    if xdg:
        return Path(xdg) / "hotbrew"
    return Path.home() / ".config" / "hotbrew"


def config_path() -> Path:
    return config_dir() / CONFIG_FILENAME


def token_path() -> Path:
    return config_dir() / "token"


def pid_path() -> Path:
    return config_dir() / "daemon.pid"


def server_data_dir() -> Path:
    return config_dir() / "server"


def profiles_dir() -> Path:
    return config_dir() / "profiles"


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass
class SourceSettings:
    """Per-source toggle plus free-form driver settings."""

    enabled: bool = True
    settings: dict[str, Any] = field(default_factory=dict)


@dataclass
class CustomThemeConfig:
    """User-defined theme colours; blanks fall back to synthwave."""

    primary: str = ""
    secondary: str = ""
    accent: str = ""
    muted: str = ""
    background: str = ""
    text: str = ""
    text_muted: str = ""
    header_gradient: list[str] = field(default_factory=list)
    priority_urgent: str = ""
    priority_high: str = ""
    priority_medium: str = ""
    priority_low: str = ""


def _default_sources() -> dict[str, SourceSettings]:
    return {
        "hackernews": SourceSettings(enabled=True, settings={"max": 8}),
        "rss": SourceSettings(
            enabled=False,
            settings={
                "feeds": [
                    {"name": "TechCrunch", "url": "https://techcrunch.com/feed/", "max": 5},
                ]
            },
        ),
    }


@dataclass
class HotbrewConfig:
    """Top-level ``hotbrew.yaml`` contents."""

    theme: str = "synthwave"
    show_at_startup: bool = True
    max_items_per_section: int = 5
    sources: dict[str, SourceSettings] = field(default_factory=_default_sources)
    custom_theme: CustomThemeConfig | None = None
    db_path: str = ""
    digest_window: str = ""
    digest_max: int = 0
    stream_log: str = ""
    sync_interval: str = ""
    profile: str = ""

    # -- resolved values -----------------------------------------------

    def get_db_path(self) -> Path:
        if self.db_path:
            return Path(self.db_path).expanduser()
        return config_dir() / "hotbrew.db"

    def get_digest_window(self) -> timedelta:
        return parse_duration(self.digest_window, timedelta(hours=DEFAULT_DIGEST_WINDOW_HOURS))

    def get_digest_max(self) -> int:
        return self.digest_max if self.digest_max > 0 else DEFAULT_DIGEST_MAX

    def get_stream_log_path(self) -> Path:
        if self.stream_log:
            return Path(self.stream_log).expanduser()
        return config_dir() / "stream.ndjson"

    def get_sync_interval(self) -> timedelta:
        return parse_duration(
            self.sync_interval, timedelta(minutes=DEFAULT_SYNC_INTERVAL_MINUTES)
        )

    def get_profile_name(self) -> str:
        return self.profile or DEFAULT_PROFILE

    def source_enabled(self, key: str) -> bool:
        settings = self.sources.get(key)
        return settings is not None and settings.enabled

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if self.custom_theme is None:
            data.pop("custom_theme")
        # keep the file small: drop unset optional fields
        for key in ("db_path", "digest_window", "stream_log", "sync_interval", "profile"):
            if not data[key]:
                data.pop(key)
        if not data["digest_max"]:
            data.pop("digest_max")
        return data


def default_config() -> HotbrewConfig:
    return HotbrewConfig()


# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------


def pick_fields(data: dict[str, Any], cls: type) -> dict[str, Any]:
    """Filter *data* to only keys accepted by *cls*."""
    valid = {f.name for f in cls.__dataclass_fields__.values()}
    return {k: v for k, v in data.items() if k in valid}


# YAML types accepted per top-level key; a duration may be written as
# ``24h`` or as a bare number of seconds.
_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "theme": (str,),
    "show_at_startup": (bool,),
    "max_items_per_section": (int,),
    "db_path": (str,),
    "digest_window": (str, int),
    "digest_max": (int,),
    "stream_log": (str,),
    "sync_interval": (str, int),
    "profile": (str,),
}


def _check_type(key: str, value: Any, expected: tuple[type, ...]) -> None:
    # bool is an int subclass; ``digest_max: true`` is still a mistake
    stray_bool = isinstance(value, bool) and bool not in expected
    if stray_bool or not isinstance(value, expected):
        names = " or ".join(t.__name__ for t in expected)
        raise ConfigurationError(f"{key}: expected {names}, got {type(value).__name__}")


def _source_settings(key: str, value: Any) -> SourceSettings:
    if value is None:
        return SourceSettings()
    if not isinstance(value, dict):
        raise ConfigurationError(f"sources.{key}: expected a mapping, got {type(value).__name__}")
    fields_ = pick_fields(value, SourceSettings)
    if "enabled" in fields_:
        _check_type(f"sources.{key}.enabled", fields_["enabled"], (bool,))
    if "settings" in fields_:
        if fields_["settings"] is None:
            fields_["settings"] = {}
        _check_type(f"sources.{key}.settings", fields_["settings"], (dict,))
    return SourceSettings(**fields_)


def _custom_theme(value: Any) -> CustomThemeConfig:
    if not isinstance(value, dict):
        raise ConfigurationError(f"custom_theme: expected a mapping, got {type(value).__name__}")
    fields_ = pick_fields(value, CustomThemeConfig)
    for key, item in fields_.items():
        if key == "header_gradient":
            if not isinstance(item, list) or not all(isinstance(c, str) for c in item):
                raise ConfigurationError("custom_theme.header_gradient: expected a list of colours")
        else:
            _check_type(f"custom_theme.{key}", item, (str,))
    return CustomThemeConfig(**fields_)


def config_from_dict(raw: dict[str, Any]) -> HotbrewConfig:
    """Build a :class:`HotbrewConfig` from parsed YAML.

    Raises:
        ConfigurationError: If a known key holds a value of the wrong type.
    """
    top_level = pick_fields(raw, HotbrewConfig)
    sources_raw = top_level.pop("sources", None)
    custom_raw = top_level.pop("custom_theme", None)

    for key, value in top_level.items():
        _check_type(key, value, _FIELD_TYPES[key])

    cfg = HotbrewConfig(**top_level)
    if sources_raw is not None:
        if not isinstance(sources_raw, dict):
            raise ConfigurationError(f"sources: expected a mapping, got {type(sources_raw).__name__}")
        cfg.sources = {str(key): _source_settings(str(key), value) for key, value in sources_raw.items()}
    if custom_raw is not None:
        cfg.custom_theme = _custom_theme(custom_raw)
    return cfg


def load_config(path: Path | str | None = None) -> HotbrewConfig:
    """Load ``hotbrew.yaml``; a missing file yields the defaults.

    Raises:
        ConfigurationError: If the file exists but is not valid YAML, is
            not a mapping, or holds a value of the wrong type.
    """
    path = Path(path) if path else config_path()
    if not path.exists():
        return default_config()

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"invalid YAML: {exc}", str(path)) from exc

    if raw is None:
        return default_config()
    if not isinstance(raw, dict):
        raise ConfigurationError("config root must be a mapping", str(path))
    try:
        return config_from_dict(raw)
    except ConfigurationError as exc:
        raise ConfigurationError(str(exc), str(path)) from None


def save_config(cfg: HotbrewConfig, path: Path | str | None = None) -> Path:
    """Write *cfg* as YAML, creating the config directory if needed."""
    path = Path(path) if path else config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.safe_dump(cfg.to_dict(), sort_keys=False, allow_unicode=True),
        encoding="utf-8",
    )
    return path


def init_config(path: Path | str | None = None) -> bool:
    """Create a default config file unless one already exists.

    Returns:
        ``True`` when a new file was written.
    """
    path = Path(path) if path else config_path()
    if path.exists():
        return False
    save_config(default_config(), path)
    return True


def is_first_run() -> bool:
    return not config_path().exists()
