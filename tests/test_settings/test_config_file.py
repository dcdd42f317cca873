"""Tests for hotbrew.yaml loading and saving."""
from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest
import yaml

from hotbrew.settings.config import (
    HotbrewConfig,
    config_dir,
    config_path,
    default_config,
    init_config,
    is_first_run,
    load_config,
    save_config,
)
from hotbrew.shared.constants import DEFAULT_DIGEST_MAX
from hotbrew.shared.errors import ConfigurationError


class TestPaths:
    def test_xdg_config_home(self, config_home: Path):
        assert config_dir() == config_home
        assert config_path() == config_home / "hotbrew.yaml"

    def test_home_fallback(self, monkeypatch: pytest.MonkeyPatch, isolated_home: Path):
        monkeypatch.delenv("XDG_CONFIG_HOME")
        assert config_dir() == isolated_home / ".config" / "hotbrew"


class TestDefaults:
    def test_default_values(self, config_home: Path):
        cfg = default_config()
        assert cfg.theme == "synthwave"
        assert cfg.sources["hackernews"].enabled is True
        assert cfg.sources["rss"].enabled is False
        assert cfg.get_db_path() == config_home / "hotbrew.db"
        assert cfg.get_digest_window() == timedelta(hours=24)
        assert cfg.get_digest_max() == DEFAULT_DIGEST_MAX
        assert cfg.get_sync_interval() == timedelta(minutes=30)
        assert cfg.get_stream_log_path() == config_home / "stream.ndjson"
        assert cfg.get_profile_name() == "default"

    def test_overrides(self, tmp_path: Path):
        cfg = HotbrewConfig(
            db_path=str(tmp_path / "x.db"),
            digest_window="12h",
            digest_max=10,
            sync_interval="5m",
            profile="work",
        )
        assert cfg.get_db_path() == tmp_path / "x.db"
        assert cfg.get_digest_window() == timedelta(hours=12)
        assert cfg.get_digest_max() == 10
        assert cfg.get_sync_interval() == timedelta(minutes=5)
        assert cfg.get_profile_name() == "work"


class TestLoadSave:
    def test_missing_file_gives_defaults(self, tmp_path: Path):
        assert load_config(tmp_path / "none.yaml") == default_config()

    def test_round_trip(self, tmp_path: Path):
        path = tmp_path / "hotbrew.yaml"
        cfg = default_config()
        cfg.theme = "nord"
        cfg.digest_max = 12
        save_config(cfg, path)
        assert load_config(path) == cfg

    def test_saved_file_omits_unset_fields(self, tmp_path: Path):
        path = save_config(default_config(), tmp_path / "hotbrew.yaml")
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert "db_path" not in raw
        assert "custom_theme" not in raw
        assert raw["theme"] == "synthwave"

    def test_unknown_keys_ignored(self, tmp_path: Path):
        path = tmp_path / "hotbrew.yaml"
        path.write_text(
            "theme: dracula\nfuture_option: 1\nsources:\n  hackernews:\n    enabled: false\n    colour: red\n"
            "custom_theme:\n  primary: '#ff0000'\n  sparkle: true\n",
            encoding="utf-8",
        )
        cfg = load_config(path)
        assert cfg.theme == "dracula"
        assert cfg.sources["hackernews"].enabled is False
        assert cfg.custom_theme.primary == "#ff0000"

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "hotbrew.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == default_config()

    @pytest.mark.parametrize("content", ["theme: [unclosed", "- a list\n- root\n"])
    def test_invalid_file_raises(self, tmp_path: Path, content: str):
        path = tmp_path / "hotbrew.yaml"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(path)

    @pytest.mark.parametrize(
        "content,key",
        [
            ("sources:\n  hackernews: true\n", "sources.hackernews"),
            ("sources: [hackernews]\n", "sources"),
            ("sources:\n  hackernews:\n    settings: 8\n", "sources.hackernews.settings"),
            ("digest_max: lots\n", "digest_max"),
            ("digest_max: true\n", "digest_max"),
            ("theme: 3\n", "theme"),
            ("show_at_startup: maybe\n", "show_at_startup"),
            ("custom_theme: red\n", "custom_theme"),
            ("custom_theme:\n  header_gradient: '#fff'\n", "custom_theme.header_gradient"),
        ],
    )
    def test_wrong_types_raise_configuration_error(self, tmp_path: Path, content: str, key: str):
        path = tmp_path / "hotbrew.yaml"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ConfigurationError) as excinfo:
            load_config(path)
        assert key in str(excinfo.value)
        assert excinfo.value.path == str(path)

    def test_null_source_entry_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "hotbrew.yaml"
        path.write_text("sources:\n  hackernews:\ndigest_window: 3600\n", encoding="utf-8")
        cfg = load_config(path)
        assert cfg.sources["hackernews"].enabled is True
        assert cfg.get_digest_window() == timedelta(hours=1)


class TestInit:
    def test_init_creates_once(self, config_home: Path):
        assert is_first_run()
        assert init_config() is True
        assert config_path().exists()
        assert not is_first_run()
        assert init_config() is False
