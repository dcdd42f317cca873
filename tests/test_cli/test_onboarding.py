"""Tests for onboarding helpers, remote config sync and title fetching."""
from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from hotbrew.cli.items import extract_title, fetch_title
from hotbrew.cli.onboarding import (
    RC_COMMENT,
    append_startup_line,
    first_run_setup,
    shell_rc_file,
    shell_rc_hint,
    sync_remote,
)
from hotbrew.settings.config import load_config, token_path
from hotbrew.shared.constants import STARTUP_LINE
from hotbrew.shared.errors import HotbrewError


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestShellIntegration:
    @pytest.mark.parametrize(
        "shell,name",
        [("/bin/zsh", ".zshrc"), ("/usr/bin/bash", ".bashrc")],
    )
    def test_rc_file(self, shell, name, tmp_path: Path):
        assert shell_rc_file(shell, tmp_path) == tmp_path / name

    def test_no_rc_file_for_other_shells(self, tmp_path: Path):
        assert shell_rc_file("/usr/bin/fish", tmp_path) is None
        assert shell_rc_hint("/usr/bin/fish") == "~/.config/fish/config.fish"
        assert shell_rc_hint("") == "your shell's rc file"

    def test_append_only_to_existing_file(self, tmp_path: Path):
        rc = tmp_path / ".zshrc"
        assert append_startup_line(rc) is False
        assert not rc.exists()

        rc.write_text("export PATH=$PATH\n", encoding="utf-8")
        assert append_startup_line(rc) is True
        assert rc.read_text(encoding="utf-8") == f"export PATH=$PATH\n{RC_COMMENT}{STARTUP_LINE}\n"

    def test_first_run_setup(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        rc = tmp_path / ".bashrc"
        rc.write_text("", encoding="utf-8")
        answers = iter(["4", "y"])
        monkeypatch.setattr("hotbrew.cli.onboarding.typer.prompt", lambda *a, **k: next(answers))

        assert first_run_setup("/bin/bash", tmp_path) == "dracula"
        assert load_config().theme == "dracula"
        assert STARTUP_LINE in rc.read_text(encoding="utf-8")

    def test_first_run_defaults(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setattr("hotbrew.cli.onboarding.typer.prompt", lambda *a, **k: "")
        assert first_run_setup("/bin/zsh", tmp_path) == "synthwave"
        assert not (tmp_path / ".zshrc").exists()


class TestSyncRemote:
    def _login(self, token: str = "tok123") -> None:
        path = token_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(token + "\n", encoding="utf-8")

    def test_not_logged_in(self, capsys):
        assert sync_remote(_client(lambda r: httpx.Response(500))) is None
        assert "Not logged in" in capsys.readouterr().out

    def test_fetches_config(self, monkeypatch: pytest.MonkeyPatch, capsys):
        monkeypatch.setenv("HOTBREW_SERVER", "https://brew.test/")
        self._login()
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={"theme": "mocha", "hn_max": 8})

        assert sync_remote(_client(handler)) == {"theme": "mocha", "hn_max": 8}
        assert seen == ["https://brew.test/api/config/tok123"]
        out = capsys.readouterr().out
        assert "Remote config synced!" in out
        assert "Theme: mocha" in out

    def test_invalid_token(self, capsys):
        self._login()
        assert sync_remote(_client(lambda r: httpx.Response(404))) is None
        assert "Invalid token" in capsys.readouterr().out

    def test_unreachable(self):
        self._login()

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(HotbrewError, match="connect server"):
            sync_remote(_client(handler))

    def test_garbage_response(self):
        self._login()
        with pytest.raises(HotbrewError, match="parse response"):
            sync_remote(_client(lambda r: httpx.Response(200, text="<html>")))


class TestTitles:
    def test_extract(self):
        assert extract_title("<html><head><title> Tom &amp; Jerry </title></head>") == "Tom & Jerry"
        assert extract_title("<p>no title</p>") == ""

    def test_fetch(self):
        client = _client(lambda r: httpx.Response(200, text="<title>Fetched</title>"))
        assert fetch_title("https://example.com", client) == "Fetched"

    def test_fetch_failure_is_empty(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        assert fetch_title("https://example.com", _client(handler)) == ""
