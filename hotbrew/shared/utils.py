"""Shared utility functions."""
from __future__ import annotations

import json
import os
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([smhd])\s*$")
_DURATION_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days"}

_CONTROL_CHARS = {c for c in range(0x20) if c not in (0x09, 0x0A)} | set(
    range(0x7F, 0xA0)
)
_CONTROL_TABLE = dict.fromkeys(_CONTROL_CHARS)


def now_utc() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return now_utc().isoformat()


def to_rfc3339(value: datetime) -> str:
    """Format *value* as an RFC 3339 UTC timestamp (``...Z``)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_rfc3339(value: str | None) -> datetime | None:
    """Parse an RFC 3339 / ISO-8601 timestamp into an aware datetime.

    Returns ``None`` for empty or unparsable input.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_duration(value: str | int | float | None, default: timedelta) -> timedelta:
    """Parse ``"90s"``, ``"30m"``, ``"24h"`` or ``"2d"`` into a timedelta.

    Bare numbers are read as seconds.  Empty or invalid values yield
    *default*.
    """
    if value is None or value == "":
        return default
    if isinstance(value, (int, float)):
        return timedelta(seconds=value) if value > 0 else default
    match = _DURATION_RE.match(str(value))
    if not match:
        return default
    amount = float(match.group(1))
    if amount <= 0:
        return default
    return timedelta(**{_DURATION_UNITS[match.group(2)]: amount})


def format_age(ts: datetime, now: datetime | None = None) -> str:
    """Return a human-readable age such as ``"5m ago"``."""
    now = now or now_utc()
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    seconds = (now - ts).total_seconds()
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{int(seconds // 60)}m ago"
    if seconds < 86400:
        return f"{int(seconds // 3600)}h ago"
    return f"{int(seconds // 86400)}d ago"


def truncate(text: str, limit: int) -> str:
    """Cut *text* to *limit* characters, ending with ``...`` when cut."""
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def sanitize_text(text: str) -> str:
    """Strip terminal control characters, keeping newlines and tabs."""
    if not text:
        return ""
    return text.translate(_CONTROL_TABLE)


def atomic_write_json(path: Path | str, data: Any, mode: int | None = None) -> None:
    """Write JSON data atomically by writing to a temp file then renaming.

    Args:
        path: Target file path.
        data: JSON-serialisable data to write.
        mode: Optional permission bits applied to the final file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(".tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)
            f.flush()
            os.fsync(f.fileno())
        if mode is not None:
            os.chmod(tmp_path, mode)
        os.replace(str(tmp_path), str(path))
    except BaseException:
        # Clean up temp file on any failure
        if tmp_path.exists():
            tmp_path.unlink()
        raise


def load_json(path: Path | str) -> Any | None:
    """Load JSON data from a file.

    Returns:
        Parsed JSON data, or None if the file is missing or invalid.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return None


def ensure_dir(path: Path | str, mode: int = 0o755) -> Path:
    """Ensure a directory exists, creating parent directories as needed."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True, mode=mode)
    return path


def format_duration(value: timedelta) -> str:
    """Render *value* in the largest whole unit, e.g. ``"24h"`` or ``"90m"``."""
    seconds = int(value.total_seconds())
    if seconds and seconds % 86400 == 0 and seconds >= 7 * 86400:
        return f"{seconds // 86400}d"
    if seconds and seconds % 3600 == 0:
        return f"{seconds // 3600}h"
    if seconds and seconds % 60 == 0:
        return f"{seconds // 60}m"
    return f"{seconds}s"
