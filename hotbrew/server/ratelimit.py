"""Fixed-window rate limiting keyed by client address."""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

from starlette.requests import Request

DEFAULT_LIMIT = 5
DEFAULT_WINDOW_SECONDS = 60.0


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """Allow at most *limit* calls per *window* seconds for each key."""

    def __init__(
        self,
        limit: int = DEFAULT_LIMIT,
        window: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window = window
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: dict[str, _Window] = {}

    def allow(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            entry = self._windows.get(key)
            if entry is None or now > entry.reset_at:
                self._windows[key] = _Window(count=1, reset_at=now + self.window)
                return True
            if entry.count >= self.limit:
                return False
            entry.count += 1
            return True


def client_ip(request: Request) -> str:
    """First ``X-Forwarded-For`` hop, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"
