"""Graceful shutdown handler for the sync daemon.

Handles both Windows (``signal.signal``) and Unix
(``loop.add_signal_handler``) signal registration with a reentrancy guard.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from typing import Any, Callable

logger = logging.getLogger(__name__)


class GracefulShutdown:
    """Manages graceful shutdown on SIGINT / SIGTERM.

    Usage::

        shutdown = GracefulShutdown()
        shutdown.install()

        # In the daemon loop:
        while not shutdown.should_stop:
            ...
            await shutdown.wait(interval)
    """

    def __init__(self) -> None:
        self._should_stop = False
        self._event = asyncio.Event()
        self._callbacks: list[Callable[[], None]] = []
        self._handling = False  # reentrancy guard
        self.signal_name = ""

    @property
    def should_stop(self) -> bool:
        """Whether a shutdown signal has been received."""
        return self._should_stop

    def on_stop(self, callback: Callable[[], None]) -> None:
        """Run *callback* once when shutdown is requested."""
        self._callbacks.append(callback)

    def install(self) -> None:
        """Register signal handlers for SIGINT and SIGTERM.

        On Windows, uses ``signal.signal`` directly.
        On Unix, uses ``loop.add_signal_handler`` if a running event loop
        is available, falling back to ``signal.signal``.
        """
        if sys.platform == "win32":
            signal.signal(signal.SIGINT, self._signal_handler)
            signal.signal(signal.SIGTERM, self._signal_handler)
        else:
            try:
                loop = asyncio.get_running_loop()
                for sig in (signal.SIGINT, signal.SIGTERM):
                    loop.add_signal_handler(sig, self._async_handler, sig)
            except RuntimeError:
                # No running loop -- fall back to signal.signal
                signal.signal(signal.SIGINT, self._signal_handler)
                signal.signal(signal.SIGTERM, self._signal_handler)

    def request_stop(self, reason: str = "") -> None:
        """Trigger shutdown as if a signal had arrived."""
        if self._handling or self._should_stop:
            return  # reentrancy guard
        self._handling = True
        self.signal_name = reason
        logger.warning("Shutdown requested (%s)", reason or "manual")
        self._should_stop = True
        self._event.set()
        self._run_callbacks()
        self._handling = False

    async def wait(self, timeout: float) -> bool:
        """Sleep up to *timeout* seconds; return ``True`` if stopped meanwhile."""
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    def _signal_handler(self, signum: int, frame: Any) -> None:
        """Synchronous signal handler (Windows / fallback)."""
        self.request_stop(signal.Signals(signum).name)

    def _async_handler(self, sig: signal.Signals) -> None:
        """Async-compatible signal handler (Unix)."""
        self.request_stop(sig.name)

    def _run_callbacks(self) -> None:
        for callback in self._callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Shutdown callback failed")
