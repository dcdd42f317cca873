"""Background sync: fetch, curate and append to the stream log on a timer.

The daemon runs in the foreground; callers background it themselves
(``hotbrew daemon start &``).  A PID file in the config directory marks
the running instance.
"""
from __future__ import annotations

import asyncio
import logging
import os
import signal
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from hotbrew.curation.engine import Engine
from hotbrew.daemon.shutdown import GracefulShutdown
from hotbrew.settings.config import HotbrewConfig, pid_path
from hotbrew.shared.constants import DIGEST_TITLE, SYNC_TIMEOUT_SECONDS
from hotbrew.shared.errors import DaemonError
from hotbrew.shared.utils import format_duration
from hotbrew.sinks.streamlog import StreamLogSink
from hotbrew.sources.base import Registry
from hotbrew.store.store import Store
from hotbrew.sync.sync import print_results, sync_all

logger = logging.getLogger(__name__)

_console = Console()

STATUS_RUNNING = "running"
STATUS_STOPPED = "not running"
STATUS_STALE = "stale"


# ---------------------------------------------------------------------------
# PID file
# ---------------------------------------------------------------------------


def write_pid(pid: int, path: Path | None = None) -> None:
    path = path or pid_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(str(pid), encoding="utf-8")


def read_pid(path: Path | None = None) -> int:
    """Return the recorded daemon PID, or 0 when there is none."""
    path = path or pid_path()
    try:
        return int(path.read_text(encoding="utf-8").strip())
    except (OSError, ValueError):
        return 0


def remove_pid(path: Path | None = None) -> None:
    (path or pid_path()).unlink(missing_ok=True)


def is_running(pid: int) -> bool:
    """Whether a process with *pid* exists."""
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    except OSError:
        return False
    return True


# ---------------------------------------------------------------------------
# Cycle
# ---------------------------------------------------------------------------


async def run_cycle(
    store: Store,
    cfg: HotbrewConfig,
    registry: Registry,
    console: Console | None = None,
) -> int:
    """Sync, generate a digest, save it and append it to the stream log.

    Returns:
        The number of items in the generated digest.
    """
    out = console or _console
    results = await sync_all(store, registry, timeout=SYNC_TIMEOUT_SECONDS)
    print_results(results, console=out)

    digest = Engine(store).generate_digest(cfg.get_digest_window(), cfg.get_digest_max(), DIGEST_TITLE)
    store.save_digest(digest)

    log_path = cfg.get_stream_log_path()
    try:
        StreamLogSink(log_path).deliver(digest)
    except OSError as exc:
        logger.warning("Stream log write failed: %s", exc)
        out.print(f"  ⚠ Stream log error: {escape(str(exc))}")

    out.print(f"  ✓ Digest: {digest.item_count} items → {escape(str(log_path))}")
    return digest.item_count


async def run_loop(
    store: Store,
    cfg: HotbrewConfig,
    registry: Registry,
    shutdown: GracefulShutdown,
    console: Console | None = None,
) -> int:
    """Run a cycle now and then every ``sync_interval`` until shutdown.

    Returns:
        The number of cycles completed.
    """
    interval = cfg.get_sync_interval().total_seconds()
    cycles = 0
    while not shutdown.should_stop:
        try:
            await run_cycle(store, cfg, registry, console)
        except Exception:
            logger.exception("Daemon cycle failed")
        cycles += 1
        if await shutdown.wait(interval):
            break
    return cycles


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


def start(cfg: HotbrewConfig, registry: Registry, console: Console | None = None) -> None:
    """Run the daemon in the foreground until SIGINT or SIGTERM.

    Raises:
        DaemonError: If another daemon is already running.
    """
    out = console or _console
    pid = read_pid()
    if pid and is_running(pid):
        raise DaemonError(f"daemon already running (PID {pid})")

    write_pid(os.getpid())
    try:
        with Store(cfg.get_db_path()) as store:
            out.print(
                f"☕ Daemon started (PID {os.getpid()}, interval {format_duration(cfg.get_sync_interval())})"
            )

            async def _main() -> None:
                shutdown = GracefulShutdown()
                shutdown.install()
                shutdown.on_stop(remove_pid)
                await run_loop(store, cfg, registry, shutdown, out)
                out.print(f"\n☕ Daemon stopping ({shutdown.signal_name or 'done'})")

            asyncio.run(_main())
    finally:
        remove_pid()


def stop(console: Console | None = None) -> int:
    """Send SIGTERM to the running daemon and remove its PID file.

    Returns:
        The PID that was signalled.

    Raises:
        DaemonError: If no daemon is recorded or it cannot be signalled.
    """
    out = console or _console
    pid = read_pid()
    if pid <= 0:
        raise DaemonError("no daemon running (no PID file)")
    try:
        os.kill(pid, signal.SIGTERM)
    except OSError as exc:
        remove_pid()
        raise DaemonError(f"signal process {pid}: {exc}") from exc
    remove_pid()
    out.print(f"☕ Daemon stopped (PID {pid})")
    return pid


def status(console: Console | None = None) -> str:
    """Print and return the daemon status; a stale PID file is removed."""
    out = console or _console
    pid = read_pid()
    if pid <= 0:
        out.print("☕ Daemon: not running")
        return STATUS_STOPPED
    if is_running(pid):
        out.print(f"☕ Daemon: running (PID {pid})")
        return STATUS_RUNNING
    out.print(f"☕ Daemon: stale PID file (PID {pid} not running)")
    remove_pid()
    return STATUS_STALE
