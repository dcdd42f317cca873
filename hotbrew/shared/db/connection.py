"""Per-thread SQLite connections for the local store."""
from __future__ import annotations

import logging
import os
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from hotbrew.shared.constants import DB_BUSY_TIMEOUT_MS, DB_DIR_MODE, DB_FILE_MODE

logger = logging.getLogger(__name__)

PRAGMAS: tuple[str, ...] = (
    "PRAGMA journal_mode=WAL",
    f"PRAGMA busy_timeout={DB_BUSY_TIMEOUT_MS}",
    "PRAGMA foreign_keys=ON",
)


def _restrict(path: Path) -> None:
    """Make the database file readable by its owner only."""
    try:
        os.chmod(path, DB_FILE_MODE)
    except OSError as exc:
        logger.debug("Could not chmod %s: %s", path, exc)


def open_connection(path: Path, timeout: float = 30.0) -> sqlite3.Connection:
    """Open *path* with WAL journaling, foreign keys and ``sqlite3.Row`` rows."""
    conn = sqlite3.connect(str(path), timeout=timeout)
    for pragma in PRAGMAS:
        conn.execute(pragma)
    conn.row_factory = sqlite3.Row
    _restrict(path)
    return conn


class ConnectionPool:
    """One connection per thread, all closed together.

    The daemon and the viewer's live fetch may touch the store from
    worker threads; each gets its own connection.  The database holds
    reading history, so its directory is created 0700 and the file
    chmodded 0600.
    """

    def __init__(self, db_path: str | Path, timeout: float = 30.0) -> None:
        self._db_path = Path(db_path).expanduser()
        self._timeout = timeout
        self._local = threading.local()
        self._lock = threading.Lock()
        self._open: list[sqlite3.Connection] = []

        self._db_path.parent.mkdir(parents=True, exist_ok=True, mode=DB_DIR_MODE)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def get(self) -> sqlite3.Connection:
        """The calling thread's connection, opened on first use."""
        conn = getattr(self._local, "connection", None)
        if conn is None:
            conn = open_connection(self._db_path, self._timeout)
            self._local.connection = conn
            with self._lock:
                self._open.append(conn)
        return conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Commit on success, roll back if the block raises."""
        conn = self.get()
        try:
            yield conn
        except BaseException:
            conn.rollback()
            raise
        conn.commit()

    def close(self) -> None:
        with self._lock:
            conns, self._open = self._open, []
        for conn in conns:
            try:
                conn.close()
            except sqlite3.Error as exc:
                logger.debug("Closing connection failed: %s", exc)
        self._local.connection = None
