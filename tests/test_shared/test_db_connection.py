"""Tests for the SQLite ConnectionPool."""
from __future__ import annotations

import os
import sqlite3
import threading
from pathlib import Path

from hotbrew.shared.db.connection import ConnectionPool


class TestConnectionPool:
    def test_get_returns_connection(self, tmp_path: Path):
        pool = ConnectionPool(tmp_path / "test.db")
        assert isinstance(pool.get(), sqlite3.Connection)
        pool.close()

    def test_wal_mode_enabled(self, tmp_path: Path):
        pool = ConnectionPool(tmp_path / "test.db")
        result = pool.get().execute("PRAGMA journal_mode").fetchone()
        assert result[0] == "wal"
        pool.close()

    def test_foreign_keys_enabled(self, tmp_path: Path):
        pool = ConnectionPool(tmp_path / "test.db")
        assert pool.get().execute("PRAGMA foreign_keys").fetchone()[0] == 1
        pool.close()

    def test_creates_private_directory_and_file(self, tmp_path: Path):
        pool = ConnectionPool(tmp_path / "private" / "test.db")
        pool.get()
        assert os.stat(tmp_path / "private" / "test.db").st_mode & 0o777 == 0o600
        pool.close()

    def test_connection_reuse_same_thread(self, tmp_path: Path):
        pool = ConnectionPool(tmp_path / "test.db")
        assert pool.get() is pool.get()
        pool.close()

    def test_different_threads_get_different_connections(self, tmp_path: Path):
        pool = ConnectionPool(tmp_path / "test.db")
        main_conn = pool.get()
        other: list[sqlite3.Connection] = []
        thread = threading.Thread(target=lambda: other.append(pool.get()))
        thread.start()
        thread.join()
        assert other and other[0] is not main_conn
        pool.close()

    def test_db_path_expands_user(self, tmp_path: Path):
        pool = ConnectionPool(tmp_path / "test.db")
        assert pool.db_path == tmp_path / "test.db"
        pool.close()

    def test_transaction_commits(self, tmp_path: Path):
        pool = ConnectionPool(tmp_path / "test.db")
        with pool.transaction() as conn:
            conn.execute("CREATE TABLE t (x INTEGER)")
            conn.execute("INSERT INTO t VALUES (1)")
        pool.close()

        reopened = ConnectionPool(tmp_path / "test.db")
        assert reopened.get().execute("SELECT COUNT(*) FROM t").fetchone()[0] == 1
        reopened.close()

    def test_transaction_rolls_back_on_error(self, tmp_path: Path):
        pool = ConnectionPool(tmp_path / "test.db")
        with pool.transaction() as conn:
            conn.execute("CREATE TABLE t (x INTEGER)")
        try:
            with pool.transaction() as conn:
                conn.execute("INSERT INTO t VALUES (1)")
                raise RuntimeError("abort")
        except RuntimeError:
            pass
        assert pool.get().execute("SELECT COUNT(*) FROM t").fetchone()[0] == 0
        pool.close()
