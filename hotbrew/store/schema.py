"""SQLite schema for the hotbrew store, applied as numbered migrations."""
from __future__ import annotations

import logging

from hotbrew.shared.db.connection import ConnectionPool

logger = logging.getLogger(__name__)

# Version 1: core tables
_V1 = """
    CREATE TABLE IF NOT EXISTS sources (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        name        TEXT NOT NULL,
        kind        TEXT NOT NULL,
        url         TEXT,
        icon        TEXT DEFAULT '📰',
        weight      REAL DEFAULT 1.0,
        enabled     INTEGER DEFAULT 1,
        settings    TEXT,
        added_at    TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
        last_sync   TEXT,
        sync_errors INTEGER DEFAULT 0
    );

    CREATE TABLE IF NOT EXISTS items (
        id              TEXT PRIMARY KEY,
        fingerprint     TEXT NOT NULL,
        title           TEXT NOT NULL,
        url             TEXT,
        url_canonical   TEXT,
        source_id       INTEGER NOT NULL REFERENCES sources(id),
        source_name     TEXT NOT NULL,
        published_at    TEXT,
        fetched_at      TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
        summary         TEXT,
        body            TEXT,
        tags            TEXT,
        score_raw       REAL DEFAULT 0,
        score_computed  REAL DEFAULT 0,
        engagement      TEXT,
        meta            TEXT,
        UNIQUE(fingerprint, source_id)
    );
    CREATE INDEX IF NOT EXISTS idx_items_fingerprint ON items(fingerprint);
    CREATE INDEX IF NOT EXISTS idx_items_published ON items(published_at);
    CREATE INDEX IF NOT EXISTS idx_items_source ON items(source_id);
    CREATE INDEX IF NOT EXISTS idx_items_score ON items(score_computed);

    CREATE TABLE IF NOT EXISTS dedup_edges (
        item_id_a   TEXT NOT NULL,
        item_id_b   TEXT NOT NULL,
        confidence  REAL DEFAULT 1.0,
        created_at  TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
        PRIMARY KEY (item_id_a, item_id_b)
    );

    CREATE TABLE IF NOT EXISTS item_state (
        item_id     TEXT PRIMARY KEY,
        state       TEXT NOT NULL DEFAULT 'unread'
                    CHECK(state IN ('unread', 'read', 'saved')),
        opened_at   TEXT,
        saved_at    TEXT,
        updated_at  TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
    );

    CREATE TABLE IF NOT EXISTS rules (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        kind        TEXT NOT NULL,
        pattern     TEXT NOT NULL,
        value       TEXT,
        enabled     INTEGER DEFAULT 1,
        created_at  TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
    );
    CREATE INDEX IF NOT EXISTS idx_rules_kind ON rules(kind);

    CREATE TABLE IF NOT EXISTS digests (
        id           INTEGER PRIMARY KEY AUTOINCREMENT,
        title        TEXT NOT NULL,
        window       TEXT NOT NULL,
        generated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
        item_count   INTEGER,
        data         TEXT
    );
"""

# Version 2: digest ratings
_V2 = """
    CREATE TABLE IF NOT EXISTS feedback (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        rating      INTEGER NOT NULL CHECK(rating BETWEEN 1 AND 4),
        note        TEXT,
        created_at  TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
    );
"""

MIGRATIONS: list[str] = [_V1, _V2]
SCHEMA_VERSION: int = len(MIGRATIONS)


def current_version(pool: ConnectionPool) -> int:
    conn = pool.get()
    row = conn.execute("SELECT COALESCE(MAX(version), 0) FROM schema_version").fetchone()
    return int(row[0])


def init_store_db(pool: ConnectionPool) -> None:
    """Create or upgrade the store schema to :data:`SCHEMA_VERSION`."""
    conn = pool.get()
    conn.execute("CREATE TABLE IF NOT EXISTS schema_version (version INTEGER NOT NULL)")
    version = current_version(pool)

    for number, script in enumerate(MIGRATIONS[version:], start=version + 1):
        conn.executescript(script)
        logger.info("Applied store migration %d", number)

    if version < SCHEMA_VERSION:
        conn.execute("DELETE FROM schema_version")
        conn.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
    conn.commit()
