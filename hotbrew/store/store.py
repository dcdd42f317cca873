"""SQLite-backed persistence for items, sources, rules, state and digests."""
from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from hotbrew.shared.db.connection import ConnectionPool
from hotbrew.shared.errors import ItemNotFoundError, StoreError
from hotbrew.shared.utils import now_utc, parse_rfc3339, to_rfc3339
from hotbrew.store.models import ItemFilter, Rule, SourceRecord
from hotbrew.store.schema import init_store_db
from hotbrew.trss.fingerprint import ID_SCHEME
from hotbrew.trss.models import Digest, Item, ItemSource

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_ICON = "📰"

_ITEM_COLUMNS = """
    i.id, i.fingerprint, i.title, i.url, i.url_canonical, i.source_name,
    i.published_at, i.fetched_at, i.summary, i.body, i.tags,
    i.score_raw, i.score_computed, i.engagement, i.meta,
    COALESCE(src.icon, '') AS icon
"""

_MUTE_KINDS = ("mute_domain", "mute_source")


def _loads(raw: str | None, default: Any) -> Any:
    if not raw:
        return default
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        return default
    return value if value is not None else default


def _cutoff(window: timedelta) -> str:
    return to_rfc3339(now_utc() - window)


def _row_to_item(row: sqlite3.Row) -> Item:
    computed = row["score_computed"] or 0.0
    return Item(
        id=row["id"],
        fingerprint=row["fingerprint"],
        title=row["title"],
        url=row["url"] or "",
        url_canonical=row["url_canonical"] or "",
        source=ItemSource(name=row["source_name"], icon=row["icon"] or ""),
        published_at=parse_rfc3339(row["published_at"]) or now_utc(),
        fetched_at=parse_rfc3339(row["fetched_at"]) or now_utc(),
        summary=row["summary"] or "",
        body=row["body"] or "",
        tags=_loads(row["tags"], []),
        score=computed if computed > 0 else (row["score_raw"] or 0.0),
        engagement=_loads(row["engagement"], {}),
        meta=_loads(row["meta"], {}),
    )


def _row_to_source(row: sqlite3.Row) -> SourceRecord:
    return SourceRecord(
        id=row["id"],
        name=row["name"],
        kind=row["kind"],
        url=row["url"] or "",
        icon=row["icon"] or DEFAULT_SOURCE_ICON,
        weight=row["weight"] if row["weight"] is not None else 1.0,
        enabled=bool(row["enabled"]),
        settings=_loads(row["settings"], {}),
        added_at=parse_rfc3339(row["added_at"]),
        last_sync=parse_rfc3339(row["last_sync"]),
        sync_errors=row["sync_errors"] or 0,
    )


class Store:
    """Local store for everything hotbrew fetches and curates.

    Args:
        db_path: Path to the SQLite database file.  Missing parent
            directories are created owner-only.

    Raises:
        StoreError: If the database cannot be opened or migrated.
    """

    def __init__(self, db_path: str | Path) -> None:
        try:
            self._pool = ConnectionPool(db_path)
            init_store_db(self._pool)
        except (sqlite3.Error, OSError) as exc:
            raise StoreError(f"open store {db_path}: {exc}") from exc
        logger.debug("Opened store at %s", self._pool.db_path)

    @property
    def db_path(self) -> Path:
        return self._pool.db_path

    def close(self) -> None:
        self._pool.close()

    def __enter__(self) -> Store:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        with self._pool.transaction() as conn:
            return conn.execute(sql, params)

    def _scalar(self, sql: str, params: tuple = ()) -> Any:
        row = self._pool.get().execute(sql, params).fetchone()
        return row[0] if row is not None else None

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def insert_item(self, item: Item, source_id: int) -> None:
        """Store *item*; an item already seen for this source is ignored."""
        self._execute(
            """INSERT OR IGNORE INTO items
                   (id, fingerprint, title, url, url_canonical, source_id, source_name,
                    published_at, fetched_at, summary, body, tags, score_raw,
                    engagement, meta)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                item.id,
                item.fingerprint,
                item.title,
                item.url,
                item.url_canonical,
                source_id,
                item.source.name,
                to_rfc3339(item.published_at),
                to_rfc3339(item.fetched_at),
                item.summary,
                item.body,
                json.dumps(item.tags),
                item.score,
                json.dumps(item.engagement, default=str),
                json.dumps(item.meta, default=str),
            ),
        )

    def list_items(self, item_filter: ItemFilter | None = None) -> list[Item]:
        """Return items matching *item_filter*, best score first.

        Each item carries its read state in ``meta["state"]``.
        """
        f = item_filter or ItemFilter()
        query = f"""SELECT {_ITEM_COLUMNS}, COALESCE(st.state, 'unread') AS state
                    FROM items i
                    LEFT JOIN item_state st ON i.id = st.item_id
                    LEFT JOIN sources src ON i.source_id = src.id
                    WHERE 1=1"""
        params: list[Any] = []

        if f.unread:
            query += " AND (st.state IS NULL OR st.state = 'unread')"
        if f.source_name:
            query += " AND i.source_name = ?"
            params.append(f.source_name)
        if f.since is not None and f.since > timedelta(0):
            query += " AND i.fetched_at >= ?"
            params.append(_cutoff(f.since))

        query += " ORDER BY i.score_computed DESC, i.published_at DESC"
        if f.limit > 0:
            query += " LIMIT ?"
            params.append(f.limit)

        items = []
        for row in self._pool.get().execute(query, tuple(params)).fetchall():
            item = _row_to_item(row)
            item.meta["state"] = row["state"]
            items.append(item)
        return items

    def get_item(self, id_prefix: str) -> Item:
        """Return the first item whose id starts with *id_prefix*.

        A bare hex prefix such as ``2dce0a4c`` is also tried with the
        ``sha256:`` scheme in front.  The prefix is compared literally, so
        ``%`` and ``_`` are not wildcards.

        Raises:
            ItemNotFoundError: If nothing matches.
        """
        if not id_prefix:
            raise ItemNotFoundError(id_prefix)
        candidates = [id_prefix]
        if ":" not in id_prefix:
            candidates.append(ID_SCHEME + id_prefix)

        conn = self._pool.get()
        for prefix in candidates:
            row = conn.execute(
                f"""SELECT {_ITEM_COLUMNS}
                    FROM items i LEFT JOIN sources src ON i.source_id = src.id
                    WHERE substr(i.id, 1, ?) = ? ORDER BY i.id LIMIT 1""",
                (len(prefix), prefix),
            ).fetchone()
            if row is not None:
                return _row_to_item(row)
        raise ItemNotFoundError(id_prefix)

    def update_score(self, item_id: str, score: float) -> None:
        self._execute("UPDATE items SET score_computed = ? WHERE id = ?", (score, item_id))

    def has_recent_items(self, window: timedelta) -> bool:
        """Whether anything was fetched within *window*."""
        return self.recent_items_since(now_utc() - window) > 0

    def item_count(self) -> int:
        return self._scalar("SELECT COUNT(*) FROM items") or 0

    def recent_items_since(self, since: datetime) -> int:
        return self._scalar(
            "SELECT COUNT(*) FROM items WHERE fetched_at >= ?", (to_rfc3339(since),)
        ) or 0

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    def insert_source(
        self,
        name: str,
        kind: str,
        url: str = "",
        icon: str = "",
        settings: dict[str, Any] | None = None,
    ) -> int:
        """Register a source and return its id."""
        cursor = self._execute(
            """INSERT INTO sources (name, kind, url, icon, settings, added_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                name,
                kind,
                url,
                icon or DEFAULT_SOURCE_ICON,
                json.dumps(settings or {}),
                to_rfc3339(now_utc()),
            ),
        )
        return int(cursor.lastrowid)

    def get_or_create_source(self, name: str, kind: str, url: str = "", icon: str = "") -> int:
        """Return the id of the source named *name* of *kind*, creating it if needed."""
        source_id = self._scalar(
            "SELECT id FROM sources WHERE name = ? AND kind = ?", (name, kind)
        )
        if source_id is not None:
            return int(source_id)
        return self.insert_source(name, kind, url, icon)

    def list_sources(self) -> list[SourceRecord]:
        rows = self._pool.get().execute(
            """SELECT id, name, kind, url, icon, weight, enabled, settings,
                      added_at, last_sync, sync_errors
               FROM sources ORDER BY id"""
        ).fetchall()
        return [_row_to_source(row) for row in rows]

    def source_weights(self) -> dict[str, float]:
        """Map source name to its non-zero weight."""
        return {s.name: s.weight for s in self.list_sources() if s.weight != 0}

    def update_last_sync(self, source_id: int) -> None:
        """Stamp a successful sync and reset the error counter."""
        self._execute(
            "UPDATE sources SET last_sync = ?, sync_errors = 0 WHERE id = ?",
            (to_rfc3339(now_utc()), source_id),
        )

    def incr_sync_errors(self, source_id: int) -> None:
        self._execute(
            "UPDATE sources SET sync_errors = sync_errors + 1 WHERE id = ?", (source_id,)
        )

    def set_source_enabled(self, source_id: int, enabled: bool) -> None:
        self._execute(
            "UPDATE sources SET enabled = ? WHERE id = ?", (1 if enabled else 0, source_id)
        )

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def add_rule(self, kind: str, pattern: str, value: str = "") -> int:
        cursor = self._execute(
            "INSERT INTO rules (kind, pattern, value, created_at) VALUES (?, ?, ?, ?)",
            (kind, pattern, value, to_rfc3339(now_utc())),
        )
        return int(cursor.lastrowid)

    def list_rules(self) -> list[Rule]:
        """Return enabled rules in creation order."""
        rows = self._pool.get().execute(
            """SELECT id, kind, pattern, COALESCE(value, '') AS value, enabled, created_at
               FROM rules WHERE enabled = 1 ORDER BY id"""
        ).fetchall()
        return [
            Rule(
                id=row["id"],
                kind=row["kind"],
                pattern=row["pattern"],
                value=row["value"],
                enabled=bool(row["enabled"]),
                created_at=parse_rfc3339(row["created_at"]),
            )
            for row in rows
        ]

    def delete_rule(self, rule_id: int) -> bool:
        """Delete a rule; returns ``False`` when no rule had that id."""
        cursor = self._execute("DELETE FROM rules WHERE id = ?", (rule_id,))
        return cursor.rowcount > 0

    def has_mute_rule(self, pattern: str) -> bool:
        count = self._scalar(
            f"""SELECT COUNT(*) FROM rules
                WHERE enabled = 1 AND kind IN ({", ".join("?" * len(_MUTE_KINDS))})
                  AND pattern = ?""",
            (*_MUTE_KINDS, pattern),
        )
        return bool(count)

    # ------------------------------------------------------------------
    # Read state
    # ------------------------------------------------------------------

    def mark_read(self, item_id: str) -> None:
        now = to_rfc3339(now_utc())
        self._execute(
            """INSERT INTO item_state (item_id, state, opened_at, updated_at)
               VALUES (?, 'read', ?, ?)
               ON CONFLICT(item_id) DO UPDATE SET
                   state = 'read', opened_at = excluded.opened_at,
                   updated_at = excluded.updated_at""",
            (item_id, now, now),
        )

    def mark_saved(self, item_id: str) -> None:
        now = to_rfc3339(now_utc())
        self._execute(
            """INSERT INTO item_state (item_id, state, saved_at, updated_at)
               VALUES (?, 'saved', ?, ?)
               ON CONFLICT(item_id) DO UPDATE SET
                   state = 'saved', saved_at = excluded.saved_at,
                   updated_at = excluded.updated_at""",
            (item_id, now, now),
        )

    def mark_unread(self, item_id: str) -> None:
        self._execute("DELETE FROM item_state WHERE item_id = ?", (item_id,))

    def get_state(self, item_id: str) -> str:
        state = self._scalar("SELECT state FROM item_state WHERE item_id = ?", (item_id,))
        return state or "unread"

    def unread_count(self) -> int:
        return self.count_by_state()["unread"]

    def count_by_state(self) -> dict[str, int]:
        """Return ``{"unread": n, "read": n, "saved": n}``.

        Items without a state row count as unread.
        """
        counts = {"unread": 0, "read": 0, "saved": 0}
        rows = self._pool.get().execute(
            "SELECT state, COUNT(*) AS n FROM item_state GROUP BY state"
        ).fetchall()
        for row in rows:
            counts[row["state"]] = row["n"]
        counts["unread"] = self.item_count() - counts["read"] - counts["saved"]
        return counts

    # ------------------------------------------------------------------
    # Dedup edges
    # ------------------------------------------------------------------

    def insert_dedup_edge(self, id_a: str, id_b: str, confidence: float) -> None:
        """Record that two items are duplicates; the pair is stored ordered."""
        if id_a > id_b:
            id_a, id_b = id_b, id_a
        self._execute(
            """INSERT OR IGNORE INTO dedup_edges (item_id_a, item_id_b, confidence, created_at)
               VALUES (?, ?, ?, ?)""",
            (id_a, id_b, confidence, to_rfc3339(now_utc())),
        )

    def get_deduped_ids(self, item_id: str) -> list[str]:
        rows = self._pool.get().execute(
            """SELECT item_id_b FROM dedup_edges WHERE item_id_a = ?
               UNION
               SELECT item_id_a FROM dedup_edges WHERE item_id_b = ?""",
            (item_id, item_id),
        ).fetchall()
        return [row[0] for row in rows]

    # ------------------------------------------------------------------
    # Digests
    # ------------------------------------------------------------------

    def save_digest(self, digest: Digest) -> int:
        cursor = self._execute(
            """INSERT INTO digests (title, window, generated_at, item_count, data)
               VALUES (?, ?, ?, ?, ?)""",
            (
                digest.title,
                digest.window,
                to_rfc3339(digest.generated_at),
                digest.item_count,
                digest.model_dump_json(),
            ),
        )
        return int(cursor.lastrowid)

    def get_latest_digest(self) -> Digest | None:
        row = self._pool.get().execute(
            "SELECT data FROM digests ORDER BY generated_at DESC, id DESC LIMIT 1"
        ).fetchone()
        if row is None:
            return None
        return Digest.model_validate_json(row["data"])

    def get_digests_since(self, since: datetime) -> list[Digest]:
        rows = self._pool.get().execute(
            "SELECT data FROM digests WHERE generated_at >= ? ORDER BY generated_at DESC, id DESC",
            (to_rfc3339(since),),
        ).fetchall()
        digests = []
        for row in rows:
            try:
                digests.append(Digest.model_validate_json(row["data"]))
            except ValueError as exc:
                logger.warning("Skipping unreadable digest: %s", exc)
        return digests

    # ------------------------------------------------------------------
    # Feedback
    # ------------------------------------------------------------------

    def insert_feedback(self, rating: int, note: str = "") -> None:
        """Store a 1-4 rating of the digest.

        Raises:
            StoreError: If *rating* is out of range.
        """
        if not 1 <= rating <= 4:
            raise StoreError(f"rating must be between 1 and 4, got {rating}")
        self._execute(
            "INSERT INTO feedback (rating, note, created_at) VALUES (?, ?, ?)",
            (rating, note, to_rfc3339(now_utc())),
        )
