"""
SQLite Database Repository - Review & Endpoint Persistence
===========================================================

Stores reviews, distribution endpoints and sync settings in one SQLite file.
Each operation opens its own connection; there is no cross-request locking.
"""

import json
import sqlite3
import logging
import uuid
from typing import Iterable, List, Optional
from contextlib import contextmanager

from ...domain import Endpoint, Review, ReviewStatus, SyncSettings, utc_now_iso
from .stores import EndpointStore, ReviewStore, SettingsStore

logger = logging.getLogger(__name__)

DATABASE_FILE = "reviewrelay.db"

SYNC_SETTINGS_KEY = "sync_settings"
LAST_SYNC_KEY = "last_sync"


class Database:
    """
    SQLite database for Review Relay.

    Usage:
        db = Database("reviewrelay.db")
        db.init()

        reviews = SQLiteReviewStore(db)
        endpoints = SQLiteEndpointStore(db)
    """

    def __init__(self, db_path: str = DATABASE_FILE):
        self.db_path = str(db_path)

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def init(self):
        """Initialize database tables."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS reviews (
                    id TEXT PRIMARY KEY,
                    author_name TEXT DEFAULT '',
                    rating INTEGER NOT NULL DEFAULT 0,
                    text TEXT DEFAULT '',
                    time INTEGER NOT NULL DEFAULT 0,
                    profile_photo_url TEXT,
                    status TEXT NOT NULL DEFAULT 'new',
                    date_added TEXT NOT NULL DEFAULT ''
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS endpoints (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    url TEXT NOT NULL,
                    active INTEGER NOT NULL DEFAULT 1,
                    created_at TEXT,
                    updated_at TEXT
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)

            logger.info(f"Database initialized: {self.db_path}")

    @contextmanager
    def connection(self):
        with self._get_connection() as conn:
            yield conn


# ── Reviews ────────────────────────────────────────────────────────

class SQLiteReviewStore(ReviewStore):
    """Review store backed by the `reviews` table."""

    def __init__(self, db: Database):
        self.db = db

    def get_all(self) -> List[Review]:
        with self.db.connection() as conn:
            rows = conn.execute("SELECT * FROM reviews ORDER BY rowid").fetchall()
            return [self._row_to_review(row) for row in rows]

    def get(self, review_id: str) -> Optional[Review]:
        with self.db.connection() as conn:
            row = conn.execute("SELECT * FROM reviews WHERE id = ?", (review_id,)).fetchone()
            return self._row_to_review(row) if row else None

    def upsert(self, reviews: Iterable[Review]) -> None:
        rows = [
            (r.id, r.author_name, r.rating, r.text, r.time, r.profile_photo_url, r.status, r.date_added)
            for r in reviews
        ]
        with self.db.connection() as conn:
            conn.executemany(
                """INSERT INTO reviews (id, author_name, rating, text, time, profile_photo_url, status, date_added)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                       author_name = excluded.author_name,
                       rating = excluded.rating,
                       text = excluded.text,
                       time = excluded.time,
                       profile_photo_url = excluded.profile_photo_url,
                       status = excluded.status,
                       date_added = excluded.date_added""",
                rows
            )

    def update_status(self, review_id: str, status: str) -> Optional[Review]:
        with self.db.connection() as conn:
            cursor = conn.execute(
                "UPDATE reviews SET status = ? WHERE id = ?", (status, review_id)
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM reviews WHERE id = ?", (review_id,)).fetchone()
            return self._row_to_review(row)

    def mark_published(self, review_ids: Iterable[str]) -> int:
        ids = list(review_ids)
        if not ids:
            return 0
        placeholders = ", ".join("?" for _ in ids)
        with self.db.connection() as conn:
            cursor = conn.execute(
                f"UPDATE reviews SET status = ? WHERE id IN ({placeholders})",
                [ReviewStatus.PUBLISHED.value] + ids
            )
            return cursor.rowcount

    def _row_to_review(self, row: sqlite3.Row) -> Review:
        """Convert database row to Review object."""
        return Review(
            id=row["id"],
            author_name=row["author_name"] or "",
            rating=row["rating"],
            text=row["text"] or "",
            time=row["time"],
            profile_photo_url=row["profile_photo_url"],
            status=row["status"],
            date_added=row["date_added"] or "",
        )


# ── Endpoints ──────────────────────────────────────────────────────

class SQLiteEndpointStore(EndpointStore):
    """Endpoint store backed by the `endpoints` table."""

    UPDATABLE_FIELDS = ("name", "url", "active")

    def __init__(self, db: Database):
        self.db = db

    def list_all(self) -> List[Endpoint]:
        with self.db.connection() as conn:
            rows = conn.execute("SELECT * FROM endpoints ORDER BY rowid").fetchall()
            return [self._row_to_endpoint(row) for row in rows]

    def get(self, endpoint_id: str) -> Optional[Endpoint]:
        with self.db.connection() as conn:
            row = conn.execute("SELECT * FROM endpoints WHERE id = ?", (endpoint_id,)).fetchone()
            return self._row_to_endpoint(row) if row else None

    def create(self, name: str, url: str, active: bool = True) -> Endpoint:
        endpoint = Endpoint(
            id=str(uuid.uuid4()),
            name=name,
            url=url,
            active=active,
            created_at=utc_now_iso(),
        )
        with self.db.connection() as conn:
            conn.execute(
                "INSERT INTO endpoints (id, name, url, active, created_at) VALUES (?, ?, ?, ?, ?)",
                (endpoint.id, endpoint.name, endpoint.url, int(endpoint.active), endpoint.created_at)
            )
        logger.info(f"Created endpoint {endpoint.name} ({endpoint.id})")
        return endpoint

    def update(self, endpoint_id: str, **updates) -> Optional[Endpoint]:
        updates = {k: v for k, v in updates.items() if k in self.UPDATABLE_FIELDS and v is not None}
        if "active" in updates:
            updates["active"] = int(bool(updates["active"]))
        updates["updated_at"] = utc_now_iso()

        set_clause = ", ".join(f"{k} = ?" for k in updates.keys())
        values = list(updates.values()) + [endpoint_id]

        with self.db.connection() as conn:
            cursor = conn.execute(
                f"UPDATE endpoints SET {set_clause} WHERE id = ?",
                values
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM endpoints WHERE id = ?", (endpoint_id,)).fetchone()
            return self._row_to_endpoint(row)

    def delete(self, endpoint_id: str) -> bool:
        with self.db.connection() as conn:
            cursor = conn.execute("DELETE FROM endpoints WHERE id = ?", (endpoint_id,))
            return cursor.rowcount > 0

    def _row_to_endpoint(self, row: sqlite3.Row) -> Endpoint:
        """Convert database row to Endpoint object."""
        return Endpoint(
            id=row["id"],
            name=row["name"],
            url=row["url"],
            active=bool(row["active"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


# ── Settings ───────────────────────────────────────────────────────

class SQLiteSettingsStore(SettingsStore):
    """Key/value settings backed by the `settings` table (JSON values)."""

    def __init__(self, db: Database):
        self.db = db

    def _get(self, key: str) -> Optional[str]:
        with self.db.connection() as conn:
            row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None

    def _set(self, key: str, value: str) -> None:
        with self.db.connection() as conn:
            conn.execute(
                "INSERT INTO settings (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value)
            )

    def get_sync_settings(self) -> SyncSettings:
        raw = self._get(SYNC_SETTINGS_KEY)
        if raw is None:
            return SyncSettings()
        return SyncSettings.from_dict(json.loads(raw))

    def save_sync_settings(self, settings: SyncSettings) -> SyncSettings:
        self._set(SYNC_SETTINGS_KEY, json.dumps(settings.to_dict()))
        logger.info(f"Saved sync settings: frequency={settings.sync_frequency}")
        return settings

    def get_last_sync(self) -> Optional[str]:
        raw = self._get(LAST_SYNC_KEY)
        return json.loads(raw) if raw is not None else None

    def set_last_sync(self, timestamp: str) -> None:
        self._set(LAST_SYNC_KEY, json.dumps(timestamp))


def init_database(db_path: str = DATABASE_FILE) -> Database:
    """Create the database file and tables if missing."""
    db = Database(db_path)
    db.init()
    return db
