"""SQLite entry store for Compound."""

import json
import logging
import sqlite3
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from pydantic import ValidationError

from compound.models import Entry, Stats

logger = logging.getLogger(__name__)

# Key-value slots, each serialized independently
DEVICE_ID_KEY = "device_id"
STATS_KEY = "stats"
PENDING_KEY = "pending_sync"
LAST_SYNC_KEY = "last_sync"


class EntryStore:
    """SQLite-based local store for entries.

    Entries are keyed by their date id. Device identity, cached stats, the
    pending-sync queue and the last sync instant live in a separate
    key-value table. Writes never raise: a failed write is logged and
    reported through the return value only.
    """

    REQUIRED_TABLES = [
        "entries",
        "kv",
    ]

    def __init__(self, db_path: Path):
        """Initialize the entry store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._lock = threading.Lock()
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS entries (
                    id TEXT PRIMARY KEY,
                    timestamp TEXT,
                    text TEXT NOT NULL DEFAULT '',
                    health TEXT NOT NULL DEFAULT '{}',
                    energy INTEGER NOT NULL DEFAULT 0,
                    tomorrow TEXT NOT NULL DEFAULT '',
                    analysis TEXT
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)

            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Entries ====================

    def save_entry(self, entry: Entry) -> bool:
        """Insert or replace an entry by id.

        Args:
            entry: Entry to save.

        Returns:
            True if the entry was persisted, False if the write failed.
        """
        return self.save_entries([entry])

    def save_entries(self, entries: Iterable[Entry]) -> bool:
        """Insert or replace several entries in one transaction.

        Args:
            entries: Entries to save.

        Returns:
            True if all entries were persisted, False if the write failed.
        """
        try:
            conn = self._get_connection()
            try:
                cursor = conn.cursor()
                for entry in entries:
                    cursor.execute(
                        """
                        INSERT OR REPLACE INTO entries
                        (id, timestamp, text, health, energy, tomorrow, analysis)
                        VALUES (?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            entry.id,
                            entry.timestamp.isoformat() if entry.timestamp else None,
                            entry.text,
                            json.dumps(entry.health),
                            entry.energy,
                            entry.tomorrow,
                            entry.analysis,
                        ),
                    )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Local save failed: {e}")
            return False
        return True

    def get_entry(self, entry_id: str) -> Optional[Entry]:
        """Get an entry by id.

        Args:
            entry_id: Entry date id (YYYY-MM-DD).

        Returns:
            Entry if found, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, timestamp, text, health, energy, tomorrow, analysis
                FROM entries
                WHERE id = ?
                """,
                (entry_id,),
            )
            row = cursor.fetchone()
            if row:
                return self._row_to_entry(row)
            return None
        finally:
            conn.close()

    def get_entries(self) -> list[Entry]:
        """Get all entries.

        Rows that cannot be decoded are skipped.

        Returns:
            List of entries in no particular order.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, timestamp, text, health, energy, tomorrow, analysis
                FROM entries
                """
            )
            entries = []
            for row in cursor.fetchall():
                entry = self._row_to_entry(row)
                if entry is not None:
                    entries.append(entry)
            return entries
        finally:
            conn.close()

    def get_entry_ids(self) -> set[str]:
        """Get the ids of all stored entries."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT id FROM entries")
            return {row["id"] for row in cursor.fetchall()}
        finally:
            conn.close()

    def _row_to_entry(self, row: sqlite3.Row) -> Optional[Entry]:
        try:
            return Entry(
                id=row["id"],
                timestamp=datetime.fromisoformat(row["timestamp"]) if row["timestamp"] else None,
                text=row["text"],
                health=json.loads(row["health"]),
                energy=row["energy"],
                tomorrow=row["tomorrow"],
                analysis=row["analysis"],
            )
        except (json.JSONDecodeError, ValueError, ValidationError) as e:
            logger.warning(f"Skipping corrupt entry {row['id']}: {e}")
            return None

    # ==================== Key-value slots ====================

    def _get_value(self, key: str) -> Optional[str]:
        try:
            conn = self._get_connection()
            try:
                cursor = conn.cursor()
                cursor.execute("SELECT value FROM kv WHERE key = ?", (key,))
                row = cursor.fetchone()
                return row["value"] if row else None
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Local read of '{key}' failed: {e}")
            return None

    def _set_value(self, key: str, value: str) -> bool:
        try:
            conn = self._get_connection()
            try:
                conn.execute(
                    "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                    (key, value),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Local write of '{key}' failed: {e}")
            return False
        return True

    def _delete_value(self, key: str) -> None:
        try:
            conn = self._get_connection()
            try:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Local delete of '{key}' failed: {e}")

    # ==================== Device identity ====================

    def get_device_id(self) -> str:
        """Get the installation's device id, creating it on first use.

        Returns:
            Opaque random token identifying this device.
        """
        with self._lock:
            device_id = self._get_value(DEVICE_ID_KEY)
            if not device_id:
                device_id = str(uuid.uuid4())
                self._set_value(DEVICE_ID_KEY, device_id)
            return device_id

    # ==================== Pending sync ====================

    def get_pending(self) -> list[str]:
        """Get ids whose remote write has not been confirmed.

        Returns:
            List of entry ids, empty if the slot is missing or corrupt.
        """
        raw = self._get_value(PENDING_KEY)
        if raw is None:
            return []
        try:
            pending = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Pending-sync queue is corrupt, starting empty")
            return []
        if not isinstance(pending, list):
            return []
        return [str(entry_id) for entry_id in pending]

    def add_pending(self, entry_id: str) -> None:
        """Queue an id for a later remote write.

        Args:
            entry_id: Entry id whose remote write failed.
        """
        with self._lock:
            pending = self.get_pending()
            if entry_id not in pending:
                pending.append(entry_id)
                self._set_value(PENDING_KEY, json.dumps(pending))

    def clear_pending(self) -> None:
        """Empty the pending-sync queue."""
        with self._lock:
            self._delete_value(PENDING_KEY)

    # ==================== Stats cache ====================

    def get_cached_stats(self) -> Optional[Stats]:
        """Get cached stats.

        Returns:
            Stats if cached and readable, None otherwise.
        """
        raw = self._get_value(STATS_KEY)
        if raw is None:
            return None
        try:
            return Stats.model_validate_json(raw)
        except ValidationError:
            logger.warning("Cached stats are corrupt, ignoring")
            return None

    def save_stats(self, stats: Stats) -> None:
        """Cache stats.

        Args:
            stats: Stats to cache.
        """
        self._set_value(STATS_KEY, stats.model_dump_json())

    # ==================== Sync bookkeeping ====================

    def get_last_sync(self) -> Optional[datetime]:
        """Get the instant of the last completed sync, if any."""
        raw = self._get_value(LAST_SYNC_KEY)
        if raw is None:
            return None
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            return None

    def set_last_sync(self, when: datetime) -> None:
        """Record the instant of a completed sync.

        Args:
            when: Completion instant.
        """
        self._set_value(LAST_SYNC_KEY, when.isoformat())
