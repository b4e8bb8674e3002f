"""
Local key-value persistence for device-side state.

Stores small JSON records (daily usage counters, voice settings) under
fixed keys in a single sqlite table. Every write replaces the whole record;
there are no partial-field updates.

Usage:
    from souschef.storage import KeyValueStore

    store = KeyValueStore()
    store.set_json("voice-settings", {"voice_enabled": True})
    settings = store.get_json("voice-settings")
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

from souschef import DATA_DIR

logger = logging.getLogger(__name__)

DB_PATH = DATA_DIR / "souschef.db"


class KeyValueStore:
    """String values keyed by name, persisted to sqlite."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = Path(db_path) if db_path else DB_PATH

    def get_connection(self) -> sqlite3.Connection:
        """Get database connection, creating the table on first use."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("""CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )""")
        conn.commit()
        return conn

    def get_item(self, key: str) -> str | None:
        conn = self.get_connection()
        try:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def set_item(self, key: str, value: str) -> None:
        conn = self.get_connection()
        try:
            conn.execute(
                """INSERT INTO kv_store (key, value, updated_at)
                   VALUES (?, ?, CURRENT_TIMESTAMP)
                   ON CONFLICT(key) DO UPDATE SET
                       value = excluded.value,
                       updated_at = CURRENT_TIMESTAMP""",
                (key, value),
            )
            conn.commit()
        finally:
            conn.close()

    def remove_item(self, key: str) -> None:
        conn = self.get_connection()
        try:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()

    def get_json(self, key: str) -> Any | None:
        """Decode a stored JSON record; unreadable records count as missing."""
        raw = self.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Discarding unreadable record under %s", key)
            return None

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value))


__all__ = ["DB_PATH", "KeyValueStore"]
