"""Database initialization and the key-value store built on it."""
import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from satact_tutor.errors import PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = str(Path.home() / ".satact_tutor" / "tutor.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


class KeyValueStore:
    """Durable string-keyed store of JSON documents.

    Reads return ``None`` for missing keys. Any storage failure is raised as
    PersistenceError; a failed ``set_many`` writes nothing.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = db_path

    def get(self, key: str, default: Any = None) -> Any:
        try:
            conn = get_connection(self.db_path)
            try:
                row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
            return json.loads(row["value"]) if row else default
        except (sqlite3.Error, ValueError) as e:
            logger.error("Failed to read %r: %s", key, e)
            raise PersistenceError(f"Could not read {key}") from e

    def set(self, key: str, value: Any) -> None:
        self.set_many({key: value})

    def set_many(self, items: dict[str, Any]) -> None:
        """Write every item in one transaction."""
        now = datetime.now().isoformat()
        try:
            rows = [(key, json.dumps(value), now) for key, value in items.items()]
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Could not encode {', '.join(items)}") from e
        try:
            conn = get_connection(self.db_path)
            try:
                with conn:
                    conn.executemany(
                        """INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                        ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at""",
                        rows,
                    )
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error("Failed to write %s: %s", ", ".join(items), e)
            raise PersistenceError(f"Could not save {', '.join(items)}") from e

    def delete(self, key: str) -> None:
        try:
            conn = get_connection(self.db_path)
            try:
                with conn:
                    conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error("Failed to delete %r: %s", key, e)
            raise PersistenceError(f"Could not delete {key}") from e

    def keys(self, prefix: Optional[str] = None) -> list[str]:
        try:
            conn = get_connection(self.db_path)
            try:
                if prefix:
                    rows = conn.execute(
                        "SELECT key FROM kv_store WHERE substr(key, 1, ?) = ? ORDER BY key",
                        (len(prefix), prefix),
                    ).fetchall()
                else:
                    rows = conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error("Failed to list keys: %s", e)
            raise PersistenceError("Could not list keys") from e
        return [r["key"] for r in rows]
