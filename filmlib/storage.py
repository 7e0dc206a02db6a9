# filmlib/storage.py
import json
import os
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Optional

# Keys of the persisted documents
FILMS_KEY = "films"
RECENT_SEARCHES_KEY = "recentSearches"
USER_KEY = "user"
USERS_KEY = "users"

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

# --- SQLite key-value store ---
class SqliteKV:
    """
    Durable key-value storage: one JSON document per key in a single table.
    Write errors are not caught here; they reach whoever triggered the write.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        dirname = os.path.dirname(db_path)
        if dirname:
            os.makedirs(dirname, exist_ok=True)
        with self.conn() as c:
            c.executescript(SCHEMA)

    @contextmanager
    def conn(self):
        con = sqlite3.connect(self.db_path)
        try:
            yield con
            con.commit()
        finally:
            con.close()

    def get(self, key: str) -> Optional[Any]:
        with self.conn() as c:
            r = c.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return json.loads(r[0]) if r else None

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        with self.conn() as c:
            c.execute("INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)", (key, payload))

    def delete(self, key: str) -> None:
        with self.conn() as c:
            c.execute("DELETE FROM kv WHERE key = ?", (key,))

# --- In-memory store (simple, used for unit tests) ---
class InMemoryKV:
    def __init__(self):
        # values kept as JSON text so nothing handed out aliases stored state
        self._data: Dict[str, str] = {}

    def get(self, key: str):
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value) -> None:
        self._data[key] = json.dumps(value, ensure_ascii=False)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
