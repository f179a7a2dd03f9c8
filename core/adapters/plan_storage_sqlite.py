"""
Key-value stores for persisted plan documents.

SQLiteKeyValueStore keeps one JSON text value per key in a single table
(WAL mode). InMemoryKeyValueStore has the same behaviour without a file
and is used by tests and throwaway sessions.

DB location: <config_dir>/plan_tables.db unless configured otherwise.
"""

import sqlite3
import json
from pathlib import Path
from datetime import datetime
from typing import Any, Dict, List
from contextlib import contextmanager

from core.ports.plan_storage_port import PlanStoragePort


SCHEMA_SQL = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS kv (
    key         TEXT PRIMARY KEY,
    value_json  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
"""


class SQLiteKeyValueStore(PlanStoragePort):
    """SQLite-backed JSON key-value store."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(
            str(self.db_path),
            check_same_thread=False,
            isolation_level=None,
        )
        self._conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self):
        self._conn.executescript(SCHEMA_SQL)

    @contextmanager
    def _transaction(self):
        self._conn.execute("BEGIN")
        try:
            yield
            self._conn.execute("COMMIT")
        except Exception:
            self._conn.execute("ROLLBACK")
            raise

    def _now(self) -> str:
        return datetime.now().isoformat()

    def get_json(self, key: str, default: Any = None) -> Any:
        row = self._conn.execute(
            "SELECT value_json FROM kv WHERE key = ?", (key,)
        ).fetchone()
        if row is None:
            return default
        return json.loads(row["value_json"])

    def set_json(self, key: str, value: Any) -> None:
        self.set_raw(key, json.dumps(value))

    def set_raw(self, key: str, text: str) -> None:
        with self._transaction():
            self._conn.execute(
                """INSERT INTO kv (key, value_json, updated_at) VALUES (?, ?, ?)
                   ON CONFLICT(key) DO UPDATE SET value_json=excluded.value_json, updated_at=excluded.updated_at""",
                (key, text, self._now()),
            )

    def keys(self) -> List[str]:
        rows = self._conn.execute("SELECT key FROM kv ORDER BY key").fetchall()
        return [r["key"] for r in rows]

    def close(self) -> None:
        self._conn.close()


class InMemoryKeyValueStore(PlanStoragePort):
    """Dictionary-backed store holding encoded JSON text, like the SQLite one."""

    def __init__(self):
        self._values: Dict[str, str] = {}

    def get_json(self, key: str, default: Any = None) -> Any:
        if key not in self._values:
            return default
        return json.loads(self._values[key])

    def set_json(self, key: str, value: Any) -> None:
        self._values[key] = json.dumps(value)

    def set_raw(self, key: str, text: str) -> None:
        self._values[key] = text

    def keys(self) -> List[str]:
        return sorted(self._values)
