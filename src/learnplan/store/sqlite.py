"""SQLite profile store.

Selected with ``DATABASE_URL=sqlite:///path/to/profiles.db``. Records are
stored as JSON text alongside a few indexed columns.
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

from learnplan.store.base import ProfileStore, Record, StoreError, summarize

logger = structlog.get_logger(__name__)

SQLITE_PREFIX = "sqlite:///"


def path_from_url(database_url: str) -> Path:
    """Database file path from a ``sqlite:///`` URL.

    Raises:
        ValueError: If the URL is not a SQLite URL
    """
    if not database_url.startswith(SQLITE_PREFIX):
        raise ValueError(f"Not a SQLite URL: {database_url}")
    return Path(database_url[len(SQLITE_PREFIX) :])


class SQLiteProfileStore(ProfileStore):
    backend = "sqlite"

    def __init__(self, db_path: Path, clock=None):
        super().__init__(clock)
        self.db_path = db_path
        with self._connect() as conn:
            _create_schema(conn)
        logger.info("database.initialized", path=str(db_path))

    @contextmanager
    def _connect(self) -> Generator[sqlite3.Connection, None, None]:
        """Get database connection as context manager.

        Commits on success, rolls back on error. sqlite3 errors are raised
        as StoreError.
        """
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
        except (OSError, sqlite3.Error) as e:
            raise StoreError(f"Cannot open database {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row

        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(f"Database error: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _write(self, conn: sqlite3.Connection, record: Record) -> None:
        conn.execute(
            """
            INSERT INTO student_profiles (id, name, content, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name = excluded.name,
                content = excluded.content,
                updated_at = excluded.updated_at
            """,
            (
                record["id"],
                str(record.get("name") or ""),
                json.dumps(record),
                record["createdAt"],
                record["updatedAt"],
            ),
        )

    def create(self, data: Record) -> Record:
        record = self._stamp(data, f"db-{uuid.uuid4().hex[:12]}")
        with self._connect() as conn:
            self._write(conn, record)
        return record

    def get(self, profile_id: str) -> Record | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT content FROM student_profiles WHERE id = ?", (profile_id,)
            ).fetchone()
        if row is None:
            return None
        return json.loads(row["content"])

    def update(self, profile_id: str, data: Record) -> Record:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT content FROM student_profiles WHERE id = ?", (profile_id,)
            ).fetchone()
            existing = json.loads(row["content"]) if row else None
            record = self._stamp(data, profile_id, existing)
            self._write(conn, record)
        return record

    def delete(self, profile_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM student_profiles WHERE id = ?", (profile_id,))
            return cursor.rowcount > 0

    def list(self) -> list[Record]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT content FROM student_profiles ORDER BY created_at, rowid"
            ).fetchall()
        return [summarize(json.loads(row["content"])) for row in rows]

    def search(self, name: str) -> list[Record]:
        needle = (name or "").strip().lower()
        # "%" and "_" in a name are literal characters
        needle = needle.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT content FROM student_profiles WHERE lower(name) LIKE ? ESCAPE '\\' ORDER BY name",
                (f"%{needle}%",),
            ).fetchall()
        return [summarize(json.loads(row["content"])) for row in rows]


def _create_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS student_profiles (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL DEFAULT '',
            content TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_student_profiles_name ON student_profiles(name);
        """
    )
