# =============================================================================
# course_core/offline/local_database.py
# Local SQLite Database for Offline Viewing
# =============================================================================
"""
LocalDatabase - SQLite-based local store that mirrors server state.

Features:
- Automatic schema creation (courses, students)
- Keyed upserts, slice replacement and foreign-key cascade
- DataFrame integration (pandas)
- Transaction support
- Thread-safe operations (one connection per thread)
"""

from __future__ import annotations
import os
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
import logging

import pandas as pd

logger = logging.getLogger(__name__)


class LocalDatabase:
    """
    Local SQLite database holding cached copies of courses and students.

    Rows are only written from server responses, so the store never holds
    an entity without a server-assigned id.
    """

    # Default database location
    DEFAULT_DB_PATH = Path(
        os.getenv("COURSES_LOCAL_DB", Path(__file__).parent.parent.parent / "local_data" / "student_courses.db")
    )

    COURSES = "courses"
    STUDENTS = "students"

    SCHEMA = {
        COURSES: """
            CREATE TABLE IF NOT EXISTS courses (
                id INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                description TEXT NOT NULL DEFAULT '',
                image_url TEXT,
                schedule TEXT NOT NULL DEFAULT '',
                professor TEXT NOT NULL DEFAULT '',
                is_from_cache INTEGER NOT NULL DEFAULT 0,
                last_sync_timestamp TEXT
            )
        """,
        STUDENTS: """
            CREATE TABLE IF NOT EXISTS students (
                id INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                email TEXT NOT NULL DEFAULT '',
                phone TEXT NOT NULL DEFAULT '',
                course_id INTEGER NOT NULL
                    REFERENCES courses(id) ON DELETE CASCADE,
                is_from_cache INTEGER NOT NULL DEFAULT 0,
                last_sync_timestamp TEXT
            )
        """,
        "students_course_idx": """
            CREATE INDEX IF NOT EXISTS idx_students_course_id ON students(course_id)
        """,
    }

    # Columns written from entity rows, per table
    COLUMNS = {
        COURSES: ["id", "name", "description", "image_url", "schedule", "professor"],
        STUDENTS: ["id", "name", "email", "phone", "course_id"],
    }

    # Foreign-key column per table (students are indexed by owning course)
    FOREIGN_KEYS = {
        STUDENTS: "course_id",
    }

    _instance: Optional[LocalDatabase] = None
    _lock = threading.Lock()

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize local database.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path) if db_path else self.DEFAULT_DB_PATH
        self._ensure_directory()
        self._local = threading.local()
        self._initialized = False

    @classmethod
    def get_instance(cls, db_path: Optional[Path] = None) -> LocalDatabase:
        """Get or create singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = LocalDatabase(db_path)
        return cls._instance

    def _ensure_directory(self) -> None:
        """Ensure database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection."""
        if getattr(self._local, "connection", None) is None:
            connection = sqlite3.connect(str(self.db_path), check_same_thread=False)
            connection.row_factory = sqlite3.Row
            # Cascade from courses to students relies on this
            connection.execute("PRAGMA foreign_keys = ON")
            self._local.connection = connection
        return self._local.connection

    @contextmanager
    def transaction(self):
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def initialize(self) -> LocalDatabase:
        """Initialize database schema."""
        if self._initialized:
            return self

        with self.transaction() as conn:
            for name, schema in self.SCHEMA.items():
                conn.execute(schema)
                logger.debug(f"Created/verified: {name}")

        self._initialized = True
        logger.info(f"Local database initialized at: {self.db_path}")
        return self

    def _check_table(self, table: str) -> None:
        if table not in self.COLUMNS:
            raise ValueError(f"Unknown table: {table}")

    def _foreign_key(self, table: str) -> str:
        self._check_table(table)
        if table not in self.FOREIGN_KEYS:
            raise ValueError(f"Table {table} has no foreign-key index")
        return self.FOREIGN_KEYS[table]

    # =========================================================================
    # READS
    # =========================================================================

    def get_all(self, table: str, order_by: str = "name ASC") -> List[Dict[str, Any]]:
        """Get all records from a table, ordered by name by default."""
        self._check_table(table)
        rows = self._get_connection().execute(
            f"SELECT * FROM {table} ORDER BY {order_by}, id ASC"
        ).fetchall()
        return [dict(row) for row in rows]

    def get_by_id(self, table: str, record_id: Optional[int]) -> Optional[Dict[str, Any]]:
        """Get a record by primary key."""
        self._check_table(table)
        if record_id is None:
            return None
        row = self._get_connection().execute(
            f"SELECT * FROM {table} WHERE id = ?",
            [record_id]
        ).fetchone()
        return dict(row) if row else None

    def get_by_foreign_key(
        self,
        table: str,
        parent_id: int,
        order_by: str = "name ASC",
    ) -> List[Dict[str, Any]]:
        """Get the records owned by a parent (e.g. students of a course)."""
        column = self._foreign_key(table)
        rows = self._get_connection().execute(
            f"SELECT * FROM {table} WHERE {column} = ? ORDER BY {order_by}, id ASC",
            [parent_id]
        ).fetchall()
        return [dict(row) for row in rows]

    def get_ids(self, table: str) -> set:
        """Primary keys currently stored in a table."""
        self._check_table(table)
        rows = self._get_connection().execute(f"SELECT id FROM {table}").fetchall()
        return {row["id"] for row in rows}

    def count(self, table: str) -> int:
        """Number of rows in a table."""
        self._check_table(table)
        row = self._get_connection().execute(f"SELECT COUNT(*) AS count FROM {table}").fetchone()
        return row["count"]

    # =========================================================================
    # WRITES
    # =========================================================================

    def _upsert(self, conn: sqlite3.Connection, table: str, records: Iterable[Dict[str, Any]],
                from_cache: bool) -> int:
        """
        Insert or update by primary key.

        ON CONFLICT ... DO UPDATE keeps the existing row in place; a REPLACE
        would delete it first and cascade to its students.
        """
        columns = self.COLUMNS[table] + ["is_from_cache", "last_sync_timestamp"]
        placeholders = ", ".join("?" for _ in columns)
        updates = ", ".join(f"{c} = excluded.{c}" for c in columns if c != "id")
        sql = (
            f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders}) "
            f"ON CONFLICT(id) DO UPDATE SET {updates}"
        )

        synced_at = datetime.now().isoformat()
        written = 0
        for record in records:
            if record.get("id") is None:
                raise ValueError(f"Cannot store a {table} row without an id")
            values = [record.get(c) for c in self.COLUMNS[table]] + [int(from_cache), synced_at]
            conn.execute(sql, values)
            written += 1
        return written

    def upsert_many(self, table: str, records: List[Dict[str, Any]], from_cache: bool = False) -> int:
        """
        Insert or replace records by primary key. Idempotent.

        Args:
            table: Table name
            records: Entity rows (see COLUMNS)
            from_cache: Whether the rows came from an HTTP-cache hit

        Returns:
            Number of rows written
        """
        self._check_table(table)
        if not records:
            return 0
        with self.transaction() as conn:
            return self._upsert(conn, table, records, from_cache)

    def replace_all(self, table: str, records: List[Dict[str, Any]], from_cache: bool = False) -> int:
        """
        Atomically make a table hold exactly `records`.

        Rows missing from the new set are deleted (their students cascade),
        the rest are upserted in place.
        """
        self._check_table(table)
        keep = [r["id"] for r in records if r.get("id") is not None]
        with self.transaction() as conn:
            if keep:
                placeholders = ", ".join("?" for _ in keep)
                conn.execute(f"DELETE FROM {table} WHERE id NOT IN ({placeholders})", keep)
            else:
                conn.execute(f"DELETE FROM {table}")
            return self._upsert(conn, table, records, from_cache)

    def replace_by_foreign_key(
        self,
        table: str,
        parent_id: int,
        records: List[Dict[str, Any]],
        from_cache: bool = False,
    ) -> int:
        """Atomically replace the slice of `table` owned by `parent_id`."""
        column = self._foreign_key(table)
        with self.transaction() as conn:
            conn.execute(f"DELETE FROM {table} WHERE {column} = ?", [parent_id])
            return self._upsert(conn, table, records, from_cache)

    def delete_by_id(self, table: str, record_id: int) -> bool:
        """Delete a record. Deleting a missing key is a no-op."""
        self._check_table(table)
        with self.transaction() as conn:
            cursor = conn.execute(f"DELETE FROM {table} WHERE id = ?", [record_id])
            return cursor.rowcount > 0

    def delete_by_foreign_key(self, table: str, parent_id: int) -> int:
        """Delete every record owned by a parent."""
        column = self._foreign_key(table)
        with self.transaction() as conn:
            cursor = conn.execute(f"DELETE FROM {table} WHERE {column} = ?", [parent_id])
            return cursor.rowcount

    def clear_all(self, table: str) -> int:
        """Delete every record in a table."""
        self._check_table(table)
        with self.transaction() as conn:
            cursor = conn.execute(f"DELETE FROM {table}")
            return cursor.rowcount

    # =========================================================================
    # PANDAS INTEGRATION
    # =========================================================================

    def to_dataframe(
        self,
        table: str,
        where: Optional[str] = None,
        params: Optional[List] = None
    ) -> pd.DataFrame:
        """
        Load a table into a pandas DataFrame (for display).

        Args:
            table: Table name
            where: Optional WHERE clause
            params: Parameters for WHERE clause

        Returns:
            DataFrame with table data ordered by name
        """
        self._check_table(table)
        query = f"SELECT * FROM {table}"
        if where:
            query += f" WHERE {where}"
        query += " ORDER BY name ASC, id ASC"

        return pd.read_sql_query(query, self._get_connection(), params=params)

    def close(self) -> None:
        """Close this thread's database connection."""
        if getattr(self._local, "connection", None) is not None:
            self._local.connection.close()
            self._local.connection = None


# Singleton accessor
_local_database: Optional[LocalDatabase] = None


def get_local_database() -> LocalDatabase:
    """Get the global LocalDatabase instance."""
    global _local_database
    if _local_database is None:
        _local_database = LocalDatabase.get_instance()
        _local_database.initialize()
    return _local_database
