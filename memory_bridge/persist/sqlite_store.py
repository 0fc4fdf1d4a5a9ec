"""
SQLite-backed rolling session store.

One table holds every project's session summaries:
- sessions: row id, session id, project path, initial request,
  decisions (JSON list), creation timestamp

Each project keeps only its most recent sessions; older rows are deleted
in the same transaction that inserts a new one.
"""

import json
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

from pydantic import ValidationError

from memory_bridge.memory.errors import StorageUnavailable, StoreOperationFailed
from memory_bridge.memory.schemas import SessionSummary
from .paths import ensure_parent


SCHEMA = """
    CREATE TABLE IF NOT EXISTS sessions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        session_id TEXT NOT NULL,
        project_path TEXT NOT NULL,
        summary TEXT,
        key_decisions TEXT,
        created_at REAL NOT NULL
    );

    CREATE INDEX IF NOT EXISTS idx_project ON sessions(project_path);
    CREATE INDEX IF NOT EXISTS idx_created ON sessions(created_at DESC);
"""


class SessionStore:
    """
    File-backed SQLite store of session summaries.

    Uses WAL mode and IMMEDIATE transactions so concurrent hook processes
    never observe a partially pruned project.
    """

    def __init__(self, db_path: Union[str, Path]):
        """
        Open (creating if absent) the store at the given path.

        Args:
            db_path: Path to SQLite database file

        Raises:
            StorageUnavailable: The file or its directory cannot be created or opened
        """
        self.db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None

        try:
            ensure_parent(self.db_path)
            # Autocommit mode; transactions are opened explicitly
            self._conn = sqlite3.connect(
                str(self.db_path),
                timeout=10.0,
                isolation_level=None,
            )
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")
            self._init_tables()
        except (OSError, sqlite3.Error) as e:
            self.close()
            raise StorageUnavailable(self.db_path, e) from e

    @classmethod
    def open(cls, db_path: Union[str, Path]) -> "SessionStore":
        """Open a store; alias for the constructor."""
        return cls(db_path)

    def _init_tables(self) -> None:
        """Create the sessions table and its indexes if they don't exist."""
        self._conn.executescript(SCHEMA)

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[sqlite3.Connection]:
        """Run a block in one IMMEDIATE transaction, mapping errors to StoreOperationFailed."""
        if self._conn is None:
            raise StoreOperationFailed(operation, sqlite3.ProgrammingError("store is closed"))

        try:
            self._conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            raise StoreOperationFailed(operation, e) from e

        try:
            yield self._conn
        except sqlite3.Error as e:
            self._conn.execute("ROLLBACK")
            raise StoreOperationFailed(operation, e) from e
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        else:
            try:
                self._conn.execute("COMMIT")
            except sqlite3.Error as e:
                self._rollback_quietly()
                raise StoreOperationFailed(operation, e) from e

    def _rollback_quietly(self) -> None:
        """Roll back after a failed COMMIT; the transaction may already be gone."""
        try:
            self._conn.execute("ROLLBACK")
        except sqlite3.Error:
            pass

    def _insert(self, conn: sqlite3.Connection, project_path: str, session_id: str, summary: SessionSummary) -> SessionSummary:
        # created_at never goes backwards, even if the wall clock does
        row = conn.execute("SELECT MAX(created_at) FROM sessions").fetchone()
        latest = row[0] if row and row[0] is not None else 0.0
        created_at = max(time.time(), latest)

        stored = summary.model_copy(update={
            "session_id": session_id,
            "project_path": project_path,
            "created_at": created_at,
        })

        conn.execute(
            """
            INSERT INTO sessions (session_id, project_path, summary, key_decisions, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                session_id,
                project_path,
                stored.initial_request,
                json.dumps(stored.decisions),
                created_at,
            )
        )
        return stored

    def _prune(self, conn: sqlite3.Connection, project_path: str, window_size: int) -> int:
        cursor = conn.execute(
            """
            DELETE FROM sessions
            WHERE project_path = ?
            AND id NOT IN (
                SELECT id FROM sessions
                WHERE project_path = ?
                ORDER BY created_at DESC, id DESC
                LIMIT ?
            )
            """,
            (project_path, project_path, max(window_size, 0))
        )
        return cursor.rowcount

    def insert(self, project_path: str, session_id: str, summary: SessionSummary) -> SessionSummary:
        """
        Append a session summary.

        Repeated calls with the same session_id add separate rows.

        Args:
            project_path: Partition key
            session_id: Session identifier
            summary: Extracted summary

        Returns:
            The stored summary with keys and created_at filled in
        """
        with self._transaction("insert") as conn:
            return self._insert(conn, project_path, session_id, summary)

    def prune(self, project_path: str, window_size: int) -> int:
        """
        Delete all but the newest ``window_size`` sessions of a project.

        Ties on created_at keep the later-inserted row. Pruning an
        already-pruned project deletes nothing.

        Args:
            project_path: Partition key
            window_size: Number of sessions to keep

        Returns:
            Number of rows deleted
        """
        with self._transaction("prune") as conn:
            return self._prune(conn, project_path, window_size)

    def save(self, project_path: str, session_id: str, summary: SessionSummary, window_size: int) -> SessionSummary:
        """
        Insert a summary and prune its project in a single transaction.

        Returns:
            The stored summary
        """
        with self._transaction("save") as conn:
            stored = self._insert(conn, project_path, session_id, summary)
            self._prune(conn, project_path, window_size)
        return stored

    def query_recent(self, project_path: str, limit: int) -> List[SessionSummary]:
        """
        Most recent sessions for a project, newest first.

        Args:
            project_path: Partition key
            limit: Maximum sessions to return

        Returns:
            List of SessionSummary (empty if the project has none)
        """
        if self._conn is None:
            raise StoreOperationFailed("query", sqlite3.ProgrammingError("store is closed"))

        try:
            rows = self._conn.execute(
                """
                SELECT session_id, project_path, summary, key_decisions, created_at
                FROM sessions
                WHERE project_path = ?
                ORDER BY created_at DESC, id DESC
                LIMIT ?
                """,
                (project_path, max(limit, 0))
            ).fetchall()
        except sqlite3.Error as e:
            raise StoreOperationFailed("query", e) from e

        return [self._row_to_summary(row) for row in rows]

    @staticmethod
    def _row_to_summary(row: tuple) -> SessionSummary:
        session_id, project_path, summary, key_decisions, created_at = row
        try:
            return SessionSummary(
                session_id=session_id,
                project_path=project_path,
                initial_request=summary or "",
                decisions=json.loads(key_decisions or "[]"),
                created_at=created_at,
            )
        except (json.JSONDecodeError, ValidationError) as e:
            raise StoreOperationFailed("query", e) from e

    def count(self, project_path: Optional[str] = None) -> int:
        """Number of stored sessions, optionally for one project."""
        if self._conn is None:
            raise StoreOperationFailed("count", sqlite3.ProgrammingError("store is closed"))

        try:
            if project_path is None:
                row = self._conn.execute("SELECT COUNT(*) FROM sessions").fetchone()
            else:
                row = self._conn.execute(
                    "SELECT COUNT(*) FROM sessions WHERE project_path = ?",
                    (project_path,)
                ).fetchone()
        except sqlite3.Error as e:
            raise StoreOperationFailed("count", e) from e

        return row[0]

    def stats(self) -> List[dict]:
        """
        Per-project statistics.

        Returns:
            List of dicts with project_path, count, oldest_ts, newest_ts,
            ordered by most recent activity
        """
        if self._conn is None:
            raise StoreOperationFailed("stats", sqlite3.ProgrammingError("store is closed"))

        try:
            rows = self._conn.execute("""
                SELECT
                    project_path,
                    COUNT(*) as count,
                    MIN(created_at) as oldest_ts,
                    MAX(created_at) as newest_ts
                FROM sessions
                GROUP BY project_path
                ORDER BY newest_ts DESC
            """).fetchall()
        except sqlite3.Error as e:
            raise StoreOperationFailed("stats", e) from e

        return [
            {
                "project_path": row[0],
                "count": row[1],
                "oldest_ts": row[2] or 0,
                "newest_ts": row[3] or 0,
            }
            for row in rows
        ]

    def close(self) -> None:
        """Close database connection. Safe to call more than once."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


def query_recent(db_path: Union[str, Path], project_path: str, limit: int) -> List[SessionSummary]:
    """
    Read-path helper: recent sessions without creating a missing database.

    Args:
        db_path: Path to SQLite database file
        project_path: Partition key
        limit: Maximum sessions to return

    Returns:
        Newest-first summaries, or an empty list if the file doesn't exist
    """
    if not Path(db_path).exists():
        return []

    with SessionStore(db_path) as store:
        return store.query_recent(project_path, limit)
