"""SQLite cache of the last successful summary for each transcript file."""

import sqlite3

from gemini_bridge.types import SessionSummary


class SessionCache:
    """Remembers normalized summaries so a transcript caught mid-write
    can still be listed.

    In-memory by default, so the cache lives exactly as long as its owner.
    """

    def __init__(self, db_path: str = ":memory:"):
        self._db_path = db_path
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._create_table()

    def _create_table(self):
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS session_summary (
                file_path TEXT PRIMARY KEY,
                session_id TEXT NOT NULL,
                name TEXT NOT NULL DEFAULT '',
                project_path TEXT NOT NULL DEFAULT '',
                created_at TEXT,
                last_updated TEXT,
                message_count INTEGER NOT NULL DEFAULT 0,
                file TEXT
            )
        """)
        self._conn.commit()

    def get(self, file_path: str) -> SessionSummary | None:
        row = self._conn.execute(
            "SELECT * FROM session_summary WHERE file_path = ?",
            (str(file_path),)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_summary(row)

    def put(self, file_path: str, summary: SessionSummary):
        self._conn.execute("""
            INSERT OR REPLACE INTO session_summary
            (file_path, session_id, name, project_path, created_at,
             last_updated, message_count, file)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            str(file_path), summary.id, summary.name, summary.project_path,
            summary.created_at, summary.last_updated, summary.message_count,
            summary.file,
        ))
        self._conn.commit()

    def remove(self, file_path: str):
        self._conn.execute(
            "DELETE FROM session_summary WHERE file_path = ?",
            (str(file_path),)
        )
        self._conn.commit()

    def clear(self):
        self._conn.execute("DELETE FROM session_summary")
        self._conn.commit()

    def __len__(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM session_summary").fetchone()[0]

    def close(self):
        self._conn.close()

    def _row_to_summary(self, row: sqlite3.Row) -> SessionSummary:
        return SessionSummary(
            id=row["session_id"],
            name=row["name"],
            project_path=row["project_path"],
            created_at=row["created_at"],
            last_updated=row["last_updated"],
            message_count=row["message_count"],
            file=row["file"],
        )
