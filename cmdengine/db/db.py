#!/usr/bin/env python3
# cmdengine/db/db.py
from __future__ import annotations
"""
SQLite persistence for the command audit trail.

Tables:
  command_history  one row per invocation (preview only)
  command_outputs  full output for rows whose preview was cut
  command_usage    per-command rolling usage statistics
"""

import sqlite3
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Protocol

from cmdengine.commands.command_types import UsageStats
from cmdengine.db.output import decompress


def now_ms() -> int:
    return int(time.time() * 1000)


class AuditStore(Protocol):
    """Write side of the audit trail, as used by the execution engine."""

    def insert_command_history(
        self,
        *,
        command: str,
        command_type: str,
        sub_command: str | None,
        arguments: str | None,
        session_id: str,
        execution_time_ms: int,
        success: bool,
        output_preview: str,
    ) -> str:  # pragma: no cover - signature only
        ...

    def insert_command_output(
        self, *, command_id: str, full_output: str, output_type: str, compressed: bool
    ) -> str:  # pragma: no cover - signature only
        ...

    def upsert_command_usage(self, stats: UsageStats) -> None:  # pragma: no cover - signature only
        ...


_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS command_history (
        id TEXT PRIMARY KEY,
        command TEXT NOT NULL,
        command_type TEXT NOT NULL,
        sub_command TEXT,
        arguments TEXT,
        timestamp INTEGER NOT NULL,
        execution_time_ms INTEGER NOT NULL,
        success INTEGER NOT NULL,
        output_preview TEXT NOT NULL DEFAULT '',
        full_output_id TEXT,
        session_id TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS command_outputs (
        id TEXT PRIMARY KEY,
        command_id TEXT NOT NULL REFERENCES command_history(id) ON DELETE CASCADE,
        full_output TEXT NOT NULL,
        output_type TEXT NOT NULL,
        compressed INTEGER NOT NULL DEFAULT 0,
        timestamp INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS command_usage (
        command TEXT PRIMARY KEY,
        category TEXT NOT NULL,
        usage_count INTEGER NOT NULL DEFAULT 0,
        last_used INTEGER,
        success_rate REAL NOT NULL DEFAULT 0,
        average_execution_time REAL NOT NULL DEFAULT 0,
        total_execution_time INTEGER NOT NULL DEFAULT 0
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_history_session ON command_history(session_id)",
    "CREATE INDEX IF NOT EXISTS idx_history_type ON command_history(command_type)",
    "CREATE INDEX IF NOT EXISTS idx_history_timestamp ON command_history(timestamp)",
    "CREATE INDEX IF NOT EXISTS idx_outputs_command ON command_outputs(command_id)",
    "CREATE INDEX IF NOT EXISTS idx_usage_count ON command_usage(usage_count DESC)",
)


class SQLiteAuditStore:
    """Audit trail backed by a single SQLite file (WAL mode)."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.initialize_database()

    # ---------- connection ----------

    def _open_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=5.0, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA foreign_keys=ON;")
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self._open_connection()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def initialize_database(self) -> None:
        with self._transaction() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)

    # ---------- writes ----------

    def insert_command_history(
        self,
        *,
        command: str,
        command_type: str,
        sub_command: str | None,
        arguments: str | None,
        session_id: str,
        execution_time_ms: int,
        success: bool,
        output_preview: str,
        full_output_id: str | None = None,
        timestamp_ms: int | None = None,
    ) -> str:
        history_id = str(uuid.uuid4())
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO command_history (id, command, command_type, sub_command, arguments,
                    timestamp, execution_time_ms, success, output_preview, full_output_id, session_id)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (history_id, command, command_type, sub_command, arguments,
                 timestamp_ms if timestamp_ms is not None else now_ms(),
                 int(execution_time_ms), int(success), output_preview, full_output_id, session_id),
            )
        return history_id

    def insert_command_output(
        self, *, command_id: str, full_output: str, output_type: str, compressed: bool
    ) -> str:
        """Store a full output and link it from its history row."""
        output_id = str(uuid.uuid4())
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO command_outputs (id, command_id, full_output, output_type, compressed, timestamp)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (output_id, command_id, full_output, output_type, int(compressed), now_ms()),
            )
            conn.execute(
                "UPDATE command_history SET full_output_id=? WHERE id=?", (output_id, command_id))
        return output_id

    def upsert_command_usage(self, stats: UsageStats) -> None:
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO command_usage (command, category, usage_count, last_used,
                    success_rate, average_execution_time, total_execution_time)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(command) DO UPDATE SET
                    category = excluded.category,
                    usage_count = excluded.usage_count,
                    last_used = excluded.last_used,
                    success_rate = excluded.success_rate,
                    average_execution_time = excluded.average_execution_time,
                    total_execution_time = excluded.total_execution_time
                """,
                (stats.command, stats.category, stats.usage_count, stats.last_used_ms,
                 stats.success_rate, stats.average_execution_time_ms, stats.total_execution_time_ms),
            )

    def cleanup_older_than(self, cutoff_ms: int) -> int:
        """Delete history (and, by cascade, outputs) older than the cutoff. Returns rows removed."""
        with self._transaction() as conn:
            conn.execute("DELETE FROM command_outputs WHERE timestamp < ?", (cutoff_ms,))
            cur = conn.execute("DELETE FROM command_history WHERE timestamp < ?", (cutoff_ms,))
            return cur.rowcount

    # ---------- reads ----------

    def recent_history(self, *, limit: int = 50, session_id: str | None = None) -> list[sqlite3.Row]:
        with self._transaction() as conn:
            if session_id is None:
                rows = conn.execute(
                    "SELECT * FROM command_history ORDER BY timestamp DESC, rowid DESC LIMIT ?",
                    (limit,),
                )
            else:
                rows = conn.execute(
                    """
                    SELECT * FROM command_history WHERE session_id=?
                    ORDER BY timestamp DESC, rowid DESC LIMIT ?
                    """,
                    (session_id, limit),
                )
            return list(rows.fetchall())

    def get_history(self, command_id: str) -> Optional[sqlite3.Row]:
        with self._transaction() as conn:
            return conn.execute(
                "SELECT * FROM command_history WHERE id=?", (command_id,)).fetchone()

    def get_full_output(self, command_id: str) -> Optional[str]:
        """Return the stored full output for a history row, decompressed when flagged."""
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT full_output, compressed FROM command_outputs WHERE command_id=?",
                (command_id,),
            ).fetchone()
        if row is None:
            return None
        return decompress(row["full_output"]) if row["compressed"] else row["full_output"]

    def list_usage(self) -> list[sqlite3.Row]:
        with self._transaction() as conn:
            return list(conn.execute(
                "SELECT * FROM command_usage ORDER BY usage_count DESC, command").fetchall())
