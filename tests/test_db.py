from __future__ import annotations

from pathlib import Path

from cmdengine.commands import UsageStats
from cmdengine.db import SQLiteAuditStore, compress


def _history(store: SQLiteAuditStore, command: str = "echo", *, session: str = "s1",
             timestamp_ms: int | None = None) -> str:
    return store.insert_command_history(
        command=command,
        command_type="UTILITY",
        sub_command=None,
        arguments="a b",
        session_id=session,
        execution_time_ms=3,
        success=True,
        output_preview="preview",
        timestamp_ms=timestamp_ms,
    )


def test_schema_created_in_new_directory(tmp_path: Path) -> None:
    db_path = tmp_path / "nested" / "dir" / "audit.db"
    SQLiteAuditStore(db_path)
    assert db_path.exists()


def test_history_round_trip(tmp_path: Path) -> None:
    store = SQLiteAuditStore(tmp_path / "audit.db")
    history_id = _history(store)

    row = store.get_history(history_id)
    assert row["command"] == "echo"
    assert row["arguments"] == "a b"
    assert row["success"] == 1
    assert row["full_output_id"] is None


def test_full_output_links_and_decompresses(tmp_path: Path) -> None:
    store = SQLiteAuditStore(tmp_path / "audit.db")
    history_id = _history(store)
    text = "payload " * 500
    stored, flag = compress(text)

    output_id = store.insert_command_output(
        command_id=history_id, full_output=stored, output_type="COMPRESSED", compressed=flag)

    assert store.get_history(history_id)["full_output_id"] == output_id
    assert store.get_full_output(history_id) == text
    assert store.get_full_output("missing") is None


def test_recent_history_filters_by_session(tmp_path: Path) -> None:
    store = SQLiteAuditStore(tmp_path / "audit.db")
    _history(store, "one", session="a", timestamp_ms=1000)
    _history(store, "two", session="b", timestamp_ms=2000)
    _history(store, "three", session="a", timestamp_ms=3000)

    assert [r["command"] for r in store.recent_history()] == ["three", "two", "one"]
    assert [r["command"] for r in store.recent_history(session_id="a")] == ["three", "one"]
    assert [r["command"] for r in store.recent_history(limit=1)] == ["three"]


def test_usage_upsert_overwrites(tmp_path: Path) -> None:
    store = SQLiteAuditStore(tmp_path / "audit.db")
    first = UsageStats(command="echo", category="UTILITY").record(
        success=True, execution_time_ms=10, now_ms=1)
    second = first.record(success=False, execution_time_ms=30, now_ms=2)

    store.upsert_command_usage(first)
    store.upsert_command_usage(second)

    rows = store.list_usage()
    assert len(rows) == 1
    assert rows[0]["usage_count"] == 2
    assert rows[0]["success_rate"] == 0.5
    assert rows[0]["average_execution_time"] == 20.0
    assert rows[0]["total_execution_time"] == 40


def test_cleanup_older_than(tmp_path: Path) -> None:
    store = SQLiteAuditStore(tmp_path / "audit.db")
    old_id = _history(store, "old", timestamp_ms=1000)
    _history(store, "new", timestamp_ms=5000)
    store.insert_command_output(
        command_id=old_id, full_output="x" * 300, output_type="TEXT", compressed=False)

    removed = store.cleanup_older_than(2000)

    assert removed == 1
    assert [r["command"] for r in store.recent_history()] == ["new"]
    assert store.get_full_output(old_id) is None
