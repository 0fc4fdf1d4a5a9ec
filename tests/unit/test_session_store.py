"""
Unit tests for memory_bridge/persist/sqlite_store.py

Tests rolling-window persistence: insert, prune, ordered retrieval,
partition isolation, and error mapping.
"""

import sqlite3

import pytest

from memory_bridge.memory.errors import StorageUnavailable, StoreOperationFailed
from memory_bridge.memory.schemas import SessionSummary
from memory_bridge.persist import sqlite_store
from memory_bridge.persist.sqlite_store import SessionStore, query_recent


def session_ids(summaries):
    return [s.session_id for s in summaries]


# ============================================================================
# Open / Schema Tests
# ============================================================================

def test_open_creates_file_and_schema(db_path):
    """Opening creates the directory, file, and indexes."""
    assert not db_path.parent.exists()

    with SessionStore.open(db_path):
        pass

    assert db_path.exists()
    conn = sqlite3.connect(str(db_path))
    indexes = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'index'")}
    conn.close()
    assert {"idx_project", "idx_created"} <= indexes


def test_open_unavailable_storage_raises(tmp_path):
    """An uncreatable location raises StorageUnavailable."""
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("file")

    with pytest.raises(StorageUnavailable) as exc_info:
        SessionStore(blocker / "memory.db")

    assert exc_info.value.path.endswith("memory.db")


def test_close_is_idempotent(db_path):
    """Closing twice is safe."""
    store = SessionStore(db_path)
    store.close()
    store.close()


def test_operations_after_close_fail(db_path, make_summary):
    """Operations on a closed store name the failed operation."""
    store = SessionStore(db_path)
    store.close()

    with pytest.raises(StoreOperationFailed) as exc_info:
        store.insert("/p", "s1", make_summary())

    assert exc_info.value.operation == "insert"


# ============================================================================
# Insert / Query Tests
# ============================================================================

def test_insert_assigns_keys_and_timestamp(store, make_summary):
    """Insert fills session id, project, and created_at."""
    stored = store.insert("/p", "s1", make_summary(decisions=["- Added a", "- Fixed b"]))

    assert stored.session_id == "s1"
    assert stored.project_path == "/p"
    assert stored.created_at is not None

    [loaded] = store.query_recent("/p", 5)
    assert loaded.initial_request == "Fix the login flow"
    assert loaded.decisions == ["- Added a", "- Fixed b"]
    assert loaded.created_at == stored.created_at


def test_insert_does_not_deduplicate(store, make_summary):
    """Repeated session ids are stored as separate rows."""
    store.insert("/p", "same", make_summary())
    store.insert("/p", "same", make_summary())

    assert store.count("/p") == 2


def test_query_newest_first(store, make_summary):
    """Query returns sessions newest first."""
    for i in range(4):
        store.insert("/p", f"s{i}", make_summary())

    results = store.query_recent("/p", 10)

    assert session_ids(results) == ["s3", "s2", "s1", "s0"]
    timestamps = [r.created_at for r in results]
    assert timestamps == sorted(timestamps, reverse=True)


def test_query_respects_limit(store, make_summary):
    """Query returns at most limit sessions."""
    for i in range(4):
        store.insert("/p", f"s{i}", make_summary())

    assert session_ids(store.query_recent("/p", 2)) == ["s3", "s2"]


def test_query_unknown_project_is_empty(store):
    """A project with no sessions returns an empty list."""
    assert store.query_recent("/nowhere", 5) == []


def test_created_at_never_decreases(store, make_summary, monkeypatch):
    """created_at stays monotonic when the clock goes backwards."""
    ticks = [1000.0, 900.0, 1100.0]

    def clock():
        return ticks.pop(0) if len(ticks) > 1 else ticks[0]

    monkeypatch.setattr(sqlite_store.time, "time", clock)

    first = store.insert("/p", "a", make_summary())
    second = store.insert("/p", "b", make_summary())
    third = store.insert("/p", "c", make_summary())

    assert first.created_at == 1000.0
    assert second.created_at == 1000.0
    assert third.created_at == 1100.0
    assert session_ids(store.query_recent("/p", 5)) == ["c", "b", "a"]


# ============================================================================
# Prune Tests
# ============================================================================

def test_scenario_seven_sessions_window_five(store, make_summary):
    """Seven saves with window five keep sessions 3 through 7."""
    for i in range(1, 8):
        store.save("/p", f"#{i}", make_summary(), window_size=5)

    assert session_ids(store.query_recent("/p", 10)) == ["#7", "#6", "#5", "#4", "#3"]


def test_window_holds_min_of_inserts_and_n(store, make_summary):
    """Each save leaves min(inserts, window) newest sessions."""
    window = 3
    for i in range(1, 8):
        store.save("/p", f"s{i}", make_summary(), window_size=window)

        expected = [f"s{j}" for j in range(i, max(0, i - window), -1)]
        assert store.count("/p") == min(i, window)
        assert session_ids(store.query_recent("/p", 10)) == expected


def test_prune_is_idempotent(store, make_summary):
    """Pruning twice leaves the same survivors."""
    for i in range(6):
        store.insert("/p", f"s{i}", make_summary())

    assert store.prune("/p", 2) == 4
    survivors = session_ids(store.query_recent("/p", 10))

    assert store.prune("/p", 2) == 0
    assert session_ids(store.query_recent("/p", 10)) == survivors == ["s5", "s4"]


def test_prune_ties_keep_later_insert(store, make_summary, monkeypatch):
    """On equal timestamps the earlier row is evicted."""
    monkeypatch.setattr(sqlite_store.time, "time", lambda: 5000.0)

    for i in range(3):
        store.insert("/p", f"s{i}", make_summary())
    store.prune("/p", 1)

    assert session_ids(store.query_recent("/p", 5)) == ["s2"]


def test_prune_zero_window_empties_partition(store, make_summary):
    """A zero window removes every session of the project."""
    store.insert("/p", "s1", make_summary())

    store.prune("/p", 0)

    assert store.count("/p") == 0


def test_partitions_are_isolated(store, make_summary):
    """Saving and pruning one project never touches another."""
    for i in range(3):
        store.save("/b", f"b{i}", make_summary(), window_size=5)
    before = store.query_recent("/b", 10)

    for i in range(8):
        store.save("/a", f"a{i}", make_summary(), window_size=2)
    store.prune("/a", 1)

    assert store.query_recent("/b", 10) == before
    assert store.count("/a") == 1
    assert store.count() == 4


def test_save_rolls_back_on_failure(store, make_summary, monkeypatch):
    """A failed prune rolls back the insert of the same save."""
    store.insert("/p", "kept", make_summary())

    def failing_prune(conn, project_path, window_size):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(store, "_prune", failing_prune)

    with pytest.raises(StoreOperationFailed) as exc_info:
        store.save("/p", "lost", make_summary(), window_size=5)

    assert exc_info.value.operation == "save"
    assert session_ids(store.query_recent("/p", 5)) == ["kept"]


class CommitFailingConnection:
    """Delegates to a real connection but fails every COMMIT."""

    def __init__(self, conn):
        self.conn = conn

    def execute(self, sql, *args):
        if sql == "COMMIT":
            raise sqlite3.OperationalError("database or disk is full")
        return self.conn.execute(sql, *args)

    def close(self):
        self.conn.close()


def test_failed_commit_reports_operation_and_rolls_back(store, make_summary):
    """A COMMIT error surfaces as StoreOperationFailed and leaves prior rows intact."""
    store.insert("/p", "kept", make_summary())
    real_conn = store._conn
    store._conn = CommitFailingConnection(real_conn)

    with pytest.raises(StoreOperationFailed) as exc_info:
        store.save("/p", "lost", make_summary(), window_size=1)

    store._conn = real_conn
    assert exc_info.value.operation == "save"
    assert isinstance(exc_info.value.cause, sqlite3.OperationalError)
    assert session_ids(store.query_recent("/p", 5)) == ["kept"]


# ============================================================================
# Persistence / Error Tests
# ============================================================================

def test_persistence_after_reopen(db_path, make_summary):
    """Sessions survive closing and reopening the store."""
    with SessionStore(db_path) as store1:
        store1.save("/p", "s1", make_summary(), window_size=5)

    with SessionStore(db_path) as store2:
        assert session_ids(store2.query_recent("/p", 5)) == ["s1"]


def test_corrupt_row_reports_query_failure(store, db_path):
    """Corrupt rows surface as StoreOperationFailed on query."""
    conn = sqlite3.connect(str(db_path))
    conn.execute(
        "INSERT INTO sessions (session_id, project_path, summary, key_decisions, created_at) "
        "VALUES (?, ?, ?, ?, ?)",
        ("bad", "/p", "request", "{not json", 1.0)
    )
    conn.commit()
    conn.close()

    with pytest.raises(StoreOperationFailed) as exc_info:
        store.query_recent("/p", 5)

    assert exc_info.value.operation == "query"


def test_stored_records_respect_bounds(store):
    """Stored records keep request and decision bounds."""
    summary = SessionSummary(initial_request="y" * 900, decisions=[f"- Added {i}" for i in range(25)])

    store.insert("/p", "s1", summary)
    [loaded] = store.query_recent("/p", 1)

    assert len(loaded.initial_request) == 500
    assert len(loaded.decisions) == 10


def test_stats_per_project(store, make_summary):
    """Stats report counts and time range per project."""
    store.insert("/a", "a1", make_summary())
    store.insert("/a", "a2", make_summary())
    store.insert("/b", "b1", make_summary())

    stats = {row["project_path"]: row for row in store.stats()}

    assert stats["/a"]["count"] == 2
    assert stats["/b"]["count"] == 1
    assert stats["/a"]["oldest_ts"] <= stats["/a"]["newest_ts"]


def test_query_recent_missing_file_does_not_create_it(db_path):
    """Read helper on a missing file returns empty without creating it."""
    assert query_recent(db_path, "/p", 5) == []
    assert not db_path.exists()
    assert not db_path.parent.exists()
