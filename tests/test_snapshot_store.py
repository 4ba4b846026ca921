"""Tests for snapshot stores (SQLite and in-memory)"""

import sqlite3
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from unittest.mock import patch

import pytest

from moodsnap.config import Settings
from moodsnap.providers.snapshot.memory import InMemorySnapshotStore
from moodsnap.providers.snapshot.sqlite import SQLiteSnapshotStore
from moodsnap.types import InsightType

START = date(2025, 2, 3)


@pytest.fixture(params=["sqlite", "memory"])
def store(request, tmp_path):
    """Each test runs against both stores"""
    if request.param == "sqlite":
        return SQLiteSnapshotStore(Settings(snapshot_db_path=str(tmp_path / "db" / "snapshots.db")))
    return InMemorySnapshotStore()


def write(store, content, insight_type=InsightType.DAILY, start=START, force=False, **kwargs):
    return store.upsert(
        "alice",
        insight_type,
        start,
        kwargs.pop("end", start),
        content,
        kwargs.pop("mood_summary", {"mood_flow": [], "meta": {"source": {"content": "fallback"}}}),
        kwargs.pop("capture_ids", ["c1", "c2"]),
        force=force,
    )


class TestFetchAndUpsert:
    """Point lookups and conditional writes"""

    def test_missing_snapshot(self, store):
        assert store.fetch("alice", InsightType.DAILY, START) is None

    def test_upsert_then_fetch(self, store):
        stored = write(store, "First take.")
        fetched = store.fetch("alice", InsightType.DAILY, START)

        assert fetched == stored
        assert fetched.content == "First take."
        assert fetched.capture_ids == ["c1", "c2"]
        assert fetched.mood_summary["meta"]["source"]["content"] == "fallback"
        assert fetched.type == InsightType.DAILY
        assert fetched.start_date == START

    def test_repeated_non_forced_upserts_keep_first(self, store):
        first = write(store, "First take.")
        second = write(store, "Second take.")
        third = write(store, "Third take.")

        assert second.content == "First take."
        assert third.content == "First take."
        assert second.created_at == first.created_at
        assert len(store.list_snapshots("alice")) == 1

    def test_forced_upsert_replaces_content_and_keeps_created_at(self, store):
        first = write(store, "First take.")
        replaced = write(store, "Regenerated.", force=True, capture_ids=["c1", "c2", "c3"])

        assert replaced.content == "Regenerated."
        assert replaced.capture_ids == ["c1", "c2", "c3"]
        assert replaced.created_at == first.created_at
        assert replaced.updated_at >= first.updated_at
        assert len(store.list_snapshots("alice")) == 1

    def test_forced_upsert_on_empty_period_inserts(self, store):
        stored = write(store, "Fresh.", force=True)
        assert stored.content == "Fresh."

    def test_key_includes_type_and_user(self, store):
        write(store, "Daily.", InsightType.DAILY)
        write(store, "Weekly.", InsightType.WEEKLY, end=date(2025, 2, 8))
        store.upsert("bob", InsightType.DAILY, START, START, "Bob's day.", {}, [])

        assert store.fetch("alice", InsightType.DAILY, START).content == "Daily."
        assert store.fetch("alice", InsightType.WEEKLY, START).content == "Weekly."
        assert store.fetch("bob", InsightType.DAILY, START).content == "Bob's day."

    def test_concurrent_upserts_converge_on_one_row(self, store):
        workers = 8
        barrier = threading.Barrier(workers)

        def race(i):
            barrier.wait()
            return write(store, f"Take {i}.")

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(race, range(workers)))

        stored = store.fetch("alice", InsightType.DAILY, START)
        assert len(store.list_snapshots("alice")) == 1
        assert {r.content for r in results} == {stored.content}


class TestListSnapshots:
    """Archive listing"""

    def test_newest_period_first(self, store):
        write(store, "Jan.", InsightType.MONTHLY, start=date(2025, 1, 1), end=date(2025, 1, 31))
        write(store, "Mar.", InsightType.MONTHLY, start=date(2025, 3, 1), end=date(2025, 3, 31))
        write(store, "Feb.", InsightType.MONTHLY, start=date(2025, 2, 1), end=date(2025, 2, 28))

        rows = store.list_snapshots("alice", InsightType.MONTHLY)
        assert [r.content for r in rows] == ["Mar.", "Feb.", "Jan."]

    def test_type_filter_and_limit(self, store):
        for day in (1, 2, 3):
            write(store, f"Day {day}.", start=date(2025, 2, day))
        write(store, "Week.", InsightType.WEEKLY, start=date(2025, 2, 2), end=date(2025, 2, 8))

        assert len(store.list_snapshots("alice", InsightType.DAILY)) == 3
        assert len(store.list_snapshots("alice")) == 4
        limited = store.list_snapshots("alice", InsightType.DAILY, limit=2)
        assert [r.content for r in limited] == ["Day 3.", "Day 2."]

    def test_other_users_hidden(self, store):
        write(store, "Mine.")
        assert store.list_snapshots("bob") == []


class TestSQLiteSpecifics:
    """Durability and retry behavior of the SQLite store"""

    def test_persists_across_instances(self, tmp_path):
        settings = Settings(snapshot_db_path=str(tmp_path / "snapshots.db"))
        write(SQLiteSnapshotStore(settings), "Durable.")

        reopened = SQLiteSnapshotStore(settings)
        assert reopened.fetch("alice", InsightType.DAILY, START).content == "Durable."

    def test_unique_constraint_in_schema(self, tmp_path):
        settings = Settings(snapshot_db_path=str(tmp_path / "snapshots.db"))
        store = SQLiteSnapshotStore(settings)
        write(store, "Only one.")

        with sqlite3.connect(settings.snapshot_db_path) as conn:
            with pytest.raises(sqlite3.IntegrityError):
                conn.execute(
                    "INSERT INTO insight_snapshots (user_id, type, start_date, end_date, created_at, updated_at) "
                    "VALUES ('alice', 'daily', '2025-02-03', '2025-02-03', 'x', 'x')"
                )

    def test_locked_database_is_retried(self, tmp_path):
        store = SQLiteSnapshotStore(Settings(snapshot_db_path=str(tmp_path / "snapshots.db")))
        real_write = store._write
        calls = []

        def flaky_write(params, force):
            calls.append(force)
            if len(calls) == 1:
                raise sqlite3.OperationalError("database is locked")
            return real_write(params, force)

        with patch.object(store, "_write", side_effect=flaky_write):
            stored = write(store, "After retry.")

        assert stored.content == "After retry."
        assert len(calls) == 2
