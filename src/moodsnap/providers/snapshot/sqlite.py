"""SQLite snapshot store - one durable insight per user, type and period"""

import json
import logging
import sqlite3
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from moodsnap.config import Settings
from moodsnap.providers.base import SnapshotStoreProvider
from moodsnap.providers.resilience import retry_call
from moodsnap.types import InsightSnapshot, InsightType

logger = logging.getLogger(__name__)


class SQLiteSnapshotStore(SnapshotStoreProvider):
    """SQLite-based snapshot store

    Uniqueness of (user_id, type, start_date) is a table constraint, so
    concurrent writers from several processes converge on one row.
    """

    def __init__(self, settings: Settings):
        self.db_path = Path(settings.snapshot_db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.write_retries = settings.sqlite_write_retries
        self._init_db()
        logger.info(f"SQLite snapshot store initialized: {self.db_path}")

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with row factory"""
        conn = sqlite3.connect(str(self.db_path), timeout=5.0)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self):
        """Initialize database schema"""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS insight_snapshots (
                    user_id TEXT NOT NULL,
                    type TEXT NOT NULL,
                    start_date TEXT NOT NULL,
                    end_date TEXT NOT NULL,
                    content TEXT NOT NULL DEFAULT '',
                    mood_summary TEXT NOT NULL DEFAULT '{}',
                    capture_ids TEXT NOT NULL DEFAULT '[]',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    UNIQUE (user_id, type, start_date)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_snapshots_user_type
                ON insight_snapshots(user_id, type, start_date DESC)
            """)
            conn.commit()

    def _row_to_snapshot(self, row: sqlite3.Row) -> InsightSnapshot:
        """Convert a database row to a snapshot"""
        return InsightSnapshot(
            user_id=row["user_id"],
            type=InsightType(row["type"]),
            start_date=date.fromisoformat(row["start_date"]),
            end_date=date.fromisoformat(row["end_date"]),
            content=row["content"],
            mood_summary=json.loads(row["mood_summary"]) if row["mood_summary"] else {},
            capture_ids=json.loads(row["capture_ids"]) if row["capture_ids"] else [],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def fetch(
        self,
        user_id: str,
        insight_type: InsightType,
        start_date: date
    ) -> InsightSnapshot | None:
        """Get the snapshot for one period"""
        with self._get_connection() as conn:
            cursor = conn.execute(
                "SELECT * FROM insight_snapshots WHERE user_id = ? AND type = ? AND start_date = ?",
                (user_id, InsightType(insight_type).value, start_date.isoformat())
            )
            row = cursor.fetchone()
            return self._row_to_snapshot(row) if row else None

    def _write(
        self,
        params: tuple,
        force: bool
    ) -> None:
        if force:
            sql = """
                INSERT INTO insight_snapshots
                    (user_id, type, start_date, end_date, content, mood_summary, capture_ids, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (user_id, type, start_date) DO UPDATE SET
                    end_date = excluded.end_date,
                    content = excluded.content,
                    mood_summary = excluded.mood_summary,
                    capture_ids = excluded.capture_ids,
                    updated_at = excluded.updated_at
            """
        else:
            sql = """
                INSERT INTO insight_snapshots
                    (user_id, type, start_date, end_date, content, mood_summary, capture_ids, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (user_id, type, start_date) DO NOTHING
            """
        with self._get_connection() as conn:
            conn.execute(sql, params)
            conn.commit()

    def upsert(
        self,
        user_id: str,
        insight_type: InsightType,
        start_date: date,
        end_date: date,
        content: str,
        mood_summary: dict[str, Any],
        capture_ids: list[str],
        force: bool = False
    ) -> InsightSnapshot:
        """Insert a snapshot, or replace it when forced

        Without force an existing row is left untouched and returned.
        """
        insight_type = InsightType(insight_type)
        now = datetime.now(timezone.utc).isoformat()
        params = (
            user_id,
            insight_type.value,
            start_date.isoformat(),
            end_date.isoformat(),
            content,
            json.dumps(mood_summary),
            json.dumps(list(capture_ids)),
            now,
            now,
        )

        retry_call(
            self._write,
            params,
            force,
            max_retries=self.write_retries,
            base_delay=0.05,
            max_delay=1.0,
            exceptions=(sqlite3.OperationalError,),
            operation_name="snapshot upsert",
        )

        snapshot = self.fetch(user_id, insight_type, start_date)
        if snapshot is None:
            raise RuntimeError(
                f"Snapshot missing after upsert: {user_id}/{insight_type.value}/{start_date}"
            )

        action = "Replaced" if force else "Stored"
        logger.info(f"{action} {insight_type.value} snapshot for {user_id} starting {start_date}")
        return snapshot

    def list_snapshots(
        self,
        user_id: str,
        insight_type: InsightType | None = None,
        limit: int = 50
    ) -> list[InsightSnapshot]:
        """List snapshots, newest period first"""
        with self._get_connection() as conn:
            if insight_type is None:
                cursor = conn.execute(
                    """
                    SELECT * FROM insight_snapshots WHERE user_id = ?
                    ORDER BY start_date DESC, type LIMIT ?
                    """,
                    (user_id, limit)
                )
            else:
                cursor = conn.execute(
                    """
                    SELECT * FROM insight_snapshots WHERE user_id = ? AND type = ?
                    ORDER BY start_date DESC LIMIT ?
                    """,
                    (user_id, InsightType(insight_type).value, limit)
                )
            return [self._row_to_snapshot(row) for row in cursor.fetchall()]

    def get_name(self) -> str:
        return "sqlite"
