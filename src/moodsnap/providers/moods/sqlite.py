"""SQLite mood source - system moods plus per-user custom moods"""

import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path

from moodsnap.config import Settings
from moodsnap.moods.labels import CUSTOM_MOOD_PREFIX
from moodsnap.moods.vocabulary import custom_mood_color
from moodsnap.providers.base import MoodSource
from moodsnap.providers.moods.system import system_moods
from moodsnap.providers.resilience import with_retry
from moodsnap.types import MoodEntry

logger = logging.getLogger(__name__)


class SQLiteMoodSource(MoodSource):
    """Custom moods stored in SQLite with soft delete

    Deleted moods stay in the table (deleted_at set) so old captures keep
    their history, but they are never returned by fetch_custom.
    """

    def __init__(self, settings: Settings):
        self.db_path = Path(settings.mood_db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._system = system_moods()
        self._init_db()
        logger.info(f"SQLite mood source initialized: {self.db_path}")

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with row factory"""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self):
        """Initialize database schema"""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS custom_moods (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    color TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    deleted_at TEXT
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_custom_moods_user
                ON custom_moods(user_id)
            """)
            conn.commit()

    def _row_to_entry(self, row: sqlite3.Row) -> MoodEntry:
        return MoodEntry(
            id=row["id"],
            name=row["name"],
            type="custom",
            color=row["color"],
            user_id=row["user_id"],
        )

    @with_retry(
        max_retries=3,
        base_delay=0.05,
        max_delay=1.0,
        exceptions=(sqlite3.OperationalError,),
        operation_name="custom mood write"
    )
    def _execute_write(self, sql: str, params: tuple) -> int:
        """Run one write statement and return the affected row count"""
        with self._get_connection() as conn:
            cursor = conn.execute(sql, params)
            conn.commit()
            return cursor.rowcount

    def fetch_system(self) -> list[MoodEntry]:
        return list(self._system)

    def fetch_custom(self, user_id: str) -> list[MoodEntry]:
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT * FROM custom_moods
                WHERE user_id = ? AND deleted_at IS NULL
                ORDER BY created_at, id
                """,
                (user_id,)
            )
            return [self._row_to_entry(row) for row in cursor.fetchall()]

    def create_custom(self, user_id: str, name: str, color: str | None = None) -> MoodEntry:
        """Create a custom mood

        Raises:
            ValueError: If the name is blank
        """
        name = name.strip()
        if not name:
            raise ValueError("Custom mood name cannot be empty")

        mood_id = f"{CUSTOM_MOOD_PREFIX}{uuid.uuid4()}"
        now = datetime.now(timezone.utc).isoformat()
        color = color or custom_mood_color(name)

        self._execute_write(
            """
            INSERT INTO custom_moods (id, user_id, name, color, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (mood_id, user_id, name, color, now, now)
        )

        logger.info(f"Created custom mood {mood_id} for {user_id}")
        return MoodEntry(id=mood_id, name=name, type="custom", color=color, user_id=user_id)

    def rename_custom(self, user_id: str, mood_id: str, name: str) -> bool:
        """Rename a live custom mood. Past captures keep their name snapshot."""
        name = name.strip()
        if not name:
            raise ValueError("Custom mood name cannot be empty")

        now = datetime.now(timezone.utc).isoformat()
        updated = self._execute_write(
            """
            UPDATE custom_moods SET name = ?, updated_at = ?
            WHERE id = ? AND user_id = ? AND deleted_at IS NULL
            """,
            (name, now, mood_id, user_id)
        )
        return updated > 0

    def delete_custom(self, user_id: str, mood_id: str) -> bool:
        """Soft delete a custom mood"""
        now = datetime.now(timezone.utc).isoformat()
        deleted = self._execute_write(
            """
            UPDATE custom_moods SET deleted_at = ?, updated_at = ?
            WHERE id = ? AND user_id = ? AND deleted_at IS NULL
            """,
            (now, now, mood_id, user_id)
        ) > 0

        if deleted:
            logger.info(f"Soft-deleted custom mood {mood_id} for {user_id}")
        return deleted

    def get_name(self) -> str:
        return "sqlite"
