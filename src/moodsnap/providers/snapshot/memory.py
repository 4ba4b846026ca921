"""In-memory snapshot store for tests and ephemeral runs"""

import copy
import logging
import threading
from datetime import date, datetime, timezone
from typing import Any

from moodsnap.config import Settings
from moodsnap.providers.base import SnapshotStoreProvider
from moodsnap.types import InsightSnapshot, InsightType

logger = logging.getLogger(__name__)

SnapshotKey = tuple[str, InsightType, date]


class InMemorySnapshotStore(SnapshotStoreProvider):
    """Dict-backed store; a lock stands in for the unique constraint"""

    def __init__(self, settings: Settings | None = None):
        self._rows: dict[SnapshotKey, InsightSnapshot] = {}
        self._lock = threading.Lock()

    def fetch(
        self,
        user_id: str,
        insight_type: InsightType,
        start_date: date
    ) -> InsightSnapshot | None:
        with self._lock:
            row = self._rows.get((user_id, InsightType(insight_type), start_date))
            return copy.deepcopy(row) if row else None

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
        key = (user_id, InsightType(insight_type), start_date)
        now = datetime.now(timezone.utc).isoformat()

        with self._lock:
            existing = self._rows.get(key)
            if existing is not None and not force:
                return copy.deepcopy(existing)

            self._rows[key] = InsightSnapshot(
                user_id=user_id,
                type=key[1],
                start_date=start_date,
                end_date=end_date,
                content=content,
                mood_summary=copy.deepcopy(mood_summary),
                capture_ids=list(capture_ids),
                created_at=existing.created_at if existing else now,
                updated_at=now,
            )
            return copy.deepcopy(self._rows[key])

    def list_snapshots(
        self,
        user_id: str,
        insight_type: InsightType | None = None,
        limit: int = 50
    ) -> list[InsightSnapshot]:
        with self._lock:
            rows = [
                row for (owner, kind, _), row in self._rows.items()
                if owner == user_id and (insight_type is None or kind == InsightType(insight_type))
            ]
        rows.sort(key=lambda row: row.start_date, reverse=True)
        return [copy.deepcopy(row) for row in rows[:limit]]

    def count(self) -> int:
        with self._lock:
            return len(self._rows)

    def get_name(self) -> str:
        return "memory"
