"""Insight engine - composition root wiring settings, providers, cache and orchestrator"""

import logging
import threading
from collections.abc import Iterable
from datetime import date, datetime
from typing import Any

from moodsnap.config import Settings
from moodsnap.config import settings as default_settings
from moodsnap.core import time_windows
from moodsnap.core.orchestrator import InsightOrchestrator
from moodsnap.core.signals import SignalComputer, month_phrase, month_reasoning
from moodsnap.models.capture import Capture
from moodsnap.moods.cache import MoodDictionaryCache
from moodsnap.providers import (
    GenerationProviderFactory,
    MoodSourceFactory,
    SnapshotStoreProviderFactory,
)
from moodsnap.providers.base import GenerationProvider, MoodSource, SnapshotStoreProvider
from moodsnap.types import InsightOutcome, InsightSnapshot, InsightType, MoodEntry

logger = logging.getLogger(__name__)


class InsightEngine:
    """Owns one instance of every shared component

    Providers are created lazily from settings unless passed in, so tests
    can inject mocks without touching entry points.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        store: SnapshotStoreProvider | None = None,
        provider: GenerationProvider | None = None,
        mood_source: MoodSource | None = None
    ):
        self.settings = settings or default_settings
        self._store = store
        self._provider = provider
        self._mood_source = mood_source
        self._mood_cache: MoodDictionaryCache | None = None
        self._orchestrator: InsightOrchestrator | None = None
        self.tz = time_windows.resolve_timezone(self.settings.timezone)

    @property
    def store(self) -> SnapshotStoreProvider:
        if self._store is None:
            self._store = SnapshotStoreProviderFactory.create(self.settings)
        return self._store

    @property
    def provider(self) -> GenerationProvider:
        if self._provider is None:
            self._provider = GenerationProviderFactory.create(self.settings)
        return self._provider

    @property
    def mood_source(self) -> MoodSource:
        if self._mood_source is None:
            self._mood_source = MoodSourceFactory.create(self.settings)
        return self._mood_source

    @property
    def mood_cache(self) -> MoodDictionaryCache:
        if self._mood_cache is None:
            self._mood_cache = MoodDictionaryCache(
                self.mood_source,
                ttl_seconds=self.settings.mood_cache_ttl_seconds,
            )
        return self._mood_cache

    @property
    def orchestrator(self) -> InsightOrchestrator:
        if self._orchestrator is None:
            self._orchestrator = InsightOrchestrator(
                store=self.store,
                provider=self.provider,
                mood_cache=self.mood_cache,
                settings=self.settings,
                tz=self.tz,
            )
        return self._orchestrator

    async def ensure_insight(
        self,
        insight_type: InsightType | str,
        user_id: str,
        day: datetime | date,
        captures: Iterable[Capture],
        force: bool = False,
        challenge_title: str | None = None
    ) -> InsightOutcome:
        """Ensure a snapshot exists for the period of ``insight_type`` containing ``day``"""
        return await self.orchestrator.ensure(
            insight_type,
            user_id,
            day,
            captures,
            force=force,
            challenge_title=challenge_title,
        )

    def get_snapshot(
        self,
        user_id: str,
        insight_type: InsightType | str,
        day: datetime | date
    ) -> InsightSnapshot | None:
        """Fast-load the snapshot for the period containing ``day`` without generating"""
        insight_type = InsightType(insight_type)
        return self.store.fetch(user_id, insight_type, self.period_start(insight_type, day))

    def list_snapshots(
        self,
        user_id: str,
        insight_type: InsightType | str | None = None,
        limit: int = 50
    ) -> list[InsightSnapshot]:
        kind = InsightType(insight_type) if insight_type else None
        return self.store.list_snapshots(user_id, kind, limit)

    def period_start(self, insight_type: InsightType, day: datetime | date) -> date:
        """Start date used as the snapshot key for a period"""
        if insight_type == InsightType.WEEKLY:
            return time_windows.week_range(day, self.tz)[0].date()
        if insight_type == InsightType.MONTHLY:
            return time_windows.month_range(day, self.tz)[0].date()
        return time_windows.local_date(day, self.tz)

    def compute_month_signals(
        self,
        captures: Iterable[Capture],
        as_of: datetime,
        user_id: str | None = None
    ) -> dict[str, Any]:
        """Signals, phrase and reasoning for the month containing ``as_of``"""
        self.mood_cache.ensure_fresh(user_id)
        as_of = time_windows.assume_utc(as_of)
        start, _ = time_windows.month_range(as_of, self.tz)
        window = [
            c for c in captures
            if c.include_in_insights is not False and start <= c.created_at <= as_of
        ]
        signals = SignalComputer(tz=self.tz, mood_cache=self.mood_cache).compute(window, as_of)
        phrase = month_phrase(signals.mood_counts)
        return {
            "signals": signals.to_dict(),
            "energy_percentages": signals.energy.percentages(),
            "phrase": phrase,
            "reasoning": month_reasoning(phrase, signals, self.mood_cache),
        }

    def get_moods(self, user_id: str | None = None) -> list[MoodEntry]:
        """Current mood dictionary for a user, refreshed when stale"""
        self.mood_cache.ensure_fresh(user_id)
        return self.mood_cache.get_all()

    def invalidate_moods(self) -> None:
        """Mark the mood dictionary stale, e.g. after a custom mood changes"""
        self.mood_cache.invalidate()

    def get_providers_info(self) -> dict[str, Any]:
        """Get information about active providers"""
        return {
            "generation_provider": self.provider.get_name(),
            "generation_model": self.provider.get_default_model(),
            "snapshot_store": self.store.get_name(),
            "mood_source": self.mood_source.get_name(),
            "mood_cache_state": self.mood_cache.state.value,
        }


# Global engine instance
_engine: InsightEngine | None = None
_engine_lock = threading.Lock()


def get_engine() -> InsightEngine:
    """Get or create the engine instance (thread-safe)"""
    global _engine
    if _engine is None:
        with _engine_lock:
            # Double-check after acquiring lock
            if _engine is None:
                _engine = InsightEngine()
    return _engine


def reset_engine() -> None:
    """Drop the global engine. For testing purposes only."""
    global _engine
    with _engine_lock:
        _engine = None
