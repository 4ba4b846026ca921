"""Mood dictionary cache - TTL-based, single-flight read-through cache of mood entries.

State machine (per instance):
    UNINITIALIZED -> LOADING -> READY
    READY -> STALE once the TTL has elapsed (stale entries are still served)

The cache holds entries for exactly one identity at a time. A fetch replaces
the whole map; entries are never merged across fetches or identities.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from moodsnap.providers.base import MoodSource
    from moodsnap.types import MoodEntry

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


class CacheState(Enum):
    """Mood cache lifecycle states."""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    STALE = "stale"


class MoodDictionaryCache:
    """Read-through cache over a MoodSource.

    Concurrent fetch_all() calls for the same identity share one in-flight
    load (single-flight). Lookups never trigger a fetch and never block on one.
    """

    def __init__(
        self,
        source: MoodSource,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time
    ):
        self.source = source
        self.ttl_seconds = ttl_seconds
        self._clock = clock

        self._entries: dict[str, MoodEntry] = {}
        self._user_id: str | None = None
        self._last_fetched: float = 0.0
        self._initialized = False

        # Single-flight bookkeeping
        self._lock = threading.Lock()
        self._inflight: Future | None = None
        self._inflight_user: str | None = None

    def fetch_all(self, user_id: str | None = None) -> None:
        """Load system moods plus the user's custom moods.

        If a load for the same identity is already running, wait for it instead
        of starting another. A load for a different identity waits for the
        running one to finish and then performs its own.

        Source failures are logged and leave the previous entries in place.
        """
        while True:
            with self._lock:
                inflight = self._inflight
                if inflight is None:
                    future: Future = Future()
                    self._inflight = future
                    self._inflight_user = user_id
                    break
                joinable = self._inflight_user == user_id

            inflight.result()
            if joinable:
                logger.debug(f"Joined in-flight mood fetch (user: {user_id or 'guest'})")
                return

        try:
            self._load(user_id)
        finally:
            with self._lock:
                self._inflight = None
                self._inflight_user = None
            future.set_result(None)

    def _load(self, user_id: str | None) -> None:
        try:
            system_moods = self.source.fetch_system()
        except Exception as e:
            logger.error(f"Failed to fetch system moods, keeping cached entries: {e}", exc_info=True)
            return

        entries = {mood.id: mood for mood in system_moods}

        if user_id:
            try:
                custom_moods = self.source.fetch_custom(user_id)
            except Exception as e:
                logger.error(f"Failed to fetch custom moods for {user_id}: {e}", exc_info=True)
            else:
                entries.update((mood.id, mood) for mood in custom_moods)

        with self._lock:
            self._entries = entries
            self._user_id = user_id
            self._last_fetched = self._clock()
            self._initialized = True

        logger.info(
            f"Loaded {len(entries)} moods (user: {'authenticated' if user_id else 'guest'})"
        )

    def ensure_fresh(self, user_id: str | None = None) -> None:
        """Fetch when uninitialized, stale, or bound to a different identity."""
        if not self._initialized or self.is_stale() or self._user_id != user_id:
            self.fetch_all(user_id)

    def get_by_id(self, mood_id: str) -> MoodEntry | None:
        """Look up a mood in the current map. Never fetches."""
        return self._entries.get(mood_id)

    def get_all(self) -> list[MoodEntry]:
        return list(self._entries.values())

    def is_stale(self) -> bool:
        return self._clock() - self._last_fetched > self.ttl_seconds

    def is_loading(self) -> bool:
        return self._inflight is not None

    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def current_user_id(self) -> str | None:
        return self._user_id

    @property
    def state(self) -> CacheState:
        if self.is_loading():
            return CacheState.LOADING
        if not self._initialized:
            return CacheState.UNINITIALIZED
        if self.is_stale():
            return CacheState.STALE
        return CacheState.READY

    def invalidate(self) -> None:
        """Mark the cache stale. Entries stay servable until the next fetch."""
        self._last_fetched = 0.0
        logger.info("Mood cache invalidated")
