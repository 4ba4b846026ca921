"""Capture aggregation - filter, sort and enrich captures into period timelines.

Days are selected by local day key equality; weeks and months by inclusive
instant containment (start <= created_at <= end). Output is always sorted
ascending by created_at, whatever the input order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, datetime, tzinfo
from typing import TYPE_CHECKING, NamedTuple

from moodsnap.core import time_windows
from moodsnap.models.capture import Capture
from moodsnap.moods.labels import resolve_mood_label
from moodsnap.types import DaySummary, EnrichedCapture, MonthSummary, WeekSummary

if TYPE_CHECKING:
    from moodsnap.moods.cache import MoodDictionaryCache

logger = logging.getLogger(__name__)


class MoodSample(NamedTuple):
    """Minimal capture view consumed by fallback generation."""
    mood: str
    note: str | None
    captured_at: datetime
    tags: list[str]


class CaptureAggregator:
    """Builds day, week and month timelines from raw captures."""

    def __init__(
        self,
        tz: tzinfo | None = None,
        mood_cache: MoodDictionaryCache | None = None
    ):
        self.tz = tz
        self.mood_cache = mood_cache

    def enrich(self, capture: Capture) -> EnrichedCapture:
        """Attach local time context and a display label to a capture."""
        local = time_windows.to_local(capture.created_at, self.tz)
        return EnrichedCapture(
            capture=capture,
            local_time=local,
            local_time_label=time_windows.local_time_label(local),
            time_bucket=time_windows.time_bucket(local),
            day_part=time_windows.day_part(local),
            mood_label=resolve_mood_label(
                capture.effective_mood_id, capture.mood_name_snapshot, self.mood_cache
            ),
        )

    def _finish(self, captures: Iterable[Capture]) -> list[EnrichedCapture]:
        ordered = sorted(captures, key=lambda c: c.created_at)
        return [self.enrich(c) for c in ordered]

    def for_day(self, day: datetime | date, captures: Iterable[Capture]) -> list[EnrichedCapture]:
        """Captures on the same local calendar day as ``day``."""
        target_key = time_windows.local_day_key(day, self.tz)
        selected = [
            c for c in captures
            if c.include_in_insights is not False
            and time_windows.local_day_key(c.created_at, self.tz) == target_key
        ]
        return self._finish(selected)

    def for_range(
        self,
        start: datetime,
        end: datetime,
        captures: Iterable[Capture]
    ) -> list[EnrichedCapture]:
        """Captures with start <= created_at <= end."""
        selected = [
            c for c in captures
            if c.include_in_insights is not False and start <= c.created_at <= end
        ]
        return self._finish(selected)

    def for_week(self, day: datetime | date, captures: Iterable[Capture]) -> list[EnrichedCapture]:
        """Captures in the Sunday-Saturday week containing ``day``."""
        start, end = time_windows.week_range(day, self.tz)
        return self.for_range(start, end, captures)

    def for_month(
        self,
        day: datetime | date,
        captures: Iterable[Capture],
        through: datetime | None = None
    ) -> list[EnrichedCapture]:
        """Captures in the calendar month containing ``day``, optionally cut off at ``through``."""
        start, end = time_windows.month_range(day, self.tz)
        if through is not None and through < end:
            end = through
        return self.for_range(start, end, captures)

    def build_day_summary(self, day: date, enriched: list[EnrichedCapture]) -> DaySummary:
        """Summarize one day. ``enriched`` must already be limited to that day."""
        primary_moods: list[str] = []
        for capture in enriched:
            if capture.mood_label not in primary_moods:
                primary_moods.append(capture.mood_label)

        return DaySummary(
            date=day,
            date_key=day.isoformat(),
            date_label=time_windows.day_label(day),
            weekday_label=f"{day:%A}",
            primary_moods=primary_moods,
            captures=enriched,
        )

    def _group_days(self, days: list[date], enriched: list[EnrichedCapture]) -> list[DaySummary]:
        by_key: dict[str, list[EnrichedCapture]] = {}
        for capture in enriched:
            by_key.setdefault(capture.local_time.date().isoformat(), []).append(capture)
        return [self.build_day_summary(day, by_key.get(day.isoformat(), [])) for day in days]

    def build_week_summary(self, day: datetime | date, captures: Iterable[Capture]) -> WeekSummary:
        """Seven day summaries, Sunday first, for the week containing ``day``."""
        start, end = time_windows.week_range(day, self.tz)
        enriched = self.for_range(start, end, captures)
        days = time_windows.days_between(start.date(), end.date())
        return WeekSummary(
            week_label=time_windows.week_label(start.date(), end.date()),
            days=self._group_days(days, enriched),
        )

    def build_month_summary(
        self,
        day: datetime | date,
        captures: Iterable[Capture],
        through: datetime | None = None
    ) -> MonthSummary:
        """One day summary per calendar day of the month containing ``day``."""
        start, end = time_windows.month_range(day, self.tz)
        enriched = self.for_month(day, captures, through=through)
        days = time_windows.days_between(start.date(), end.date())
        return MonthSummary(
            month_label=time_windows.month_label(start.date()),
            days=self._group_days(days, enriched),
        )


def to_samples(enriched: Iterable[EnrichedCapture]) -> list[MoodSample]:
    """Reduce enriched captures to (mood name, note, timestamp, tags) samples."""
    return [
        MoodSample(
            mood=capture.mood_label,
            note=capture.note,
            captured_at=capture.created_at,
            tags=list(capture.tags),
        )
        for capture in enriched
    ]
