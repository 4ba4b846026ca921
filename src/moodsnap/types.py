"""Type definitions shared across the insight engine."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Literal

from moodsnap.models.capture import Capture


class InsightType(str, Enum):
    """Kinds of persisted insight snapshots."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CHALLENGE = "challenge"


class TimeBucket(str, Enum):
    """Coarse time-of-day grouping. Canonical bucketing scheme."""
    EARLY = "early"
    MIDDAY = "midday"
    LATE = "late"


class DayPart(str, Enum):
    """Fine-grained day part, used as prompt context only."""
    LATE_NIGHT = "Late night"
    MORNING = "Morning"
    MIDDAY = "Midday"
    EVENING = "Evening"
    NIGHT = "Night"


class MomentumShift(str, Enum):
    """Direction of the last seven days relative to the earlier part of the window."""
    FOCUSED = "focused"
    INTENSE = "intense"
    STABLE = "stable"
    LOWER = "lower"


@dataclass(frozen=True)
class MoodEntry:
    """Mood dictionary entry (system or custom)."""
    id: str
    name: str
    type: Literal["system", "custom"]
    color: str
    user_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class EnrichedCapture:
    """Capture plus the local time context used by insight pipelines."""
    capture: Capture
    local_time: datetime
    local_time_label: str
    time_bucket: TimeBucket
    day_part: DayPart
    mood_label: str

    @property
    def id(self) -> str:
        return self.capture.id

    @property
    def created_at(self) -> datetime:
        return self.capture.created_at

    @property
    def mood_id(self) -> str:
        return self.capture.effective_mood_id

    @property
    def note(self) -> str | None:
        return self.capture.note

    @property
    def tags(self) -> list[str]:
        return self.capture.tags


@dataclass
class DaySummary:
    """One local calendar day of captures."""
    date: date
    date_key: str  # "2025-11-29"
    date_label: str  # "Saturday, Nov 29"
    weekday_label: str  # "Saturday"
    primary_moods: list[str]
    captures: list[EnrichedCapture]


@dataclass
class WeekSummary:
    """Sunday-to-Saturday week, always seven days, oldest first."""
    week_label: str
    days: list[DaySummary]

    @property
    def captures(self) -> list[EnrichedCapture]:
        return [c for day in self.days for c in day.captures]


@dataclass
class MonthSummary:
    """Every day of a calendar month, oldest first."""
    month_label: str  # "November 2025"
    days: list[DaySummary]

    @property
    def captures(self) -> list[EnrichedCapture]:
        return [c for day in self.days for c in day.captures]


@dataclass
class EnergyMix:
    """Raw capture counts per energy category."""
    high: int = 0
    medium: int = 0
    low: int = 0

    @property
    def total(self) -> int:
        return self.high + self.medium + self.low

    def percentages(self) -> dict[str, int]:
        """Rounded percentages for display. Computation uses the raw counts."""
        if self.total == 0:
            return {"high": 0, "medium": 0, "low": 0}
        return {
            "high": round_half_up(self.high / self.total * 100),
            "medium": round_half_up(self.medium / self.total * 100),
            "low": round_half_up(self.low / self.total * 100),
        }


@dataclass
class MonthSignals:
    """Deterministic statistics over a capture window."""
    mood_counts: dict[str, int]
    dominant_mood_id: str
    dominant_mood: str
    runner_up_mood_id: str | None
    runner_up_mood: str | None
    volatility_score: float
    active_days: int
    total_captures: int
    last_7_days_shift: MomentumShift
    energy: EnergyMix = field(default_factory=EnergyMix)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe dict for snapshot metadata."""
        result = asdict(self)
        result["last_7_days_shift"] = self.last_7_days_shift.value
        return result


@dataclass
class MoodFlowSegment:
    """One percentage-weighted slice of a period's mood flow."""
    mood: str  # descriptive phrase, never the raw mood label
    percentage: float
    color: str  # "#RRGGBB"
    context: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "mood": self.mood,
            "percentage": self.percentage,
            "color": self.color,
        }
        if self.context:
            result["context"] = self.context
        return result


@dataclass
class InsightSnapshot:
    """Persisted insight for one user and one period."""
    user_id: str
    type: InsightType
    start_date: date
    end_date: date
    content: str
    mood_summary: dict[str, Any]
    capture_ids: list[str]
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API responses."""
        return {
            "user_id": self.user_id,
            "type": self.type.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "content": self.content,
            "mood_summary": self.mood_summary,
            "capture_ids": list(self.capture_ids),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class InsightOutcome:
    """Result of an ensure-insight run.

    Status:
        cached: existing snapshot returned without generation
        generated: collaborator output passed validation and was stored
        fallback: deterministic output was stored (in whole or in part)
        ineligible: not enough data yet, nothing stored
        empty: no qualifying captures, nothing stored
        disabled: automatic insights are switched off, nothing stored
    """
    status: Literal["cached", "generated", "fallback", "ineligible", "empty", "disabled"]
    snapshot: InsightSnapshot | None = None
    reason: str | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def has_snapshot(self) -> bool:
        return self.snapshot is not None


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)
