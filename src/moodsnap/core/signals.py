"""Signal computation - deterministic statistics over a capture window.

Signals are a pure function of (captures, as_of). They are recomputed on
demand and only ever persisted inside a snapshot's metadata.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from datetime import datetime, timedelta, tzinfo
from functools import reduce
from typing import TYPE_CHECKING

from moodsnap.core import time_windows
from moodsnap.models.capture import DEFAULT_MOOD_ID, Capture
from moodsnap.moods.labels import resolve_mood_label
from moodsnap.moods.vocabulary import HIGH_ENERGY_MOODS, MOOD_LABELS, energy_category
from moodsnap.types import EnergyMix, MomentumShift, MonthSignals, round_half_up

if TYPE_CHECKING:
    from moodsnap.moods.cache import MoodDictionaryCache

logger = logging.getLogger(__name__)

MOMENTUM_WINDOW = timedelta(days=7)
MOMENTUM_THRESHOLD = 0.2
TOP_MOODS_IN_REASONING = 4


def day_dominant_mood(mood_ids: list[str]) -> str:
    """Dominant mood of a single day.

    Left fold keeping ``a`` whenever count[a] >= count[b]. On an exact tie the
    mood seen first in the day wins, so the result depends on capture order.
    """
    counts = Counter(mood_ids)
    return reduce(lambda a, b: a if counts[a] >= counts[b] else b, mood_ids)


def volatility_score(day_moods: dict[str, list[str]]) -> float:
    """Fraction of consecutive active days whose dominant mood changed.

    Args:
        day_moods: Local day key -> mood IDs in chronological order

    Returns:
        transitions / (days - 1), or 0.0 for fewer than two days
    """
    days = sorted(day_moods)
    if len(days) < 2:
        return 0.0

    dominants = [day_dominant_mood(day_moods[key]) for key in days]
    transitions = sum(1 for prev, cur in zip(dominants, dominants[1:]) if prev != cur)
    return transitions / max(1, len(days) - 1)


def energy_mix(mood_counts: dict[str, int]) -> EnergyMix:
    """Partition raw mood counts into high, medium and low energy."""
    mix = EnergyMix()
    for mood_id, count in mood_counts.items():
        category = energy_category(mood_id)
        if category == "high":
            mix.high += count
        elif category == "low":
            mix.low += count
        else:
            mix.medium += count
    return mix


def _high_energy_ratio(captures: list[Capture]) -> float:
    high = sum(1 for c in captures if c.mood_id in HIGH_ENERGY_MOODS)
    return high / len(captures)


def momentum_shift(
    captures: list[Capture],
    as_of: datetime,
    dominant_mood_id: str
) -> MomentumShift:
    """Compare the last seven days against the rest of the window."""
    cutoff = as_of - MOMENTUM_WINDOW
    recent = [c for c in captures if c.created_at >= cutoff]
    early = [c for c in captures if c.created_at < cutoff]

    if not recent or not early:
        return MomentumShift.STABLE

    recent_ratio = _high_energy_ratio(recent)
    early_ratio = _high_energy_ratio(early)

    if recent_ratio > early_ratio + MOMENTUM_THRESHOLD:
        return MomentumShift.INTENSE
    if recent_ratio < early_ratio - MOMENTUM_THRESHOLD:
        return MomentumShift.LOWER
    if all(c.mood_id == dominant_mood_id for c in recent):
        return MomentumShift.FOCUSED
    return MomentumShift.STABLE


class SignalComputer:
    """Computes MonthSignals for a window of captures."""

    def __init__(
        self,
        tz: tzinfo | None = None,
        mood_cache: MoodDictionaryCache | None = None
    ):
        self.tz = tz
        self.mood_cache = mood_cache

    def compute(self, captures: Iterable[Capture], as_of: datetime) -> MonthSignals:
        """Compute signals for captures up to and including ``as_of``.

        Captures after ``as_of`` are ignored so a snapshot's signals can be
        reproduced later. Callers are responsible for the window start.
        """
        as_of = time_windows.assume_utc(as_of)
        window = sorted(
            (c for c in captures if c.created_at <= as_of),
            key=lambda c: c.created_at,
        )

        mood_counts: dict[str, int] = {}
        snapshots: dict[str, str] = {}
        day_moods: dict[str, list[str]] = {}

        for capture in window:
            mood_id = capture.effective_mood_id
            mood_counts[mood_id] = mood_counts.get(mood_id, 0) + 1
            if capture.mood_name_snapshot:
                # Most recent snapshot wins
                snapshots[mood_id] = capture.mood_name_snapshot
            day_key = time_windows.local_day_key(capture.created_at, self.tz)
            day_moods.setdefault(day_key, []).append(mood_id)

        ranked = sorted(mood_counts.items(), key=lambda item: item[1], reverse=True)
        dominant_id = ranked[0][0] if ranked else DEFAULT_MOOD_ID
        runner_up_id = ranked[1][0] if len(ranked) > 1 else None

        signals = MonthSignals(
            mood_counts=mood_counts,
            dominant_mood_id=dominant_id,
            dominant_mood=self._label(dominant_id, snapshots),
            runner_up_mood_id=runner_up_id,
            runner_up_mood=self._label(runner_up_id, snapshots) if runner_up_id else None,
            volatility_score=volatility_score(day_moods),
            active_days=len(day_moods),
            total_captures=len(window),
            last_7_days_shift=momentum_shift(window, as_of, dominant_id),
            energy=energy_mix(mood_counts),
        )

        logger.debug(
            f"Signals: {signals.total_captures} captures, {signals.active_days} active days, "
            f"volatility {signals.volatility_score:.2f}, shift {signals.last_7_days_shift.value}"
        )
        return signals

    def _label(self, mood_id: str, snapshots: dict[str, str]) -> str:
        return snapshots.get(mood_id) or resolve_mood_label(mood_id, cache=self.mood_cache)


# ===== Month phrase and reasoning =====

def month_phrase(mood_counts: dict[str, int]) -> str:
    """Deterministic two-word title for a month, chosen from its energy mix."""
    mix = energy_mix(mood_counts)
    if mix.total == 0:
        return "Quiet Pause"

    high_pct = mix.high / mix.total * 100
    low_pct = mix.low / mix.total * 100

    if high_pct > 60:
        return "Bright Surge"
    if high_pct > 40:
        return "Vivid Momentum"
    if low_pct > 60:
        return "Silent Current"
    if low_pct > 40:
        return "Gentle Drift"
    if high_pct > 30 and low_pct > 30:
        return "Shifting Tides"
    return "Steady Flow"


def is_valid_month_phrase(phrase: str, banned_words: Iterable[str] = MOOD_LABELS) -> bool:
    """Exactly two words and no banned substring."""
    if len(phrase.split()) != 2:
        return False
    lowered = phrase.lower()
    return not any(word.lower() in lowered for word in banned_words)


def describe_volatility(score: float) -> str:
    if score >= 0.75:
        return "High variability, moods shifted frequently between days"
    if score >= 0.5:
        return "Moderate variability, noticeable shifts across the month"
    if score >= 0.25:
        return "Mild variability, some shifts but mostly steady"
    return "Low variability, moods stayed fairly consistent"


def describe_shift(shift: MomentumShift) -> str:
    if shift == MomentumShift.INTENSE:
        return "Recent days have been more intense and high-energy"
    if shift == MomentumShift.FOCUSED:
        return "Recent days have narrowed around one dominant mood"
    if shift == MomentumShift.LOWER:
        return "Recent days have been calmer and lower-energy"
    return "Recent days have been consistent with the overall pattern"


def month_reasoning(
    phrase: str,
    signals: MonthSignals,
    mood_cache: MoodDictionaryCache | None = None
) -> str:
    """Explain which data points produced the month phrase.

    Returns one overview line followed by bullet lines for top moods,
    energy split, stability, trend and the phrase itself.
    """
    total = signals.total_captures
    if total == 0 or not phrase:
        return "Not enough data to explain the title yet."

    lines = [f"{total} captures across {signals.active_days} active days."]

    top = sorted(signals.mood_counts.items(), key=lambda item: item[1], reverse=True)
    top = top[:TOP_MOODS_IN_REASONING]
    if top:
        parts = [
            f"{resolve_mood_label(mood_id, cache=mood_cache)} "
            f"({round_half_up(count / total * 100)}%, {count} captures)"
            for mood_id, count in top
        ]
        lines.append(f"- Top moods: {', '.join(parts)}")

    mix = energy_mix(signals.mood_counts)
    pct = mix.percentages()
    lines.append(f"- Energy: {pct['high']}% high, {pct['medium']}% neutral, {pct['low']}% low")

    volatility_pct = round_half_up(signals.volatility_score * 100)
    lines.append(
        f"- Stability: {volatility_pct}% volatility. {describe_volatility(signals.volatility_score)}"
    )
    lines.append(f"- Trend: {describe_shift(signals.last_7_days_shift)}")

    if pct["high"] >= pct["medium"] and pct["high"] >= pct["low"]:
        character = "high-energy"
    elif pct["low"] >= pct["medium"]:
        character = "contemplative"
    else:
        character = "balanced"

    shaped_by = signals.dominant_mood
    if signals.runner_up_mood:
        shaped_by += f" and {signals.runner_up_mood}"
    lines.append(f'- "{phrase}" reflects a {character} month shaped by {shaped_by}')

    return "\n".join(lines)
