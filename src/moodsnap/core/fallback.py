"""Deterministic fallback generation.

Used whenever the generation collaborator is unavailable, times out or
returns output that fails validation. Output always satisfies the mood-flow
invariants: one segment per distinct mood, percentages summing to exactly
100, hex colors and descriptive phrases instead of raw labels.
"""

import logging
from collections.abc import Sequence

from moodsnap.core.aggregation import MoodSample
from moodsnap.moods.vocabulary import DEFAULT_MOOD_COLOR, MOOD_COLOR_MAP, descriptive_mood_name
from moodsnap.types import InsightType, MoodFlowSegment, round_half_up
from moodsnap.validation.language import check_label_leakage

logger = logging.getLogger(__name__)

CONTEXT_MAX_CHARS = 80


def _apportion(counts: list[int], total: int) -> list[int]:
    """Round each share half-up, then push the whole rounding error onto the largest segment.

    Shares below half a percent still get 1 so no segment is empty. When the
    correction would drive the largest segment to zero or below (only
    possible with dozens of distinct moods), fall back to largest-remainder
    apportionment.
    """
    rounded = [max(1, round_half_up(count / total * 100)) for count in counts]
    diff = 100 - sum(rounded)
    if diff == 0:
        return rounded

    # Largest by count; earliest first on ties
    largest = max(range(len(counts)), key=lambda i: (counts[i], -i))
    if rounded[largest] + diff > 0:
        rounded[largest] += diff
        return rounded

    logger.debug(f"Rounding correction of {diff} too large, using largest remainder")
    exact = [count / total * 100 for count in counts]
    shares = [max(1, int(value)) for value in exact]
    remaining = 100 - sum(shares)
    order = sorted(range(len(counts)), key=lambda i: exact[i] - int(exact[i]), reverse=True)
    for i in order[:max(remaining, 0)]:
        shares[i] += 1
    while remaining < 0 and max(shares) > 1:
        shares[shares.index(max(shares))] -= 1
        remaining += 1
    return shares


def fallback_mood_flow(samples: Sequence[MoodSample]) -> list[MoodFlowSegment]:
    """Build mood-flow segments from captured moods.

    Args:
        samples: (mood name, note, timestamp, tags) tuples

    Returns:
        Segments ordered by percentage, largest first. Empty input gives an
        empty list.
    """
    if not samples:
        return []

    # Group by mood name exactly as given, in first-seen order
    groups: dict[str, list[MoodSample]] = {}
    for sample in samples:
        groups.setdefault(sample.mood, []).append(sample)

    names = list(groups)
    counts = [len(groups[name]) for name in names]
    percentages = _apportion(counts, len(samples))

    segments = []
    for name, percentage in zip(names, percentages):
        key = name.lower().strip()
        notes = [s.note for s in groups[name] if s.note]
        # First note that does not echo a raw mood label
        context = next(
            (
                note[:CONTEXT_MAX_CHARS] for note in notes
                if check_label_leakage(note[:CONTEXT_MAX_CHARS]).valid
            ),
            None,
        )
        segments.append(MoodFlowSegment(
            mood=descriptive_mood_name(key, name, notes),
            percentage=percentage,
            color=MOOD_COLOR_MAP.get(key, DEFAULT_MOOD_COLOR),
            context=context,
        ))

    segments.sort(key=lambda segment: segment.percentage, reverse=True)
    return segments


def fallback_content(
    insight_type: InsightType,
    segments: Sequence[MoodFlowSegment],
    capture_count: int,
    active_days: int = 1,
    phrase: str | None = None
) -> str:
    """Short third-person summary built from the fallback segments only.

    Notes and raw mood labels are never quoted, so the text passes the
    label-leakage checks.
    """
    if not segments:
        return "No moments were captured for this period."

    lead = segments[0].mood
    second = segments[1].mood if len(segments) > 1 else None
    moments = "moment" if capture_count == 1 else "moments"

    if insight_type == InsightType.WEEKLY:
        days = "day" if active_days == 1 else "days"
        text = f"The week held {capture_count} captured {moments} across {active_days} {days}."
        text += f" {lead.capitalize()} carried the most weight"
        text += f", with {second} close behind." if second else "."
        return text

    if insight_type == InsightType.MONTHLY:
        days = "day" if active_days == 1 else "days"
        opener = f"{phrase}. " if phrase else ""
        text = f"{opener}The month gathered {capture_count} {moments} over {active_days} active {days}."
        text += f" {lead.capitalize()} ran through most of it"
        text += f", threaded with {second}." if second else "."
        return text

    text = f"The day moved through {capture_count} captured {moments}, led by {lead}."
    if second:
        text += f" Traces of {second} appeared along the way."
    return text
