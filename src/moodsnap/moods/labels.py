"""Mood label and color resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING

from moodsnap.moods.vocabulary import (
    DEFAULT_MOOD_COLOR,
    MOOD_COLOR_MAP,
    custom_mood_color,
    system_mood_name,
)

if TYPE_CHECKING:
    from moodsnap.moods.cache import MoodDictionaryCache

CUSTOM_MOOD_PREFIX = "custom_"


def resolve_mood_label(
    mood_id: str,
    name_snapshot: str | None = None,
    cache: MoodDictionaryCache | None = None
) -> str:
    """Human-readable label for a mood.

    Priority: the capture's name snapshot (historical truth), then the mood
    dictionary, then "Custom Mood" for custom IDs, then the capitalized ID.
    """
    if name_snapshot and name_snapshot != mood_id:
        return name_snapshot

    if cache is not None:
        entry = cache.get_by_id(mood_id)
        if entry is not None:
            return entry.name

    if mood_id.startswith(CUSTOM_MOOD_PREFIX):
        return name_snapshot or "Custom Mood"
    return system_mood_name(mood_id)


def resolve_mood_color(
    mood_id: str,
    name_snapshot: str | None = None,
    cache: MoodDictionaryCache | None = None
) -> str:
    """Color for a mood: dictionary entry, system table, snapshot-derived hue, then gray."""
    if cache is not None:
        entry = cache.get_by_id(mood_id)
        if entry is not None:
            return entry.color

    if mood_id in MOOD_COLOR_MAP:
        return MOOD_COLOR_MAP[mood_id]
    if name_snapshot:
        return custom_mood_color(name_snapshot)
    return DEFAULT_MOOD_COLOR
