"""Mood vocabulary, label resolution and the mood dictionary cache"""

from .cache import CacheState, MoodDictionaryCache
from .labels import resolve_mood_color, resolve_mood_label

__all__ = [
    "CacheState",
    "MoodDictionaryCache",
    "resolve_mood_color",
    "resolve_mood_label",
]
