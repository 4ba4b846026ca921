"""Built-in mood vocabulary as a mood source"""

from moodsnap.config import Settings
from moodsnap.moods.vocabulary import MOOD_COLOR_MAP, system_mood_name
from moodsnap.providers.base import MoodSource
from moodsnap.types import MoodEntry


def system_moods() -> list[MoodEntry]:
    """Every built-in mood, in vocabulary order"""
    return [
        MoodEntry(id=mood_id, name=system_mood_name(mood_id), type="system", color=color)
        for mood_id, color in MOOD_COLOR_MAP.items()
    ]


class SystemMoodSource(MoodSource):
    """System moods only; no user has custom moods"""

    def __init__(self, settings: Settings | None = None):
        self._moods = system_moods()

    def fetch_system(self) -> list[MoodEntry]:
        return list(self._moods)

    def fetch_custom(self, user_id: str) -> list[MoodEntry]:
        return []

    def get_name(self) -> str:
        return "system"
