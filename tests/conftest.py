"""Pytest fixtures and configuration for moodsnap tests"""

import os
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

# Keep tests independent of any local .env provider selection
os.environ.setdefault("MOODSNAP_GENERATION_PROVIDER", "none")
os.environ.setdefault("MOODSNAP_SNAPSHOT_STORE_PROVIDER", "memory")

from moodsnap.config import Settings  # noqa: E402
from moodsnap.models.capture import Capture  # noqa: E402
from moodsnap.providers.snapshot.memory import InMemorySnapshotStore  # noqa: E402

UTC = timezone.utc


def make_capture(
    capture_id: str,
    created_at: datetime,
    mood_id: str | None = "calm",
    note: str | None = None,
    **kwargs
) -> Capture:
    """Build a capture with the snapshot name defaulting to the system label"""
    snapshot = kwargs.pop("mood_name_snapshot", mood_id.capitalize() if mood_id else "")
    return Capture(
        id=capture_id,
        created_at=created_at,
        mood_id=mood_id,
        mood_name_snapshot=snapshot,
        note=note,
        **kwargs,
    )


@pytest.fixture
def capture_factory():
    """Factory for captures"""
    return make_capture


@pytest.fixture
def out_of_order_pair():
    """Two captures on the same day, listed latest first"""
    return [
        make_capture("late", datetime(2025, 2, 4, 18, 0, tzinfo=UTC), "joyful"),
        make_capture("early", datetime(2025, 2, 4, 8, 0, tzinfo=UTC), "calm"),
    ]


@pytest.fixture
def weekly_captures():
    """Nine captures over Mon Feb 3 - Thu Feb 6 2025 (week of Sun Feb 2)"""
    return [
        make_capture("c1", datetime(2025, 2, 3, 8, 0, tzinfo=UTC), "calm", "Slow coffee by the window",
                     tags=["morning"]),
        make_capture("c2", datetime(2025, 2, 3, 13, 0, tzinfo=UTC), "focused", "Deep work on the report",
                     tags=["work"]),
        make_capture("c3", datetime(2025, 2, 3, 19, 0, tzinfo=UTC), "calm", "Long walk home",
                     tags=["walk"]),
        make_capture("c4", datetime(2025, 2, 4, 9, 0, tzinfo=UTC), "joyful", "Good news from a friend",
                     tags=["friends"]),
        make_capture("c5", datetime(2025, 2, 4, 18, 0, tzinfo=UTC), "joyful", None, tags=["friends"]),
        make_capture("c6", datetime(2025, 2, 5, 7, 30, tzinfo=UTC), "tired", "Short night", tags=["sleep"]),
        make_capture("c7", datetime(2025, 2, 5, 12, 0, tzinfo=UTC), "calm", None),
        make_capture("c8", datetime(2025, 2, 6, 10, 0, tzinfo=UTC), "focused", "Planning session",
                     tags=["work"]),
        make_capture("c9", datetime(2025, 2, 6, 21, 0, tzinfo=UTC), "grateful", "Dinner with family"),
    ]


@pytest.fixture
def valid_mood_flow():
    """Three-segment mood flow that passes validation"""
    return [
        {"mood": "quiet anticipation", "percentage": 50, "color": "#6BA5D4"},
        {"mood": "sharp intent", "percentage": 30, "color": "#F59E0B"},
        {"mood": "soft landing", "percentage": 20, "color": "#87D4D4"},
    ]


@pytest.fixture
def flow_summing_to_90():
    """Mood flow whose percentages add up to 90"""
    return [
        {"mood": "quiet anticipation", "percentage": 50, "color": "#6BA5D4"},
        {"mood": "sharp intent", "percentage": 40, "color": "#F59E0B"},
    ]


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing storage at a temporary directory"""
    return Settings(
        generation_provider="none",
        snapshot_store_provider="memory",
        mood_source_provider="system",
        snapshot_db_path=str(tmp_path / "snapshots.db"),
        mood_db_path=str(tmp_path / "moods.db"),
        timezone="UTC",
        generation_timeout=2.0,
    )


@pytest.fixture
def memory_store():
    """Empty in-memory snapshot store"""
    return InMemorySnapshotStore()


@pytest.fixture
def mock_generation_provider():
    """Mock generation provider"""
    provider = MagicMock()
    provider.generate.return_value = "The week moved at an even pace."
    provider.get_name.return_value = "MockGenerationProvider"
    provider.get_default_model.return_value = "mock-model"
    return provider


@pytest.fixture
def mock_mood_source():
    """Mock mood source with two system moods and one custom mood"""
    from moodsnap.types import MoodEntry

    source = MagicMock()
    source.fetch_system.return_value = [
        MoodEntry(id="calm", name="Calm", type="system", color="#6BA5D4"),
        MoodEntry(id="joyful", name="Joyful", type="system", color="#FACC15"),
    ]
    source.fetch_custom.return_value = [
        MoodEntry(id="custom_1", name="Sunburst", type="custom", color="#ff8800", user_id="alice"),
    ]
    source.get_name.return_value = "MockMoodSource"
    return source
