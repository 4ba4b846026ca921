"""Tests for deterministic month signals"""

from datetime import datetime, timedelta, timezone

import pytest

from moodsnap.core.signals import (
    SignalComputer,
    day_dominant_mood,
    energy_mix,
    is_valid_month_phrase,
    momentum_shift,
    month_phrase,
    month_reasoning,
    volatility_score,
)
from moodsnap.types import MomentumShift

UTC = timezone.utc
AS_OF = datetime(2025, 2, 28, 12, 0, tzinfo=UTC)


class TestDayDominantMood:
    """Per-day dominant mood via a left fold"""

    def test_majority_wins(self):
        assert day_dominant_mood(["calm", "joyful", "joyful"]) == "joyful"

    def test_tie_keeps_first_seen(self):
        assert day_dominant_mood(["calm", "joyful", "joyful", "calm"]) == "calm"

    def test_tie_depends_on_order(self):
        assert day_dominant_mood(["joyful", "calm", "calm", "joyful"]) == "joyful"

    def test_single_mood(self):
        assert day_dominant_mood(["tired"]) == "tired"


class TestVolatility:
    """Fraction of day-to-day dominant mood changes"""

    def test_single_day_is_zero(self):
        assert volatility_score({"2025-02-01": ["calm", "joyful"]}) == 0.0

    def test_no_days_is_zero(self):
        assert volatility_score({}) == 0.0

    def test_one_transition_over_three_days(self):
        days = {
            "2025-02-01": ["calm"],
            "2025-02-02": ["joyful"],
            "2025-02-03": ["joyful"],
        }
        assert volatility_score(days) == pytest.approx(0.5)

    def test_every_day_changes(self):
        days = {
            "2025-02-03": ["tired"],
            "2025-02-01": ["calm"],
            "2025-02-02": ["joyful"],
        }
        assert volatility_score(days) == pytest.approx(1.0)


class TestEnergyMix:
    """Energy partition of raw counts"""

    def test_partition(self):
        mix = energy_mix({"joyful": 2, "calm": 1, "focused": 1, "custom_x": 1})
        assert (mix.high, mix.medium, mix.low) == (2, 2, 1)
        assert mix.total == 5

    def test_percentages(self):
        mix = energy_mix({"joyful": 1, "calm": 1, "focused": 1})
        assert mix.percentages() == {"high": 33, "medium": 33, "low": 33}

    def test_empty_percentages(self):
        assert energy_mix({}).percentages() == {"high": 0, "medium": 0, "low": 0}


class TestMomentumShift:
    """Last seven days against the earlier part of the window"""

    def _captures(self, capture_factory, early_mood, recent_mood):
        early = [
            capture_factory(f"e{i}", datetime(2025, 2, 1 + i, 9, 0, tzinfo=UTC), early_mood)
            for i in range(5)
        ]
        recent = [
            capture_factory(f"r{i}", datetime(2025, 2, 24 + i, 9, 0, tzinfo=UTC), recent_mood)
            for i in range(3)
        ]
        return early + recent

    def test_intense(self, capture_factory):
        captures = self._captures(capture_factory, "calm", "joyful")
        assert momentum_shift(captures, AS_OF, "calm") == MomentumShift.INTENSE

    def test_lower(self, capture_factory):
        captures = self._captures(capture_factory, "joyful", "calm")
        assert momentum_shift(captures, AS_OF, "joyful") == MomentumShift.LOWER

    def test_focused(self, capture_factory):
        captures = self._captures(capture_factory, "calm", "calm")
        assert momentum_shift(captures, AS_OF, "calm") == MomentumShift.FOCUSED

    def test_stable_when_recent_mixed(self, capture_factory):
        captures = self._captures(capture_factory, "calm", "tired")
        assert momentum_shift(captures, AS_OF, "calm") == MomentumShift.STABLE

    def test_stable_when_one_half_empty(self, capture_factory):
        recent_only = [capture_factory("r", datetime(2025, 2, 27, 9, 0, tzinfo=UTC), "joyful")]
        assert momentum_shift(recent_only, AS_OF, "joyful") == MomentumShift.STABLE


class TestSignalComputer:
    """End-to-end signal computation"""

    def test_counts_and_ranking(self, weekly_captures):
        signals = SignalComputer(tz=UTC).compute(weekly_captures, AS_OF)
        assert signals.mood_counts == {"calm": 3, "focused": 2, "joyful": 2, "tired": 1, "grateful": 1}
        assert signals.dominant_mood_id == "calm"
        assert signals.dominant_mood == "Calm"
        # Stable sort keeps first-counted mood ahead on ties
        assert signals.runner_up_mood_id == "focused"
        assert signals.total_captures == 9
        assert signals.active_days == 4

    def test_volatility_uses_day_dominants(self, weekly_captures):
        # Dominants: calm, joyful, tired (tie, first seen), focused (tie, first seen)
        signals = SignalComputer(tz=UTC).compute(weekly_captures, AS_OF)
        assert signals.volatility_score == pytest.approx(1.0)

    def test_missing_mood_counts_as_neutral(self, capture_factory):
        captures = [capture_factory("c", datetime(2025, 2, 3, 9, 0, tzinfo=UTC), None)]
        signals = SignalComputer(tz=UTC).compute(captures, AS_OF)
        assert signals.mood_counts == {"neutral": 1}
        assert signals.dominant_mood == "Neutral"

    def test_ignores_captures_after_as_of(self, weekly_captures):
        as_of = datetime(2025, 2, 4, 12, 0, tzinfo=UTC)
        signals = SignalComputer(tz=UTC).compute(weekly_captures, as_of)
        assert signals.total_captures == 4

    def test_naive_as_of_is_read_as_utc(self, weekly_captures):
        signals = SignalComputer(tz=UTC).compute(weekly_captures, datetime(2025, 2, 4, 12, 0))
        assert signals.total_captures == 4

    def test_latest_snapshot_name_wins(self, capture_factory):
        captures = [
            capture_factory("a", datetime(2025, 2, 3, 9, 0, tzinfo=UTC), "custom_1",
                            mood_name_snapshot="Old Name"),
            capture_factory("b", datetime(2025, 2, 4, 9, 0, tzinfo=UTC), "custom_1",
                            mood_name_snapshot="New Name"),
        ]
        signals = SignalComputer(tz=UTC).compute(list(reversed(captures)), AS_OF)
        assert signals.dominant_mood == "New Name"

    def test_empty_window(self):
        signals = SignalComputer(tz=UTC).compute([], AS_OF)
        assert signals.dominant_mood_id == "neutral"
        assert signals.runner_up_mood is None
        assert signals.total_captures == 0
        assert signals.volatility_score == 0.0
        assert signals.last_7_days_shift == MomentumShift.STABLE

    def test_to_dict_is_json_friendly(self, weekly_captures):
        data = SignalComputer(tz=UTC).compute(weekly_captures, AS_OF).to_dict()
        assert data["last_7_days_shift"] == "stable"
        assert data["energy"] == {"high": 2, "medium": 3, "low": 4}


class TestMonthPhrase:
    """Deterministic month title"""

    @pytest.mark.parametrize("counts,expected", [
        ({}, "Quiet Pause"),
        ({"joyful": 7, "calm": 3}, "Bright Surge"),
        ({"joyful": 5, "calm": 5}, "Vivid Momentum"),
        ({"calm": 7, "joyful": 3}, "Silent Current"),
        ({"calm": 5, "focused": 5}, "Gentle Drift"),
        ({"joyful": 35, "calm": 35, "focused": 30}, "Shifting Tides"),
        ({"focused": 10}, "Steady Flow"),
    ])
    def test_phrase(self, counts, expected):
        assert month_phrase(counts) == expected

    def test_phrase_validation(self):
        assert is_valid_month_phrase("Bright Surge")
        assert not is_valid_month_phrase("Calm Waters")
        assert not is_valid_month_phrase("Surge")
        assert not is_valid_month_phrase("Very Bright Surge")

    def test_every_phrase_is_valid(self):
        for counts in ({}, {"joyful": 1}, {"calm": 1}, {"focused": 1}, {"joyful": 1, "calm": 1}):
            assert is_valid_month_phrase(month_phrase(counts))

    def test_reasoning(self, weekly_captures):
        signals = SignalComputer(tz=UTC).compute(weekly_captures, AS_OF)
        reasoning = month_reasoning("Steady Flow", signals)
        lines = reasoning.split("\n")
        assert lines[0] == "9 captures across 4 active days."
        assert lines[1].startswith("- Top moods: Calm (33%, 3 captures)")
        assert "- Energy: 22% high, 33% neutral, 44% low" in lines
        assert lines[-1] == '- "Steady Flow" reflects a contemplative month shaped by Calm and Focused'

    def test_reasoning_without_data(self):
        signals = SignalComputer(tz=UTC).compute([], AS_OF)
        assert month_reasoning("Quiet Pause", signals) == "Not enough data to explain the title yet."
