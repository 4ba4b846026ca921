"""Tests for label leakage and language checks"""

from moodsnap.types import MoodFlowSegment
from moodsnap.validation import (
    check_label_leakage,
    validate_insight_sentences,
    validate_insight_text,
    validate_mood_flow_labels,
)


class TestLabelLeakage:
    """Whole-word, case-insensitive label matching"""

    def test_clean_text(self):
        assert check_label_leakage("The morning unfolded slowly over coffee.").valid

    def test_case_insensitive(self):
        result = check_label_leakage("She felt CALM by noon.")
        assert not result.valid
        assert result.errors == ['Contains banned mood label: "calm"']

    def test_whole_words_only(self):
        assert check_label_leakage("She calmly finished her tiredness-free walk.").valid

    def test_multiple_labels(self):
        result = check_label_leakage("Tired but joyful.")
        assert len(result.errors) == 2

    def test_custom_banned_words(self):
        assert not check_label_leakage("A sunburst of energy", ["Sunburst"]).valid
        assert check_label_leakage("A calm evening", ["Sunburst"]).valid


class TestInsightText:
    """Advisory and strict checks"""

    def test_therapy_language_only_in_strict_mode(self):
        text = "This was part of a longer journey."
        assert validate_insight_text(text).valid
        result = validate_insight_text(text, strict=True)
        assert result.errors == ['Contains therapy language: "journey"']

    def test_sentences_prefixed_by_position(self):
        result = validate_insight_sentences(["A quiet start.", {"text": "Then it felt anxious."}])
        assert result.errors == ['Sentence 2: Contains banned mood label: "anxious"']


class TestMoodFlowLabels:
    """Mood-flow phrases and contexts"""

    def test_raw_label_as_mood(self):
        result = validate_mood_flow_labels([{"mood": "Calm", "percentage": 100, "color": "#6BA5D4"}])
        assert result.errors == ['mood_flow[0]: Uses raw mood label "Calm" instead of descriptive phrase']

    def test_context_leak(self):
        segments = [MoodFlowSegment(mood="quiet stillness", percentage=100, color="#6BA5D4",
                                    context="felt tired after lunch")]
        result = validate_mood_flow_labels(segments)
        assert result.errors == ['mood_flow[0].context: Contains banned mood label: "tired"']

    def test_descriptive_phrases_pass(self, valid_mood_flow):
        assert validate_mood_flow_labels(valid_mood_flow).valid
