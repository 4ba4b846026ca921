"""Language checks on generated prose.

Generated text must describe feelings, not echo the raw mood vocabulary the
user picked from. Leakage is reported, and the orchestrator decides whether
a violation is a warning or a rejection.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from typing import Any

from moodsnap.moods.vocabulary import MOOD_LABELS
from moodsnap.types import MoodFlowSegment
from moodsnap.validation.results import ValidationResult

logger = logging.getLogger(__name__)

BANNED_WORDS: tuple[str, ...] = tuple(label.lower() for label in MOOD_LABELS)

THERAPY_PHRASES: tuple[str, ...] = (
    "healing", "growth", "journey", "self-care", "mindfulness",
    "you should", "try to", "remember to", "make sure to",
    "be proud", "keep going", "you're doing great",
)

_BANNED_PATTERNS = {
    word: re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE) for word in BANNED_WORDS
}


def check_label_leakage(text: str, banned_words: Iterable[str] | None = None) -> ValidationResult:
    """Report whole-word, case-insensitive matches of raw mood labels."""
    violations = []
    if banned_words is None:
        patterns = _BANNED_PATTERNS.items()
    else:
        patterns = (
            (word.lower(), re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE))
            for word in banned_words
        )

    for word, pattern in patterns:
        if pattern.search(text):
            violations.append(f'Contains banned mood label: "{word}"')
    return ValidationResult(valid=not violations, errors=violations)


def check_therapy_language(text: str) -> ValidationResult:
    lowered = text.lower()
    violations = [
        f'Contains therapy language: "{phrase}"' for phrase in THERAPY_PHRASES if phrase in lowered
    ]
    return ValidationResult(valid=not violations, errors=violations)


def validate_insight_text(text: str, strict: bool = False) -> ValidationResult:
    """Leakage check, plus therapy phrasing when ``strict``."""
    result = check_label_leakage(text)
    if strict:
        result = result.merge(check_therapy_language(text))
    return result


def validate_insight_sentences(sentences: Sequence[Any], strict: bool = False) -> ValidationResult:
    """Check each sentence, prefixing violations with its 1-based position.

    Sentences may be plain strings or {"text": ...} objects.
    """
    violations = []
    for i, sentence in enumerate(sentences, start=1):
        text = sentence.get("text", "") if isinstance(sentence, dict) else str(sentence)
        result = validate_insight_text(text, strict=strict)
        violations.extend(f"Sentence {i}: {v}" for v in result.errors)
    return ValidationResult(valid=not violations, errors=violations)


def validate_mood_flow_labels(segments: Sequence[Any]) -> ValidationResult:
    """Mood names must be descriptive phrases; contexts must not leak labels."""
    violations = []
    for i, segment in enumerate(segments):
        if isinstance(segment, MoodFlowSegment):
            segment = segment.to_dict()
        if not isinstance(segment, dict):
            continue

        mood = segment.get("mood")
        if isinstance(mood, str) and mood.strip().lower() in BANNED_WORDS:
            violations.append(
                f'mood_flow[{i}]: Uses raw mood label "{mood}" instead of descriptive phrase'
            )

        context = segment.get("context")
        if isinstance(context, str) and context:
            result = check_label_leakage(context)
            violations.extend(f"mood_flow[{i}].context: {v}" for v in result.errors)

    return ValidationResult(valid=not violations, errors=violations)


def log_validation_warnings(context: str, result: ValidationResult) -> None:
    """Log violations without blocking."""
    if not result.valid:
        logger.warning(f"{context} has violations: {result.errors}")
