"""Validation of untrusted generation output"""

from .language import (
    check_label_leakage,
    log_validation_warnings,
    validate_insight_sentences,
    validate_insight_text,
    validate_mood_flow_labels,
)
from .mood_flow import decode_mood_flow, validate_mood_flow, validate_mood_flow_segments
from .parsing import parse_insight_response, sanitize_text, split_sentences, strip_markdown_fences
from .results import MoodFlow, MoodFlowReading, MoodFlowSegments, ParseResult, ValidationResult

__all__ = [
    "MoodFlow",
    "MoodFlowReading",
    "MoodFlowSegments",
    "ParseResult",
    "ValidationResult",
    "check_label_leakage",
    "decode_mood_flow",
    "log_validation_warnings",
    "parse_insight_response",
    "sanitize_text",
    "split_sentences",
    "strip_markdown_fences",
    "validate_insight_sentences",
    "validate_insight_text",
    "validate_mood_flow",
    "validate_mood_flow_labels",
    "validate_mood_flow_segments",
]
