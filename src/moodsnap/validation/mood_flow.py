"""Mood-flow schema validation and shape discrimination.

A mood flow arrives either as a list of percentage segments or as a single
named reading ({title, subtitle, confidence, tags}). The shape is decided
once, in decode_mood_flow, and carried as a tagged union afterwards.
"""

import logging
import math
import re
from collections.abc import Sequence
from typing import Any

from moodsnap.types import MoodFlowSegment
from moodsnap.validation.results import (
    MoodFlow,
    MoodFlowReading,
    MoodFlowSegments,
    ValidationResult,
)

logger = logging.getLogger(__name__)

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")
SUM_TOLERANCE = 1.0


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _as_dict(segment: Any) -> Any:
    if isinstance(segment, MoodFlowSegment):
        return segment.to_dict()
    return segment


def is_mood_flow_reading(data: Any) -> bool:
    return (
        isinstance(data, dict)
        and isinstance(data.get("title"), str)
        and isinstance(data.get("subtitle"), str)
    )


def is_mood_flow_segments(data: Any) -> bool:
    if not isinstance(data, list):
        return False
    if not data:
        return True
    first = _as_dict(data[0])
    return (
        isinstance(first, dict)
        and isinstance(first.get("mood"), str)
        and _is_number(first.get("percentage"))
    )


def decode_mood_flow(data: Any) -> MoodFlow | None:
    """Discriminate a raw mood-flow payload. None when it matches neither shape.

    Segment fields are copied as given; run validate_mood_flow_segments on
    the raw payload to check them.
    """
    if is_mood_flow_reading(data):
        confidence = data.get("confidence")
        tags = data.get("tags")
        return MoodFlowReading(
            title=data["title"],
            subtitle=data["subtitle"],
            confidence=float(confidence) if _is_number(confidence) else 0.0,
            tags=[str(tag) for tag in tags] if isinstance(tags, list) else [],
        )

    if is_mood_flow_segments(data):
        segments = []
        for item in data:
            item = _as_dict(item)
            if not isinstance(item, dict):
                continue
            segments.append(MoodFlowSegment(
                mood=str(item.get("mood") or ""),
                percentage=item["percentage"] if _is_number(item.get("percentage")) else 0,
                color=str(item.get("color") or ""),
                context=item.get("context") if isinstance(item.get("context"), str) else None,
            ))
        return MoodFlowSegments(segments=segments)

    return None


def validate_mood_flow_segments(segments: Any) -> ValidationResult:
    """Check every segment and the percentage total, collecting all violations.

    An empty list is valid (a period with nothing to show).
    """
    if not isinstance(segments, (list, tuple)):
        return ValidationResult(valid=False, errors=["mood_flow must be a list of segments"])

    errors: list[str] = []
    total = 0.0

    for i, raw in enumerate(segments):
        segment = _as_dict(raw)
        prefix = f"mood_flow[{i}]"
        if not isinstance(segment, dict):
            errors.append(f"{prefix}: segment must be an object")
            continue

        mood = segment.get("mood")
        if not isinstance(mood, str) or not mood.strip():
            errors.append(f"{prefix}: mood must be a non-empty string")

        percentage = segment.get("percentage")
        if percentage is None:
            errors.append(f"{prefix}: percentage is required")
        elif not _is_number(percentage):
            errors.append(f"{prefix}: percentage must be a number (got {percentage!r})")
        else:
            total += percentage
            if percentage <= 0 or percentage > 100:
                errors.append(f"{prefix}: percentage must be in (0, 100] (got {percentage})")

        color = segment.get("color")
        if color is None:
            errors.append(f"{prefix}: color is required")
        elif not isinstance(color, str) or not HEX_COLOR.match(color):
            errors.append(f"{prefix}: color must be in hex format #RRGGBB (got {color!r})")

    if segments and abs(total - 100) > SUM_TOLERANCE:
        errors.append(f"Percentages must sum to 100 (±{SUM_TOLERANCE:g}), got {total:g}")

    return ValidationResult(valid=not errors, errors=errors, data=list(segments))


def validate_mood_flow_reading(reading: MoodFlowReading) -> ValidationResult:
    errors = []
    if not reading.title.strip():
        errors.append("mood_flow.title must be a non-empty string")
    if not reading.subtitle.strip():
        errors.append("mood_flow.subtitle must be a non-empty string")
    if not 0 <= reading.confidence <= 100:
        errors.append(f"mood_flow.confidence out of range (got {reading.confidence})")
    return ValidationResult(valid=not errors, errors=errors, data=reading)


def validate_mood_flow(data: Any) -> ValidationResult:
    """Decode and validate a mood flow of either shape.

    On success ``data`` holds the decoded MoodFlowSegments or MoodFlowReading.
    """
    decoded = decode_mood_flow(data)
    if decoded is None:
        if isinstance(data, list):
            # Malformed segment list; report every violation
            return validate_mood_flow_segments(data)
        return ValidationResult(
            valid=False,
            errors=["mood_flow is neither a segment list nor a reading"],
        )

    if isinstance(decoded, MoodFlowReading):
        return validate_mood_flow_reading(decoded)

    result = validate_mood_flow_segments(data)
    return ValidationResult(valid=result.valid, errors=result.errors, data=decoded)


def segments_to_dicts(segments: Sequence[MoodFlowSegment]) -> list[dict[str, Any]]:
    return [segment.to_dict() for segment in segments]
