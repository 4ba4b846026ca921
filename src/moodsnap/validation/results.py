from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from moodsnap.types import MoodFlowSegment


@dataclass
class ParseResult:
    """Result of parsing raw collaborator output.

    On success ``data`` always has an ``insight`` key holding the prose,
    whichever key the collaborator used for it (None when it sent none).
    """
    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None


@dataclass
class ValidationResult:
    """Structured validation outcome. Validators never raise."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    data: Any = None

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Combine two results, keeping this result's data."""
        return ValidationResult(
            valid=self.valid and other.valid,
            errors=[*self.errors, *other.errors],
            data=self.data,
        )


@dataclass
class MoodFlowSegments:
    """Mood flow as percentage-weighted segments."""
    segments: list[MoodFlowSegment]
    kind: Literal["segments"] = "segments"


@dataclass
class MoodFlowReading:
    """Mood flow as a single named reading."""
    title: str
    subtitle: str
    confidence: float = 0.0
    tags: list[str] = field(default_factory=list)
    kind: Literal["reading"] = "reading"


MoodFlow = MoodFlowSegments | MoodFlowReading
