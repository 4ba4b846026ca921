"""Parsing of raw generation output.

The collaborator is untrusted: it may wrap JSON in markdown fences, answer
in plain prose, or return nothing useful at all. Nothing here raises.
"""

import json
import logging
import re
from typing import Any

from moodsnap.types import InsightType
from moodsnap.validation.results import ParseResult

logger = logging.getLogger(__name__)

# Period types whose prompt allows a plain prose answer
PLAIN_TEXT_TYPES = frozenset({InsightType.WEEKLY, InsightType.MONTHLY})

_LEADING_FENCE = re.compile(r"^\s*```(?:json)?\s*\n?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\n?```\s*$")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B-\x1F\x7F]")
_DASHES = re.compile(r"[–—]|---?")
_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


def strip_markdown_fences(text: str) -> str:
    """Remove a leading ```json / ``` delimiter and its closing ```.

    The closing fence is only removed as part of a pair. Text without a
    leading fence is returned unchanged.
    """
    stripped, opened = _LEADING_FENCE.subn("", text, count=1)
    if not opened:
        return text
    return _TRAILING_FENCE.sub("", stripped, count=1)


def extract_insight_text(data: dict[str, Any]) -> str | None:
    """Find the prose in a decoded payload: insight, narrative.text, then text."""
    insight = data.get("insight")
    if isinstance(insight, str) and insight.strip():
        return insight

    narrative = data.get("narrative")
    if isinstance(narrative, dict):
        text = narrative.get("text")
        if isinstance(text, str) and text.strip():
            return text

    text = data.get("text")
    if isinstance(text, str) and text.strip():
        return text
    return None


def parse_insight_response(raw: str | None, insight_type: InsightType | str) -> ParseResult:
    """Parse raw collaborator output for a period type.

    Daily and challenge output must be a JSON object. Weekly and monthly
    output may also be plain prose, which becomes the ``insight`` itself.
    """
    insight_type = InsightType(insight_type)

    if raw is None or not raw.strip():
        return ParseResult(success=False, error="Empty response")

    cleaned = strip_markdown_fences(raw).strip()
    if not cleaned:
        return ParseResult(success=False, error="Empty response after removing fences")

    try:
        decoded = json.loads(cleaned)
    except json.JSONDecodeError as e:
        if insight_type in PLAIN_TEXT_TYPES:
            return ParseResult(success=True, data={"insight": cleaned})
        logger.debug(f"{insight_type.value} response is not JSON: {e}")
        return ParseResult(success=False, error=f"Invalid JSON: {e.msg} (line {e.lineno})")

    if isinstance(decoded, dict):
        data = dict(decoded)
        data["insight"] = extract_insight_text(decoded)
        return ParseResult(success=True, data=data)

    if insight_type in PLAIN_TEXT_TYPES:
        # Bare JSON scalars ("...", 42) are still prose for these types
        text = decoded if isinstance(decoded, str) and decoded.strip() else cleaned
        return ParseResult(success=True, data={"insight": text})

    return ParseResult(
        success=False,
        error=f"Expected a JSON object, got {type(decoded).__name__}",
    )


def sanitize_text(text: str | None) -> str:
    """Drop control characters and turn dash punctuation into commas."""
    if not text:
        return ""
    text = _CONTROL_CHARS.sub("", text)
    return _DASHES.sub(",", text).strip()


def split_sentences(text: str) -> list[str]:
    """Split prose on sentence-ending punctuation."""
    return [part for part in _SENTENCE_BOUNDARY.split(text.strip()) if part]
