"""Prompt builders for the generation collaborator.

Prompts carry natural-language mood descriptions instead of raw labels, so
the collaborator has nothing to echo back. Capture lines are listed
earliest first and the prompts say so.
"""

from collections.abc import Sequence

from moodsnap.moods.vocabulary import MOOD_LABELS, describe_mood
from moodsnap.types import (
    DaySummary,
    EnrichedCapture,
    MonthSignals,
    MonthSummary,
    WeekSummary,
    round_half_up,
)

NOTE_SNIPPET_CHARS = 120
MONTH_NOTE_SNIPPETS = 3

_BANNED_LIST = ", ".join(MOOD_LABELS)

LANGUAGE_RULES = f"""LANGUAGE RULES:
- Plain prose only. No markdown, bullets, emojis or dashes used as punctuation.
- Never use these mood words verbatim: {_BANNED_LIST}.
  Describe feelings through behavior, sensation or indirect language.
- No advice, no therapy language, no mention of AI, prompts or captures.
- Third person only. Never address the reader as "you"."""


def _snippet(note: str | None, limit: int = NOTE_SNIPPET_CHARS) -> str | None:
    if not note:
        return None
    collapsed = " ".join(note.split())
    return collapsed[:limit] or None


def capture_line(capture: EnrichedCapture, index: int) -> str:
    """One timeline line: time | bucket | day part | feeling | note | tags."""
    note = _snippet(capture.note) or "none"
    tags = ", ".join(capture.tags) or "none"
    return (
        f"[{index}] {capture.local_time_label} | {capture.time_bucket.value} | "
        f"{capture.day_part.value} | feeling: {describe_mood(capture.mood_id)} | "
        f"note: {note} | tags: {tags}"
    )


def capture_timeline(captures: Sequence[EnrichedCapture]) -> str:
    if not captures:
        return "No captures found."
    return "\n".join(capture_line(c, i) for i, c in enumerate(captures, start=1))


def day_block(day: DaySummary, index: int) -> str:
    feelings = "; ".join(describe_mood(c.mood_id) for c in _first_per_mood(day.captures))
    return (
        f"Day [{index}] {day.date_label}\n"
        f"Primary feelings: {feelings or 'none'}\n"
        f"{capture_timeline(day.captures)}"
    )


def _first_per_mood(captures: Sequence[EnrichedCapture]) -> list[EnrichedCapture]:
    seen: dict[str, EnrichedCapture] = {}
    for capture in captures:
        seen.setdefault(capture.mood_id, capture)
    return list(seen.values())


def build_daily_prompt(date_label: str, captures: Sequence[EnrichedCapture]) -> str:
    """Daily prompt. Expects a JSON object with a narrative and a mood flow."""
    count = len(captures)
    if count == 1:
        length_rule = "1 capture: one paragraph of 3-4 sentences"
    elif count <= 3:
        length_rule = "2-3 captures: 2-3 short paragraphs"
    else:
        length_rule = "4+ captures: 3 paragraphs maximum"

    return f"""Write a reflective insight about how this day felt, grounded only in what was captured.

ENTRY COUNT: {count}
LENGTH: {length_rule}

{LANGUAGE_RULES}

OUTPUT: a strict JSON object, no markdown fences.
{{
  "narrative": {{"text": "Paragraphs separated by blank lines."}},
  "mood_flow": [
    {{"mood": "two or three word descriptive phrase", "percentage": 60, "color": "#RRGGBB", "context": "short clause"}}
  ]
}}

MOOD_FLOW RULES:
- One segment per distinct feeling, percentages summing to 100.
- "mood" is an evocative phrase such as "quiet anticipation" or "sharp intent", never a mood word.
- "color" is a 6-digit hex color.

DATE: {date_label}

CAPTURE TIMELINE (earliest to latest):
{capture_timeline(captures)}
"""


def build_challenge_prompt(
    challenge_title: str,
    date_label: str,
    captures: Sequence[EnrichedCapture]
) -> str:
    return f"""Write a short narrative about how the day engaged with the challenge "{challenge_title}".
Keep events in the order listed.

{LANGUAGE_RULES}

OUTPUT: a strict JSON object, no markdown fences: {{"insight": "..."}}

DATE: {date_label}

CHALLENGE TIMELINE (earliest to latest):
{capture_timeline(captures)}
"""


def build_weekly_prompt(week: WeekSummary, week_finished: bool) -> str:
    """Weekly prompt. Plain prose or {"insight": "..."} are both accepted."""
    active = [day for day in week.days if day.captures]
    blocks = "\n\n".join(day_block(day, i) for i, day in enumerate(active, start=1))
    start = week.days[0].date_key if week.days else ""
    end = week.days[-1].date_key if week.days else ""
    look_ahead = "" if week_finished else (
        "The week is not finished; close with a gentle, non-prescriptive look ahead."
    )
    blocks = blocks or "No days with captures."

    return f"""Write a reflective summary of a whole week, not a single day.
Follow the arc: how the week opened, shifts across the days, where it currently settles.
{look_ahead}

ENTRY COUNT: {len(week.captures)}
LENGTH: 2-3 short paragraphs, at most 120 words.

{LANGUAGE_RULES}

OUTPUT: plain text, or JSON {{"insight": "..."}}. No markdown.

{week.week_label} ({start} to {end})
DAYS (earliest to latest):
{blocks}
"""


def describe_volatility_for_prompt(score: float) -> str:
    if score >= 0.75:
        return "high volatility, frequent mood shifts"
    if score >= 0.4:
        return "moderate volatility, noticeable variation"
    return "low volatility, largely consistent"


def describe_engagement(active_days: int) -> str:
    if active_days >= 25:
        return "consistent daily engagement"
    if active_days >= 15:
        return "regular check-ins"
    if active_days >= 8:
        return "occasional reflections"
    return "sporadic moments captured"


def month_digest(
    month: MonthSummary,
    max_notes: int = MONTH_NOTE_SNIPPETS,
    note_chars: int = NOTE_SNIPPET_CHARS
) -> str:
    """One condensed line per active day, with a bounded number of note snippets."""
    lines = []
    for day in month.days:
        if not day.captures:
            continue
        feelings = ", ".join(describe_mood(c.mood_id) for c in _first_per_mood(day.captures))
        notes = [
            snippet for snippet in (_snippet(c.note, note_chars) for c in day.captures)
            if snippet
        ][:max_notes]
        line = f"{day.date_key} ({len(day.captures)} captures): feelings: {feelings}"
        if notes:
            line += " | notes: " + "; ".join(f'"{n}"' for n in notes)
        lines.append(line)
    return "\n".join(lines)


def build_monthly_prompt(
    month: MonthSummary,
    signals: MonthSignals,
    max_notes: int = MONTH_NOTE_SNIPPETS,
    note_chars: int = NOTE_SNIPPET_CHARS
) -> str:
    """Monthly prompt: aggregate signals plus a bounded day-by-day digest."""
    runner_up = describe_mood(signals.runner_up_mood_id) if signals.runner_up_mood_id else "n/a"
    volatility_pct = round_half_up(signals.volatility_score * 100)
    digest = month_digest(month, max_notes=max_notes, note_chars=note_chars)
    digest = digest or "(no capture data available)"

    return f"""Write a reflective summary of how this month felt and evolved.

MONTH: {month.month_label}

AGGREGATE SIGNALS:
- Dominant feeling: {describe_mood(signals.dominant_mood_id)}
- Runner-up feeling: {runner_up}
- Active days: {signals.active_days} ({describe_engagement(signals.active_days)})
- Total captures: {signals.total_captures}
- Volatility: {volatility_pct}% ({describe_volatility_for_prompt(signals.volatility_score)})
- Last 7 days shift: {signals.last_7_days_shift.value}

DAY-BY-DAY CONTEXT (chronological):
{digest}

INSTRUCTIONS:
- Weave the signals and the day-by-day context into one month-level narrative.
- 2-3 short paragraphs, at most 180 words. Do not list raw numbers.

{LANGUAGE_RULES}

OUTPUT: plain text, or JSON {{"insight": "..."}}. No markdown.
"""
