"""Insight orchestration - the "ensure an insight exists for period X" operation.

Flow per request:
    CHECK_SNAPSHOT -> (hit and not forced) -> DONE
    CHECK_ELIGIBILITY -> AGGREGATE -> GENERATE -> VALIDATE
        -> valid: PERSIST
        -> invalid / failed / timed out: FALLBACK -> PERSIST

Generated text and mood flow are validated independently; whichever piece
fails is replaced by its deterministic fallback, so a period with captures
always ends with a stored snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone, tzinfo
from typing import TYPE_CHECKING, Any

from moodsnap.config import Settings
from moodsnap.config import settings as default_settings
from moodsnap.core import prompts, time_windows
from moodsnap.core.aggregation import CaptureAggregator, to_samples
from moodsnap.core.fallback import fallback_content, fallback_mood_flow
from moodsnap.core.signals import (
    SignalComputer,
    is_valid_month_phrase,
    month_phrase,
    month_reasoning,
)
from moodsnap.models.capture import Capture
from moodsnap.moods.labels import resolve_mood_color
from moodsnap.types import (
    EnrichedCapture,
    InsightOutcome,
    InsightType,
    MonthSignals,
)
from moodsnap.validation import (
    MoodFlowReading,
    ValidationResult,
    log_validation_warnings,
    parse_insight_response,
    sanitize_text,
    split_sentences,
    validate_insight_text,
    validate_mood_flow,
    validate_mood_flow_labels,
)
from moodsnap.validation.mood_flow import segments_to_dicts

if TYPE_CHECKING:
    from moodsnap.moods.cache import MoodDictionaryCache
    from moodsnap.providers.base import GenerationProvider, SnapshotStoreProvider

logger = logging.getLogger(__name__)

MAX_VIBE_TAGS = 5

# Segment dicts, or a single reading dict
MoodFlowPayload = list[dict[str, Any]] | dict[str, Any]

# Types whose collaborator response carries its own mood flow
MOOD_FLOW_TYPES = frozenset({InsightType.DAILY})


@dataclass
class _Period:
    """Everything needed to generate and persist one period's insight."""
    insight_type: InsightType
    start_date: date
    end_date: date
    captures: list[EnrichedCapture]
    prompt: str
    active_days: int = 1
    signals: MonthSignals | None = None
    phrase: str | None = None
    extra_meta: dict[str, Any] = field(default_factory=dict)


@dataclass
class _Draft:
    content: str
    mood_flow: MoodFlowPayload
    content_source: str
    mood_flow_source: str
    errors: list[str]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InsightOrchestrator:
    """Ensures one durable insight snapshot per user and period."""

    def __init__(
        self,
        store: SnapshotStoreProvider,
        provider: GenerationProvider | None = None,
        mood_cache: MoodDictionaryCache | None = None,
        settings: Settings | None = None,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] = _utc_now
    ):
        self.store = store
        self.provider = provider
        self.mood_cache = mood_cache
        self.settings = settings or default_settings
        self.tz = tz if tz is not None else time_windows.resolve_timezone(self.settings.timezone)
        self._clock = clock

        self.aggregator = CaptureAggregator(tz=self.tz, mood_cache=mood_cache)
        self.signal_computer = SignalComputer(tz=self.tz, mood_cache=mood_cache)

    # ===== Public API =====

    async def ensure(
        self,
        insight_type: InsightType | str,
        user_id: str,
        day: datetime | date,
        captures: Iterable[Capture],
        force: bool = False,
        challenge_title: str | None = None
    ) -> InsightOutcome:
        """Dispatch to the ensure operation for ``insight_type``."""
        insight_type = InsightType(insight_type)
        if insight_type == InsightType.DAILY:
            return await self.ensure_daily(user_id, day, captures, force=force)
        if insight_type == InsightType.WEEKLY:
            return await self.ensure_weekly(user_id, day, captures, force=force)
        if insight_type == InsightType.MONTHLY:
            return await self.ensure_monthly(user_id, day, captures, force=force)
        if not challenge_title:
            raise ValueError("challenge_title is required for challenge insights")
        return await self.ensure_challenge(user_id, day, captures, challenge_title, force=force)

    async def ensure_daily(
        self,
        user_id: str,
        day: datetime | date,
        captures: Iterable[Capture],
        force: bool = False
    ) -> InsightOutcome:
        """Ensure the daily insight for the local day containing ``day``."""
        target = time_windows.local_date(day, self.tz)

        cached = await self._cached(user_id, InsightType.DAILY, target, force)
        if cached:
            return cached

        if not force and not self.settings.auto_daily_insights:
            return InsightOutcome(status="disabled", reason="Automatic daily insights are off")

        await self._refresh_moods(user_id)
        enriched = self.aggregator.for_day(target, captures)
        if not enriched:
            return self._empty(InsightType.DAILY, target)

        prompt_captures = self._cap(enriched)
        period = _Period(
            insight_type=InsightType.DAILY,
            start_date=target,
            end_date=target,
            captures=enriched,
            prompt=prompts.build_daily_prompt(time_windows.day_label(target), prompt_captures),
        )
        return await self._generate_and_persist(user_id, period, force)

    async def ensure_challenge(
        self,
        user_id: str,
        day: datetime | date,
        captures: Iterable[Capture],
        challenge_title: str,
        force: bool = False
    ) -> InsightOutcome:
        """Ensure the challenge narrative for a day's challenge captures."""
        target = time_windows.local_date(day, self.tz)

        cached = await self._cached(user_id, InsightType.CHALLENGE, target, force)
        if cached:
            return cached

        await self._refresh_moods(user_id)
        enriched = self.aggregator.for_day(target, captures)
        if not enriched:
            return self._empty(InsightType.CHALLENGE, target)

        period = _Period(
            insight_type=InsightType.CHALLENGE,
            start_date=target,
            end_date=target,
            captures=enriched,
            prompt=prompts.build_challenge_prompt(
                challenge_title, time_windows.day_label(target), self._cap(enriched)
            ),
            extra_meta={"challenge_title": challenge_title},
        )
        return await self._generate_and_persist(user_id, period, force)

    async def ensure_weekly(
        self,
        user_id: str,
        day: datetime | date,
        captures: Iterable[Capture],
        force: bool = False
    ) -> InsightOutcome:
        """Ensure the weekly insight for the Sunday-Saturday week containing ``day``."""
        week_start, week_end = time_windows.week_range(day, self.tz)
        start_date, end_date = week_start.date(), week_end.date()

        cached = await self._cached(user_id, InsightType.WEEKLY, start_date, force)
        if cached:
            return cached

        await self._refresh_moods(user_id)
        captures = list(captures)
        week = self.aggregator.build_week_summary(start_date, captures)
        enriched = week.captures
        if not enriched:
            return self._empty(InsightType.WEEKLY, start_date)

        prompt_week = week
        if len(enriched) > self.settings.max_prompt_captures:
            kept = [c.capture for c in self._cap(enriched)]
            prompt_week = self.aggregator.build_week_summary(start_date, kept)

        week_finished = self._clock() > week_end
        period = _Period(
            insight_type=InsightType.WEEKLY,
            start_date=start_date,
            end_date=end_date,
            captures=enriched,
            prompt=prompts.build_weekly_prompt(prompt_week, week_finished),
            active_days=sum(1 for d in week.days if d.captures),
            extra_meta={"week_label": week.week_label, "week_finished": week_finished},
        )
        return await self._generate_and_persist(user_id, period, force)

    async def ensure_monthly(
        self,
        user_id: str,
        day: datetime | date,
        captures: Iterable[Capture],
        force: bool = False
    ) -> InsightOutcome:
        """Ensure the monthly insight for the calendar month containing ``day``.

        Unless forced, the month must have reached the configured day of
        month and have enough active days.
        """
        month_start, month_end = time_windows.month_range(day, self.tz)
        start_date, end_date = month_start.date(), month_end.date()

        cached = await self._cached(user_id, InsightType.MONTHLY, start_date, force)
        if cached:
            return cached

        now = self._clock()
        as_of = min(now, month_end)
        if as_of < month_start:
            return InsightOutcome(status="ineligible", reason="Month has not started yet")

        as_of_day = time_windows.local_date(as_of, self.tz).day
        if not force and as_of_day < self.settings.monthly_min_day_of_month:
            return InsightOutcome(
                status="ineligible",
                reason=(
                    f"Monthly insights unlock on day {self.settings.monthly_min_day_of_month} "
                    f"(today is day {as_of_day})"
                ),
            )

        await self._refresh_moods(user_id)
        captures = list(captures)
        month = self.aggregator.build_month_summary(start_date, captures, through=as_of)
        enriched = month.captures
        if not enriched:
            return self._empty(InsightType.MONTHLY, start_date)

        signals = self.signal_computer.compute([c.capture for c in enriched], as_of)
        if not force and signals.active_days < self.settings.monthly_min_active_days:
            return InsightOutcome(
                status="ineligible",
                reason=(
                    f"Need {self.settings.monthly_min_active_days} active days, "
                    f"have {signals.active_days}"
                ),
            )

        phrase = month_phrase(signals.mood_counts)
        if not is_valid_month_phrase(phrase):
            logger.warning(f"Month phrase {phrase!r} failed validation, omitting it")
            phrase = None

        period = _Period(
            insight_type=InsightType.MONTHLY,
            start_date=start_date,
            end_date=end_date,
            captures=enriched,
            prompt=prompts.build_monthly_prompt(
                month,
                signals,
                max_notes=self.settings.month_note_snippets,
                note_chars=self.settings.note_snippet_chars,
            ),
            active_days=signals.active_days,
            signals=signals,
            phrase=phrase,
            extra_meta={
                "month_label": month.month_label,
                "signals": signals.to_dict(),
                "phrase": phrase,
                "reasoning": month_reasoning(phrase, signals, self.mood_cache) if phrase else None,
            },
        )
        return await self._generate_and_persist(user_id, period, force)

    # ===== Steps =====

    async def _cached(
        self,
        user_id: str,
        insight_type: InsightType,
        start_date: date,
        force: bool
    ) -> InsightOutcome | None:
        if force:
            return None
        snapshot = await asyncio.to_thread(self.store.fetch, user_id, insight_type, start_date)
        if snapshot is None:
            return None
        logger.debug(f"Snapshot hit: {user_id}/{insight_type.value}/{start_date}")
        return InsightOutcome(status="cached", snapshot=snapshot)

    async def _refresh_moods(self, user_id: str) -> None:
        if self.mood_cache is not None:
            await asyncio.to_thread(self.mood_cache.ensure_fresh, user_id)

    def _empty(self, insight_type: InsightType, start_date: date) -> InsightOutcome:
        logger.info(f"No captures for {insight_type.value} insight starting {start_date}")
        return InsightOutcome(status="empty", reason="Nothing to summarize")

    def _cap(self, enriched: list[EnrichedCapture]) -> list[EnrichedCapture]:
        """Most recent captures only, still in chronological order."""
        limit = self.settings.max_prompt_captures
        if len(enriched) <= limit:
            return enriched
        logger.info(f"Prompt capped to the latest {limit} of {len(enriched)} captures")
        return enriched[-limit:]

    async def _generate(self, prompt: str) -> tuple[str | None, list[str]]:
        """Call the collaborator off the event loop. Never raises."""
        if self.provider is None:
            return None, ["No generation provider configured"]

        timeout = self.settings.generation_timeout
        try:
            raw = await asyncio.wait_for(
                asyncio.to_thread(self.provider.generate, prompt),
                timeout=timeout,
            )
            return raw, []
        except asyncio.TimeoutError:
            logger.warning(f"Generation timed out after {timeout}s, using fallback")
            return None, [f"Generation timed out after {timeout}s"]
        except NotImplementedError:
            logger.info(f"Generation provider {self.provider.get_name()} does not generate text")
            return None, ["Generation provider does not generate text"]
        except Exception as e:
            logger.error(f"Generation failed, using fallback: {e}", exc_info=True)
            return None, [f"Generation failed: {e}"]

    def _check_language(self, label: str, result: ValidationResult) -> bool:
        """Apply the leakage policy. Returns True when the piece may be kept."""
        if result.valid:
            return True
        if self.settings.label_leakage_policy == "reject":
            logger.warning(f"{label} rejected: {result.errors}")
            return False
        log_validation_warnings(label, result)
        return True

    def _validate(self, period: _Period, raw: str | None, errors: list[str]) -> _Draft:
        """Keep whichever pieces of the response pass validation."""
        content: str | None = None
        flow: MoodFlowPayload | None = None
        errors = list(errors)

        if raw is not None:
            parsed = parse_insight_response(raw, period.insight_type)
            if not parsed.success:
                errors.append(f"Parse error: {parsed.error}")
                logger.warning(f"{period.insight_type.value} response unusable: {parsed.error}")
            else:
                text = sanitize_text(parsed.data.get("insight"))
                if not text:
                    errors.append("Response has no insight text")
                else:
                    check = validate_insight_text(text, strict=self.settings.strict_language_checks)
                    if self._check_language("Insight text", check):
                        content = text
                    errors.extend(check.errors)

                if period.insight_type in MOOD_FLOW_TYPES:
                    flow, flow_errors = self._validate_flow(parsed.data.get("mood_flow"))
                    errors.extend(flow_errors)

        samples = to_samples(period.captures)
        content_source = "generated"
        if content is None:
            fallback_segments = fallback_mood_flow(samples)
            content = fallback_content(
                period.insight_type,
                fallback_segments,
                capture_count=len(period.captures),
                active_days=period.active_days,
                phrase=period.phrase,
            )
            content_source = "fallback"

        flow_source = "generated"
        if flow is None:
            flow = segments_to_dicts(fallback_mood_flow(samples))
            flow_source = "fallback"

        return _Draft(
            content=content,
            mood_flow=flow,
            content_source=content_source,
            mood_flow_source=flow_source,
            errors=errors,
        )

    def _validate_flow(self, data: Any) -> tuple[MoodFlowPayload | None, list[str]]:
        if data is None:
            return None, ["Response has no mood_flow"]

        result = validate_mood_flow(data)
        if not result.valid:
            logger.warning(f"Mood flow failed validation: {result.errors}")
            return None, result.errors

        decoded = result.data
        if isinstance(decoded, MoodFlowReading):
            reading = {
                "title": decoded.title,
                "subtitle": decoded.subtitle,
                "confidence": decoded.confidence,
                "tags": decoded.tags,
            }
            check = validate_insight_text(f"{decoded.title} {decoded.subtitle}")
            if not self._check_language("Mood flow reading", check):
                return None, check.errors
            return reading, check.errors

        if not decoded.segments:
            # An empty flow is valid but says nothing; use the captures instead
            return None, []

        check = validate_mood_flow_labels(decoded.segments)
        if not self._check_language("Mood flow", check):
            return None, check.errors
        return segments_to_dicts(decoded.segments), check.errors

    def _mood_summary(self, period: _Period, draft: _Draft) -> dict[str, Any]:
        tag_counts = Counter(tag for c in period.captures for tag in c.tags)
        vibe_tags = [tag for tag, _ in tag_counts.most_common(MAX_VIBE_TAGS)]

        mood_colors: list[str] = []
        for capture in period.captures:
            color = resolve_mood_color(
                capture.mood_id, capture.capture.mood_name_snapshot, self.mood_cache
            )
            if color not in mood_colors:
                mood_colors.append(color)

        meta: dict[str, Any] = {
            "capture_count": len(period.captures),
            "active_days": period.active_days,
            "source": {
                "content": draft.content_source,
                "mood_flow": draft.mood_flow_source,
            },
            "provider": self.provider.get_name() if self.provider else None,
            "validation_errors": draft.errors,
        }
        meta.update(period.extra_meta)

        return {
            "vibe_tags": vibe_tags,
            "mood_colors": mood_colors,
            "mood_flow": draft.mood_flow,
            "sentences": split_sentences(draft.content),
            "meta": meta,
        }

    async def _generate_and_persist(
        self,
        user_id: str,
        period: _Period,
        force: bool
    ) -> InsightOutcome:
        raw, errors = await self._generate(period.prompt)
        draft = self._validate(period, raw, errors)
        mood_summary = self._mood_summary(period, draft)

        snapshot = await asyncio.to_thread(
            self.store.upsert,
            user_id,
            period.insight_type,
            period.start_date,
            period.end_date,
            draft.content,
            mood_summary,
            [c.id for c in period.captures],
            force,
        )

        if not force and snapshot.content != draft.content:
            # Another writer stored this period first; its row stands
            logger.info(
                f"{period.insight_type.value} snapshot for {user_id} starting "
                f"{period.start_date} was written concurrently, keeping existing"
            )
            return InsightOutcome(status="cached", snapshot=snapshot)

        generated = draft.content_source == "generated" and draft.mood_flow_source == "generated"
        if period.insight_type not in MOOD_FLOW_TYPES:
            generated = draft.content_source == "generated"

        status = "generated" if generated else "fallback"
        logger.info(
            f"Stored {period.insight_type.value} insight for {user_id} starting "
            f"{period.start_date} ({status})"
        )
        return InsightOutcome(status=status, snapshot=snapshot, errors=draft.errors)
