"""Data model for captures (timestamped mood events)"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

DEFAULT_MOOD_ID = "neutral"


class Capture(BaseModel):
    """A single mood capture. Read-only input to the engine."""
    id: str = Field(..., min_length=1, description="Capture ID")
    created_at: datetime = Field(..., description="When the capture was taken (ISO-8601)")
    mood_id: str | None = Field(None, description="System mood ID or custom_<uuid>")
    mood_name_snapshot: str = Field("", description="Mood display name frozen at capture time")
    note: str | None = Field(None, description="Optional journal note")
    tags: list[str] = Field(default_factory=list, description="Capture tags")
    include_in_insights: bool = Field(True, description="Whether insights may use this capture")
    use_photo_for_insight: bool = Field(False, description="Whether the photo may inform insights")
    user_id: str | None = Field(None, description="Owner, None for guest captures")

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are stored as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def effective_mood_id(self) -> str:
        """Mood ID used for counting (absent IDs count as neutral)"""
        return self.mood_id or DEFAULT_MOOD_ID
