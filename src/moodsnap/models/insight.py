"""Request and response models for insight endpoints"""

from datetime import date, datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from moodsnap.models.capture import Capture


class EnsureInsightRequest(BaseModel):
    """Request model for ensuring a period's insight"""
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., min_length=1, description="Owner of the captures")
    day: date | None = Field(None, alias="date", description="Any day in the period (defaults to today)")
    captures: list[Capture] = Field(default_factory=list, description="Candidate captures")
    force: bool = Field(False, description="Regenerate even if a snapshot exists")
    challenge_title: str | None = Field(None, description="Required for challenge insights")


class InsightResponse(BaseModel):
    """Outcome of an ensure-insight request"""
    status: str = Field(..., description="cached, generated, fallback, ineligible, empty or disabled")
    snapshot: dict[str, Any] | None = Field(None, description="Stored snapshot, if any")
    reason: str | None = Field(None, description="Why nothing was stored")
    errors: list[str] = Field(default_factory=list, description="Generation and validation errors")


class SnapshotListResponse(BaseModel):
    """Archive listing"""
    snapshots: list[dict[str, Any]]
    count: int


class MonthlySignalsRequest(BaseModel):
    """Request model for computing month signals without generating"""
    user_id: str | None = Field(None, description="Owner, used to resolve custom mood names")
    as_of: datetime | None = Field(None, description="Cut-off instant (defaults to now)")
    captures: list[Capture] = Field(default_factory=list)

    @field_validator("as_of")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        # Naive cut-offs are read as UTC, like capture timestamps
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
