"""Insight endpoints - ensure, fast-load and archive period snapshots"""

import logging
from datetime import date, datetime, timezone

from fastapi import APIRouter, HTTPException, Query

from moodsnap.engine import get_engine
from moodsnap.models.insight import (
    EnsureInsightRequest,
    InsightResponse,
    MonthlySignalsRequest,
    SnapshotListResponse,
)
from moodsnap.types import InsightType

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/insights/{insight_type}", response_model=InsightResponse)
async def ensure_insight(insight_type: InsightType, request: EnsureInsightRequest):
    """
    Ensure the insight for the period containing ``date`` exists

    Returns the stored snapshot when one exists (unless ``force``), otherwise
    generates, validates and stores a new one. Ineligible or empty periods
    return a status without a snapshot.
    """
    if insight_type == InsightType.CHALLENGE and not request.challenge_title:
        raise HTTPException(status_code=422, detail="challenge_title is required for challenge insights")

    try:
        engine = get_engine()
        outcome = await engine.ensure_insight(
            insight_type,
            request.user_id,
            request.day or datetime.now(timezone.utc),
            request.captures,
            force=request.force,
            challenge_title=request.challenge_title,
        )
    except Exception as e:
        logger.error(f"Failed to ensure {insight_type.value} insight: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to ensure insight: {str(e)}"
        )

    return InsightResponse(
        status=outcome.status,
        snapshot=outcome.snapshot.to_dict() if outcome.snapshot else None,
        reason=outcome.reason,
        errors=outcome.errors,
    )


@router.get("/insights/{insight_type}/archive", response_model=SnapshotListResponse)
async def list_insights(
    insight_type: InsightType,
    user_id: str = Query(..., min_length=1, description="Owner"),
    limit: int = Query(50, ge=1, le=500, description="Maximum results to return")
):
    """List stored snapshots of one type, newest period first"""
    try:
        snapshots = get_engine().list_snapshots(user_id, insight_type, limit)
    except Exception as e:
        logger.error(f"Failed to list {insight_type.value} snapshots: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to list snapshots: {str(e)}")

    return SnapshotListResponse(
        snapshots=[s.to_dict() for s in snapshots],
        count=len(snapshots),
    )


@router.get("/insights/{insight_type}")
async def get_insight(
    insight_type: InsightType,
    user_id: str = Query(..., min_length=1, description="Owner"),
    day: date | None = Query(None, alias="date", description="Any day in the period")
):
    """Fast-load a stored snapshot without generating"""
    try:
        snapshot = get_engine().get_snapshot(
            user_id, insight_type, day or datetime.now(timezone.utc)
        )
    except Exception as e:
        logger.error(f"Failed to load {insight_type.value} snapshot: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to load snapshot: {str(e)}")

    if snapshot is None:
        raise HTTPException(status_code=404, detail="Snapshot not found")
    return snapshot.to_dict()


@router.post("/signals/monthly")
async def monthly_signals(request: MonthlySignalsRequest):
    """Deterministic month signals, title phrase and reasoning"""
    try:
        return get_engine().compute_month_signals(
            request.captures,
            request.as_of or datetime.now(timezone.utc),
            user_id=request.user_id,
        )
    except Exception as e:
        logger.error(f"Failed to compute month signals: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to compute signals: {str(e)}")
