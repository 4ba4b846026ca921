"""Mood dictionary endpoints"""

import logging

from fastapi import APIRouter, HTTPException, Query

from moodsnap.engine import get_engine

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/moods")
async def list_moods(user_id: str | None = Query(None, description="Include this user's custom moods")):
    """System moods plus the user's custom moods"""
    try:
        engine = get_engine()
        moods = engine.get_moods(user_id)
        return {
            "moods": [m.to_dict() for m in moods],
            "count": len(moods),
            "cache_state": engine.mood_cache.state.value,
        }
    except Exception as e:
        logger.error(f"Failed to list moods: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to list moods: {str(e)}")


@router.post("/moods/invalidate")
async def invalidate_moods():
    """Mark the mood dictionary stale so the next request refetches it"""
    get_engine().invalidate_moods()
    return {"success": True}
