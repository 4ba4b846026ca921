"""Health check endpoints"""

import asyncio
import logging

from fastapi import APIRouter

from moodsnap.engine import get_engine

logger = logging.getLogger(__name__)

router = APIRouter()

# Archive lookup for a user that never has snapshots
HEALTH_CHECK_USER = "__health__"


@router.get("/ping")
async def ping():
    """Lightweight connectivity check - no backend calls"""
    return {"ok": True}


@router.get("/health")
async def health_check():
    """Report active providers, mood cache state and snapshot store reachability"""
    try:
        engine = get_engine()
        provider_info = engine.get_providers_info()
    except Exception as e:
        logger.error(f"Health check failed: {e}", exc_info=True)
        # Don't expose detailed error messages to clients
        return {
            "status": "unhealthy",
            "error": "Service initialization failed"
        }

    try:
        await asyncio.to_thread(engine.store.list_snapshots, HEALTH_CHECK_USER, None, 1)
        store_ok = True
    except Exception as e:
        logger.warning(f"Snapshot store unreachable: {e}")
        store_ok = False

    return {
        "status": "healthy" if store_ok else "degraded",
        "providers": provider_info,
        "mood_cache_state": engine.mood_cache.state.value,
        "snapshot_store_reachable": store_ok,
    }
