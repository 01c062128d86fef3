"""
Redis cache for the public session listings.

Keys: "sessions:list:event={event_id}&upcoming={upcoming_only}", one per
event and filter, holding the JSON listing including seat availability at
listing time. TTL is SESSION_CACHE_TTL.

An accepted registration drops the listings of its own event. An order
adjustment can move lines between events, so it drops every listing.
Admission never reads this cache; it counts seats inside its own
transaction.

Redis errors are logged and treated as a miss: the listing is then served
from the database.
"""

import json
from typing import Optional

from event_registration.core.config import get_settings
from event_registration.core.logging import get_logger
from event_registration.core.metrics import record_cache_operation
from event_registration.infrastructure.redis_client import get_redis

logger = get_logger(__name__)
settings = get_settings()

SESSION_LIST_PREFIX = "sessions:list:"


def session_list_key(event_id: int, upcoming_only: bool) -> str:
    return f"{SESSION_LIST_PREFIX}event={event_id}&upcoming={upcoming_only}"


def _invalidation_pattern(event_id: Optional[int]) -> str:
    if event_id is None:
        return f"{SESSION_LIST_PREFIX}*"
    return f"{SESSION_LIST_PREFIX}event={event_id}&*"


async def get_cached_sessions(event_id: int, upcoming_only: bool) -> Optional[dict]:
    client = await get_redis()
    if not client:
        return None

    key = session_list_key(event_id, upcoming_only)
    try:
        raw = await client.get(key)
    except Exception as e:
        logger.error("session_cache_read_failed", key=key, error=str(e))
        return None

    record_cache_operation("get", hit=raw is not None)
    return json.loads(raw) if raw else None


async def set_cached_sessions(event_id: int, upcoming_only: bool, listing: dict) -> None:
    client = await get_redis()
    if not client:
        return

    key = session_list_key(event_id, upcoming_only)
    try:
        await client.setex(key, settings.SESSION_CACHE_TTL, json.dumps(listing, default=str))
    except Exception as e:
        logger.error("session_cache_write_failed", key=key, error=str(e))
        return
    record_cache_operation("set")


async def invalidate_session_cache(event_id: Optional[int] = None) -> int:
    """
    Drop cached listings for one event, or for all events when event_id is None.
    Returns the number of keys deleted.
    """
    client = await get_redis()
    if not client:
        return 0

    pattern = _invalidation_pattern(event_id)
    deleted = 0
    try:
        async for key in client.scan_iter(match=pattern, count=100):
            deleted += await client.delete(key)
    except Exception as e:
        logger.error("session_cache_invalidation_failed", pattern=pattern, error=str(e))
        return deleted

    logger.debug("session_cache_invalidated", event_id=event_id, keys_deleted=deleted)
    return deleted


async def get_cache_stats() -> dict:
    """Listing cache state for /health."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        cached_listings = 0
        async for _ in client.scan_iter(match=f"{SESSION_LIST_PREFIX}*", count=100):
            cached_listings += 1
    except Exception as e:
        return {"status": "error", "error": str(e)}

    hits = info.get("keyspace_hits", 0)
    misses = info.get("keyspace_misses", 0)
    return {
        "status": "connected",
        "cached_listings": cached_listings,
        "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
    }
