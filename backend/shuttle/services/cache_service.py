"""
Redis cache for the merged route catalog.

What we cache:
  - The merged route list (schedule + vehicle details), JSON-serialized
  - Key: "routes:merged"

Invalidation:
  - Any catalog write (route CRUD, vehicle details) deletes the key
  - TTL as safety net (REDIS_CACHE_TTL)

Seat counts are never cached: availability must reflect live bookings.
Every Redis failure is logged and treated as a miss, so the service keeps
working without a cache.
"""

import json
from typing import Optional

import redis.asyncio as redis
from shuttle.core.config import get_settings
from shuttle.core.logging import get_logger
from shuttle.core.metrics import record_cache_operation

logger = get_logger(__name__)
settings = get_settings()

ROUTES_KEY = "routes:merged"

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled or down."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            await _redis_client.ping()
            logger.info("redis_connected", url=settings.REDIS_URL)
        except Exception as e:
            logger.error("redis_connection_failed", error=str(e))
            _redis_client = None
            return None

    return _redis_client


async def close_redis() -> None:
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


async def get_cached_routes() -> Optional[list[dict]]:
    client = await get_redis()
    if not client:
        return None

    try:
        data = await client.get(ROUTES_KEY)
        record_cache_operation("get", hit=data is not None)
        if data:
            return json.loads(data)
    except Exception as e:
        logger.error("cache_get_error", key=ROUTES_KEY, error=str(e))

    return None


async def set_cached_routes(routes: list[dict]) -> None:
    client = await get_redis()
    if not client:
        return

    try:
        await client.setex(ROUTES_KEY, settings.REDIS_CACHE_TTL, json.dumps(routes, ensure_ascii=False))
        logger.debug("cache_set", key=ROUTES_KEY, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        logger.error("cache_set_error", key=ROUTES_KEY, error=str(e))


async def invalidate_route_cache() -> None:
    client = await get_redis()
    if not client:
        return

    try:
        await client.delete(ROUTES_KEY)
        logger.info("cache_invalidated", key=ROUTES_KEY)
    except Exception as e:
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}
