"""
backend/app/core/cache.py

Read-through JSON cache on the shared async Redis client.
Every failure is logged and treated as a cache miss.
"""

import json
import logging
from typing import Any

import redis.asyncio as redis

from app.core.blacklist import redis_client
from app.core.config import settings

logger = logging.getLogger(__name__)

CACHE_PREFIX = settings.CACHE_PREFIX
DEFAULT_CACHE_TTL = settings.DEFAULT_CACHE_TTL

# Namespace shared by every cached view of the evaluation catalog
CATALOG_NS = "catalog"


def cache_key(namespace: str, identifier: Any) -> str:
    """Generate a simple cache key."""
    return f"{CACHE_PREFIX}{namespace}:{identifier}"


async def get_cached(key: str) -> Any | None:
    """Return the decoded JSON value stored under `key`, or None."""
    if not redis_client:
        return None
    try:
        data = await redis_client.get(key)
    except redis.RedisError as e:
        logger.error(f"[CACHE READ ERROR] Failed reading {key}: {e}")
        return None
    if data is None:
        logger.debug(f"[CACHE MISS] {key}")
        return None
    logger.debug(f"[CACHE HIT] {key}")
    return json.loads(data)


async def set_cached(key: str, value: Any, ttl: int = DEFAULT_CACHE_TTL) -> None:
    """Store a JSON-serializable value under `key`."""
    if not redis_client:
        return
    try:
        await redis_client.set(key, json.dumps(value), ex=ttl)
        logger.debug(f"[CACHE SET] {key} ttl={ttl}")
    except redis.RedisError as e:
        logger.error(f"[CACHE WRITE ERROR] Failed writing {key}: {e}")


async def invalidate(*keys: str) -> None:
    """Delete the given keys."""
    if not redis_client or not keys:
        return
    try:
        await redis_client.delete(*keys)
    except redis.RedisError as e:
        logger.error(f"[CACHE ERROR] Failed deleting {keys}: {e}")


async def invalidate_pattern(pattern: str) -> None:
    """Delete Redis keys matching the given pattern."""
    if not redis_client:
        return
    deleted = 0
    try:
        async for key in redis_client.scan_iter(match=pattern):
            await redis_client.delete(key)
            deleted += 1
        logger.info(f"[CACHE] Deleted {deleted} keys matching pattern {pattern}")
    except redis.RedisError as e:
        logger.error(f"[CACHE ERROR] Failed pattern deletion for {pattern}: {e}")


async def invalidate_catalog() -> None:
    """Drop every cached catalog view after an admin write."""
    await invalidate_pattern(f"{CACHE_PREFIX}{CATALOG_NS}:*")
