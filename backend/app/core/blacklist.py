"""
backend/app/core/blacklist.py

JWT Blacklist Management using Async Redis

Handles session token blacklisting using an asynchronous Redis client:
- Stores token `jti` (JWT ID) with the token's remaining lifetime
- Allows invalidating sessions on logout
The same client is shared by the login throttle and the read-through cache.
"""

import logging

import redis.asyncio as redis

from app.core.config import settings

# ---------------------------------------------------
# Logger Configuration
# ---------------------------------------------------
logger = logging.getLogger(__name__)

# ---------------------------------------------------
# Redis Client Initialization
# ---------------------------------------------------
redis_client: redis.Redis | None = None  # type: ignore[type-arg]

try:
    # Connections are opened lazily, so this only fails on bad configuration
    redis_client = redis.Redis(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        db=settings.REDIS_DB,
        decode_responses=True,
    )
    logger.info(
        f"[REDIS ASYNC] Initialized async Redis client for {settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}"
    )
except redis.RedisError as e:
    logger.error(f"[REDIS ASYNC] Initialization failed: {e}")
    redis_client = None

# Prefix for all blacklist keys
BLACKLIST_PREFIX = "session_blacklist:"


# ---------------------------------------------------
# Blacklist Management Functions
# ---------------------------------------------------
async def blacklist_token(jti: str, expires_in: int) -> None:
    """
    Blacklist a session token by storing its `jti` in Redis with a TTL.

    Args:
        jti (str): Unique JWT ID from the token payload.
        expires_in (int): Seconds until the token would have expired anyway.
    """
    if not redis_client:
        logger.warning("[BLACKLIST] Redis unavailable: Token not blacklisted.")
        return

    try:
        await redis_client.setex(f"{BLACKLIST_PREFIX}{jti}", expires_in, "true")
        logger.debug(f"[BLACKLIST] Token blacklisted: jti={jti} for {expires_in}s")
    except redis.RedisError as e:
        logger.error(f"[BLACKLIST] Failed to blacklist token: {e}")


async def is_token_blacklisted(jti: str) -> bool:
    """
    Check whether a session token ID (`jti`) has been revoked.

    Returns False when Redis cannot be reached.
    """
    if not redis_client:
        logger.warning("[BLACKLIST] Redis unavailable: Assuming token is not blacklisted.")
        return False

    try:
        exists = await redis_client.exists(f"{BLACKLIST_PREFIX}{jti}")
        return bool(exists == 1)
    except redis.RedisError as e:
        logger.error(f"[BLACKLIST] Failed to check token blacklist status: {e}")
        return False
