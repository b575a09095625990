"""
core/security.py

Password hashing and sign-in throttling:
- bcrypt hashing through passlib
- Per-IP failed sign-in counter and temporary penalty stored in Redis
- Client IP extraction for throttling and the activity log
"""

import logging
from typing import cast

import redis.asyncio as redis
from fastapi import HTTPException, Request, status
from passlib.context import CryptContext

from app.core.blacklist import redis_client
from app.core.config import settings

logger = logging.getLogger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# ------------------------------------------------
# Brute-Force Protection Settings (Redis Keys and Thresholds)
# ------------------------------------------------
FAILED_LOGIN_PREFIX = "failed_signins:ip:"
IP_PENALTY_PREFIX = "ip_penalty:"

TOO_MANY_ATTEMPTS = "Too many failed sign-in attempts. Please try again later."


# ------------------------------------------------
# Password Utilities
# ------------------------------------------------
def get_password_hash(password: str) -> str:
    """Hashes a plain text password."""
    return cast(str, pwd_context.hash(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifies a plain text password against a hash."""
    return cast(bool, pwd_context.verify(plain_password, hashed_password))


# ------------------------------------------------
# Sign-in Throttling
# ------------------------------------------------
async def ensure_ip_not_penalized(client_ip: str) -> None:
    """Raise 429 when the client IP is serving a sign-in penalty."""
    if not redis_client:
        return
    try:
        penalized = await redis_client.exists(f"{IP_PENALTY_PREFIX}{client_ip}")
    except redis.RedisError as e:
        logger.error(f"[THROTTLE] Could not read penalty for {client_ip}: {e}")
        return
    if penalized:
        logger.warning(f"[THROTTLE] Sign-in attempt from penalized IP: {client_ip}")
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=TOO_MANY_ATTEMPTS)


async def register_failed_attempt(client_ip: str) -> None:
    """
    Count a failed sign-in for the IP. Once MAX_FAILED_ATTEMPTS is reached inside
    the window, the IP is penalized and a 429 is raised.
    """
    if not redis_client:
        return
    key = f"{FAILED_LOGIN_PREFIX}{client_ip}"
    try:
        attempts = await redis_client.incr(key)
        if await redis_client.ttl(key) == -1:
            await redis_client.expire(key, settings.FAILED_ATTEMPTS_WINDOW)
        if int(attempts) >= settings.MAX_FAILED_ATTEMPTS:
            await redis_client.setex(
                f"{IP_PENALTY_PREFIX}{client_ip}", settings.IP_PENALTY_DURATION, "penalized"
            )
            await redis_client.delete(key)
        else:
            return
    except redis.RedisError as e:
        logger.error(f"[THROTTLE] Could not record failed attempt for {client_ip}: {e}")
        return

    logger.warning(f"[THROTTLE] IP penalized after {settings.MAX_FAILED_ATTEMPTS} failures: {client_ip}")
    raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=TOO_MANY_ATTEMPTS)


async def reset_failed_attempts(client_ip: str) -> None:
    """Clear the failure counter after a successful sign-in."""
    if not redis_client:
        return
    try:
        await redis_client.delete(f"{FAILED_LOGIN_PREFIX}{client_ip}")
    except redis.RedisError as e:
        logger.error(f"[THROTTLE] Could not reset failed attempts for {client_ip}: {e}")


def get_client_ip(request: Request) -> str:
    """Best-effort client address: first X-Forwarded-For hop, then the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
