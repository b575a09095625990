"""
core/tokens.py

Session token utilities:
- Signed JWT session token with `sub`, `role`, `exp` and a unique `jti`
- Decoding into a validated payload
- Remaining-lifetime helper used when blacklisting on logout
- Setting and clearing the HttpOnly session cookie
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt
from starlette.responses import Response

from app.auth.schemas import TokenPayload
from app.core.config import settings

logger = logging.getLogger(__name__)


# ------------------------------------------------------
# --- Session Token ---
# ------------------------------------------------------
def create_session_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """
    Create a signed session token with expiration and unique JTI.

    Args:
        data (dict[str, Any]): Payload data (must contain 'sub' and 'role').
        expires_delta (timedelta | None): Optional custom lifetime. Defaults to one session.

    Returns:
        str: Encoded JWT.
    """
    if "sub" not in data or "role" not in data:
        logger.error("Session token creation attempt missing 'sub' or 'role' in data.")
        raise ValueError("Session token payload must include 'sub' and 'role'.")

    expire: datetime = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.SESSION_EXPIRE_MINUTES)
    )
    jti: str = str(uuid.uuid4())
    payload: dict[str, Any] = {**data, "exp": expire, "jti": jti}

    logger.debug(f"Issuing session token for sub={data.get('sub')} exp={expire} jti={jti}")
    token = jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return str(token)


def decode_session_token(token: str) -> TokenPayload:
    """
    Verify the signature and expiry of a session token.

    Raises:
        jose.JWTError: If the token is malformed, tampered with or expired.
        pydantic.ValidationError: If required claims are missing.
    """
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    return TokenPayload(**payload)


def seconds_until_expiry(payload: TokenPayload) -> int:
    """Remaining lifetime of a token in whole seconds, never negative."""
    now = datetime.now(timezone.utc).timestamp()
    return max(0, int(payload.exp - now))


# ------------------------------------------------------
# --- Session Cookie ---
# ------------------------------------------------------
def set_session_cookie(response: Response, token: str) -> None:
    """Attach the session token as an HttpOnly cookie valid for one session lifetime."""
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=not settings.DEBUG,
        max_age=settings.session_max_age,
        path="/",
        domain=None,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        samesite="lax",
        secure=not settings.DEBUG,
        path="/",
    )
