"""
core/middleware.py

HTTP middlewares:
- Request logging (method, path, status, duration)
- Sliding session: GET requests with a valid session cookie get a fresh one
- Common security headers
"""

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import Request
from jose import JWTError
from pydantic import ValidationError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.core.blacklist import is_token_blacklisted
from app.core.config import settings
from app.core.tokens import (
    clear_session_cookie,
    create_session_token,
    decode_session_token,
    set_session_cookie,
)

logger = logging.getLogger("app.requests")

CallNext = Callable[[Request], Awaitable[Response]]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with its status code and duration."""

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        log_fn = logger.warning if response.status_code >= 400 else logger.info
        log_fn(
            f"{request.method} {request.url.path} - Status {response.status_code} "
            f"- {duration_ms:.1f}ms"
        )
        return response


class SessionRefreshMiddleware(BaseHTTPMiddleware):
    """
    Re-issues the session cookie on GET requests so active users stay signed in.
    Unreadable, expired or revoked cookies are removed instead.
    """

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        response = await call_next(request)

        token = request.cookies.get(settings.SESSION_COOKIE_NAME)
        if request.method != "GET" or not token:
            return response

        try:
            payload = decode_session_token(token)
        except (JWTError, ValidationError) as e:
            logger.debug(f"Clearing invalid session cookie: {e}")
            clear_session_cookie(response)
            return response

        if await is_token_blacklisted(payload.jti):
            clear_session_cookie(response)
            return response

        set_session_cookie(
            response, create_session_token({"sub": str(payload.sub), "role": payload.role.value})
        )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add common security headers to responses.
    """

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if not settings.DEBUG:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response
