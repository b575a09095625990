"""
backend/app/core/limiter.py

SlowAPI rate limiter shared by all routers.

Clients are keyed by their forwarded address so limits hold behind the
frontend proxy. RATE_LIMIT_ENABLED=false turns every limit off (tests).
"""

from slowapi import Limiter

from app.core.config import settings
from app.core.security import get_client_ip

limiter = Limiter(
    key_func=get_client_ip,
    enabled=settings.RATE_LIMIT_ENABLED,
    headers_enabled=False,
)
