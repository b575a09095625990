"""
main.py

Application entrypoint for the Asset Evaluation API.
- Initializes structured logging
- Sets up FastAPI application and middlewares
- Registers all API routers
- Integrates rate limiting via SlowAPI
- Adds common security headers, request logging and sliding sessions
- Configures CORS
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.responses import Response

from app.auth.routes import router as auth_router
from app.auth.routes import users_router
from app.campaign.routes import router as campaign_router
from app.category.routes import router as category_router
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.limiter import limiter
from app.core.logging import init_logging
from app.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    SessionRefreshMiddleware,
)
from app.custom_field.routes import admin_router as custom_field_admin_router
from app.custom_field.routes import router as custom_field_router
from app.database.session import check_database_connection
from app.evaluation.routes import router as evaluation_router
from app.property_type.routes import admin_router as property_type_admin_router
from app.property_type.routes import router as property_type_router
from app.question.routes import answers_router
from app.question.routes import router as question_router
from app.team.routes import router as team_router


# -----------------------------
# FastAPI App Initialization
# -----------------------------
app = FastAPI(title=settings.APP_NAME)

# -----------------------------
# Middleware Configuration
# -----------------------------
init_logging()
app.state.limiter = limiter


async def rate_limit_exceeded_handler(request: Request, exc: Exception) -> Response:
    return _rate_limit_exceeded_handler(request, exc)  # type: ignore[arg-type]


# Only SlowAPI limits go through its handler; sign-in throttling raises a plain 429 HTTPException
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
register_exception_handlers(app)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SessionRefreshMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

# -----------------------------
# CORSMiddleware Configuration
# -----------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------
# API Router Registration
# -----------------------------
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(property_type_router)
app.include_router(property_type_admin_router)
app.include_router(category_router)
app.include_router(question_router)
app.include_router(answers_router)
app.include_router(evaluation_router)
app.include_router(team_router)
app.include_router(custom_field_router)
app.include_router(custom_field_admin_router)
app.include_router(campaign_router)


# -----------------------------
# Health & Root Endpoints
# -----------------------------
@app.get("/health", tags=["Health"])
async def health() -> dict[str, Any]:
    database_ok = await check_database_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.ENVIRONMENT,
        "database": "connected" if database_ok else "unavailable",
    }


@app.get("/", response_class=HTMLResponse, include_in_schema=False)
async def home() -> Any:
    return f"""
    <html>
        <head>
            <title>{settings.APP_NAME}</title>
        </head>
        <body style="font-family: Arial, sans-serif; text-align: center; padding-top: 50px;">
            <h1>Welcome to <span style="color: #2c3e50;">{settings.APP_NAME}</span></h1>
            <p>Property evaluations, questionnaires and scoring.</p>
            <p><a href="/docs">API documentation</a></p>
        </body>
    </html>
    """
