"""
core/exceptions.py

Standard error responses for the API:
- Handlers mapping request validation failures to 400
- Catch-all handler for database errors (500)
- Logging 404 handler for unknown routes
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Returns 400 with the validation issues instead of FastAPI's default 422."""
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    logger.info(f"Invalid input on {request.method} {request.url.path}: {len(errors)} error(s)")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid input", "errors": jsonable_encoder(errors)},
    )


async def database_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Logs unhandled database errors and returns a generic 500."""
    logger.exception(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    """Logs 404s; keeps the original detail when a route raised it explicitly."""
    detail = exc.detail if isinstance(exc, StarletteHTTPException) else "Not Found"
    logger.warning(f"404 Not Found: {request.method} {request.url.path}")
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": detail})


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the shared exception handlers to the application."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(404, not_found_handler)
