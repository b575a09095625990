"""
backend/app/core/dependencies.py

Authentication and Authorization Dependencies

Provides authentication and role-based access control (RBAC) for FastAPI routes:
- Validates session tokens from Bearer header OR the HttpOnly session cookie
- Checks against blacklisted tokens (logout protection)
- Retrieves the authenticated, non-deleted user from the database
- Restricts access based on user roles

Pagination Dependency:
- Provides reusable dependency for pagination (skip, limit).
"""

import logging
from collections.abc import Callable, Coroutine
from typing import Annotated, Any

from fastapi import Cookie, Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.blacklist import is_token_blacklisted
from app.core.config import settings
from app.core.tokens import decode_session_token
from app.database.enums import UserRole
from app.database.models import User
from app.database.session import get_db

# ---------------------------------------------------
# Logger Configuration
# ---------------------------------------------------
logger = logging.getLogger(__name__)

# ---------------------------------------------------
# Bearer Configuration
# ---------------------------------------------------
# auto_error=False so a missing header falls through to the cookie
oauth2_scheme: OAuth2PasswordBearer = OAuth2PasswordBearer(
    tokenUrl="/auth/signin", auto_error=False
)

# ---------------------------------------------------
# Role Sets
# ---------------------------------------------------
CATALOG_ADMIN_ROLES: tuple[UserRole, ...] = (UserRole.OWNER, UserRole.ADMIN, UserRole.SUPERUSER)
IMPORT_ROLES: tuple[UserRole, ...] = (UserRole.ADMIN, UserRole.SUPERUSER)

DBDep = Annotated[AsyncSession, Depends(get_db)]


# ---------------------------------------------------
# Pagination Dependency
# ---------------------------------------------------
class PaginationParams:
    """
    Dependency that provides pagination parameters from query parameters.
    """

    def __init__(
        self,
        skip: int = Query(0, ge=0, description="Number of records to skip for pagination"),
        limit: int = Query(20, ge=1, le=500, description="Maximum number of records to return"),
    ):
        self.skip = skip
        self.limit = limit


# ---------------------------------------------------
# Authentication Functions
# ---------------------------------------------------


async def get_current_user(
    token_header: Annotated[str | None, Depends(oauth2_scheme)] = None,
    token_cookie: Annotated[str | None, Cookie(alias=settings.SESSION_COOKIE_NAME)] = None,
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Authenticate the current user from the session token,
    checking the Bearer header first, then the session cookie.

    Raises:
        HTTPException: 401 Unauthorized if authentication fails.
    """
    token = token_header or token_cookie

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if token is None:
        logger.debug("[AUTH] No token found in Authorization header or session cookie.")
        raise credentials_exception

    try:
        token_data = decode_session_token(token)
    except (JWTError, ValidationError) as e:
        logger.warning(f"[AUTH] Session token decoding/validation failed: {e}")
        raise credentials_exception

    if await is_token_blacklisted(token_data.jti):
        logger.warning(f"[AUTH] Blacklisted token detected: jti={token_data.jti}")
        raise credentials_exception

    result = await db.execute(select(User).filter(User.id == token_data.sub))
    user = result.scalar_one_or_none()

    if not user:
        logger.warning(f"[AUTH] Token valid but no matching user found: user_id={token_data.sub}")
        raise credentials_exception

    if user.deleted_at is not None:
        logger.warning(f"[AUTH] Authentication attempt by deleted user: {user.id}")
        raise credentials_exception

    logger.debug(
        f"[AUTH] User {user.id} authenticated via {'Header' if token_header else 'Cookie'}."
    )
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


# ---------------------------------------------------
# Authorization Functions (Role-Based)
# ---------------------------------------------------


def require_roles(*roles: UserRole) -> Callable[..., Coroutine[Any, Any, User]]:
    """
    Dependency to restrict access to users having any of the specified roles.
    """

    async def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            logger.warning(
                f"[RBAC] Access denied: User {user.id} with role {user.role} attempted access (allowed roles: {roles})"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied for role: {user.role.value}",
            )
        return user

    return checker


require_catalog_admin = require_roles(*CATALOG_ADMIN_ROLES)
require_importer = require_roles(*IMPORT_ROLES)

CatalogAdminDep = Annotated[User, Depends(require_catalog_admin)]
ImporterDep = Annotated[User, Depends(require_importer)]
