"""
auth/routes.py

Handles authentication routes including:
- Sign-up and sign-in (session token issued as HttpOnly cookie)
- Logout with token blacklisting
- Current user profile (/users/me)
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Cookie, Depends, Request, Response, status

from app.auth import services
from app.auth.schemas import (
    AuthSuccessResponse,
    AuthUserResponse,
    SigninRequest,
    SignupRequest,
    UpdateProfileRequest,
)
from app.core.config import settings
from app.core.dependencies import CurrentUserDep, DBDep, oauth2_scheme
from app.core.limiter import limiter
from app.core.schemas import MessageResponse
from app.core.security import get_client_ip
from app.core.tokens import clear_session_cookie, set_session_cookie

# ---------------------------------------------------
# Router Configuration
# ---------------------------------------------------
router = APIRouter(prefix="/auth", tags=["Authentication"])
users_router = APIRouter(prefix="/users", tags=["Users"])
logger = logging.getLogger(__name__)


# ---------------------------------------------------
# Registration
# ---------------------------------------------------
@router.post(
    "/signup",
    response_model=AuthSuccessResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register New User",
    description="Creates a member account with a personal team and starts a session (HttpOnly cookie).",
)
@limiter.limit("5/minute")
async def signup(
    request: Request,
    payload: SignupRequest,
    response: Response,
    db: DBDep,
) -> AuthSuccessResponse:
    result = await services.signup_user(payload, db, get_client_ip(request))
    set_session_cookie(response, result.token)
    return result.response


# ---------------------------------------------------
# Sign-in
# ---------------------------------------------------
@router.post(
    "/signin",
    response_model=AuthSuccessResponse,
    status_code=status.HTTP_200_OK,
    summary="Sign In",
    description="Authenticates with email and password. Returns user info in body; sets session token in HttpOnly cookie.",
)
@limiter.limit("10/minute")
async def signin(
    request: Request,
    payload: SigninRequest,
    response: Response,
    db: DBDep,
) -> AuthSuccessResponse:
    """
    Authenticates a user and sets the session cookie.
    Repeated failures from one IP lead to a temporary 429.
    """
    result = await services.signin_user(payload, db, get_client_ip(request))
    set_session_cookie(response, result.token)
    return result.response


# ---------------------------------------------------
# Logout
# ---------------------------------------------------
@router.post(
    "/logout",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Logout",
    description="Revokes the current session token and clears the session cookie.",
)
async def logout(
    request: Request,
    response: Response,
    db: DBDep,
    current_user: CurrentUserDep,
    token_header: Annotated[str | None, Depends(oauth2_scheme)] = None,
    token_cookie: Annotated[str | None, Cookie(alias=settings.SESSION_COOKIE_NAME)] = None,
) -> MessageResponse:
    await services.logout_user(token_header or token_cookie, current_user, db, get_client_ip(request))
    clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")


# ---------------------------------------------------
# Current User
# ---------------------------------------------------
@users_router.get(
    "/me",
    response_model=AuthUserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get Current User",
)
async def get_me(current_user: CurrentUserDep) -> AuthUserResponse:
    return AuthUserResponse.model_validate(current_user)


@users_router.patch(
    "/me",
    response_model=AuthUserResponse,
    status_code=status.HTTP_200_OK,
    summary="Update Current User",
    description="Updates the display name and/or email of the current user. 409 if the email is taken.",
)
@limiter.limit("10/minute")
async def update_me(
    request: Request,
    payload: UpdateProfileRequest,
    db: DBDep,
    current_user: CurrentUserDep,
) -> AuthUserResponse:
    user = await services.update_profile(current_user, payload, db, get_client_ip(request))
    return AuthUserResponse.model_validate(user)
