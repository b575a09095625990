"""
auth/services.py

Handles authentication-related business logic:
- Sign-up with a personal team and welcome email
- Sign-in with per-IP brute-force protection
- Logout by blacklisting the session token
- Profile updates for the current user
"""

import logging

from fastapi import HTTPException, status
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.schemas import (
    AuthSuccessResponse,
    AuthUserResponse,
    SessionResult,
    SigninRequest,
    SignupRequest,
    UpdateProfileRequest,
)
from app.core.blacklist import blacklist_token
from app.core.email import send_welcome_email
from app.core.security import (
    ensure_ip_not_penalized,
    get_password_hash,
    register_failed_attempt,
    reset_failed_attempts,
    verify_password,
)
from app.core.tokens import create_session_token, decode_session_token, seconds_until_expiry
from app.database.enums import ActivityType, UserRole
from app.database.models import User
from app.team.services import TeamService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def _issue_session(user: User, message: str) -> SessionResult:
    token = create_session_token({"sub": str(user.id), "role": user.role.value})
    return SessionResult(
        token=token,
        response=AuthSuccessResponse(message=message, user=AuthUserResponse.model_validate(user)),
    )


async def _get_user_by_email(db: AsyncSession, email: str) -> User | None:
    return (await db.execute(select(User).filter(User.email == email))).scalar_one_or_none()


# ------------------------------------------------
# Sign-up
# ------------------------------------------------
async def signup_user(payload: SignupRequest, db: AsyncSession, client_ip: str) -> SessionResult:
    """
    Registers a new member together with a personal team they own.
    User, team, membership and activity rows are committed in one transaction.
    """
    if await _get_user_by_email(db, payload.email):
        logger.warning(f"Sign-up attempt with existing email: {payload.email}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="User with this email already exists"
        )

    new_user = User(
        name=payload.full_name,
        email=payload.email,
        hashed_password=get_password_hash(payload.password),
        role=UserRole.MEMBER,
    )
    db.add(new_user)
    await db.flush()

    teams = TeamService(db)
    team = await teams.create_personal_team(new_user)
    await teams.log_activity(new_user.id, ActivityType.SIGN_UP, client_ip, team_id=team.id)
    await teams.log_activity(new_user.id, ActivityType.CREATE_TEAM, client_ip, team_id=team.id)

    await db.commit()
    await db.refresh(new_user)
    logger.info(f"New user registered: {new_user.email} (ID: {new_user.id})")

    try:
        await send_welcome_email(new_user.email, new_user.name)
    except Exception as e:
        # Sign-up stands even when the welcome email fails
        logger.error(f"Failed to send welcome email to {new_user.email}: {e}")

    return _issue_session(new_user, "Account created successfully")


# ------------------------------------------------
# Sign-in
# ------------------------------------------------
async def signin_user(payload: SigninRequest, db: AsyncSession, client_ip: str) -> SessionResult:
    """Authenticates by email and password; failures count toward the IP penalty."""
    await ensure_ip_not_penalized(client_ip)

    user = await _get_user_by_email(db, payload.email)
    is_password_correct = bool(
        user and user.deleted_at is None and verify_password(payload.password, user.hashed_password)
    )

    if not user or not is_password_correct:
        logger.warning(f"Failed sign-in attempt for email: {payload.email} from IP: {client_ip}")
        await register_failed_attempt(client_ip)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    await reset_failed_attempts(client_ip)
    await TeamService(db).log_activity(user.id, ActivityType.SIGN_IN, client_ip)
    await db.commit()

    logger.info(f"User signed in successfully: {user.email} from IP: {client_ip}")
    return _issue_session(user, "Signed in successfully")


# ------------------------------------------------
# Logout
# ------------------------------------------------
async def logout_user(token: str | None, user: User, db: AsyncSession, client_ip: str) -> None:
    """Blacklists the session token for its remaining lifetime and records the sign-out."""
    if token:
        try:
            payload = decode_session_token(token)
            ttl = seconds_until_expiry(payload)
            if ttl > 0:
                await blacklist_token(payload.jti, ttl)
                logger.info(f"Session token blacklisted (JTI: {payload.jti}) for {ttl} seconds.")
        except (JWTError, ValidationError) as e:
            # Unreadable token: nothing to revoke
            logger.warning(f"Error decoding token during logout: {e}")

    await TeamService(db).log_activity(user.id, ActivityType.SIGN_OUT, client_ip)
    await db.commit()
    logger.info(f"User signed out: {user.email}")


# ------------------------------------------------
# Profile
# ------------------------------------------------
async def update_profile(
    user: User, payload: UpdateProfileRequest, db: AsyncSession, client_ip: str
) -> User:
    """Updates name and/or email of the current user."""
    if payload.email and payload.email != user.email:
        existing = await _get_user_by_email(db, payload.email)
        if existing and existing.id != user.id:
            logger.warning(f"User {user.id} tried to take email already in use: {payload.email}")
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already in use")
        user.email = payload.email

    if payload.name is not None:
        user.name = payload.name

    await TeamService(db).log_activity(user.id, ActivityType.UPDATE_ACCOUNT, client_ip)
    await db.commit()
    await db.refresh(user)
    logger.info(f"User {user.id} updated account details")
    return user
