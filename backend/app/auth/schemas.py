"""
auth/schemas.py

Defines Pydantic models for authentication flows:
- Sign-up and sign-in request payloads
- Session token payload structure
- Authenticated user response schema
- Profile update payload for /users/me
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, StringConstraints

from app.core.validators import password_validator
from app.database.enums import UserRole


# --------------------------------------------------
# Custom Types
# --------------------------------------------------

PasswordStr = Annotated[str, AfterValidator(password_validator)]
NameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


# --------------------------------------------------
# AUTH REQUEST SCHEMAS
# --------------------------------------------------

class SigninRequest(BaseModel):
    """
    Request schema for signing in with email and password.
    """
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, max_length=128, description="Account password")


class SignupRequest(BaseModel):
    """
    Request schema for new user registration.
    """
    first_name: NameStr = Field(..., description="User's first name")
    last_name: NameStr = Field(..., description="User's last name")
    email: EmailStr = Field(..., description="Email address for new account")
    password: PasswordStr = Field(
        ...,
        description="8-128 characters; must include uppercase, lowercase, digit, special character, and only ASCII characters."
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class UpdateProfileRequest(BaseModel):
    """
    Partial update of the current user's account.
    """
    name: NameStr | None = Field(None, description="New display name")
    email: EmailStr | None = Field(None, description="New email address")


# --------------------------------------------------
# SESSION TOKEN SCHEMAS
# --------------------------------------------------

class TokenPayload(BaseModel):
    """
    Decoded session token structure.
    """
    sub: UUID = Field(..., description="Subject (user ID)")
    role: UserRole = Field(..., description="User role encoded in the token")
    exp: int = Field(..., description="Expiration timestamp of the token")
    jti: str = Field(..., description="JWT ID (used for token blacklist)")


# --------------------------------------------------
# AUTH RESPONSE SCHEMAS
# --------------------------------------------------

class AuthUserResponse(BaseModel):
    """
    Response schema representing authenticated user data.
    """
    id: UUID = Field(..., description="Unique identifier for the user")
    name: str | None = Field(None, description="Display name")
    email: EmailStr = Field(..., description="User's email address")
    role: UserRole = Field(..., description="User's role in the system")
    created_at: datetime = Field(..., description="Timestamp when the user was created")
    updated_at: datetime = Field(..., description="Timestamp when the user was last updated")

    model_config = ConfigDict(from_attributes=True)


class AuthSuccessResponse(BaseModel):
    """
    Response body after a successful sign-up or sign-in.
    The session token itself travels in the HttpOnly cookie.
    """
    message: str = Field(..., description="Outcome message")
    user: AuthUserResponse = Field(..., description="Details of the authenticated user")


class SessionResult(BaseModel):
    """
    Internal result of sign-up / sign-in: the response body plus the token to set as cookie.
    """
    token: str
    response: AuthSuccessResponse
