"""Pydantic schemas for authentication endpoints"""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from schemas.common import ApiModel
from .password import validate_password_strength


class RegisterRequest(ApiModel):
    """Request schema for self-service registration.

    accountType "company" or "guide" additionally files an organizer
    application that a platform admin must approve.
    """
    email: EmailStr
    password: str = Field(..., max_length=128)
    display_name: str = Field(..., min_length=2, max_length=80)
    account_type: Literal["visitor", "company", "guide"] = "visitor"
    organization_name: Optional[str] = Field(None, min_length=2, max_length=120)

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        valid, message = validate_password_strength(value)
        if not valid:
            raise ValueError(message)
        return value

    @field_validator("email")
    @classmethod
    def normalise_email(cls, value: str) -> str:
        return value.lower()


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, value: str) -> str:
        return value.lower()


class RefreshRequest(ApiModel):
    refresh_token: str = Field(..., min_length=20)


class VerifyEmailRequest(ApiModel):
    token: str = Field(..., min_length=20)


class ForgotPasswordRequest(ApiModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalise_email(cls, value: str) -> str:
        return value.lower()


class ResetPasswordRequest(ApiModel):
    token: str = Field(..., min_length=20)
    password: str = Field(..., min_length=8, max_length=128)


class SessionUser(ApiModel):
    id: UUID
    email: str
    role: str


class TokenPair(ApiModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class SessionResponse(ApiModel):
    user: SessionUser
    tokens: TokenPair


class RegisterResponse(SessionResponse):
    requires_email_verification: bool = True
    verification_token: Optional[str] = Field(
        None, description="Only returned outside production, where no mail is sent"
    )


class LoginResponse(SessionResponse):
    email_verified: bool


class ForgotPasswordResponse(ApiModel):
    message: str
    reset_token: Optional[str] = Field(
        None, description="Only returned outside production, where no mail is sent"
    )


class MeResponse(ApiModel):
    """Current user information (excludes password_hash)."""
    id: UUID
    email: str
    role: str
    status: str
    display_name: str
    email_verified: bool
    email_verified_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    created_at: datetime
